"""
Unit tests for ReferenceDataLoader.
"""
import asyncio

import pytest

from conftest import FakeReferenceService, settle
from intake.context import ContextBinding
from intake.loader import ReferenceDataLoader
from intake.services import ServiceError

FALLBACK = "Unable to load warehouses. Please try again."


def _loader(service, binding, changes=None):
    return ReferenceDataLoader(
        "warehouses",
        service.list_warehouses,
        is_current=binding.is_current,
        fallback_message=FALLBACK,
        on_change=(lambda l: changes.append(l.state.status)) if changes is not None else None,
    )


@pytest.mark.unit
class TestReferenceDataLoader:
    """Tests for ReferenceDataLoader class."""

    def test_starts_idle(self, reference_service):
        loader = _loader(reference_service, ContextBinding("c1"))
        assert loader.state.status == "idle"
        assert loader.data == []

    def test_successful_load(self, reference_service, sample_warehouses):
        binding = ContextBinding("c1")
        changes = []
        loader = _loader(reference_service, binding, changes)

        async def scenario():
            await loader.load(binding.token())

        asyncio.run(scenario())

        assert loader.state.status == "ready"
        assert loader.data == sample_warehouses
        assert loader.state.error_message is None
        assert changes == ["loading", "ready"]

    def test_loading_is_set_before_fetch_resolves(self, reference_service):
        binding = ContextBinding("c1")
        loader = _loader(reference_service, binding)

        async def scenario():
            gate = reference_service.hold("warehouses", "c1")
            task = asyncio.create_task(loader.load(binding.token()))
            assert loader.state.status == "loading"
            gate.set()
            await task

        asyncio.run(scenario())
        assert loader.state.status == "ready"

    def test_failure_uses_service_message(self):
        service = FakeReferenceService(warehouses={"c1": ServiceError("Company is archived")})
        binding = ContextBinding("c1")
        loader = _loader(service, binding)

        asyncio.run(loader.load(binding.token()))

        assert loader.state.status == "error"
        assert loader.state.error_message == "Company is archived"
        assert loader.data == []
        assert isinstance(loader.state.cause, ServiceError)

    def test_failure_without_message_uses_fallback(self):
        service = FakeReferenceService(warehouses={"c1": ServiceError("")})
        binding = ContextBinding("c1")
        loader = _loader(service, binding)

        asyncio.run(loader.load(binding.token()))

        assert loader.state.error_message == FALLBACK
        assert loader.state.cause is not None

    def test_unexpected_exception_is_reported(self):
        service = FakeReferenceService(warehouses={"c1": RuntimeError("connection reset")})
        binding = ContextBinding("c1")
        loader = _loader(service, binding)

        asyncio.run(loader.load(binding.token()))

        assert loader.state.status == "error"
        assert loader.state.error_message == "connection reset"

    def test_error_clears_previous_data(self, sample_warehouses):
        service = FakeReferenceService(warehouses={"c1": sample_warehouses})
        binding = ContextBinding("c1")
        loader = _loader(service, binding)

        async def scenario():
            await loader.load(binding.token())
            service.warehouses["c1"] = ServiceError("boom")
            await loader.load(binding.token())

        asyncio.run(scenario())

        assert loader.state.status == "error"
        assert loader.data == []

    def test_reload_clears_prior_error(self, sample_warehouses):
        service = FakeReferenceService(warehouses={"c1": ServiceError("boom")})
        binding = ContextBinding("c1")
        loader = _loader(service, binding)

        async def scenario():
            await loader.load(binding.token())
            service.warehouses["c1"] = sample_warehouses
            pending = loader.load(binding.token())
            assert loader.state.status == "loading"
            assert loader.state.error_message is None
            await pending

        asyncio.run(scenario())
        assert loader.data == sample_warehouses

    def test_result_for_superseded_context_is_discarded(self, reference_service):
        binding = ContextBinding("c1")
        loader = _loader(reference_service, binding)

        async def scenario():
            gate = reference_service.hold("warehouses", "c1")
            first = asyncio.create_task(loader.load(binding.token()))
            await settle()
            binding.bind("c2")
            await loader.load(binding.token())
            gate.set()
            await first

        asyncio.run(scenario())

        assert loader.state.status == "ready"
        assert [w.id for w in loader.data] == ["wh-9"]

    def test_failure_for_superseded_context_is_discarded(self, sample_warehouses):
        service = FakeReferenceService(
            warehouses={"c1": ServiceError("late failure"), "c2": sample_warehouses},
        )
        binding = ContextBinding("c1")
        loader = _loader(service, binding)

        async def scenario():
            gate = service.hold("warehouses", "c1")
            first = asyncio.create_task(loader.load(binding.token()))
            await settle()
            binding.bind("c2")
            await loader.load(binding.token())
            gate.set()
            await first

        asyncio.run(scenario())

        assert loader.state.status == "ready"
        assert loader.state.error_message is None

    def test_newer_load_in_same_context_wins(self, sample_warehouses):
        service = FakeReferenceService(warehouses={"c1": sample_warehouses})
        binding = ContextBinding("c1")
        loader = _loader(service, binding)

        async def scenario():
            gate = service.hold("warehouses", "c1")
            first = asyncio.create_task(loader.load(binding.token()))
            await settle()
            service.warehouses["c1"] = sample_warehouses[:1]
            await loader.load(binding.token())
            service.warehouses["c1"] = []
            gate.set()
            await first

        asyncio.run(scenario())
        assert [w.id for w in loader.data] == ["wh-1"]

    def test_reset_makes_in_flight_load_stale(self, reference_service):
        binding = ContextBinding("c1")
        loader = _loader(reference_service, binding)

        async def scenario():
            gate = reference_service.hold("warehouses", "c1")
            task = asyncio.create_task(loader.load(binding.token()))
            await settle()
            loader.reset()
            gate.set()
            await task

        asyncio.run(scenario())
        assert loader.state.status == "idle"
        assert loader.data == []

    def test_load_without_context_is_rejected(self, reference_service):
        binding = ContextBinding()
        loader = _loader(reference_service, binding)

        with pytest.raises(ValueError):
            loader.load(binding.token())
        assert loader.state.status == "idle"
