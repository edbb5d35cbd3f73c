"""
Pytest configuration and shared fixtures for the intake test suite.
"""
import asyncio
import os
import shutil
import tempfile
from pathlib import Path
from typing import Generator, Optional

import pytest

from models.purchase_order import DraftOrderPayload
from models.supplier import Supplier
from models.warehouse import Warehouse

PROJECT_ROOT = Path(__file__).parent.parent
os.chdir(PROJECT_ROOT)


class FakeReferenceService:
    """
    In-memory ReferenceDataService.

    warehouses / suppliers map context id -> list, or -> exception to raise.
    hold() returns an asyncio.Event the matching fetch waits on, so tests can
    decide exactly when each fetch resolves.
    """

    def __init__(self, warehouses: Optional[dict] = None, suppliers: Optional[dict] = None):
        self.warehouses = warehouses or {}
        self.suppliers = suppliers or {}
        self.calls: list[tuple[str, str]] = []
        self._gates: dict[tuple[str, str], asyncio.Event] = {}

    def hold(self, kind: str, context_id: str) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[(kind, context_id)] = gate
        return gate

    async def list_warehouses(self, context_id: str) -> list[Warehouse]:
        return await self._fetch("warehouses", context_id)

    async def list_suppliers(self, context_id: str) -> list[Supplier]:
        return await self._fetch("suppliers", context_id)

    async def _fetch(self, kind: str, context_id: str) -> list:
        self.calls.append((kind, context_id))
        gate = self._gates.pop((kind, context_id), None)
        if gate is not None:
            await gate.wait()
        result = getattr(self, kind).get(context_id, [])
        if isinstance(result, BaseException):
            raise result
        return list(result)


class FakeOrderService:
    """Records every payload; optionally waits on a gate or raises."""

    def __init__(self, order_id: str = "po-1", error: Optional[BaseException] = None):
        self.order_id = order_id
        self.error = error
        self.payloads: list[DraftOrderPayload] = []
        self.gate: Optional[asyncio.Event] = None

    def hold(self) -> asyncio.Event:
        self.gate = asyncio.Event()
        return self.gate

    async def create_purchase_order(self, payload: DraftOrderPayload) -> str:
        self.payloads.append(payload)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.order_id


async def settle() -> None:
    """Let every ready task on the loop run a few steps."""
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for test files."""
    tmp_path = tempfile.mkdtemp(prefix="intake_test_")
    yield Path(tmp_path)
    shutil.rmtree(tmp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path, monkeypatch) -> "Config":
    """Provide a configuration isolated from the developer's environment."""
    for var in ("INVENTORY_API_URL", "INVENTORY_API_TOKEN", "INVENTORY_API_TIMEOUT",
                "DEFAULT_ORDER_STATUS", "DATA_DIR"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("CONFIG_DIR", str(temp_dir / "config"))

    from config import Config

    config = Config()
    config.api_base_url = "http://inventory.test/api"
    config.warehouses_csv = temp_dir / "data" / "warehouses.csv"
    config.suppliers_csv = temp_dir / "data" / "suppliers.csv"
    config.suppliers_csv.parent.mkdir(parents=True, exist_ok=True)
    return config


@pytest.fixture
def acme() -> Supplier:
    return Supplier(id="s1", name="Acme")


@pytest.fixture
def main_warehouse() -> Warehouse:
    return Warehouse(id="w1", name="Main")


@pytest.fixture
def sample_suppliers() -> list[Supplier]:
    """A small directory where each search field is distinctive."""
    return [
        Supplier(id="sup-1", name="Nordic Packaging AB", contact_name="Sofia Karlsson",
                 email="sofia@nordicpackaging.se"),
        Supplier(id="sup-2", name="Global Components Ltd", contact_name="Liam O'Connor",
                 email="liam@globalcomponents.com"),
        Supplier(id="sup-3", name="EcoChem Supplies", email="orders@greenlab.eu"),
    ]


@pytest.fixture
def sample_warehouses() -> list[Warehouse]:
    return [
        Warehouse(id="wh-1", code="MAIN", name="Main Warehouse"),
        Warehouse(id="wh-2", code="OVF", name="Overflow Storage"),
    ]


@pytest.fixture
def reference_service(sample_warehouses, sample_suppliers) -> FakeReferenceService:
    return FakeReferenceService(
        warehouses={"c1": sample_warehouses, "c2": [Warehouse(id="wh-9", name="Second Site")]},
        suppliers={"c1": sample_suppliers, "c2": [Supplier(id="sup-9", name="Only Supplier")]},
    )


@pytest.fixture
def order_service() -> FakeOrderService:
    return FakeOrderService()


@pytest.fixture
def sample_reference_csvs(test_config) -> "Config":
    """Write warehouse and supplier CSVs for two companies."""
    test_config.warehouses_csv.write_text(
        "id,company,code,name\n"
        "wh-1,acme,MAIN,Main Warehouse\n"
        "wh-2,acme,OVF,Overflow Storage\n"
        "wh-9,globex,GBX,Globex Central\n",
        encoding="utf-8",
    )
    test_config.suppliers_csv.write_text(
        "id,company,name,contact_name,email,phone,status\n"
        "sup-1001,acme,Nordic Packaging AB,Sofia Karlsson,sofia@nordicpackaging.se,,active\n"
        "sup-1002,acme,Global Components Ltd,Liam O'Connor,liam@globalcomponents.com,,active\n"
        "sup-2001,globex,Globex Raw Materials,Hank Scorpio,hank@globexraw.com,,trial\n",
        encoding="utf-8",
    )
    return test_config


# Configure pytest markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
