"""
Asynchronous fetch-with-stale-suppression for one kind of reference data.

A loader owns exactly one LoadState. load() flips it to "loading" straight
away and hands back the fetch coroutine; when the fetch resolves, the result
is applied only if
  - the ContextToken captured at start is still current, and
  - no newer load() has been started on this loader since.
Anything else is a stale result and is dropped. The underlying request is
never aborted, just ignored.
"""
import logging
from typing import Awaitable, Callable, Coroutine, Generic, Optional, TypeVar

from models.state import LoadState
from .context import ContextToken
from .services import describe_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fetch = Callable[[str], Awaitable[list]]


class ReferenceDataLoader(Generic[T]):
    """
    Usage:
        loader = ReferenceDataLoader("warehouses", service.list_warehouses,
                                     is_current=binding.is_current,
                                     fallback_message="Unable to load warehouses.")
        await loader.load(binding.token())
    """

    def __init__(
        self,
        kind: str,
        fetch: Fetch,
        is_current: Callable[[ContextToken], bool],
        fallback_message: str,
        on_change: Optional[Callable[["ReferenceDataLoader[T]"], None]] = None,
    ):
        self.kind = kind
        self.fallback_message = fallback_message
        self._fetch = fetch
        self._is_current = is_current
        self._on_change = on_change
        self._seq = 0
        self.state: LoadState[T] = LoadState()

    @property
    def data(self) -> list[T]:
        return self.state.data

    def reset(self) -> None:
        """Back to idle with no data; any fetch still in flight becomes stale."""
        self._seq += 1
        self._set(LoadState())

    def load(self, token: ContextToken) -> Coroutine[None, None, None]:
        """
        Mark the loader as loading for token's context and return the fetch
        coroutine. The caller awaits it or schedules it as a task.
        """
        if token.context_id is None:
            raise ValueError(f"Cannot load {self.kind} without a context")
        self._seq += 1
        self._set(LoadState(status="loading", data=list(self.state.data)))
        return self._run(token, self._seq)

    def _is_stale(self, token: ContextToken, seq: int) -> bool:
        return seq != self._seq or not self._is_current(token)

    async def _run(self, token: ContextToken, seq: int) -> None:
        try:
            data = await self._fetch(token.context_id)
        except Exception as exc:
            if self._is_stale(token, seq):
                logger.debug("Discarding stale %s failure for context %s: %s",
                             self.kind, token.context_id, exc)
                return
            message = describe_error(exc, self.fallback_message)
            logger.warning("Failed to load %s for context %s: %s",
                           self.kind, token.context_id, message, exc_info=exc)
            self._set(LoadState(status="error", error_message=message, cause=exc))
            return

        if self._is_stale(token, seq):
            logger.debug("Discarding stale %s result for context %s", self.kind, token.context_id)
            return
        logger.info("Loaded %d %s for context %s", len(data), self.kind, token.context_id)
        self._set(LoadState(status="ready", data=list(data)))

    def _set(self, state: LoadState) -> None:
        self.state = state
        if self._on_change is not None:
            self._on_change(self)
