"""
Context binding: which company the intake form is working for.

One ContextBinding is owned by the application (or a test) and injected into
every controller that needs it. Each bind to a different company bumps a
generation counter; loads and submissions capture a ContextToken when they
start and are only applied while that token is still current.
"""
import logging
from typing import Callable, NamedTuple, Optional

logger = logging.getLogger(__name__)

ContextListener = Callable[[Optional[str]], None]


class ContextToken(NamedTuple):
    context_id: Optional[str]
    generation: int


class ContextBinding:
    def __init__(self, context_id: Optional[str] = None):
        self._context_id = context_id
        self._generation = 0
        self._listeners: list[ContextListener] = []

    @property
    def current(self) -> Optional[str]:
        return self._context_id

    @property
    def is_bound(self) -> bool:
        return self._context_id is not None

    def token(self) -> ContextToken:
        return ContextToken(self._context_id, self._generation)

    def is_current(self, token: ContextToken) -> bool:
        return token == self.token()

    def bind(self, context_id: Optional[str]) -> bool:
        """
        Switch to context_id. Returns False (and notifies nobody) when it is
        already the active context.
        """
        if context_id == self._context_id:
            return False
        logger.info("Context changed: %s -> %s", self._context_id, context_id)
        self._context_id = context_id
        self._generation += 1
        for listener in list(self._listeners):
            listener(context_id)
        return True

    def clear(self) -> bool:
        """Unbind (logout / teardown)."""
        return self.bind(None)

    def subscribe(self, listener: ContextListener) -> Callable[[], None]:
        """Register listener for context changes; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
