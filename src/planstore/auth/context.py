"""Current-user identity with synchronous change notification."""

from __future__ import annotations

import logging

from planstore.contracts.identity import IdentityObserver, SessionIdentity

logger = logging.getLogger(__name__)


class IdentityContext:
    """Holds the session identity and notifies observers on sign-in/sign-out.

    Created once per process and handed to every component that needs it.
    Observers are called in subscription order, synchronously, with the new
    identity. There is no unsubscribe; the observer set is fixed for the
    lifetime of the context and bounded by ``max_observers``.
    """

    def __init__(self, *, max_observers: int = 16) -> None:
        self._identity = SessionIdentity.anonymous()
        self._observers: list[IdentityObserver] = []
        self._max_observers = max_observers

    def current(self) -> SessionIdentity:
        return self._identity

    def get_user_id(self) -> str:
        return self._identity.user_id

    def is_authenticated(self) -> bool:
        return self._identity.authenticated

    def subscribe(self, observer: IdentityObserver) -> None:
        if len(self._observers) >= self._max_observers:
            raise ValueError(f"identity context accepts at most {self._max_observers} observers")
        self._observers.append(observer)

    def set_user(self, user_id: str) -> None:
        resolved = (user_id or "").strip()
        if not resolved:
            logger.error("Cannot set user: blank user id")
            return
        self._identity = SessionIdentity(user_id=resolved, authenticated=True)
        logger.info("User authenticated: %s", resolved)
        self._notify()

    def clear_user(self) -> None:
        self._identity = SessionIdentity.anonymous()
        logger.info("User signed out")
        self._notify()

    def _notify(self) -> None:
        identity = self._identity
        for observer in self._observers:
            observer(identity)
