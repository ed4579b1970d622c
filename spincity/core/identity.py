"""
External identity-change notifications.

When the remote backend is active, the authentication provider reports who
is signed in (or that nobody is). IdentityChannel is the in-process source:
the identity webhook and the tests publish into it, the session
bootstrapper subscribes to it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    email: str
    display_name: str = ""


IdentityListener = Callable[[Optional[Identity]], Awaitable[None]]
Unsubscribe = Callable[[], None]


class IdentitySource(Protocol):
    @property
    def current(self) -> Optional[Identity]:
        ...

    def subscribe(self, listener: IdentityListener) -> Unsubscribe:
        ...


class IdentityChannel:
    """Fan-out of identity changes to async listeners, in subscription order."""

    def __init__(self) -> None:
        self._listeners: List[IdentityListener] = []
        self._last: Optional[Identity] = None

    @property
    def current(self) -> Optional[Identity]:
        return self._last

    def subscribe(self, listener: IdentityListener) -> Unsubscribe:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def publish(self, identity: Optional[Identity]) -> None:
        self._last = identity
        logger.info("identity changed: %s", identity.email if identity else "<signed out>")
        for listener in list(self._listeners):
            await listener(identity)
