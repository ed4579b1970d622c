"""
Message sink used to announce outcomes to the user.

Announcing is fire-and-forget: messages are logged and queued until the
caller drains them (the HTTP layer exposes them under /session/messages).
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, List

logger = logging.getLogger(__name__)

Announce = Callable[[str], None]


class MessageBoard:
    def __init__(self, maxlen: int = 50) -> None:
        self._messages: Deque[str] = deque(maxlen=maxlen)

    def announce(self, message: str) -> None:
        logger.info("announce: %s", message)
        self._messages.append(message)

    def drain(self) -> List[str]:
        items = list(self._messages)
        self._messages.clear()
        return items

    def __len__(self) -> int:
        return len(self._messages)
