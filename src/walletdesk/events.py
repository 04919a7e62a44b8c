"""Account-change event channel.

The wallet provider publishes every change of its account list here and
the session controller consumes them in order. An empty list means the
wallet disconnected.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountsChanged:
    """The wallet's account list changed."""

    accounts: tuple[str, ...] = field(default_factory=tuple)


class AccountChannel:
    """Single-consumer queue of account-change notifications."""

    def __init__(self, maxsize: int = 0):
        self._queue: asyncio.Queue[AccountsChanged] = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    async def publish(self, accounts) -> None:
        """Queue a notification carrying the new account list."""
        if self._closed:
            logger.debug("Dropping account notification on closed channel")
            return
        await self._queue.put(AccountsChanged(accounts=tuple(accounts)))

    def close(self) -> None:
        self._closed = True

    async def next(self) -> AccountsChanged:
        return await self._queue.get()

    async def __aiter__(self) -> AsyncIterator[AccountsChanged]:
        while not (self._closed and self._queue.empty()):
            yield await self.next()
