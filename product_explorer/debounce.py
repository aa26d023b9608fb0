"""Debounced text input.

Raw edits are buffered; the consumer only sees a value once typing has paused
for `quiet_period` seconds. Built on a single restartable loop.call_later
handle, so at most one pending commit exists at any time.
"""

import asyncio
import logging
from typing import Callable, Optional

from .config import DEBOUNCE_SECONDS

logger = logging.getLogger(__name__)


class DebouncedInput:
    def __init__(
        self,
        on_commit: Callable[[str], None],
        quiet_period: float = DEBOUNCE_SECONDS,
        initial: str = "",
    ) -> None:
        self._on_commit = on_commit
        self.quiet_period = quiet_period
        self._buffer = initial
        self._committed = initial
        self._timer: Optional[asyncio.TimerHandle] = None
        self._closed = False

    @property
    def value(self) -> str:
        """Current buffered text, committed or not."""
        return self._buffer

    @property
    def committed(self) -> str:
        return self._committed

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def edit(self, text: str) -> None:
        """Record a raw edit and restart the quiet period."""
        if self._closed:
            return
        self._buffer = text
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.quiet_period, self._fire)

    def reset(self, value: str) -> None:
        """Adopt a value set from outside (e.g. a sibling control cleared the search).

        Drops any pending edit and never notifies the consumer.
        """
        self._cancel_timer()
        self._buffer = value
        self._committed = value

    def clear(self) -> None:
        """Commit an empty string right away, skipping the quiet period."""
        if self._closed or not self._buffer:
            return
        self._cancel_timer()
        self._buffer = ""
        self._commit("")

    def close(self) -> None:
        self._closed = True
        self._cancel_timer()

    def _fire(self) -> None:
        self._timer = None
        self._commit(self._buffer)

    def _commit(self, value: str) -> None:
        if value == self._committed:
            logger.debug("Debounced value %r unchanged, not committing", value)
            return
        self._committed = value
        self._on_commit(value)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
