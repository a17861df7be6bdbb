"""Frame schedulers: how the engine asks for its next step.

The engine never loops on its own. After each step it requests one frame
from a scheduler and returns control to the event loop that owns it.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Protocol


class FrameScheduler(Protocol):
    def request_frame(self, callback: Callable[[], None]) -> Any:
        """Arrange for ``callback`` to run once on the next frame; return a cancel handle."""
        ...

    def cancel(self, handle: Any) -> None:
        ...


class AsyncioFrameScheduler:
    """Schedules frames on an asyncio loop with ``call_later``."""

    def __init__(self, interval_ms: int = 16, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._interval = interval_ms / 1000
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def request_frame(self, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(self._interval, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


class MatplotlibFrameScheduler:
    """Schedules frames with single-shot timers on a Matplotlib canvas."""

    def __init__(self, canvas: Any, interval_ms: int = 16) -> None:
        self._canvas = canvas
        self._interval = interval_ms

    def request_frame(self, callback: Callable[[], None]) -> Any:
        timer = self._canvas.new_timer(interval=self._interval)
        timer.single_shot = True
        timer.add_callback(callback)
        timer.start()
        return timer

    def cancel(self, handle: Any) -> None:
        handle.stop()
