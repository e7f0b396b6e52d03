"""
Periodic asyncio timer that drives a countdown while it is pending.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from ..utils.logger import get_logger

logger = get_logger(__name__)


class Ticker:
    """Calls an async callback every ``interval`` seconds until stopped.

    ``stop()`` may be called from inside the callback; the loop then ends
    once the callback returns instead of cancelling itself mid-call.
    """
    
    def __init__(self, interval: float, callback: Callable[[], Awaitable[None]],
                 name: str = "ticker"):
        if interval <= 0:
            raise ValueError("Ticker interval must be positive")
        self._interval = interval
        self._callback = callback
        self._name = name
        self._task: Optional[asyncio.Task] = None
    
    @property
    def interval(self) -> float:
        return self._interval
    
    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
    
    def start(self) -> bool:
        """Start ticking. Returns False when already running or no loop is running."""
        if self.running:
            return False
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop, %s not started", self._name)
            return False
        self._task = loop.create_task(self._run(), name=self._name)
        return True
    
    def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()
    
    async def _run(self) -> None:
        task = asyncio.current_task()
        while self._task is task:
            await asyncio.sleep(self._interval)
            if self._task is not task:
                break
            try:
                await self._callback()
            except Exception:
                logger.exception("Error in %s callback", self._name)
