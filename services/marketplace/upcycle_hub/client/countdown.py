import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


def format_wait(seconds: int) -> str:
    """Countdown text, e.g. "Please wait 1m 5s before trying again" """
    minutes, remaining = divmod(max(seconds, 0), 60)
    prefix = f"{minutes}m " if minutes > 0 else ""
    return f"Please wait {prefix}{remaining}s before trying again"


class CountdownTimer:
    """One-second ticking countdown driven by the running event loop

    on_tick receives every new value; on_complete runs exactly once when the
    value reaches zero. cancel() stops the timer without completing it.
    """

    def __init__(
        self,
        initial_seconds: int,
        on_tick: Optional[Callable[[int], None]] = None,
        on_complete: Optional[Callable[[], None]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.seconds = max(int(initial_seconds), 0)
        self.on_tick = on_tick
        self.on_complete = on_complete
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self._completed = False
        self._cancelled = False

    @property
    def text(self) -> str:
        return format_wait(self.seconds)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def completed(self) -> bool:
        return self._completed

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    async def run(self) -> None:
        if self.seconds <= 0:
            self._complete()
            return

        while not self._cancelled:
            await self._sleep(1)
            if self._cancelled:
                return
            self.seconds -= 1
            if self.on_tick:
                self.on_tick(self.seconds)
            if self.seconds <= 0:
                self._complete()
                return

    def cancel(self) -> None:
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait(self) -> None:
        """Wait for the timer task to finish, treating cancellation as finished"""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            if not self._cancelled:
                raise

    def _complete(self) -> None:
        if self._completed:
            return
        self._completed = True
        logger.debug("Countdown finished")
        if self.on_complete:
            self.on_complete()
