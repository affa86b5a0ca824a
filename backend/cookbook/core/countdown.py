"""
Single countdown timer: state machine plus a per-timer asyncio tick task.
"""

import asyncio
import inspect
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from ..models.timer import TimerSnapshot, TimerState

log = logging.getLogger(__name__)


class TimerCallback:
    """
    Receiver for countdown events. Every hook is a no-op by default, so
    subclasses override only what they need. Hooks may be plain or async
    functions; they run on the task driving the countdown.
    """

    def on_tick(self, timer_id: int, remaining_seconds: int, total_seconds: int) -> Any:
        pass

    def on_timer_completed(self, timer_id: int, name: str) -> Any:
        pass

    def on_state_changed(self, timer_id: int, old_state: TimerState, new_state: TimerState) -> Any:
        pass

    def on_timer_error(self, timer_id: int, error: str) -> Any:
        pass


class CountdownTimer:
    def __init__(
        self,
        timer_id: int,
        seconds: int,
        name: Optional[str] = None,
        callback: Optional[TimerCallback] = None,
        tick_interval: float = 1.0,
    ):
        self._timer_id = timer_id
        self._name = name if name is not None else f"Timer {timer_id}"
        self._total_seconds = seconds
        self.remaining_seconds = seconds
        self.state = TimerState.STOPPED
        self.callback = callback
        self.tick_interval = tick_interval

        self._lock = asyncio.Lock()
        self._owner: Optional[asyncio.Task] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def timer_id(self) -> int:
        return self._timer_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def total_seconds(self) -> int:
        return self._total_seconds

    @property
    def is_running(self) -> bool:
        return self.state is TimerState.RUNNING

    @property
    def is_paused(self) -> bool:
        return self.state is TimerState.PAUSED

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            id=self._timer_id,
            name=self._name,
            total_seconds=self._total_seconds,
            remaining_seconds=self.remaining_seconds,
            state=self.state,
        )

    # --- Transitions ---

    async def start(self) -> bool:
        """Start a stopped timer, or resume a paused one."""
        async with self._guard():
            if self.state is TimerState.RUNNING:
                log.warning("Timer %d is already running", self._timer_id)
                return False
            if self.state is TimerState.COMPLETED:
                log.warning("Timer %d has already completed", self._timer_id)
                return False
            if self.state is TimerState.ERROR:
                log.warning("Timer %d is in error state, cannot start", self._timer_id)
                return False
            await self._begin()
            return True

    async def resume(self) -> bool:
        async with self._guard():
            if self.state is not TimerState.PAUSED:
                log.warning("Timer %d is not paused, cannot resume", self._timer_id)
                return False
            await self._begin()
            return True

    async def pause(self) -> bool:
        """Pause the countdown, keeping the remaining time."""
        async with self._guard():
            if self.state is not TimerState.RUNNING:
                log.warning("Timer %d is not running, cannot pause", self._timer_id)
                return False

            self.state = TimerState.PAUSED
            self._cancel_ticks()
            await self._notify("on_state_changed", self._timer_id, TimerState.RUNNING, TimerState.PAUSED)
            log.info("Timer %d paused with %d seconds remaining", self._timer_id, self.remaining_seconds)
            return True

    async def stop(self) -> bool:
        """Stop the countdown and reset the remaining time to the full duration."""
        async with self._guard():
            if self.state in (TimerState.STOPPED, TimerState.COMPLETED):
                return False

            old_state = self.state
            self.state = TimerState.STOPPED
            self._cancel_ticks()
            self.remaining_seconds = self._total_seconds
            await self._notify("on_state_changed", self._timer_id, old_state, TimerState.STOPPED)
            log.info("Timer %d stopped", self._timer_id)
            return True

    # --- Internal ---

    @asynccontextmanager
    async def _guard(self):
        # Hooks run while the tick task holds the lock and may call back in.
        current = asyncio.current_task()
        if current is not None and self._owner is current:
            yield
            return
        async with self._lock:
            self._owner = current
            try:
                yield
            finally:
                self._owner = None

    async def _begin(self) -> None:
        old_state = self.state
        self.state = TimerState.RUNNING
        self._task = asyncio.create_task(self._run(), name=f"countdown-{self._timer_id}")
        await self._notify("on_state_changed", self._timer_id, old_state, TimerState.RUNNING)
        log.info("Timer %d started with %d seconds", self._timer_id, self.remaining_seconds)

    def _cancel_ticks(self) -> None:
        task, self._task = self._task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    async def _run(self) -> None:
        me = asyncio.current_task()
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        advance = False
        while True:
            async with self._guard():
                if self._task is not me or self.state is not TimerState.RUNNING:
                    return
                await self._tick(advance)
                if self._task is not me:
                    return
            advance = True
            deadline += self.tick_interval
            await asyncio.sleep(max(0.0, deadline - loop.time()))

    async def _tick(self, advance: bool) -> None:
        try:
            # A second has elapsed since the previous report.
            if advance and self.remaining_seconds > 0:
                self.remaining_seconds -= 1

            await self._call("on_tick", self._timer_id, self.remaining_seconds, self._total_seconds)
            if self.state is not TimerState.RUNNING:
                return

            if self.remaining_seconds <= 0:
                await self._complete()
        except Exception as e:
            log.exception("Error in timer tick for timer %d", self._timer_id)
            await self._fail(f"Timer tick error: {e}")

    async def _complete(self) -> None:
        self.state = TimerState.COMPLETED
        self._cancel_ticks()
        log.info("Timer %d completed: %s", self._timer_id, self._name)
        await self._notify("on_state_changed", self._timer_id, TimerState.RUNNING, TimerState.COMPLETED)
        await self._call("on_timer_completed", self._timer_id, self._name)

    async def _fail(self, message: str) -> None:
        old_state = self.state
        self.state = TimerState.ERROR
        self._cancel_ticks()
        log.error("Timer %d error: %s", self._timer_id, message)
        await self._notify("on_timer_error", self._timer_id, message)
        await self._notify("on_state_changed", self._timer_id, old_state, TimerState.ERROR)

    async def _call(self, hook: str, *args) -> None:
        fn = getattr(self.callback, hook, None)
        if fn is None:
            return
        result = fn(*args)
        if inspect.isawaitable(result):
            await result

    async def _notify(self, hook: str, *args) -> None:
        """Deliver an advisory notification; a failing hook is only logged."""
        try:
            await self._call(hook, *args)
        except Exception:
            log.exception("Timer %d: %s hook failed", self._timer_id, hook)
