import itertools
import logging
import threading
from typing import Dict, List, Optional

from .config import get_settings
from .countdown import CountdownTimer, TimerCallback
from ..models.timer import TimerSnapshot, TimerState

log = logging.getLogger(__name__)


class TimerRegistry:
    """
    Owns every active countdown, keyed by a process-unique id.

    Calls that omit the id act on the default timer: the first timer started
    while no default exists. When the default is stopped the oldest remaining
    timer takes over.

    Mutating methods are coroutines and must run on the registry's event
    loop; queries are plain methods.
    """

    def __init__(self, tick_interval: Optional[float] = None):
        settings = get_settings()
        self.tick_interval = settings.timer_tick_interval if tick_interval is None else tick_interval
        self.warn_after_seconds = settings.timer_warn_after_seconds

        self.timers: Dict[int, CountdownTimer] = {}
        self.default_timer_id: Optional[int] = None
        self._ids = itertools.count(1)
        # never held across an await
        self._lock = threading.Lock()

    async def start_timer(
        self,
        seconds: int,
        name: Optional[str] = None,
        callback: Optional[TimerCallback] = None,
    ) -> int:
        """Create and start a timer. Returns its id, or -1 if it could not be started."""
        self._validate_seconds(seconds)

        timer_id, timer = None, None
        try:
            with self._lock:
                timer_id = next(self._ids)
                timer = CountdownTimer(timer_id, seconds, name, callback, self.tick_interval)
                self.timers[timer_id] = timer
                if self.default_timer_id is None:
                    self.default_timer_id = timer_id

            await timer.start()
        except Exception:
            log.exception("Failed to start timer")
            with self._lock:
                if timer is not None and self.timers.get(timer_id) is timer:
                    del self.timers[timer_id]
                if timer_id is not None and self.default_timer_id == timer_id:
                    self.default_timer_id = next(iter(self.timers), None)
            return -1

        log.info("Started new timer with ID %d for %d seconds", timer_id, seconds)
        return timer_id

    async def stop_timer(self, timer_id: Optional[int] = None) -> bool:
        timer = self._lookup(timer_id, "stop")
        if timer is None:
            return False

        try:
            await timer.stop()
        except Exception:
            log.exception("Failed to stop timer %d", timer.timer_id)
            return False

        with self._lock:
            if self.timers.pop(timer.timer_id, None) is None:
                # removed by a concurrent stop
                return False
            if self.default_timer_id == timer.timer_id:
                self.default_timer_id = next(iter(self.timers), None)
        return True

    async def pause_timer(self, timer_id: Optional[int] = None) -> bool:
        timer = self._lookup(timer_id, "pause")
        if timer is None:
            return False
        return await timer.pause()

    async def resume_timer(self, timer_id: Optional[int] = None) -> bool:
        timer = self._lookup(timer_id, "resume")
        if timer is None:
            return False
        return await timer.resume()

    async def stop_all_timers(self) -> int:
        with self._lock:
            timer_ids = list(self.timers)

        stopped = 0
        for timer_id in timer_ids:
            if await self.stop_timer(timer_id):
                stopped += 1

        with self._lock:
            # a timer started meanwhile may legitimately be the default now
            if self.default_timer_id not in self.timers:
                self.default_timer_id = None

        log.info("Stopped %d timers", stopped)
        return stopped

    # --- Queries ---

    def get_remaining_time(self, timer_id: Optional[int] = None) -> int:
        timer = self._get(timer_id)
        return timer.remaining_seconds if timer is not None else -1

    def is_running(self, timer_id: Optional[int] = None) -> bool:
        timer = self._get(timer_id)
        return timer is not None and timer.is_running

    def get_timer_state(self, timer_id: int) -> Optional[TimerState]:
        timer = self._get(timer_id)
        return timer.state if timer is not None else None

    def get_snapshot(self, timer_id: int) -> Optional[TimerSnapshot]:
        timer = self._get(timer_id)
        return timer.snapshot() if timer is not None else None

    def get_all_timers(self) -> List[TimerSnapshot]:
        with self._lock:
            return [timer.snapshot() for timer in self.timers.values()]

    def get_active_timer_count(self) -> int:
        with self._lock:
            return len(self.timers)

    # --- Helpers ---

    def _get(self, timer_id: Optional[int]) -> Optional[CountdownTimer]:
        with self._lock:
            if timer_id is None:
                timer_id = self.default_timer_id
            if timer_id is None:
                return None
            return self.timers.get(timer_id)

    def _lookup(self, timer_id: Optional[int], action: str) -> Optional[CountdownTimer]:
        with self._lock:
            if timer_id is None:
                timer_id = self.default_timer_id
                if timer_id is None:
                    log.warning("No default timer to %s", action)
                    return None
            timer = self.timers.get(timer_id)

        if timer is None:
            log.warning("Timer with ID %s not found", timer_id)
        return timer

    def _validate_seconds(self, seconds: int) -> None:
        if isinstance(seconds, bool) or not isinstance(seconds, int):
            raise TypeError(f"Timer duration must be an integer number of seconds, got {seconds!r}")
        if seconds <= 0:
            raise ValueError("Timer duration must be greater than 0 seconds")
        if seconds > self.warn_after_seconds:
            log.warning("Timer duration is very long: %d seconds", seconds)
