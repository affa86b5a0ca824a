"""
Fans timer notifications out to any number of subscribers (one queue each).
"""

import asyncio
import logging
from typing import Any, Dict, Set

from ..core.countdown import TimerCallback
from ..models.timer import TimerState, format_time

log = logging.getLogger(__name__)


class EventBroadcaster(TimerCallback):
    def __init__(self, max_queue: int = 100):
        self.max_queue = max_queue
        self.subscribers: Set[asyncio.Queue] = set()

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue)
        self.subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self.subscribers.discard(queue)

    def publish(self, event: Dict[str, Any]) -> None:
        for queue in list(self.subscribers):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                log.warning("Subscriber queue full, dropping %s event", event["type"])

    def on_tick(self, timer_id: int, remaining_seconds: int, total_seconds: int) -> None:
        self.publish({
            "type": "tick",
            "timer_id": timer_id,
            "remaining_seconds": remaining_seconds,
            "total_seconds": total_seconds,
            "display": format_time(remaining_seconds),
        })

    def on_timer_completed(self, timer_id: int, name: str) -> None:
        self.publish({"type": "completed", "timer_id": timer_id, "name": name})

    def on_state_changed(self, timer_id: int, old_state: TimerState, new_state: TimerState) -> None:
        self.publish({
            "type": "state_changed",
            "timer_id": timer_id,
            "old_state": old_state.value,
            "new_state": new_state.value,
        })

    def on_timer_error(self, timer_id: int, error: str) -> None:
        self.publish({"type": "error", "timer_id": timer_id, "message": error})
