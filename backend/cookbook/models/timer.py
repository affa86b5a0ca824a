from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, computed_field, conint


class TimerState(str, Enum):
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"
    COMPLETED = "completed"
    ERROR = "error"


def format_time(seconds: int) -> str:
    """Render seconds as MM:SS, or HH:MM:SS once there is at least an hour."""
    if seconds < 0:
        return "00:00"

    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


class TimerSnapshot(BaseModel):
    """Point-in-time copy of a timer's observable fields."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    total_seconds: conint(gt=0)
    remaining_seconds: conint(ge=0)
    state: TimerState

    @computed_field
    @property
    def display(self) -> str:
        return format_time(self.remaining_seconds)
