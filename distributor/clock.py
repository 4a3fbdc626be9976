import time
from typing import Optional

from pydantic import BaseModel, field_validator

from distributor.errors import BadConfigException, ScheduleUnavailable
from distributor.models import Countdown, EpochInfo, EpochStatus, EpochWindow


class EpochClock(BaseModel):
    """
    Maps a point in time onto the epoch schedule.
    Holds no timers: callers poll `tick` at whatever cadence they render at
    and stop calling it to cancel.
    """

    genesis_time: int
    epoch_duration: int

    @field_validator("epoch_duration")
    @classmethod
    def ensure_positive_duration(cls, duration: int) -> int:
        if duration <= 0:
            raise BadConfigException(f"Epoch duration must be positive, passed {duration}")
        return duration

    @staticmethod
    def from_epoch_info(epoch_info: Optional[EpochInfo]) -> "EpochClock":
        if epoch_info is None:
            raise ScheduleUnavailable("No epoch information available")
        return EpochClock(
            genesis_time=epoch_info.raw.first_epoch_start,
            epoch_duration=epoch_info.raw.epoch_period,
        )

    def epoch_index(self, now: int) -> int:
        if now < self.genesis_time:
            return 0
        return (now - self.genesis_time) // self.epoch_duration

    def window(self, index: int) -> EpochWindow:
        start_time = self.genesis_time + index * self.epoch_duration
        return EpochWindow(index, start_time, start_time + self.epoch_duration)

    def next_boundary(self, now: int) -> int:
        return self.window(self.epoch_index(now)).end_time

    def time_remaining(self, now: int) -> int:
        return max(0, self.next_boundary(now) - now)

    def tick(self, now: Optional[int] = None) -> EpochStatus:
        """Recompute the current epoch and the countdown to its end"""
        if now is None:
            now = int(time.time())
        remaining = self.time_remaining(now)
        return EpochStatus(
            epoch=self.window(self.epoch_index(now)),
            time_remaining=remaining,
            countdown=Countdown.from_seconds(remaining),
        )


def countdown_to(next_epoch: int, now: int) -> Countdown:
    return Countdown.from_seconds(next_epoch - now)


def tick(epoch_info: Optional[EpochInfo], now: Optional[int] = None) -> Countdown:
    """
    Countdown to the boundary published by the epoch info provider.
    Raises `ScheduleUnavailable` when nothing has been published, so that
    "no schedule" can never be mistaken for a countdown that reached zero.
    """
    if epoch_info is None:
        raise ScheduleUnavailable("No epoch information available")
    if now is None:
        now = int(time.time())
    return countdown_to(epoch_info.next_epoch, now)
