from __future__ import annotations

import datetime
from typing import NamedTuple

from pydantic import BaseModel, field_validator

from distributor.errors import BadConfigException

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400


class EpochWindow(NamedTuple):
    """A single epoch. Both timestamps are derived from genesis and the epoch duration."""

    index: int
    start_time: int
    end_time: int

    @property
    def start_date(self) -> datetime.datetime:
        return datetime.datetime.fromtimestamp(self.start_time, tz=datetime.timezone.utc)

    @property
    def end_date(self) -> datetime.datetime:
        return datetime.datetime.fromtimestamp(self.end_time, tz=datetime.timezone.utc)


class Countdown(NamedTuple):
    days: int
    hours: int
    minutes: int
    seconds: int

    @staticmethod
    def from_seconds(remaining: int) -> Countdown:
        """Split a number of seconds into whole days, hours, minutes and seconds"""
        remaining = max(0, remaining)
        return Countdown(
            days=remaining // SECONDS_PER_DAY,
            hours=(remaining % SECONDS_PER_DAY) // SECONDS_PER_HOUR,
            minutes=(remaining % SECONDS_PER_HOUR) // SECONDS_PER_MINUTE,
            seconds=remaining % SECONDS_PER_MINUTE,
        )

    @property
    def total_seconds(self) -> int:
        return (
            self.days * SECONDS_PER_DAY
            + self.hours * SECONDS_PER_HOUR
            + self.minutes * SECONDS_PER_MINUTE
            + self.seconds
        )

    def display(self) -> dict[str, str]:
        """Zero padded components, eg: {'days': '04', 'hours': '00', ...}"""
        return {k: f"{v:02d}" for k, v in self._asdict().items()}

    def __str__(self) -> str:
        d = self.display()
        return f"{d['days']}:{d['hours']}:{d['minutes']}:{d['seconds']}"


class EpochStatus(BaseModel):
    """Result of a single clock tick"""

    epoch: EpochWindow
    time_remaining: int
    countdown: Countdown


class EpochInfoRaw(BaseModel):
    """
    Epoch data as published by the distributor's stats API
    :param `epoch_period`: duration of an epoch in seconds
    :param `tokens_per_epoch`: mining rewards per epoch, in whole tokens
    :param `first_epoch_start`: unix timestamp of epoch 0
    :param `next_epoch_start`: unix timestamp of the next epoch boundary
    :param `total_epoch`: number of epochs in the schedule
    :param `current_epoch`: index of the running epoch
    """

    epoch_period: int
    tokens_per_epoch: int
    first_epoch_start: int
    next_epoch_start: int
    total_epoch: int
    current_epoch: int

    @field_validator("epoch_period")
    @classmethod
    def ensure_positive_period(cls, period: int) -> int:
        if period <= 0:
            raise BadConfigException(f"Epoch period must be positive, passed {period}")
        return period


class EpochInfo(BaseModel):
    """
    Epoch information used by the reward schedule and the countdown
    :param `current`: index of the running epoch
    :param `max_epoch`: last epoch index of the schedule (inclusive)
    :param `next_epoch`: unix timestamp at which the next epoch begins
    """

    current: int
    max_epoch: int
    next_epoch: int
    raw: EpochInfoRaw

    @staticmethod
    def from_raw(raw: EpochInfoRaw) -> EpochInfo:
        return EpochInfo(
            current=raw.current_epoch,
            max_epoch=raw.total_epoch,
            next_epoch=raw.next_epoch_start,
            raw=raw,
        )
