from __future__ import annotations

from typing import Mapping, Optional

from pydantic import BaseModel

from distributor import clock, liquidity
from distributor.models import (
    BigNumber,
    ByteAddress,
    Countdown,
    EpochInfo,
    FixedPointAmount,
    RewardScheduleParams,
    Token,
)
from distributor.schedule import RewardSchedule, total_rewards

FULLY_DISTRIBUTED = "All ZWAP rewards distributed"
NO_SCHEDULE = "No reward schedule published"


def epoch_status(epoch_info: Optional[EpochInfo]) -> str:
    if epoch_info is None:
        return NO_SCHEDULE
    if epoch_info.current >= epoch_info.max_epoch:
        return FULLY_DISTRIBUTED
    return f"until next epoch (#{epoch_info.current + 1})"


class Overview(BaseModel):
    """
    Figures for the pools overview banner.
    `countdown` is None both before a schedule exists and after it has finished,
    `status` says which.
    """

    total_liquidity: FixedPointAmount
    liquidity_change_percent: FixedPointAmount
    total_rewards: FixedPointAmount
    status: str
    countdown: Optional[Countdown] = None
    max_epoch: Optional[int] = None

    def display(self) -> dict[str, str]:
        countdown = self.countdown.display() if self.countdown else {}
        return {
            "total_value_locked": f"${self.total_liquidity.to_format(2)}",
            "liquidity_change": f"{self.liquidity_change_percent.to_format(2)}%",
            "total_rewards": self.total_rewards.to_format(0),
            "status": self.status,
            **{k: countdown.get(k, "-") for k in ("days", "hours", "minutes", "seconds")},
        }


def build_overview(
    epoch_info: Optional[EpochInfo],
    params: RewardScheduleParams,
    tokens: list[Token],
    prices: Mapping[ByteAddress, str],
    liquidity_change_24h: Mapping[ByteAddress, BigNumber],
    now: Optional[int] = None,
    values: Optional[Mapping[ByteAddress, str]] = None,
) -> Overview:
    summary = liquidity.aggregate(tokens, prices, liquidity_change_24h, values)

    countdown = None
    if epoch_info is not None:
        schedule = RewardSchedule.from_epoch_info(epoch_info, params)
        if not schedule.is_fully_distributed(epoch_info.current):
            countdown = clock.tick(epoch_info, now)

    return Overview(
        total_liquidity=summary.total_liquidity,
        liquidity_change_percent=summary.change_percent,
        total_rewards=total_rewards(epoch_info, params),
        status=epoch_status(epoch_info),
        countdown=countdown,
        max_epoch=epoch_info.max_epoch if epoch_info else None,
    )
