from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from distributor.models import (
    ZERO,
    EpochInfo,
    FixedPointAmount,
    RewardScheduleParams,
)


@dataclass
class RewardSchedule:
    """
    Two stage emission schedule:
        - Stage 1: a one-time retroactive airdrop, available from epoch 0
        - Stage 2: linear mining rewards, `tokens_per_epoch` for every completed mining epoch

    Amounts are computed in 12 decimal base units and returned as `FixedPointAmount`,
    so `total_distributed(3)` compares equal to the display figure, eg: 98500.
    """

    params: RewardScheduleParams

    @staticmethod
    def from_epoch_info(
        epoch_info: EpochInfo, params: RewardScheduleParams
    ) -> RewardSchedule:
        """Take the emission rate and end of the schedule from the on-chain epoch config"""
        return RewardSchedule(
            params.model_copy(
                update={
                    "tokens_per_epoch": Decimal(epoch_info.raw.tokens_per_epoch),
                    "max_epoch": epoch_info.max_epoch,
                }
            )
        )

    @property
    def airdrop(self) -> FixedPointAmount:
        total_supply = self.params.units(self.params.total_supply)
        retroactive = total_supply.scale_by(self.params.retroactive_airdrop_factor)
        return retroactive + self.params.units(self.params.fixed_airdrop_bonus)

    def mining_epochs(self, epoch_index: int) -> int:
        """
        Epoch 1 is the first epoch with a full epoch of mining behind it.
        Past the end of the schedule the count keeps growing unless `freeze_at_max_epoch` is set.
        """
        completed = max(0, epoch_index - 1)
        if self.params.freeze_at_max_epoch:
            return min(completed, self.params.max_epoch)
        return completed

    def mining(self, epoch_index: int) -> FixedPointAmount:
        per_epoch = self.params.units(self.params.tokens_per_epoch)
        return per_epoch.scale_by(self.mining_epochs(epoch_index))

    def total_distributed(self, epoch_index: int) -> FixedPointAmount:
        if epoch_index < 0:
            return ZERO
        return self.airdrop + self.mining(epoch_index)

    def epoch_emission(self, epoch_index: int) -> FixedPointAmount:
        """Rewards added by `epoch_index` alone"""
        if epoch_index <= 0:
            return self.total_distributed(epoch_index)
        return self.total_distributed(epoch_index) - self.total_distributed(
            epoch_index - 1
        )

    def is_fully_distributed(self, epoch_index: int) -> bool:
        return epoch_index >= self.params.max_epoch


def total_rewards(
    epoch_info: Optional[EpochInfo], params: RewardScheduleParams
) -> FixedPointAmount:
    """Total rewards emitted by the current epoch, zero while no schedule is published"""
    if epoch_info is None:
        return ZERO
    schedule = RewardSchedule.from_epoch_info(epoch_info, params)
    return schedule.total_distributed(epoch_info.current)
