import pytest
from decimal import Decimal

from distributor.errors import BadConfigException
from distributor.models import ZERO, EpochInfo, EpochInfoRaw, RewardScheduleParams
from distributor.schedule import RewardSchedule, total_rewards


@pytest.fixture
def schedule(params: RewardScheduleParams) -> RewardSchedule:
    return RewardSchedule(params)


def test_total_distributed_example(schedule: RewardSchedule):
    total = schedule.total_distributed(3)

    # 1_000_000 * 0.05 + 8500 + 20000 * 2
    assert total == 98500
    assert total.value == 98500 * 10**12
    assert total.decimals == 12


@pytest.mark.parametrize(
    "epoch, expected",
    [
        (0, 58500),
        (1, 58500),
        (2, 78500),
        (10, 238500),
    ],
)
def test_total_distributed_by_epoch(schedule: RewardSchedule, epoch, expected):
    assert schedule.total_distributed(epoch) == expected


def test_monotonic_until_max_epoch(schedule: RewardSchedule, params: RewardScheduleParams):
    totals = [schedule.total_distributed(e) for e in range(params.max_epoch + 1)]
    assert all(a <= b for a, b in zip(totals, totals[1:]))


def test_epoch_emission(schedule: RewardSchedule):
    assert schedule.epoch_emission(0) == 58500
    assert schedule.epoch_emission(1) == 0
    assert schedule.epoch_emission(3) == 20000


def test_extrapolates_past_max_epoch(schedule: RewardSchedule):
    assert schedule.is_fully_distributed(10)
    assert not schedule.is_fully_distributed(9)
    assert schedule.total_distributed(15) == 58500 + 20000 * 14


def test_freeze_at_max_epoch(params: RewardScheduleParams):
    frozen = RewardSchedule(params.model_copy(update={"freeze_at_max_epoch": True}))

    assert frozen.total_distributed(3) == 98500
    assert frozen.total_distributed(11) == 58500 + 20000 * 10
    assert frozen.total_distributed(15) == frozen.total_distributed(11)
    assert frozen.epoch_emission(15) == 0


def test_negative_epoch_is_zero(schedule: RewardSchedule):
    assert schedule.total_distributed(-1) == ZERO


def test_total_rewards_without_schedule(params: RewardScheduleParams):
    assert total_rewards(None, params) == ZERO


def test_total_rewards_uses_onchain_config(
    params: RewardScheduleParams, epoch_info_raw: EpochInfoRaw
):
    raw = epoch_info_raw.model_copy(update={"tokens_per_epoch": 6250, "total_epoch": 152})
    epoch_info = EpochInfo.from_raw(raw)

    assert total_rewards(epoch_info, params) == 58500 + 6250 * 2

    schedule = RewardSchedule.from_epoch_info(epoch_info, params)
    assert schedule.params.max_epoch == 152
    assert schedule.params.tokens_per_epoch == 6250
    # the passed params are left untouched
    assert params.tokens_per_epoch == 20000


@pytest.mark.parametrize("factor", ["0", "-0.1", "1.01"])
def test_validate_airdrop_factor(params: RewardScheduleParams, factor):
    dct = params.model_dump()

    with pytest.raises(BadConfigException, match="Airdrop factor out of range"):
        dct["retroactive_airdrop_factor"] = Decimal(factor)
        RewardScheduleParams(**dct)


def test_validate_quantities(params: RewardScheduleParams):
    dct = params.model_dump()

    with pytest.raises(BadConfigException, match="Token quantity must be positive"):
        dct["tokens_per_epoch"] = Decimal(-1)
        RewardScheduleParams(**dct)
