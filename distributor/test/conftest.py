from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import pytest

from distributor.merkle import MerkleTree
from distributor.models import (
    ConnectedWallet,
    DistributionLeaf,
    EpochInfo,
    EpochInfoRaw,
    FixedPointAmount,
    Network,
    NetworkConfig,
    NetworkParams,
    RewardScheduleParams,
)

GENESIS = 1610964000
WEEK = 604800
DISTRIBUTOR = "0xc2d7b1e3a5d0e8f9b6a4c3d2e1f0a9b8c7d6e5f4"


@pytest.fixture()
def ADDRESSES() -> list[str]:
    return [
        "0x9bc33f6155eFAcc290c3C50E9B5b24b668562732",
        "0xfDe38ad4bBbeC867e6cb4Bb31FbFB2074c959A83",
        "0x8BB4C0b502f869af3B25166930507a6E8c3038D4",
        "0x7Ac54A0406FA2B465E0D57C66597BE83A4b149fC",
        "0xdeA708968f8dd520f5e2F0aB6785F28c98521ca8",
    ]


@pytest.fixture
def params() -> RewardScheduleParams:
    return RewardScheduleParams(
        total_supply=Decimal(1_000_000),
        retroactive_airdrop_factor=Decimal("0.05"),
        fixed_airdrop_bonus=Decimal(8500),
        tokens_per_epoch=Decimal(20000),
        max_epoch=10,
    )


@pytest.fixture
def epoch_info_raw() -> EpochInfoRaw:
    return EpochInfoRaw(
        epoch_period=WEEK,
        tokens_per_epoch=20000,
        first_epoch_start=GENESIS,
        next_epoch_start=GENESIS + 4 * WEEK,
        total_epoch=10,
        current_epoch=3,
    )


@pytest.fixture
def epoch_info(epoch_info_raw: EpochInfoRaw) -> EpochInfo:
    return EpochInfo.from_raw(epoch_info_raw)


@pytest.fixture
def leaves() -> list[DistributionLeaf]:
    """8 leaves, so every proof is 3 levels deep"""
    return [
        DistributionLeaf(
            epoch=3,
            address=f"0x{i:040x}",
            amount=FixedPointAmount.from_units(i * 1250),
        )
        for i in range(1, 9)
    ]


@pytest.fixture
def tree(leaves: list[DistributionLeaf]) -> MerkleTree:
    return MerkleTree(leaves)


@pytest.fixture
def network_config() -> NetworkConfig:
    return NetworkConfig(
        networks={
            Network.MAINNET: NetworkParams(chain_id=1, distributor_address=DISTRIBUTOR),
            Network.TESTNET: NetworkParams(chain_id=333, distributor_address=DISTRIBUTOR),
        }
    )


@pytest.fixture
def wallet(leaves: list[DistributionLeaf]) -> ConnectedWallet:
    return ConnectedWallet(address=leaves[0].address)


@dataclass
class MockResponse:
    res: Any

    def json(self):
        return self.res
