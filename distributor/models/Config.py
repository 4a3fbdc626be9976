from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Optional

import eth_utils as eth
from pydantic import BaseModel, field_validator

from distributor.errors import BadConfigException
from distributor.models.Amount import BASE_DECIMALS, FixedPointAmount
from distributor.models.types import ByteAddress


class Network(str, Enum):
    MAINNET = "MainNet"
    TESTNET = "TestNet"


class RewardScheduleParams(BaseModel):
    """
    Parameters of the two stage emission schedule. Token quantities are in whole tokens,
    they are moved to base units by the schedule itself.

    :param `total_supply`: fixed supply of the reward token
    :param `retroactive_airdrop_factor`: share of the supply given away in the retroactive airdrop
    :param `fixed_airdrop_bonus`: tokens added on top of the airdrop share
    :param `tokens_per_epoch`: mining emission per epoch, usually from the on-chain config
    :param `max_epoch`: last epoch of the schedule (inclusive)
    :param `freeze_at_max_epoch`: stop the mining term at `max_epoch * tokens_per_epoch`
    instead of extrapolating past the end of the schedule
    """

    total_supply: Decimal
    retroactive_airdrop_factor: Decimal
    fixed_airdrop_bonus: Decimal
    tokens_per_epoch: Decimal
    max_epoch: int
    decimals: int = BASE_DECIMALS
    freeze_at_max_epoch: bool = False

    @field_validator("retroactive_airdrop_factor")
    @classmethod
    def validate_airdrop_factor(cls, factor: Decimal) -> Decimal:
        if factor <= 0 or factor > 1:
            raise BadConfigException(f"Airdrop factor out of range, passed {factor}")
        return factor

    @field_validator("total_supply", "fixed_airdrop_bonus", "tokens_per_epoch")
    @classmethod
    def validate_not_negative(cls, quantity: Decimal) -> Decimal:
        if quantity < 0 or not quantity.is_finite():
            raise BadConfigException(f"Token quantity must be positive, passed {quantity}")
        return quantity

    @field_validator("max_epoch")
    @classmethod
    def validate_max_epoch(cls, max_epoch: int) -> int:
        if max_epoch < 0:
            raise BadConfigException(f"Max epoch must be positive, passed {max_epoch}")
        return max_epoch

    def units(self, quantity: Decimal) -> FixedPointAmount:
        return FixedPointAmount.from_units(quantity, self.decimals)


class NetworkParams(BaseModel):
    """
    Everything needed to address the distributor on a single network
    :param `distributor_address`: byte20 address of the distribution contract
    :param `msg_version`: transaction message version, packed with the chain id
    :param `gas_limit`: gas limit policy for `Claim` transactions
    """

    chain_id: int
    distributor_address: ByteAddress
    rpc_url: Optional[str] = None
    stats_api: Optional[str] = None
    msg_version: int = 1
    gas_limit: int = 30000

    @field_validator("distributor_address")
    @classmethod
    def normalize_address(cls, addr: ByteAddress) -> ByteAddress:
        if not eth.is_hex_address(addr):
            raise BadConfigException(f"Distributor address must be byte20 hex, passed {addr}")
        return eth.to_normalized_address(addr)


class NetworkConfig(BaseModel):
    networks: dict[Network, NetworkParams]

    def get(self, network: Network) -> Optional[NetworkParams]:
        return self.networks.get(network)
