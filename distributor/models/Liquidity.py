from __future__ import annotations

from typing import Optional

import eth_utils as eth
from pydantic import BaseModel, field_validator

from distributor.models.Amount import FixedPointAmount
from distributor.models.types import BigNumber, ByteAddress

# valuations carry 18 decimals so sub-cent prices survive the multiplication
VALUE_DECIMALS = 18

ZIL_ADDRESS = "0x0000000000000000000000000000000000000000"


class TokenPool(BaseModel):
    """
    Reserves of a ZIL/token pool, all in base units
    :param `total_contribution`: liquidity shares outstanding in the pool
    """

    token_reserve: BigNumber
    zil_reserve: BigNumber
    total_contribution: BigNumber


class Token(BaseModel):
    address: ByteAddress
    symbol: str
    decimals: int
    pool: Optional[TokenPool] = None

    @field_validator("address")
    @classmethod
    def normalize_address(cls, addr: ByteAddress) -> ByteAddress:
        return eth.to_normalized_address(addr)


class LiquiditySnapshot(BaseModel):
    """
    Caller owned snapshot of the pools, read but never modified by the aggregator
    :param `prices`: USD price per whole token, keyed by address
    :param `liquidity_change_24h`: change in total contribution per pool over the last 24h
    :param `values`: recorded pool values, computed from `prices` if missing
    """

    tokens: list[Token]
    prices: dict[ByteAddress, str] = {}
    liquidity_change_24h: dict[ByteAddress, BigNumber] = {}
    values: Optional[dict[ByteAddress, str]] = None


class LiquiditySummary(BaseModel):
    """
    :param `total_liquidity`: current value locked across all pools
    :param `previous_liquidity`: the same pools backdated 24h using current prices
    :param `change_percent`: change between the two, zero when there is no baseline
    """

    total_liquidity: FixedPointAmount
    previous_liquidity: FixedPointAmount
    change_percent: FixedPointAmount
