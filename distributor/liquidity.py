"""
Total value locked across the ZIL/token pools, and its change over the last 24h.

The previous liquidity is not a historical lookup: each pool's *current* valuation is
scaled back by the share of liquidity that already existed 24h ago. Price moves over the
period are therefore not reflected in the change figure.
"""

import logging
from decimal import Decimal
from fractions import Fraction
from typing import Any, Mapping, Optional, Union

import eth_utils as eth

from distributor.models import (
    BASE_DECIMALS,
    VALUE_DECIMALS,
    ZIL_ADDRESS,
    BigNumber,
    ByteAddress,
    FixedPointAmount,
    LiquiditySummary,
    Token,
)

logger = logging.getLogger(__name__)

Price = Union[Decimal, str]

VALUE_ZERO = FixedPointAmount(value=0, decimals=VALUE_DECIMALS)


def _normalize_keys(mapping: Optional[Mapping[ByteAddress, Any]]) -> dict:
    """Key by normalized byte20 address, dropping keys that are not byte20 hex"""
    if not mapping:
        return {}
    normalized = {}
    for k, v in mapping.items():
        if not eth.is_hex_address(k):
            logger.debug("skipping %s, not a byte20 address", k)
            continue
        normalized[eth.to_normalized_address(k)] = v
    return normalized


def _value(quantity: BigNumber, decimals: int, price: Optional[Price]) -> FixedPointAmount:
    if price is None:
        return VALUE_ZERO
    amount = FixedPointAmount.from_base(quantity, decimals).rescale(
        max(decimals, VALUE_DECIMALS)
    )
    return amount.scale_by(price)


def pool_value(token: Token, prices: Mapping[ByteAddress, Price]) -> FixedPointAmount:
    """Value of both sides of a token's pool at current prices"""
    if token.pool is None:
        return VALUE_ZERO
    prices = _normalize_keys(prices)
    zil_side = _value(token.pool.zil_reserve, BASE_DECIMALS, prices.get(ZIL_ADDRESS))
    token_side = _value(token.pool.token_reserve, token.decimals, prices.get(token.address))
    return zil_side + token_side


def previous_pool_value(
    token: Token, prices: Mapping[ByteAddress, Price], change_24h: BigNumber
) -> Optional[FixedPointAmount]:
    """
    Backdate the pool's current valuation by the share of contribution that existed 24h ago.
    Returns None if the pool has no prior contribution, as it is new liquidity.
    """
    total_contribution = int(token.pool.total_contribution) if token.pool else 0
    previous_contribution = total_contribution - int(change_24h)
    if previous_contribution == 0 or total_contribution == 0:
        return None

    factor = Fraction(previous_contribution, total_contribution)
    return pool_value(token, prices).scale_by(factor)


def aggregate(
    tokens: list[Token],
    prices: Mapping[ByteAddress, Price],
    liquidity_change_24h: Mapping[ByteAddress, BigNumber],
    values: Optional[Mapping[ByteAddress, Price]] = None,
) -> LiquiditySummary:
    """
    :param `tokens`: tokens with their pool reserves and total contribution
    :param `prices`: USD price per whole token, keyed by token address. ZIL sits at `ZIL_ADDRESS`
    :param `liquidity_change_24h`: change in each pool's total contribution over the last 24h
    :param `values`: recorded current pool values. If omitted they are computed from `prices`,
    if passed, tokens missing from it contribute nothing to the total
    """
    changes = _normalize_keys(liquidity_change_24h)
    recorded = _normalize_keys(values) if values is not None else None

    total_liquidity = VALUE_ZERO
    previous_liquidity = VALUE_ZERO
    for token in tokens:
        if recorded is None:
            total_liquidity += pool_value(token, prices)
        elif token.address in recorded:
            total_liquidity += FixedPointAmount.from_units(
                recorded[token.address], VALUE_DECIMALS
            )

        previous = previous_pool_value(token, prices, changes.get(token.address, "0"))
        if previous is None:
            logger.debug("%s has no prior contribution, excluded from baseline", token.symbol)
            continue
        previous_liquidity += previous

    if previous_liquidity.is_zero():
        change_percent = VALUE_ZERO
    else:
        change_percent = (total_liquidity - previous_liquidity).scale_by(100) / previous_liquidity

    return LiquiditySummary(
        total_liquidity=total_liquidity,
        previous_liquidity=previous_liquidity,
        change_percent=change_percent,
    )
