from __future__ import annotations

import functools
from decimal import Decimal
from fractions import Fraction
from typing import Union

from pydantic import BaseModel, ConfigDict, field_validator

from distributor.errors import DivisionByZeroError, InvalidScaleError

# ZWAP and ZIL are both denominated in 12 decimal base units
BASE_DECIMALS = 12

Factor = Union[int, str, Decimal, Fraction, "FixedPointAmount"]


def _truncate(numerator: int, denominator: int) -> int:
    """Integer division that always rounds toward zero"""
    if denominator == 0:
        raise DivisionByZeroError("division by zero")
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def _to_fraction(factor: Factor) -> Fraction:
    if isinstance(factor, FixedPointAmount):
        return factor.as_fraction()
    if isinstance(factor, float):
        raise InvalidScaleError(
            f"float {factor} is not exact, pass a Decimal or a string instead"
        )
    try:
        return Fraction(factor)
    except (ValueError, TypeError) as e:
        raise InvalidScaleError(f"cannot use {factor!r} as a factor") from e


@functools.total_ordering
class FixedPointAmount(BaseModel):
    """
    An exact decimal quantity held as an integer number of base units and a scale.

    `value` is the raw integer (what contracts and APIs call the amount) and
    `decimals` says where the decimal point sits, so 1.5 ZWAP is
    `FixedPointAmount(value=1_500_000_000_000, decimals=12)`.

    Addition, subtraction and integer multiplication are exact. Every operation that
    could produce more digits than the scale holds (division, fractional factors,
    reducing the scale) truncates toward zero.
    """

    model_config = ConfigDict(frozen=True)

    value: int
    decimals: int = BASE_DECIMALS

    @field_validator("decimals")
    @classmethod
    def check_decimals(cls, decimals: int) -> int:
        if decimals < 0:
            raise InvalidScaleError(f"Decimals must be positive, passed {decimals}")
        return decimals

    @classmethod
    def from_units(cls, units: Factor, decimals: int = BASE_DECIMALS) -> FixedPointAmount:
        """Build from a human readable quantity, eg: `from_units("8500")`"""
        ratio = _to_fraction(units)
        return cls(
            value=_truncate(ratio.numerator * 10**decimals, ratio.denominator),
            decimals=decimals,
        )

    @classmethod
    def from_base(cls, value: Union[int, str], decimals: int = BASE_DECIMALS) -> FixedPointAmount:
        """Build from raw base units, eg: a `BigNumber` string returned by an API"""
        try:
            return cls(value=int(value), decimals=decimals)
        except ValueError as e:
            raise InvalidScaleError(f"{value!r} is not a whole number of base units") from e

    # conversions

    def as_fraction(self) -> Fraction:
        return Fraction(self.value, 10**self.decimals)

    def to_decimal(self) -> Decimal:
        return Decimal(f"{self.value}E-{self.decimals}")

    def rescale(self, decimals: int) -> FixedPointAmount:
        """Change the scale, truncating any digits that no longer fit"""
        if decimals < 0:
            raise InvalidScaleError(f"Decimals must be positive, passed {decimals}")
        if decimals >= self.decimals:
            return FixedPointAmount(
                value=self.value * 10 ** (decimals - self.decimals), decimals=decimals
            )
        return FixedPointAmount(
            value=_truncate(self.value, 10 ** (self.decimals - decimals)),
            decimals=decimals,
        )

    def shifted_by(self, places: int) -> FixedPointAmount:
        """Multiply by 10^places by moving the decimal point, always exact"""
        if places <= self.decimals:
            return FixedPointAmount(value=self.value, decimals=self.decimals - places)
        return FixedPointAmount(
            value=self.value * 10 ** (places - self.decimals), decimals=0
        )

    def _align(self, other: FixedPointAmount) -> tuple[int, int, int]:
        decimals = max(self.decimals, other.decimals)
        return (
            self.rescale(decimals).value,
            other.rescale(decimals).value,
            decimals,
        )

    # arithmetic

    def add(self, other: FixedPointAmount) -> FixedPointAmount:
        a, b, decimals = self._align(other)
        return FixedPointAmount(value=a + b, decimals=decimals)

    def subtract(self, other: FixedPointAmount) -> FixedPointAmount:
        a, b, decimals = self._align(other)
        return FixedPointAmount(value=a - b, decimals=decimals)

    def scale_by(self, factor: Factor) -> FixedPointAmount:
        """Multiply by a dimensionless factor, keeping the current scale"""
        if isinstance(factor, int) and not isinstance(factor, bool):
            return FixedPointAmount(value=self.value * factor, decimals=self.decimals)
        ratio = _to_fraction(factor)
        return FixedPointAmount(
            value=_truncate(self.value * ratio.numerator, ratio.denominator),
            decimals=self.decimals,
        )

    def multiply(self, other: Factor) -> FixedPointAmount:
        return self.scale_by(other)

    def divide(self, divisor: Factor) -> FixedPointAmount:
        """
        Divide, keeping the current scale. Dividing two amounts gives the ratio
        between them expressed at the scale of `self`.
        """
        ratio = _to_fraction(divisor)
        if ratio == 0:
            raise DivisionByZeroError(f"cannot divide {self} by zero")
        return FixedPointAmount(
            value=_truncate(self.value * ratio.denominator, ratio.numerator),
            decimals=self.decimals,
        )

    def is_zero(self) -> bool:
        return self.value == 0

    def is_negative(self) -> bool:
        return self.value < 0

    __add__ = add
    __sub__ = subtract
    __mul__ = multiply
    __rmul__ = multiply
    __truediv__ = divide

    def __neg__(self) -> FixedPointAmount:
        return FixedPointAmount(value=-self.value, decimals=self.decimals)

    # comparison

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (FixedPointAmount, int, Decimal, Fraction)):
            return self.as_fraction() == _to_fraction(other)
        return NotImplemented

    def __lt__(self, other: Factor) -> bool:
        return self.as_fraction() < _to_fraction(other)

    def __hash__(self) -> int:
        return hash(self.as_fraction())

    # display

    def to_format(self, dp: int = 2, separator: str = ",") -> str:
        """Format with `dp` decimal places and thousands separators, truncating"""
        truncated = self.rescale(dp).value
        sign = "-" if truncated < 0 else ""
        whole, fraction = divmod(abs(truncated), 10**dp)
        formatted = f"{whole:,}".replace(",", separator)
        if dp == 0:
            return f"{sign}{formatted}"
        return f"{sign}{formatted}.{fraction:0{dp}d}"

    def __str__(self) -> str:
        return format(self.to_decimal(), "f")


ZERO = FixedPointAmount(value=0)
