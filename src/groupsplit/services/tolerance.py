"""Numeric tolerance shared by the balance calculator and the settlement planner.

Shares are computed with plain ``Decimal`` division, so a balance that should
be zero can come out as ``-0.000...01``. Anything below ``EPSILON`` in absolute
value counts as settled, both when balances are summed and when transfers are
planned.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_EVEN
from typing import Iterable, Mapping

ZERO = Decimal("0")
CENT = Decimal("0.01")
EPSILON = Decimal("0.01")


def is_settled(value: Decimal) -> bool:
    return abs(value) < EPSILON


def total(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def is_consistent(balances: Mapping[object, Decimal]) -> bool:
    return is_settled(total(balances.values()))


def to_cents(value: Decimal) -> Decimal:
    # display only, the core keeps full precision
    return value.quantize(CENT, rounding=ROUND_HALF_EVEN)
