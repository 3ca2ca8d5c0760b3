"""Rounding policies for amounts and points.

All arithmetic is on Decimal. "nearest" means round half away from zero
(ROUND_HALF_UP), which is what issuers print on statements; binary float
rounding would turn 2.5 into 2.
"""

from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
FIVE = Decimal("5")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so floats like 0.1 don't drag binary noise along
    return Decimal(str(value))


def round_half_up(value) -> int:
    return int(to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def floor_to_block(amount: Decimal, block: Decimal) -> Decimal:
    """Round down to a whole multiple of `block` (e.g. 23.00 -> 20 for block 5)."""
    return (amount / block).to_integral_value(rounding=ROUND_FLOOR) * block


def round_amount(amount: Decimal, strategy: str = "none") -> Decimal:
    """Apply an amount rounding strategy before multiplying.

    Args:
        amount: Qualifying amount
        strategy: none | floor | ceiling | nearest | floor5
    """
    if strategy == "floor":
        return amount.to_integral_value(rounding=ROUND_FLOOR)
    if strategy == "ceiling":
        return amount.to_integral_value(rounding=ROUND_CEILING)
    if strategy == "nearest":
        return amount.to_integral_value(rounding=ROUND_HALF_UP)
    if strategy == "floor5":
        return floor_to_block(amount, FIVE)
    return amount


def round_points(points: Decimal, strategy: str = "nearest") -> int:
    """Turn a fractional point value into whole points."""
    if strategy == "floor":
        return int(points.to_integral_value(rounding=ROUND_FLOOR))
    if strategy == "ceiling":
        return int(points.to_integral_value(rounding=ROUND_CEILING))
    return round_half_up(points)


def points_for(
    amount: Decimal,
    multiplier: Decimal,
    block_size: Decimal = Decimal("1"),
    amount_rounding: str = "none",
    points_rounding: str = "nearest",
) -> int:
    """Points = (rounded amount / block size) x multiplier, then rounded."""
    rounded = round_amount(amount, amount_rounding)
    return round_points(rounded / block_size * multiplier, points_rounding)
