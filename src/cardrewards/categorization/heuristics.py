"""Amount and time-of-day heuristics.

Amount heuristics may move a transaction to another category (and then always
attenuate confidence) or corroborate the current one with a small boost.
Time heuristics only ever adjust confidence.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

FUEL_STATION_MCCS = {"5541"}
SMALL_FUEL_STATION_PURCHASE = Decimal("15")
SMALL_DINING_PURCHASE = Decimal("5")

_FUEL_BRANDS = re.compile(r"\bSHELL\b|\bESSO\b|CALTEX|PETRO|\bSPC\b|\bBP\b", re.I)
_LATE_NIGHT_NAMES = ("uber", "doordash", "skip", "delivery")
_COFFEE_NAMES = ("coffee", "cafe", "starbucks", "tim horton")
_DINING = ("Dining Out", "Fast Food & Takeout")


@dataclass(frozen=True)
class AmountHeuristic:
    category: str
    confidence_multiplier: float = 1.0
    reason: str | None = None


@dataclass(frozen=True)
class TimeHeuristic:
    confidence_multiplier: float = 1.0
    reason: str | None = None


def _is_fuel_station(mcc: str | None, merchant_name: str) -> bool:
    return mcc in FUEL_STATION_MCCS or bool(_FUEL_BRANDS.search(merchant_name))


def apply_amount_heuristics(
    amount: Decimal | None,
    category: str,
    merchant_name: str | None,
    mcc: str | None = None,
) -> AmountHeuristic:
    """Check whether the amount fits the current category.

    Returns the (possibly new) category and a confidence multiplier: below 1
    when the category was changed, above 1 when the amount corroborates it.
    """
    if amount is None:
        return AmountHeuristic(category)

    name = merchant_name or ""
    amount = abs(amount)

    if category == "Transportation" and _is_fuel_station(mcc, name):
        if amount < SMALL_FUEL_STATION_PURCHASE:
            return AmountHeuristic(
                "Fast Food & Takeout",
                0.7,
                "Small purchase at a service station, likely the convenience store",
            )
        if amount >= Decimal("30"):
            return AmountHeuristic(category, 1.05, "Amount typical of a fuel fill-up")

    if category == "Dining Out" and amount < SMALL_DINING_PURCHASE:
        return AmountHeuristic(
            "Fast Food & Takeout",
            0.85,
            "Small food purchase, likely takeout or a snack",
        )

    if category == "Groceries" and Decimal("20") <= amount <= Decimal("400"):
        return AmountHeuristic(category, 1.05, "Amount typical of a grocery basket")

    if category == "Subscriptions & Memberships" and amount < Decimal("50"):
        return AmountHeuristic(category, 1.05, "Amount typical of a subscription")

    if category == "Cash & ATM" and amount % 10 == 0:
        return AmountHeuristic(category, 1.05, "Round-number cash withdrawal")

    return AmountHeuristic(category)


def apply_time_heuristics(
    occurred_at: datetime | None,
    category: str,
    merchant_name: str | None,
) -> TimeHeuristic:
    """Adjust confidence from the hour and weekday of the purchase.

    The first matching window wins.
    """
    if occurred_at is None:
        return TimeHeuristic()

    hour = occurred_at.hour
    weekday = occurred_at.weekday()  # 0 = Monday, 6 = Sunday
    is_weekend = weekday >= 5
    name = (merchant_name or "").lower()

    # Late night (10pm - 2am)
    if hour >= 22 or hour <= 2:
        if any(keyword in name for keyword in _LATE_NIGHT_NAMES):
            return TimeHeuristic(1.1, "Late night order")
        if category in _DINING:
            return TimeHeuristic(1.05, "Late night dining")

    # Weekday morning coffee run (6am - 9am)
    if not is_weekend and 6 <= hour <= 9:
        if any(keyword in name for keyword in _COFFEE_NAMES):
            return TimeHeuristic(1.1, "Morning coffee run")

    # Weekend morning groceries (8am - 11am)
    if is_weekend and 8 <= hour <= 11 and category == "Groceries":
        return TimeHeuristic(1.1, "Weekend grocery shopping")

    # Friday/Saturday evening (5pm - 10pm)
    if weekday in (4, 5) and 17 <= hour <= 22:
        if category in ("Dining Out", "Entertainment"):
            return TimeHeuristic(1.1, "Weekend evening outing")

    # Weekday lunch (11am - 2pm)
    if not is_weekend and 11 <= hour <= 14 and category in _DINING:
        return TimeHeuristic(1.05, "Lunch time")

    return TimeHeuristic()
