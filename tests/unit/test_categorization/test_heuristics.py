from datetime import datetime, timezone
from decimal import Decimal

from cardrewards.categorization.heuristics import apply_amount_heuristics, apply_time_heuristics


def utc(day: int, hour: int) -> datetime:
    return datetime(2025, 3, day, hour, tzinfo=timezone.utc)


class TestAmountHeuristics:
    def test_small_fuel_station_purchase_moves_to_takeout(self):
        result = apply_amount_heuristics(Decimal("12.50"), "Transportation", "Esso Bukit Timah", None)
        assert result.category == "Fast Food & Takeout"
        assert result.confidence_multiplier == 0.7

    def test_fill_up_corroborates_transportation(self):
        result = apply_amount_heuristics(Decimal("65"), "Transportation", "Pump 3", "5541")
        assert result.category == "Transportation"
        assert result.confidence_multiplier == 1.05

    def test_non_fuel_transport_untouched(self):
        result = apply_amount_heuristics(Decimal("3"), "Transportation", "Comfort Taxi", "4121")
        assert result.category == "Transportation"
        assert result.confidence_multiplier == 1.0

    def test_tiny_dining_is_takeout(self):
        result = apply_amount_heuristics(Decimal("3.50"), "Dining Out", "Cafe")
        assert result.category == "Fast Food & Takeout"
        assert result.confidence_multiplier == 0.85

    def test_refund_uses_magnitude(self):
        assert apply_amount_heuristics(Decimal("-3.50"), "Dining Out", "Cafe").category == "Fast Food & Takeout"

    def test_round_cash_withdrawal(self):
        assert apply_amount_heuristics(Decimal("100"), "Cash & ATM", "ATM").confidence_multiplier == 1.05
        assert apply_amount_heuristics(Decimal("105"), "Cash & ATM", "ATM").confidence_multiplier == 1.0

    def test_missing_amount_is_neutral(self):
        result = apply_amount_heuristics(None, "Groceries", "NTUC")
        assert (result.category, result.confidence_multiplier) == ("Groceries", 1.0)


class TestTimeHeuristics:
    def test_missing_timestamp_is_neutral(self):
        assert apply_time_heuristics(None, "Dining Out", "x").confidence_multiplier == 1.0

    def test_late_night_delivery(self):
        result = apply_time_heuristics(utc(12, 23), "Food Delivery", "Uber Eats")
        assert result.confidence_multiplier == 1.1
        assert result.reason == "Late night order"

    def test_late_night_dining(self):
        assert apply_time_heuristics(utc(12, 1), "Dining Out", "Hawker").confidence_multiplier == 1.05

    def test_friday_evening_outing(self):
        assert apply_time_heuristics(utc(14, 19), "Entertainment", "Cinema").confidence_multiplier == 1.1

    def test_weekday_lunch(self):
        assert apply_time_heuristics(utc(12, 12), "Fast Food & Takeout", "KFC").confidence_multiplier == 1.05

    def test_weekend_coffee_not_boosted(self):
        assert apply_time_heuristics(utc(9, 7), "Dining Out", "Coffee Bean").confidence_multiplier == 1.0
