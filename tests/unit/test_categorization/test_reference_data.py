"""MCC table, merchant patterns and the category taxonomy."""

import pytest

from cardrewards.categorization.categories import CATEGORIES, is_valid_category, parent_group
from cardrewards.categorization.mcc import MCC_CATEGORY_TABLE, category_result_from_mcc, normalize_mcc
from cardrewards.categorization.merchants import (
    category_from_merchant_name,
    get_multi_category_merchant,
    normalize_merchant,
)


def test_every_mapped_category_is_in_taxonomy():
    assert {mapping.category for mapping in MCC_CATEGORY_TABLE.values()} <= set(CATEGORIES)


def test_taxonomy_helpers():
    assert is_valid_category("Dining Out")
    assert not is_valid_category("dining out")
    assert not is_valid_category(None)
    assert parent_group("Groceries") == "Essentials"
    assert parent_group("Something Else") == "Financial & Other"


@pytest.mark.parametrize(
    "raw,expected",
    [("5812", "5812"), (" 742 ", "0742"), ("ABCD", None), ("12345", None), ("", None), (None, None)],
)
def test_normalize_mcc(raw, expected):
    assert normalize_mcc(raw) == expected


def test_known_mcc():
    result = category_result_from_mcc("5812")
    assert result.category == "Dining Out"
    assert result.confidence == 0.9
    assert not result.needs_review


def test_multi_category_mcc_needs_review():
    result = category_result_from_mcc("5311")
    assert result.is_multi_category
    assert result.needs_review


@pytest.mark.parametrize("code,category", [("5999", "Home Essentials"), ("2999", "Uncategorized"), ("7777", "Entertainment")])
def test_unmapped_mcc_guesses_from_leading_digit(code, category):
    result = category_result_from_mcc(code)
    assert result.category == category
    assert result.confidence == 0.5
    assert result.needs_review


def test_missing_mcc():
    result = category_result_from_mcc(None)
    assert result.category == "Uncategorized"
    assert result.confidence == 0.0


@pytest.mark.parametrize(
    "name,expected",
    [
        ("7-Eleven #123", "7eleven123"),
        ("7 ELEVEN 123", "7eleven123"),
        ("  Joe's   Diner ", "joesdiner"),
        (None, ""),
    ],
)
def test_normalize_merchant(name, expected):
    assert normalize_merchant(name) == expected


@pytest.mark.parametrize(
    "name,category",
    [
        ("UBER EATS 1234", "Food Delivery"),
        ("Uber *Trip", "Transportation"),
        ("McDonald's Orchard", "Fast Food & Takeout"),
        ("NTUC FairPrice Xtra", "Groceries"),
        ("Amazon Prime Video", "Subscriptions & Memberships"),
        ("Golden Village Plaza", "Entertainment"),
        ("Anytime Fitness", "Gym & Fitness"),
        ("ATM Withdrawal", "Cash & ATM"),
        ("Acme Widgets", None),
        ("", None),
    ],
)
def test_category_from_merchant_name(name, category):
    assert category_from_merchant_name(name) == category


def test_multi_category_merchants():
    assert get_multi_category_merchant("AMZN Mktp SG").name == "Amazon"
    assert get_multi_category_merchant("Amazon Prime") is None
    assert get_multi_category_merchant("WATSONS #88").default_category == "Healthcare"
    assert get_multi_category_merchant("Corner Shop") is None
