"""Merchant-name signals for categorization.

Two kinds of reference data live here:
- keyword patterns that map a merchant name straight to a category
- multi-category merchants (warehouse clubs, marketplaces, pharmacies) whose
  purchases plausibly span several categories

Both are ordered lists: earlier matches win.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field


def _norm(text: str) -> str:
    return re.sub(r"\s+", " ", (text or "").strip().upper())


def normalize_merchant(name: str | None) -> str:
    """Normalize a merchant name into a stable lookup key.

    Lowercase alphanumerics only, so "7-Eleven #123" and "7 ELEVEN 123" share
    a key. Used for historical correction patterns.
    """
    return re.sub(r"[^a-z0-9]", "", (name or "").lower())


# Ordering matters: earlier matches win.
_NAME_RULES: list[tuple[str, re.Pattern[str]]] = [
    ("Food Delivery", re.compile(r"UBER\s*EATS|DOORDASH|DELIVEROO|FOODPANDA|GRAB\s*FOOD|SKIP\s*THE\s*DISHES")),
    ("Fast Food & Takeout", re.compile(r"MCDONALD|\bKFC\b|BURGER\s*KING|\bSUBWAY\b|JOLLIBEE|POPEYES|\bWENDY'?S\b|TACO\s*BELL|DOMINO'?S")),
    ("Dining Out", re.compile(r"KOPITIAM|HAWKER|FOOD\s*COURT|RESTAURANT|\bCAFE\b|COFFEE|STARBUCKS|TIM\s*HORTON|EATERY|KITCHEN|CANTEEN|BISTRO")),
    ("Groceries", re.compile(r"\bNTUC\b|FAIRPRICE|COLD\s*STORAGE|\bGIANT\b|SHENG\s*SIONG|SUPERMARKET|GROCER|LOBLAWS|SOBEYS|NO\s*FRILLS")),
    ("Subscriptions & Memberships", re.compile(r"NETFLIX|SPOTIFY|DISNEY\s*(?:\+|PLUS)|YOUTUBE\s*PREMIUM|APPLE\.COM/BILL|ICLOUD|AMAZON\s*PRIME|OPENAI|CHATGPT")),
    ("Transportation", re.compile(r"\bUBER\b|\bGRAB\b|\bLYFT\b|\bTAXI\b|COMFORTDELGRO|EZ-?LINK|\bSHELL\b|\bESSO\b|CALTEX|PETRO")),
    ("Travel & Vacation", re.compile(r"AIRBNB|BOOKING\.COM|EXPEDIA|AGODA|\bHOTEL\b|AIRLINES?\b|\bSCOOT\b")),
    ("Entertainment", re.compile(r"CINEMA|GOLDEN\s*VILLAGE|SHAW\s*THEATRES|TICKETMASTER|SISTIC|STEAMPOWERED")),
    ("Gym & Fitness", re.compile(r"\bGYM\b|FITNESS|\bYOGA\b|PILATES")),
    ("Pet Care", re.compile(r"\bPETS?\b|VETERINAR|\bVET\b")),
    ("Beauty & Personal Care", re.compile(r"SALON|BARBER|SEPHORA|\bSPA\b")),
    ("Healthcare", re.compile(r"PHARMACY|\bCLINIC\b|HOSPITAL|\bDENTAL\b")),
    ("Utilities", re.compile(r"SINGTEL|STARHUB|SP\s*SERVICES|BROADBAND|\bELECTRIC\b")),
    ("Cash & ATM", re.compile(r"\bATM\b|CASH\s*WITHDRAWAL")),
    ("Fees & Charges", re.compile(r"ANNUAL\s*FEE|LATE\s*(?:PAYMENT\s*)?FEE|FINANCE\s*CHARGE|INTEREST\s*CHARGE")),
]


def category_from_merchant_name(merchant_name: str | None) -> str | None:
    """Infer a category from keyword patterns in the merchant name.

    Returns:
        Category name, or None when no pattern matches.
    """
    text = _norm(merchant_name or "")
    if not text:
        return None
    for category, pattern in _NAME_RULES:
        if pattern.search(text):
            return category
    return None


@dataclass(frozen=True)
class MultiCategoryMerchant:
    """A merchant whose purchases plausibly span several categories."""

    name: str
    pattern: re.Pattern[str]
    default_category: str
    suggested_categories: list[str] = field(default_factory=list)


MULTI_CATEGORY_MERCHANTS: list[MultiCategoryMerchant] = [
    MultiCategoryMerchant(
        "Costco",
        re.compile(r"COSTCO"),
        "Groceries",
        ["Groceries", "Home Essentials", "Transportation", "Furniture & Decor"],
    ),
    MultiCategoryMerchant(
        "Walmart",
        re.compile(r"WAL-?\s?MART"),
        "Groceries",
        ["Groceries", "Home Essentials", "Clothing & Shoes", "Healthcare"],
    ),
    MultiCategoryMerchant(
        "Target",
        re.compile(r"\bTARGET\b"),
        "Home Essentials",
        ["Home Essentials", "Groceries", "Clothing & Shoes"],
    ),
    MultiCategoryMerchant(
        "Amazon",
        re.compile(r"AMAZON(?!\s*PRIME)|\bAMZN\b"),
        "Home Essentials",
        ["Home Essentials", "Hobbies & Recreation", "Clothing & Shoes", "Groceries"],
    ),
    MultiCategoryMerchant(
        "Online marketplace",
        re.compile(r"SHOPEE|LAZADA"),
        "Home Essentials",
        ["Home Essentials", "Clothing & Shoes", "Beauty & Personal Care"],
    ),
    MultiCategoryMerchant(
        "Pharmacy chain",
        re.compile(r"WATSONS|GUARDIAN|SHOPPERS\s*DRUG"),
        "Healthcare",
        ["Healthcare", "Beauty & Personal Care", "Groceries"],
    ),
    MultiCategoryMerchant(
        "7-Eleven",
        re.compile(r"7-?\s?ELEVEN|\b7-11\b"),
        "Fast Food & Takeout",
        ["Fast Food & Takeout", "Groceries"],
    ),
    MultiCategoryMerchant(
        "IKEA",
        re.compile(r"\bIKEA\b"),
        "Furniture & Decor",
        ["Furniture & Decor", "Home Essentials", "Dining Out"],
    ),
    MultiCategoryMerchant(
        "Canadian Tire",
        re.compile(r"CANADIAN\s*TIRE"),
        "Home Improvement",
        ["Home Improvement", "Transportation", "Hobbies & Recreation"],
    ),
]


def get_multi_category_merchant(merchant_name: str | None) -> MultiCategoryMerchant | None:
    text = _norm(merchant_name or "")
    if not text:
        return None
    for merchant in MULTI_CATEGORY_MERCHANTS:
        if merchant.pattern.search(text):
            return merchant
    return None
