"""Spending category taxonomy.

Categories are behavioural ("Dining Out", "Groceries") rather than MCC
buckets. Each category belongs to one parent group used for budget rollups.
"""

UNCATEGORIZED = "Uncategorized"

PARENT_GROUPS: dict[str, list[str]] = {
    "Essentials": [
        "Groceries",
        "Housing",
        "Utilities",
        "Transportation",
        "Healthcare",
    ],
    "Lifestyle": [
        "Dining Out",
        "Fast Food & Takeout",
        "Food Delivery",
        "Entertainment",
        "Hobbies & Recreation",
        "Travel & Vacation",
    ],
    "Home & Living": [
        "Home Essentials",
        "Furniture & Decor",
        "Home Improvement",
        "Pet Care",
    ],
    "Personal Care": [
        "Clothing & Shoes",
        "Beauty & Personal Care",
        "Gym & Fitness",
    ],
    "Work & Education": [
        "Professional Development",
        "Work Expenses",
        "Education",
    ],
    "Financial & Other": [
        "Subscriptions & Memberships",
        "Financial Services",
        "Insurance",
        "Gifts & Donations",
        "Cash & ATM",
        "Fees & Charges",
        UNCATEGORIZED,
    ],
}

CATEGORIES: list[str] = [name for names in PARENT_GROUPS.values() for name in names]

_CATEGORY_TO_PARENT: dict[str, str] = {
    name: parent for parent, names in PARENT_GROUPS.items() for name in names
}


def is_valid_category(category: str | None) -> bool:
    return category in _CATEGORY_TO_PARENT


def parent_group(category: str) -> str:
    """Return the parent group of a category ("Financial & Other" if unknown)."""
    return _CATEGORY_TO_PARENT.get(category, "Financial & Other")
