"""Static MCC -> category reference table.

Each entry carries a default category, how much the code alone tells us
(confidence) and whether the merchant type is known to span several
categories. The table is plain module data, loaded once at import time.
"""

from __future__ import annotations

from dataclasses import dataclass

from cardrewards.categorization.categories import UNCATEGORIZED
from cardrewards.schemas.categorization import CategoryResult

UNKNOWN_CODE_CONFIDENCE = 0.5
REVIEW_THRESHOLD = 0.75


@dataclass(frozen=True)
class CategoryMapping:
    """Default categorization for one MCC."""

    category: str
    confidence: float
    description: str
    needs_review: bool = False
    is_multi_category: bool = False


def _m(category: str, confidence: float, description: str, multi: bool = False) -> CategoryMapping:
    return CategoryMapping(
        category=category,
        confidence=confidence,
        description=description,
        needs_review=multi or confidence < REVIEW_THRESHOLD,
        is_multi_category=multi,
    )


MCC_CATEGORY_TABLE: dict[str, CategoryMapping] = {
    # Groceries
    "5411": _m("Groceries", 0.95, "Grocery Stores, Supermarkets"),
    "5422": _m("Groceries", 0.9, "Freezer and Locker Meat Provisioners"),
    "5441": _m("Groceries", 0.7, "Candy, Nut, and Confectionery Stores"),
    "5451": _m("Groceries", 0.9, "Dairy Products Stores"),
    "5462": _m("Groceries", 0.8, "Bakeries"),
    "5499": _m("Groceries", 0.8, "Miscellaneous Food Stores"),
    "9751": _m("Groceries", 0.9, "Supermarkets (UK)"),
    "5300": _m("Groceries", 0.6, "Wholesale Clubs", multi=True),
    # Dining
    "5811": _m("Dining Out", 0.8, "Caterers"),
    "5812": _m("Dining Out", 0.9, "Eating Places, Restaurants"),
    "5813": _m("Dining Out", 0.85, "Drinking Places, Bars"),
    "5814": _m("Fast Food & Takeout", 0.9, "Fast Food Restaurants"),
    # Transportation
    "4111": _m("Transportation", 0.95, "Local and Suburban Commuter Transport"),
    "4112": _m("Transportation", 0.8, "Passenger Railways"),
    "4121": _m("Transportation", 0.9, "Taxicabs and Rideshare"),
    "4131": _m("Transportation", 0.9, "Bus Lines"),
    "4784": _m("Transportation", 0.95, "Tolls and Bridge Fees"),
    "4789": _m("Transportation", 0.8, "Transportation Services"),
    "5533": _m("Transportation", 0.8, "Automotive Parts and Accessories Stores"),
    "5541": _m("Transportation", 0.75, "Service Stations"),
    "5542": _m("Transportation", 0.85, "Automated Fuel Dispensers"),
    "7523": _m("Transportation", 0.9, "Parking Lots and Garages"),
    "7538": _m("Transportation", 0.8, "Automotive Service Shops"),
    # Travel
    "4411": _m("Travel & Vacation", 0.9, "Cruise Lines"),
    "4511": _m("Travel & Vacation", 0.95, "Airlines, Air Carriers"),
    "4722": _m("Travel & Vacation", 0.9, "Travel Agencies and Tour Operators"),
    "7011": _m("Travel & Vacation", 0.9, "Hotels, Motels, Resorts"),
    "7512": _m("Travel & Vacation", 0.8, "Car Rental Agencies"),
    # Utilities / housing
    "4814": _m("Utilities", 0.9, "Telecommunication Services"),
    "4899": _m("Utilities", 0.7, "Cable, Satellite and Other Pay Television"),
    "4900": _m("Utilities", 0.95, "Utilities - Electric, Gas, Water"),
    "6513": _m("Housing", 0.85, "Real Estate Agents and Managers - Rentals"),
    # Healthcare
    "5122": _m("Healthcare", 0.8, "Drugs, Drug Proprietaries"),
    "5912": _m("Healthcare", 0.7, "Drug Stores and Pharmacies", multi=True),
    "8011": _m("Healthcare", 0.95, "Doctors"),
    "8021": _m("Healthcare", 0.95, "Dentists and Orthodontists"),
    "8042": _m("Healthcare", 0.9, "Optometrists"),
    "8062": _m("Healthcare", 0.95, "Hospitals"),
    "8071": _m("Healthcare", 0.9, "Medical and Dental Laboratories"),
    "8099": _m("Healthcare", 0.9, "Medical Services"),
    # Entertainment
    "5815": _m("Entertainment", 0.7, "Digital Goods Media"),
    "7832": _m("Entertainment", 0.95, "Motion Picture Theaters"),
    "7922": _m("Entertainment", 0.9, "Theatrical Producers, Ticket Agencies"),
    "7991": _m("Entertainment", 0.8, "Tourist Attractions and Exhibits"),
    "7993": _m("Entertainment", 0.8, "Video Amusement Game Supplies"),
    "7994": _m("Entertainment", 0.8, "Video Game Arcades"),
    "7996": _m("Entertainment", 0.9, "Amusement Parks, Carnivals"),
    # Hobbies & recreation
    "5733": _m("Hobbies & Recreation", 0.85, "Music Stores"),
    "5941": _m("Hobbies & Recreation", 0.75, "Sporting Goods Stores"),
    "5942": _m("Hobbies & Recreation", 0.75, "Book Stores"),
    "5945": _m("Hobbies & Recreation", 0.8, "Hobby, Toy, and Game Shops"),
    "5946": _m("Hobbies & Recreation", 0.8, "Camera and Photographic Supply Stores"),
    "5970": _m("Hobbies & Recreation", 0.85, "Artist's Supply and Craft Shops"),
    "7998": _m("Hobbies & Recreation", 0.8, "Aquariums, Seaquariums"),
    "7999": _m("Hobbies & Recreation", 0.7, "Recreation Services"),
    # Home
    "5310": _m("Home Essentials", 0.6, "Discount Stores", multi=True),
    "5311": _m("Home Essentials", 0.6, "Department Stores", multi=True),
    "5331": _m("Home Essentials", 0.65, "Variety Stores", multi=True),
    "5399": _m("Home Essentials", 0.6, "Miscellaneous General Merchandise", multi=True),
    "5722": _m("Home Essentials", 0.85, "Household Appliance Stores"),
    "5732": _m("Home Essentials", 0.7, "Electronics Stores"),
    "5712": _m("Furniture & Decor", 0.95, "Furniture and Home Furnishings Stores"),
    "5714": _m("Furniture & Decor", 0.9, "Drapery and Upholstery Stores"),
    "5719": _m("Furniture & Decor", 0.85, "Miscellaneous Home Furnishing Stores"),
    "1520": _m("Home Improvement", 0.85, "General Contractors"),
    "1711": _m("Home Improvement", 0.9, "Heating, Plumbing, A/C Contractors"),
    "5200": _m("Home Improvement", 0.9, "Home Supply Warehouse Stores"),
    "5211": _m("Home Improvement", 0.9, "Lumber and Building Materials Stores"),
    "5251": _m("Home Improvement", 0.9, "Hardware Stores"),
    "5261": _m("Home Improvement", 0.85, "Nurseries, Lawn and Garden Supply"),
    "0742": _m("Pet Care", 0.95, "Veterinary Services"),
    "5995": _m("Pet Care", 0.95, "Pet Shops, Pet Food and Supplies"),
    # Personal care
    "5611": _m("Clothing & Shoes", 0.95, "Men's and Boys' Clothing Stores"),
    "5621": _m("Clothing & Shoes", 0.95, "Women's Ready-To-Wear Stores"),
    "5631": _m("Clothing & Shoes", 0.9, "Women's Accessory Shops"),
    "5641": _m("Clothing & Shoes", 0.9, "Children's and Infants' Wear Stores"),
    "5651": _m("Clothing & Shoes", 0.9, "Family Clothing Stores"),
    "5655": _m("Clothing & Shoes", 0.85, "Sports and Riding Apparel Stores"),
    "5661": _m("Clothing & Shoes", 0.95, "Shoe Stores"),
    "5691": _m("Clothing & Shoes", 0.95, "Men's and Women's Clothing Stores"),
    "5699": _m("Clothing & Shoes", 0.85, "Miscellaneous Apparel and Accessory Shops"),
    "5944": _m("Clothing & Shoes", 0.8, "Jewelry Stores"),
    "5948": _m("Clothing & Shoes", 0.8, "Luggage and Leather Goods Stores"),
    "5977": _m("Beauty & Personal Care", 0.95, "Cosmetic Stores"),
    "7230": _m("Beauty & Personal Care", 0.95, "Beauty and Barber Shops"),
    "7297": _m("Beauty & Personal Care", 0.85, "Massage Parlors"),
    "7298": _m("Beauty & Personal Care", 0.9, "Health and Beauty Spas"),
    "7941": _m("Gym & Fitness", 0.75, "Sports Clubs and Promoters"),
    "7997": _m("Gym & Fitness", 0.85, "Membership Clubs, Gyms"),
    # Work & education
    "5943": _m("Education", 0.6, "Stationery and Office Supply Stores"),
    "8211": _m("Education", 0.95, "Elementary and Secondary Schools"),
    "8220": _m("Education", 0.95, "Colleges and Universities"),
    "8241": _m("Education", 0.9, "Correspondence Schools"),
    "8244": _m("Education", 0.9, "Business and Secretarial Schools"),
    "8249": _m("Education", 0.9, "Trade and Vocational Schools"),
    "8299": _m("Education", 0.85, "Schools and Educational Services"),
    "8641": _m("Professional Development", 0.7, "Civic and Professional Associations"),
    "4215": _m("Work Expenses", 0.7, "Courier Services"),
    "5045": _m("Work Expenses", 0.6, "Computers and Peripheral Equipment"),
    "5111": _m("Work Expenses", 0.8, "Stationery and Office Supplies"),
    "7399": _m("Work Expenses", 0.7, "Business Services"),
    # Financial & other
    "4816": _m("Subscriptions & Memberships", 0.8, "Computer Network Services"),
    "5817": _m("Subscriptions & Memberships", 0.8, "Digital Goods Applications"),
    "5818": _m("Subscriptions & Memberships", 0.75, "Digital Goods Large Merchant"),
    "5968": _m("Subscriptions & Memberships", 0.9, "Continuity/Subscription Merchants"),
    "6012": _m("Financial Services", 0.85, "Financial Institutions"),
    "6051": _m("Financial Services", 0.8, "Quasi Cash"),
    "6211": _m("Financial Services", 0.9, "Security Brokers and Dealers"),
    "6540": _m("Financial Services", 0.8, "Stored Value Card Load"),
    "5960": _m("Insurance", 0.9, "Direct Marketing Insurance Services"),
    "6300": _m("Insurance", 0.95, "Insurance Sales and Premiums"),
    "5947": _m("Gifts & Donations", 0.8, "Gift, Card, Novelty and Souvenir Shops"),
    "5992": _m("Gifts & Donations", 0.85, "Florists"),
    "8398": _m("Gifts & Donations", 0.95, "Charitable Organizations"),
    "8661": _m("Gifts & Donations", 0.9, "Religious Organizations"),
    "6010": _m("Cash & ATM", 0.95, "Manual Cash Disbursements"),
    "6011": _m("Cash & ATM", 0.95, "Automated Cash Disbursements"),
    "9211": _m("Fees & Charges", 0.9, "Court Costs"),
    "9222": _m("Fees & Charges", 0.9, "Fines"),
    "9223": _m("Fees & Charges", 0.9, "Bail and Bond Payments"),
    "9311": _m("Fees & Charges", 0.9, "Tax Payments"),
    "9399": _m("Fees & Charges", 0.8, "Government Services"),
}

# Coarse buckets for codes missing from the table, keyed by leading digit.
_LEADING_DIGIT_CATEGORIES: dict[str, str] = {
    "0": "Home Improvement",
    "1": "Home Improvement",
    "2": UNCATEGORIZED,
    "3": "Travel & Vacation",
    "4": "Transportation",
    "5": "Home Essentials",
    "6": "Financial Services",
    "7": "Entertainment",
    "8": "Healthcare",
    "9": "Fees & Charges",
}


def normalize_mcc(mcc: str | None) -> str | None:
    """Return a 4-digit MCC or None when the value is missing or malformed."""
    if mcc is None:
        return None
    code = str(mcc).strip()
    if not code.isdigit() or len(code) > 4:
        return None
    return code.zfill(4)


def get_mapping(mcc: str | None) -> CategoryMapping | None:
    code = normalize_mcc(mcc)
    return MCC_CATEGORY_TABLE.get(code) if code else None


def category_result_from_mcc(mcc: str | None) -> CategoryResult:
    """Seed a categorization from the MCC alone.

    Never raises: missing or malformed codes degrade to Uncategorized with
    zero confidence, unknown codes to a leading-digit bucket.
    """
    code = normalize_mcc(mcc)
    if code is None:
        return CategoryResult(
            category=UNCATEGORIZED,
            confidence=0.0,
            reason="No merchant category code",
            needs_review=True,
        )

    mapping = MCC_CATEGORY_TABLE.get(code)
    if mapping is not None:
        return CategoryResult(
            category=mapping.category,
            confidence=mapping.confidence,
            reason=f"MCC {code}: {mapping.description}",
            needs_review=mapping.needs_review,
            is_multi_category=mapping.is_multi_category,
        )

    category = _LEADING_DIGIT_CATEGORIES.get(code[0], UNCATEGORIZED)
    return CategoryResult(
        category=category,
        confidence=UNKNOWN_CODE_CONFIDENCE,
        reason=f"MCC {code}: unmapped code, guessed from code range",
        needs_review=True,
    )
