"""UOB card strategies."""

from dataclasses import dataclass, field
from decimal import Decimal

from cardrewards.rewards.ledger import LedgerState
from cardrewards.rewards.strategies.base import BlockFormula
from cardrewards.schemas.rewards import PointsBreakdown, StatementContext
from cardrewards.schemas.transaction import TransactionSnapshot

FIVE = Decimal("5")
BASE_RATE = Decimal("0.4")
BONUS_RATE = Decimal("3.6")

# Online purchases earn the bonus only in these MCCs
PREFERRED_PLATINUM_ONLINE_MCCS = frozenset(
    {
        "4816", "5262", "5306", "5309", "5310", "5311", "5331", "5399",
        "5611", "5621", "5631", "5641", "5651", "5661", "5691", "5699",
        "5732", "5733", "5734", "5735", "5912", "5942", "5944", "5945",
        "5946", "5947", "5948", "5949", "5964", "5965", "5966", "5967",
        "5968", "5969", "5970", "5992", "5999", "5811", "5812", "5814",
        "5333", "5411", "5441", "5462", "5499", "8012", "9751", "7278",
        "7832", "7841", "7922", "7991", "7996", "7998", "7999",
    }
)

LADYS_SOLITAIRE_CATEGORY_MCCS: dict[str, frozenset[str]] = {
    "Beauty & Wellness": frozenset({"5912", "5977", "7230", "7231", "7297", "7298"}),
    "Dining": frozenset({"5811", "5812", "5814", "5499"}),
    "Entertainment": frozenset({"5813", "7832", "7922"}),
    "Family": frozenset({"5411", "5641"}),
    "Fashion": frozenset(
        {"5311", "5611", "5621", "5631", "5651", "5655", "5661", "5691", "5699", "5948"}
    ),
    "Transport": frozenset({"4111", "4121", "4789", "5541", "5542"}),
    "Travel": frozenset({str(code) for code in range(3000, 3300)} | {"7011", "7512"}),
}

VISA_SIGNATURE_HOME_CURRENCY = "SGD"
VISA_SIGNATURE_MIN_FOREIGN_SPEND = Decimal("1000")


@dataclass(frozen=True)
class UOBPreferredPlatinumStrategy:
    """Bonus on contactless payments and on online spend in selected MCCs."""

    name: str = "UOB Preferred Visa Platinum"
    formula: BlockFormula = field(
        default_factory=lambda: BlockFormula(FIVE, BASE_RATE, BONUS_RATE, monthly_bonus_cap=4000)
    )

    def eligible(self, tx: TransactionSnapshot, ctx: StatementContext) -> bool:
        """Contactless, or online in one of the eligible MCCs."""
        if tx.is_contactless:
            return True
        return tx.is_online and tx.mcc in PREFERRED_PLATINUM_ONLINE_MCCS

    def compute(
        self,
        tx: TransactionSnapshot,
        ctx: StatementContext,
        ledger: LedgerState,
    ) -> PointsBreakdown:
        eligible = self.eligible(tx, ctx)
        if tx.is_contactless:
            message = "Contactless payment earns bonus points"
        elif eligible:
            message = "Online purchase in an eligible category earns bonus points"
        elif tx.is_online:
            message = "No bonus points (merchant category not eligible online)"
        else:
            message = "No bonus points (only contactless or eligible online payments)"
        return self.formula.compute(tx.points_amount, eligible, ledger, self.name, [message])


@dataclass(frozen=True)
class UOBVisaSignatureStrategy:
    """Bonus on foreign currency spend once a statement's foreign spend reaches 1000.

    A single home currency transaction in the statement forfeits the bonus.
    Besides the monthly bonus cap, base + bonus of one transaction never
    exceed 8000 points, bonus points kept first.
    """

    name: str = "UOB Visa Signature"
    formula: BlockFormula = field(
        default_factory=lambda: BlockFormula(
            FIVE, BASE_RATE, BONUS_RATE, monthly_bonus_cap=8000, total_cap=8000
        )
    )

    def foreign_spend_with(self, tx: TransactionSnapshot, ctx: StatementContext) -> Decimal:
        """Statement foreign spend including this transaction."""
        return ctx.spend_excluding_currency(VISA_SIGNATURE_HOME_CURRENCY) + (tx.points_amount or 0)

    def eligible(self, tx: TransactionSnapshot, ctx: StatementContext) -> bool:
        """Foreign currency, no SGD spend this statement, and at least 1000
        foreign spend counting this transaction.
        """
        if tx.currency == VISA_SIGNATURE_HOME_CURRENCY:
            return False
        if ctx.has_currency(VISA_SIGNATURE_HOME_CURRENCY):
            return False
        return self.foreign_spend_with(tx, ctx) >= VISA_SIGNATURE_MIN_FOREIGN_SPEND

    def compute(
        self,
        tx: TransactionSnapshot,
        ctx: StatementContext,
        ledger: LedgerState,
    ) -> PointsBreakdown:
        eligible = self.eligible(tx, ctx)
        if tx.currency == VISA_SIGNATURE_HOME_CURRENCY:
            message = f"No bonus points ({VISA_SIGNATURE_HOME_CURRENCY} currency)"
        elif ctx.has_currency(VISA_SIGNATURE_HOME_CURRENCY):
            message = f"No bonus points ({VISA_SIGNATURE_HOME_CURRENCY} transactions present this statement)"
        elif eligible:
            message = "Minimum foreign spend reached"
        else:
            shortfall = VISA_SIGNATURE_MIN_FOREIGN_SPEND - self.foreign_spend_with(tx, ctx)
            message = f"Spend {shortfall:.2f} more in foreign currency to unlock bonus points"
        return self.formula.compute(tx.points_amount, eligible, ledger, self.name, [message])


@dataclass(frozen=True)
class UOBLadysSolitaireStrategy:
    """Bonus on spend in the cardholder's selected categories.

    Selected categories come from the instrument; every selected category
    draws on the same monthly cap.
    """

    name: str = "UOB Lady's Solitaire"
    formula: BlockFormula = field(
        default_factory=lambda: BlockFormula(FIVE, BASE_RATE, BONUS_RATE, monthly_bonus_cap=7200)
    )

    def matching_category(self, tx: TransactionSnapshot, ctx: StatementContext) -> str | None:
        """First selected category whose MCCs include the transaction's."""
        if not tx.mcc:
            return None
        for category in ctx.instrument.selected_categories:
            if tx.mcc in LADYS_SOLITAIRE_CATEGORY_MCCS.get(category, frozenset()):
                return category
        return None

    def eligible(self, tx: TransactionSnapshot, ctx: StatementContext) -> bool:
        return self.matching_category(tx, ctx) is not None

    def compute(
        self,
        tx: TransactionSnapshot,
        ctx: StatementContext,
        ledger: LedgerState,
    ) -> PointsBreakdown:
        category = self.matching_category(tx, ctx)
        if category is None:
            message = "No bonus points (transaction not in selected categories)"
        else:
            message = f"Eligible in selected category {category}"
        return self.formula.compute(tx.points_amount, category is not None, ledger, self.name, [message])
