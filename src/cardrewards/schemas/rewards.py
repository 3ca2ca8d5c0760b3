"""Reward configuration and result schemas.

Reward rule conditions are a tagged union keyed by `type`: each kind carries
exactly the fields it needs and knows how to evaluate itself against a
transaction and its statement context.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from cardrewards.core.exceptions import RuleConfigurationError
from cardrewards.schemas.transaction import TransactionSnapshot

logger = logging.getLogger(__name__)

AmountRounding = Literal["none", "floor", "ceiling", "nearest", "floor5"]
PointsRounding = Literal["floor", "ceiling", "nearest"]
Operation = Literal["include", "exclude"]


def _apply_operation(hit: bool, operation: str) -> bool:
    return hit if operation == "include" else not hit


class MccCondition(BaseModel):
    """Exact match of the transaction MCC against a list of codes."""

    type: Literal["mcc"] = "mcc"
    codes: list[str]
    operation: Operation = "include"

    def evaluate(self, tx: TransactionSnapshot, ctx: "StatementContext | None") -> bool:
        if not tx.mcc:
            # No MCC can't be shown to be inside or outside the list.
            return False
        return _apply_operation(tx.mcc in self.codes, self.operation)


class MerchantCondition(BaseModel):
    """Case-insensitive substring match; any keyword matching is enough."""

    type: Literal["merchant"] = "merchant"
    keywords: list[str]
    operation: Operation = "include"

    @field_validator("keywords", mode="before")
    @classmethod
    def wrap_single_keyword(cls, v: Any) -> Any:
        return [v] if isinstance(v, str) else v

    def evaluate(self, tx: TransactionSnapshot, ctx: "StatementContext | None") -> bool:
        name = (tx.merchant_name or "").lower()
        if not name:
            return False
        hit = any(keyword.lower() in name for keyword in self.keywords if keyword)
        return _apply_operation(hit, self.operation)


class CurrencyCondition(BaseModel):
    type: Literal["currency"] = "currency"
    currencies: list[str]
    operation: Operation = "include"

    @field_validator("currencies", mode="before")
    @classmethod
    def normalize_currencies(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = [v]
        return [c.strip().upper() for c in v]

    def evaluate(self, tx: TransactionSnapshot, ctx: "StatementContext | None") -> bool:
        return _apply_operation(tx.currency in self.currencies, self.operation)


class SpendThresholdCondition(BaseModel):
    """Statement-to-date spend within an optional [min_spend, max_spend] range."""

    type: Literal["spend_threshold"] = "spend_threshold"
    min_spend: Decimal | None = None
    max_spend: Decimal | None = None
    include_current: bool = False

    def evaluate(self, tx: TransactionSnapshot, ctx: "StatementContext | None") -> bool:
        spend = ctx.spend_to_date if ctx else Decimal("0")
        if self.include_current and tx.points_amount is not None:
            spend += tx.points_amount
        if self.min_spend is not None and spend < self.min_spend:
            return False
        if self.max_spend is not None and spend > self.max_spend:
            return False
        return True


class TransactionTypeCondition(BaseModel):
    """Online / contactless flags. An unset flag is unconstrained."""

    type: Literal["transaction_type"] = "transaction_type"
    online: bool | None = None
    contactless: bool | None = None

    def evaluate(self, tx: TransactionSnapshot, ctx: "StatementContext | None") -> bool:
        if self.online is not None and tx.is_online != self.online:
            return False
        if self.contactless is not None and tx.is_contactless != self.contactless:
            return False
        return True


class AmountCondition(BaseModel):
    type: Literal["amount"] = "amount"
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None

    def evaluate(self, tx: TransactionSnapshot, ctx: "StatementContext | None") -> bool:
        amount = tx.points_amount
        if amount is None:
            return False
        if self.min_amount is not None and amount < self.min_amount:
            return False
        if self.max_amount is not None and amount > self.max_amount:
            return False
        return True


class CompoundCondition(BaseModel):
    """AND ("all") / OR ("any") combination of nested conditions."""

    type: Literal["compound"] = "compound"
    operator: Literal["all", "any"] = "all"
    conditions: list["Condition"] = Field(default_factory=list)

    def evaluate(self, tx: TransactionSnapshot, ctx: "StatementContext | None") -> bool:
        if not self.conditions:
            return False
        results = (condition.evaluate(tx, ctx) for condition in self.conditions)
        return all(results) if self.operator == "all" else any(results)


Condition = Annotated[
    Union[
        MccCondition,
        MerchantCondition,
        CurrencyCondition,
        SpendThresholdCondition,
        TransactionTypeCondition,
        AmountCondition,
        CompoundCondition,
    ],
    Field(discriminator="type"),
]

CompoundCondition.model_rebuild()


class BonusTier(BaseModel):
    """Sub-range of a rule with its own bonus multiplier."""

    name: str | None = None
    multiplier: Decimal
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    min_spend: Decimal | None = None
    max_spend: Decimal | None = None
    condition: Condition | None = None

    def applies(
        self,
        tx: TransactionSnapshot,
        amount: Decimal,
        ctx: "StatementContext | None",
    ) -> bool:
        if self.min_amount is not None and amount < self.min_amount:
            return False
        if self.max_amount is not None and amount > self.max_amount:
            return False
        spend = ctx.spend_to_date if ctx else Decimal("0")
        if self.min_spend is not None and spend < self.min_spend:
            return False
        if self.max_spend is not None and spend > self.max_spend:
            return False
        if self.condition is not None and not self.condition.evaluate(tx, ctx):
            return False
        return True


class RewardRule(BaseModel):
    """Declarative reward rule: a condition plus the points it earns.

    Rules are evaluated in declaration order; the first match wins. A rule
    without a condition never applies.
    """

    name: str = "rule"
    condition: Condition | None = None
    multiplier: Decimal = Decimal("1")
    bonus_multiplier: Decimal = Decimal("0")
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    monthly_min_spend: Decimal | None = None
    bonus_tiers: list[BonusTier] = Field(default_factory=list)
    monthly_cap: int | None = Field(None, ge=0)
    total_cap: int | None = Field(None, ge=0)
    amount_rounding: AmountRounding = "none"
    points_rounding: PointsRounding = "nearest"
    block_size: Decimal = Field(Decimal("1"), gt=0)
    enabled: bool = True

    @classmethod
    def from_config(cls, raw: Any) -> "RewardRule":
        """Parse a stored rule.

        Raises:
            RuleConfigurationError: The rule does not validate
        """
        try:
            return cls.model_validate(raw)
        except PydanticValidationError as exc:
            name = raw.get("name") if isinstance(raw, dict) else None
            raise RuleConfigurationError({"rule": name, "errors": exc.error_count()}) from exc


class PaymentInstrument(BaseModel):
    """A card or cash payment method with its reward configuration."""

    id: UUID | None = None
    name: str = ""
    kind: Literal["cash", "card"] = "card"
    issuer: str = ""
    product: str = ""
    currency: str = "SGD"
    base_rate: Decimal = Decimal("1")
    reward_rules: list[RewardRule] = Field(default_factory=list)
    statement_day: int | None = Field(None, ge=1, le=31)
    use_statement_month: bool = False
    selected_categories: list[str] = Field(default_factory=list)
    points_currency: str = "points"

    @field_validator("kind", mode="before")
    @classmethod
    def normalize_kind(cls, v: Any) -> Any:
        if isinstance(v, str) and v.lower() in ("credit_card", "debit_card", "credit", "debit"):
            return "card"
        return v

    @field_validator("reward_rules", mode="before")
    @classmethod
    def drop_malformed_rules(cls, v: Any) -> Any:
        """Skip rules that cannot be parsed instead of rejecting the instrument."""
        if not isinstance(v, list):
            return v
        rules = []
        for index, raw in enumerate(v):
            if isinstance(raw, RewardRule):
                rules.append(raw)
                continue
            try:
                rules.append(RewardRule.from_config(raw))
            except RuleConfigurationError as exc:
                logger.warning(
                    "Ignoring malformed reward rule",
                    extra={"error_code": exc.error_code, "rule_index": index, **exc.details},
                )
        return rules

    @property
    def is_cash(self) -> bool:
        return self.kind == "cash"


class StatementPeriod(BaseModel):
    """Inclusive date range of one billing cycle."""

    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


class StatementContext(BaseModel):
    """Aggregates of the instrument's statement up to the current transaction."""

    instrument: PaymentInstrument
    period: StatementPeriod
    spend_to_date: Decimal = Decimal("0")
    spend_by_currency: dict[str, Decimal] = Field(default_factory=dict)
    transaction_count: int = 0

    def has_currency(self, currency: str) -> bool:
        return self.spend_by_currency.get(currency.upper(), Decimal("0")) > 0

    def spend_excluding_currency(self, currency: str) -> Decimal:
        currency = currency.upper()
        return sum(
            (amount for code, amount in self.spend_by_currency.items() if code != currency),
            Decimal("0"),
        )


class PointsBreakdown(BaseModel):
    """Result of a reward calculation."""

    base_points: int = 0
    bonus_points: int = 0
    total_points: int = 0
    remaining_monthly_bonus_points: int | None = None
    applied_rule: str | None = None
    applied_tier: str | None = None
    strategy: str | None = None
    provisional: bool = False
    fallback: bool = False
    ledger_recorded: bool = False
    messages: list[str] = Field(default_factory=list)

    @classmethod
    def zero(cls, **kwargs: Any) -> "PointsBreakdown":
        return cls(base_points=0, bonus_points=0, total_points=0, **kwargs)


class LedgerEntry(BaseModel):
    """Append-only bonus points movement."""

    model_config = ConfigDict(frozen=True)

    transaction_id: UUID
    instrument_id: UUID
    bonus_points: int
    occurred_at: datetime
    created_at: datetime | None = None


class SimulationRequest(BaseModel):
    """Hypothetical transaction used to preview points."""

    instrument_id: UUID
    amount: Decimal = Field(..., gt=0)
    currency: str | None = Field(None, description="Defaults to the home currency")
    mcc: str | None = None
    merchant_name: str | None = None
    is_online: bool = False
    is_contactless: bool = False
    as_of: datetime | None = None


class RecomputeSummary(BaseModel):
    """Totals after rebuilding an instrument's points and ledger."""

    instrument_id: UUID
    transactions: int = 0
    base_points: int = 0
    bonus_points: int = 0
    total_points: int = 0
    provisional: int = Field(0, description="Transactions priced without a ledger read")
