"""Generic rule engine for cards without an issuer-specific strategy."""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from cardrewards.rewards.ledger import LedgerState
from cardrewards.rewards.matcher import RuleMatch, RuleMatcher
from cardrewards.rewards.rounding import points_for
from cardrewards.rewards.strategies.base import (
    CAP_REACHED_MESSAGE,
    apply_total_cap,
    clamp_to_monthly_cap,
)
from cardrewards.schemas.rewards import PointsBreakdown, StatementContext
from cardrewards.schemas.transaction import TransactionSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenericRuleStrategy:
    """Points from the instrument's declarative rules.

    Base points are amount x base rate x the first matching rule's multiplier
    (1 when nothing matches). Bonus points come from the matched rule's
    `bonus_multiplier` and its first applicable tier, and are clamped by the
    rule's monthly cap when it has one.
    """

    matcher: RuleMatcher = field(default_factory=RuleMatcher)
    name: str = "generic"

    def match(self, tx: TransactionSnapshot, ctx: StatementContext) -> RuleMatch:
        return self.matcher.match(tx, ctx.instrument.reward_rules, ctx)

    def eligible(self, tx: TransactionSnapshot, ctx: StatementContext) -> bool:
        """A rule matched and it carries a tier or a bonus multiplier."""
        match = self.match(tx, ctx)
        if match.rule is None:
            return False
        return match.tier is not None or match.rule.bonus_multiplier > 0

    def compute(
        self,
        tx: TransactionSnapshot,
        ctx: StatementContext,
        ledger: LedgerState,
    ) -> PointsBreakdown:
        """Price the transaction with the first matching rule.

        Raises:
            ValueError: The transaction has no amount
        """
        amount = tx.points_amount
        if amount is None:
            raise ValueError("transaction has no amount")

        match = self.match(tx, ctx)
        rule = match.rule
        messages: list[str] = []
        if match.skipped_for_min_spend:
            messages.append("Monthly minimum spend not met for a bonus rule")

        if rule is None:
            base_points = points_for(amount, ctx.instrument.base_rate * match.multiplier)
            return PointsBreakdown(
                base_points=base_points,
                total_points=base_points,
                strategy=self.name,
                provisional=ledger.provisional,
                messages=messages,
            )

        def rule_points(multiplier: Decimal) -> int:
            return points_for(
                amount,
                multiplier,
                rule.block_size,
                rule.amount_rounding,
                rule.points_rounding,
            )

        base_points = rule_points(ctx.instrument.base_rate * match.multiplier)
        candidate = 0
        if match.tier is not None:
            candidate += rule_points(match.tier.multiplier)
        if rule.bonus_multiplier > 0:
            candidate += rule_points(rule.bonus_multiplier)

        bonus_points = candidate
        remaining = None
        if rule.monthly_cap is not None:
            bonus_points, remaining = clamp_to_monthly_cap(
                candidate, ledger.used_bonus_points, rule.monthly_cap
            )
            if bonus_points < candidate:
                messages.append(CAP_REACHED_MESSAGE)
                logger.info(
                    "Monthly bonus cap reached",
                    extra={
                        "strategy": self.name,
                        "rule": rule.name,
                        "requested": candidate,
                        "granted": bonus_points,
                        "cap": rule.monthly_cap,
                    },
                )

        if rule.total_cap is not None:
            base_points, bonus_points = apply_total_cap(base_points, bonus_points, rule.total_cap)

        return PointsBreakdown(
            base_points=base_points,
            bonus_points=bonus_points,
            total_points=base_points + bonus_points,
            remaining_monthly_bonus_points=remaining,
            applied_rule=rule.name,
            applied_tier=match.tier.name if match.tier else None,
            strategy=self.name,
            provisional=ledger.provisional,
            messages=messages,
        )
