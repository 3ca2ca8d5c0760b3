"""First-match evaluation of declarative reward rules."""

import logging
from dataclasses import dataclass
from decimal import Decimal

from cardrewards.schemas.rewards import BonusTier, RewardRule, StatementContext
from cardrewards.schemas.transaction import TransactionSnapshot

logger = logging.getLogger(__name__)

BASE_MULTIPLIER = Decimal("1")


@dataclass(frozen=True)
class RuleMatch:
    """Outcome of matching: the multiplier plus the rule and tier that produced it."""

    multiplier: Decimal
    rule: RewardRule | None = None
    tier: BonusTier | None = None
    skipped_for_min_spend: bool = False


class RuleMatcher:
    """Evaluates an instrument's rules in declaration order.

    The first rule whose condition holds wins; later rules are never
    combined with it. Without a match the base multiplier of 1 applies.
    """

    def match(
        self,
        tx: TransactionSnapshot,
        rules: list[RewardRule],
        context: StatementContext | None = None,
    ) -> RuleMatch:
        amount = tx.points_amount
        skipped_for_min_spend = False

        for index, rule in enumerate(rules):
            if not rule.enabled:
                continue
            if rule.condition is None:
                logger.warning(
                    "Reward rule has no condition and never applies",
                    extra={"error_code": "RULE_001", "rule": rule.name, "rule_index": index},
                )
                continue
            if not self._qualifies(rule, amount):
                continue
            if not rule.condition.evaluate(tx, context):
                continue

            spend = context.spend_to_date if context else Decimal("0")
            if rule.monthly_min_spend is not None and spend < rule.monthly_min_spend:
                skipped_for_min_spend = True
                logger.debug(
                    "Rule skipped, monthly minimum spend not met",
                    extra={"rule": rule.name, "required": str(rule.monthly_min_spend), "spend": str(spend)},
                )
                continue

            tier = self.select_tier(tx, rule, context)
            return RuleMatch(
                multiplier=rule.multiplier,
                rule=rule,
                tier=tier,
                skipped_for_min_spend=skipped_for_min_spend,
            )

        return RuleMatch(multiplier=BASE_MULTIPLIER, skipped_for_min_spend=skipped_for_min_spend)

    def select_tier(
        self,
        tx: TransactionSnapshot,
        rule: RewardRule,
        context: StatementContext | None = None,
    ) -> BonusTier | None:
        """First tier (declaration order) whose range contains the transaction."""
        amount = tx.points_amount
        if amount is None:
            return None
        for tier in rule.bonus_tiers:
            if tier.applies(tx, amount, context):
                return tier
        return None

    @staticmethod
    def _qualifies(rule: RewardRule, amount: Decimal | None) -> bool:
        if rule.min_amount is None and rule.max_amount is None:
            return True
        if amount is None:
            return False
        if rule.min_amount is not None and amount < rule.min_amount:
            return False
        if rule.max_amount is not None and amount > rule.max_amount:
            return False
        return True
