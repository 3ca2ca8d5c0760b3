"""Citibank card strategies."""

from dataclasses import dataclass, field
from decimal import Decimal

from cardrewards.rewards.ledger import LedgerState
from cardrewards.rewards.strategies.base import BlockFormula
from cardrewards.schemas.rewards import PointsBreakdown, StatementContext
from cardrewards.schemas.transaction import TransactionSnapshot

# Airlines (3000-3999) and other travel are excluded from the online bonus
REWARDS_ONLINE_EXCLUDED_MCCS = frozenset(
    {str(code) for code in range(3000, 4000)}
    | {"4511", "7512", "7011", "4111", "4112", "4789", "4411", "4722", "4723", "5962", "7012"}
)

# Department stores and apparel earn the bonus in store as well
REWARDS_INCLUDED_MCCS = frozenset(
    {"5311", "5611", "5621", "5631", "5641", "5651", "5655", "5661", "5691", "5699", "5948"}
)


@dataclass(frozen=True)
class CitibankRewardsStrategy:
    """Bonus on online spend outside travel, and on department stores and apparel anywhere."""

    name: str = "Citibank Rewards Visa Signature"
    formula: BlockFormula = field(
        default_factory=lambda: BlockFormula(
            Decimal("1"), Decimal("0.4"), Decimal("3.6"), monthly_bonus_cap=4000
        )
    )

    def eligible(self, tx: TransactionSnapshot, ctx: StatementContext) -> bool:
        if tx.mcc in REWARDS_INCLUDED_MCCS:
            return True
        return tx.is_online and tx.mcc not in REWARDS_ONLINE_EXCLUDED_MCCS

    def compute(
        self,
        tx: TransactionSnapshot,
        ctx: StatementContext,
        ledger: LedgerState,
    ) -> PointsBreakdown:
        eligible = self.eligible(tx, ctx)
        if tx.mcc in REWARDS_INCLUDED_MCCS:
            message = "Department store or apparel purchase earns bonus points"
        elif eligible:
            message = "Online purchase earns bonus points"
        elif tx.is_online:
            message = "No bonus points (travel merchants are excluded online)"
        else:
            message = "No bonus points (in-store purchase outside department stores)"
        return self.formula.compute(tx.points_amount, eligible, ledger, self.name, [message])
