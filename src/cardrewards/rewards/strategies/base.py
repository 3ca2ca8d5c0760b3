"""Shared pieces of issuer-specific reward strategies.

A strategy decides bonus eligibility for one card product and turns a
transaction into a `PointsBreakdown`. Cards that earn per block of spend
(UOB, Citibank) share `BlockFormula`; the strategies only differ in
eligibility and caps.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from cardrewards.rewards.ledger import LedgerState
from cardrewards.rewards.rounding import floor_to_block, round_half_up
from cardrewards.schemas.rewards import PointsBreakdown, StatementContext
from cardrewards.schemas.transaction import TransactionSnapshot

logger = logging.getLogger(__name__)

CAP_REACHED_MESSAGE = "Monthly bonus cap reached"


class RewardStrategy(Protocol):
    """Reward formula of one card product."""

    name: str

    def eligible(self, tx: TransactionSnapshot, ctx: StatementContext) -> bool:
        """Whether the transaction earns bonus points on this card.

        Args:
            tx: Transaction being priced
            ctx: Statement aggregates before the transaction
        """
        ...

    def compute(
        self,
        tx: TransactionSnapshot,
        ctx: StatementContext,
        ledger: LedgerState,
    ) -> PointsBreakdown:
        """Base and bonus points for the transaction.

        Args:
            tx: Transaction being priced; `points_amount` must be set
            ctx: Statement aggregates before the transaction
            ledger: Bonus points already consumed this statement period

        Returns:
            Breakdown with bonus points clamped to the remaining cap and
            messages explaining eligibility
        """
        ...


def clamp_to_monthly_cap(candidate: int, used: int, cap: int) -> tuple[int, int]:
    """Clamp candidate bonus points to what is left of a monthly cap.

    Returns:
        (granted, remaining after the grant)
    """
    available = max(0, cap - used)
    granted = max(0, min(candidate, available))
    return granted, available - granted


def apply_total_cap(base_points: int, bonus_points: int, cap: int) -> tuple[int, int]:
    """Cap base + bonus together, keeping bonus points first."""
    bonus_points = min(bonus_points, cap)
    base_points = min(base_points, max(0, cap - bonus_points))
    return base_points, bonus_points


@dataclass(frozen=True)
class BlockFormula:
    """Points per block of spend.

    The amount is floored to a multiple of `block_size`; base and bonus rates
    are per currency unit of the floored amount, so 0.4 per unit on a block
    of 5 is 2 points per 5 spent.
    """

    block_size: Decimal
    base_rate: Decimal
    bonus_rate: Decimal
    monthly_bonus_cap: int
    total_cap: int | None = None

    def qualifying_amount(self, amount: Decimal) -> Decimal:
        return floor_to_block(amount, self.block_size)

    def compute(
        self,
        amount: Decimal | None,
        eligible: bool,
        ledger: LedgerState,
        strategy: str,
        messages: list[str] | None = None,
    ) -> PointsBreakdown:
        """Apply the formula to an amount.

        Args:
            amount: Amount in the payment currency
            eligible: Whether the bonus rate applies
            ledger: Bonus points already consumed this period
            strategy: Name reported in the breakdown
            messages: Eligibility messages to carry over

        Returns:
            Breakdown with bonus points clamped to `monthly_bonus_cap` and,
            when set, base + bonus clamped to `total_cap`

        Raises:
            ValueError: No amount
        """
        if amount is None:
            raise ValueError("transaction has no amount")

        messages = list(messages or [])
        rounded = self.qualifying_amount(amount)
        base_points = round_half_up(rounded * self.base_rate)
        candidate = round_half_up(rounded * self.bonus_rate) if eligible else 0

        bonus_points, remaining = clamp_to_monthly_cap(
            candidate, ledger.used_bonus_points, self.monthly_bonus_cap
        )
        if bonus_points < candidate:
            messages.append(CAP_REACHED_MESSAGE)
            logger.info(
                "Monthly bonus cap reached",
                extra={
                    "strategy": strategy,
                    "requested": candidate,
                    "granted": bonus_points,
                    "cap": self.monthly_bonus_cap,
                },
            )

        if self.total_cap is not None:
            base_points, bonus_points = apply_total_cap(base_points, bonus_points, self.total_cap)

        return PointsBreakdown(
            base_points=base_points,
            bonus_points=bonus_points,
            total_points=base_points + bonus_points,
            remaining_monthly_bonus_points=remaining,
            strategy=strategy,
            provisional=ledger.provisional,
            messages=messages,
        )
