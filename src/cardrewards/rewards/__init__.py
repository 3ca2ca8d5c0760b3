"""Reward computation engine."""

from cardrewards.rewards.calculator import RewardCalculator
from cardrewards.rewards.context import InMemoryTransactionStore, TransactionStore, summarize_statement
from cardrewards.rewards.ledger import (
    BonusPointsLedger,
    InMemoryLedgerStore,
    KeyedLocks,
    LedgerState,
    LedgerStore,
)
from cardrewards.rewards.matcher import RuleMatch, RuleMatcher
from cardrewards.rewards.period import StatementPeriodResolver
from cardrewards.rewards.strategies import StrategyRegistry, default_registry

__all__ = [
    "BonusPointsLedger",
    "InMemoryLedgerStore",
    "InMemoryTransactionStore",
    "KeyedLocks",
    "LedgerState",
    "LedgerStore",
    "RewardCalculator",
    "RuleMatch",
    "RuleMatcher",
    "StatementPeriodResolver",
    "StrategyRegistry",
    "TransactionStore",
    "default_registry",
    "summarize_statement",
]
