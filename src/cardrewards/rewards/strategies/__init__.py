from cardrewards.rewards.strategies.base import BlockFormula, RewardStrategy
from cardrewards.rewards.strategies.citibank import CitibankRewardsStrategy
from cardrewards.rewards.strategies.generic import GenericRuleStrategy
from cardrewards.rewards.strategies.registry import StrategyRegistry, default_registry, normalize_key
from cardrewards.rewards.strategies.uob import (
    UOBLadysSolitaireStrategy,
    UOBPreferredPlatinumStrategy,
    UOBVisaSignatureStrategy,
)

__all__ = [
    "BlockFormula",
    "CitibankRewardsStrategy",
    "GenericRuleStrategy",
    "RewardStrategy",
    "StrategyRegistry",
    "UOBLadysSolitaireStrategy",
    "UOBPreferredPlatinumStrategy",
    "UOBVisaSignatureStrategy",
    "default_registry",
    "normalize_key",
]
