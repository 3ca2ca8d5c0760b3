"""Lookup of issuer-specific strategies by (issuer, product)."""

import re

from cardrewards.rewards.strategies.base import RewardStrategy
from cardrewards.rewards.strategies.citibank import CitibankRewardsStrategy
from cardrewards.rewards.strategies.uob import (
    UOBLadysSolitaireStrategy,
    UOBPreferredPlatinumStrategy,
    UOBVisaSignatureStrategy,
)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_key(issuer: str | None, product: str | None) -> tuple[str, str]:
    """Lower-case and collapse punctuation, so "Lady's Solitaire" == "ladys  solitaire"."""

    def clean(value: str | None) -> str:
        value = (value or "").lower().replace("'", "")
        return _NON_ALNUM.sub(" ", value).strip()

    return clean(issuer), clean(product)


class StrategyRegistry:
    """Strategies keyed by normalized (issuer, product)."""

    def __init__(self):
        self._strategies: dict[tuple[str, str], RewardStrategy] = {}

    def __len__(self) -> int:
        return len(self._strategies)

    def __contains__(self, key: tuple[str, str]) -> bool:
        return normalize_key(*key) in self._strategies

    def register(
        self,
        issuer: str,
        product: str,
        strategy: RewardStrategy,
        aliases: tuple[str, ...] = (),
    ) -> None:
        """Register a strategy under a product name and its aliases.

        Args:
            issuer: Card issuer, e.g. "UOB"
            product: Product name as issued
            strategy: Strategy to use for the product
            aliases: Other names the product is stored under
        """
        for name in (product, *aliases):
            self._strategies[normalize_key(issuer, name)] = strategy

    def get(self, issuer: str | None, product: str | None) -> RewardStrategy | None:
        """Strategy for an (issuer, product), or None to use the generic engine."""
        return self._strategies.get(normalize_key(issuer, product))


def default_registry() -> StrategyRegistry:
    """Registry with every built-in card strategy."""
    registry = StrategyRegistry()
    registry.register(
        "UOB",
        "Preferred Visa Platinum",
        UOBPreferredPlatinumStrategy(),
        aliases=("Preferred Platinum Visa", "Preferred Platinum"),
    )
    registry.register("UOB", "Visa Signature", UOBVisaSignatureStrategy())
    registry.register(
        "UOB",
        "Lady's Solitaire",
        UOBLadysSolitaireStrategy(),
        aliases=("Lady's Solitaire World Mastercard", "Ladys Solitaire Card"),
    )
    registry.register(
        "Citibank",
        "Rewards Visa Signature",
        CitibankRewardsStrategy(),
        aliases=("Rewards", "Rewards Card"),
    )
    registry.register("Citi", "Rewards Visa Signature", CitibankRewardsStrategy(), aliases=("Rewards",))
    return registry
