"""Staking tier policy."""
from decimal import Decimal
from enum import Enum
from typing import List, Union
from pydantic import BaseModel

Amount = Union[Decimal, int, float, str]

MIN_STAKE = Decimal("100")

class Tier(str, Enum):
    """Staking tier names."""
    NONE = "None"
    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    PLATINUM = "Platinum"

class TierInfo(BaseModel):
    """A tier bracket and what it grants."""
    tier: Tier
    min_amount: Decimal
    apy: Decimal
    color: str = ""
    benefits: List[str] = []

    @property
    def name(self) -> str:
        return self.tier.value

NO_TIER = TierInfo(tier=Tier.NONE, min_amount=Decimal("0"), apy=Decimal("0"))

# Ascending by min_amount
TIER_TABLE: List[TierInfo] = [
    TierInfo(
        tier=Tier.BRONZE,
        min_amount=Decimal("100"),
        apy=Decimal("0.05"),
        color="bg-amber-600",
        benefits=["Prediction access", "Basic rewards"],
    ),
    TierInfo(
        tier=Tier.SILVER,
        min_amount=Decimal("500"),
        apy=Decimal("0.07"),
        color="bg-gray-400",
        benefits=["Prediction access", "Improved rewards", "Weighted votes"],
    ),
    TierInfo(
        tier=Tier.GOLD,
        min_amount=Decimal("1000"),
        apy=Decimal("0.10"),
        color="bg-yellow-500",
        benefits=["Prediction access", "Premium rewards", "Weighted votes", "Exclusive NFTs"],
    ),
    TierInfo(
        tier=Tier.PLATINUM,
        min_amount=Decimal("2500"),
        apy=Decimal("0.15"),
        color="bg-purple-600",
        benefits=["Prediction access", "Maximum rewards", "Weighted votes", "Exclusive NFTs", "Governance"],
    ),
]

# Progress bands toward the next threshold; the first band starts at zero
# so progress toward Silver covers both None and Bronze balances.
PROGRESS_BANDS = [
    (Decimal("0"), Decimal("500")),
    (Decimal("500"), Decimal("1000")),
    (Decimal("1000"), Decimal("2500")),
]

def to_decimal(amount: Amount) -> Decimal:
    """Convert a user supplied amount to Decimal without float noise."""
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        return Decimal(str(amount))
    return Decimal(amount)

def tier_for(staked_amount: Amount) -> TierInfo:
    """Get the tier for a staked balance.

    Thresholds are checked from highest to lowest and the first match wins.
    """
    amount = to_decimal(staked_amount)
    for info in reversed(TIER_TABLE):
        if amount >= info.min_amount:
            return info
    return NO_TIER

def progress_to_next_tier(staked_amount: Amount) -> float:
    """Percentage progress through the current band, in [0, 100]."""
    amount = to_decimal(staked_amount)
    top = TIER_TABLE[-1].min_amount
    if amount >= top:
        return 100.0

    progress = Decimal("100")
    for low, high in PROGRESS_BANDS:
        if amount < high:
            progress = (amount - low) / (high - low) * 100
            break

    return float(min(Decimal("100"), max(Decimal("0"), progress)))

def tiers() -> List[TierInfo]:
    """Ordered tier catalog for display."""
    return [info.model_copy(deep=True) for info in TIER_TABLE]
