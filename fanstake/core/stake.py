"""Stake account records."""
from decimal import Decimal
from pydantic import BaseModel, Field, computed_field

from .tiers import MIN_STAKE, Tier, tier_for

REWARD_CADENCE = 7 * 24 * 60 * 60  # 7 days

class StakeAccount(BaseModel):
    """Staking state for a single owner.

    The tier and eligibility flags are always derived from ``staked_amount``.
    """
    owner: str
    staked_amount: Decimal = Field(default=Decimal("0"), ge=0)
    pending_rewards: Decimal = Field(default=Decimal("0"), ge=0)
    total_claimed: Decimal = Field(default=Decimal("0"), ge=0)
    staking_start_time: float = 0
    last_accrual_time: float = 0
    next_reward_time: float = 0

    @computed_field
    @property
    def tier(self) -> Tier:
        return tier_for(self.staked_amount).tier

    @computed_field
    @property
    def can_create_market(self) -> bool:
        return self.staked_amount >= MIN_STAKE

    @computed_field
    @property
    def can_vote(self) -> bool:
        return self.staked_amount >= MIN_STAKE

    @property
    def apy(self) -> Decimal:
        return tier_for(self.staked_amount).apy

class ClaimResult(BaseModel):
    """Outcome of a successful claim."""
    claimed_amount: Decimal
    account: StakeAccount

def format_time_until(next_reward_time: float, now: float) -> str:
    """Human readable time left until the next reward marker."""
    time_left = int(next_reward_time - now)
    if time_left <= 0:
        return "Rewards available!"

    hours = time_left // 3600
    minutes = (time_left % 3600) // 60
    return f"{hours}h {minutes}m"
