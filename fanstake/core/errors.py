"""Staking ledger errors."""


class StakingError(Exception):
    """Base class for rejected ledger operations."""


class InvalidAmount(StakingError):
    """Amount is non-positive or below the minimum stake."""


class InsufficientStake(StakingError):
    """Unstake amount exceeds the staked balance."""


class NoRewards(StakingError):
    """Claim attempted with nothing pending."""
