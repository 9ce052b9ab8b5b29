"""Staking ledger core."""
from .errors import StakingError, InvalidAmount, InsufficientStake, NoRewards
from .tiers import Tier, TierInfo, tier_for, progress_to_next_tier, tiers
from .stake import StakeAccount, ClaimResult, format_time_until
from .storage import AccountStore, InMemoryAccountStore, JsonAccountStore
from .ledger import StakingLedger
from .transactions import PendingTransaction, TransactionQueue

__all__ = [
    "StakingError",
    "InvalidAmount",
    "InsufficientStake",
    "NoRewards",
    "Tier",
    "TierInfo",
    "tier_for",
    "progress_to_next_tier",
    "tiers",
    "StakeAccount",
    "ClaimResult",
    "format_time_until",
    "AccountStore",
    "InMemoryAccountStore",
    "JsonAccountStore",
    "StakingLedger",
    "PendingTransaction",
    "TransactionQueue",
]
