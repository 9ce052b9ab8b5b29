"""Staking ledger: stake, unstake, claim and reward accrual."""
import time
import threading
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, List, Optional
from loguru import logger

from .errors import InvalidAmount, InsufficientStake, NoRewards
from .stake import REWARD_CADENCE, ClaimResult, StakeAccount
from .storage import AccountStore, InMemoryAccountStore
from .tiers import MIN_STAKE, Amount, TierInfo, tier_for, to_decimal
from .tiers import tiers as tier_catalog

SECONDS_PER_YEAR = 365 * 24 * 60 * 60

def _parse_amount(amount: Amount) -> Decimal:
    try:
        value = to_decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"Invalid amount: {amount!r}")
    if not value.is_finite():
        raise InvalidAmount(f"Invalid amount: {amount!r}")
    return value

class StakingLedger:
    """Per-owner staking accounts with continuous reward accrual.

    Operations on the same owner are serialized, across processes too when
    the store hands out a shared lock. Every operation works on a copy of
    the stored account and commits it with a single ``put``, so a rejected
    call leaves the store untouched.
    """

    def __init__(self, store: Optional[AccountStore] = None,
                 clock: Callable[[], float] = time.time):
        """Initialize the ledger.

        Args:
            store: Account storage; defaults to an in-memory store
            clock: Returns the current time in seconds since epoch
        """
        self.store = store if store is not None else InMemoryAccountStore()
        self.clock = clock
        # owner -> [lock, number of callers holding or waiting on it]
        self._locks: Dict[str, list] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _lock_for(self, owner: str):
        """Serialize operations on one owner, in this process and in the store.

        The per-owner entry is dropped once no caller uses it.
        """
        with self._locks_guard:
            entry = self._locks.get(owner)
            if entry is None:
                entry = self._locks[owner] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0], self.store.lock(owner):
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[owner]

    def _new_account(self, owner: str, now: float) -> StakeAccount:
        return StakeAccount(
            owner=owner,
            staking_start_time=now,
            last_accrual_time=now,
            next_reward_time=now + REWARD_CADENCE,
        )

    def _accrue(self, account: StakeAccount, now: float) -> Decimal:
        """Add rewards earned since the last accrual at the current APY."""
        if now <= account.last_accrual_time:
            return Decimal("0")

        elapsed = Decimal(str(now - account.last_accrual_time))
        reward = account.staked_amount * account.apy * elapsed / SECONDS_PER_YEAR
        account.pending_rewards += reward
        account.last_accrual_time = now

        # Informational marker only, rolled forward in whole cadence steps
        if account.next_reward_time and now >= account.next_reward_time:
            periods = int((now - account.next_reward_time) // REWARD_CADENCE) + 1
            account.next_reward_time += periods * REWARD_CADENCE

        return reward

    def get_account(self, owner: str) -> StakeAccount:
        """Get a snapshot of an owner's account, or a zero account."""
        account = self.store.get(owner)
        if account is None:
            return StakeAccount(owner=owner)
        return account

    def stake(self, owner: str, amount: Amount) -> StakeAccount:
        """Stake ``amount`` for ``owner``.

        Rewards earned on the previous balance are settled first, so the new
        capital only earns from now on.

        Raises:
            InvalidAmount: amount is non-positive or below the minimum stake
        """
        value = _parse_amount(amount)
        if value <= 0 or value < MIN_STAKE:
            raise InvalidAmount(f"Minimum stake is {MIN_STAKE} CHZ, got {value}")

        with self._lock_for(owner):
            now = self.clock()
            account = self.store.get(owner)
            if account is None:
                account = self._new_account(owner, now)
            else:
                self._accrue(account, now)
                if account.staked_amount == 0:
                    account.staking_start_time = now
                    account.next_reward_time = now + REWARD_CADENCE

            previous_tier = account.tier
            account.staked_amount += value
            self.store.put(owner, account)

        logger.info(f"Staked {value} CHZ for {owner}, balance {account.staked_amount} ({account.tier.value})")
        if account.tier != previous_tier:
            logger.info(f"{owner} moved from {previous_tier.value} to {account.tier.value}")
        return account

    def unstake(self, owner: str, amount: Amount) -> StakeAccount:
        """Withdraw ``amount`` from ``owner``'s stake. Pending rewards are kept.

        Raises:
            InvalidAmount: amount is non-positive
            InsufficientStake: amount exceeds the staked balance
        """
        value = _parse_amount(amount)
        if value <= 0:
            raise InvalidAmount(f"Unstake amount must be positive, got {value}")

        with self._lock_for(owner):
            now = self.clock()
            account = self.store.get(owner)
            staked = account.staked_amount if account else Decimal("0")
            if account is None or value > staked:
                raise InsufficientStake(f"Cannot unstake {value} CHZ, only {staked} staked")

            self._accrue(account, now)
            previous_tier = account.tier
            account.staked_amount -= value
            self.store.put(owner, account)

        logger.info(f"Unstaked {value} CHZ for {owner}, balance {account.staked_amount} ({account.tier.value})")
        if account.tier != previous_tier:
            logger.info(f"{owner} moved from {previous_tier.value} to {account.tier.value}")
        return account

    def claim(self, owner: str) -> ClaimResult:
        """Claim all pending rewards, settling accrual up to now first.

        Raises:
            NoRewards: nothing is pending
        """
        with self._lock_for(owner):
            account = self.store.get(owner)
            if account is None:
                raise NoRewards(f"No rewards to claim for {owner}")

            self._accrue(account, self.clock())
            if account.pending_rewards <= 0:
                raise NoRewards(f"No rewards to claim for {owner}")

            claimed = account.pending_rewards
            account.pending_rewards = Decimal("0")
            account.total_claimed += claimed
            self.store.put(owner, account)

        logger.info(f"{owner} claimed {claimed} CHZ in rewards")
        return ClaimResult(claimed_amount=claimed, account=account)

    def accrue(self, owner: str, now: Optional[float] = None) -> StakeAccount:
        """Accrue rewards for ``owner`` up to ``now``.

        Repeating the call with the same ``now`` adds nothing. Times earlier
        than the last accrual are ignored.
        """
        if now is None:
            now = self.clock()

        with self._lock_for(owner):
            account = self.store.get(owner)
            if account is None:
                return StakeAccount(owner=owner)

            reward = Decimal("0")
            if now > account.last_accrual_time:
                reward = self._accrue(account, now)
                self.store.put(owner, account)

        logger.debug(f"Accrued {reward} CHZ for {owner}, pending {account.pending_rewards}")
        return account

    def tiers(self) -> List[TierInfo]:
        """Static tier catalog for display."""
        return tier_catalog()

    def tier_info(self, owner: str) -> TierInfo:
        """Tier details for an owner's current balance."""
        return tier_for(self.get_account(owner).staked_amount)
