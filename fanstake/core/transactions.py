"""Submitted-but-unconfirmed staking transactions."""
import os
import time
import asyncio
import hashlib
import itertools
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional
from loguru import logger
from pydantic import BaseModel

from .errors import InvalidAmount, StakingError
from .ledger import StakingLedger
from .stake import StakeAccount
from .tiers import Amount

DEFAULT_CONFIRMATION_DELAY = 2.0

KINDS = ("stake", "unstake", "claim")

def get_confirmation_delay() -> float:
    """Confirmation delay in seconds, from FANSTAKE_CONFIRMATION_DELAY."""
    value = os.getenv("FANSTAKE_CONFIRMATION_DELAY")
    if value is None:
        return DEFAULT_CONFIRMATION_DELAY
    try:
        return max(0.0, float(value))
    except ValueError:
        logger.error(f"Invalid FANSTAKE_CONFIRMATION_DELAY {value!r}, using {DEFAULT_CONFIRMATION_DELAY}")
        return DEFAULT_CONFIRMATION_DELAY

class PendingTransaction(BaseModel):
    """A ledger operation that has been submitted and awaits confirmation."""
    tx_hash: str
    kind: str
    owner: str
    amount: Optional[Decimal] = None
    status: str = "pending"  # pending, confirmed, failed
    submitted_at: float
    confirmed_at: Optional[float] = None
    error: Optional[str] = None
    claimed_amount: Optional[Decimal] = None
    account: Optional[StakeAccount] = None

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"

class TransactionQueue:
    """Submits ledger operations and confirms them after a delay.

    The ledger itself stays synchronous; this layer only models the wait
    between submission and confirmation.

    Only unsettled transactions are tracked; a transaction is forgotten once
    it is confirmed or failed, and callers keep the returned object.
    """

    def __init__(self, ledger: StakingLedger, confirmation_delay: Optional[float] = None):
        self.ledger = ledger
        self.confirmation_delay = (
            get_confirmation_delay() if confirmation_delay is None else confirmation_delay
        )
        self._nonce = itertools.count()
        self._transactions: Dict[str, PendingTransaction] = {}

    def _tx_hash(self, kind: str, owner: str, amount: Optional[Decimal], submitted_at: float) -> str:
        payload = f"{kind}:{owner}:{amount}:{submitted_at}:{next(self._nonce)}"
        return "0x" + hashlib.sha256(payload.encode()).hexdigest()

    def submit(self, kind: str, owner: str, amount: Optional[Amount] = None) -> PendingTransaction:
        """Record a new pending transaction.

        Args:
            kind: One of ``stake``, ``unstake`` or ``claim``
            owner: Account owner address
            amount: Amount for stake/unstake; ignored for claim

        Returns:
            The pending transaction
        """
        if kind not in KINDS:
            raise ValueError(f"Unknown transaction kind: {kind}")
        if kind != "claim" and amount is None:
            raise ValueError(f"{kind} requires an amount")

        value = None
        if kind != "claim":
            # Range checks happen in the ledger on confirmation
            try:
                value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
            except InvalidOperation:
                raise InvalidAmount(f"Invalid amount: {amount!r}")
            if not value.is_finite():
                raise InvalidAmount(f"Invalid amount: {amount!r}")

        submitted_at = time.time()
        tx = PendingTransaction(
            tx_hash=self._tx_hash(kind, owner, value, submitted_at),
            kind=kind,
            owner=owner,
            amount=value,
            submitted_at=submitted_at,
        )
        self._transactions[tx.tx_hash] = tx
        logger.info(f"Submitted {kind} transaction {tx.tx_hash[:12]}... for {owner}")
        return tx

    def get(self, tx_hash: str) -> Optional[PendingTransaction]:
        """Look up a transaction that has not settled yet."""
        return self._transactions.get(tx_hash)

    def pending(self) -> List[PendingTransaction]:
        return [tx for tx in self._transactions.values() if tx.is_pending]

    def _apply(self, tx: PendingTransaction) -> None:
        if tx.kind == "stake":
            tx.account = self.ledger.stake(tx.owner, tx.amount)
        elif tx.kind == "unstake":
            tx.account = self.ledger.unstake(tx.owner, tx.amount)
        else:
            result = self.ledger.claim(tx.owner)
            tx.claimed_amount = result.claimed_amount
            tx.account = result.account

    async def confirm(self, tx: PendingTransaction) -> PendingTransaction:
        """Wait out the confirmation delay, then apply the operation.

        Ledger rejections mark the transaction failed with the error message.
        """
        if not tx.is_pending:
            return tx

        if self.confirmation_delay > 0:
            await asyncio.sleep(self.confirmation_delay)

        try:
            self._apply(tx)
        except StakingError as e:
            tx.status = "failed"
            tx.error = str(e)
            logger.error(f"Transaction {tx.tx_hash[:12]}... failed: {e}")
        else:
            tx.status = "confirmed"
            logger.info(f"Transaction {tx.tx_hash[:12]}... confirmed")
        tx.confirmed_at = time.time()
        self._transactions.pop(tx.tx_hash, None)
        return tx

    async def submit_and_wait(self, kind: str, owner: str,
                              amount: Optional[Amount] = None) -> PendingTransaction:
        """Submit a transaction and wait for its confirmation."""
        tx = self.submit(kind, owner, amount)
        return await self.confirm(tx)
