"""Unit tests for pending transactions."""
import asyncio
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from fanstake.core.errors import InvalidAmount
from fanstake.core.ledger import SECONDS_PER_YEAR
from fanstake.core.tiers import Tier
from fanstake.core.transactions import (
    DEFAULT_CONFIRMATION_DELAY,
    TransactionQueue,
    get_confirmation_delay,
)

@pytest.fixture
def queue(ledger):
    return TransactionQueue(ledger, confirmation_delay=0)

def test_submit_is_pending(queue, store, alice):
    """Test submission records a pending transaction without touching the ledger."""
    tx = queue.submit("stake", alice, "150")
    assert tx.status == "pending"
    assert tx.is_pending
    assert tx.amount == Decimal("150")
    assert tx.tx_hash.startswith("0x")
    assert len(tx.tx_hash) == 66
    assert queue.get(tx.tx_hash) is tx
    assert queue.pending() == [tx]
    assert store.get(alice) is None

def test_hashes_are_unique(queue, alice):
    first = queue.submit("stake", alice, 100)
    second = queue.submit("stake", alice, 100)
    assert first.tx_hash != second.tx_hash

def test_confirm_stake(queue, alice):
    tx = asyncio.run(queue.submit_and_wait("stake", alice, 550))
    assert tx.status == "confirmed"
    assert tx.error is None
    assert tx.confirmed_at is not None
    assert tx.account.staked_amount == Decimal("550")
    assert tx.account.tier == Tier.SILVER
    assert queue.pending() == []
    assert queue.get(tx.tx_hash) is None

def test_rejected_stake_fails(queue, store, alice):
    """Test ledger rejections mark the transaction failed."""
    tx = asyncio.run(queue.submit_and_wait("stake", alice, 50))
    assert tx.status == "failed"
    assert "Minimum stake" in tx.error
    assert tx.account is None
    assert store.get(alice) is None
    assert queue.get(tx.tx_hash) is None

def test_unstake_and_claim(queue, ledger, clock, alice):
    asyncio.run(queue.submit_and_wait("stake", alice, 1000))
    clock.advance(SECONDS_PER_YEAR / 2)

    claim = asyncio.run(queue.submit_and_wait("claim", alice))
    assert claim.status == "confirmed"
    assert claim.claimed_amount == Decimal("50")

    unstake = asyncio.run(queue.submit_and_wait("unstake", alice, 400))
    assert unstake.status == "confirmed"
    assert unstake.account.staked_amount == Decimal("600")

    failed = asyncio.run(queue.submit_and_wait("unstake", alice, 601))
    assert failed.status == "failed"
    assert ledger.get_account(alice).staked_amount == Decimal("600")

def test_claim_without_rewards_fails(queue, alice):
    tx = asyncio.run(queue.submit_and_wait("claim", alice))
    assert tx.status == "failed"
    assert tx.claimed_amount is None

def test_confirm_only_once(queue, ledger, alice):
    """Test confirming an already confirmed transaction does not reapply it."""
    tx = asyncio.run(queue.submit_and_wait("stake", alice, 100))
    asyncio.run(queue.confirm(tx))
    assert ledger.get_account(alice).staked_amount == Decimal("100")

def test_submit_validation(queue, alice):
    with pytest.raises(ValueError):
        queue.submit("transfer", alice, 100)
    with pytest.raises(ValueError):
        queue.submit("stake", alice)
    with pytest.raises(InvalidAmount):
        queue.submit("stake", alice, "lots")
    with pytest.raises(InvalidAmount):
        queue.submit("unstake", alice, "inf")

def test_confirmation_waits(ledger, alice):
    queue = TransactionQueue(ledger, confirmation_delay=2.0)
    with patch('fanstake.core.transactions.asyncio.sleep', new_callable=AsyncMock) as mock_sleep:
        tx = asyncio.run(queue.submit_and_wait("stake", alice, 100))
    mock_sleep.assert_awaited_once_with(2.0)
    assert tx.status == "confirmed"

def test_confirmation_delay_from_env(monkeypatch):
    monkeypatch.delenv("FANSTAKE_CONFIRMATION_DELAY", raising=False)
    assert get_confirmation_delay() == DEFAULT_CONFIRMATION_DELAY

    monkeypatch.setenv("FANSTAKE_CONFIRMATION_DELAY", "0.5")
    assert get_confirmation_delay() == 0.5

    monkeypatch.setenv("FANSTAKE_CONFIRMATION_DELAY", "-3")
    assert get_confirmation_delay() == 0.0

    monkeypatch.setenv("FANSTAKE_CONFIRMATION_DELAY", "soon")
    assert get_confirmation_delay() == DEFAULT_CONFIRMATION_DELAY

def test_settled_transactions_are_forgotten(queue, alice):
    """Test the queue only keeps transactions that have not settled."""
    waiting = queue.submit("stake", alice, 100)
    for _ in range(5):
        asyncio.run(queue.submit_and_wait("stake", alice, 100))
    asyncio.run(queue.submit_and_wait("unstake", alice, 10_000))

    assert queue.pending() == [waiting]
    assert queue._transactions == {waiting.tx_hash: waiting}

    asyncio.run(queue.confirm(waiting))
    assert queue._transactions == {}
