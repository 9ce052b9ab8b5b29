"""Test configuration and fixtures for the staking ledger."""
import pytest
from unittest.mock import patch
from fanstake.core.ledger import StakingLedger
from fanstake.core.storage import InMemoryAccountStore
from fanstake.core.wallet import LocalWallet

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20

class FakeClock:
    """Settable clock returning seconds since epoch."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

@pytest.fixture(autouse=True)
def ledger_dir(tmp_path, monkeypatch):
    """Keep ledger files out of the home directory."""
    path = tmp_path / "ledger"
    monkeypatch.setenv("FANSTAKE_LEDGER_DIR", str(path))
    return path

@pytest.fixture
def alice():
    """Address of the first test account."""
    return ALICE

@pytest.fixture
def bob():
    return BOB

@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def store():
    return InMemoryAccountStore()

@pytest.fixture
def ledger(store, clock):
    """Ledger over an in-memory store and a fake clock."""
    return StakingLedger(store=store, clock=clock)

@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary wallet config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    with patch('fanstake.core.wallet.LocalWallet._get_config_dir') as mock_dir:
        mock_dir.return_value = config_dir
        yield config_dir

@pytest.fixture
def wallet(temp_config_dir):
    """Create a test wallet instance."""
    return LocalWallet()
