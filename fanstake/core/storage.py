"""Account storage for the staking ledger."""
import os
import json
import threading
import tempfile
from contextlib import nullcontext
from typing import Dict, Optional
from filelock import FileLock
from loguru import logger

from .stake import StakeAccount

def get_ledger_dir() -> str:
    """Get the ledger directory path."""
    return os.getenv(
        "FANSTAKE_LEDGER_DIR",
        os.path.join(os.path.expanduser("~"), ".fan-staking", "ledger")
    )

class AccountStore:
    """Key-value contract the ledger persists accounts through."""

    def get(self, owner: str) -> Optional[StakeAccount]:
        raise NotImplementedError

    def put(self, owner: str, account: StakeAccount) -> None:
        raise NotImplementedError

    def lock(self, owner: str):
        """Context manager held across one ledger read-modify-write.

        Stores shared between processes return a lock that excludes other
        processes; process-local stores need nothing beyond the ledger's
        own per-owner lock.
        """
        return nullcontext()

class InMemoryAccountStore(AccountStore):
    """Process-local store; holds copies so callers cannot mutate stored state."""

    def __init__(self):
        self._accounts: Dict[str, StakeAccount] = {}
        self._lock = threading.Lock()

    def get(self, owner: str) -> Optional[StakeAccount]:
        with self._lock:
            account = self._accounts.get(owner)
        return account.model_copy(deep=True) if account else None

    def put(self, owner: str, account: StakeAccount) -> None:
        with self._lock:
            self._accounts[owner] = account.model_copy(deep=True)

class JsonAccountStore(AccountStore):
    """Accounts persisted to a single JSON file shared between processes.

    An exclusive file lock next to the ledger file guards every read and
    write. ``get`` always reads the file, and ``put`` reloads it and merges
    only its own account before rewriting it through a temporary file and an
    atomic rename, so one ledger operation is one commit.
    """

    def __init__(self, path: Optional[str] = None, timeout: float = 30):
        """Initialize the store.

        Args:
            path: JSON file to use; defaults to ``accounts.json`` in the
                ledger directory
            timeout: Seconds to wait for the file lock
        """
        if path is None:
            path = os.path.join(get_ledger_dir(), "accounts.json")
        self.path = path
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        self._file_lock = FileLock(self.path + ".lock", timeout=timeout)

    def _load_accounts(self, strict: bool = False) -> Dict[str, StakeAccount]:
        """Load accounts from disk.

        A corrupted file reads as empty, unless ``strict`` is set, in which
        case the error is raised so a write cannot replace it.
        """
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
            return {
                owner: StakeAccount.model_validate(entry)
                for owner, entry in data.items()
            }
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"Failed to load ledger from {self.path}: {e}")
            if strict:
                raise
            return {}

    def _save_accounts(self, accounts: Dict[str, StakeAccount]):
        """Write all accounts to disk atomically."""
        directory = os.path.dirname(self.path) or "."
        os.makedirs(directory, exist_ok=True)
        data = {
            owner: account.model_dump(mode="json")
            for owner, account in accounts.items()
        }
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def lock(self, owner: str):
        # One lock for the whole file; reentrant, so get/put can nest inside it
        return self._file_lock

    def get(self, owner: str) -> Optional[StakeAccount]:
        with self._file_lock:
            return self._load_accounts().get(owner)

    def put(self, owner: str, account: StakeAccount) -> None:
        with self._file_lock:
            accounts = self._load_accounts(strict=True)
            accounts[owner] = account.model_copy(deep=True)
            self._save_accounts(accounts)
