"""Local wallet identity for the staking CLI."""
import os
import re
import json
import platform
from pathlib import Path
from typing import Optional
from loguru import logger
from pydantic import BaseModel

from .networks import STAKING_NETWORK, get_network

ADDRESS_PATTERN = re.compile(r'^0x[0-9a-fA-F]{40}$')

class WalletConfig(BaseModel):
    """Wallet configuration."""
    network: str = STAKING_NETWORK
    address: Optional[str] = None
    chain_id: int = 88882
    rpc_url: str = "https://spicy-rpc.chiliz.com"
    explorer_url: str = "https://testnet.chiliscan.com"

    def __init__(self, **data):
        super().__init__(**data)
        # Chain parameters always follow the network
        chain = get_network(self.network)
        self.chain_id = chain.chain_id
        self.rpc_url = chain.rpc_url
        self.explorer_url = chain.explorer_url

def is_valid_address(address: str) -> bool:
    """Check for a 0x-prefixed 20-byte hex address."""
    return bool(ADDRESS_PATTERN.match(address or ""))

class LocalWallet:
    """Supplies the owner address to the ledger and remembers it on disk.

    Signing and identity verification are left to the user's wallet; this
    only stores which address and network the CLI acts for.
    """

    def __init__(self, network: Optional[str] = None):
        """Initialize the wallet.

        Args:
            network: Network key to use (chiliz-spicy/chiliz-mainnet); the
                saved network is used when omitted
        """
        self.config = WalletConfig()
        self.config_dir = self._get_config_dir()
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self._load_config()
        if network and network != self.config.network:
            self.config = WalletConfig(network=network, address=self.config.address)

    def _get_config_dir(self) -> Path:
        """Get platform-specific config directory."""
        if os.name == 'nt':  # Windows
            return Path(os.getenv('APPDATA')) / 'fan-staking'
        elif platform.system() == 'Darwin':  # macOS
            return Path.home() / 'Library' / 'Application Support' / 'fan-staking'
        else:  # Linux and others
            return Path.home() / '.config' / 'fan-staking'

    def _load_config(self) -> None:
        """Load wallet configuration from disk."""
        config_path = self.config_dir / 'wallet_config.json'
        if config_path.exists():
            try:
                with open(config_path) as f:
                    data = json.load(f)
                self.config = WalletConfig(**data)
            except (OSError, ValueError, KeyError) as e:
                logger.error(f"Failed to load wallet config: {e}")

    def _save_config(self) -> None:
        """Save wallet configuration to disk."""
        config_path = self.config_dir / 'wallet_config.json'
        try:
            with open(config_path, 'w') as f:
                json.dump(self.config.model_dump(), f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save wallet config: {e}")

    def login(self, address: str, network: Optional[str] = None) -> bool:
        """Remember ``address`` as the active owner.

        Args:
            address: Wallet address
            network: Optional network to switch to

        Returns:
            True if the address was accepted
        """
        if not is_valid_address(address):
            logger.error(f"Invalid wallet address: {address}")
            return False

        try:
            self.config = WalletConfig(network=network or self.config.network, address=address)
        except KeyError as e:
            logger.error(f"Login failed: {e}")
            return False

        self._save_config()
        logger.info(f"Logged in as {address} on {self.config.network}")
        return True

    def logout(self) -> None:
        """Forget the active address."""
        self.config.address = None
        self._save_config()
        logger.info("Successfully logged out")

    def is_logged_in(self) -> bool:
        return self.config.address is not None

    def get_address(self) -> Optional[str]:
        return self.config.address

    def is_on_network(self, chain_id: int) -> bool:
        """Check whether the wallet is set to the given chain."""
        return self.config.chain_id == chain_id

    def is_on_staking_network(self) -> bool:
        return self.is_on_network(get_network(STAKING_NETWORK).chain_id)
