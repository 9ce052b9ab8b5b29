"""Chiliz network table."""
from typing import Dict, Optional
from pydantic import BaseModel

class NetworkConfig(BaseModel):
    """Chain parameters for a supported network."""
    name: str
    chain_id: int
    rpc_url: str
    explorer_url: str
    currency: str = "CHZ"
    decimals: int = 18
    testnet: bool = False
    faucet_url: Optional[str] = None

CHILIZ_SPICY = NetworkConfig(
    name="Chiliz Spicy Testnet",
    chain_id=88882,
    rpc_url="https://spicy-rpc.chiliz.com",
    explorer_url="https://testnet.chiliscan.com",
    testnet=True,
    faucet_url="https://spicy-faucet.chiliz.com",
)

CHILIZ_MAINNET = NetworkConfig(
    name="Chiliz Chain",
    chain_id=88888,
    rpc_url="https://rpc.ankr.com/chiliz",
    explorer_url="https://chiliscan.com",
)

NETWORKS: Dict[str, NetworkConfig] = {
    "chiliz-spicy": CHILIZ_SPICY,
    "chiliz-mainnet": CHILIZ_MAINNET,
}

# The staking pool is only deployed on the testnet
STAKING_NETWORK = "chiliz-spicy"

def get_network(network: str) -> NetworkConfig:
    """Look up a network by key.

    Raises:
        KeyError: unknown network
    """
    try:
        return NETWORKS[network]
    except KeyError:
        raise KeyError(f"Unknown network {network!r}, expected one of {', '.join(NETWORKS)}")
