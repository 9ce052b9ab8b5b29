"""Fan staking CLI."""
import os
import sys
import asyncio
from typing import Optional
from datetime import datetime
import click
from loguru import logger

from .core.errors import StakingError
from .core.ledger import StakingLedger
from .core.networks import NETWORKS, STAKING_NETWORK, get_network
from .core.stake import format_time_until
from .core.storage import JsonAccountStore
from .core.tiers import progress_to_next_tier, tier_for, tiers
from .core.transactions import TransactionQueue
from .core.wallet import LocalWallet

class StakingCLI:
    """Lazily built wallet, ledger and transaction queue."""

    def __init__(self):
        self.wallet = None
        self.ledger = None
        self.queue = None

    def get_wallet(self) -> LocalWallet:
        if not self.wallet:
            self.wallet = LocalWallet()
        return self.wallet

    def get_ledger(self) -> StakingLedger:
        if not self.ledger:
            self.ledger = StakingLedger(store=JsonAccountStore())
        return self.ledger

    def get_queue(self) -> TransactionQueue:
        if not self.queue:
            self.queue = TransactionQueue(self.get_ledger())
        return self.queue

# Global CLI state
state = StakingCLI()

def configure_logging() -> None:
    """Send loguru output to stderr at FANSTAKE_LOG_LEVEL."""
    level = os.getenv("FANSTAKE_LOG_LEVEL", "INFO").upper()
    logger.remove()
    try:
        logger.add(sys.stderr, level=level)
    except ValueError:
        logger.add(sys.stderr, level="INFO")
        logger.warning(f"Unknown log level {level}, using INFO")

def require_staking_wallet() -> Optional[str]:
    """Return the active address if the wallet may stake, else None."""
    wallet = state.get_wallet()
    if not wallet.is_logged_in():
        logger.error("Not logged in. Run: fanstake wallet login --address <0x...>")
        return None

    if not wallet.is_on_staking_network():
        staking = get_network(STAKING_NETWORK)
        logger.error(
            f"Staking is only available on {staking.name} (chain {staking.chain_id}), "
            f"wallet is on {wallet.config.network}"
        )
        logger.error(f"Switch with: fanstake wallet login --address {wallet.get_address()} --network {STAKING_NETWORK}")
        return None

    return wallet.get_address()

def submit(kind: str, owner: str, amount: Optional[str] = None):
    """Submit a transaction and wait for confirmation."""
    queue = state.get_queue()
    click.echo(f"Submitting {kind}... waiting for confirmation")
    try:
        return asyncio.run(queue.submit_and_wait(kind, owner, amount))
    except StakingError as e:
        logger.error(f"{kind.capitalize()} rejected: {e}")
        click.echo(f"{kind.capitalize()} failed: {e}")
        return None

@click.group()
@click.version_option(package_name="fan-staking")
def cli():
    """Fan staking CLI: stake CHZ, climb tiers, earn rewards."""
    configure_logging()

@cli.group(name="wallet")
def wallet_cmd():
    """Manage the active wallet address."""
    pass

@wallet_cmd.command()
@click.option('--address', required=True, help='Wallet address (0x...)')
@click.option('--network', type=click.Choice(list(NETWORKS)), default=None,
              help='Network to use')
def login(address: str, network: Optional[str]):
    """Set the wallet address used for staking."""
    wallet = state.get_wallet()
    if wallet.login(address, network):
        click.echo(f"Logged in as {address} on {wallet.config.network}")
        click.echo("\nYou can now use the following commands:")
        click.echo("  fanstake status   - Show your staking position")
        click.echo("  fanstake stake    - Stake CHZ")
    else:
        click.echo("Login failed. Addresses look like 0x followed by 40 hex characters.")

@wallet_cmd.command()
def logout():
    """Forget the wallet address."""
    state.get_wallet().logout()
    click.echo("Logged out")

@wallet_cmd.command(name="status")
def wallet_status():
    """Show wallet address and network."""
    wallet = state.get_wallet()
    if not wallet.is_logged_in():
        click.echo("Not logged in")
        click.echo("\nTo log in, run:")
        click.echo("  fanstake wallet login --address <0x...>")
        return

    network = get_network(wallet.config.network)
    click.echo(f"Address: {wallet.get_address()}")
    click.echo(f"Network: {network.name} (chain {network.chain_id})")
    click.echo(f"Explorer: {network.explorer_url}/address/{wallet.get_address()}")
    if network.faucet_url:
        click.echo(f"Faucet: {network.faucet_url}")
    if not wallet.is_on_staking_network():
        click.echo(f"Staking is not available on this network, switch to {STAKING_NETWORK}")

@cli.command(name="tiers")
def show_tiers():
    """List staking tiers."""
    click.echo("\nStaking Tiers:")
    click.echo("-" * 80)
    click.echo(f"{'Tier':<12}{'Min Stake':<14}{'APY':<8}Benefits")
    click.echo("-" * 80)
    for info in tiers():
        click.echo(
            f"{info.name:<12}"
            f"{str(info.min_amount) + ' CHZ':<14}"
            f"{f'{info.apy * 100:.0f}%':<8}"
            f"{', '.join(info.benefits)}"
        )

@cli.command()
@click.option('--address', default=None, help='Show another address instead of the wallet')
def status(address: Optional[str]):
    """Show staking position, rewards and tier progress."""
    if not address:
        address = state.get_wallet().get_address()
    if not address:
        logger.error("Not logged in. Run: fanstake wallet login --address <0x...>")
        return

    ledger = state.get_ledger()
    account = ledger.accrue(address)
    info = tier_for(account.staked_amount)
    now = ledger.clock()

    click.echo(f"\nStaking position for {address}:")
    click.echo("-" * 80)
    click.echo(f"Staked: {account.staked_amount} CHZ")
    click.echo(f"Tier: {info.name} ({info.apy * 100:.0f}% APY)")
    click.echo(f"Pending Rewards: {account.pending_rewards:.6f} CHZ")
    click.echo(f"Total Claimed: {account.total_claimed:.6f} CHZ")
    click.echo(f"Progress to Next Tier: {progress_to_next_tier(account.staked_amount):.1f}%")
    if account.staking_start_time:
        click.echo(f"Staking Since: {datetime.fromtimestamp(account.staking_start_time).strftime('%Y-%m-%d %H:%M')}")
    if account.next_reward_time:
        click.echo(f"Next Reward: {format_time_until(account.next_reward_time, now)}")
    click.echo(f"Can Create Markets: {'yes' if account.can_create_market else 'no'}")
    click.echo(f"Can Vote: {'yes' if account.can_vote else 'no'}")

@cli.command()
@click.argument('amount')
def stake(amount: str):
    """Stake AMOUNT CHZ (minimum 100)."""
    owner = require_staking_wallet()
    if not owner:
        return

    tx = submit("stake", owner, amount)
    if tx is None:
        return
    if tx.status == "confirmed":
        click.echo(f"Staked {tx.amount} CHZ. Balance: {tx.account.staked_amount} CHZ ({tx.account.tier.value})")
    else:
        click.echo(f"Stake failed: {tx.error}")
    click.echo(f"Transaction: {tx.tx_hash}")

@cli.command()
@click.argument('amount')
def unstake(amount: str):
    """Unstake AMOUNT CHZ. Pending rewards are kept."""
    owner = require_staking_wallet()
    if not owner:
        return

    tx = submit("unstake", owner, amount)
    if tx is None:
        return
    if tx.status == "confirmed":
        click.echo(f"Unstaked {tx.amount} CHZ. Balance: {tx.account.staked_amount} CHZ ({tx.account.tier.value})")
    else:
        click.echo(f"Unstake failed: {tx.error}")
    click.echo(f"Transaction: {tx.tx_hash}")

@cli.command()
def claim():
    """Claim all pending rewards."""
    owner = require_staking_wallet()
    if not owner:
        return

    tx = submit("claim", owner)
    if tx is None:
        return
    if tx.status == "confirmed":
        click.echo(f"Claimed {tx.claimed_amount:.6f} CHZ")
    else:
        click.echo(f"Claim failed: {tx.error}")
    click.echo(f"Transaction: {tx.tx_hash}")

if __name__ == '__main__':
    cli()
