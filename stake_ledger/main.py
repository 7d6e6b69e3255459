"""Stake Ledger CLI."""
from pathlib import Path
from typing import Optional

import click
from loguru import logger
from pydantic import ValidationError

from .core.config import LedgerConfig, configure_logging, load_config
from .core.errors import StakingError, TransactionAborted, TransferError
from .core.events import event_to_dict
from .core.persistence import load_chain, new_chain, save_chain

def _open_chain(config: LedgerConfig):
    try:
        return load_chain(config.chain_path)
    except FileNotFoundError:
        raise click.ClickException(
            f"No chain found at {config.chain_path}. Create one with: stake-ledger init"
        )
    except ValueError as e:
        raise click.ClickException(str(e))

def _call(config: LedgerConfig, account: str, message_name: str, *args, value: int = 0):
    """Run one ledger message for ``account`` and persist the result."""
    env, ledger = _open_chain(config)
    try:
        result = env.call(getattr(ledger, message_name), *args, value=value, caller=account)
    except (StakingError, TransactionAborted, TransferError) as e:
        # Failed calls either rolled back or kept a claim settlement, both are safe to save
        save_chain(env, ledger, config.chain_path)
        logger.error(f"{message_name} failed for {account}: {e}")
        raise click.ClickException(str(e))
    save_chain(env, ledger, config.chain_path)
    return env, ledger, result

@click.group()
@click.version_option(package_name="stake-ledger")
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='Path to YAML configuration file')
@click.option('--state-dir', type=click.Path(file_okay=False), help='Directory holding chain state')
@click.option('--log-level', help='Log level (DEBUG, INFO, WARNING, ...)')
@click.pass_context
def cli(ctx, config_path: Optional[str], state_dir: Optional[str], log_level: Optional[str]):
    """Stake Ledger CLI for staking, unstaking and claiming rewards on a local chain."""
    try:
        config = load_config(Path(config_path) if config_path else None,
                             state_dir=Path(state_dir) if state_dir else None)
        if log_level:
            config = LedgerConfig(**{**config.model_dump(), "log_level": log_level})
    except (ValidationError, ValueError) as e:
        raise click.ClickException(f"Invalid configuration: {e}")
    configure_logging(config.log_level)
    ctx.obj = config

@cli.command()
@click.option('--rate', type=int, help='Ledger rate parameter (defaults to configured rate)')
@click.option('--force', is_flag=True, help='Overwrite an existing chain')
@click.pass_obj
def init(config: LedgerConfig, rate: Optional[int], force: bool):
    """Create a fresh local chain with funded default accounts."""
    if config.chain_path.exists() and not force:
        raise click.ClickException(f"Chain already exists at {config.chain_path}, use --force to replace it")
    if rate is not None:
        if rate < 0:
            raise click.BadParameter("Rate must not be negative", param_hint="--rate")
        config = LedgerConfig(**{**config.model_dump(), "rate": rate})
    env, ledger = new_chain(config)
    save_chain(env, ledger, config.chain_path)
    logger.info(f"Created chain at {config.chain_path} with rate {ledger.rate}")
    click.echo(f"Accounts: {', '.join(name for name in env.balances if name != env.contract_account)}")

@cli.command()
@click.argument('account')
@click.argument('amount', type=int)
@click.pass_obj
def stake(config: LedgerConfig, account: str, amount: int):
    """Stake AMOUNT from ACCOUNT's wallet."""
    _, ledger, _ = _call(config, account, "stake", value=amount)
    click.echo(f"{account} staked {amount}, total stake {ledger.stake_of(account)}")

@cli.command()
@click.argument('account')
@click.argument('amount', type=int)
@click.pass_obj
def unstake(config: LedgerConfig, account: str, amount: int):
    """Withdraw AMOUNT of ACCOUNT's stake."""
    _, ledger, _ = _call(config, account, "unstake", amount)
    click.echo(f"{account} unstaked {amount}, remaining stake {ledger.stake_of(account)}")

@cli.command()
@click.argument('account')
@click.pass_obj
def claim(config: LedgerConfig, account: str):
    """Claim ACCOUNT's accrued reward."""
    _, _, paid = _call(config, account, "claim_reward")
    click.echo(f"{account} claimed {paid}")

@cli.command()
@click.option('--blocks', default=1, type=click.IntRange(min=0), help='Number of blocks to advance')
@click.pass_obj
def advance(config: LedgerConfig, blocks: int):
    """Advance the block clock."""
    env, ledger = _open_chain(config)
    try:
        height = env.advance_block(blocks)
    except ValueError as e:
        raise click.ClickException(str(e))
    save_chain(env, ledger, config.chain_path)
    click.echo(f"Block height: {height}")

@cli.command()
@click.argument('account')
@click.pass_obj
def status(config: LedgerConfig, account: str):
    """Show ACCOUNT's stake, pending reward and wallet balance."""
    env, ledger = _open_chain(config)
    balance = env.get_account_balance(account)
    click.echo(f"\nStatus for {account} at block {env.block_number()}:")
    click.echo("-" * 40)
    click.echo(f"Stake: {ledger.stake_of(account)}")
    click.echo(f"Pending Reward: {ledger.reward_of(account)}")
    click.echo(f"Wallet Balance: {balance if balance is not None else 'unknown account'}")
    click.echo(f"Active Staker: {'yes' if ledger.is_staker(account) else 'no'}")

@cli.command()
@click.pass_obj
def stakers(config: LedgerConfig):
    """List accounts currently holding stake."""
    _, ledger = _open_chain(config)
    accounts = sorted(ledger.stakers())
    if not accounts:
        click.echo("No active stakers")
        return

    click.echo(f"\n{'Account':<20}{'Stake':<20}{'Pending Reward':<20}")
    click.echo("-" * 60)
    for account in accounts:
        click.echo(f"{account:<20}{ledger.stake_of(account):<20}{ledger.reward_of(account):<20}")
    click.echo("-" * 60)
    click.echo(f"Total staked: {ledger.total_staked()} (rate {ledger.rate})")

@cli.command()
@click.option('--limit', default=20, type=click.IntRange(min=1), help='Number of events to show')
@click.pass_obj
def events(config: LedgerConfig, limit: int):
    """Show the most recent ledger events."""
    env, _ = _open_chain(config)
    recorded = env.recorded_events()[-limit:]
    if not recorded:
        click.echo("No events recorded")
        return
    for event in recorded:
        data = event_to_dict(event)
        click.echo(f"{data['kind']:<10}{data['user']:<20}{data['amount']}")

if __name__ == "__main__":
    cli()
