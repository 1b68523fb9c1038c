"""CLI entry point for provisionoor."""

import asyncio
import logging
import sys
from typing import Optional

import click

from .config import Config
from .operators.committees import SELECTION_POLICIES

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    if level.upper() != "DEBUG":
        logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


def directory_options(f):
    f = click.option(
        "--directory-url",
        default="https://api.ssv.network/api/v4/mainnet",
        help="Operator registry API base URL",
        envvar="PROVISIONOOR_DIRECTORY_URL",
    )(f)
    f = click.option(
        "--committee-size",
        default=4,
        type=int,
        help="Operators per committee",
        envvar="PROVISIONOOR_COMMITTEE_SIZE",
    )(f)
    f = click.option(
        "--log-level",
        default="INFO",
        type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
        help="Logging level",
        envvar="PROVISIONOOR_LOG_LEVEL",
    )(f)
    return f


def chain_options(f):
    f = click.option(
        "--rpc-url",
        default="http://localhost:8545",
        help="Execution layer JSON-RPC URL",
        envvar="PROVISIONOOR_RPC_URL",
    )(f)
    f = click.option(
        "--rpc-timeout",
        default=30.0,
        type=float,
        help="Seconds before a JSON-RPC request times out",
        envvar="PROVISIONOOR_RPC_TIMEOUT",
    )(f)
    f = click.option(
        "--pool-address",
        required=True,
        help="Staking pool contract address",
        envvar="PROVISIONOOR_POOL_ADDRESS",
    )(f)
    f = click.option(
        "--keystores-dir",
        default="./keystores",
        type=click.Path(file_okay=False),
        help="Directory holding keystore{i}.json files",
        envvar="PROVISIONOOR_KEYSTORES_DIR",
    )(f)
    return f


@click.group()
@click.version_option(package_name="provisionoor")
def cli():
    """Provisionoor - split validator keys across DVT operators and register them."""
    pass


@cli.command()
@directory_options
@chain_options
@click.option(
    "--sender",
    required=True,
    help="Node-managed account that signs pool transactions",
    envvar="PROVISIONOOR_SENDER",
)
@click.option(
    "--deposits-dir",
    default="./deposits",
    type=click.Path(file_okay=False),
    help="Directory holding deposit{i}.json files",
    envvar="PROVISIONOOR_DEPOSITS_DIR",
)
@click.option(
    "--password-file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="File containing the keystore password",
    envvar="PROVISIONOOR_PASSWORD_FILE",
)
@click.option(
    "--selection-policy",
    default="fixed",
    type=click.Choice(SELECTION_POLICIES, case_sensitive=False),
    help="How validators are assigned to committees",
    envvar="PROVISIONOOR_SELECTION_POLICY",
)
@click.option(
    "--committee-index",
    default=0,
    type=int,
    help="Committee for the fixed policy, or the starting committee for round-robin",
    envvar="PROVISIONOOR_COMMITTEE_INDEX",
)
@click.option(
    "--ssv-amount",
    default=10 * 10**18,
    type=int,
    help="SSV token amount (wei) funded per registration",
    envvar="PROVISIONOOR_SSV_AMOUNT",
)
@click.option(
    "--count",
    type=int,
    help="Validators to process; skips the pool balance health check",
    envvar="PROVISIONOOR_COUNT",
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    help="Directory for the provisioned-validator ledger (enables skip-on-retry)",
    envvar="PROVISIONOOR_DATA_DIR",
)
@click.option(
    "--receipt-timeout",
    default=180.0,
    type=float,
    help="Seconds to wait for each transaction receipt",
    envvar="PROVISIONOOR_RECEIPT_TIMEOUT",
)
@click.option(
    "--metrics-port",
    type=int,
    help="Expose Prometheus metrics on this port during the run",
    envvar="PROVISIONOOR_METRICS_PORT",
)
def run(
    directory_url: str,
    committee_size: int,
    log_level: str,
    rpc_url: str,
    rpc_timeout: float,
    pool_address: str,
    keystores_dir: str,
    sender: str,
    deposits_dir: str,
    password_file: str,
    selection_policy: str,
    committee_index: int,
    ssv_amount: int,
    count: Optional[int],
    data_dir: Optional[str],
    receipt_timeout: float,
    metrics_port: Optional[int],
):
    """Provision pending validators: split keys, deposit and register."""
    setup_logging(log_level)

    config = Config(
        directory_url=directory_url,
        rpc_url=rpc_url,
        rpc_timeout=rpc_timeout,
        sender=sender,
        pool_address=pool_address,
        keystores_dir=keystores_dir,
        deposits_dir=deposits_dir,
        password_file=password_file,
        committee_size=committee_size,
        selection_policy=selection_policy,
        committee_index=committee_index,
        ssv_amount=ssv_amount,
        data_dir=data_dir,
        receipt_timeout=receipt_timeout,
        metrics_port=metrics_port,
        log_level=log_level,
    )

    logger.info("Starting provisioning run")
    logger.info(f"  Operator registry: {directory_url}")
    logger.info(f"  RPC: {rpc_url}")
    logger.info(f"  Pool: {pool_address}")
    logger.info(f"  Committee size: {committee_size} ({selection_policy}, index {committee_index})")

    from .runner import run_provisioning

    try:
        exit_code = asyncio.run(run_provisioning(config, count))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)
    sys.exit(exit_code)


@cli.command()
@chain_options
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
    envvar="PROVISIONOOR_LOG_LEVEL",
)
def healthcheck(rpc_url: str, rpc_timeout: float, pool_address: str, keystores_dir: str, log_level: str):
    """Show how many validators the pool can fund against prepared keystores."""
    setup_logging(log_level)

    from .runner import run_healthcheck

    config = Config(
        rpc_url=rpc_url,
        rpc_timeout=rpc_timeout,
        pool_address=pool_address,
        keystores_dir=keystores_dir,
    )
    sys.exit(asyncio.run(run_healthcheck(config)))


@cli.command()
@directory_options
def operators(directory_url: str, committee_size: int, log_level: str):
    """List the committees the operator registry currently yields."""
    setup_logging(log_level)

    from .runner import show_committees

    config = Config(directory_url=directory_url, committee_size=committee_size)
    sys.exit(asyncio.run(show_committees(config)))


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()

