"""Host-process wiring of a provisioning run."""

import asyncio
import logging
from typing import Optional

import aiohttp
import click

from . import metrics
from .chain import ExecutionRPCClient, RPCError, StakingPoolDepositGateway, StakingPoolRegistrationGateway
from .config import Config
from .exceptions import (
    CommitteeSelectionError,
    DirectoryUnavailable,
    HealthCheckError,
    KeystoreNotFound,
)
from .health import compute_validator_count
from .operators import OperatorDirectoryClient, partition_into_committees, selector_from_name
from .orchestrator import ProvisioningOrchestrator, RunReport
from .store import FileKeystoreStore, ProvisionedLedger

logger = logging.getLogger(__name__)

# Per-validator failures live in the report; only aborted runs exit non-zero.
EXIT_OK = 0
EXIT_DIRECTORY_UNAVAILABLE = 2
EXIT_PRECHECK_FAILED = 3
EXIT_CONFIGURATION = 4


def print_report(report: RunReport) -> None:
    for line in report.summary_lines():
        click.echo(line)


async def run_provisioning(config: Config, count: Optional[int] = None) -> int:
    """Run the full pipeline described by config and return a process exit code."""
    if config.metrics_port:
        metrics.start_metrics_server(config.metrics_port)

    store = FileKeystoreStore(config.keystores_dir, config.deposits_dir)
    rpc = ExecutionRPCClient(
        config.rpc_url,
        config.sender,
        receipt_timeout=config.receipt_timeout,
        timeout=config.rpc_timeout,
    )
    directory = OperatorDirectoryClient(config.directory_url, per_page=config.directory_per_page)
    ledger = ProvisionedLedger(config.data_dir) if config.data_dir else None

    try:
        if count is None:
            try:
                health = await compute_validator_count(rpc, config.pool_address, store.count())
            except (HealthCheckError, RPCError, aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.error(f"Health check failed: {e}")
                return EXIT_PRECHECK_FAILED
            count = health.available_validators

        if count <= 0:
            logger.info("No validators to provision")
            return EXIT_OK

        orchestrator = ProvisioningOrchestrator(
            directory=directory,
            keystore_store=store,
            deposit_gateway=StakingPoolDepositGateway(rpc, config.pool_address),
            registration_gateway=StakingPoolRegistrationGateway(
                rpc, config.pool_address, config.ssv_amount
            ),
            password=config.password,
            committee_size=config.committee_size,
            selector=selector_from_name(config.selection_policy, config.committee_index),
            ledger=ledger,
        )

        try:
            report = await orchestrator.run(count)
        except DirectoryUnavailable as e:
            logger.error(f"Operator directory unavailable, aborting run: {e}")
            return EXIT_DIRECTORY_UNAVAILABLE
        except (KeystoreNotFound, CommitteeSelectionError) as e:
            logger.error(f"Configuration error, aborting run: {e}")
            return EXIT_CONFIGURATION

        print_report(report)
        return EXIT_OK
    finally:
        await directory.close()
        await rpc.close()
        if ledger is not None:
            ledger.close()


async def run_healthcheck(config: Config) -> int:
    store = FileKeystoreStore(config.keystores_dir, config.deposits_dir)
    rpc = ExecutionRPCClient(config.rpc_url, config.sender, timeout=config.rpc_timeout)
    try:
        health = await compute_validator_count(rpc, config.pool_address, store.count())
    except (HealthCheckError, RPCError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        click.echo(f"Health check failed: {e}", err=True)
        return EXIT_PRECHECK_FAILED
    finally:
        await rpc.close()

    click.echo(f"Pool balance: {health.pool_balance_eth:.4f} ETH")
    click.echo(f"Validators fundable: {health.available_validators}")
    click.echo(f"Keystores prepared: {health.keystore_count}")
    return EXIT_OK


async def show_committees(config: Config) -> int:
    async with OperatorDirectoryClient(config.directory_url, per_page=config.directory_per_page) as directory:
        try:
            operators = await directory.fetch_operators()
        except DirectoryUnavailable as e:
            click.echo(f"Operator directory unavailable: {e}", err=True)
            return EXIT_DIRECTORY_UNAVAILABLE

    committees = partition_into_committees(operators, config.committee_size)
    click.echo(f"{len(operators)} operators, {len(committees)} committees of {config.committee_size}")
    for i, committee in enumerate(committees):
        click.echo(f"  [{i}] {committee.operator_ids}")
    return EXIT_OK
