"""Pre-run check of how many validators the pool can fund."""

import logging
from dataclasses import dataclass

from .chain.client import ExecutionRPCClient
from .exceptions import HealthCheckError

logger = logging.getLogger(__name__)

DEPOSIT_AMOUNT_WEI = 32 * 10**18


@dataclass(frozen=True)
class HealthReport:
    pool_balance_wei: int
    available_validators: int
    keystore_count: int

    @property
    def pool_balance_eth(self) -> float:
        return self.pool_balance_wei / 10**18


def available_validators(balance_wei: int) -> int:
    """Number of full 32 ETH deposits a balance covers."""
    return balance_wei // DEPOSIT_AMOUNT_WEI


def check_keystore_supply(report: HealthReport) -> None:
    if report.keystore_count < report.available_validators:
        raise HealthCheckError(
            f"Number of validators {report.available_validators} to process and "
            f"keystore files {report.keystore_count} number mismatch"
        )


async def compute_validator_count(
    rpc: ExecutionRPCClient,
    pool_address: str,
    keystore_count: int,
) -> HealthReport:
    """Compare the pool's fundable validators with the prepared keystores.

    Raises HealthCheckError when there are fewer keystores than validators the
    pool can fund.
    """
    balance = await rpc.get_balance(pool_address)
    report = HealthReport(
        pool_balance_wei=balance,
        available_validators=available_validators(balance),
        keystore_count=keystore_count,
    )
    logger.info(
        f"Pool {pool_address}: {report.pool_balance_eth:.4f} ETH, "
        f"{report.available_validators} validators fundable, {keystore_count} keystores"
    )
    check_keystore_supply(report)
    return report
