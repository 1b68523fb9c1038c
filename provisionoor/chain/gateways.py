"""Deposit and DVT registration through the staking pool contract."""

import asyncio
import logging
from typing import Protocol

import aiohttp

from ..exceptions import DepositFailed, RegistrationFailed
from ..shares.types import KeyShareSet
from ..validator.types import DepositData
from .abi import encode_deposit_call, encode_register_call
from .client import ExecutionRPCClient
from .exceptions import RPCError, TransactionReverted, ReceiptTimeout

logger = logging.getLogger(__name__)

DEFAULT_SSV_AMOUNT = 10 * 10**18

_TRANSPORT_ERRORS = (
    RPCError,
    TransactionReverted,
    ReceiptTimeout,
    aiohttp.ClientError,
    asyncio.TimeoutError,
)


class DepositGateway(Protocol):
    async def deposit(self, deposit: DepositData) -> None:
        """Submit a validator deposit. Raises DepositFailed."""
        ...


class RegistrationGateway(Protocol):
    async def register(self, key_shares: KeyShareSet) -> None:
        """Register a validator's shares with the DVT network. Raises RegistrationFailed."""
        ...


class StakingPoolDepositGateway:
    """Sends 32 ETH from the pool to the deposit contract for one validator."""

    def __init__(self, rpc: ExecutionRPCClient, pool_address: str):
        self.rpc = rpc
        self.pool_address = pool_address

    async def deposit(self, deposit: DepositData) -> None:
        try:
            data = encode_deposit_call(deposit)
        except ValueError as e:
            raise DepositFailed(f"cannot encode deposit data: {e}") from e

        try:
            receipt = await self.rpc.transact(self.pool_address, data)
        except _TRANSPORT_ERRORS as e:
            raise DepositFailed(str(e)) from e

        logger.info(
            f"Deposited 32 ETH for validator {deposit.pubkey[:16]}... "
            f"(tx {receipt.get('transactionHash')})"
        )


class StakingPoolRegistrationGateway:
    """Registers a validator's key shares with the DVT network via the pool."""

    def __init__(self, rpc: ExecutionRPCClient, pool_address: str, ssv_amount: int = DEFAULT_SSV_AMOUNT):
        self.rpc = rpc
        self.pool_address = pool_address
        self.ssv_amount = ssv_amount

    async def register(self, key_shares: KeyShareSet) -> None:
        try:
            data = encode_register_call(key_shares, self.ssv_amount)
        except (ValueError, TypeError) as e:
            raise RegistrationFailed(f"cannot encode registration: {e}") from e

        try:
            receipt = await self.rpc.transact(self.pool_address, data)
        except _TRANSPORT_ERRORS as e:
            raise RegistrationFailed(str(e)) from e

        logger.info(
            f"Registered validator {key_shares.validator_pubkey.hex()[:16]}... with operators "
            f"{key_shares.operator_ids} (tx {receipt.get('transactionHash')})"
        )
