"""Execution-layer access: JSON-RPC client and staking pool gateways."""

from .exceptions import RPCError, TransactionReverted, ReceiptTimeout
from .client import ExecutionRPCClient
from .gateways import (
    DepositGateway,
    RegistrationGateway,
    StakingPoolDepositGateway,
    StakingPoolRegistrationGateway,
    DEFAULT_SSV_AMOUNT,
)

__all__ = [
    "ExecutionRPCClient",
    "RPCError",
    "TransactionReverted",
    "ReceiptTimeout",
    "DepositGateway",
    "RegistrationGateway",
    "StakingPoolDepositGateway",
    "StakingPoolRegistrationGateway",
    "DEFAULT_SSV_AMOUNT",
]
