"""Provisioning orchestration."""

from .types import OutcomeStatus, ProvisioningOutcome, RegisteredValidator, RunReport
from .pipeline import ProvisioningOrchestrator, OperatorDirectory, DEFAULT_COMMITTEE_SIZE

__all__ = [
    "ProvisioningOrchestrator",
    "OperatorDirectory",
    "OutcomeStatus",
    "ProvisioningOutcome",
    "RegisteredValidator",
    "RunReport",
    "DEFAULT_COMMITTEE_SIZE",
]
