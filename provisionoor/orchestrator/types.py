"""Provisioning run results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..operators.types import OperatorCommittee
from ..shares.types import KeyShareSet


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    SPLIT_FAILED = "split_failed"
    DEPOSIT_FAILED = "deposit_failed"
    REGISTRATION_FAILED = "registration_failed"


@dataclass(frozen=True)
class ProvisioningOutcome:
    """Terminal result of one validator's provisioning attempt."""

    index: int
    validator_pubkey: bytes
    committee: OperatorCommittee
    status: OutcomeStatus
    error_detail: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS


@dataclass(frozen=True)
class RegisteredValidator:
    """A validator that was deposited and registered with its committee."""

    pubkey: str
    public_shares: tuple[str, ...]
    encrypted_shares: tuple[str, ...]
    operator_ids: tuple[int, ...]

    @classmethod
    def from_key_shares(cls, key_shares: KeyShareSet) -> "RegisteredValidator":
        return cls(
            pubkey=key_shares.validator_pubkey_hex,
            public_shares=tuple(key_shares.public_shares),
            encrypted_shares=tuple(key_shares.encrypted_shares),
            operator_ids=tuple(key_shares.operator_ids),
        )


@dataclass
class RunReport:
    """Everything a provisioning run produced, in validator index order."""

    registered: list[RegisteredValidator] = field(default_factory=list)
    outcomes: list[ProvisioningOutcome] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def failures(self) -> list[ProvisioningOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    def summary_lines(self) -> list[str]:
        lines = [
            f"Validators processed: {len(self.outcomes)}",
            f"Validators registered: {self.success_count}",
        ]
        if self.skipped:
            lines.append(f"Validators skipped (already provisioned): {len(self.skipped)}")
        for outcome in self.failures:
            lines.append(
                f"  validator {outcome.index} ({outcome.validator_pubkey.hex()[:16]}...): "
                f"{outcome.status.value}: {outcome.error_detail}"
            )
        return lines
