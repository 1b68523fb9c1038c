"""Batch provisioning of validators onto DVT committees."""

import logging
from typing import Optional, Protocol

from .. import metrics
from ..chain.gateways import DepositGateway, RegistrationGateway
from ..exceptions import (
    DepositFailed,
    DirectoryUnavailable,
    KeystoreError,
    RegistrationFailed,
    SplitFailed,
)
from ..operators.committees import (
    CommitteeSelector,
    FixedCommitteeSelector,
    partition_into_committees,
)
from ..operators.types import OperatorCommittee, OperatorRecord
from ..shares.splitter import KeyShareSplitter
from ..shares.types import KeyShareSet
from ..store.keystores import KeystoreBlob, KeystoreStore
from ..store.ledger import ProvisionedLedger
from ..validator.keystore import decrypt_keystore
from ..validator.types import DepositData
from .types import OutcomeStatus, ProvisioningOutcome, RegisteredValidator, RunReport

logger = logging.getLogger(__name__)

DEFAULT_COMMITTEE_SIZE = 4


class OperatorDirectory(Protocol):
    async def fetch_operators(self) -> list[OperatorRecord]:
        ...


class ProvisioningOrchestrator:
    """Runs the per-validator pipeline for a batch of validators.

    For each validator index 1..count: decrypt keystore, split and encrypt
    shares, deposit, register. Validators are handled strictly in index order
    and a failure at any step only ends that validator's attempt. Only a
    directory failure, a missing keystore or an impossible committee
    selection abort the run.
    """

    def __init__(
        self,
        directory: OperatorDirectory,
        keystore_store: KeystoreStore,
        deposit_gateway: DepositGateway,
        registration_gateway: RegistrationGateway,
        password: str,
        committee_size: int = DEFAULT_COMMITTEE_SIZE,
        selector: Optional[CommitteeSelector] = None,
        splitter: Optional[KeyShareSplitter] = None,
        ledger: Optional[ProvisionedLedger] = None,
    ):
        self.directory = directory
        self.keystore_store = keystore_store
        self.deposit_gateway = deposit_gateway
        self.registration_gateway = registration_gateway
        self._password = password
        self.committee_size = committee_size
        self.selector = selector or FixedCommitteeSelector(0)
        self.splitter = splitter or KeyShareSplitter()
        self.ledger = ledger

    async def form_committees(self) -> list[OperatorCommittee]:
        """Fetch operators and partition them. Raises DirectoryUnavailable."""
        operators = await self.directory.fetch_operators()
        committees = partition_into_committees(operators, self.committee_size)
        metrics.committees_formed.set(len(committees))
        if not committees:
            raise DirectoryUnavailable(
                f"{len(operators)} operators cannot form a committee of {self.committee_size}"
            )
        logger.info(
            f"Formed {len(committees)} committees of {self.committee_size} "
            f"from {len(operators)} operators"
        )
        return committees

    async def run(self, count: int) -> RunReport:
        """Provision validators 1..count and return the run report.

        Every keystore is loaded and every committee selected before the first
        transaction, so KeystoreNotFound and CommitteeSelectionError abort the
        run with nothing submitted.
        """
        committees = await self.form_committees()
        indices = range(1, count + 1)
        entries = [self.keystore_store.load(index) for index in indices]
        assignments = [self.selector.select(committees, index - 1) for index in indices]
        report = RunReport()

        for index, (keystore, deposit), committee in zip(indices, entries, assignments):
            if self.ledger is not None and self.ledger.is_registered(deposit.pubkey_bytes):
                logger.info(f"Validator {index} ({deposit.pubkey[:16]}...) already provisioned, skipping")
                report.skipped.append(index)
                metrics.validators_skipped.inc()
                continue

            outcome, key_shares = await self._provision(index, keystore, deposit, committee)
            report.outcomes.append(outcome)
            metrics.record_outcome(outcome.status.value)

            if key_shares is not None:
                report.registered.append(RegisteredValidator.from_key_shares(key_shares))
                if self.ledger is not None:
                    self.ledger.record_registration(key_shares.validator_pubkey, key_shares.operator_ids)

        logger.info(
            f"Provisioning run complete: {report.success_count}/{len(report.outcomes)} registered, "
            f"{len(report.failures)} failed, {len(report.skipped)} skipped"
        )
        return report

    def _prepare_shares(
        self,
        keystore: KeystoreBlob,
        deposit: DepositData,
        committee: OperatorCommittee,
    ) -> KeyShareSet:
        key_material = decrypt_keystore(keystore, self._password)
        if key_material.pubkey != deposit.pubkey_bytes:
            key_material.discard()
            raise KeystoreError(
                f"keystore pubkey {key_material.pubkey.hex()[:16]}... does not match "
                f"deposit data pubkey {deposit.pubkey[:16]}..."
            )
        return self.splitter.split(key_material, committee)

    async def _provision(
        self,
        index: int,
        keystore: KeystoreBlob,
        deposit: DepositData,
        committee: OperatorCommittee,
    ) -> tuple[ProvisioningOutcome, Optional[KeyShareSet]]:
        pubkey = deposit.pubkey_bytes

        def outcome(status: OutcomeStatus, detail: Optional[str] = None) -> ProvisioningOutcome:
            if detail is not None:
                logger.error(f"Validator {index} ({pubkey.hex()[:16]}...) {status.value}: {detail}")
            return ProvisioningOutcome(
                index=index,
                validator_pubkey=pubkey,
                committee=committee,
                status=status,
                error_detail=detail,
            )

        try:
            with metrics.split_duration.time():
                key_shares = self._prepare_shares(keystore, deposit, committee)
        except KeystoreError as e:
            return outcome(OutcomeStatus.SPLIT_FAILED, f"keystore: {e}"), None
        except SplitFailed as e:
            return outcome(OutcomeStatus.SPLIT_FAILED, str(e)), None

        if self.ledger is not None and self.ledger.is_deposited(pubkey):
            logger.info(f"Validator {index} ({pubkey.hex()[:16]}...) already deposited, registering only")
        else:
            try:
                await self.deposit_gateway.deposit(deposit)
            except DepositFailed as e:
                return outcome(OutcomeStatus.DEPOSIT_FAILED, e.detail), None
            if self.ledger is not None:
                self.ledger.record_deposit(pubkey)

        try:
            await self.registration_gateway.register(key_shares)
        except RegistrationFailed as e:
            return outcome(OutcomeStatus.REGISTRATION_FAILED, e.detail), None

        logger.info(
            f"Validator {index} ({pubkey.hex()[:16]}...) registered with operators "
            f"{key_shares.operator_ids}"
        )
        return outcome(OutcomeStatus.SUCCESS), key_shares
