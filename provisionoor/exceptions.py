"""Exceptions for the provisioning pipeline."""

from enum import Enum


class ProvisioningError(Exception):
    """Base class for provisioning errors."""


class DirectoryUnavailable(ProvisioningError):
    """The operator directory could not be queried or returned garbage."""


class CommitteeSelectionError(ProvisioningError):
    """No committee can be selected for a validator."""


class KeystoreError(ProvisioningError):
    """Base class for keystore loading and decryption errors."""


class InvalidPassword(KeystoreError):
    """Keystore checksum did not match the supplied password."""

    def __init__(self, message: str = "Invalid password or corrupted keystore"):
        super().__init__(message)


class MalformedKeystore(KeystoreError):
    """Keystore JSON is missing fields or uses an unsupported scheme."""


class KeystoreNotFound(KeystoreError):
    """Keystore or deposit data for an index is missing from the store."""

    def __init__(self, index: int, message: str):
        self.index = index
        super().__init__(f"Validator {index}: {message}")


class SplitFailureReason(str, Enum):
    COMMITTEE_TOO_SMALL = "committee_too_small"
    INVALID_COMMITTEE = "invalid_committee"
    KEYSTORE = "keystore"
    CRYPTO_ERROR = "crypto_error"


class SplitFailed(ProvisioningError):
    """Key share generation failed for one validator."""

    def __init__(self, reason: SplitFailureReason, detail: str):
        self.reason = reason
        self.detail = detail
        super().__init__(f"Split failed ({reason.value}): {detail}")


class ShareEncryptionError(ProvisioningError):
    """A share could not be encrypted for an operator."""


class DepositFailed(ProvisioningError):
    """The deposit transaction for a validator failed."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Deposit failed: {detail}")


class RegistrationFailed(ProvisioningError):
    """The DVT registration transaction for a validator failed."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Registration failed: {detail}")


class HealthCheckError(ProvisioningError):
    """Pool state and prepared keystores disagree."""
