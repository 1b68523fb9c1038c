"""Validator data types."""

from dataclasses import dataclass, field
from typing import Optional

DEPOSIT_DATA_FIELDS = ("pubkey", "withdrawal_credentials", "signature", "deposit_data_root")


@dataclass
class ValidatorKeyMaterial:
    """A decrypted validator key pair.

    Lives only while shares are being produced; call discard() afterwards.
    """

    pubkey: bytes
    privkey: Optional[int] = field(repr=False)

    def discard(self) -> None:
        self.privkey = None

    @property
    def discarded(self) -> bool:
        return self.privkey is None


def _strip_0x(value: str) -> str:
    return value[2:] if value.startswith("0x") else value


@dataclass(frozen=True)
class DepositData:
    """Deposit contract arguments, hex-encoded without 0x prefix."""

    pubkey: str
    withdrawal_credentials: str
    signature: str
    deposit_data_root: str

    @classmethod
    def from_dict(cls, data: dict) -> "DepositData":
        missing = [name for name in DEPOSIT_DATA_FIELDS if not data.get(name)]
        if missing:
            raise ValueError(f"Deposit data missing fields: {missing}")
        values = {name: _strip_0x(str(data[name])).lower() for name in DEPOSIT_DATA_FIELDS}
        for value in values.values():
            bytes.fromhex(value)
        return cls(**values)

    @property
    def pubkey_bytes(self) -> bytes:
        return bytes.fromhex(self.pubkey)
