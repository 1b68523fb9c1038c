"""Key share data types."""

from dataclasses import dataclass


@dataclass(frozen=True)
class KeyShare:
    """One operator's share of a validator key."""

    operator_id: int
    encrypted_share: str
    share_public_key: str
    operator_public_key: str


@dataclass(frozen=True)
class KeyShareSet:
    """All shares of one validator key for one committee."""

    validator_pubkey: bytes
    shares: tuple[KeyShare, ...]
    threshold: int

    def __post_init__(self):
        if not self.shares:
            raise ValueError("KeyShareSet must contain shares")
        ids = self.operator_ids
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate operator ids in shares: {ids}")
        if not 1 <= self.threshold <= len(self.shares):
            raise ValueError(f"Threshold {self.threshold} invalid for {len(self.shares)} shares")

    def __len__(self) -> int:
        return len(self.shares)

    @property
    def validator_pubkey_hex(self) -> str:
        return "0x" + self.validator_pubkey.hex()

    @property
    def operator_ids(self) -> list[int]:
        return [s.operator_id for s in self.shares]

    @property
    def public_shares(self) -> list[str]:
        return [s.share_public_key for s in self.shares]

    @property
    def encrypted_shares(self) -> list[str]:
        return [s.encrypted_share for s in self.shares]
