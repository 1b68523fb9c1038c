"""Operator data types."""

from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class OperatorRecord:
    """An operator as listed by the operator registry."""

    operator_id: int
    public_key: str

    def __post_init__(self):
        if not isinstance(self.operator_id, int) or isinstance(self.operator_id, bool):
            raise TypeError(f"operator_id must be int, got {type(self.operator_id).__name__}")
        if self.operator_id <= 0:
            raise ValueError(f"operator_id must be positive, got {self.operator_id}")
        if not self.public_key:
            raise ValueError(f"Operator {self.operator_id} has an empty public key")

    @classmethod
    def from_dict(cls, data: dict) -> "OperatorRecord":
        return cls(operator_id=int(data["id"]), public_key=str(data["public_key"]))


@dataclass(frozen=True)
class OperatorCommittee:
    """An ordered group of operators that jointly run a validator."""

    operators: tuple[OperatorRecord, ...]

    def __post_init__(self):
        if not self.operators:
            raise ValueError("Committee must contain at least one operator")
        ids = [op.operator_id for op in self.operators]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate operator ids in committee: {ids}")

    def __len__(self) -> int:
        return len(self.operators)

    def __iter__(self) -> Iterator[OperatorRecord]:
        return iter(self.operators)

    @property
    def operator_ids(self) -> list[int]:
        return [op.operator_id for op in self.operators]

    @property
    def public_keys(self) -> list[str]:
        return [op.public_key for op in self.operators]
