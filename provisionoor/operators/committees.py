"""Committee partitioning and selection."""

import logging
from typing import Protocol, Sequence

from ..exceptions import CommitteeSelectionError
from .types import OperatorCommittee, OperatorRecord

logger = logging.getLogger(__name__)


def partition_into_committees(
    operators: Sequence[OperatorRecord],
    committee_size: int,
) -> list[OperatorCommittee]:
    """Split operators into consecutive committees of committee_size.

    Operators are ordered by ascending id first. A trailing group smaller than
    committee_size is dropped, so those operators never receive validators
    unless the pool grows to a multiple of committee_size.
    """
    if committee_size < 1:
        raise ValueError(f"committee_size must be >= 1, got {committee_size}")

    ordered = sorted(operators, key=lambda op: op.operator_id)
    ids = [op.operator_id for op in ordered]
    if len(set(ids)) != len(ids):
        raise ValueError("Duplicate operator ids in operator list")

    full = len(ordered) // committee_size
    committees = [
        OperatorCommittee(tuple(ordered[i * committee_size:(i + 1) * committee_size]))
        for i in range(full)
    ]

    dropped = ordered[full * committee_size:]
    if dropped:
        logger.warning(
            f"Dropping {len(dropped)} operators that do not fill a committee of "
            f"{committee_size}: {[op.operator_id for op in dropped]}"
        )

    return committees


class CommitteeSelector(Protocol):
    """Chooses the committee for the validator at a given run position."""

    def select(self, committees: Sequence[OperatorCommittee], position: int) -> OperatorCommittee:
        ...


class FixedCommitteeSelector:
    """Assigns every validator to the same committee."""

    def __init__(self, index: int = 0):
        if index < 0:
            raise ValueError(f"Committee index must be >= 0, got {index}")
        self.index = index

    def select(self, committees: Sequence[OperatorCommittee], position: int) -> OperatorCommittee:
        if self.index >= len(committees):
            raise CommitteeSelectionError(
                f"Committee index {self.index} out of range ({len(committees)} committees formed)"
            )
        return committees[self.index]


class RoundRobinCommitteeSelector:
    """Cycles through committees, one validator per committee in turn."""

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError(f"Start index must be >= 0, got {start}")
        self.start = start

    def select(self, committees: Sequence[OperatorCommittee], position: int) -> OperatorCommittee:
        if not committees:
            raise CommitteeSelectionError("No committees to select from")
        return committees[(self.start + position) % len(committees)]


SELECTION_POLICIES = ("fixed", "round-robin")


def selector_from_name(name: str, index: int = 0) -> CommitteeSelector:
    """Build a selector from its CLI name."""
    name = name.lower()
    if name == "fixed":
        return FixedCommitteeSelector(index)
    if name == "round-robin":
        return RoundRobinCommitteeSelector(index)
    raise ValueError(f"Unknown committee selection policy: {name}")
