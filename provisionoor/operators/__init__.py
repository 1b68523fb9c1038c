"""Operator directory: registry client and committee formation."""

from .types import OperatorRecord, OperatorCommittee
from .committees import (
    partition_into_committees,
    CommitteeSelector,
    FixedCommitteeSelector,
    RoundRobinCommitteeSelector,
    SELECTION_POLICIES,
    selector_from_name,
)
from .client import OperatorDirectoryClient

__all__ = [
    "OperatorRecord",
    "OperatorCommittee",
    "OperatorDirectoryClient",
    "partition_into_committees",
    "CommitteeSelector",
    "FixedCommitteeSelector",
    "RoundRobinCommitteeSelector",
    "SELECTION_POLICIES",
    "selector_from_name",
]
