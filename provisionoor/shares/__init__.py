"""Key share generation."""

from .types import KeyShare, KeyShareSet
from .splitter import KeyShareSplitter

__all__ = ["KeyShare", "KeyShareSet", "KeyShareSplitter"]
