"""Validator key material and deposit data."""

from .types import ValidatorKeyMaterial, DepositData
from .keystore import decrypt_keystore

__all__ = [
    "ValidatorKeyMaterial",
    "DepositData",
    "decrypt_keystore",
]
