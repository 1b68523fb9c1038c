"""Keystore sources and provisioning bookkeeping."""

from .keystores import KeystoreStore, FileKeystoreStore
from .ledger import ProvisionedLedger

__all__ = ["KeystoreStore", "FileKeystoreStore", "ProvisionedLedger"]
