"""Keystore and deposit data sources keyed by validator index."""

import json
import logging
from pathlib import Path
from typing import Protocol, Union

from ..exceptions import KeystoreNotFound
from ..validator.types import DepositData

logger = logging.getLogger(__name__)

KeystoreBlob = Union[dict, str]


class KeystoreStore(Protocol):
    """Source of validator keystores and their deposit data, indexed from 1."""

    def load(self, index: int) -> tuple[KeystoreBlob, DepositData]:
        ...

    def count(self) -> int:
        ...


class FileKeystoreStore:
    """Reads keystore{i}.json and deposit{i}.json files.

    Deposit files may hold a single object or the one-element list written by
    staking-deposit-cli. Keystore JSON is passed on unparsed when it does not
    decode so the decrypt step can reject that one validator.
    """

    def __init__(self, keystores_dir: Union[str, Path], deposits_dir: Union[str, Path]):
        self.keystores_dir = Path(keystores_dir)
        self.deposits_dir = Path(deposits_dir)

    def keystore_path(self, index: int) -> Path:
        return self.keystores_dir / f"keystore{index}.json"

    def deposit_path(self, index: int) -> Path:
        return self.deposits_dir / f"deposit{index}.json"

    def count(self) -> int:
        if not self.keystores_dir.is_dir():
            return 0
        return len(list(self.keystores_dir.glob("keystore*.json")))

    def load(self, index: int) -> tuple[KeystoreBlob, DepositData]:
        keystore_path = self.keystore_path(index)
        deposit_path = self.deposit_path(index)

        if not keystore_path.is_file():
            raise KeystoreNotFound(index, f"keystore file not found: {keystore_path}")
        if not deposit_path.is_file():
            raise KeystoreNotFound(index, f"deposit data file not found: {deposit_path}")

        raw_keystore = keystore_path.read_text()
        try:
            keystore: KeystoreBlob = json.loads(raw_keystore)
        except json.JSONDecodeError as e:
            logger.warning(f"Keystore {keystore_path} is not valid JSON: {e}")
            keystore = raw_keystore

        try:
            with open(deposit_path, "r") as f:
                deposit = json.load(f)
            if isinstance(deposit, list):
                if len(deposit) != 1:
                    raise ValueError(f"expected one deposit entry, found {len(deposit)}")
                deposit = deposit[0]
            if not isinstance(deposit, dict):
                raise ValueError("deposit data is not a JSON object")
            deposit_data = DepositData.from_dict(deposit)
        except ValueError as e:
            raise KeystoreNotFound(index, f"invalid deposit data in {deposit_path}: {e}") from e

        return keystore, deposit_data
