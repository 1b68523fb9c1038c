"""SQLite record of how far each validator got through provisioning."""

import logging
import sqlite3
import time
from pathlib import Path
from typing import Optional, Sequence, Union

logger = logging.getLogger(__name__)

STAGE_DEPOSITED = "deposited"
STAGE_REGISTERED = "registered"


class ProvisionedLedger:
    """Remembers which validator public keys were deposited and registered.

    A re-run skips registered validators entirely and does not deposit again
    for validators whose deposit already went through.
    """

    def __init__(self, data_dir: Union[str, Path, None] = None):
        self.data_dir = Path(data_dir) if data_dir else Path(".")
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._db_path = self.data_dir / "provisioned.db"
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    def _init_db(self) -> None:
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS validators (
                pubkey BLOB PRIMARY KEY,
                stage TEXT NOT NULL,
                operator_ids TEXT,
                updated_at INTEGER
            );
        """)
        self._conn.commit()
        logger.info(f"Provisioning ledger at {self._db_path}")

    def stage(self, pubkey: bytes) -> Optional[str]:
        cursor = self._conn.cursor()
        cursor.execute("SELECT stage FROM validators WHERE pubkey = ?", (pubkey,))
        row = cursor.fetchone()
        return row[0] if row else None

    def is_deposited(self, pubkey: bytes) -> bool:
        return self.stage(pubkey) in (STAGE_DEPOSITED, STAGE_REGISTERED)

    def is_registered(self, pubkey: bytes) -> bool:
        return self.stage(pubkey) == STAGE_REGISTERED

    def _save(self, pubkey: bytes, stage: str, operator_ids: Sequence[int] = ()) -> None:
        self._conn.execute(
            "INSERT OR REPLACE INTO validators (pubkey, stage, operator_ids, updated_at) VALUES (?, ?, ?, ?)",
            (pubkey, stage, ",".join(str(i) for i in operator_ids), int(time.time())),
        )
        self._conn.commit()
        logger.debug(f"Validator {pubkey.hex()[:16]}... now {stage}")

    def record_deposit(self, pubkey: bytes) -> None:
        self._save(pubkey, STAGE_DEPOSITED)

    def record_registration(self, pubkey: bytes, operator_ids: Sequence[int]) -> None:
        self._save(pubkey, STAGE_REGISTERED, operator_ids)

    def operator_ids(self, pubkey: bytes) -> Optional[list[int]]:
        cursor = self._conn.cursor()
        cursor.execute("SELECT operator_ids FROM validators WHERE pubkey = ?", (pubkey,))
        row = cursor.fetchone()
        if row is None:
            return None
        return [int(i) for i in row[0].split(",") if i]

    def registered_count(self) -> int:
        cursor = self._conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM validators WHERE stage = ?", (STAGE_REGISTERED,))
        return cursor.fetchone()[0]

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None
