"""Configuration for a provisioning run."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .chain.gateways import DEFAULT_SSV_AMOUNT
from .operators.client import DEFAULT_PER_PAGE
from .orchestrator.pipeline import DEFAULT_COMMITTEE_SIZE


@dataclass
class Config:
    """Provisioning configuration."""

    directory_url: str = "https://api.ssv.network/api/v4/mainnet"
    directory_per_page: int = DEFAULT_PER_PAGE
    rpc_url: str = "http://localhost:8545"
    sender: str = ""
    pool_address: str = ""
    keystores_dir: str = "./keystores"
    deposits_dir: str = "./deposits"
    password_file: str = ""
    committee_size: int = DEFAULT_COMMITTEE_SIZE
    selection_policy: str = "fixed"
    committee_index: int = 0
    ssv_amount: int = DEFAULT_SSV_AMOUNT
    data_dir: Optional[str] = None
    rpc_timeout: float = 30.0
    receipt_timeout: float = 180.0
    metrics_port: Optional[int] = None
    log_level: str = "INFO"

    @property
    def password(self) -> str:
        if not self.password_file:
            return ""
        return Path(self.password_file).read_text().rstrip("\r\n")
