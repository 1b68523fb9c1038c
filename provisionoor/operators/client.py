"""Operator registry API client."""

import logging
from typing import Optional

import aiohttp

from ..exceptions import DirectoryUnavailable
from .. import metrics
from .types import OperatorRecord

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 100


class OperatorDirectoryClient:
    """Fetches operator records from an SSV-style operator registry API."""

    def __init__(
        self,
        base_url: str,
        per_page: int = DEFAULT_PER_PAGE,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.per_page = per_page
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def fetch_operators(self) -> list[OperatorRecord]:
        """Fetch operators ordered by ascending id.

        Raises DirectoryUnavailable on transport errors, non-200 responses and
        malformed payloads. Never retries; the caller decides whether to abort.
        """
        session = await self._ensure_session()
        url = f"{self.base_url}/operators"
        params = {"page": "1", "perPage": str(self.per_page), "ordering": "id:asc"}

        logger.debug(f"Fetching operators from {url}")

        try:
            async with session.get(url, params=params) as response:
                if response.status != 200:
                    text = await response.text()
                    metrics.record_directory_error("http_status")
                    raise DirectoryUnavailable(
                        f"Operator registry returned {response.status}: {text[:200]}"
                    )
                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    metrics.record_directory_error("malformed")
                    raise DirectoryUnavailable(f"Operator registry returned invalid JSON: {e}") from e
        except aiohttp.ClientError as e:
            metrics.record_directory_error("connection_error")
            raise DirectoryUnavailable(f"Operator registry unreachable: {e}") from e

        operators = self._parse_operators(data)
        metrics.operators_fetched.set(len(operators))
        logger.info(f"Fetched {len(operators)} operators from registry")
        return operators

    @staticmethod
    def _parse_operators(data) -> list[OperatorRecord]:
        if not isinstance(data, dict) or not isinstance(data.get("operators"), list):
            metrics.record_directory_error("malformed")
            raise DirectoryUnavailable("Operator registry payload has no 'operators' list")

        records = []
        for entry in data["operators"]:
            try:
                records.append(OperatorRecord.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                metrics.record_directory_error("malformed")
                raise DirectoryUnavailable(f"Malformed operator record {entry!r}: {e}") from e

        ids = [r.operator_id for r in records]
        if len(set(ids)) != len(ids):
            metrics.record_directory_error("malformed")
            raise DirectoryUnavailable("Operator registry returned duplicate operator ids")

        return sorted(records, key=lambda r: r.operator_id)

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "OperatorDirectoryClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()
