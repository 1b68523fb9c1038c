"""JSON-RPC client for the execution layer."""

import asyncio
import logging
import time
from typing import Optional, Any

import aiohttp

from .exceptions import RPCError, TransactionReverted, ReceiptTimeout
from .. import metrics

logger = logging.getLogger(__name__)


def _quantity(method: str, value: Any) -> int:
    """Parse a hex QUANTITY from a result. Raises RPCError when malformed."""
    if not isinstance(value, str):
        raise RPCError(-1, f"{method}: expected hex quantity, got {value!r}")
    try:
        return int(value, 16)
    except ValueError:
        raise RPCError(-1, f"{method}: expected hex quantity, got {value!r}") from None


class ExecutionRPCClient:
    """Submits transactions from a single node-managed account.

    All transactions share one nonce sequence. Sends are serialized with a
    lock and the nonce is tracked locally after being seeded from the node's
    pending count, so concurrent callers never reuse a nonce.
    """

    def __init__(
        self,
        url: str,
        sender: str,
        receipt_timeout: float = 180.0,
        poll_interval: float = 2.0,
        timeout: float = 30.0,
    ):
        self.url = url
        self.sender = sender
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self._request_id = 0
        self._nonce: Optional[int] = None
        self._send_lock = asyncio.Lock()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def _call(self, method: str, params: list) -> Any:
        """Make a JSON-RPC call."""
        session = await self._ensure_session()
        self._request_id += 1

        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": self._request_id,
        }

        logger.debug(f"RPC call: {method}")

        start_time = time.time()
        error_type = None

        try:
            async with session.post(
                self.url, json=payload, headers={"Content-Type": "application/json"}
            ) as response:
                try:
                    data = await response.json(content_type=None)
                except ValueError:
                    error_type = "invalid_response"
                    raise RPCError(-1, f"HTTP {response.status}: non-JSON response")

                if not isinstance(data, dict):
                    error_type = "invalid_response"
                    raise RPCError(-1, f"HTTP {response.status}: unexpected response {data!r}")

                if data.get("error") is not None:
                    error = data["error"]
                    if not isinstance(error, dict):
                        error_type = "invalid_response"
                        raise RPCError(-1, repr(error))
                    error_type = str(error.get("code", "unknown"))
                    raise RPCError(error.get("code", -1), str(error.get("message", "")))

                return data.get("result")
        except aiohttp.ClientError as e:
            error_type = "connection_error"
            logger.error(f"RPC connection error: {e}")
            raise
        except asyncio.TimeoutError:
            error_type = "timeout"
            logger.error(f"RPC call {method} timed out after {self.timeout}s")
            raise
        finally:
            latency = time.time() - start_time
            metrics.record_rpc_call(method, latency, error_type)

    async def get_balance(self, address: str, block: str = "latest") -> int:
        """Get an account balance in wei."""
        result = await self._call("eth_getBalance", [address, block])
        return _quantity("eth_getBalance", result)

    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        result = await self._call("eth_getTransactionCount", [address, block])
        return _quantity("eth_getTransactionCount", result)

    async def send_transaction(self, to: str, data: bytes, value: int = 0) -> str:
        """Send a transaction from the sender account and return its hash."""
        async with self._send_lock:
            if self._nonce is None:
                self._nonce = await self.get_transaction_count(self.sender)
                logger.debug(f"Seeded nonce for {self.sender}: {self._nonce}")

            tx = {
                "from": self.sender,
                "to": to,
                "data": "0x" + data.hex(),
                "value": hex(value),
                "nonce": hex(self._nonce),
            }

            try:
                tx_hash = await self._call("eth_sendTransaction", [tx])
                if not isinstance(tx_hash, str) or not tx_hash:
                    raise RPCError(-1, f"eth_sendTransaction: expected transaction hash, got {tx_hash!r}")
            except (RPCError, aiohttp.ClientError, asyncio.TimeoutError):
                # Nonce state unknown after a failed send.
                self._nonce = None
                raise

            self._nonce += 1
            logger.info(f"Sent transaction {tx_hash} (nonce {int(tx['nonce'], 16)})")
            return tx_hash

    async def wait_for_receipt(self, tx_hash: str) -> dict:
        """Poll until the transaction is mined.

        Raises TransactionReverted for status 0 and ReceiptTimeout when the
        deadline passes.
        """
        deadline = time.monotonic() + self.receipt_timeout
        while True:
            receipt = await self._call("eth_getTransactionReceipt", [tx_hash])
            if receipt is not None:
                if not isinstance(receipt, dict):
                    raise RPCError(-1, f"eth_getTransactionReceipt: expected object, got {receipt!r}")
                if _quantity("eth_getTransactionReceipt", receipt.get("status", "0x1")) == 0:
                    raise TransactionReverted(tx_hash, receipt)
                logger.debug(f"Transaction {tx_hash} mined in block {receipt.get('blockNumber')}")
                return receipt
            if time.monotonic() >= deadline:
                raise ReceiptTimeout(tx_hash, self.receipt_timeout)
            await asyncio.sleep(self.poll_interval)

    async def transact(self, to: str, data: bytes, value: int = 0) -> dict:
        """Send a transaction and wait for a successful receipt."""
        tx_hash = await self.send_transaction(to, data, value)
        return await self.wait_for_receipt(tx_hash)

    async def close(self) -> None:
        """Close the client session."""
        if self._session and not self._session.closed:
            await self._session.close()
