"""Exceptions for execution-layer RPC access."""


class RPCError(Exception):
    """Error object returned by a JSON-RPC endpoint."""

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(f"RPC error {code}: {message}")


class TransactionReverted(Exception):
    """A mined transaction has status 0."""

    def __init__(self, tx_hash: str, receipt: dict):
        self.tx_hash = tx_hash
        self.receipt = receipt
        super().__init__(f"Transaction {tx_hash} reverted in block {receipt.get('blockNumber')}")


class ReceiptTimeout(Exception):
    """No receipt arrived before the deadline."""

    def __init__(self, tx_hash: str, timeout: float):
        self.tx_hash = tx_hash
        self.timeout = timeout
        super().__init__(f"No receipt for {tx_hash} after {timeout:.0f}s")
