"""Shared test helpers: keystore generation, fakes for external collaborators."""

import asyncio
import base64
import hashlib
import os
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from aiohttp import web
from aiohttp.test_utils import TestServer
from Crypto.Cipher import AES
from Crypto.Hash import SHA256
from Crypto.Protocol.KDF import PBKDF2, scrypt

from provisionoor.crypto import pubkey_from_privkey
from provisionoor.exceptions import (
    DepositFailed,
    DirectoryUnavailable,
    KeystoreNotFound,
    RegistrationFailed,
)
from provisionoor.operators.types import OperatorRecord
from provisionoor.validator.types import DepositData

WITHDRAWAL_CREDENTIALS = "01" + "00" * 11 + "ab" * 20


def run(coro):
    return asyncio.run(coro)


def make_keystore(privkey: int, password: str, kdf: str = "pbkdf2") -> dict:
    """Build an EIP-2335 keystore with cheap KDF parameters."""
    salt = os.urandom(32)
    iv = os.urandom(16)
    secret = privkey.to_bytes(32, "big")

    if kdf == "pbkdf2":
        kdf_params = {"dklen": 32, "c": 2, "prf": "hmac-sha256", "salt": salt.hex()}
        dk = PBKDF2(password.encode("utf-8"), salt, dkLen=32, count=2, hmac_hash_module=SHA256)
    else:
        kdf_params = {"dklen": 32, "n": 16, "r": 8, "p": 1, "salt": salt.hex()}
        dk = scrypt(password.encode("utf-8"), salt, key_len=32, N=16, r=8, p=1)

    cipher_message = AES.new(dk[:16], AES.MODE_CTR, nonce=b"", initial_value=iv).encrypt(secret)
    checksum = hashlib.sha256(dk[16:32] + cipher_message).digest()

    return {
        "crypto": {
            "kdf": {"function": kdf, "params": kdf_params, "message": ""},
            "checksum": {"function": "sha256", "params": {}, "message": checksum.hex()},
            "cipher": {
                "function": "aes-128-ctr",
                "params": {"iv": iv.hex()},
                "message": cipher_message.hex(),
            },
        },
        "description": "",
        "pubkey": pubkey_from_privkey(privkey).hex(),
        "path": "m/12381/3600/0/0/0",
        "uuid": str(uuid.uuid4()),
        "version": 4,
    }


def make_deposit(pubkey: bytes) -> DepositData:
    return DepositData(
        pubkey=pubkey.hex(),
        withdrawal_credentials=WITHDRAWAL_CREDENTIALS,
        signature="a" + "0" * 191,
        deposit_data_root="11" * 32,
    )


def deposit_json(pubkey: bytes) -> dict:
    """A deposit_data entry as written by staking-deposit-cli."""
    deposit = make_deposit(pubkey)
    return {
        "pubkey": deposit.pubkey,
        "withdrawal_credentials": deposit.withdrawal_credentials,
        "amount": 32000000000,
        "signature": deposit.signature,
        "deposit_message_root": "22" * 32,
        "deposit_data_root": deposit.deposit_data_root,
        "fork_version": "00000000",
    }


def operator_record(operator_id: int, rsa_key) -> OperatorRecord:
    pem = rsa_key.publickey().export_key(format="PEM")
    return OperatorRecord(operator_id=operator_id, public_key=base64.b64encode(pem).decode("ascii"))


class MemoryKeystoreStore:
    def __init__(self, entries: Optional[dict] = None):
        self.entries = dict(entries or {})

    def add(self, index: int, keystore, deposit: DepositData) -> None:
        self.entries[index] = (keystore, deposit)

    def count(self) -> int:
        return len(self.entries)

    def load(self, index: int):
        if index not in self.entries:
            raise KeystoreNotFound(index, "no keystore in memory store")
        return self.entries[index]


class StaticDirectory:
    def __init__(self, operators=None, error: Optional[Exception] = None):
        self.operators = list(operators or [])
        self.error = error
        self.calls = 0

    async def fetch_operators(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.operators)


class RecordingDepositGateway:
    def __init__(self, fail_pubkeys=()):
        self.fail_pubkeys = set(fail_pubkeys)
        self.deposits: list[DepositData] = []

    async def deposit(self, deposit: DepositData) -> None:
        if deposit.pubkey in self.fail_pubkeys:
            raise DepositFailed("execution reverted: deposit contract rejected")
        self.deposits.append(deposit)


class RecordingRegistrationGateway:
    """Registers key share sets; rejects public keys it has already seen."""

    def __init__(self, fail_pubkeys=()):
        self.fail_pubkeys = set(fail_pubkeys)
        self.registered: dict[bytes, object] = {}
        self.attempts = 0

    async def register(self, key_shares) -> None:
        self.attempts += 1
        if key_shares.validator_pubkey in self.fail_pubkeys:
            raise RegistrationFailed("execution reverted: insufficient SSV balance")
        if key_shares.validator_pubkey in self.registered:
            raise RegistrationFailed("execution reverted: ValidatorAlreadyExists")
        self.registered[key_shares.validator_pubkey] = key_shares


def directory_outage() -> StaticDirectory:
    return StaticDirectory(error=DirectoryUnavailable("Operator registry returned 500: boom"))


@asynccontextmanager
async def serve(app: web.Application):
    """Run an aiohttp app on a random local port and yield its base URL."""
    server = TestServer(app)
    await server.start_server()
    try:
        yield str(server.make_url("")).rstrip("/")
    finally:
        await server.close()


class FakeExecutionNode:
    """Minimal JSON-RPC execution node with one unlocked account.

    Transactions are mined immediately. Calldata whose selector is in
    revert_selectors yields a status 0 receipt; rpc_errors maps a method name
    to an error object returned instead of a result. Each entry queued in
    replies[method] replaces the body of one response to that method. Every
    response waits `delay` seconds first.
    """

    def __init__(self, balance_wei: int = 0, pending_nonce: int = 0):
        self.balance_wei = balance_wei
        self.pending_nonce = pending_nonce
        self.revert_selectors: set[str] = set()
        self.rpc_errors: dict[str, dict] = {}
        self.replies: dict[str, list[dict]] = {}
        self.transactions: list[dict] = []
        self.receipts: dict[str, dict] = {}
        self.methods: list[str] = []
        self.delay = 0.0

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/", self.handle)
        return app

    async def handle(self, request: web.Request) -> web.Response:
        body = await request.json()
        method, params = body["method"], body["params"]
        self.methods.append(method)
        if self.delay:
            await asyncio.sleep(self.delay)

        if self.replies.get(method):
            reply = self.replies[method].pop(0)
            return web.json_response({"jsonrpc": "2.0", "id": body["id"], **reply})

        if method in self.rpc_errors:
            return web.json_response({"jsonrpc": "2.0", "id": body["id"], "error": self.rpc_errors[method]})

        if method == "eth_getBalance":
            result = hex(self.balance_wei)
        elif method == "eth_getTransactionCount":
            result = hex(self.pending_nonce)
        elif method == "eth_sendTransaction":
            result = self._mine(params[0])
        elif method == "eth_getTransactionReceipt":
            result = self.receipts.get(params[0])
        else:
            return web.json_response({
                "jsonrpc": "2.0", "id": body["id"],
                "error": {"code": -32601, "message": f"method {method} not found"},
            })
        return web.json_response({"jsonrpc": "2.0", "id": body["id"], "result": result})

    def _mine(self, tx: dict) -> str:
        self.transactions.append(tx)
        self.pending_nonce += 1
        tx_hash = "0x" + hashlib.sha256(repr(tx).encode()).hexdigest()
        status = "0x0" if tx["data"][:10] in self.revert_selectors else "0x1"
        self.receipts[tx_hash] = {
            "transactionHash": tx_hash,
            "blockNumber": hex(len(self.transactions)),
            "status": status,
        }
        return tx_hash
