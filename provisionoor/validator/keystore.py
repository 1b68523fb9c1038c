"""EIP-2335 keystore decryption."""

import hashlib
import json
import logging
import unicodedata
from typing import Union

from Crypto.Cipher import AES
from Crypto.Protocol.KDF import scrypt, PBKDF2
from Crypto.Hash import SHA256

from ..crypto import pubkey_from_privkey
from ..exceptions import InvalidPassword, MalformedKeystore
from .types import ValidatorKeyMaterial

logger = logging.getLogger(__name__)

_CONTROL_CODES = set(range(0x00, 0x20)) | set(range(0x7F, 0xA0))


def _normalize_password(password: str) -> bytes:
    """NFKD-normalize and strip C0/C1 control codes, as EIP-2335 requires."""
    normalized = unicodedata.normalize("NFKD", password)
    return "".join(c for c in normalized if ord(c) not in _CONTROL_CODES).encode("utf-8")


def _derive_key(kdf: dict, password: bytes) -> bytes:
    kdf_params = kdf["params"]
    if kdf["function"] == "scrypt":
        return scrypt(
            password,
            bytes.fromhex(kdf_params["salt"]),
            key_len=kdf_params.get("dklen", 32),
            N=kdf_params["n"],
            r=kdf_params["r"],
            p=kdf_params["p"],
        )
    if kdf["function"] == "pbkdf2":
        if kdf_params.get("prf", "hmac-sha256") != "hmac-sha256":
            raise MalformedKeystore(f"Unsupported PBKDF2 PRF: {kdf_params['prf']}")
        return PBKDF2(
            password,
            bytes.fromhex(kdf_params["salt"]),
            dkLen=kdf_params.get("dklen", 32),
            count=kdf_params["c"],
            hmac_hash_module=SHA256,
        )
    raise MalformedKeystore(f"Unsupported KDF: {kdf['function']}")


def _decrypt_secret(keystore: dict, password: str) -> bytes:
    """Decrypt an EIP-2335 keystore and return the raw secret bytes."""
    crypto = keystore["crypto"]
    kdf = crypto["kdf"]
    cipher = crypto["cipher"]
    checksum = crypto["checksum"]

    decryption_key = _derive_key(kdf, _normalize_password(password))

    dk_slice = decryption_key[16:32]
    cipher_message = bytes.fromhex(cipher["message"])
    checksum_message = bytes.fromhex(checksum["message"])

    pre_image = dk_slice + cipher_message
    computed_checksum = hashlib.sha256(pre_image).digest()
    if computed_checksum != checksum_message:
        raise InvalidPassword()

    cipher_params = cipher["params"]
    if cipher["function"] == "aes-128-ctr":
        iv = bytes.fromhex(cipher_params["iv"])
        aes_key = decryption_key[:16]
        aes = AES.new(aes_key, AES.MODE_CTR, nonce=b"", initial_value=iv)
        return aes.decrypt(cipher_message)
    raise MalformedKeystore(f"Unsupported cipher: {cipher['function']}")


def decrypt_keystore(keystore: Union[dict, str, bytes], password: str) -> ValidatorKeyMaterial:
    """Decrypt a keystore into validator key material.

    Raises InvalidPassword when the checksum does not match and
    MalformedKeystore for anything structurally wrong with the keystore.
    """
    if isinstance(keystore, (str, bytes)):
        try:
            keystore = json.loads(keystore)
        except ValueError as e:
            raise MalformedKeystore(f"Keystore is not valid JSON: {e}") from e
    if not isinstance(keystore, dict):
        raise MalformedKeystore("Keystore is not a JSON object")

    try:
        secret = _decrypt_secret(keystore, password)
        expected_pubkey = bytes.fromhex(keystore["pubkey"].replace("0x", ""))
    except KeyError as e:
        raise MalformedKeystore(f"Keystore missing field {e}") from e
    except (TypeError, AttributeError) as e:
        raise MalformedKeystore(f"Keystore has unexpected structure: {e}") from e
    except ValueError as e:
        raise MalformedKeystore(f"Keystore has invalid field encoding: {e}") from e

    privkey = int.from_bytes(secret, "big")
    try:
        pubkey = pubkey_from_privkey(privkey)
    except (ValueError, AssertionError) as e:
        raise MalformedKeystore("Keystore secret is not a valid BLS private key") from e

    if pubkey != expected_pubkey:
        raise MalformedKeystore(
            f"Public key mismatch: derived {pubkey.hex()[:16]}..., "
            f"expected {expected_pubkey.hex()[:16]}..."
        )

    logger.debug(f"Decrypted validator key: {pubkey.hex()[:16]}...")
    return ValidatorKeyMaterial(pubkey=pubkey, privkey=privkey)
