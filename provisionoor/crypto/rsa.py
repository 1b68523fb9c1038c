"""RSA encryption of key shares for operators.

Operator registry keys are base64-encoded PEM RSA public keys. Shares are
encrypted as the `0x`-prefixed hex of the 32-byte share secret with
RSA PKCS#1 v1.5 and transported as base64.
"""

import base64
import binascii

from Crypto.Cipher import PKCS1_v1_5
from Crypto.PublicKey import RSA

from ..exceptions import ShareEncryptionError


def load_operator_key(public_key_b64: str) -> RSA.RsaKey:
    """Decode an operator registry public key."""
    try:
        pem = base64.b64decode(public_key_b64, validate=True)
        return RSA.import_key(pem)
    except (binascii.Error, ValueError, IndexError, TypeError) as e:
        raise ShareEncryptionError(f"Invalid operator public key: {e}") from e


def share_plaintext(share_secret: int) -> bytes:
    return ("0x" + share_secret.to_bytes(32, "big").hex()).encode("ascii")


def encrypt_share(public_key_b64: str, share_secret: int) -> str:
    """Encrypt a share secret so only the operator holding the RSA key can read it."""
    key = load_operator_key(public_key_b64)
    try:
        ciphertext = PKCS1_v1_5.new(key).encrypt(share_plaintext(share_secret))
    except ValueError as e:
        raise ShareEncryptionError(f"RSA encryption failed: {e}") from e
    return base64.b64encode(ciphertext).decode("ascii")


def decrypt_share(private_key_pem: bytes, ciphertext_b64: str) -> int:
    """Decrypt a share with an operator's RSA private key."""
    try:
        key = RSA.import_key(private_key_pem)
        ciphertext = base64.b64decode(ciphertext_b64, validate=True)
    except (binascii.Error, ValueError, IndexError, TypeError) as e:
        raise ShareEncryptionError(f"Cannot decode share ciphertext: {e}") from e

    plaintext = PKCS1_v1_5.new(key).decrypt(ciphertext, None)
    if plaintext is None:
        raise ShareEncryptionError("Share ciphertext did not decrypt with this key")

    text = plaintext.decode("ascii", errors="replace")
    try:
        if not text.startswith("0x"):
            raise ValueError("missing 0x prefix")
        return int(text[2:], 16)
    except ValueError as e:
        raise ShareEncryptionError(f"Decrypted share has unexpected format: {e}") from e


def encode_operator_key(public_key_b64: str) -> str:
    """Base64-encode a registry key again for inclusion in a share payload."""
    return base64.b64encode(public_key_b64.encode("ascii")).decode("ascii")
