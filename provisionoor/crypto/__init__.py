"""Cryptographic utilities.

BLS operations use py_ecc (G2 proof-of-possession ciphersuite, as used by
Ethereum validators).
"""

from py_ecc.bls import G2ProofOfPossession as _py_ecc_bls


def pubkey_from_privkey(privkey: int) -> bytes:
    """Derive a compressed 48-byte BLS public key from a private key."""
    return _py_ecc_bls.SkToPk(privkey)


__all__ = [
    "pubkey_from_privkey",
]
