"""Shamir secret sharing of BLS private keys.

Shares are points on a random polynomial over the BLS12-381 scalar field whose
constant term is the validator secret. Each operator's share is evaluated at
its operator id, so any `threshold` shares recover the secret by Lagrange
interpolation at zero and fewer reveal nothing about it.
"""

import secrets
from typing import Mapping, Sequence

from py_ecc.optimized_bls12_381 import curve_order

MIN_COMMITTEE_SIZE = 4


def fault_tolerance(total: int) -> int:
    """Number of faulty operators a committee of `total` tolerates."""
    return (total - 1) // 3


def threshold_for(total: int) -> int:
    """Shares needed to reconstruct: 3-of-4, 5-of-7, 9-of-13, ..."""
    return total - fault_tolerance(total)


def is_valid_committee_size(total: int) -> bool:
    """Committees must have 3f+1 members and at least MIN_COMMITTEE_SIZE."""
    return total >= MIN_COMMITTEE_SIZE and (total - 1) % 3 == 0


def eval_poly(x: int, coefficients: Sequence[int]) -> int:
    """Evaluate a polynomial (lowest degree first) at x modulo the curve order."""
    result = 0
    for coefficient in reversed(coefficients):
        result = (result * x + coefficient) % curve_order
    return result


def split_secret(secret: int, share_ids: Sequence[int], threshold: int) -> dict[int, int]:
    """Split secret into one share per id.

    Returns a mapping from share id to share secret, in share_ids order.
    """
    if not 0 < secret < curve_order:
        raise ValueError("Secret is not a valid BLS private key")
    if not share_ids:
        raise ValueError("At least one share id is required")
    if len(set(i % curve_order for i in share_ids)) != len(share_ids):
        raise ValueError(f"Share ids must be distinct: {list(share_ids)}")
    if any(i % curve_order == 0 for i in share_ids):
        raise ValueError("Share ids must be non-zero")
    if not 1 <= threshold <= len(share_ids):
        raise ValueError(f"Threshold {threshold} invalid for {len(share_ids)} shares")

    coefficients = [secret] + [
        secrets.randbelow(curve_order - 1) + 1 for _ in range(threshold - 1)
    ]
    return {share_id: eval_poly(share_id, coefficients) for share_id in share_ids}


def recover_secret(shares: Mapping[int, int]) -> int:
    """Recover the polynomial's constant term from (id -> share) points."""
    if not shares:
        raise ValueError("No shares to recover from")

    ids = list(shares)
    secret = 0
    for i in ids:
        numerator = 1
        denominator = 1
        for j in ids:
            if j == i:
                continue
            numerator = (numerator * -j) % curve_order
            denominator = (denominator * (i - j)) % curve_order
        if denominator == 0:
            raise ValueError("Duplicate share ids")
        lagrange = numerator * pow(denominator, -1, curve_order)
        secret = (secret + shares[i] * lagrange) % curve_order
    return secret
