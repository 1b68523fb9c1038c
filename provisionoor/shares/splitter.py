"""Split validator keys into encrypted operator shares."""

import logging

from ..crypto import pubkey_from_privkey
from ..crypto.rsa import encode_operator_key, encrypt_share
from ..crypto.threshold import (
    MIN_COMMITTEE_SIZE,
    is_valid_committee_size,
    split_secret,
    threshold_for,
)
from ..exceptions import ShareEncryptionError, SplitFailed, SplitFailureReason
from ..operators.types import OperatorCommittee
from ..validator.types import ValidatorKeyMaterial
from .types import KeyShare, KeyShareSet

logger = logging.getLogger(__name__)


class KeyShareSplitter:
    """Produces a KeyShareSet from a decrypted key and an operator committee.

    Pure CPU work: no network or disk access. The key material is discarded
    once the shares exist, whether or not splitting succeeded.
    """

    def __init__(self, min_committee_size: int = MIN_COMMITTEE_SIZE):
        self.min_committee_size = min_committee_size

    def _check_committee(self, committee: OperatorCommittee) -> None:
        size = len(committee)
        if size < self.min_committee_size:
            raise SplitFailed(
                SplitFailureReason.COMMITTEE_TOO_SMALL,
                f"committee has {size} operators, minimum is {self.min_committee_size}",
            )
        if not is_valid_committee_size(size):
            raise SplitFailed(
                SplitFailureReason.INVALID_COMMITTEE,
                f"committee size {size} is not of the form 3f+1",
            )

    def split(self, key_material: ValidatorKeyMaterial, committee: OperatorCommittee) -> KeyShareSet:
        try:
            self._check_committee(committee)
            if key_material.discarded:
                raise SplitFailed(SplitFailureReason.KEYSTORE, "key material already discarded")
            return self._split(key_material, committee)
        finally:
            key_material.discard()

    def _split(self, key_material: ValidatorKeyMaterial, committee: OperatorCommittee) -> KeyShareSet:
        threshold = threshold_for(len(committee))
        operator_ids = committee.operator_ids

        try:
            share_secrets = split_secret(key_material.privkey, operator_ids, threshold)
        except ValueError as e:
            raise SplitFailed(SplitFailureReason.CRYPTO_ERROR, str(e)) from e

        shares = []
        for operator in committee:
            share_secret = share_secrets[operator.operator_id]
            try:
                encrypted = encrypt_share(operator.public_key, share_secret)
                share_pubkey = pubkey_from_privkey(share_secret)
            except (ShareEncryptionError, ValueError) as e:
                raise SplitFailed(
                    SplitFailureReason.CRYPTO_ERROR,
                    f"operator {operator.operator_id}: {e}",
                ) from e
            shares.append(KeyShare(
                operator_id=operator.operator_id,
                encrypted_share=encrypted,
                share_public_key="0x" + share_pubkey.hex(),
                operator_public_key=encode_operator_key(operator.public_key),
            ))
        share_secrets.clear()

        logger.debug(
            f"Split validator {key_material.pubkey.hex()[:16]}... into {len(shares)} shares "
            f"(threshold {threshold}) for operators {operator_ids}"
        )
        return KeyShareSet(
            validator_pubkey=key_material.pubkey,
            shares=tuple(shares),
            threshold=threshold,
        )
