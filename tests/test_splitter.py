"""Key share splitting tests."""

import base64
from itertools import combinations

import pytest

from provisionoor.crypto import pubkey_from_privkey
from provisionoor.crypto.rsa import decrypt_share
from provisionoor.crypto.threshold import recover_secret
from provisionoor.exceptions import SplitFailed, SplitFailureReason
from provisionoor.operators.types import OperatorCommittee, OperatorRecord
from provisionoor.shares import KeyShareSet, KeyShareSplitter
from provisionoor.validator.types import ValidatorKeyMaterial


def key_material(validator_keys, i=0):
    sk, pk = validator_keys[i]
    return ValidatorKeyMaterial(pubkey=pk, privkey=sk)


def test_one_share_per_operator_in_committee_order(validator_keys, committee):
    share_set = KeyShareSplitter().split(key_material(validator_keys), committee)

    assert isinstance(share_set, KeyShareSet)
    assert len(share_set) == len(committee)
    assert share_set.operator_ids == committee.operator_ids
    assert share_set.threshold == 3
    assert share_set.validator_pubkey == validator_keys[0][1]


def test_shares_decrypt_only_for_their_operator(validator_keys, committee, rsa_keys):
    share_set = KeyShareSplitter().split(key_material(validator_keys), committee)

    for share in share_set.shares:
        private_pem = rsa_keys[share.operator_id].export_key()
        secret = decrypt_share(private_pem, share.encrypted_share)
        assert "0x" + pubkey_from_privkey(secret).hex() == share.share_public_key


def test_threshold_subsets_reconstruct_validator_key(validator_keys, committee, rsa_keys):
    sk, pk = validator_keys[1]
    share_set = KeyShareSplitter().split(ValidatorKeyMaterial(pubkey=pk, privkey=sk), committee)

    secrets = {
        share.operator_id: decrypt_share(rsa_keys[share.operator_id].export_key(), share.encrypted_share)
        for share in share_set.shares
    }

    for subset in combinations(secrets, share_set.threshold):
        recovered = recover_secret({i: secrets[i] for i in subset})
        assert pubkey_from_privkey(recovered) == pk
    for subset in combinations(secrets, share_set.threshold - 1):
        assert recover_secret({i: secrets[i] for i in subset}) != sk


def test_payload_encodings(validator_keys, committee):
    share_set = KeyShareSplitter().split(key_material(validator_keys), committee)

    for share, operator in zip(share_set.shares, committee):
        assert share.share_public_key.startswith("0x")
        assert len(bytes.fromhex(share.share_public_key[2:])) == 48
        base64.b64decode(share.encrypted_share, validate=True)
        assert base64.b64decode(share.operator_public_key).decode() == operator.public_key


def test_key_material_discarded_after_split(validator_keys, committee):
    material = key_material(validator_keys)
    KeyShareSplitter().split(material, committee)

    assert material.discarded


def test_committee_too_small(validator_keys, operators):
    material = key_material(validator_keys)
    small = OperatorCommittee(tuple(operators[:3]))

    with pytest.raises(SplitFailed) as exc_info:
        KeyShareSplitter().split(material, small)

    assert exc_info.value.reason == SplitFailureReason.COMMITTEE_TOO_SMALL
    assert material.discarded


def test_committee_size_not_3f_plus_1(validator_keys, operators):
    with pytest.raises(SplitFailed) as exc_info:
        KeyShareSplitter().split(key_material(validator_keys), OperatorCommittee(tuple(operators[:5])))

    assert exc_info.value.reason == SplitFailureReason.INVALID_COMMITTEE


def test_seven_operator_committee(validator_keys, operators):
    share_set = KeyShareSplitter().split(key_material(validator_keys), OperatorCommittee(tuple(operators[:7])))

    assert len(share_set) == 7
    assert share_set.threshold == 5


def test_bad_operator_key_is_crypto_error(validator_keys, operators):
    broken = OperatorRecord(operator_id=99, public_key="bm90IGEga2V5")
    committee = OperatorCommittee(tuple(operators[:3]) + (broken,))

    with pytest.raises(SplitFailed) as exc_info:
        KeyShareSplitter().split(key_material(validator_keys), committee)

    assert exc_info.value.reason == SplitFailureReason.CRYPTO_ERROR
    assert "99" in exc_info.value.detail


def test_discarded_material_is_rejected(validator_keys, committee):
    material = key_material(validator_keys)
    material.discard()

    with pytest.raises(SplitFailed) as exc_info:
        KeyShareSplitter().split(material, committee)

    assert exc_info.value.reason == SplitFailureReason.KEYSTORE


def test_split_errors_never_contain_the_private_key(validator_keys, operators):
    sk, pk = validator_keys[0]
    broken = OperatorRecord(operator_id=99, public_key="bm90IGEga2V5")
    committee = OperatorCommittee(tuple(operators[:3]) + (broken,))

    with pytest.raises(SplitFailed) as exc_info:
        KeyShareSplitter().split(ValidatorKeyMaterial(pubkey=pk, privkey=sk), committee)

    assert str(sk) not in str(exc_info.value)
    assert format(sk, "x") not in str(exc_info.value)
