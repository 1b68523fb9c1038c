"""Keystore decryption tests."""

import json

import pytest

from provisionoor.exceptions import InvalidPassword, MalformedKeystore
from provisionoor.validator import decrypt_keystore

from tests.conftest import PASSWORD
from tests.helpers import make_keystore


def test_decrypt_pbkdf2(validator_keys, keystores):
    sk, pk = validator_keys[0]
    material = decrypt_keystore(keystores[0], PASSWORD)

    assert material.privkey == sk
    assert material.pubkey == pk


def test_decrypt_scrypt(validator_keys):
    sk, pk = validator_keys[1]
    material = decrypt_keystore(make_keystore(sk, PASSWORD, kdf="scrypt"), PASSWORD)

    assert material.pubkey == pk


def test_decrypt_from_json_string(validator_keys, keystores):
    material = decrypt_keystore(json.dumps(keystores[2]), PASSWORD)

    assert material.pubkey == validator_keys[2][1]


def test_wrong_password(keystores):
    with pytest.raises(InvalidPassword):
        decrypt_keystore(keystores[0], "not-the-password")


def test_password_control_codes_are_stripped(validator_keys, keystores):
    material = decrypt_keystore(keystores[0], PASSWORD + "\x7f")

    assert material.pubkey == validator_keys[0][1]


def test_private_key_not_in_repr(validator_keys, keystores):
    sk, _ = validator_keys[0]
    material = decrypt_keystore(keystores[0], PASSWORD)

    assert str(sk) not in repr(material)
    assert hex(sk)[2:] not in repr(material)


@pytest.mark.parametrize("mutate", [
    lambda ks: ks.pop("crypto"),
    lambda ks: ks["crypto"]["kdf"].update(function="argon2"),
    lambda ks: ks["crypto"]["cipher"]["params"].update(iv="zz"),
    lambda ks: ks["crypto"].update(cipher="aes"),
])
def test_malformed_keystore(keystores, mutate):
    keystore = json.loads(json.dumps(keystores[0]))
    mutate(keystore)

    with pytest.raises(MalformedKeystore):
        decrypt_keystore(keystore, PASSWORD)


def test_unsupported_cipher(keystores):
    keystore = json.loads(json.dumps(keystores[0]))
    keystore["crypto"]["cipher"]["function"] = "aes-256-gcm"

    with pytest.raises(MalformedKeystore):
        decrypt_keystore(keystore, PASSWORD)


def test_not_json():
    with pytest.raises(MalformedKeystore):
        decrypt_keystore("{not json", PASSWORD)
    with pytest.raises(MalformedKeystore):
        decrypt_keystore("[1, 2]", PASSWORD)


def test_pubkey_mismatch(validator_keys, keystores):
    keystore = json.loads(json.dumps(keystores[0]))
    keystore["pubkey"] = validator_keys[1][1].hex()

    with pytest.raises(MalformedKeystore):
        decrypt_keystore(keystore, PASSWORD)
