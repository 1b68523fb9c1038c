"""Pytest fixtures for provisionoor tests."""

import pytest
from Crypto.PublicKey import RSA

from provisionoor.crypto import pubkey_from_privkey
from provisionoor.operators.types import OperatorCommittee

from tests.helpers import (
    MemoryKeystoreStore,
    RecordingDepositGateway,
    RecordingRegistrationGateway,
    StaticDirectory,
    make_deposit,
    make_keystore,
    operator_record,
)

PASSWORD = "testpassword"
OPERATOR_IDS = [3, 7, 11, 12, 20, 21, 35, 40]


@pytest.fixture(scope="session")
def rsa_keys():
    """One 1024-bit RSA key per operator id (small keys keep tests fast)."""
    return {operator_id: RSA.generate(1024) for operator_id in OPERATOR_IDS}


@pytest.fixture(scope="session")
def operators(rsa_keys):
    return [operator_record(operator_id, rsa_keys[operator_id]) for operator_id in OPERATOR_IDS]


@pytest.fixture
def committee(operators):
    return OperatorCommittee(tuple(operators[:4]))


@pytest.fixture(scope="session")
def validator_keys():
    """Three validator key pairs as (privkey, pubkey)."""
    privkeys = [0x1F2E3D4C5B6A7988, 0x2A3B4C5D6E7F8091, 0x3C4D5E6F708192A3]
    return [(sk, pubkey_from_privkey(sk)) for sk in privkeys]


@pytest.fixture(scope="session")
def keystores(validator_keys):
    return [make_keystore(sk, PASSWORD) for sk, _ in validator_keys]


@pytest.fixture
def keystore_store(validator_keys, keystores):
    store = MemoryKeystoreStore()
    for i, ((_, pubkey), keystore) in enumerate(zip(validator_keys, keystores), start=1):
        store.add(i, keystore, make_deposit(pubkey))
    return store


@pytest.fixture
def directory(operators):
    return StaticDirectory(operators)


@pytest.fixture
def deposit_gateway():
    return RecordingDepositGateway()


@pytest.fixture
def registration_gateway():
    return RecordingRegistrationGateway()
