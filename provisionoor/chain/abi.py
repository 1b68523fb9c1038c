"""Calldata for the staking pool contract."""

from eth_abi import encode
from eth_utils import keccak

from ..shares.types import KeyShareSet
from ..validator.types import DepositData

DEPOSIT_SIGNATURE = "depositEthToDepositContract(bytes,bytes,bytes,bytes32)"
REGISTER_SIGNATURE = "registerValidatorToSSVNetwork(bytes,bytes[],bytes[],uint32[],uint256)"


def function_selector(signature: str) -> bytes:
    return keccak(text=signature)[:4]


def _hex_to_bytes(value: str) -> bytes:
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


def encode_deposit_call(deposit: DepositData) -> bytes:
    """Encode depositEthToDepositContract(pubkey, withdrawal_credentials, signature, root)."""
    root = bytes.fromhex(deposit.deposit_data_root)
    if len(root) != 32:
        raise ValueError(f"deposit_data_root must be 32 bytes, got {len(root)}")
    args = [
        bytes.fromhex(deposit.pubkey),
        bytes.fromhex(deposit.withdrawal_credentials),
        bytes.fromhex(deposit.signature),
        root,
    ]
    return function_selector(DEPOSIT_SIGNATURE) + encode(["bytes", "bytes", "bytes", "bytes32"], args)


def encode_encrypted_share(encrypted_share: str) -> bytes:
    """ABI-encode a base64 share ciphertext as a `string`, the registry payload format."""
    return encode(["string"], [encrypted_share])


def encode_register_call(key_shares: KeyShareSet, ssv_amount: int) -> bytes:
    """Encode registerValidatorToSSVNetwork(pubkey, publicShares, encryptedShares, operatorIds, amount)."""
    args = [
        key_shares.validator_pubkey,
        [_hex_to_bytes(s) for s in key_shares.public_shares],
        [encode_encrypted_share(s) for s in key_shares.encrypted_shares],
        key_shares.operator_ids,
        ssv_amount,
    ]
    return function_selector(REGISTER_SIGNATURE) + encode(
        ["bytes", "bytes[]", "bytes[]", "uint32[]", "uint256"], args
    )
