# MIT License
# Copyright (c) 2025 Hashborn

import hashlib

# Claimable balance ID type prefix (v0 balance IDs)
BALANCE_ID_TYPE_V0 = "00000000"

def sha256(data: bytes) -> bytes:
    """Returns SHA256 hash of bytes."""
    return hashlib.sha256(data).digest()

def sha256_hex(data: bytes) -> str:
    """Returns SHA256 hash of bytes as hex string."""
    return sha256(data).hex()

def operation_id(network_passphrase: str, source_account: str, seq_num: int, op_index: int) -> str:
    """
    Hash identifying one operation within one transaction.

    Unique per (network, source, sequence, index) so that two operations
    never derive the same identifier.
    """
    payload = "|".join([
        sha256_hex(network_passphrase.encode("utf-8")),
        source_account,
        str(seq_num),
        str(op_index),
    ])
    return sha256_hex(payload.encode("utf-8"))

def claimable_balance_id(network_passphrase: str, source_account: str, seq_num: int, op_index: int) -> str:
    """Returns the type-prefixed hex balance ID for a CreateClaimableBalance operation."""
    return BALANCE_ID_TYPE_V0 + operation_id(network_passphrase, source_account, seq_num, op_index)
