# -*- coding: utf-8 -*-
# SPDX-FileCopyrightText: 2024 Ledger SAS
# SPDX-License-Identifier: LicenseRef-LEDGER
"""
This module provides the client tests utility functions
"""

from typing import Any, Tuple
import hashlib

from ecdsa.curves import Ed25519
from ecdsa.keys import SigningKey, VerifyingKey

from cardano_client.utils import BIP32Path, pack_path


def idTestFunc(testCase: Any) -> str:
    """Retrieve the test case name for friendly display

    Args:
        testCase (xxxTestCase): Targeted test case

    Returns:
        Test case name
    """
    return testCase.name


def pop_sized_buf_from_buffer(buffer:bytes, size:int) -> Tuple[bytes, bytes]:
    """Extract a buffer of a given size from a buffer

    Args:
        buffer (bytes): Source buffer
        size (int): Size of the buffer to extract

    Returns:
        Tuple of:
            - The remaining buffer
            - The extracted buffer
    """
    return buffer[size:], buffer[0:size]


def pop_size_prefixed_buf_from_buf(buffer:bytes, lenSize:int) -> Tuple[bytes, int, bytes]:
    """Extract a buffer prefixed with its size from a buffer

    Args:
        buffer (bytes): Source buffer
        lenSize (int): Size of the length prefix

    Returns:
        Tuple of:
            - The remaining buffer
            - The extracted data length
            - The extracted buffer
    """
    data_len = int.from_bytes(buffer[0:lenSize], "big")
    return buffer[lenSize+data_len:], data_len, buffer[lenSize:data_len+lenSize]


def pop_path_from_buffer(buffer: bytes) -> Tuple[bytes, BIP32Path]:
    """Extract a serialized derivation path from a buffer

    Args:
        buffer (bytes): Source buffer

    Returns:
        Tuple of:
            - The remaining buffer
            - The path indexes
    """
    buffer, length = pop_sized_buf_from_buffer(buffer, 1)
    path = []
    for _ in range(length[0]):
        buffer, index = pop_sized_buf_from_buffer(buffer, 4)
        path.append(int.from_bytes(index, "big"))
    return buffer, tuple(path)


def get_device_signing_key(path: BIP32Path) -> SigningKey:
    """Retrieve the emulated device private key of a path

    The key seed is the hash of the serialized path, the emulated device
    has no master seed.
    """
    seed = hashlib.blake2b(pack_path(path), digest_size=32).digest()
    return SigningKey.from_string(seed, curve=Ed25519)


def get_device_pubkey(path: BIP32Path) -> bytes:
    """ Retrieve the Public Key

    Args:
        path (BIP32Path): Derivation path

    Returns:
        The raw public key
    """
    return get_device_signing_key(path).get_verifying_key().to_string()


def verify_signature(path: BIP32Path, signature: bytes, data: bytes) -> None:
    """Check the signature validity

    Args:
        path (BIP32Path): The derivation path
        signature (bytes): The received signature
        data (bytes): The signed data
    """

    ref_pk = get_device_pubkey(path)
    pk: VerifyingKey = VerifyingKey.from_string(ref_pk, curve=Ed25519)
    assert pk.verify(signature, data, hashlib.sha512)
