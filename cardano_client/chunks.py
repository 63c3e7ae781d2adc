# -*- coding: utf-8 -*-
# SPDX-FileCopyrightText: 2024 Ledger SAS
# SPDX-License-Identifier: LicenseRef-LEDGER
"""
This module provides the Cardano host client.
It contains the splitting of oversized fields (inline datum, reference script)
into an inline first chunk and follow-up chunk messages.
"""

from typing import List


MAX_CHUNK_SIZE = 240


def needs_chunks(dataHex: str, chunkSize: int = MAX_CHUNK_SIZE) -> bool:
    """Check if the data does not fit in the first chunk"""

    return len(dataHex) // 2 > chunkSize


def first_chunk(dataHex: str, chunkSize: int = MAX_CHUNK_SIZE) -> str:
    """Retrieve the part of the data sent along with the field

    Args:
        dataHex (str): Data hex string
        chunkSize (int): Max chunk size, in bytes

    Returns:
        Up to chunkSize bytes, as hex string
    """

    # 2 hex chars per byte
    return dataHex[:chunkSize * 2]


def split_chunks(dataHex: str, chunkSize: int = MAX_CHUNK_SIZE) -> List[str]:
    """Split the data following the first chunk

    Args:
        dataHex (str): Data hex string
        chunkSize (int): Max chunk size, in bytes

    Returns:
        The follow-up chunks, as hex strings, empty if the data fits in the first chunk
    """

    chunks = []
    payload = dataHex[chunkSize * 2:]
    max_payload_size = chunkSize * 2
    while len(payload) > 0:
        chunks.append(payload[:max_payload_size])
        payload = payload[max_payload_size:]
    return chunks


def join_chunks(firstChunkHex: str, chunksHex: List[str]) -> str:
    return firstChunkHex + "".join(chunksHex)


def serialize_chunk_header(dataHex: str, chunkSize: int = MAX_CHUNK_SIZE) -> bytes:
    """Serialize the data sent along with the field

    Args:
        dataHex (str): Data hex string
        chunkSize (int): Max chunk size, in bytes

    Returns:
        Serialized data
    """

    # Serialization format:
    #    Full data length (4B)
    #    Chunk size (4B)
    #    Chunk data
    data = bytes()
    totalSize = len(dataHex) // 2
    chunkHex = first_chunk(dataHex, chunkSize)
    data += totalSize.to_bytes(4, "big")
    data += (len(chunkHex) // 2).to_bytes(4, "big")
    data += bytes.fromhex(chunkHex)
    return data


def serialize_chunk(chunkHex: str) -> bytes:
    """Serialize a follow-up chunk

    Args:
        chunkHex (str): Chunk hex string

    Returns:
        Serialized chunk
    """

    # Serialization format:
    #    Chunk size (4B)
    #    Chunk data
    data = bytes()
    data += (len(chunkHex) // 2).to_bytes(4, "big")
    data += bytes.fromhex(chunkHex)
    return data
