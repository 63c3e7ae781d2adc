# -*- coding: utf-8 -*-
# SPDX-FileCopyrightText: 2024 Ledger SAS
# SPDX-License-Identifier: LicenseRef-LEDGER
"""
This module provides an emulated Cardano app backend for the client tests.

It answers the raw APDUs like the device app would: it records every
message, reassembles the chunked fields, computes a transaction hash over
the received tx body messages and signs with one Ed25519 key per path.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import hashlib

from ragger.backend.interface import RAPDU

from cardano_client.app_def import CLA, Errors, InsType
from cardano_client.sign_tx import P1Type, OutputP2, AuxDataP2
from cardano_client.utils import BIP32Path
from cardano_client.version import Version

from utils import get_device_signing_key, pop_path_from_buffer, pop_size_prefixed_buf_from_buf
from utils import pop_sized_buf_from_buffer


@dataclass(frozen=True)
class ReceivedMessage:
    ins: int
    p1: int
    p2: int
    data: bytes


class DeviceEmulator:
    """Backend answering like the device Cardano app"""

    def __init__(self, version: Version, flags: int = 0) -> None:
        self.version = version
        self.flags = flags
        self.messages: List[ReceivedMessage] = []
        # Fully received datum or script, per chunk sub-stage
        self.reassembled: List[Tuple[int, bytes]] = []
        self.txHash = bytes()
        self.auxDataHash = bytes()
        # Answer this (p1, p2) with the given status word
        self.rejectAt: Optional[Tuple[int, int]] = None
        self.rejectStatus: int = Errors.SW_REJECTED_BY_USER
        self._txHasher = hashlib.blake2b(digest_size=32)
        self._auxHasher = hashlib.blake2b(digest_size=32)
        self._stakingPath: BIP32Path = ()
        self._pendingChunks: Optional[Tuple[int, int, bytes]] = None


    def exchange_raw(self, data: bytes = b"") -> RAPDU:
        """Synchronous APDU exchange

        Args:
            data (bytes): The raw APDU

        Returns:
            Response APDU
        """

        buffer, header = pop_sized_buf_from_buffer(data, 5)
        if len(header) < 5 or header[0] != CLA:
            return RAPDU(Errors.SW_BAD_CLA, b"")
        _, ins, p1, p2, lc = header
        if lc != len(buffer):
            return RAPDU(Errors.SW_MALFORMED_REQUEST_HEADER, b"")

        self.messages.append(ReceivedMessage(ins, p1, p2, buffer))
        if ins == InsType.SIGN_TX and self.rejectAt == (p1, p2):
            return RAPDU(self.rejectStatus, b"")

        if ins == InsType.GET_VERSION:
            response = bytes([self.version.major, self.version.minor, self.version.patch, self.flags])
            return RAPDU(Errors.SW_SUCCESS, response)
        if ins == InsType.DERIVE_PUBLIC_ADDR:
            return self._derive_address(p1, buffer)
        if ins == InsType.SIGN_TX:
            return self._sign_tx(p1, p2, buffer)
        return RAPDU(Errors.SW_UNKNOWN_INS, b"")


    def received(self, ins: int = InsType.SIGN_TX) -> List[Tuple[int, int]]:
        """Retrieve the (p1, p2) of the received messages"""

        return [(m.p1, m.p2) for m in self.messages if m.ins == ins]


    def _derive_address(self, p1: int, payload: bytes) -> RAPDU:
        if p1 != 0x01:
            return RAPDU(Errors.SW_INVALID_REQUEST_PARAMETERS, b"")
        return RAPDU(Errors.SW_SUCCESS, emulated_address(payload))


    def _sign_tx(self, p1: int, p2: int, payload: bytes) -> RAPDU:
        if p1 == P1Type.STAGE_INIT:
            self._txHasher = hashlib.blake2b(digest_size=32)
            self._auxHasher = hashlib.blake2b(digest_size=32)
            self.txHash = bytes()

        if p1 == P1Type.STAGE_AUX_DATA and p2 != 0x00:
            return self._aux_data(p2, payload)

        if p1 == P1Type.STAGE_OUTPUTS:
            status = self._output_chunks(p2, payload)
            if status != Errors.SW_SUCCESS:
                return RAPDU(status, b"")

        if p1 == P1Type.STAGE_CONFIRM:
            self.txHash = self._txHasher.digest()
            return RAPDU(Errors.SW_SUCCESS, self.txHash)

        if p1 == P1Type.STAGE_WITNESSES:
            if not self.txHash:
                return RAPDU(Errors.SW_INVALID_STATE, b"")
            _, path = pop_path_from_buffer(payload)
            signature = get_device_signing_key(path).sign(self.txHash)
            return RAPDU(Errors.SW_SUCCESS, signature)

        self._txHasher.update(bytes([p1, p2]) + payload)
        return RAPDU(Errors.SW_SUCCESS, b"")


    def _aux_data(self, p2: int, payload: bytes) -> RAPDU:
        if p2 == AuxDataP2.STAKING_KEY:
            _, self._stakingPath = pop_path_from_buffer(payload)
        if p2 == AuxDataP2.CONFIRM:
            # Response format:
            #    Auxiliary data hash (32B)
            #    Registration signature (64B)
            self.auxDataHash = self._auxHasher.digest()
            self._txHasher.update(self.auxDataHash)
            signature = get_device_signing_key(self._stakingPath).sign(self.auxDataHash)
            return RAPDU(Errors.SW_SUCCESS, self.auxDataHash + signature)
        self._auxHasher.update(bytes([p2]) + payload)
        return RAPDU(Errors.SW_SUCCESS, b"")


    def _output_chunks(self, p2: int, payload: bytes) -> int:
        """Reassemble the inline datum and the reference script"""

        if p2 == OutputP2.DATUM:
            buffer, datumType = pop_sized_buf_from_buffer(payload, 1)
            if datumType[0] == 0x01:
                self._start_chunks(OutputP2.DATUM_CHUNK, buffer)
        elif p2 == OutputP2.SCRIPT:
            self._start_chunks(OutputP2.SCRIPT_CHUNK, payload)
        elif p2 in (OutputP2.DATUM_CHUNK, OutputP2.SCRIPT_CHUNK):
            if self._pendingChunks is None or self._pendingChunks[0] != p2:
                return Errors.SW_INVALID_STATE
            remaining, size, chunk = pop_size_prefixed_buf_from_buf(payload, 4)
            if remaining or size != len(chunk) or size == 0:
                return Errors.SW_INVALID_DATA
            chunkP2, total, received = self._pendingChunks
            self._pendingChunks = (chunkP2, total, received + chunk)
            self._complete_chunks()
        elif self._pendingChunks is not None:
            # Next field started before the data was complete
            return Errors.SW_INVALID_STATE
        return Errors.SW_SUCCESS


    def _start_chunks(self, chunkP2: int, buffer: bytes) -> None:
        buffer, total = pop_sized_buf_from_buffer(buffer, 4)
        _, _, chunk = pop_size_prefixed_buf_from_buf(buffer, 4)
        self._pendingChunks = (chunkP2, int.from_bytes(total, "big"), chunk)
        self._complete_chunks()


    def _complete_chunks(self) -> None:
        assert self._pendingChunks is not None
        chunkP2, total, received = self._pendingChunks
        if len(received) >= total:
            self.reassembled.append((chunkP2, received))
            self._pendingChunks = None


def emulated_address(addressParams: bytes) -> bytes:
    """Compute the address returned by the emulated device

    Args:
        addressParams (bytes): The serialized address parameters

    Returns:
        Header byte (type and network) followed by a 28B hash of the parameters
    """

    addrType = addressParams[0]
    networkId = addressParams[1] if addrType != 0x08 else 0x01
    header = ((addrType << 4) | (networkId & 0x0F)) & 0xFF
    return bytes([header]) + hashlib.blake2b(addressParams, digest_size=28).digest()
