# -*- coding: utf-8 -*-
# SPDX-FileCopyrightText: 2024 Ledger SAS
# SPDX-License-Identifier: LicenseRef-LEDGER
"""
This module provides the client tests for Derive Address check
"""

import pytest
import base58

from cardano_client.app_def import Errors, InsType
from cardano_client.command_builder import CommandBuilder
from cardano_client.command_sender import CommandSender, P1_RETURN
from cardano_client.errors import DeviceStatusError
from cardano_client.interaction import Message

from emulator import DeviceEmulator, emulated_address
from input_files.derive_address import DeriveAddressTestCase, byronTestCases, shelleyTestCases
from input_files.signTx import LATEST_VERSION
from utils import idTestFunc


@pytest.mark.parametrize(
    "testCase",
    byronTestCases,
    ids=idTestFunc
)
def test_derive_address_byron(client: CommandSender, testCase: DeriveAddressTestCase) -> None:
    """Check Derive Byron Address"""

    # Send the APDU
    response = client.derive_address(testCase.params, LATEST_VERSION)

    expected = emulated_address(CommandBuilder(LATEST_VERSION).address_params(testCase.params))
    assert base58.b58encode(bytes.fromhex(response)) == base58.b58encode(expected)
    assert bytes.fromhex(response)[0] == testCase.header


@pytest.mark.parametrize(
    "testCase",
    shelleyTestCases,
    ids=idTestFunc
)
def test_derive_address_shelley(backend: DeviceEmulator,
                                client: CommandSender,
                                testCase: DeriveAddressTestCase) -> None:
    """Check Derive Shelley Address"""

    # Send the APDU, the app version is queried first
    response = client.derive_address(testCase.params)

    address = bytes.fromhex(response)
    assert len(address) == 29
    assert address[0] == testCase.header

    assert [m.ins for m in backend.messages] == [InsType.GET_VERSION, InsType.DERIVE_PUBLIC_ADDR]
    message = backend.messages[-1]
    assert message.p1 == P1_RETURN
    assert message.data == CommandBuilder(LATEST_VERSION).address_params(testCase.params)


def test_derive_address_reject(backend: DeviceEmulator, client: CommandSender) -> None:
    """Check a device error is reported as such"""

    data = CommandBuilder(LATEST_VERSION).address_params(shelleyTestCases[0].params)
    with pytest.raises(DeviceStatusError) as err:
        client.send(Message(InsType.DERIVE_PUBLIC_ADDR, 0x02, 0x00, data))
    assert err.value.status == Errors.SW_INVALID_REQUEST_PARAMETERS
    assert len(backend.messages) == 1
