# -*- coding: utf-8 -*-
# SPDX-FileCopyrightText: 2024 Ledger SAS
# SPDX-License-Identifier: LicenseRef-LEDGER
"""
This module provides the client tests for the signing request checks
"""

import pytest

from cardano_client.command_sender import CommandSender
from cardano_client.errors import MalformedRequest, UnsupportedFeature, VersionIncompatible
from cardano_client.tx_types import SigningRequest
from cardano_client.validator import ensure_request_supported_by_app_version, ensure_request_well_formed
from cardano_client.version import Version, get_version_string

from emulator import DeviceEmulator
from input_files.signTx import LATEST_VERSION, RejectTestCase, MalformedTestCase, SignTxTestCase
from input_files.signTx import rejectTestCases, malformedTestCases, signTxTestCases, voteRegistrationTestCases
from utils import idTestFunc


@pytest.mark.parametrize("testCase", rejectTestCases, ids=idTestFunc)
def test_unsupported_feature(testCase: RejectTestCase) -> None:
    request = SigningRequest(testCase.tx, testCase.signingMode, testCase.additionalWitnessPaths)

    with pytest.raises(UnsupportedFeature) as err:
        ensure_request_supported_by_app_version(testCase.version, request)
    assert err.value.feature == testCase.feature
    assert err.value.versionString == get_version_string(testCase.version)

    # Same request is fine for the latest app
    ensure_request_supported_by_app_version(LATEST_VERSION, request)


@pytest.mark.parametrize("testCase", rejectTestCases, ids=idTestFunc)
def test_unsupported_feature_sends_nothing(testCase: RejectTestCase) -> None:
    backend = DeviceEmulator(testCase.version)
    client = CommandSender(backend)
    request = SigningRequest(testCase.tx, testCase.signingMode, testCase.additionalWitnessPaths)

    with pytest.raises(UnsupportedFeature):
        client.sign_tx(request, testCase.version)
    assert not backend.messages


@pytest.mark.parametrize("testCase", signTxTestCases + voteRegistrationTestCases, ids=idTestFunc)
def test_supported_requests(testCase: SignTxTestCase) -> None:
    request = SigningRequest(testCase.tx, testCase.signingMode, testCase.additionalWitnessPaths)
    ensure_request_well_formed(request)
    ensure_request_supported_by_app_version(testCase.version, request)


@pytest.mark.parametrize("testCase", malformedTestCases, ids=idTestFunc)
def test_malformed_request(testCase: MalformedTestCase) -> None:
    backend = DeviceEmulator(LATEST_VERSION)
    client = CommandSender(backend)
    request = SigningRequest(testCase.tx, testCase.signingMode)

    with pytest.raises(MalformedRequest):
        ensure_request_well_formed(request)
    with pytest.raises(MalformedRequest):
        client.sign_tx(request, LATEST_VERSION)
    assert not backend.messages


def test_incompatible_version_sends_nothing() -> None:
    testCase = signTxTestCases[0]
    backend = DeviceEmulator(Version(2, 1, 0))
    client = CommandSender(backend)

    with pytest.raises(VersionIncompatible):
        client.sign_tx(SigningRequest(testCase.tx, testCase.signingMode))
    # Only the version query reached the device
    assert [m.ins for m in backend.messages] == [0x00]
