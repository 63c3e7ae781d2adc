# -*- coding: utf-8 -*-
# SPDX-FileCopyrightText: 2024 Ledger SAS
# SPDX-License-Identifier: LicenseRef-LEDGER
"""
This module provides the Cardano host client.
It contains the error types raised while signing a transaction.
"""

from typing import Optional, Union

from cardano_client.app_def import Errors


class CardanoClientError(Exception):
    """Base class of all the errors raised by the client"""


class VersionIncompatible(CardanoClientError):
    """The device app version is older than the oldest supported one"""

    def __init__(self, versionString: str, recommendedVersion: Optional[str]) -> None:
        super().__init__(f"Device app version {versionString} unsupported, "
                         f"recommended version is {recommendedVersion}.")
        self.versionString = versionString
        self.recommendedVersion = recommendedVersion


class UnsupportedFeature(CardanoClientError):
    """The request uses a feature the device app version cannot handle"""

    def __init__(self, feature: str, versionString: str) -> None:
        super().__init__(f"{feature} not supported by Ledger app version {versionString}.")
        self.feature = feature
        self.versionString = versionString


class MalformedRequest(CardanoClientError):
    """The request breaks a precondition the caller should have enforced"""


class TransportError(CardanoClientError):
    """The exchange with the device failed, the device state is unknown"""


class DeviceStatusError(TransportError):
    """The device answered with a status word other than success"""

    def __init__(self, status: int, data: bytes = b"") -> None:
        try:
            name: Union[str, int] = Errors(status).name
        except ValueError:
            name = status
        super().__init__(f"Device returned status 0x{status:04X} ({name})")
        self.status = status
        self.data = data


class UnexpectedResponseLength(TransportError):
    """The device response does not have the announced size"""

    def __init__(self, expected: int, received: int) -> None:
        super().__init__(f"Unexpected response length: expected {expected} bytes, got {received}")
        self.expected = expected
        self.received = received
