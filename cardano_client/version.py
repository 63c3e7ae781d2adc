# -*- coding: utf-8 -*-
# SPDX-FileCopyrightText: 2024 Ledger SAS
# SPDX-License-Identifier: LicenseRef-LEDGER
"""
This module provides the Cardano host client.
It contains the device app versions and the features each of them supports.
"""

from dataclasses import dataclass
from typing import Optional

from cardano_client.errors import VersionIncompatible


@dataclass(frozen=True, order=True)
class Version:
    major: int
    minor: int
    patch: int = 0

    def __str__(self) -> str:
        return get_version_string(self)


@dataclass(frozen=True)
class AppFlags:
    isDebug: bool
    isAppXS: bool


@dataclass(frozen=True)
class DeviceCompatibility:
    isCompatible: bool
    recommendedVersion: Optional[str]
    supportsMary: bool
    supportsCatalystRegistration: bool
    supportsZeroTtl: bool
    supportsPoolRegistrationAsOperator: bool
    supportsPoolRetirement: bool
    supportsNativeScriptHashDerivation: bool
    supportsMultisigTransaction: bool
    supportsMint: bool
    supportsAlonzo: bool
    supportsReqSignersInOrdinaryTx: bool
    supportsBabbage: bool
    supportsCIP36: bool
    supportsCIP36Vote: bool


MIN_SUPPORTED_VERSION = Version(2, 2, 0)
RECOMMENDED_VERSION = "6.0"


def get_version_string(version: Version) -> str:
    return f"{version.major}.{version.minor}.{version.patch}"


def version_from_response(data: bytes) -> Version:
    """Parse the GET_VERSION response

    Args:
        data (bytes): Response data (major, minor, patch, flags)

    Returns:
        The app version
    """

    # Response format:
    #    Major (1B)
    #    Minor (1B)
    #    Patch (1B)
    #    Flags (1B)
    return Version(data[0], data[1], data[2])


def flags_from_response(data: bytes) -> AppFlags:
    """Parse the flags byte of the GET_VERSION response"""

    flags = data[3]
    return AppFlags(isDebug=bool(flags & 0x01),
                    isAppXS=bool(flags & 0x04))


def _is_at_least(version: Version, major: int, minor: int) -> bool:
    return version >= Version(major, minor, 0)


def get_compatibility(version: Version) -> DeviceCompatibility:
    """Compute the features supported by an app version

    Every feature stays supported by all the versions after the one that
    introduced it, the request checks depend on that.

    Args:
        version (Version): The device app version

    Returns:
        The compatibility flags
    """

    v2_2 = _is_at_least(version, 2, 2)
    v2_3 = _is_at_least(version, 2, 3)
    v2_4 = _is_at_least(version, 2, 4)
    v3_0 = _is_at_least(version, 3, 0)
    v4_0 = _is_at_least(version, 4, 0)
    v4_1 = _is_at_least(version, 4, 1)
    v5_0 = _is_at_least(version, 5, 0)
    v6_0 = _is_at_least(version, 6, 0)

    return DeviceCompatibility(
        isCompatible=v2_2,
        recommendedVersion=None if v2_2 else RECOMMENDED_VERSION,
        supportsMary=v2_2,
        supportsCatalystRegistration=v2_3,
        supportsZeroTtl=v2_3,
        supportsPoolRegistrationAsOperator=v2_4,
        supportsPoolRetirement=v2_4,
        supportsNativeScriptHashDerivation=v3_0,
        supportsMultisigTransaction=v3_0,
        supportsMint=v3_0,
        supportsAlonzo=v4_0,
        supportsReqSignersInOrdinaryTx=v4_1,
        supportsBabbage=v5_0,
        supportsCIP36=v6_0,
        supportsCIP36Vote=v6_0,
    )


def ensure_version_compatible(version: Version) -> None:
    """Reject the app versions the client cannot talk to

    Args:
        version (Version): The device app version

    Raises:
        VersionIncompatible: The version is below the minimal supported one
    """

    if version < MIN_SUPPORTED_VERSION:
        raise VersionIncompatible(get_version_string(version), RECOMMENDED_VERSION)
