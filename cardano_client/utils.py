# -*- coding: utf-8 -*-
# SPDX-FileCopyrightText: 2024 Ledger SAS
# SPDX-License-Identifier: LicenseRef-LEDGER
"""
This module provides the Cardano host client utility functions
"""

from typing import Sequence, Tuple

from bip_utils.bip.bip32.bip32_path import Bip32Path, Bip32PathParser
from ragger.bip import pack_derivation_path


BIP32Path = Tuple[int, ...]


def parse_path(path: str) -> BIP32Path:
    """Parse a derivation path

    Args:
        path (str): Derivation path, like "m/1852'/1815'/0'/0/0"

    Returns:
        The path indexes, hardened ones with the 0x80000000 bit set
    """

    return tuple(Bip32PathParser.Parse(path).ToList())


def path_to_str(path: Sequence[int]) -> str:
    """Format path indexes as a derivation path string"""

    return Bip32Path(list(path), True).ToStr()


def pack_path(path: Sequence[int]) -> bytes:
    """Serialize a derivation path

    Args:
        path (Sequence[int]): The path indexes

    Returns:
        Length (1B) followed by each index (4B)
    """

    return pack_derivation_path(path_to_str(path))
