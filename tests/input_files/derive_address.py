# -*- coding: utf-8 -*-
# SPDX-FileCopyrightText: 2024 Ledger SAS
# SPDX-License-Identifier: LicenseRef-LEDGER
"""
This module provides the client tests data for Derive Address check
"""

from dataclasses import dataclass

from cardano_client.app_def import AddressType, Mainnet, Testnet, Testnet_legacy
from cardano_client.tx_types import AddressParams
from cardano_client.utils import parse_path


@dataclass
class DeriveAddressTestCase:
    name: str
    params: AddressParams
    header: int


byronTestCases = [
    DeriveAddressTestCase("Byron Mainnet",
                          AddressParams(AddressType.BYRON, Mainnet, spendingPath=parse_path("m/44'/1815'/0'/1/2")),
                          0x81),
    DeriveAddressTestCase("Byron Testnet legacy",
                          AddressParams(AddressType.BYRON, Testnet_legacy, spendingPath=parse_path("m/44'/1815'/0'/1/2")),
                          0x81),
]

shelleyTestCases = [
    DeriveAddressTestCase("Base address with staking path",
                          AddressParams(AddressType.BASE_PAYMENT_KEY_STAKE_KEY,
                                        Mainnet,
                                        spendingPath=parse_path("m/1852'/1815'/0'/0/1"),
                                        stakingPath=parse_path("m/1852'/1815'/0'/2/0")),
                          0x01),
    DeriveAddressTestCase("Base address with staking key hash",
                          AddressParams(AddressType.BASE_PAYMENT_KEY_STAKE_KEY,
                                        Testnet,
                                        spendingPath=parse_path("m/1852'/1815'/0'/0/1"),
                                        stakingKeyHashHex="1d227aefa4b773149170885aadba30aab3127cc611ddbc4999def61c"),
                          0x00),
    DeriveAddressTestCase("Base address with script staking",
                          AddressParams(AddressType.BASE_PAYMENT_KEY_STAKE_SCRIPT,
                                        Mainnet,
                                        spendingPath=parse_path("m/1852'/1815'/0'/0/1"),
                                        stakingScriptHashHex="122a946b9ad3d2ddf029d3a828f0468aece76895f15c9efbd69b4277"),
                          0x21),
    DeriveAddressTestCase("Pointer address",
                          AddressParams(AddressType.POINTER_KEY,
                                        Mainnet,
                                        spendingPath=parse_path("m/1852'/1815'/0'/0/1"),
                                        stakingPointerHex="000000010000000200000003"),
                          0x41),
    DeriveAddressTestCase("Enterprise address",
                          AddressParams(AddressType.ENTERPRISE_KEY,
                                        Mainnet,
                                        spendingPath=parse_path("m/1852'/1815'/0'/0/1")),
                          0x61),
    DeriveAddressTestCase("Enterprise script address",
                          AddressParams(AddressType.ENTERPRISE_SCRIPT,
                                        Testnet,
                                        spendingScriptHashHex="122a946b9ad3d2ddf029d3a828f0468aece76895f15c9efbd69b4277"),
                          0x70),
    DeriveAddressTestCase("Reward address",
                          AddressParams(AddressType.REWARD_KEY,
                                        Mainnet,
                                        stakingPath=parse_path("m/1852'/1815'/0'/2/0")),
                          0xe1),
]
