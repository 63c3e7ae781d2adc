# -*- coding: utf-8 -*-
# SPDX-FileCopyrightText: 2024 Ledger SAS
# SPDX-License-Identifier: LicenseRef-LEDGER
"""
This module provides the Cardano host client.
It contains the parsed transaction model handed over for signing.
"""

from enum import IntEnum
from typing import List, Optional, Union
from dataclasses import dataclass, field

from cardano_client.app_def import AddressType, NetworkDesc
from cardano_client.utils import BIP32Path


TX_HASH_LENGTH = 32
AUXILIARY_DATA_HASH_LENGTH = 32
ED25519_SIGNATURE_LENGTH = 64


class TransactionSigningMode(IntEnum):
    ORDINARY_TRANSACTION = 0x03
    POOL_REGISTRATION_AS_OWNER = 0x04
    POOL_REGISTRATION_AS_OPERATOR = 0x05
    MULTISIG_TRANSACTION = 0x06
    PLUTUS_TRANSACTION = 0x07

class TxAuxiliaryDataType(IntEnum):
    ARBITRARY_HASH = 0x00
    CIP36_REGISTRATION = 0x01

class TxAuxiliaryDataSupplementType(IntEnum):
    CIP36_REGISTRATION = 0x01

class CredentialParamsType(IntEnum):
    KEY_PATH = 0x00
    SCRIPT_HASH = 0x01
    KEY_HASH = 0x02

class TxOutputFormat(IntEnum):
    ARRAY_LEGACY = 0x00
    MAP_BABBAGE = 0x01

class TxOutputDestinationType(IntEnum):
    THIRD_PARTY = 0x01
    DEVICE_OWNED = 0x02

class PoolKeyType(IntEnum):
    DEVICE_OWNED = 0x01
    THIRD_PARTY = 0x02

class PoolOwnerType(IntEnum):
    DEVICE_OWNED = 0x01
    THIRD_PARTY = 0x02

class PoolRewardAccountType(IntEnum):
    DEVICE_OWNED = 0x01
    THIRD_PARTY = 0x02

class CertificateType(IntEnum):
    STAKE_REGISTRATION = 0
    STAKE_DEREGISTRATION = 1
    STAKE_DELEGATION = 2
    STAKE_POOL_REGISTRATION = 3
    STAKE_POOL_RETIREMENT = 4

class CIP36VoteRegistrationFormat(IntEnum):
    CIP_15 = 1
    CIP_36 = 2

class CIP36VoteDelegationType(IntEnum):
    KEY = 1
    PATH = 2

class TxRequiredSignerType(IntEnum):
    PATH = 0
    HASH = 1

class DatumType(IntEnum):
    HASH = 0
    INLINE = 1

class RelayType(IntEnum):
    SINGLE_HOST_IP_ADDR = 0
    SINGLE_HOST_HOSTNAME = 1
    MULTI_HOST = 2


@dataclass
class TxInput:
    txHashHex: str
    outputIndex: int = 0
    path: Optional[BIP32Path] = None


@dataclass
class Token:
    assetNameHex: str
    amount: int  # uint64 in outputs, int64 in mint


@dataclass
class AssetGroup:
    policyIdHex: str
    tokens: List[Token]


@dataclass
class ThirdPartyAddressParams:
    addressHex: str


@dataclass
class AddressParams:
    """Device owned address, derived on the device from its parameters"""
    addrType: AddressType
    netDesc: NetworkDesc
    spendingPath: Optional[BIP32Path] = None
    spendingScriptHashHex: Optional[str] = None
    stakingPath: Optional[BIP32Path] = None
    stakingKeyHashHex: Optional[str] = None
    stakingScriptHashHex: Optional[str] = None
    stakingPointerHex: Optional[str] = None  # 3 x 4B


@dataclass
class TxOutputDestination:
    type: TxOutputDestinationType
    params: Union[ThirdPartyAddressParams, AddressParams]


@dataclass
class Datum:
    type: DatumType
    datumHex: str


@dataclass
class TxOutput:
    destination: TxOutputDestination
    amount: int
    format: TxOutputFormat = TxOutputFormat.ARRAY_LEGACY
    tokenBundle: List[AssetGroup] = field(default_factory=list)
    datum: Optional[Datum] = None
    referenceScriptHex: Optional[str] = None


@dataclass
class TxAuxiliaryDataHash:
    hashHex: str


@dataclass
class CIP36VoteDelegation:
    type: CIP36VoteDelegationType
    voteKey: Union[str, BIP32Path]  # key hex or path
    weight: int


@dataclass
class TxAuxiliaryDataCIP36:
    format: CIP36VoteRegistrationFormat
    stakingPath: BIP32Path
    paymentDestination: TxOutputDestination
    nonce: int
    voteKeyHex: Optional[str] = None
    voteKeyPath: Optional[BIP32Path] = None
    votingPurpose: Optional[int] = None
    delegations: List[CIP36VoteDelegation] = field(default_factory=list)


@dataclass
class TxAuxiliaryData:
    type: TxAuxiliaryDataType
    params: Union[TxAuxiliaryDataHash, TxAuxiliaryDataCIP36]


@dataclass
class RequiredSigner:
    type: TxRequiredSignerType
    value: Union[BIP32Path, str]  # signer path or key hash


@dataclass
class CredentialParams:
    type: CredentialParamsType
    keyValue: Union[BIP32Path, str]  # keyPath, keyHash or scriptHash


@dataclass
class Withdrawal:
    stakeCredential: CredentialParams
    amount: int


@dataclass
class StakeRegistrationParams:
    stakeCredential: CredentialParams

@dataclass
class StakeDelegationParams:
    stakeCredential: CredentialParams
    poolKeyHashHex: str

@dataclass
class PoolRetirementParams:
    poolKeyPath: BIP32Path
    retirementEpoch: int

@dataclass
class Margin:
    numerator: int
    denominator: int

@dataclass
class PoolMetadataParams:
    metadataUrl: str
    metadataHashHex: str

@dataclass
class PoolKey:
    type: PoolKeyType
    key: Union[BIP32Path, str]  # path or key hash

@dataclass
class PoolOwner:
    type: PoolOwnerType
    key: Union[BIP32Path, str]  # path or key hash

@dataclass
class PoolRewardAccount:
    type: PoolRewardAccountType
    key: Union[BIP32Path, str]  # path or reward address

@dataclass
class SingleHostIpAddrRelayParams:
    portNumber: Optional[int] = None
    ipv4: Optional[str] = None
    ipv6: Optional[str] = None

@dataclass
class SingleHostHostnameRelayParams:
    portNumber: Optional[int]
    dnsName: str

@dataclass
class MultiHostRelayParams:
    dnsName: str

@dataclass
class Relay:
    type: RelayType
    params: Union[SingleHostIpAddrRelayParams, SingleHostHostnameRelayParams, MultiHostRelayParams]

@dataclass
class PoolRegistrationParams:
    poolKey: PoolKey
    vrfKeyHashHex: str
    pledge: int
    cost: int
    margin: Margin
    rewardAccount: PoolRewardAccount
    poolOwners: List[PoolOwner]
    relays: List[Relay]
    metadata: Optional[PoolMetadataParams] = None

@dataclass
class Certificate:
    type: CertificateType
    params: Union[StakeRegistrationParams,
                  StakeDelegationParams,
                  PoolRegistrationParams,
                  PoolRetirementParams]


@dataclass
class Transaction:
    network: NetworkDesc
    inputs: List[TxInput]
    outputs: List[TxOutput]
    fee: int
    ttl: Optional[int] = None
    certificates: List[Certificate] = field(default_factory=list)
    withdrawals: List[Withdrawal] = field(default_factory=list)
    auxiliaryData: Optional[TxAuxiliaryData] = None
    validityIntervalStart: Optional[int] = None
    mint: Optional[List[AssetGroup]] = None
    scriptDataHashHex: Optional[str] = None
    collateralInputs: List[TxInput] = field(default_factory=list)
    requiredSigners: List[RequiredSigner] = field(default_factory=list)
    includeNetworkId: bool = False
    collateralOutput: Optional[TxOutput] = None
    totalCollateral: Optional[int] = None
    referenceInputs: List[TxInput] = field(default_factory=list)


@dataclass
class SigningRequest:
    tx: Transaction
    signingMode: TransactionSigningMode
    additionalWitnessPaths: List[BIP32Path] = field(default_factory=list)


@dataclass
class Witness:
    path: BIP32Path
    witnessSignatureHex: str


@dataclass
class TxAuxiliaryDataSupplement:
    type: TxAuxiliaryDataSupplementType
    auxiliaryDataHashHex: str
    cip36VoteRegistrationSignatureHex: str


@dataclass
class SignedTransactionData:
    txHashHex: str
    witnesses: List[Witness]
    auxiliaryDataSupplement: Optional[TxAuxiliaryDataSupplement] = None
