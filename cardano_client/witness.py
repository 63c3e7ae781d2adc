# -*- coding: utf-8 -*-
# SPDX-FileCopyrightText: 2024 Ledger SAS
# SPDX-License-Identifier: LicenseRef-LEDGER
"""
This module provides the Cardano host client.
It contains the gathering of the paths the device signs the transaction with.
"""

from typing import Iterable, Iterator, List, Set

from cardano_client.tx_types import SigningRequest, TransactionSigningMode, CertificateType
from cardano_client.tx_types import CredentialParamsType, PoolKeyType, PoolOwnerType, TxRequiredSignerType
from cardano_client.tx_types import PoolRegistrationParams, PoolRetirementParams
from cardano_client.tx_types import StakeDelegationParams, StakeRegistrationParams
from cardano_client.utils import BIP32Path


class OrderedPathSet:
    """Set of derivation paths, iterated in the order of their first insertion"""

    def __init__(self, paths: Iterable[BIP32Path] = ()) -> None:
        self._order: List[BIP32Path] = []
        self._seen: Set[BIP32Path] = set()
        for path in paths:
            self.add(path)

    def add(self, path: BIP32Path) -> None:
        key = tuple(path)
        if key not in self._seen:
            self._seen.add(key)
            self._order.append(key)

    def __iter__(self) -> Iterator[BIP32Path]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def to_list(self) -> List[BIP32Path]:
        return list(self._order)


def _tx_body_witness_paths(request: SigningRequest) -> Iterator[BIP32Path]:
    """Walk the tx body elements signed by a device owned key"""

    tx = request.tx

    # input witnesses
    for txInput in tx.inputs:
        if txInput.path is not None:
            yield txInput.path

    # certificate witnesses
    for cert in tx.certificates:
        if cert.type in (CertificateType.STAKE_DELEGATION,
                         CertificateType.STAKE_DEREGISTRATION):
            assert isinstance(cert.params, (StakeDelegationParams, StakeRegistrationParams))
            if cert.params.stakeCredential.type == CredentialParamsType.KEY_PATH:
                assert isinstance(cert.params.stakeCredential.keyValue, tuple)
                yield cert.params.stakeCredential.keyValue

        elif cert.type == CertificateType.STAKE_POOL_REGISTRATION:
            assert isinstance(cert.params, PoolRegistrationParams)
            for poolOwner in cert.params.poolOwners:
                if poolOwner.type == PoolOwnerType.DEVICE_OWNED:
                    assert isinstance(poolOwner.key, tuple)
                    yield poolOwner.key
            if cert.params.poolKey.type == PoolKeyType.DEVICE_OWNED:
                assert isinstance(cert.params.poolKey.key, tuple)
                yield cert.params.poolKey.key

        elif cert.type == CertificateType.STAKE_POOL_RETIREMENT:
            assert isinstance(cert.params, PoolRetirementParams)
            yield cert.params.poolKeyPath

        elif cert.type == CertificateType.STAKE_REGISTRATION:
            # registration is not witnessed
            pass

        else:
            raise NotImplementedError(f"Unknown certificate type {cert.type}")

    # withdrawal witnesses
    for withdrawal in tx.withdrawals:
        if withdrawal.stakeCredential.type == CredentialParamsType.KEY_PATH:
            assert isinstance(withdrawal.stakeCredential.keyValue, tuple)
            yield withdrawal.stakeCredential.keyValue

    # required signers witnesses
    for signer in tx.requiredSigners:
        if signer.type == TxRequiredSignerType.PATH:
            assert isinstance(signer.value, tuple)
            yield signer.value

    # collateral inputs witnesses
    for collateral in tx.collateralInputs:
        if collateral.path is not None:
            yield collateral.path


def gather_witness_paths(request: SigningRequest) -> List[BIP32Path]:
    """Gather the witness paths

    In multisig mode the tx body elements may need several witnesses (or none),
    all of them have to be given in the additional witness paths.

    Args:
        request (SigningRequest): The signing request

    Returns:
        The unique witness paths, in the order of their first occurrence
    """

    witnessPaths = OrderedPathSet()
    if request.signingMode != TransactionSigningMode.MULTISIG_TRANSACTION:
        for path in _tx_body_witness_paths(request):
            witnessPaths.add(path)

    for path in request.additionalWitnessPaths:
        witnessPaths.add(path)

    # the device is never asked twice for the same witness
    return witnessPaths.to_list()
