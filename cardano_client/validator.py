# -*- coding: utf-8 -*-
# SPDX-FileCopyrightText: 2024 Ledger SAS
# SPDX-License-Identifier: LicenseRef-LEDGER
"""
This module provides the Cardano host client.
It contains the checks run on a signing request before anything is sent to the device.
"""

from cardano_client.app_def import SCRIPT_ADDRESS_TYPES
from cardano_client.errors import MalformedRequest, UnsupportedFeature
from cardano_client.tx_types import SigningRequest, Transaction, TransactionSigningMode
from cardano_client.tx_types import AddressParams, CertificateType, CredentialParamsType, ThirdPartyAddressParams
from cardano_client.tx_types import CIP36VoteRegistrationFormat, TxAuxiliaryDataCIP36, TxAuxiliaryDataHash
from cardano_client.tx_types import TxAuxiliaryDataType, TxOutputDestination, TxOutputDestinationType, TxOutputFormat
from cardano_client.tx_types import PoolRegistrationParams, PoolRetirementParams
from cardano_client.tx_types import StakeDelegationParams, StakeRegistrationParams
from cardano_client.version import Version, get_compatibility, get_version_string


_STAKING_CERTIFICATES = (CertificateType.STAKE_REGISTRATION,
                         CertificateType.STAKE_DEREGISTRATION,
                         CertificateType.STAKE_DELEGATION)

_CERTIFICATE_PARAMS = {
    CertificateType.STAKE_REGISTRATION: StakeRegistrationParams,
    CertificateType.STAKE_DEREGISTRATION: StakeRegistrationParams,
    CertificateType.STAKE_DELEGATION: StakeDelegationParams,
    CertificateType.STAKE_POOL_REGISTRATION: PoolRegistrationParams,
    CertificateType.STAKE_POOL_RETIREMENT: PoolRetirementParams,
}

_DESTINATION_PARAMS = {
    TxOutputDestinationType.THIRD_PARTY: ThirdPartyAddressParams,
    TxOutputDestinationType.DEVICE_OWNED: AddressParams,
}


def _has_stake_credential_in_certificates(tx: Transaction, credentialType: CredentialParamsType) -> bool:
    for cert in tx.certificates:
        if cert.type in _STAKING_CERTIFICATES:
            assert isinstance(cert.params, (StakeRegistrationParams, StakeDelegationParams))
            if cert.params.stakeCredential.type == credentialType:
                return True
    return False


def _has_stake_credential_in_withdrawals(tx: Transaction, credentialType: CredentialParamsType) -> bool:
    return any(w.stakeCredential.type == credentialType for w in tx.withdrawals)


def _has_script_hash_in_address_params(tx: Transaction) -> bool:
    for output in tx.outputs:
        if output.destination.type == TxOutputDestinationType.DEVICE_OWNED:
            assert isinstance(output.destination.params, AddressParams)
            if output.destination.params.addrType in SCRIPT_ADDRESS_TYPES:
                return True
    return False


def ensure_request_supported_by_app_version(version: Version, request: SigningRequest) -> None:
    """Check every feature used by the request against the app version

    The checks run in a fixed order, the first unsupported feature is reported.

    Args:
        version (Version): The device app version
        request (SigningRequest): The signing request

    Raises:
        UnsupportedFeature: A feature is not supported by the app version
    """

    compat = get_compatibility(version)
    tx = request.tx

    def reject(feature: str) -> UnsupportedFeature:
        return UnsupportedFeature(feature, get_version_string(version))

    # signing modes

    if request.signingMode == TransactionSigningMode.POOL_REGISTRATION_AS_OPERATOR and \
        not compat.supportsPoolRegistrationAsOperator:
        raise reject("Pool registration as operator")

    if request.signingMode == TransactionSigningMode.MULTISIG_TRANSACTION and \
        not compat.supportsMultisigTransaction:
        raise reject("Multisig transactions")

    if request.signingMode == TransactionSigningMode.PLUTUS_TRANSACTION and \
        not compat.supportsAlonzo:
        raise reject("Plutus transactions")

    # transaction elements

    if _has_script_hash_in_address_params(tx) and not compat.supportsMultisigTransaction:
        raise reject("Script hash in address parameters in output")

    if any(o.datum is not None for o in tx.outputs) and not compat.supportsAlonzo:
        raise reject("Datum in output")

    # covers inline datum and reference script, both came with Babbage
    if any(o.format == TxOutputFormat.MAP_BABBAGE for o in tx.outputs) and not compat.supportsBabbage:
        raise reject("Outputs with map format")

    if tx.ttl == 0 and not compat.supportsZeroTtl:
        raise reject("Zero TTL")

    if _has_stake_credential_in_withdrawals(tx, CredentialParamsType.SCRIPT_HASH) and \
        not compat.supportsMultisigTransaction:
        raise reject("Script hash in withdrawal")
    if _has_stake_credential_in_withdrawals(tx, CredentialParamsType.KEY_HASH) and \
        not compat.supportsAlonzo:
        raise reject("Key hash in withdrawal")

    hasPoolRetirement = any(c.type == CertificateType.STAKE_POOL_RETIREMENT for c in tx.certificates)
    if hasPoolRetirement and not compat.supportsPoolRetirement:
        raise reject("Pool retirement certificate")
    if _has_stake_credential_in_certificates(tx, CredentialParamsType.SCRIPT_HASH) and \
        not compat.supportsMultisigTransaction:
        raise reject("Script hash in certificate stake credential")
    if _has_stake_credential_in_certificates(tx, CredentialParamsType.KEY_HASH) and \
        not compat.supportsAlonzo:
        raise reject("Key hash in certificate stake credential")

    if tx.mint is not None and not compat.supportsMint:
        raise reject("Mint")

    if tx.validityIntervalStart is not None and not compat.supportsMary:
        raise reject("Validity interval start")

    if tx.scriptDataHashHex is not None and not compat.supportsAlonzo:
        raise reject("Script data hash")

    if len(tx.collateralInputs) > 0 and not compat.supportsAlonzo:
        raise reject("Collateral inputs")

    if len(tx.requiredSigners) > 0:
        if not compat.supportsAlonzo:
            raise reject("Required signers")
        if not compat.supportsReqSignersInOrdinaryTx:
            if request.signingMode == TransactionSigningMode.ORDINARY_TRANSACTION:
                raise reject("Required signers in ordinary transaction")
            if request.signingMode == TransactionSigningMode.MULTISIG_TRANSACTION:
                raise reject("Required signers in multisig transaction")

    if tx.includeNetworkId and not compat.supportsAlonzo:
        raise reject("Network id in tx body")

    if tx.collateralOutput is not None and not compat.supportsBabbage:
        raise reject("Collateral output")

    if tx.totalCollateral is not None and not compat.supportsBabbage:
        raise reject("Total collateral")

    if len(tx.referenceInputs) > 0 and not compat.supportsBabbage:
        raise reject("Reference inputs")

    # vote registration is the auxiliary data signed by the device
    auxData = tx.auxiliaryData
    if auxData is None or auxData.type != TxAuxiliaryDataType.CIP36_REGISTRATION:
        return
    assert isinstance(auxData.params, TxAuxiliaryDataCIP36)
    params = auxData.params

    if params.format == CIP36VoteRegistrationFormat.CIP_15 and not compat.supportsCatalystRegistration:
        raise reject("Catalyst registration")

    if params.format == CIP36VoteRegistrationFormat.CIP_36 and not compat.supportsCIP36:
        raise reject("CIP36 registration")

    if params.voteKeyPath is not None and not compat.supportsCIP36Vote:
        raise reject("Vote key derivation path in CIP15/CIP36 registration")

    if params.paymentDestination.type != TxOutputDestinationType.DEVICE_OWNED and \
        not compat.supportsCIP36:
        raise reject("CIP36 payment addresses not owned by the device")


def _ensure_destination_well_formed(destination: TxOutputDestination) -> None:
    if not isinstance(destination.params, _DESTINATION_PARAMS[destination.type]):
        raise MalformedRequest(f"{destination.type.name} destination with {type(destination.params).__name__}")


def ensure_request_well_formed(request: SigningRequest) -> None:
    """Check the request preconditions the device compatibility does not cover

    Args:
        request (SigningRequest): The signing request

    Raises:
        MalformedRequest: The request is inconsistent
    """

    tx = request.tx

    for cert in tx.certificates:
        if not isinstance(cert.params, _CERTIFICATE_PARAMS[cert.type]):
            raise MalformedRequest(f"{cert.type.name} certificate with {type(cert.params).__name__}")

    outputs = tx.outputs + ([tx.collateralOutput] if tx.collateralOutput is not None else [])
    for output in outputs:
        _ensure_destination_well_formed(output.destination)

    auxData = tx.auxiliaryData
    if auxData is None:
        return

    if auxData.type == TxAuxiliaryDataType.ARBITRARY_HASH:
        if not isinstance(auxData.params, TxAuxiliaryDataHash):
            raise MalformedRequest("Arbitrary hash auxiliary data without hash")
        return

    if not isinstance(auxData.params, TxAuxiliaryDataCIP36):
        raise MalformedRequest("Vote registration auxiliary data without registration parameters")
    params = auxData.params
    _ensure_destination_well_formed(params.paymentDestination)

    # exactly one of: vote key, vote key path, delegations
    voteKeys = [params.voteKeyHex is not None, params.voteKeyPath is not None, len(params.delegations) > 0]
    if voteKeys.count(True) != 1:
        raise MalformedRequest("Vote registration requires either a vote key or delegations")
