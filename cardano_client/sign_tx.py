# -*- coding: utf-8 -*-
# SPDX-FileCopyrightText: 2024 Ledger SAS
# SPDX-License-Identifier: LicenseRef-LEDGER
"""
This module provides the Cardano host client.
It contains the signing ceremony: the ordered sequence of SIGN_TX messages
sent for one transaction, written as a single interaction.
"""

import logging
from enum import IntEnum
from typing import List, Optional

from cardano_client.app_def import InsType
from cardano_client.chunks import MAX_CHUNK_SIZE, needs_chunks, serialize_chunk, split_chunks
from cardano_client.command_builder import CommandBuilder
from cardano_client.interaction import Interaction, Message
from cardano_client.tx_types import AUXILIARY_DATA_HASH_LENGTH, ED25519_SIGNATURE_LENGTH, TX_HASH_LENGTH
from cardano_client.tx_types import SigningRequest, SignedTransactionData, Witness, TxInput, TxOutput
from cardano_client.tx_types import AssetGroup, Certificate, CertificateType, DatumType, Withdrawal
from cardano_client.tx_types import PoolRegistrationParams, RequiredSigner, TxAuxiliaryData
from cardano_client.tx_types import TxAuxiliaryDataCIP36, TxAuxiliaryDataSupplement
from cardano_client.tx_types import TxAuxiliaryDataSupplementType, TxAuxiliaryDataType
from cardano_client.utils import BIP32Path, path_to_str
from cardano_client.validator import ensure_request_supported_by_app_version, ensure_request_well_formed
from cardano_client.version import Version, ensure_version_compatible, get_compatibility
from cardano_client.witness import gather_witness_paths


logger = logging.getLogger(__name__)


class P1Type(IntEnum):
    STAGE_INIT = 0x01
    STAGE_AUX_DATA = 0x08
    STAGE_INPUTS = 0x02
    STAGE_OUTPUTS = 0x03
    STAGE_FEE = 0x04
    STAGE_TTL = 0x05
    STAGE_CERTIFICATES = 0x06
    STAGE_WITHDRAWALS = 0x07
    STAGE_VALIDITY_INTERVAL_START = 0x09
    STAGE_MINT = 0x0b
    STAGE_SCRIPT_DATA_HASH = 0x0c
    STAGE_COLLATERAL_INPUTS = 0x0d
    STAGE_REQUIRED_SIGNERS = 0x0e
    STAGE_COLLATERAL_OUTPUT = 0x12
    STAGE_TOTAL_COLLATERAL = 0x10
    STAGE_REFERENCE_INPUTS = 0x11
    STAGE_CONFIRM = 0x0a
    STAGE_WITNESSES = 0x0f


# Sub-stage used by the stages without sub-stages
P2_UNUSED = 0x00


class OutputP2(IntEnum):
    BASIC_DATA = 0x30
    DATUM = 0x34
    DATUM_CHUNK = 0x35
    SCRIPT = 0x36
    SCRIPT_CHUNK = 0x37
    CONFIRM = 0x33


class TokenBundleP2(IntEnum):
    ASSET_GROUP = 0x31
    TOKEN = 0x32


class PoolRegistrationP2(IntEnum):
    INIT = 0x30
    POOL_KEY = 0x31
    VRF_KEY = 0x32
    FINANCIALS = 0x33
    REWARD_ACCOUNT = 0x34
    OWNERS = 0x35
    RELAYS = 0x36
    METADATA = 0x37
    CONFIRMATION = 0x38


class PoolRegistrationLegacyP2(IntEnum):
    POOL_PARAMS = 0x30
    OWNERS = 0x31
    RELAYS = 0x32
    METADATA = 0x33
    CONFIRMATION = 0x34


class AuxDataP2(IntEnum):
    INIT = 0x36
    VOTE_KEY = 0x30
    DELEGATION = 0x37
    STAKING_KEY = 0x31
    PAYMENT_ADDRESS = 0x32
    NONCE = 0x33
    VOTING_PURPOSE = 0x35
    CONFIRM = 0x34


class MintP2(IntEnum):
    BASIC_DATA = 0x30
    CONFIRM = 0x33


class CollateralOutputP2(IntEnum):
    BASIC_DATA = 0x30
    CONFIRM = 0x33


def _message(p1: int,
             p2: int = P2_UNUSED,
             data: bytes = bytes(),
             expectedResponseLength: Optional[int] = 0) -> Message:
    return Message(InsType.SIGN_TX, p1, p2, data, expectedResponseLength)


class _SignTx:
    """One signing ceremony, each stage is a sub-interaction"""

    def __init__(self, version: Version, request: SigningRequest, witnessPaths: List[BIP32Path]) -> None:
        self.version = version
        self.request = request
        self.witnessPaths = witnessPaths
        self.compat = get_compatibility(version)
        self.builder = CommandBuilder(version)


    def run(self) -> Interaction[SignedTransactionData]:
        tx = self.request.tx
        auxDataBeforeTxBody = self.compat.supportsCatalystRegistration or self.compat.supportsCIP36

        logger.debug("Stage INIT")
        data = self.builder.tx_init(tx, self.request.signingMode, len(self.witnessPaths))
        yield _message(P1Type.STAGE_INIT, data=data)

        auxiliaryDataSupplement = None
        if auxDataBeforeTxBody and tx.auxiliaryData is not None:
            auxiliaryDataSupplement = yield from self.set_aux_data(tx.auxiliaryData)

        logger.debug("Stage INPUTS (%d)", len(tx.inputs))
        for txInput in tx.inputs:
            yield from self.add_input(P1Type.STAGE_INPUTS, txInput)

        logger.debug("Stage OUTPUTS (%d)", len(tx.outputs))
        for txOutput in tx.outputs:
            yield from self.add_output(txOutput)

        logger.debug("Stage FEE")
        yield _message(P1Type.STAGE_FEE, data=self.builder.tx_fee(tx.fee))

        if tx.ttl is not None:
            logger.debug("Stage TTL")
            yield _message(P1Type.STAGE_TTL, data=self.builder.tx_ttl(tx.ttl))

        logger.debug("Stage CERTIFICATES (%d)", len(tx.certificates))
        for certificate in tx.certificates:
            yield from self.add_certificate(certificate)

        logger.debug("Stage WITHDRAWALS (%d)", len(tx.withdrawals))
        for withdrawal in tx.withdrawals:
            yield from self.add_withdrawal(withdrawal)

        if not auxDataBeforeTxBody and tx.auxiliaryData is not None:
            yield from self.set_aux_data_legacy(tx.auxiliaryData)

        if tx.validityIntervalStart is not None:
            logger.debug("Stage VALIDITY INTERVAL START")
            # Response not checked by the device app
            yield _message(P1Type.STAGE_VALIDITY_INTERVAL_START,
                           data=self.builder.tx_validity_start(tx.validityIntervalStart),
                           expectedResponseLength=None)

        if tx.mint is not None:
            yield from self.set_mint(tx.mint)

        if tx.scriptDataHashHex is not None:
            logger.debug("Stage SCRIPT DATA HASH")
            # Response not checked by the device app
            yield _message(P1Type.STAGE_SCRIPT_DATA_HASH,
                           data=self.builder.tx_script_data_hash(tx.scriptDataHashHex),
                           expectedResponseLength=None)

        logger.debug("Stage COLLATERAL INPUTS (%d)", len(tx.collateralInputs))
        for txInput in tx.collateralInputs:
            yield from self.add_input(P1Type.STAGE_COLLATERAL_INPUTS, txInput)

        logger.debug("Stage REQUIRED SIGNERS (%d)", len(tx.requiredSigners))
        for signer in tx.requiredSigners:
            yield from self.add_required_signer(signer)

        if tx.collateralOutput is not None:
            yield from self.add_collateral_output(tx.collateralOutput)

        if tx.totalCollateral is not None:
            logger.debug("Stage TOTAL COLLATERAL")
            yield _message(P1Type.STAGE_TOTAL_COLLATERAL,
                           data=self.builder.tx_total_collateral(tx.totalCollateral))

        logger.debug("Stage REFERENCE INPUTS (%d)", len(tx.referenceInputs))
        for txInput in tx.referenceInputs:
            yield from self.add_input(P1Type.STAGE_REFERENCE_INPUTS, txInput)

        txHashHex = yield from self.await_confirm()

        logger.debug("Stage WITNESSES (%d)", len(self.witnessPaths))
        witnesses = []
        for path in self.witnessPaths:
            witness = yield from self.get_witness(path)
            witnesses.append(witness)

        logger.info("Transaction %s signed with %d witnesses", txHashHex, len(witnesses))
        return SignedTransactionData(txHashHex, witnesses, auxiliaryDataSupplement)


    def set_aux_data(self, auxData: TxAuxiliaryData) -> Interaction[Optional[TxAuxiliaryDataSupplement]]:
        """Send the auxiliary data, before the tx body

        Returns:
            The vote registration hash and signature, if any
        """

        logger.debug("Stage AUX DATA (%s)", auxData.type.name)
        yield _message(P1Type.STAGE_AUX_DATA, data=self.builder.tx_aux_data(auxData))

        if auxData.type != TxAuxiliaryDataType.CIP36_REGISTRATION:
            return None
        assert isinstance(auxData.params, TxAuxiliaryDataCIP36)
        params = auxData.params

        if self.compat.supportsCIP36:
            yield _message(P1Type.STAGE_AUX_DATA, AuxDataP2.INIT, self.builder.cvote_init(params))

        if params.voteKeyHex is not None or params.voteKeyPath is not None:
            yield _message(P1Type.STAGE_AUX_DATA, AuxDataP2.VOTE_KEY, self.builder.cvote_vote_key(params))
        else:
            for delegation in params.delegations:
                yield _message(P1Type.STAGE_AUX_DATA, AuxDataP2.DELEGATION,
                               self.builder.cvote_delegation(delegation))

        yield _message(P1Type.STAGE_AUX_DATA, AuxDataP2.STAKING_KEY, self.builder.cvote_staking_path(params))
        yield _message(P1Type.STAGE_AUX_DATA, AuxDataP2.PAYMENT_ADDRESS,
                       self.builder.cvote_payment_destination(params))
        yield _message(P1Type.STAGE_AUX_DATA, AuxDataP2.NONCE, self.builder.cvote_nonce(params))

        if self.compat.supportsCIP36:
            yield _message(P1Type.STAGE_AUX_DATA, AuxDataP2.VOTING_PURPOSE,
                           self.builder.cvote_voting_purpose(params))

        # Response format:
        #    Auxiliary data hash (32B)
        #    Vote registration signature (64B)
        response = yield _message(P1Type.STAGE_AUX_DATA, AuxDataP2.CONFIRM,
                                  expectedResponseLength=AUXILIARY_DATA_HASH_LENGTH + ED25519_SIGNATURE_LENGTH)
        auxDataHash = response[:AUXILIARY_DATA_HASH_LENGTH]
        signature = response[AUXILIARY_DATA_HASH_LENGTH:]
        return TxAuxiliaryDataSupplement(TxAuxiliaryDataSupplementType.CIP36_REGISTRATION,
                                         auxDataHash.hex(),
                                         signature.hex())


    def set_aux_data_legacy(self, auxData: TxAuxiliaryData) -> Interaction[None]:
        """Send the auxiliary data hash, after the withdrawals"""

        logger.debug("Stage AUX DATA (legacy)")
        yield _message(P1Type.STAGE_AUX_DATA, data=self.builder.tx_aux_data_legacy(auxData))


    def add_input(self, p1: P1Type, txInput: TxInput) -> Interaction[None]:
        yield _message(p1, data=self.builder.tx_input(txInput))


    def add_token_bundle(self, p1: P1Type, tokenBundle: List[AssetGroup], signed: bool = False) -> Interaction[None]:
        for asset in tokenBundle:
            yield _message(p1, TokenBundleP2.ASSET_GROUP, self.builder.asset_group(asset))
            for token in asset.tokens:
                yield _message(p1, TokenBundleP2.TOKEN, self.builder.token(token, signed))


    def send_chunks(self, dataHex: str, p2: OutputP2) -> Interaction[None]:
        """Send the data following the first chunk, already sent with the field"""

        for chunkHex in split_chunks(dataHex, MAX_CHUNK_SIZE):
            yield _message(P1Type.STAGE_OUTPUTS, p2, serialize_chunk(chunkHex))


    def add_output(self, txOutput: TxOutput) -> Interaction[None]:
        yield _message(P1Type.STAGE_OUTPUTS, OutputP2.BASIC_DATA, self.builder.tx_output_basic(txOutput))

        yield from self.add_token_bundle(P1Type.STAGE_OUTPUTS, txOutput.tokenBundle)

        if txOutput.datum is not None:
            yield _message(P1Type.STAGE_OUTPUTS, OutputP2.DATUM, self.builder.tx_output_datum(txOutput.datum))
            if txOutput.datum.type == DatumType.INLINE and needs_chunks(txOutput.datum.datumHex):
                yield from self.send_chunks(txOutput.datum.datumHex, OutputP2.DATUM_CHUNK)

        if txOutput.referenceScriptHex is not None:
            yield _message(P1Type.STAGE_OUTPUTS, OutputP2.SCRIPT,
                           self.builder.tx_output_ref_script(txOutput.referenceScriptHex))
            if needs_chunks(txOutput.referenceScriptHex):
                yield from self.send_chunks(txOutput.referenceScriptHex, OutputP2.SCRIPT_CHUNK)

        yield _message(P1Type.STAGE_OUTPUTS, OutputP2.CONFIRM)


    def add_certificate(self, certificate: Certificate) -> Interaction[None]:
        yield _message(P1Type.STAGE_CERTIFICATES, data=self.builder.tx_certificate(certificate))

        if certificate.type == CertificateType.STAKE_POOL_REGISTRATION:
            assert isinstance(certificate.params, PoolRegistrationParams)
            if self.compat.supportsPoolRegistrationAsOperator:
                yield from self.add_pool_registration(certificate.params)
            else:
                yield from self.add_pool_registration_legacy(certificate.params)


    def add_pool_registration(self, pool: PoolRegistrationParams) -> Interaction[None]:
        p1 = P1Type.STAGE_CERTIFICATES
        yield _message(p1, PoolRegistrationP2.INIT, self.builder.pool_initial_params(pool))
        yield _message(p1, PoolRegistrationP2.POOL_KEY, self.builder.pool_key(pool.poolKey))
        yield _message(p1, PoolRegistrationP2.VRF_KEY, bytes.fromhex(pool.vrfKeyHashHex))
        yield _message(p1, PoolRegistrationP2.FINANCIALS, self.builder.pool_financials(pool))
        yield _message(p1, PoolRegistrationP2.REWARD_ACCOUNT, self.builder.pool_key(pool.rewardAccount))
        for owner in pool.poolOwners:
            yield _message(p1, PoolRegistrationP2.OWNERS, self.builder.pool_key(owner))
        for relay in pool.relays:
            yield _message(p1, PoolRegistrationP2.RELAYS, self.builder.pool_relay(relay))
        yield _message(p1, PoolRegistrationP2.METADATA, self.builder.pool_metadata(pool.metadata))
        yield _message(p1, PoolRegistrationP2.CONFIRMATION)


    def add_pool_registration_legacy(self, pool: PoolRegistrationParams) -> Interaction[None]:
        p1 = P1Type.STAGE_CERTIFICATES
        yield _message(p1, PoolRegistrationLegacyP2.POOL_PARAMS, self.builder.pool_initial_params_legacy(pool))
        for owner in pool.poolOwners:
            yield _message(p1, PoolRegistrationLegacyP2.OWNERS, self.builder.pool_key(owner))
        for relay in pool.relays:
            yield _message(p1, PoolRegistrationLegacyP2.RELAYS, self.builder.pool_relay(relay))
        yield _message(p1, PoolRegistrationLegacyP2.METADATA, self.builder.pool_metadata(pool.metadata))
        yield _message(p1, PoolRegistrationLegacyP2.CONFIRMATION)


    def add_withdrawal(self, withdrawal: Withdrawal) -> Interaction[None]:
        yield _message(P1Type.STAGE_WITHDRAWALS, data=self.builder.tx_withdrawal(withdrawal))


    def set_mint(self, mint: List[AssetGroup]) -> Interaction[None]:
        logger.debug("Stage MINT (%d)", len(mint))
        yield _message(P1Type.STAGE_MINT, MintP2.BASIC_DATA, self.builder.mint_basic(mint))
        yield from self.add_token_bundle(P1Type.STAGE_MINT, mint, signed=True)
        yield _message(P1Type.STAGE_MINT, MintP2.CONFIRM)


    def add_required_signer(self, signer: RequiredSigner) -> Interaction[None]:
        yield _message(P1Type.STAGE_REQUIRED_SIGNERS, data=self.builder.tx_required_signer(signer))


    def add_collateral_output(self, txOutput: TxOutput) -> Interaction[None]:
        logger.debug("Stage COLLATERAL OUTPUT")
        p1 = P1Type.STAGE_COLLATERAL_OUTPUT
        yield _message(p1, CollateralOutputP2.BASIC_DATA, self.builder.tx_output_basic(txOutput))
        yield from self.add_token_bundle(p1, txOutput.tokenBundle)
        yield _message(p1, CollateralOutputP2.CONFIRM)


    def await_confirm(self) -> Interaction[str]:
        logger.debug("Stage CONFIRM")
        response = yield _message(P1Type.STAGE_CONFIRM, expectedResponseLength=TX_HASH_LENGTH)
        return response.hex()


    def get_witness(self, path: BIP32Path) -> Interaction[Witness]:
        logger.debug("Witness %s", path_to_str(path))
        response = yield _message(P1Type.STAGE_WITNESSES,
                                  data=self.builder.tx_witness(path),
                                  expectedResponseLength=ED25519_SIGNATURE_LENGTH)
        return Witness(path, response.hex())


def sign_transaction(version: Version, request: SigningRequest) -> Interaction[SignedTransactionData]:
    """Prepare the signing ceremony of a transaction

    The version and request checks run at call time, so an unsupported or
    inconsistent request fails before any message exists.

    Args:
        version (Version): The device app version
        request (SigningRequest): The signing request

    Returns:
        The interaction producing the SIGN_TX messages

    Raises:
        VersionIncompatible: The app version is too old
        MalformedRequest: The request is inconsistent
        UnsupportedFeature: The request uses a feature the app version does not support
    """

    ensure_version_compatible(version)
    ensure_request_well_formed(request)
    ensure_request_supported_by_app_version(version, request)

    witnessPaths = gather_witness_paths(request)
    logger.info("Signing transaction with app %s, mode %s, %d witnesses",
                version, request.signingMode.name, len(witnessPaths))
    return _SignTx(version, request, witnessPaths).run()
