# -*- coding: utf-8 -*-
# SPDX-FileCopyrightText: 2024 Ledger SAS
# SPDX-License-Identifier: LicenseRef-LEDGER
"""
This module provides the Cardano host client.
It contains the command building part: APDU framing and the payload of
every transaction element.
"""

from typing import List, Optional, Union

from cardano_client.app_def import CLA, AddressType, StakingDataSourceType
from cardano_client.chunks import serialize_chunk_header
from cardano_client.interaction import Message
from cardano_client.tx_types import Transaction, TransactionSigningMode, TxInput, TxOutput
from cardano_client.tx_types import AddressParams, ThirdPartyAddressParams, TxOutputDestination
from cardano_client.tx_types import TxOutputDestinationType, Datum, DatumType, AssetGroup, Token
from cardano_client.tx_types import Certificate, CertificateType, CredentialParams, Withdrawal
from cardano_client.tx_types import StakeRegistrationParams, StakeDelegationParams, PoolRetirementParams
from cardano_client.tx_types import PoolRegistrationParams, PoolKey, PoolOwner, PoolRewardAccount
from cardano_client.tx_types import Relay, RelayType, PoolMetadataParams
from cardano_client.tx_types import SingleHostIpAddrRelayParams, SingleHostHostnameRelayParams, MultiHostRelayParams
from cardano_client.tx_types import TxAuxiliaryData, TxAuxiliaryDataHash, TxAuxiliaryDataCIP36
from cardano_client.tx_types import CIP36VoteDelegation, CIP36VoteDelegationType, RequiredSigner
from cardano_client.utils import BIP32Path, pack_path
from cardano_client.version import Version, get_compatibility


class CommandBuilder:
    """Serializes the transaction elements for a given app version"""

    def __init__(self, version: Version) -> None:
        self._version = version
        self._compat = get_compatibility(version)


    @staticmethod
    def apdu(message: Message) -> bytes:
        """Frame a message as an APDU

        Args:
            message (Message): The message to send

        Returns:
            Serial data APDU
        """

        header = bytearray()
        header.append(CLA)
        header.append(message.ins)
        header.append(message.p1)
        header.append(message.p2)
        header.append(len(message.data))
        return bytes(header + message.data)


    def tx_init(self, tx: Transaction, signingMode: TransactionSigningMode, nbWitnessPaths: int) -> bytes:
        """Payload of Sign TX - INIT step

        Args:
            tx (Transaction): The transaction
            signingMode (TransactionSigningMode): The signing mode
            nbWitnessPaths (int): The number of unique witness paths

        Returns:
            Serialized data
        """

        # Serialization format:
        #    NetworkId (1B)
        #    ProtocolMagic (4B)
        #    TTL option flag (1B)
        #    auxiliary Data option flag (1B)
        #    validityIntervalStart option flag (1B)
        #    mint option flag (1B, since Mint support)
        #    scriptDataHash, includeNetworkId option flags (1B each, since Alonzo)
        #    collateralOutput, totalCollateral option flags (1B each, since Babbage)
        #    signingMode (1B)
        #    TX inputs, outputs, certificates, withdrawals lengths (4B each)
        #    TX collateralInputs, requiredSigners lengths (4B each, since Alonzo)
        #    TX referenceInputs length (4B, since Babbage)
        #    witnesses length (4B)
        data = bytes()
        data += tx.network.networkId.to_bytes(1, "big")
        data += tx.network.protocol.to_bytes(4, "big")
        data += self._serializeOptionFlags(tx.ttl is not None)
        data += self._serializeOptionFlags(tx.auxiliaryData is not None)
        data += self._serializeOptionFlags(tx.validityIntervalStart is not None)
        if self._compat.supportsMint:
            data += self._serializeOptionFlags(tx.mint is not None)
        if self._compat.supportsAlonzo:
            data += self._serializeOptionFlags(tx.scriptDataHashHex is not None)
            data += self._serializeOptionFlags(tx.includeNetworkId)
        if self._compat.supportsBabbage:
            data += self._serializeOptionFlags(tx.collateralOutput is not None)
            data += self._serializeOptionFlags(tx.totalCollateral is not None)
        data += signingMode.to_bytes(1, "big")
        data += len(tx.inputs).to_bytes(4, "big")
        data += len(tx.outputs).to_bytes(4, "big")
        data += len(tx.certificates).to_bytes(4, "big")
        data += len(tx.withdrawals).to_bytes(4, "big")
        if self._compat.supportsAlonzo:
            data += len(tx.collateralInputs).to_bytes(4, "big")
            data += len(tx.requiredSigners).to_bytes(4, "big")
        if self._compat.supportsBabbage:
            data += len(tx.referenceInputs).to_bytes(4, "big")
        data += nbWitnessPaths.to_bytes(4, "big")
        return data


    def tx_input(self, txInput: TxInput) -> bytes:
        """Payload of Sign TX - INPUTS, COLLATERAL INPUTS and REFERENCE INPUTS steps"""

        # Serialization format:
        #    Tx Hash Hex
        #    Tx Output Index (4B)
        data = bytes()
        data += bytes.fromhex(txInput.txHashHex)
        data += txInput.outputIndex.to_bytes(4, "big")
        return data


    def tx_output_basic(self, txOutput: TxOutput) -> bytes:
        """Payload of Sign TX - OUTPUTS step - BASIC DATA level

        Args:
            txOutput (TxOutput): The output

        Returns:
            Serialized data
        """

        # Serialization format:
        #    Format (1B, since Babbage)
        #    Tx Output destination
        #    Coin (8B)
        #    TokenBundle Length (4B)
        #    datum option flag (1B, since Alonzo)
        #    referenceScriptHex option flag (1B, since Babbage)
        data = bytes()
        if self._compat.supportsBabbage:
            data += txOutput.format.to_bytes(1, "big")
        data += self.output_destination(txOutput.destination)
        data += self._serializeCoin(txOutput.amount)
        data += len(txOutput.tokenBundle).to_bytes(4, "big")
        if self._compat.supportsAlonzo:
            data += self._serializeOptionFlags(txOutput.datum is not None)
        if self._compat.supportsBabbage:
            data += self._serializeOptionFlags(txOutput.referenceScriptHex is not None)
        return data


    def tx_output_datum(self, datum: Datum) -> bytes:
        """Payload of Sign TX - OUTPUTS step - DATUM level

        Args:
            datum (Datum): The output datum

        Returns:
            Serialized data
        """

        # Serialization format:
        #    Type (1B)
        #    Datum hash, or inline datum 1st chunk
        data = bytes()
        data += datum.type.to_bytes(1, "big")
        if datum.type == DatumType.INLINE:
            data += serialize_chunk_header(datum.datumHex)
        else:
            data += bytes.fromhex(datum.datumHex)
        return data


    def tx_output_ref_script(self, referenceScriptHex: str) -> bytes:
        """Payload of Sign TX - OUTPUTS step - REFERENCE SCRIPT level"""

        #    Reference Script 1st Chunk
        return serialize_chunk_header(referenceScriptHex)


    def asset_group(self, asset: AssetGroup) -> bytes:
        """Payload of Sign TX - TOKEN BUNDLE step - ASSET mode"""

        # Serialization format:
        #    Policy ID
        #    Nb of tokens (4B)
        data = bytes()
        data += bytes.fromhex(asset.policyIdHex)
        data += len(asset.tokens).to_bytes(4, "big")
        return data


    def token(self, token: Token, signed: bool = False) -> bytes:
        """Payload of Sign TX - TOKEN BUNDLE step - TOKEN mode

        Args:
            token (Token): The token
            signed (bool): True for mint amounts (int64), False for output amounts (uint64)

        Returns:
            Serialized data
        """

        # Serialization format:
        #    Asset Name Length (4B)
        #    Asset Name
        #    Amount (8B)
        data = bytes()
        data += int(len(token.assetNameHex) / 2).to_bytes(4, "big")
        data += bytes.fromhex(token.assetNameHex)
        data += token.amount.to_bytes(8, "big", signed=signed)
        return data


    def tx_fee(self, fee: int) -> bytes:
        # Fee (8B)
        return self._serializeCoin(fee)


    def tx_ttl(self, ttl: int) -> bytes:
        # TTL (8B)
        return ttl.to_bytes(8, "big")


    def tx_certificate(self, certificate: Certificate) -> bytes:
        """Payload of Sign TX - CERTIFICATES step

        Args:
            certificate (Certificate): The certificate

        Returns:
            Serialized data
        """

        # Serialization format:
        #   Certificate Type (1B)
        #   Certificate Data
        data = bytes()
        data += certificate.type.to_bytes(1, "big")
        if certificate.type in (CertificateType.STAKE_REGISTRATION, CertificateType.STAKE_DEREGISTRATION):
            assert isinstance(certificate.params, StakeRegistrationParams)
            data += self._serializeStakeCredential(certificate.params.stakeCredential)
        elif certificate.type == CertificateType.STAKE_DELEGATION:
            assert isinstance(certificate.params, StakeDelegationParams)
            data += self._serializeStakeCredential(certificate.params.stakeCredential)
            data += bytes.fromhex(certificate.params.poolKeyHashHex)
        elif certificate.type == CertificateType.STAKE_POOL_REGISTRATION:
            # pool parameters follow in their own messages
            pass
        elif certificate.type == CertificateType.STAKE_POOL_RETIREMENT:
            assert isinstance(certificate.params, PoolRetirementParams)
            data += pack_path(certificate.params.poolKeyPath)
            data += certificate.params.retirementEpoch.to_bytes(8, "big")
        else:
            raise NotImplementedError(f"Unknown certificate type {certificate.type}")
        return data


    def pool_initial_params(self, pool: PoolRegistrationParams) -> bytes:
        """Payload of Sign TX - CERTIFICATE step - POOL INITIAL PARAMS level"""

        # Serialization format:
        #    Pool Owners length (4B)
        #    Pool Relays length (4B)
        data = bytes()
        data += len(pool.poolOwners).to_bytes(4, "big")
        data += len(pool.relays).to_bytes(4, "big")
        return data


    def pool_initial_params_legacy(self, pool: PoolRegistrationParams) -> bytes:
        """Payload of Sign TX - CERTIFICATE step - POOL PARAMS level, legacy layout

        Args:
            pool (PoolRegistrationParams): The pool parameters

        Returns:
            Serialized data
        """

        # Serialization format:
        #    Pool Key Hash
        #    VRF Key Hash
        #    Coin pledge (8B)
        #    Coin cost (8B)
        #    Pool margin (8B each)
        #    Reward account
        #    Pool Owners length (4B)
        #    Pool Relays length (4B)
        assert isinstance(pool.poolKey.key, str)
        assert isinstance(pool.rewardAccount.key, str)
        data = bytes()
        data += bytes.fromhex(pool.poolKey.key)
        data += bytes.fromhex(pool.vrfKeyHashHex)
        data += self.pool_financials(pool)
        data += bytes.fromhex(pool.rewardAccount.key)
        data += self.pool_initial_params(pool)
        return data


    def pool_key(self, poolKey: Union[PoolKey, PoolOwner, PoolRewardAccount]) -> bytes:
        """Payload of Sign TX - CERTIFICATE step - POOL KEY, REWARD ACCOUNT and OWNER levels

        Args:
            poolKey (PoolKey, PoolOwner, PoolRewardAccount): Key given as a path if device owned

        Returns:
            Serialized data
        """

        # Serialization format:
        #    Key type (1B)
        #    Key path, or Key hash (Reward address for the reward account)
        data = bytes()
        data += poolKey.type.to_bytes(1, "big")
        data += self._serializePathOrHex(poolKey.key)
        return data


    def pool_financials(self, pool: PoolRegistrationParams) -> bytes:
        """Payload of Sign TX - CERTIFICATE step - FINANCIALS level"""

        # Serialization format:
        #    Coin pledge (8B)
        #    Coin cost (8B)
        #    Pool margin (8B each)
        data = bytes()
        data += self._serializeCoin(pool.pledge)
        data += self._serializeCoin(pool.cost)
        data += pool.margin.numerator.to_bytes(8, "big")
        data += pool.margin.denominator.to_bytes(8, "big")
        return data


    def pool_relay(self, relay: Relay) -> bytes:
        """Payload of Sign TX - CERTIFICATE step - POOL RELAY level

        Args:
            relay (Relay): The relay

        Returns:
            Serialized data
        """

        # Serialization format:
        #    Relay Type (1B)
        #    Relay Data
        data = bytes()
        data += relay.type.to_bytes(1, "big")
        if relay.type == RelayType.SINGLE_HOST_IP_ADDR:
            assert isinstance(relay.params, SingleHostIpAddrRelayParams)
            data += self._serializeOptionFlags(relay.params.portNumber is not None)
            if relay.params.portNumber is not None:
                data += relay.params.portNumber.to_bytes(2, "big")
            data += self._serializeOptionFlags(relay.params.ipv4 is not None)
            if relay.params.ipv4 is not None:
                for ip in relay.params.ipv4.split("."):
                    data += int(ip).to_bytes(1, "big")
            data += self._serializeOptionFlags(relay.params.ipv6 is not None)
            if relay.params.ipv6 is not None:
                ip = relay.params.ipv6.replace(":", "")
                data += bytes.fromhex(ip)
        elif relay.type == RelayType.SINGLE_HOST_HOSTNAME:
            assert isinstance(relay.params, SingleHostHostnameRelayParams)
            data += self._serializeOptionFlags(relay.params.portNumber is not None)
            if relay.params.portNumber is not None:
                data += relay.params.portNumber.to_bytes(2, "big")
            data += relay.params.dnsName.encode("ascii")
        elif relay.type == RelayType.MULTI_HOST:
            assert isinstance(relay.params, MultiHostRelayParams)
            data += relay.params.dnsName.encode("ascii")
        else:
            raise NotImplementedError(f"Unknown relay type {relay.type}")
        return data


    def pool_metadata(self, metadata: Optional[PoolMetadataParams]) -> bytes:
        """Payload of Sign TX - CERTIFICATE step - POOL METADATA level"""

        # Serialization format:
        #    Metadata included flag (1B)
        #    Metadata hash
        #    Metadata URL
        data = bytes()
        data += self._serializeOptionFlags(metadata is not None)
        if metadata is not None:
            data += bytes.fromhex(metadata.metadataHashHex)
            data += metadata.metadataUrl.encode("ascii")
        return data


    def tx_withdrawal(self, withdrawal: Withdrawal) -> bytes:
        """Payload of Sign TX - WITHDRAWALS step

        Args:
            withdrawal (Withdrawal): The withdrawal

        Returns:
            Serialized data
        """

        # Serialization format:
        #    Amount (8B)
        #    Stake credential
        data = bytes()
        data += self._serializeCoin(withdrawal.amount)
        data += self._serializeStakeCredential(withdrawal.stakeCredential)
        return data


    def tx_aux_data(self, auxData: TxAuxiliaryData) -> bytes:
        """Payload of Sign TX - AUX DATA step

        Args:
            auxData (TxAuxiliaryData): The auxiliary data

        Returns:
            Serialized data
        """

        # Serialization format:
        #    Type (1B)
        #    HashHex bytes, for arbitrary hash only
        data = bytes()
        data += auxData.type.to_bytes(1, "big")
        if isinstance(auxData.params, TxAuxiliaryDataHash):
            data += bytes.fromhex(auxData.params.hashHex)
        return data


    def tx_aux_data_legacy(self, auxData: TxAuxiliaryData) -> bytes:
        """Payload of Sign TX - AUX DATA step, before vote registration support"""

        #    HashHex bytes
        assert isinstance(auxData.params, TxAuxiliaryDataHash)
        return bytes.fromhex(auxData.params.hashHex)


    def cvote_init(self, params: TxAuxiliaryDataCIP36) -> bytes:
        """Payload of Sign TX - AUX DATA step - INIT mode"""

        # Serialization format:
        #    Format (1B)
        #    Nb of delegations (4B)
        data = bytes()
        data += params.format.to_bytes(1, "big")
        data += len(params.delegations).to_bytes(4, "big")
        return data


    def cvote_vote_key(self, params: TxAuxiliaryDataCIP36) -> bytes:
        """Payload of Sign TX - AUX DATA step - VOTE KEY mode

        Args:
            params (TxAuxiliaryDataCIP36): The vote registration

        Returns:
            Serialized data
        """

        # Serialization format:
        #    Type (1B, since vote key path support)
        #    Vote Key path or Vote Key
        data = bytes()
        if params.voteKeyPath is not None:
            data += CIP36VoteDelegationType.PATH.to_bytes(1, "big")
            data += pack_path(params.voteKeyPath)
        else:
            assert params.voteKeyHex is not None
            if self._compat.supportsCIP36Vote:
                data += CIP36VoteDelegationType.KEY.to_bytes(1, "big")
            data += bytes.fromhex(params.voteKeyHex)
        return data


    def cvote_delegation(self, delegation: CIP36VoteDelegation) -> bytes:
        """Payload of Sign TX - AUX DATA step - DELEGATION mode"""

        # Serialization format:
        #    Type (1B)
        #    Vote Key path or Vote Key
        #    Weight (4B)
        data = bytes()
        data += delegation.type.to_bytes(1, "big")
        data += self._serializePathOrHex(delegation.voteKey)
        data += delegation.weight.to_bytes(4, "big")
        return data


    def cvote_staking_path(self, params: TxAuxiliaryDataCIP36) -> bytes:
        #    Staking Path
        return pack_path(params.stakingPath)


    def cvote_payment_destination(self, params: TxAuxiliaryDataCIP36) -> bytes:
        """Payload of Sign TX - AUX DATA step - PAYMENT mode

        Before CIP36, only device owned address parameters are sent.
        """

        if self._compat.supportsCIP36:
            return self.output_destination(params.paymentDestination)
        assert isinstance(params.paymentDestination.params, AddressParams)
        return self.address_params(params.paymentDestination.params)


    def cvote_nonce(self, params: TxAuxiliaryDataCIP36) -> bytes:
        #    Nonce (8B)
        return params.nonce.to_bytes(8, "big")


    def cvote_voting_purpose(self, params: TxAuxiliaryDataCIP36) -> bytes:
        """Payload of Sign TX - AUX DATA step - VOTING PURPOSE mode"""

        # Serialization format:
        #    Voting Purpose option flag (1B)
        #    Voting Purpose (8B)
        data = bytes()
        data += self._serializeOptionFlags(params.votingPurpose is not None)
        if params.votingPurpose is not None:
            data += params.votingPurpose.to_bytes(8, "big")
        return data


    def tx_validity_start(self, validity: int) -> bytes:
        #    Validity Start (8B)
        return validity.to_bytes(8, "big")


    def mint_basic(self, mint: List[AssetGroup]) -> bytes:
        #    Nb of mint asset groups (4B)
        return len(mint).to_bytes(4, "big")


    def tx_script_data_hash(self, scriptDataHashHex: str) -> bytes:
        return bytes.fromhex(scriptDataHashHex)


    def tx_required_signer(self, signer: RequiredSigner) -> bytes:
        """Payload of Sign TX - REQUIRED SIGNERS step"""

        # Serialization format:
        #    Type (1B)
        #    Signer path or Key hash
        data = bytes()
        data += signer.type.to_bytes(1, "big")
        data += self._serializePathOrHex(signer.value)
        return data


    def tx_total_collateral(self, total: int) -> bytes:
        #    Total collateral (8B)
        return self._serializeCoin(total)


    def tx_witness(self, path: BIP32Path) -> bytes:
        #    Witness Path
        return pack_path(path)


    def output_destination(self, outDest: TxOutputDestination) -> bytes:
        """Serialize TX Output Destination"""

        # Serialization format:
        #    Type (1B)
        #    Destination data
        data = bytes()
        data += outDest.type.to_bytes(1, "big")
        if outDest.type == TxOutputDestinationType.THIRD_PARTY:
            assert isinstance(outDest.params, ThirdPartyAddressParams)
            data += int(len(outDest.params.addressHex) / 2).to_bytes(4, "big")
            data += bytes.fromhex(outDest.params.addressHex)
        else:
            assert isinstance(outDest.params, AddressParams)
            data += self.address_params(outDest.params)
        return data


    def address_params(self, params: AddressParams) -> bytes:
        """Serialize address parameters

        Args:
            params (AddressParams): The device owned address

        Returns:
            Serialized data
        """

        # Serialization format:
        # address type 1B
        # if address type == BYRON
        #     protocol magic 4B
        # else
        #     network id 1B
        # payment public key derivation path (1B for length + [0-10] x 4B) or script hash 28B
        # staking choice 1B
        #     if NO_STAKING:
        #         nothing more
        #     if STAKING_KEY_PATH:
        #         staking public key derivation path (1B for length + [0-10] x 4B)
        #     if STAKING_KEY_HASH or SCRIPT_HASH:
        #         stake key hash or script hash 28B
        #     if BLOCKCHAIN_POINTER:
        #         certificate blockchain pointer 3 x 4B
        data = bytes()
        data += params.addrType.to_bytes(1, "big")
        if params.addrType == AddressType.BYRON:
            data += params.netDesc.protocol.to_bytes(4, "big")
        else:
            data += params.netDesc.networkId.to_bytes(1, "big")

        if params.spendingPath is not None:
            data += pack_path(params.spendingPath)
        elif params.spendingScriptHashHex is not None:
            data += bytes.fromhex(params.spendingScriptHashHex)

        if params.stakingPath is not None:
            data += StakingDataSourceType.KEY_PATH.to_bytes(1, "big")
            data += pack_path(params.stakingPath)
        elif params.stakingKeyHashHex is not None:
            data += StakingDataSourceType.KEY_HASH.to_bytes(1, "big")
            data += bytes.fromhex(params.stakingKeyHashHex)
        elif params.stakingScriptHashHex is not None:
            data += StakingDataSourceType.SCRIPT_HASH.to_bytes(1, "big")
            data += bytes.fromhex(params.stakingScriptHashHex)
        elif params.stakingPointerHex is not None:
            data += StakingDataSourceType.BLOCKCHAIN_POINTER.to_bytes(1, "big")
            data += bytes.fromhex(params.stakingPointerHex)
        else:
            data += StakingDataSourceType.NONE.to_bytes(1, "big")
        return data


    def _serializeStakeCredential(self, credential: CredentialParams) -> bytes:
        """Serialize a stake credential

        Before multisig support, only the key path is sent.
        """

        if not self._compat.supportsMultisigTransaction:
            assert isinstance(credential.keyValue, tuple)
            return pack_path(credential.keyValue)

        # Serialization format:
        #    Type (1B)
        #    Credential data
        data = bytes()
        data += credential.type.to_bytes(1, "big")
        data += self._serializePathOrHex(credential.keyValue)
        return data


    def _serializePathOrHex(self, value: Union[BIP32Path, str]) -> bytes:
        if isinstance(value, str):
            return bytes.fromhex(value)
        return pack_path(value)


    def _serializeOptionFlags(self, included: bool) -> bytes:
        """Serialize Flag option value"""

        # Serialization format:
        #    Flag value (1B): 02 if included, 01 otherwise
        value = 0x02 if included else 0x01
        return value.to_bytes(1, "big")


    def _serializeCoin(self, coin: int) -> bytes:
        """Serialize Coin value"""

        return coin.to_bytes(8, "big")
