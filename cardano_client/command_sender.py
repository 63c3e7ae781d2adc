# -*- coding: utf-8 -*-
# SPDX-FileCopyrightText: 2024 Ledger SAS
# SPDX-License-Identifier: LicenseRef-LEDGER
"""
This module provides the Cardano host client.
It contains the command sending part.
"""

import logging
from typing import Optional

from ragger.backend.interface import BackendInterface, RAPDU
from ragger.error import ExceptionRAPDU

from cardano_client.app_def import Errors, InsType
from cardano_client.command_builder import CommandBuilder
from cardano_client.errors import DeviceStatusError
from cardano_client.interaction import Message, check_response, run_interaction
from cardano_client.sign_tx import sign_transaction
from cardano_client.tx_types import AddressParams, SigningRequest, SignedTransactionData
from cardano_client.version import AppFlags, Version, flags_from_response, version_from_response


logger = logging.getLogger(__name__)

# DERIVE_ADDRESS sub-command returning the address to the host
P1_RETURN = 0x01


class CommandSender:
    """Send the client messages to the selected backend"""

    def __init__(self, backend: BackendInterface) -> None:
        """Class initializer"""

        self._backend = backend


    def _exchange(self, payload: bytes) -> RAPDU:
        """Synchronous APDU exchange with response

        Args:
            payload (bytes): APDU data to send

        Returns:
            Response APDU

        Raises:
            DeviceStatusError: The device answered with an error status
        """

        logger.debug("=> %s", payload.hex())
        try:
            rapdu = self._backend.exchange_raw(payload)
        except ExceptionRAPDU as err:
            logger.debug("<= %04X", err.status)
            raise DeviceStatusError(err.status, err.data) from err
        logger.debug("<= %s %04X", rapdu.data.hex(), rapdu.status)
        if rapdu.status != Errors.SW_SUCCESS:
            raise DeviceStatusError(rapdu.status, rapdu.data)
        return rapdu


    def send(self, message: Message) -> bytes:
        """Exchange one message with the device

        Args:
            message (Message): The message to send

        Returns:
            The response data
        """

        return self._exchange(CommandBuilder.apdu(message)).data


    def get_version_response(self) -> bytes:
        message = Message(InsType.GET_VERSION, 0x00, 0x00, expectedResponseLength=4)
        return check_response(message, self.send(message))


    def get_version(self) -> Version:
        """Query the app version

        Returns:
            The device app version
        """

        return version_from_response(self.get_version_response())


    def get_app_flags(self) -> AppFlags:
        return flags_from_response(self.get_version_response())


    def sign_tx(self, request: SigningRequest, version: Optional[Version] = None) -> SignedTransactionData:
        """Run the whole signing ceremony

        Args:
            request (SigningRequest): The signing request
            version (Version): The device app version, queried if not given

        Returns:
            The transaction hash and the witnesses
        """

        if version is None:
            version = self.get_version()
        return run_interaction(sign_transaction(version, request), self)


    def derive_address(self, params: AddressParams, version: Optional[Version] = None) -> str:
        """Derive a device owned address

        Args:
            params (AddressParams): The address parameters
            version (Version): The device app version, queried if not given

        Returns:
            The address, as hex string
        """

        if version is None:
            version = self.get_version()
        data = CommandBuilder(version).address_params(params)
        message = Message(InsType.DERIVE_PUBLIC_ADDR, P1_RETURN, 0x00, data, expectedResponseLength=None)
        return check_response(message, self.send(message)).hex()
