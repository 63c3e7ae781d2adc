# -*- coding: utf-8 -*-
# SPDX-FileCopyrightText: 2024 Ledger SAS
# SPDX-License-Identifier: LicenseRef-LEDGER
"""
This module provides the Cardano host client.
It contains the interaction protocol shared by the device commands.

An interaction is a generator: it yields one Message at a time and is resumed
with the response data of exactly that Message. Interactions compose with
``yield from``, the return value of the nested interaction becomes a plain
value of its caller. ``run_interaction`` is the driver stepping an interaction
through a transport, one request in flight at a time.
"""

from dataclasses import dataclass
from typing import Generator, Optional, Protocol, TypeVar

from cardano_client.errors import UnexpectedResponseLength


T = TypeVar("T")


@dataclass(frozen=True)
class Message:
    ins: int
    p1: int
    p2: int
    data: bytes = bytes()
    # None: response not checked, 0: acknowledge only
    expectedResponseLength: Optional[int] = 0


Interaction = Generator[Message, bytes, T]


class Transport(Protocol):
    def send(self, message: Message) -> bytes:
        """Exchange one message with the device

        Raises:
            TransportError: The exchange failed
        """


def check_response(message: Message, response: bytes) -> bytes:
    """Enforce the response size announced by the message

    Args:
        message (Message): The request
        response (bytes): The response data

    Returns:
        The response data

    Raises:
        UnexpectedResponseLength: The response does not have the expected size
    """

    if message.expectedResponseLength is not None and \
        len(response) != message.expectedResponseLength:
        raise UnexpectedResponseLength(message.expectedResponseLength, len(response))
    return response


def run_interaction(interaction: Interaction[T], transport: Transport) -> T:
    """Drive an interaction until it returns

    Args:
        interaction (Interaction): The interaction to run
        transport (Transport): Sends the messages to the device

    Returns:
        The interaction result
    """

    try:
        message = next(interaction)
        while True:
            response = check_response(message, transport.send(message))
            message = interaction.send(response)
    except StopIteration as result:
        return result.value
    finally:
        interaction.close()
