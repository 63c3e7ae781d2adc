import pytest

from cardano_client.command_sender import CommandSender

from emulator import DeviceEmulator
from input_files.signTx import LATEST_VERSION


@pytest.fixture(name="backend")
def backend_fixture() -> DeviceEmulator:
    return DeviceEmulator(LATEST_VERSION)


@pytest.fixture(name="client")
def client_fixture(backend: DeviceEmulator) -> CommandSender:
    # Use the app interface instead of raw interface
    return CommandSender(backend)


@pytest.fixture(name="appFlags")
def appFlags_fixture(client: CommandSender) -> dict:
    flags = client.get_app_flags()
    return {
        "isDebug": flags.isDebug,
        "isAppXS": flags.isAppXS
    }
