import pytest

from flashbot.client import Flashbot
from flashbot.transactions import SignedTransaction
from flashbot.types.mev import Bundle
from tests.conftest import RECEIVER, SENDER_KEY, SIGNING_KEY

SIM_SUCCESS = {
    "success": True,
    "stateBlock": "0x3e7",
    "mevGasPrice": "0x399339e8",
    "profit": "0x14537d8d4b310",
    "refundableValue": "0x14537d8d4b310",
    "gasUsed": "0x5208",
    "logs": [{"txLogs": []}],
}
SIM_FAILURE = {
    "success": False,
    "error": "tx reverted",
    "stateBlock": "0x3e7",
    "gasUsed": "0x0",
}
SEND_SUCCESS = {"bundleHash": "0x" + "ab" * 32}


@pytest.fixture(scope="session")
def dynamic_fee_txn():
    return SignedTransaction.sign(
        {
            "chainId": 1,
            "nonce": 0,
            "to": RECEIVER,
            "value": 1,
            "gas": 21000,
            "maxFeePerGas": 30_000_000_000,
            "maxPriorityFeePerGas": 1_000_000_000,
            "data": b"",
        },
        SENDER_KEY,
    )


@pytest.fixture(scope="session")
def legacy_txn():
    return SignedTransaction.sign(
        {
            "chainId": 1,
            "nonce": 1,
            "to": RECEIVER,
            "value": 1,
            "gas": 50000,
            "gasPrice": 20_000_000_000,
            "data": b"",
        },
        SENDER_KEY,
    )


@pytest.fixture
def bundle(dynamic_fee_txn, legacy_txn):
    return Bundle(transactions=(dynamic_fee_txn, legacy_txn), can_revert=(False, True))


@pytest.fixture
def mock_web3(mocker):
    return mocker.MagicMock()


@pytest.fixture
def client(session, mock_web3):
    return Flashbot(private_key=SIGNING_KEY, session=session, web3=mock_web3)
