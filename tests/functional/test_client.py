import pytest

from flashbot.client import Flashbot
from flashbot.config import FlashbotConfig
from flashbot.constants import MAINNET_RELAY_URL, SEPOLIA_RELAY_URL
from flashbot.exceptions import (
    APINotImplementedError,
    ConfigError,
    DecodeError,
    EmptyBundleError,
    EncodingError,
    OptionApplicationError,
    ProviderError,
    ProviderNotConnectedError,
    RelayError,
    SimulationFailedError,
)
from flashbot.options import with_expiration_block, with_expiration_duration_in_blocks
from flashbot.signing import recover_signer
from flashbot.types.mev import BroadcastResponse, Bundle, SimulationReport
from tests.conftest import SIGNING_ADDRESS, SIGNING_KEY
from tests.functional.conftest import SEND_SUCCESS, SIM_FAILURE, SIM_SUCCESS


class TestInit:
    def test_defaults(self, session):
        client = Flashbot(session=session)
        assert client.relay_url == MAINNET_RELAY_URL
        assert client.chain_id == 1
        assert client.builders == ()
        assert client.web3 is None
        assert client.address.startswith("0x")

    def test_private_key(self, client):
        assert client.address == SIGNING_ADDRESS

    def test_network(self, session):
        client = Flashbot(network="sepolia", session=session)
        assert client.relay_url == SEPOLIA_RELAY_URL
        assert client.chain_id == 11155111

    def test_unknown_network(self):
        with pytest.raises(ConfigError, match="Unknown network 'goerli'"):
            Flashbot(network="goerli")

    def test_overrides(self, session):
        client = Flashbot(
            relay_url="https://relay.example.com",
            chain_id=5,
            builders=["flashbots"],
            session=session,
        )
        assert client.relay_url == "https://relay.example.com"
        assert client.chain_id == 5
        assert client.builders == ("flashbots",)

    def test_config(self, session):
        config = FlashbotConfig(network="sepolia", private_key=SIGNING_KEY, timeout=3)
        client = Flashbot(config=config, session=session)
        assert client.address == SIGNING_ADDRESS
        assert client.relay_url == SEPOLIA_RELAY_URL
        assert client.transport.timeout == 3

    def test_config_network_override(self, session):
        config = FlashbotConfig(network="sepolia")
        client = Flashbot(config=config, network="mainnet", session=session)
        assert client.relay_url == MAINNET_RELAY_URL
        assert client.chain_id == 1

    def test_env_vars(self, monkeypatch, session):
        monkeypatch.setenv("FLASHBOT_NETWORK", "sepolia")
        monkeypatch.setenv("FLASHBOT_PRIVATE_KEY", SIGNING_KEY)
        client = Flashbot(session=session)
        assert client.chain_id == 11155111
        assert client.address == SIGNING_ADDRESS

    def test_node_uri(self, session):
        client = Flashbot(session=session, node_uri="http://127.0.0.1:8545")
        assert client.web3 is not None

    def test_repr(self, client):
        assert repr(client) == "<Flashbot https://relay.flashbots.net chain_id=1>"


class TestSimulate:
    def test_simulate(self, client, session, bundle):
        session.queue(result=SIM_SUCCESS)
        report = client.simulate(bundle, 1000)

        assert isinstance(report, SimulationReport)
        assert report.success
        assert report.state_block == 999
        assert report.gas_used == 21000
        assert session.methods == ["mev_simBundle"]

        (params,) = session.params()
        assert params["inclusion"] == {"block": "0x3e8"}
        assert [item["canRevert"] for item in params["body"]] == [False, True]

        call = session.calls[0]
        signature = call["headers"]["X-Flashbots-Signature"]
        assert recover_signer(call["data"], signature) == SIGNING_ADDRESS

    def test_simulate_latest(self, client, session, bundle):
        session.queue(result=SIM_SUCCESS)
        client.simulate(bundle, 0)
        assert session.params()[0]["inclusion"] == {"block": "latest"}

    def test_simulate_options(self, client, session, bundle):
        session.queue(result=SIM_SUCCESS)
        client.simulate(bundle, 1000, with_expiration_duration_in_blocks(2))
        assert session.params()[0]["inclusion"] == {"block": "0x3e8", "maxBlock": "0x3ea"}

    def test_simulate_failure_is_returned(self, client, session, bundle):
        session.queue(result=SIM_FAILURE)
        report = client.simulate(bundle, 1000)
        assert not report.success
        assert report.error == "tx reverted"

    def test_simulate_empty_bundle(self, client, session):
        with pytest.raises(EmptyBundleError):
            client.simulate(Bundle(), 1000)

        assert not session.calls

    def test_simulate_bad_option(self, client, session, bundle):
        with pytest.raises(OptionApplicationError):
            client.simulate(bundle, 0, with_expiration_duration_in_blocks(1))

        assert not session.calls

    def test_simulate_relay_error_keeps_report(self, client, session, bundle):
        session.queue(result=SIM_FAILURE, error={"code": -32000, "message": "sim failed"})
        with pytest.raises(RelayError) as err:
            client.simulate(bundle, 1000)

        assert isinstance(err.value.result, SimulationReport)
        assert err.value.result.error == "tx reverted"

    def test_simulate_unexpected_result(self, client, session, bundle):
        session.queue(result="0x1234")
        with pytest.raises(DecodeError, match="Unexpected 'mev_simBundle' result"):
            client.simulate(bundle, 1000)

    def test_simulate_builders(self, session, bundle):
        client = Flashbot(builders=["flashbots"], session=session)
        session.queue(result=SIM_SUCCESS)
        client.simulate(bundle, 1000)
        assert session.params()[0]["privacy"] == {"builders": ["flashbots"]}


class TestBroadcast:
    def test_broadcast(self, client, session, bundle):
        session.queue(result=SIM_SUCCESS)
        session.queue(result=SEND_SUCCESS)
        response = client.broadcast(bundle, 1000)

        assert isinstance(response, BroadcastResponse)
        assert response.bundle_hash == SEND_SUCCESS["bundleHash"]
        assert session.methods == ["mev_simBundle", "mev_sendBundle"]

        sim_params, send_params = session.params(0)[0], session.params(1)[0]
        assert sim_params["inclusion"] == {"block": "0x3e8"}
        assert send_params["inclusion"] == {"block": "0x3e8", "maxBlock": "0x406"}
        assert send_params["body"] == sim_params["body"]

    def test_broadcast_options(self, client, session, bundle):
        session.queue(result=SIM_SUCCESS)
        session.queue(result=SEND_SUCCESS)
        client.broadcast(bundle, 1000, with_expiration_block(1010))
        assert session.params(1)[0]["inclusion"]["maxBlock"] == "0x3f2"

    def test_broadcast_simulation_failed(self, client, session, bundle):
        session.queue(result=SIM_FAILURE)
        with pytest.raises(SimulationFailedError, match="tx reverted") as err:
            client.broadcast(bundle, 1000)

        assert err.value.report.error == "tx reverted"
        assert session.methods == ["mev_simBundle"]

    def test_broadcast_simulation_relay_error(self, client, session, bundle):
        session.queue(error={"code": -32000, "message": "unknown block"})
        with pytest.raises(RelayError, match="unknown block"):
            client.broadcast(bundle, 1000)

        assert session.methods == ["mev_simBundle"]

    def test_broadcast_empty_bundle(self, client, session):
        with pytest.raises(EmptyBundleError):
            client.broadcast(Bundle(), 1000)

        assert not session.calls

    def test_broadcast_send_error(self, client, session, bundle):
        session.queue(result=SIM_SUCCESS)
        session.queue(error={"code": -32602, "message": "invalid params"})
        with pytest.raises(RelayError) as err:
            client.broadcast(bundle, 1000)

        assert err.value.code == -32602


class TestGasPrice:
    def test_get_gas_price(self, client, mock_web3):
        mock_web3.eth.gas_price = 30_000_000_000
        mock_web3.eth.max_priority_fee = 1_000_000_000
        assert client.get_gas_price() == (30_000_000_000, 1_000_000_000)

    def test_not_connected(self, session):
        client = Flashbot(session=session)
        with pytest.raises(ProviderNotConnectedError):
            client.get_gas_price()

    def test_node_error(self, client, mock_web3, mocker):
        type(mock_web3.eth).gas_price = mocker.PropertyMock(side_effect=ValueError("down"))
        with pytest.raises(ProviderError, match="Failed to get gas price: down"):
            client.get_gas_price()

    def test_tip_error(self, client, mock_web3, mocker):
        mock_web3.eth.gas_price = 1
        type(mock_web3.eth).max_priority_fee = mocker.PropertyMock(
            side_effect=ValueError("no tip")
        )
        with pytest.raises(ProviderError, match="Failed to get gas tip: no tip"):
            client.get_gas_price()


class TestEstimateGasBundle:
    def test_signed_transactions(self, client, bundle):
        assert client.estimate_gas_bundle(bundle) == 21000 + 50000

    def test_raw_transactions(self, client, dynamic_fee_txn, legacy_txn):
        bundle = Bundle(
            transactions=(bytes(dynamic_fee_txn.raw_transaction), legacy_txn.raw_transaction.hex())
        )
        assert client.estimate_gas_bundle(bundle) == 21000 + 50000

    def test_empty(self, client):
        assert client.estimate_gas_bundle(Bundle()) == 0

    def test_undecodable(self, client, dynamic_fee_txn):
        bundle = Bundle(transactions=(dynamic_fee_txn, b"\x02\x01"))
        with pytest.raises(EncodingError) as err:
            client.estimate_gas_bundle(bundle)

        assert err.value.index == 1


class TestNotImplemented:
    def test_send_private_transaction(self, client, dynamic_fee_txn):
        with pytest.raises(APINotImplementedError):
            client.send_private_transaction(dynamic_fee_txn)

    def test_get_user_stats(self, client):
        with pytest.raises(NotImplementedError):
            client.get_user_stats()

    def test_get_bundle_stats(self, client, session):
        with pytest.raises(APINotImplementedError, match="get_bundle_stats"):
            client.get_bundle_stats("0x1234", 1000)

        assert not session.calls


class TestRelayCalls:
    def test_cancel_bundle(self, client, session):
        session.queue(result=0)
        assert client.cancel_bundle("a4a3a7d1-0ef6-4bd3-9ad0-1e1a6f1c2b3d") == 0
        assert session.methods == ["eth_cancelBundle"]
        assert session.params() == [{"replacementUuid": "a4a3a7d1-0ef6-4bd3-9ad0-1e1a6f1c2b3d"}]

    def test_set_fee_refund_recipient(self, client, session):
        session.queue(result={"from": SIGNING_ADDRESS, "to": SIGNING_ADDRESS})
        client.set_fee_refund_recipient(SIGNING_ADDRESS.lower())
        assert session.methods == ["flashbots_setFeeRefundRecipient"]
        assert session.params() == [{"recipient": SIGNING_ADDRESS}]

    def test_get_fee_refund_totals_by_recipient(self, client, session):
        session.queue(result={"pending": "0x0", "received": "0x10"})
        result = client.get_fee_refund_totals_by_recipient(SIGNING_ADDRESS)
        assert result == {"pending": "0x0", "received": "0x10"}
        assert session.methods == ["flashbots_getFeeRefundTotalsByRecipient"]

    def test_get_mev_refund_totals(self, client, session):
        session.queue(result={"total": "0x1"})
        session.queue(result={"total": "0x2"})
        assert client.get_mev_refund_total_by_recipient(SIGNING_ADDRESS) == {"total": "0x1"}
        assert client.get_mev_refund_total_by_sender(SIGNING_ADDRESS) == {"total": "0x2"}
        assert session.methods == [
            "flashbots_getMevRefundTotalByRecipient",
            "flashbots_getMevRefundTotalBySender",
        ]

    def test_request(self, client, session):
        session.queue(result="0x10")
        assert client.request("eth_blockNumber") == "0x10"
        assert session.params() == []

    def test_invalid_address(self, client, session):
        with pytest.raises(ValueError):
            client.set_fee_refund_recipient("0x1234")

        assert not session.calls


def test_private_key_from_config_file(tmp_path, session):
    (tmp_path / "flashbot-config.yaml").write_text(f"private_key: '{SIGNING_KEY}'\n")
    client = Flashbot(config=FlashbotConfig.from_file(tmp_path), session=session)
    assert client.address == SIGNING_ADDRESS
