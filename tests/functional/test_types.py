import json

import pytest
from eth_pydantic_types import HexBytes

from flashbot.types.mev import (
    BroadcastResponse,
    BundleParams,
    Metadata,
    Privacy,
    PrivacyHint,
    Refund,
    RefundConfig,
    SimulationReport,
    Validity,
)
from flashbot.types.rpc import JsonRpcRequest, JsonRpcResponse


class TestSimulationReport:
    def test_model_validate(self):
        data = {
            "success": True,
            "stateBlock": "0xa",
            "mevGasPrice": "0x399339e8",
            "profit": "0x14537d8d4b310",
            "refundableValue": "0x14537d8d4b310",
            "gasUsed": "0x5a60a",
            "logs": [
                {
                    "txLogs": [
                        {
                            "address": "0x5fbdb2315678afecb367f032d93f642f64180aa3",
                            "topics": [
                                "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef",  # noqa: E501
                            ],
                            "data": "0x00000000000000000000000000000000000000000000000000000000000186a0",  # noqa: E501
                            "transactionIndex": "0x0",
                            "logIndex": "0x0",
                        }
                    ]
                },
                {
                    "bundleLogs": [
                        {
                            "txLogs": [
                                {
                                    "address": "0xe7f1725e7734ce288f8367e1bb143e90bb3f0512",
                                    "topics": [],
                                    "data": "0x",
                                    "transactionIndex": "0x1",
                                    "logIndex": "0x1",
                                }
                            ]
                        }
                    ]
                },
            ],
        }
        report = SimulationReport.model_validate(data)
        assert report.success
        assert report.state_block == 10
        assert report.mev_gas_price == 0x399339E8
        assert report.profit == report.refundable_value == 0x14537D8D4B310
        assert report.gas_used == 0x5A60A

        logs = list(report.transaction_logs)
        assert [log["logIndex"] for log in logs] == ["0x0", "0x1"]

    def test_failure(self):
        report = SimulationReport.model_validate(
            {"success": False, "error": "reverted", "execError": "revert", "revert": "0x08c379a0"}
        )
        assert not report.success
        assert report.exec_error == "revert"
        assert report.revert == HexBytes("0x08c379a0")

    def test_missing_success(self):
        with pytest.raises(ValueError):
            SimulationReport.model_validate({"gasUsed": "0x1"})


def test_broadcast_response():
    response = BroadcastResponse.model_validate({"bundleHash": "0x1234"})
    assert response.bundle_hash == "0x1234"
    assert not response.smart
    assert response.to_rpc() == {"bundleHash": "0x1234", "smart": False}


class TestBundleParams:
    def test_build_for_block(self):
        params = BundleParams.build_for_block(1000, max_block=1030)
        assert params.to_rpc() == {
            "version": "v0.1",
            "inclusion": {"block": "0x3e8", "maxBlock": "0x406"},
            "body": [],
        }

    def test_chaining(self):
        nested = BundleParams.build_for_block(1000).add_tx("0x02f8")
        params = (
            BundleParams.build_for_block(1000)
            .add_hash("0xabcd")
            .add_tx("0x02f9", can_revert=True)
            .add_bundle(nested)
            .set_privacy(Privacy(hints=[PrivacyHint.CALLDATA, PrivacyHint.LOGS]))
            .set_metadata(Metadata(origin_id="origin"))
        )
        data = params.to_rpc()
        assert data["body"] == [
            {"hash": "0xabcd"},
            {"tx": "0x02f9", "canRevert": True},
            {
                "bundle": {
                    "version": "v0.1",
                    "inclusion": {"block": "0x3e8"},
                    "body": [{"tx": "0x02f8", "canRevert": False}],
                }
            },
        ]
        assert data["privacy"] == {"hints": ["calldata", "logs"]}
        assert data["metadata"] == {"originId": "origin"}

    def test_set_validity(self):
        validity = Validity(
            refund_config=[
                RefundConfig(address="0x3c44cdddb6a900fa2b585dd299e03d12fa4293bc", percent=50)
            ]
        )
        data = BundleParams.build_for_block(1).set_validity(validity).to_rpc()
        assert data["validity"] == {
            "refundConfig": [
                {"address": "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC", "percent": 50}
            ]
        }

    def test_expire_after_blocks_on_latest(self):
        params = BundleParams.build_for_block(0)
        with pytest.raises(ValueError, match="Failed to parse block number 'latest'"):
            params.expire_after_blocks(1)


def test_fractional_refund_percent():
    validity = Validity(
        refund=[Refund(body_idx=0, percent=12.5)],
        refund_config=[
            RefundConfig(address="0x3c44cdddb6a900fa2b585dd299e03d12fa4293bc", percent=90)
        ],
    )
    data = validity.to_rpc()
    assert data["refund"] == [{"bodyIdx": 0, "percent": 12.5}]
    assert data["refundConfig"][0]["percent"] == 90
    assert isinstance(data["refundConfig"][0]["percent"], int)


class TestJsonRpcRequest:
    def test_create(self):
        params = BundleParams.build_for_block(0)
        request = JsonRpcRequest.create("mev_simBundle", params)
        assert 0 <= request.id < 1_000_000
        assert request.params == [
            {"version": "v0.1", "inclusion": {"block": "latest"}, "body": []}
        ]

    def test_to_json(self):
        request = JsonRpcRequest(id=7, method="eth_blockNumber")
        expected = b'{"jsonrpc":"2.0","id":7,"method":"eth_blockNumber","params":[]}'
        assert request.to_json() == expected

    def test_to_json_is_stable(self):
        request = JsonRpcRequest.create("eth_cancelBundle", {"replacementUuid": "abc"})
        assert request.to_json() == request.to_json()
        assert json.loads(request.to_json())["params"] == [{"replacementUuid": "abc"}]


def test_json_rpc_response():
    response = JsonRpcResponse.model_validate_json(
        '{"jsonrpc": "2.0", "id": "1", "error": {"code": -32000, "message": "bad"}}'
    )
    assert response.result is None
    assert response.error.code == -32000
    assert response.error.message == "bad"
