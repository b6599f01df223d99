import json
from collections.abc import Sequence
from typing import Any, Optional, Union

import pytest
import requests
from click.testing import CliRunner

from flashbot.logging import LogLevel, logger

# Hardhat / Anvil test accounts. Never use on a real network.
SIGNING_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
SIGNING_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
SENDER_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
RECEIVER = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"


class FakeSession:
    """
    Stands in for ``requests.Session``. Returns scripted responses
    (in order) and records every ``post()``.
    """

    def __init__(self):
        self.calls: list[dict] = []
        self._responses: list[Union[requests.Response, Exception]] = []

    def queue(
        self,
        result: Any = None,
        error: Optional[dict] = None,
        raw: Optional[bytes] = None,
        status_code: int = 200,
    ):
        if raw is None:
            data: dict = {"jsonrpc": "2.0", "id": 1}
            if result is not None:
                data["result"] = result
            if error is not None:
                data["error"] = error

            raw = json.dumps(data).encode("utf8")

        response = requests.Response()
        response._content = raw
        response.status_code = status_code
        self._responses.append(response)

    def queue_exception(self, err: Exception):
        self._responses.append(err)

    def post(self, url, data=None, headers=None, timeout=None):
        self.calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        if not self._responses:
            raise AssertionError("Unexpected relay request.")

        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response

        return response

    @property
    def methods(self) -> Sequence[str]:
        return [json.loads(c["data"])["method"] for c in self.calls]

    def params(self, index: int = -1) -> list:
        return json.loads(self.calls[index]["data"])["params"]


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in (
        "FLASHBOT_NETWORK",
        "FLASHBOT_RELAY_URL",
        "FLASHBOT_CHAIN_ID",
        "FLASHBOT_BUILDERS",
        "FLASHBOT_PRIVATE_KEY",
        "FLASHBOT_NODE_URI",
        "FLASHBOT_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_log_level():
    level = logger.level
    yield
    logger.set_level(level or LogLevel.INFO)
