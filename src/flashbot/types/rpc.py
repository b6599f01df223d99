import json
from random import randrange
from typing import Any, Optional, Union

from pydantic import Field

from flashbot.constants import JSON_RPC_VERSION, MAX_REQUEST_ID
from flashbot.types.basic import BaseModel


def _new_request_id() -> int:
    return randrange(MAX_REQUEST_ID)


class JsonRpcRequest(BaseModel):
    """
    A JSON-RPC 2.0 request envelope. The relay signature covers the exact
    bytes of :meth:`to_json`, so serialization must stay deterministic.
    """

    jsonrpc: str = JSON_RPC_VERSION
    id: int = Field(default_factory=_new_request_id)
    method: str
    params: list[Any] = []

    @classmethod
    def create(cls, method: str, *params: Any) -> "JsonRpcRequest":
        """
        Create a request, converting any model parameters to their JSON-RPC form.
        """
        return cls(
            method=method,
            params=[p.to_rpc() if isinstance(p, BaseModel) else p for p in params],
        )

    def to_json(self) -> bytes:
        data = {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
            "method": self.method,
            "params": self.params,
        }
        return json.dumps(data, separators=(",", ":")).encode("utf8")


class RPCError(BaseModel):
    code: int = 0
    message: str = ""
    data: Optional[Any] = None


class JsonRpcResponse(BaseModel):
    """
    A JSON-RPC 2.0 response envelope.
    """

    jsonrpc: Optional[str] = None
    id: Optional[Union[int, str]] = None
    result: Optional[Any] = None
    error: Optional[RPCError] = None
