from typing import Annotated, Any

from eth_utils import is_0x_prefixed
from pydantic import BaseModel as RootBaseModel
from pydantic import BeforeValidator, ConfigDict


def to_int(value: Any) -> int:
    """
    Convert the given value, such as hex-strs or hex-bytes, to an integer.
    """

    if isinstance(value, int):
        return value
    elif isinstance(value, str):
        return int(value, 16) if is_0x_prefixed(value) else int(value)
    elif isinstance(value, bytes):
        return int.from_bytes(value, "big")

    raise ValueError(f"cannot convert {repr(value)} to int")


def _hex_int_validator(value, info):
    return to_int(value)


HexInt = Annotated[int, BeforeValidator(_hex_int_validator)]
"""
Validate any hex-str or bytes into an integer.
To be used on pydantic-fields.
"""


class BaseModel(RootBaseModel):
    """
    A flashbot-pydantic BaseModel. Fields may be given by
    their python name or by their JSON-RPC alias.
    """

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    def to_rpc(self) -> dict:
        """
        The JSON-RPC form of this model: aliased keys, ``None`` fields omitted.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
