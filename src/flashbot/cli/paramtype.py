from typing import Any

import click
from eth_utils import is_hex, to_bytes

from flashbot.constants import NETWORKS


class Noop(click.ParamType):
    """
    A param-type for ignoring param-types.
    Good to use when the multi-type handling
    happens already in a callback or in the command itself.
    """

    def convert(self, value: Any, param, ctx) -> Any:
        return value


class RawTransaction(click.ParamType):
    """
    A ``0x``-prefixed raw signed transaction, converted to bytes.
    """

    name = "RAW_TXN"

    def convert(self, value, param, ctx):
        if isinstance(value, bytes):
            return value

        elif not isinstance(value, str) or not value.startswith("0x") or not is_hex(value):
            self.fail(f"Expected a 0x-prefixed hex transaction, got '{value}'.", param, ctx)

        return to_bytes(hexstr=value)


class NetworkChoice(click.Choice):
    def __init__(self):
        super().__init__(list(NETWORKS), case_sensitive=False)
