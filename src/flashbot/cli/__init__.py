from flashbot.cli.options import (
    FlashbotCliContextObject,
    client_options,
    flashbot_cli_context,
    verbosity_option,
)
from flashbot.cli.paramtype import NetworkChoice, Noop, RawTransaction

__all__ = [
    "client_options",
    "flashbot_cli_context",
    "FlashbotCliContextObject",
    "NetworkChoice",
    "Noop",
    "RawTransaction",
    "verbosity_option",
]
