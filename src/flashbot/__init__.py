from flashbot.client import Flashbot
from flashbot.config import FlashbotConfig
from flashbot.exceptions import (
    BundleError,
    EmptyBundleError,
    EncodingError,
    FlashbotError,
    OptionApplicationError,
    RelayError,
    RelayRequestError,
    SimulationFailedError,
)
from flashbot.options import (
    BundleOption,
    with_expiration_block,
    with_expiration_duration_in_blocks,
    with_metadata,
    with_privacy,
    with_validity,
)
from flashbot.transactions import SignedTransaction
from flashbot.types.mev import (
    BroadcastResponse,
    Bundle,
    Metadata,
    Privacy,
    PrivacyHint,
    Refund,
    RefundConfig,
    SimulationReport,
    Validity,
)
from flashbot.utils.misc import __version__

__all__ = [
    "__version__",
    "BroadcastResponse",
    "Bundle",
    "BundleError",
    "BundleOption",
    "EmptyBundleError",
    "EncodingError",
    "Flashbot",
    "FlashbotConfig",
    "FlashbotError",
    "Metadata",
    "OptionApplicationError",
    "Privacy",
    "PrivacyHint",
    "Refund",
    "RefundConfig",
    "RelayError",
    "RelayRequestError",
    "SignedTransaction",
    "SimulationFailedError",
    "SimulationReport",
    "Validity",
    "with_expiration_block",
    "with_expiration_duration_in_blocks",
    "with_metadata",
    "with_privacy",
    "with_validity",
]
