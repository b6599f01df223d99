import traceback
from inspect import getframeinfo, stack
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

import click

from flashbot.logging import LogLevel, logger

if TYPE_CHECKING:
    from flashbot.types.mev import SimulationReport


class FlashbotError(Exception):
    """
    An exception raised by flashbot.
    """


class APINotImplementedError(FlashbotError, NotImplementedError):
    """
    An error raised when a client method is declared but not supported yet.
    """


class ConfigError(FlashbotError):
    """
    Raised when a problem occurs from the configuration file or environment.
    """


class BundleError(FlashbotError):
    """
    Raised when a bundle cannot be turned into request parameters.
    """


class EmptyBundleError(BundleError):
    """
    Raised when a bundle without transactions is given. No request is made.
    """

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "Bundle cannot be empty.")


class EncodingError(BundleError):
    """
    Raised when a transaction in a bundle cannot be serialized.
    """

    def __init__(self, message: str, index: Optional[int] = None):
        self.index = index
        if index is not None:
            message = f"Transaction at index '{index}' failed to encode: {message}"

        super().__init__(message)


class OptionApplicationError(BundleError):
    """
    Raised when a bundle option rejects the current request parameters,
    such as computing an expiration from a non-numeric block.
    """

    def __init__(self, message: str, option: Any = None):
        self.option = option
        super().__init__(f"Failed to apply option: {message}")


class SigningError(FlashbotError):
    """
    Raised when there are issues with signing a relay request.
    """


class RelayRequestError(FlashbotError):
    """
    Raised when a relay call fails.
    """


class TransportError(RelayRequestError):
    """
    Raised when the HTTP request to the relay fails (connection, timeout, etc.).
    """


class DecodeError(RelayRequestError):
    """
    Raised when the relay response is not a decodable JSON-RPC envelope.
    """

    def __init__(self, message: Optional[str] = None, body: Optional[bytes] = None):
        self.body = body
        super().__init__(message or "Failed to decode relay response.")


class RelayError(RelayRequestError):
    """
    Raised when the relay responds with a JSON-RPC error object.
    Any partial ``result`` sent alongside the error is kept on the exception.
    """

    def __init__(self, message: str, code: Optional[int] = None, result: Any = None):
        self.message = message
        self.code = code
        self.result = result
        suffix = f" (code: {code})" if code is not None else ""
        super().__init__(f"RPC error: {message}{suffix}")


class EmptyResultError(RelayRequestError):
    """
    Raised when the relay response has neither a ``result`` nor an ``error``.
    """

    def __init__(self, method: Optional[str] = None):
        self.method = method
        message = "Empty result from relay"
        if method:
            message = f"{message} for '{method}'"

        super().__init__(f"{message}.")


class SimulationFailedError(FlashbotError):
    """
    Raised when a bundle simulation completes but reports failure,
    e.g. a transaction that is not allowed to revert did revert.
    """

    def __init__(self, report: "SimulationReport"):
        self.report = report
        reason = report.error or report.exec_error or "unknown reason"
        super().__init__(f"Bundle simulation failed: {reason}")


class ProviderError(FlashbotError):
    """
    Raised when the connected node fails a request.
    """


class ProviderNotConnectedError(ProviderError):
    """
    Raised when a node request is made without a node configured.
    """

    def __init__(self):
        super().__init__(
            "No node connected. Pass `web3=` or `node_uri=` when creating the client."
        )


class Abort(click.ClickException):
    """
    A wrapper around a CLI exception. When you raise this error,
    the error is nicely printed to the terminal. This is
    useful for all user-facing errors.
    """

    def __init__(self, message: Optional[str] = None):
        if not message:
            caller = getframeinfo(stack()[1][0])
            file_path = Path(caller.filename)
            location = file_path.name if file_path.is_file() else caller.filename
            message = f"Operation aborted in {location}::{caller.function} on line {caller.lineno}."

        super().__init__(message)

    @classmethod
    def from_flashbot_error(cls, exc: FlashbotError, show_traceback: Optional[bool] = None):
        show_traceback = (
            logger.level == LogLevel.DEBUG.value if show_traceback is None else show_traceback
        )
        if show_traceback:
            tb = traceback.format_exc()
            err_message = tb or str(exc)
        else:
            err_message = str(exc)

        err_type_name = getattr(type(exc), "__name__", "Exception")
        return Abort(f"({err_type_name}) {err_message}")

    def show(self, file=None):
        """
        Override default ``show`` to print CLI errors in red text.
        """

        logger.error(self.format_message())
