from typing import Optional

import requests
from pydantic import ValidationError
from requests.structures import CaseInsensitiveDict

from flashbot.constants import SIGNATURE_HEADER
from flashbot.exceptions import DecodeError, EmptyResultError, RelayError, TransportError
from flashbot.logging import logger, sanitize_url
from flashbot.signing import RequestSigner
from flashbot.types.rpc import JsonRpcRequest, JsonRpcResponse
from flashbot.utils.rpc import USER_AGENT


class RelayTransport:
    """
    Sends signed JSON-RPC requests to a relay over HTTP.

    Args:
        url (str): The relay URL.
        signer (:class:`~flashbot.signing.RequestSigner`): Signs each request body.
        session (Optional[requests.Session]): The HTTP client. Defaults to a new session.
        timeout (Optional[float]): The default per-request timeout, in seconds.
    """

    def __init__(
        self,
        url: str,
        signer: RequestSigner,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.url = url
        self.signer = signer
        self.session = session or requests.Session()
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"<RelayTransport {sanitize_url(self.url)}>"

    def create_headers(self, body: bytes) -> CaseInsensitiveDict:
        headers: CaseInsensitiveDict = CaseInsensitiveDict()
        headers["Content-Type"] = "application/json"
        headers["User-Agent"] = USER_AGENT
        headers[SIGNATURE_HEADER] = self.signer.sign(body)
        return headers

    def send(self, request: JsonRpcRequest, timeout: Optional[float] = None) -> JsonRpcResponse:
        """
        Sign and post a request, returning the successful response envelope.

        Args:
            request (:class:`~flashbot.types.rpc.JsonRpcRequest`): The request.
            timeout (Optional[float]): Overrides the default timeout for this call.

        Raises:
            :class:`~flashbot.exceptions.SigningError`: Signing failed.
            :class:`~flashbot.exceptions.TransportError`: The HTTP call failed.
            :class:`~flashbot.exceptions.DecodeError`: The body is not a JSON-RPC envelope.
            :class:`~flashbot.exceptions.RelayError`: The relay returned an error object.
            :class:`~flashbot.exceptions.EmptyResultError`: No result and no error.

        Returns:
            :class:`~flashbot.types.rpc.JsonRpcResponse`
        """
        # NOTE: The signature covers these exact bytes; they are not re-serialized.
        body = request.to_json()
        headers = self.create_headers(body)
        logger.debug(
            f"Sending '{request.method}' (id={request.id}) to {sanitize_url(self.url)}."
        )

        try:
            response = self.session.post(
                self.url,
                data=body,
                headers=headers,
                timeout=self.timeout if timeout is None else timeout,
            )
            content = response.content
        except requests.RequestException as err:
            raise TransportError(f"Failed to execute request: {err}") from err

        rpc_response = self.decode(content, status_code=response.status_code)
        if rpc_response.error is not None:
            error = rpc_response.error
            logger.debug(f"'{request.method}' failed: {error.message} (code: {error.code})")
            raise RelayError(error.message, code=error.code, result=rpc_response.result)

        elif rpc_response.result is None:
            raise EmptyResultError(request.method)

        logger.debug(f"Received '{request.method}' response (id={rpc_response.id}).")
        return rpc_response

    @staticmethod
    def decode(content: bytes, status_code: Optional[int] = None) -> JsonRpcResponse:
        try:
            return JsonRpcResponse.model_validate_json(content)
        except ValidationError as err:
            status = f" (HTTP {status_code})" if status_code is not None else ""
            preview = content[:200].decode("utf8", errors="replace")
            raise DecodeError(
                f"Failed to decode relay response{status}: {preview!r}", body=content
            ) from err
