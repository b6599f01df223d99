from typing import TYPE_CHECKING, Any, Optional

from eth_account import Account as EthAccount
from eth_account.messages import SignableMessage, encode_defunct
from eth_utils import keccak, to_checksum_address, to_hex

from flashbot.exceptions import SigningError
from flashbot.logging import logger
from flashbot.utils import log_instead_of_fail

if TYPE_CHECKING:
    from eth_account.signers.local import LocalAccount


def create_signable_message(body: bytes) -> SignableMessage:
    """
    The EIP-191 message a relay expects to be signed for a request body:
    the personal-sign encoding of the *hex text* of ``keccak(body)``.
    """
    return encode_defunct(text=to_hex(keccak(body)))


class RequestSigner:
    """
    Signs relay request bodies for the ``X-Flashbots-Signature`` header.
    The signing key identifies the searcher to the relay; use a stable key
    to keep a relay reputation.
    """

    def __init__(self, account: Optional["LocalAccount"] = None):
        if account is None:
            logger.debug("Generated an ephemeral relay signing key.")
            account = EthAccount.create()

        self._account = account

    @classmethod
    def from_key(cls, private_key: Any) -> "RequestSigner":
        try:
            account = EthAccount.from_key(private_key)
        except Exception as err:
            raise SigningError(f"Invalid signing key: {err}") from err

        return cls(account)

    @classmethod
    def create(cls) -> "RequestSigner":
        """
        A signer with a freshly generated (ephemeral) key.
        """
        return cls()

    @log_instead_of_fail(default="<RequestSigner>")
    def __repr__(self) -> str:
        return f"<RequestSigner {self.address}>"

    @property
    def address(self) -> str:
        return self._account.address

    def sign(self, body: bytes) -> str:
        """
        Sign the exact bytes that are sent to the relay.

        Args:
            body (bytes): The serialized JSON-RPC request.

        Returns:
            str: ``"<address>:<signature>"``.
        """
        try:
            signed = self._account.sign_message(create_signable_message(body))
        except Exception as err:
            raise SigningError(f"Failed to sign request: {err}") from err

        if not signed.signature:
            raise SigningError("Failed to sign request: empty signature.")

        return f"{self.address}:{to_hex(signed.signature)}"


def recover_signer(body: bytes, signature_header: str) -> str:
    """
    Get the address that produced a ``X-Flashbots-Signature`` value for the given body.

    Raises:
        :class:`~flashbot.exceptions.SigningError`: When the header is malformed,
          the signature is invalid, or it does not match the declared address.
    """
    declared, sep, signature = signature_header.partition(":")
    if not sep or not signature:
        raise SigningError(f"Malformed signature header '{signature_header}'.")

    try:
        recovered = EthAccount.recover_message(create_signable_message(body), signature=signature)
    except Exception as err:
        raise SigningError(f"Failed to recover signer: {err}") from err

    try:
        declared = to_checksum_address(declared)
    except ValueError as err:
        raise SigningError(f"Malformed signer address '{declared}'.") from err

    if recovered != declared:
        raise SigningError(f"Signature is from '{recovered}', not '{declared}'.")

    return recovered
