from typing import Any, Union

import rlp  # type: ignore
from eth_account import Account as EthAccount
from eth_account.typed_transactions import TypedTransaction
from eth_pydantic_types import HexBytes
from eth_utils import big_endian_to_int, keccak, to_bytes, to_hex

from flashbot.types.basic import BaseModel, HexInt

# Highest first byte of an EIP-2718 typed transaction envelope.
_MAX_TRANSACTION_TYPE = 0x7F
_LEGACY_GAS_INDEX = 2


class SignedTransaction(BaseModel):
    """
    A signed transaction ready to go into a bundle: the raw signed bytes
    and the gas limit declared in them.
    """

    raw_transaction: HexBytes
    gas_limit: HexInt

    @classmethod
    def from_bytes(cls, raw: Union[bytes, str]) -> "SignedTransaction":
        """
        Load a signed transaction from its raw bytes (or ``0x`` hex).

        Raises:
            ValueError: When the bytes are not a decodable transaction.
        """
        data = to_bytes(hexstr=raw) if isinstance(raw, str) else bytes(raw)
        return cls(raw_transaction=data, gas_limit=decode_gas_limit(data))

    @classmethod
    def sign(cls, txn: dict, private_key: Any) -> "SignedTransaction":
        """
        Sign a transaction dict (``web3`` style keys, e.g. ``gas``, ``nonce``,
        ``maxFeePerGas``) with the given key.
        """
        signed = EthAccount.sign_transaction(txn, private_key)
        return cls(raw_transaction=signed.raw_transaction, gas_limit=txn["gas"])

    @property
    def txn_hash(self) -> str:
        return to_hex(keccak(self.raw_transaction))

    def serialize_transaction(self) -> bytes:
        return bytes(self.raw_transaction)


def decode_gas_limit(raw: bytes) -> int:
    """
    Read the declared gas limit out of a raw signed transaction.
    """
    if not raw:
        raise ValueError("Empty transaction bytes.")

    if raw[0] <= _MAX_TRANSACTION_TYPE:
        typed_txn = TypedTransaction.from_bytes(HexBytes(raw))
        return int(typed_txn.as_dict()["gas"])

    fields = rlp.decode(raw)
    return big_endian_to_int(fields[_LEGACY_GAS_INDEX])


def serialize_transaction(txn: Any) -> bytes:
    """
    Get the binary (signed) form of a bundle transaction.

    Args:
        txn (Any): A :class:`~flashbot.transactions.SignedTransaction`, an
          ``eth_account`` signed transaction, raw bytes, a ``0x`` hex str, or
          any object with a ``serialize_transaction()`` method.

    Returns:
        bytes
    """
    if isinstance(txn, (bytes, bytearray)):
        raw = bytes(txn)
    elif isinstance(txn, str):
        raw = to_bytes(hexstr=txn)
    elif hasattr(txn, "serialize_transaction"):
        raw = txn.serialize_transaction()
    elif (raw_transaction := getattr(txn, "raw_transaction", None)) is not None:
        raw = bytes(raw_transaction)
    else:
        raise TypeError(f"Unsupported transaction type '{type(txn).__name__}'.")

    if not raw:
        raise ValueError("Transaction serialized to empty bytes.")

    return raw


def get_gas_limit(txn: Any) -> int:
    """
    The gas limit declared on a bundle transaction. Falls back to
    decoding the serialized transaction when it is not an attribute.
    """
    if isinstance(gas_limit := getattr(txn, "gas_limit", None), int):
        return gas_limit

    return decode_gas_limit(serialize_transaction(txn))
