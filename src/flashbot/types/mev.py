"""
Models for the MEV-Share bundle API (``mev_simBundle`` / ``mev_sendBundle``).
Much of the models here are heavily inspired from the rust Alloy crate ``alloy-rpc-types-mev``.
https://github.com/alloy-rs/alloy
"""

from collections.abc import Iterator
from enum import Enum
from typing import Any, Optional, Union

from eth_pydantic_types import HexBytes
from eth_utils import remove_0x_prefix, to_checksum_address, to_hex
from pydantic import ConfigDict, Field, field_validator

from flashbot.constants import LATEST_BLOCK
from flashbot.types.basic import BaseModel, HexInt


class ProtocolVersion(str, Enum):
    """
    The version of the MEV-share API to use.
    """

    V0_1 = "v0.1"
    """
    The 0.1 version of the API.
    """


class Bundle(BaseModel):
    """
    A caller-side bundle: the ordered signed transactions to submit together,
    and which of them may revert without invalidating the bundle.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, arbitrary_types_allowed=True)

    transactions: tuple[Any, ...] = ()
    """
    Signed transactions: :class:`~flashbot.transactions.SignedTransaction`,
    ``eth_account`` signed transactions, raw bytes or ``0x`` hex strings.
    """

    can_revert: tuple[bool, ...] = ()
    """
    Per-transaction revert permission. May be shorter than ``transactions``;
    missing entries are ``False``.
    """

    replacement_uuid: Optional[str] = None
    """
    UUID that can be used to cancel/replace this bundle.
    """

    builders: tuple[str, ...] = ()
    """
    Names of the builders to share the bundle with.
    """

    @property
    def is_empty(self) -> bool:
        return len(self.transactions) == 0

    def can_revert_at(self, index: int) -> bool:
        return self.can_revert[index] if index < len(self.can_revert) else False


class Refund(BaseModel):
    """
    Specifies the minimum percent of a given bundle's earnings to redistribute for it to be included
    in a builder's block.
    """

    body_idx: int = Field(alias="bodyIdx")
    """
    The index of the transaction in the bundle.
    """

    percent: Union[int, float]
    """
    The minimum percent of the bundle's earnings to redistribute.
    """


class RefundConfig(BaseModel):
    """
    Specifies what addresses should receive what percent of the overall refund for this bundle,
    if it is enveloped by another bundle (e.g. a searcher backrun).
    """

    address: str
    """
    The address to refund.
    """

    percent: Union[int, float]
    """
    The minimum percent of the bundle's earnings to redistribute.
    """

    @field_validator("address")
    @classmethod
    def validate_address(cls, value):
        return to_checksum_address(value)


class Validity(BaseModel):
    """
    Requirements for the bundle to be included in the block.
    """

    refund: Optional[list[Refund]] = None
    """
    Specifies the minimum percent of a given bundle's earnings to redistribute
    for it to be included in a builder's block.
    """

    refund_config: Optional[list[RefundConfig]] = Field(None, alias="refundConfig")
    """
    Specifies what addresses should receive what percent of the overall refund for this bundle,
    if it is enveloped by another bundle (e.g. a searcher backrun).
    """


class PrivacyHint(str, Enum):
    """
    Hints on what data should be shared about the bundle and its transactions.
    """

    CALLDATA = "calldata"
    CONTRACT_ADDRESS = "contract_address"
    LOGS = "logs"
    FUNCTION_SELECTOR = "function_selector"
    HASH = "hash"
    TX_HASH = "tx_hash"
    FULL = "full"


class Privacy(BaseModel):
    """
    Preferences on what data should be shared about the bundle and its transactions
    """

    hints: Optional[list[PrivacyHint]] = None
    """
    Hints on what data should be shared about the bundle and its transactions.
    """

    builders: Optional[list[str]] = None
    """
    Names of the builders that should be allowed to see the bundle/transaction.
    """


class Metadata(BaseModel):
    """
    Extra data attached to the bundle.
    """

    origin_id: Optional[str] = Field(None, alias="originId")


class Inclusion(BaseModel):
    """
    Data used by block builders to check if the bundle should be considered for inclusion.
    Both blocks are hex quantities; ``block`` may also be the ``"latest"`` tag.
    """

    block: str
    """
    The first block the bundle is valid for.
    """

    max_block: Optional[str] = Field(None, alias="maxBlock")
    """
    The last block the bundle is valid for.
    """


class BundleHashItem(BaseModel):
    """
    The hash of either a transaction or bundle we are trying to backrun.
    """

    hash: str


class BundleTxItem(BaseModel):
    """
    A new signed transaction.
    """

    tx: str
    """
    ``0x``-prefixed hex of the signed transaction.
    """

    can_revert: bool = Field(False, alias="canRevert")
    """
    If true, the transaction can revert without the bundle being considered invalid.
    """


class BundleNestedItem(BaseModel):
    """
    A nested bundle request.
    """

    bundle: "BundleParams"


BodyItem = Union[BundleHashItem, BundleTxItem, BundleNestedItem]


def block_to_hex(block: int) -> str:
    """
    Encode a block number for an inclusion window. Block ``0`` means
    the ``"latest"`` tag rather than a specific height.
    """
    if block < 0:
        raise ValueError(f"Block number must be non-negative, got '{block}'.")

    return LATEST_BLOCK if block == 0 else to_hex(block)


def parse_block_hex(value: str) -> int:
    try:
        return int(remove_0x_prefix(value), 16)  # type: ignore[arg-type]
    except ValueError as err:
        raise ValueError(f"Failed to parse block number '{value}'.") from err


class BundleParams(BaseModel):
    """
    The request parameters of ``mev_simBundle`` and ``mev_sendBundle``.
    The ``set_*`` and ``expire_*`` methods return the same instance so
    they can be chained; each one overwrites the field it writes.
    """

    version: ProtocolVersion = ProtocolVersion.V0_1
    inclusion: Inclusion
    body: list[BodyItem] = []
    validity: Optional[Validity] = None
    privacy: Optional[Privacy] = None
    metadata: Optional[Metadata] = None

    @classmethod
    def build_for_block(
        cls,
        block: int,
        max_block: Optional[int] = None,
        version: Optional[ProtocolVersion] = None,
        body: Optional[list[BodyItem]] = None,
        validity: Optional[Validity] = None,
        privacy: Optional[Privacy] = None,
    ) -> "BundleParams":
        return cls(
            version=version or ProtocolVersion.V0_1,
            inclusion=Inclusion(
                block=block_to_hex(block),
                max_block=None if max_block is None else to_hex(max_block),
            ),
            body=body or [],
            validity=validity,
            privacy=privacy,
        )

    def add_tx(self, tx: str, can_revert: bool = False) -> "BundleParams":
        self.body.append(BundleTxItem(tx=tx, can_revert=can_revert))
        return self

    def add_hash(self, hash: str) -> "BundleParams":
        self.body.append(BundleHashItem(hash=hash))
        return self

    def add_bundle(self, bundle: "BundleParams") -> "BundleParams":
        self.body.append(BundleNestedItem(bundle=bundle))
        return self

    def set_validity(self, validity: Validity) -> "BundleParams":
        self.validity = validity
        return self

    def set_privacy(self, privacy: Privacy) -> "BundleParams":
        """
        Set the privacy preferences. Fields left as ``None`` keep their current value,
        so hints can be set without dropping the builders a bundle is routed to.
        """
        if self.privacy is None:
            self.privacy = privacy
        else:
            self.privacy = self.privacy.model_copy(update=privacy.model_dump(exclude_none=True))

        return self

    def set_metadata(self, metadata: Metadata) -> "BundleParams":
        self.metadata = metadata
        return self

    def expire_at_block(self, block: int) -> "BundleParams":
        """
        Set the last block the bundle is valid for.
        """
        if block < 0:
            raise ValueError(f"Expiration block must be non-negative, got '{block}'.")

        self.inclusion.max_block = to_hex(block)
        return self

    def expire_after_blocks(self, duration: int) -> "BundleParams":
        """
        Set the last valid block to ``duration`` blocks past the target block.
        Fails when the target block is the ``"latest"`` tag.
        """
        if duration < 0:
            raise ValueError(f"Expiration duration must be non-negative, got '{duration}'.")

        block = parse_block_hex(self.inclusion.block)
        self.inclusion.max_block = to_hex(block + duration)
        return self


BundleNestedItem.model_rebuild()


class SimBundleLogs(BaseModel):
    """
    Logs returned by `mev_simBundle`.
    """

    tx_logs: Optional[list[dict]] = Field(None, alias="txLogs")
    """
    Logs for transactions in bundle.
    """

    bundle_logs: Optional[list["SimBundleLogs"]] = Field(None, alias="bundleLogs")
    """
    Logs for bundles in bundle.
    """


class SimulationReport(BaseModel):
    """
    Response from the relay after sending a simulation request.
    """

    success: bool
    """
    Whether the simulation was successful.
    """

    error: Optional[str] = None
    """
    Error message if the simulation failed.
    """

    state_block: Optional[HexInt] = Field(None, alias="stateBlock")
    """
    The block number of the simulated block.
    """

    mev_gas_price: Optional[HexInt] = Field(None, alias="mevGasPrice")
    """
    The effective gas price paid by the bundle.
    """

    profit: Optional[HexInt] = None
    """
    The profit of the simulated block.
    """

    refundable_value: Optional[HexInt] = Field(None, alias="refundableValue")
    """
    The refundable value of the simulated block.
    """

    gas_used: Optional[HexInt] = Field(None, alias="gasUsed")
    """
    The gas used by the simulated block.
    """

    logs: Optional[list[SimBundleLogs]] = None
    """
    Logs returned by `mev_simBundle`.
    """

    exec_error: Optional[str] = Field(None, alias="execError")
    """
    Error message if the bundle execution failed.
    """

    revert: Optional[HexBytes] = None
    """
    Contains the return data if the transaction reverted
    """

    @property
    def transaction_logs(self) -> Iterator[dict]:
        yield from _get_transaction_logs_from_sim_logs(self.logs or [])


def _get_transaction_logs_from_sim_logs(logs: list[SimBundleLogs]) -> Iterator[dict]:
    for bundle_log in logs:
        yield from (bundle_log.tx_logs or [])
        yield from _get_transaction_logs_from_sim_logs(bundle_log.bundle_logs or [])


class BroadcastResponse(BaseModel):
    """
    Response from the relay after sending a bundle.
    """

    bundle_hash: str = Field(alias="bundleHash")
    """
    The hash of the submitted bundle.
    """

    smart: bool = False
    """
    Whether the bundle was routed through the relay's smart routing layer.
    """


class UserStats(BaseModel):
    reputation: float = 0.0
    stats: dict[str, Any] = {}


class BundleStats(BaseModel):
    bundle_hash: str = Field(alias="bundleHash")
    block_number: Optional[HexInt] = Field(None, alias="blockNumber")
    status: Optional[str] = None
    message: Optional[str] = None
