from typing import TYPE_CHECKING, Any, Optional, TypeVar

import requests
from eth_utils import to_checksum_address
from pydantic import ValidationError
from web3 import HTTPProvider, Web3

from flashbot.config import FlashbotConfig
from flashbot.constants import (
    METHOD_ETH_CANCEL_BUNDLE,
    METHOD_GET_FEE_REFUND_TOTALS_BY_RECIPIENT,
    METHOD_GET_MEV_REFUND_TOTAL_BY_RECIPIENT,
    METHOD_GET_MEV_REFUND_TOTAL_BY_SENDER,
    METHOD_MEV_SEND_BUNDLE,
    METHOD_MEV_SIM_BUNDLE,
    METHOD_SET_FEE_REFUND_RECIPIENT,
)
from flashbot.exceptions import (
    DecodeError,
    EncodingError,
    ProviderError,
    ProviderNotConnectedError,
    RelayError,
    SimulationFailedError,
)
from flashbot.logging import logger, sanitize_url
from flashbot.options import BundleOption
from flashbot.params import build_send_params, build_sim_params
from flashbot.signing import RequestSigner
from flashbot.transactions import get_gas_limit
from flashbot.transport import RelayTransport
from flashbot.types.basic import BaseModel
from flashbot.types.mev import (
    BroadcastResponse,
    Bundle,
    BundleStats,
    SimulationReport,
    UserStats,
)
from flashbot.types.rpc import JsonRpcRequest
from flashbot.utils.misc import log_instead_of_fail, raises_not_implemented

if TYPE_CHECKING:
    from flashbot.types.mev import BundleParams

ModelType = TypeVar("ModelType", bound=BaseModel)


class Flashbot:
    """
    A client for a Flashbots-compatible relay. Bundles are always simulated
    before they are broadcast.

    Usage example::

        from flashbot import Bundle, Flashbot

        client = Flashbot(private_key=SIGNING_KEY, network="sepolia")
        bundle = Bundle(transactions=[signed_txn])
        report = client.simulate(bundle, target_block)
        response = client.broadcast(bundle, target_block)

    Args:
        private_key (Any): The relay signing key. When not given (here or in the
          config), an ephemeral key is generated; pass a stable key to keep a
          relay reputation.
        relay_url (Optional[str]): Overrides the network preset's relay URL.
        chain_id (Optional[int]): Overrides the network preset's chain ID.
        builders (Optional[list[str]]): Builders to share bundles with when the
          bundle does not name its own.
        session (Optional[requests.Session]): The HTTP client to use.
        web3 (Optional[Web3]): A node client, used for gas-price queries.
        node_uri (Optional[str]): A node HTTP URI, used when ``web3`` is not given.
        network (Optional[str]): A network preset, ``"mainnet"`` or ``"sepolia"``.
        timeout (Optional[float]): The default per-request timeout, in seconds.
        config (Optional[:class:`~flashbot.config.FlashbotConfig`]): Base settings.
          Other arguments override it.
    """

    def __init__(
        self,
        private_key: Any = None,
        relay_url: Optional[str] = None,
        chain_id: Optional[int] = None,
        builders: Optional[list[str]] = None,
        session: Optional[requests.Session] = None,
        web3: Optional[Web3] = None,
        node_uri: Optional[str] = None,
        network: Optional[str] = None,
        timeout: Optional[float] = None,
        config: Optional[FlashbotConfig] = None,
    ):
        self.config = _merge_config(
            config,
            network=network,
            relay_url=relay_url,
            chain_id=chain_id,
            builders=None if builders is None else list(builders),
            node_uri=node_uri,
            timeout=timeout,
        )

        if private_key is None and self.config.private_key is not None:
            private_key = self.config.private_key.get_secret_value()

        self.signer = (
            RequestSigner.create() if private_key is None else RequestSigner.from_key(private_key)
        )
        self.transport = RelayTransport(
            self.relay_url, self.signer, session=session, timeout=self.config.timeout
        )

        if web3 is None and self.config.node_uri:
            web3 = Web3(HTTPProvider(self.config.node_uri))

        self.web3 = web3

    @log_instead_of_fail(default="<Flashbot>")
    def __repr__(self) -> str:
        return f"<Flashbot {sanitize_url(self.relay_url)} chain_id={self.chain_id}>"

    @property
    def address(self) -> str:
        """
        The address of the relay signing key.
        """
        return self.signer.address

    @property
    def relay_url(self) -> str:
        return self.config.relay_url  # type: ignore[return-value]

    @property
    def chain_id(self) -> int:
        return self.config.chain_id  # type: ignore[return-value]

    @property
    def builders(self) -> tuple[str, ...]:
        return tuple(self.config.builders)

    def simulate(
        self,
        bundle: Bundle,
        target_block: int,
        *options: BundleOption,
        timeout: Optional[float] = None,
    ) -> SimulationReport:
        """
        Dry-run the bundle on the relay (``mev_simBundle``). Nothing is sent on-chain.

        Args:
            bundle (:class:`~flashbot.types.mev.Bundle`): The bundle to simulate.
            target_block (int): The block to simulate for. ``0`` means ``"latest"``.
            *options (BundleOption): Options applied in order.
            timeout (Optional[float]): Overrides the default request timeout.

        Raises:
            :class:`~flashbot.exceptions.EmptyBundleError`: When the bundle is empty.
              No request is made.

        Returns:
            :class:`~flashbot.types.mev.SimulationReport`
        """
        params = build_sim_params(bundle, target_block, options, builders=self.builders)
        logger.debug(
            f"Simulating bundle of {len(bundle.transactions)} txn(s) for block {target_block}."
        )
        return self._send_bundle(METHOD_MEV_SIM_BUNDLE, params, SimulationReport, timeout)

    def broadcast(
        self,
        bundle: Bundle,
        target_block: int,
        *options: BundleOption,
        timeout: Optional[float] = None,
    ) -> BroadcastResponse:
        """
        Simulate the bundle and, when the simulation succeeds, send it
        (``mev_sendBundle``). The bundle stays valid until ``target_block + 30``
        unless an option changes ``maxBlock``.

        Args:
            bundle (:class:`~flashbot.types.mev.Bundle`): The bundle to send.
            target_block (int): The first block the bundle is valid for.
            *options (BundleOption): Options applied in order to the send request.
            timeout (Optional[float]): Overrides the default request timeout.

        Raises:
            :class:`~flashbot.exceptions.SimulationFailedError`: When the simulation
              reports failure. Nothing is sent.

        Returns:
            :class:`~flashbot.types.mev.BroadcastResponse`
        """
        report = self.simulate(bundle, target_block, timeout=timeout)
        if not report.success:
            raise SimulationFailedError(report)

        params = build_send_params(bundle, target_block, options, builders=self.builders)
        response = self._send_bundle(METHOD_MEV_SEND_BUNDLE, params, BroadcastResponse, timeout)
        logger.success(f"Bundle '{response.bundle_hash}' sent for block {target_block}.")
        return response

    @raises_not_implemented
    def send_private_transaction(
        self, signed_txn: Any, max_block_number: Optional[int] = None
    ) -> None:
        """
        Send a single transaction privately (``eth_sendPrivateTransaction``).
        """

    def get_gas_price(self) -> tuple[int, int]:
        """
        The node's suggested gas price and priority fee, in wei.

        Raises:
            :class:`~flashbot.exceptions.ProviderNotConnectedError`: When no node
              is configured.
            :class:`~flashbot.exceptions.ProviderError`: When the node request fails.

        Returns:
            tuple[int, int]: ``(gas_price, priority_fee)``.
        """
        web3 = self._require_web3()
        try:
            gas_price = web3.eth.gas_price
        except Exception as err:
            raise ProviderError(f"Failed to get gas price: {err}") from err

        try:
            priority_fee = web3.eth.max_priority_fee
        except Exception as err:
            raise ProviderError(f"Failed to get gas tip: {err}") from err

        return int(gas_price), int(priority_fee)

    def estimate_gas_bundle(self, bundle: Bundle) -> int:
        """
        The sum of the gas limits declared on the bundle's transactions.
        This is not the gas the bundle uses; see
        :attr:`~flashbot.types.mev.SimulationReport.gas_used` for that.
        """
        total = 0
        for idx, txn in enumerate(bundle.transactions):
            try:
                total += get_gas_limit(txn)
            except Exception as err:
                raise EncodingError(str(err), index=idx) from err

        return total

    @raises_not_implemented
    def get_user_stats(self, block_number: Optional[int] = None) -> UserStats:
        """
        The signing key's reputation on the relay.
        """

    @raises_not_implemented
    def get_bundle_stats(
        self, bundle_hash: str, block_number: int
    ) -> BundleStats:
        """
        The status of a submitted bundle on the relay.
        """

    def cancel_bundle(self, replacement_uuid: str, timeout: Optional[float] = None) -> Any:
        """
        Cancel bundles sent with the given replacement UUID (``eth_cancelBundle``).
        """
        return self.request(
            METHOD_ETH_CANCEL_BUNDLE, {"replacementUuid": replacement_uuid}, timeout=timeout
        )

    def get_fee_refund_totals_by_recipient(
        self, recipient: str, timeout: Optional[float] = None
    ) -> Any:
        return self.request(
            METHOD_GET_FEE_REFUND_TOTALS_BY_RECIPIENT,
            {"recipient": to_checksum_address(recipient)},
            timeout=timeout,
        )

    def set_fee_refund_recipient(self, recipient: str, timeout: Optional[float] = None) -> Any:
        """
        Direct fee refunds earned by the signing key to ``recipient``.
        """
        return self.request(
            METHOD_SET_FEE_REFUND_RECIPIENT,
            {"recipient": to_checksum_address(recipient)},
            timeout=timeout,
        )

    def get_mev_refund_total_by_recipient(
        self, recipient: str, timeout: Optional[float] = None
    ) -> Any:
        return self.request(
            METHOD_GET_MEV_REFUND_TOTAL_BY_RECIPIENT,
            {"recipient": to_checksum_address(recipient)},
            timeout=timeout,
        )

    def get_mev_refund_total_by_sender(self, sender: str, timeout: Optional[float] = None) -> Any:
        return self.request(
            METHOD_GET_MEV_REFUND_TOTAL_BY_SENDER,
            {"sender": to_checksum_address(sender)},
            timeout=timeout,
        )

    def request(self, method: str, *params: Any, timeout: Optional[float] = None) -> Any:
        """
        Make a signed relay request and return its raw ``result``.

        Args:
            method (str): The JSON-RPC method.
            *params (Any): The request parameters. Models are converted to
              their JSON-RPC form.
            timeout (Optional[float]): Overrides the default request timeout.

        Returns:
            Any
        """
        request = JsonRpcRequest.create(method, *params)
        return self.transport.send(request, timeout=timeout).result

    def _send_bundle(
        self,
        method: str,
        params: "BundleParams",
        model: type[ModelType],
        timeout: Optional[float],
    ) -> ModelType:
        try:
            result = self.request(method, params, timeout=timeout)
        except RelayError as err:
            # Keep any diagnostics the relay sent alongside the error.
            if isinstance(err.result, dict):
                try:
                    err.result = model.model_validate(err.result)
                except ValidationError:
                    logger.debug(f"Keeping raw '{method}' error result.")

            raise

        try:
            return model.model_validate(result)
        except ValidationError as err:
            raise DecodeError(f"Unexpected '{method}' result: {result!r}") from err

    def _require_web3(self) -> Web3:
        if self.web3 is None:
            raise ProviderNotConnectedError()

        return self.web3


def _merge_config(config: Optional[FlashbotConfig], **overrides) -> FlashbotConfig:
    settings: dict = {}
    if config is not None:
        settings = config.model_dump()
        if overrides.get("network") not in (None, config.network):
            # Let the new network preset fill these.
            settings.pop("relay_url", None)
            settings.pop("chain_id", None)

    settings.update({k: v for k, v in overrides.items() if v is not None})
    return FlashbotConfig.from_overrides(settings)
