from collections.abc import Iterable, Sequence
from typing import Optional

from eth_utils import to_hex

from flashbot.constants import DEFAULT_EXPIRATION_BLOCKS
from flashbot.exceptions import (
    BundleError,
    EmptyBundleError,
    EncodingError,
    OptionApplicationError,
)
from flashbot.logging import logger
from flashbot.options import BundleOption
from flashbot.transactions import serialize_transaction
from flashbot.types.mev import (
    BodyItem,
    Bundle,
    BundleParams,
    BundleTxItem,
    Privacy,
)


def build_body(bundle: Bundle) -> list[BodyItem]:
    """
    Convert the bundle's transactions into ``{tx, canRevert}`` body items.

    Raises:
        :class:`~flashbot.exceptions.EmptyBundleError`: When the bundle has
          no transactions.
        :class:`~flashbot.exceptions.EncodingError`: When a transaction
          cannot be serialized.
    """
    if bundle.is_empty:
        raise EmptyBundleError()

    body: list[BodyItem] = []
    for idx, txn in enumerate(bundle.transactions):
        try:
            raw = serialize_transaction(txn)
        except Exception as err:
            raise EncodingError(str(err), index=idx) from err

        body.append(BundleTxItem(tx=to_hex(raw), can_revert=bundle.can_revert_at(idx)))

    return body


def build_sim_params(
    bundle: Bundle,
    target_block: int,
    options: Sequence[BundleOption] = (),
    builders: Optional[Iterable[str]] = None,
) -> BundleParams:
    """
    Build the ``mev_simBundle`` parameters. There is no default ``maxBlock``.

    Args:
        bundle (:class:`~flashbot.types.mev.Bundle`): The bundle to simulate.
        target_block (int): The block to target. ``0`` means ``"latest"``.
        options (Sequence[BundleOption]): Options applied in order.
        builders (Optional[Iterable[str]]): Builders to share with when the
          bundle does not name its own.

    Returns:
        :class:`~flashbot.types.mev.BundleParams`
    """
    params = _build_params(bundle, target_block, builders=builders)
    return apply_options(params, options)


def build_send_params(
    bundle: Bundle,
    target_block: int,
    options: Sequence[BundleOption] = (),
    builders: Optional[Iterable[str]] = None,
) -> BundleParams:
    """
    Build the ``mev_sendBundle`` parameters. ``maxBlock`` defaults to
    ``target_block + 30`` and may be changed by the options.
    """
    params = _build_params(bundle, target_block, builders=builders)
    params.inclusion.max_block = to_hex(target_block + DEFAULT_EXPIRATION_BLOCKS)
    return apply_options(params, options)


def apply_options(params: BundleParams, options: Sequence[BundleOption]) -> BundleParams:
    """
    Apply each option in order. The first failing option aborts the build.

    Raises:
        :class:`~flashbot.exceptions.OptionApplicationError`
    """
    for option in options:
        try:
            option(params)
        except Exception as err:
            name = getattr(option, "__name__", repr(option))
            raise OptionApplicationError(f"{name}: {err}", option=option) from err

    return params


def _build_params(
    bundle: Bundle, target_block: int, builders: Optional[Iterable[str]] = None
) -> BundleParams:
    body = build_body(bundle)
    try:
        params = BundleParams.build_for_block(target_block, body=body)
    except ValueError as err:
        raise BundleError(str(err)) from err

    if route_to := list(bundle.builders or builders or []):
        logger.debug(f"Sharing bundle with builders: {', '.join(route_to)}")
        params.set_privacy(Privacy(builders=route_to))

    return params
