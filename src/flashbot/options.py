"""
Options adjust the request parameters of a simulate or broadcast call.
They are applied in the order given; an option overwrites whatever an
earlier option wrote to the same field.

Usage example::

    from flashbot.options import with_expiration_duration_in_blocks, with_privacy
    from flashbot.types import Privacy, PrivacyHint

    client.broadcast(
        bundle,
        target_block,
        with_privacy(Privacy(hints=[PrivacyHint.HASH])),
        with_expiration_duration_in_blocks(5),
    )

"""

from collections.abc import Callable

from flashbot.types.mev import BundleParams, Metadata, Privacy, Validity

BundleOption = Callable[[BundleParams], BundleParams]


def _named(option: BundleOption, name: str) -> BundleOption:
    option.__name__ = name
    option.__qualname__ = name
    return option


def with_validity(validity: Validity) -> BundleOption:
    """
    Set the refund rules of the bundle.
    """
    return _named(lambda params: params.set_validity(validity), f"with_validity({validity!r})")


def with_privacy(privacy: Privacy) -> BundleOption:
    """
    Set the privacy hints and allowed builders of the bundle.
    Fields left unset keep the value already routed, e.g. the bundle's builders.
    """
    return _named(lambda params: params.set_privacy(privacy), f"with_privacy({privacy!r})")


def with_metadata(metadata: Metadata) -> BundleOption:
    return _named(lambda params: params.set_metadata(metadata), f"with_metadata({metadata!r})")


def with_expiration_duration_in_blocks(duration: int) -> BundleOption:
    """
    Keep the bundle valid for ``duration`` blocks past the target block.
    Requires a numeric target block (not ``"latest"``).
    """
    return _named(
        lambda params: params.expire_after_blocks(duration),
        f"with_expiration_duration_in_blocks({duration})",
    )


def with_expiration_block(block: int) -> BundleOption:
    """
    Keep the bundle valid up to and including ``block``.
    """
    return _named(
        lambda params: params.expire_at_block(block), f"with_expiration_block({block})"
    )


__all__ = [
    "BundleOption",
    "with_expiration_block",
    "with_expiration_duration_in_blocks",
    "with_metadata",
    "with_privacy",
    "with_validity",
]
