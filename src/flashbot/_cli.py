import json
from typing import Any

import click

from flashbot.cli.options import client_options, flashbot_cli_context, verbosity_option
from flashbot.cli.paramtype import RawTransaction
from flashbot.client import Flashbot
from flashbot.config import FlashbotConfig
from flashbot.exceptions import Abort, FlashbotError
from flashbot.options import with_expiration_block, with_expiration_duration_in_blocks
from flashbot.signing import RequestSigner
from flashbot.types.mev import Bundle
from flashbot.types.rpc import JsonRpcRequest


class FlashbotCLI(click.Group):
    def invoke(self, ctx) -> Any:
        try:
            return super().invoke(ctx)

        except FlashbotError as err:
            raise Abort.from_flashbot_error(err) from err


def _echo_json(data: Any):
    click.echo(json.dumps(data, indent=2))


def _create_bundle(transactions: tuple[bytes, ...], can_revert: tuple[int, ...]) -> Bundle:
    for idx in can_revert:
        if not 0 <= idx < len(transactions):
            raise click.BadParameter(
                f"No transaction at index '{idx}'.", param_hint="'--can-revert'"
            )

    return Bundle(
        transactions=transactions,
        can_revert=tuple(idx in can_revert for idx in range(len(transactions))),
    )


def _bundle_arguments(f):
    f = click.option(
        "--can-revert",
        "can_revert",
        type=int,
        multiple=True,
        help="Index of a transaction that may revert. May be given multiple times.",
    )(f)
    f = click.option(
        "--block",
        "target_block",
        type=click.IntRange(min=0),
        default=0,
        show_default=True,
        help="The target block. 0 means the latest block.",
    )(f)
    f = click.argument("transactions", nargs=-1, required=True, type=RawTransaction())(f)
    return f


@click.group(cls=FlashbotCLI, context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(message="%(version)s", package_name="eth-flashbot")
def cli():
    """
    Simulate and send transaction bundles through a Flashbots relay.
    """


@cli.command()
@flashbot_cli_context()
@client_options()
@_bundle_arguments
def simulate(cli_ctx, config: FlashbotConfig, transactions, target_block, can_revert):
    """
    Simulate a bundle of raw signed transactions
    """
    client = Flashbot(config=config)
    bundle = _create_bundle(transactions, can_revert)
    report = client.simulate(bundle, target_block)
    _echo_json(report.to_rpc())
    if not report.success:
        cli_ctx.logger.warning("Simulation reported failure.")


@cli.command()
@flashbot_cli_context()
@client_options()
@_bundle_arguments
@click.option(
    "--expire-in",
    type=click.IntRange(min=0),
    help="Keep the bundle valid for this many blocks past the target block.",
)
@click.option("--max-block", type=click.IntRange(min=0), help="The last block to include in.")
def broadcast(
    cli_ctx, config: FlashbotConfig, transactions, target_block, can_revert, expire_in, max_block
):
    """
    Simulate and send a bundle of raw signed transactions
    """
    if expire_in is not None and max_block is not None:
        cli_ctx.abort("Use only one of '--expire-in' or '--max-block'.")

    options = []
    if expire_in is not None:
        options.append(with_expiration_duration_in_blocks(expire_in))
    elif max_block is not None:
        options.append(with_expiration_block(max_block))

    client = Flashbot(config=config)
    bundle = _create_bundle(transactions, can_revert)
    response = client.broadcast(bundle, target_block, *options)
    _echo_json(response.to_rpc())


@cli.command(name="estimate-gas")
@verbosity_option()
@click.argument("transactions", nargs=-1, required=True, type=RawTransaction())
def estimate_gas(transactions):
    """
    Sum the gas limits of raw signed transactions
    """
    # Offline; only the declared gas limits are read.
    client = Flashbot(config=FlashbotConfig.from_overrides())
    click.echo(client.estimate_gas_bundle(Bundle(transactions=transactions)))


@cli.command(name="gas-price")
@flashbot_cli_context()
@client_options()
def gas_price(cli_ctx, config: FlashbotConfig):
    """
    Show the node's gas price and priority fee (wei)
    """
    if not config.node_uri:
        cli_ctx.abort("A node is required. Use '--node-uri' or set FLASHBOT_NODE_URI.")

    price, tip = Flashbot(config=config).get_gas_price()
    _echo_json({"gasPrice": price, "maxPriorityFeePerGas": tip})


@cli.command()
@flashbot_cli_context()
@client_options()
@click.argument("method")
@click.argument("params", nargs=-1)
def sign(cli_ctx, config: FlashbotConfig, method, params):
    """
    Print a relay request and its signature header

    PARAMS are JSON values.
    """
    try:
        values = [json.loads(p) for p in params]
    except json.JSONDecodeError as err:
        cli_ctx.abort(f"Invalid JSON parameter: {err}", base_error=err)

    if config.private_key is None:
        cli_ctx.logger.warning("No signing key configured. Using an ephemeral key.")
        signer = RequestSigner.create()
    else:
        signer = RequestSigner.from_key(config.private_key.get_secret_value())

    body = JsonRpcRequest.create(method, *values).to_json()
    _echo_json({"body": body.decode("utf8"), "signature": signer.sign(body)})
