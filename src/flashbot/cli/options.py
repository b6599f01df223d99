from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import Any, NoReturn, Optional, Union

import click

from flashbot.cli.paramtype import NetworkChoice, Noop
from flashbot.config import FlashbotConfig
from flashbot.exceptions import Abort, FlashbotError
from flashbot.logging import DEFAULT_LOG_LEVEL, FlashbotLogger, LogLevel, logger

_VERBOSITY_VALUES = ("--verbosity", "-v")


class FlashbotCliContextObject(dict):
    """
    A ``click`` context object class. Use via :meth:`~flashbot.cli.options.flashbot_cli_context()`.
    It provides common CLI utilities, such as logging.
    """

    def __init__(self):
        self.logger = logger
        super().__init__({})

    def __repr__(self) -> str:
        # Customizing this because otherwise it uses `dict` repr, which is confusing.
        return f"<{self.__class__.__name__}>"

    @staticmethod
    def abort(msg: str, base_error: Optional[Exception] = None) -> NoReturn:
        """
        End execution of the current command invocation.

        Args:
            msg (str): A message to output to the terminal.
            base_error (Exception, optional): Optionally provide
              an error to preserve the exception stack.
        """

        if base_error:
            raise Abort(msg) from base_error

        raise Abort(msg)


def verbosity_option(
    cli_logger: Optional[FlashbotLogger] = None,
    default: Optional[Union[str, int, LogLevel]] = None,
    callback: Optional[Callable] = None,
    **kwargs,
) -> Callable:
    """A decorator that adds a `--verbosity, -v` option to the decorated
    command.

    Args:
        cli_logger (:class:`~flashbot.logging.FlashbotLogger` | None): Optionally pass
          a custom logger object.
        default (str | int | :class:`~flashbot.logging.LogLevel`): The default log-level
          for this command.
        callback (Callable | None): A callback handler for passed-in verbosity values.
        **kwargs: Additional click overrides.

    Returns:
        click option
    """
    _logger = cli_logger or logger
    default = logger.level if default is None else default
    kwarguments = _create_verbosity_kwargs(
        _logger=_logger, default=default, callback=callback, **kwargs
    )
    return lambda f: click.option(*_VERBOSITY_VALUES, **kwarguments)(f)


def _create_verbosity_kwargs(
    _logger: Optional[FlashbotLogger] = None,
    default: Optional[Union[str, int, LogLevel]] = None,
    callback: Optional[Callable] = None,
    **kwargs,
) -> dict:
    default = logger.level if default is None else default
    cli_logger = _logger or logger

    def set_level(ctx, param, value):
        if isinstance(value, str):
            value = value.upper()
            if value.startswith("LOGLEVEL."):
                value = value.split(".")[-1].strip()

        if callback is not None:
            value = callback(ctx, param, value)

        if cli_logger._did_parse_sys_argv:
            # Changing mid-session somehow (tests?)
            cli_logger.set_level(value)
        else:
            cli_logger._load_from_sys_argv(default=value)

    level_names = [lvl.name for lvl in LogLevel]
    names_str = f"{', '.join(level_names[:-1])}, or {level_names[-1]}"
    return {
        "callback": set_level,
        "default": default or DEFAULT_LOG_LEVEL,
        "metavar": "LVL",
        "expose_value": False,
        "help": f"One of {names_str}",
        "is_eager": True,
        "type": Noop(),
        **kwargs,
    }


def flashbot_cli_context(
    default_log_level: Optional[Union[str, int, LogLevel]] = None,
    obj_type: type = FlashbotCliContextObject,
) -> Callable:
    """
    A ``click`` context object with helpful utilities.
    Use in your commands to get access to common utility features,
    such as logging.

    Args:
        default_log_level (str | :class:`~flashbot.logging.LogLevel` | None): The log-level
          value to pass to :meth:`~flashbot.cli.options.verbosity_option`.
        obj_type (Type): The context object type. Defaults to
          :class:`~flashbot.cli.options.FlashbotCliContextObject`.
    """
    default_log_level = default_log_level or DEFAULT_LOG_LEVEL

    def decorator(f):
        f = verbosity_option(logger, default=default_log_level)(f)
        f = click.make_pass_decorator(obj_type, ensure=True)(f)
        return f

    return decorator


def client_options() -> Callable:
    """
    Options for creating a :class:`~flashbot.client.Flashbot` client:
    ``--config``, ``--network``, ``--relay-url``, ``--builder`` and ``--node-uri``.
    The decorated command receives a single ``config`` argument
    (:class:`~flashbot.config.FlashbotConfig`) in their place.
    """

    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            config_path = kwargs.pop("config_path", None)
            overrides: dict[str, Any] = {
                "network": kwargs.pop("network", None),
                "relay_url": kwargs.pop("relay_url", None),
                "builders": list(kwargs.pop("builders", ())) or None,
                "node_uri": kwargs.pop("node_uri", None),
            }
            overrides = {k: v for k, v in overrides.items() if v is not None}
            try:
                if config_path is not None:
                    config = FlashbotConfig.from_file(config_path, **overrides)
                else:
                    config = FlashbotConfig.from_overrides(overrides)
            except FlashbotError as err:
                raise Abort.from_flashbot_error(err) from err

            return f(*args, config=config, **kwargs)

        wrapper = click.option(
            "--config",
            "config_path",
            type=click.Path(exists=True, path_type=Path),
            help="Path to a flashbot-config.yaml file (or its directory).",
        )(wrapper)
        wrapper = click.option("--node-uri", help="An Ethereum node HTTP URI.")(wrapper)
        wrapper = click.option(
            "--builder",
            "builders",
            multiple=True,
            help="A builder to share bundles with. May be given multiple times.",
        )(wrapper)
        wrapper = click.option("--relay-url", help="Override the network's relay URL.")(wrapper)
        wrapper = click.option("--network", type=NetworkChoice(), help="The network preset.")(
            wrapper
        )
        return wrapper

    return decorator
