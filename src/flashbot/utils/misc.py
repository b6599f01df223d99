import functools
import json
import os
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as version_metadata
from pathlib import Path
from typing import Any, Optional

import yaml

from flashbot.exceptions import APINotImplementedError
from flashbot.logging import logger

_python_version = (
    f"{sys.version_info.major}.{sys.version_info.minor}"
    f".{sys.version_info.micro} {sys.version_info.releaselevel}"
)


def get_package_version(dist_name: str) -> str:
    """
    Get the installed version of a distribution.

    Args:
        dist_name (str): The distribution name, e.g. ``"eth-flashbot"``.

    Returns:
        str: version string, or ``""`` when not installed.
    """
    try:
        return str(version_metadata(dist_name))
    except PackageNotFoundError:
        # NOTE: Must handle empty string result here
        return ""


__version__ = get_package_version("eth-flashbot")


def expand_environment_variables(contents: str) -> str:
    """
    Replace substrings of the form ``$name`` or ``${name}`` in the given
    text with the value of environment variable name.
    """
    return os.path.expandvars(contents)


def load_config(path: Path, expand_envars=True, must_exist=False) -> dict:
    """
    Load a configuration file into memory.
    The configuration file must be a `.json` or `.yaml` or else it will throw ``TypeError``.

    Args:
        path (Path): path to the file.
        expand_envars (bool): ``True`` to expand ``$VARS`` in the contents.
        must_exist (bool): ``True`` to raise ``OSError`` when the file is missing.

    Returns:
        dict: Configured settings parsed from a config file.
    """
    if path.is_file():
        contents = path.read_text()
        if expand_envars:
            contents = expand_environment_variables(contents)

        if path.suffix in (".json",):
            config = json.loads(contents)
        elif path.suffix in (".yml", ".yaml"):
            config = yaml.safe_load(contents)
        else:
            raise TypeError(f"Cannot parse '{path.suffix}' files!")

        return config or {}

    elif must_exist:
        raise OSError(f"{path} does not exist!")

    else:
        return {}


def raises_not_implemented(fn):
    """
    Decorator for raising helpful not implemented error.
    """

    @functools.wraps(fn)
    def inner(*args, **kwargs):
        raise _create_raises_not_implemented_error(fn)

    return inner


def _create_raises_not_implemented_error(fn):
    return APINotImplementedError(
        f"Attempted to call method '{fn.__qualname__}', method not supported."
    )


def log_instead_of_fail(default: Optional[Any] = None):
    """
    A decorator for logging errors instead of raising.
    This is useful for methods like __repr__ which shouldn't fail.
    """

    def wrapper(fn):
        @functools.wraps(fn)
        def wrapped(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except Exception as err:
                logger.error(str(err))
                return default

        return wrapped

    return wrapper
