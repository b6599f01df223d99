from pathlib import Path
from typing import Optional, Union

from pydantic import Field, SecretStr, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from yaml import YAMLError

from flashbot.constants import DEFAULT_NETWORK, NETWORKS
from flashbot.exceptions import ConfigError
from flashbot.utils.misc import load_config

CONFIG_FILE_NAME = "flashbot-config.yaml"


class FlashbotConfig(BaseSettings):
    """
    Client settings. Values come from (highest priority first) keyword
    arguments, ``FLASHBOT_*`` environment variables, then the defaults
    of the selected network preset.

    Usage example::

        # FLASHBOT_NETWORK=sepolia
        config = FlashbotConfig()
        assert config.chain_id == 11155111

    """

    model_config = SettingsConfigDict(env_prefix="FLASHBOT_", extra="ignore")

    network: str = DEFAULT_NETWORK
    """
    The name of a network preset: ``"mainnet"`` or ``"sepolia"``.
    """

    relay_url: Optional[str] = None
    """
    The relay URL. Defaults to the network preset's relay.
    """

    chain_id: Optional[int] = None
    """
    The chain ID. Defaults to the network preset's chain.
    """

    builders: list[str] = []
    """
    Builders to share bundles with when a bundle does not name its own.
    """

    private_key: Optional[SecretStr] = Field(None, repr=False)
    """
    The relay signing key. When not set, an ephemeral key is generated.
    """

    node_uri: Optional[str] = None
    """
    An Ethereum node HTTP URI, used for gas-price queries.
    """

    timeout: Optional[float] = None
    """
    Per-request timeout in seconds.
    """

    @field_validator("network")
    @classmethod
    def validate_network(cls, value):
        if value not in NETWORKS:
            options = ", ".join(NETWORKS)
            raise ValueError(f"Unknown network '{value}'. Options: {options}.")

        return value

    @field_validator("private_key", mode="before")
    @classmethod
    def validate_private_key(cls, value):
        # YAML reads unquoted 0x-values as integers.
        return f"0x{value:064x}" if isinstance(value, int) else value

    @model_validator(mode="after")
    def fill_network_defaults(self):
        relay_url, chain_id = NETWORKS[self.network]
        if self.relay_url is None:
            self.relay_url = relay_url
        if self.chain_id is None:
            self.chain_id = chain_id

        return self

    @classmethod
    def from_overrides(cls, overrides: Optional[dict] = None) -> "FlashbotConfig":
        """
        Create the config, raising :class:`~flashbot.exceptions.ConfigError`
        instead of a validation error.
        """
        overrides = {k: v for k, v in (overrides or {}).items() if v is not None}
        try:
            return cls(**overrides)
        except ValidationError as err:
            raise ConfigError(str(err)) from err

    @classmethod
    def from_file(cls, path: Union[Path, str], **overrides) -> "FlashbotConfig":
        """
        Load settings from a YAML or JSON file (``$ENV`` variables are expanded).
        Keyword overrides win over file values.
        """
        path = Path(path)
        if path.is_dir():
            path = path / CONFIG_FILE_NAME

        try:
            data = load_config(path, must_exist=True)
        except (OSError, TypeError, ValueError, YAMLError) as err:
            raise ConfigError(str(err)) from err

        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping in '{path}'.")

        return cls.from_overrides({**data, **overrides})
