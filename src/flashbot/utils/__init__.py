from flashbot.utils.misc import (
    __version__,
    expand_environment_variables,
    load_config,
    log_instead_of_fail,
    raises_not_implemented,
)
from flashbot.utils.rpc import USER_AGENT

__all__ = [
    "__version__",
    "expand_environment_variables",
    "load_config",
    "log_instead_of_fail",
    "raises_not_implemented",
    "USER_AGENT",
]
