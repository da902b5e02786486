"""
Utility functions for authzgate: configuration loading and logging setup.
"""

from .config import (
    ENV_PREFIX,
    get_config_value,
    get_bool_config,
    load_config_file,
)
from .logging import configure_logging, RequestIdFilter

__all__ = [
    "ENV_PREFIX",
    "get_config_value",
    "get_bool_config",
    "load_config_file",
    "configure_logging",
    "RequestIdFilter",
]
