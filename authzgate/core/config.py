"""
Configuration module for the authzgate engine.
"""

from typing import Optional
from dataclasses import dataclass
import logging

from .types import DEFAULT_PROVIDER
from ..util.config import get_bool_config, get_config_value


@dataclass
class EngineConfig:
    """Settings for an AuthorizationEngine."""
    default_provider: str = DEFAULT_PROVIDER
    realm: str = "Restricted"
    metrics_enabled: bool = True
    log_level: str = "INFO"
    scopes_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create configuration from AUTHZGATE_* environment variables"""
        return cls(
            default_provider=get_config_value("default_provider", DEFAULT_PROVIDER),
            realm=get_config_value("realm", "Restricted"),
            metrics_enabled=get_bool_config("metrics_enabled", True),
            log_level=get_config_value("log_level", "INFO").upper(),
            scopes_file=get_config_value("scopes_file"),
        )

    def validate(self) -> bool:
        """Validate the configuration"""
        if not self.default_provider:
            raise ValueError("default_provider is required")
        if not self.realm:
            raise ValueError("realm is required")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")
        return True
