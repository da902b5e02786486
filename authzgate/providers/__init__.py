"""
Authorization provider interface, registry and reference providers.
"""

from .registry import AuthzProvider, ProviderRegistry, has_check_capability
from .builtin import (
    DEFAULT_PROVIDER,
    ValidUserProvider,
    UserProvider,
    GroupProvider,
    register_builtin_providers,
)

__all__ = [
    "AuthzProvider",
    "ProviderRegistry",
    "has_check_capability",
    "DEFAULT_PROVIDER",
    "ValidUserProvider",
    "UserProvider",
    "GroupProvider",
    "register_builtin_providers",
]
