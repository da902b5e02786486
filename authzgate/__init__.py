"""
authzgate Python Package

Ordered, provider-based authorization decisions for protected resource scopes.
"""

__version__ = "0.1.0"

from .core.engine import AuthorizationEngine
from .core.config import EngineConfig
from .core.types import (
    ALL_METHODS,
    DEFAULT_PROVIDER,
    Method,
    Outcome,
    ProviderBinding,
    RequestContext,
    Verdict,
)
from .providers import AuthzProvider, ProviderRegistry, register_builtin_providers
from .scope import ScopeBindings, ScopeBindingsBuilder, ScopeTable, merge_scope_bindings

__all__ = [
    "AuthorizationEngine",
    "EngineConfig",
    "ALL_METHODS",
    "DEFAULT_PROVIDER",
    "Method",
    "Outcome",
    "ProviderBinding",
    "RequestContext",
    "Verdict",
    "AuthzProvider",
    "ProviderRegistry",
    "register_builtin_providers",
    "ScopeBindings",
    "ScopeBindingsBuilder",
    "ScopeTable",
    "merge_scope_bindings",
]
