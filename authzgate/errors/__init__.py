"""
Error handling for the authzgate decision engine.

Only load-time faults are raised as exceptions. Faults that happen while a
request is being evaluated are folded into the ERROR verdict and never reach
the caller as exceptions.
"""

from enum import Enum
from datetime import datetime
from typing import Dict, Any, Optional
from dataclasses import dataclass


class ErrorCode(Enum):
    """Structured error codes for authzgate."""

    # Binding errors
    UNKNOWN_PROVIDER = "unknown_provider"
    UNSUPPORTED_CAPABILITY = "unsupported_capability"
    BINDINGS_FROZEN = "bindings_frozen"

    # Registry errors
    REGISTRY_FROZEN = "registry_frozen"
    DUPLICATE_PROVIDER = "duplicate_provider"

    # Directive / config document errors
    DIRECTIVE_SYNTAX = "directive_syntax"
    INVALID_CONFIGURATION = "invalid_configuration"


class ErrorSource(Enum):
    """Sources where errors can originate."""

    REGISTRY = "registry"
    BINDING = "binding"
    DIRECTIVE = "directive"
    CONFIGURATION = "configuration"


@dataclass
class ErrorContext:
    """Additional context for errors."""

    scope: Optional[str] = None
    provider_name: Optional[str] = None
    timestamp: datetime = None
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()
        if self.metadata is None:
            self.metadata = {}


class AuthzGateError(Exception):
    """
    Base exception class for all authzgate errors.

    Carries an error code, the component that raised it and an ErrorContext
    with the scope and provider involved, when known.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        source: ErrorSource = ErrorSource.CONFIGURATION,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None
    ):
        self.code = code
        self.message = message
        self.source = source
        self.context = context or ErrorContext()
        self.cause = cause

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "error": self.code.value,
            "error_description": self.message,
            "error_source": self.source.value,
            "timestamp": self.context.timestamp.isoformat(),
        }

        if self.context.scope:
            result["scope"] = self.context.scope

        if self.context.provider_name:
            result["provider"] = self.context.provider_name

        if self.context.metadata:
            result["metadata"] = self.context.metadata

        if self.cause:
            result["caused_by"] = str(self.cause)

        return result


class ConfigurationError(AuthzGateError):
    """A fault that prevents a scope from becoming active."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVALID_CONFIGURATION,
                 scope: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", ErrorContext())
        if scope:
            context.scope = scope
        super().__init__(code=code, message=message, context=context, **kwargs)


class UnknownProviderError(ConfigurationError):
    """No provider is registered under the requested name."""

    def __init__(self, provider_name: str, **kwargs):
        context = kwargs.pop("context", ErrorContext())
        context.provider_name = provider_name
        super().__init__(
            f"Unknown Authz provider: {provider_name}",
            code=ErrorCode.UNKNOWN_PROVIDER,
            source=ErrorSource.BINDING,
            context=context,
            **kwargs
        )


class UnsupportedCapabilityError(ConfigurationError):
    """The resolved provider cannot check authorization."""

    def __init__(self, provider_name: str, **kwargs):
        context = kwargs.pop("context", ErrorContext())
        context.provider_name = provider_name
        super().__init__(
            f"The '{provider_name}' Authz provider is not supported by any "
            f"of the loaded authorization modules",
            code=ErrorCode.UNSUPPORTED_CAPABILITY,
            source=ErrorSource.BINDING,
            context=context,
            **kwargs
        )


class DirectiveSyntaxError(ConfigurationError):
    """A Require or method restriction directive could not be parsed."""

    def __init__(self, message: str, directive: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", ErrorContext())
        if directive is not None:
            context.metadata["directive"] = directive
        super().__init__(
            message,
            code=ErrorCode.DIRECTIVE_SYNTAX,
            source=ErrorSource.DIRECTIVE,
            context=context,
            **kwargs
        )


class RegistryFrozenError(ConfigurationError):
    """The provider registry was modified after being published."""

    def __init__(self, provider_name: str, **kwargs):
        context = kwargs.pop("context", ErrorContext())
        context.provider_name = provider_name
        super().__init__(
            f"Cannot register Authz provider '{provider_name}': registry is frozen",
            code=ErrorCode.REGISTRY_FROZEN,
            source=ErrorSource.REGISTRY,
            context=context,
            **kwargs
        )


class DuplicateProviderError(ConfigurationError):
    """A provider name was registered twice."""

    def __init__(self, provider_name: str, **kwargs):
        context = kwargs.pop("context", ErrorContext())
        context.provider_name = provider_name
        super().__init__(
            f"Authz provider '{provider_name}' is already registered",
            code=ErrorCode.DUPLICATE_PROVIDER,
            source=ErrorSource.REGISTRY,
            context=context,
            **kwargs
        )


__all__ = [
    "ErrorCode",
    "ErrorSource",
    "ErrorContext",
    "AuthzGateError",
    "ConfigurationError",
    "UnknownProviderError",
    "UnsupportedCapabilityError",
    "DirectiveSyntaxError",
    "RegistryFrozenError",
    "DuplicateProviderError",
]
