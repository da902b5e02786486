"""
Scope binding store.

A scope's bindings are collected by a ScopeBindingsBuilder while its
configuration is loaded, then frozen into an immutable ScopeBindings that
request handling reads without locking. Declaration order is evaluation order.
"""

from typing import Iterator, List, Optional, Sequence, Tuple
import logging

from ..core.types import ALL_METHODS, ProviderBinding
from ..errors import (
    ConfigurationError,
    ErrorCode,
    ErrorSource,
    UnknownProviderError,
    UnsupportedCapabilityError,
)
from ..providers.registry import ProviderRegistry, has_check_capability


logger = logging.getLogger(__name__)


class ScopeBindings(Sequence):
    """
    Immutable, ordered provider bindings of one scope.

    An empty ScopeBindings is meaningful: the scope declared no requirements
    of its own.
    """

    __slots__ = ("_bindings",)

    def __init__(self, bindings: Sequence[ProviderBinding] = ()):
        self._bindings: Tuple[ProviderBinding, ...] = tuple(bindings)

    def __getitem__(self, index):
        return self._bindings[index]

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[ProviderBinding]:
        return iter(self._bindings)

    def __eq__(self, other) -> bool:
        if isinstance(other, ScopeBindings):
            return self._bindings == other._bindings
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._bindings)

    def __repr__(self) -> str:
        names = ", ".join(b.provider_name for b in self._bindings)
        return f"ScopeBindings([{names}])"

    def provider_names(self) -> List[str]:
        return [b.provider_name for b in self._bindings]


EMPTY_BINDINGS = ScopeBindings()


class ScopeBindingsBuilder:
    """
    Append-only collector for the bindings of one scope.

    Providers are resolved against the registry at bind time, so an unknown
    or incapable provider is rejected while configuration loads rather than
    when a request arrives.
    """

    def __init__(self, registry: ProviderRegistry, scope: Optional[str] = None):
        self.registry = registry
        self.scope = scope
        self._bindings: List[ProviderBinding] = []
        self._frozen: Optional[ScopeBindings] = None

    def bind(self, provider_name: str, requirement: str = "",
             method_mask: int = ALL_METHODS) -> ProviderBinding:
        """
        Resolve ``provider_name`` and append a binding for it.

        Raises:
            UnknownProviderError: no provider is registered under that name
            UnsupportedCapabilityError: the provider cannot check authorization
            ConfigurationError: the builder was already frozen
        """
        if self._frozen is not None:
            raise ConfigurationError(
                f"Bindings for scope {self.scope or '<anonymous>'} are already published",
                code=ErrorCode.BINDINGS_FROZEN,
                source=ErrorSource.BINDING,
                scope=self.scope,
            )

        provider = self.registry.resolve(provider_name)
        if provider is None:
            raise UnknownProviderError(provider_name, scope=self.scope)
        if not has_check_capability(provider):
            raise UnsupportedCapabilityError(provider_name, scope=self.scope)

        binding = ProviderBinding(
            provider_name=provider_name,
            requirement=requirement,
            method_mask=method_mask,
            provider=provider,
        )
        self._bindings.append(binding)
        return binding

    def freeze(self) -> ScopeBindings:
        """Publish the collected bindings. Calling it again returns the same value."""
        if self._frozen is None:
            self._frozen = ScopeBindings(self._bindings)
            logger.debug(
                f"Published {len(self._frozen)} authz binding(s) for scope "
                f"{self.scope or '<anonymous>'}"
            )
        return self._frozen

    def __len__(self) -> int:
        return len(self._bindings)


def merge_scope_bindings(parent: ScopeBindings, child: ScopeBindings) -> ScopeBindings:
    """
    Combine a parent scope's bindings with a nested scope's.

    A child that declares anything replaces the parent entirely; an empty
    child inherits the parent as is. There is no per-entry merge.
    """
    return child if len(child) else parent
