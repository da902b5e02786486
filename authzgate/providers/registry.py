"""
Authorization provider registry.

A ProviderRegistry maps provider names to objects exposing the
check_authorization capability. It is built once while configuration is
loaded, frozen, and then shared read-only by every request.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import logging

from ..core.types import RequestContext, Verdict
from ..errors import DuplicateProviderError, RegistryFrozenError


logger = logging.getLogger(__name__)


class AuthzProvider(ABC):
    """
    Base class for authorization providers.
    """

    @abstractmethod
    async def check_authorization(self, context: RequestContext, method_mask: int,
                                  requirement: str) -> Verdict:
        """
        Decide whether the request satisfies ``requirement``.

        Args:
            context: The request being authorized
            method_mask: Methods the configuring binding applies to; the
                provider decides what to do when context.method is outside it
            requirement: Free-form requirement text from the binding

        Returns:
            Verdict: GRANTED, DENIED, or ERROR when the check itself failed
        """
        pass


def has_check_capability(provider: Any) -> bool:
    """Check whether an object can act as an authorization provider."""
    return callable(getattr(provider, "check_authorization", None))


class ProviderRegistry:
    """
    Name to provider lookup table.

    Registration is only allowed until freeze() is called; after that the
    registry is safe to read from any number of concurrent requests.
    """

    def __init__(self):
        self._providers: Dict[str, Any] = {}
        self._frozen = False

    def register(self, name: str, provider: Any) -> None:
        """Register a provider under ``name``."""
        if self._frozen:
            raise RegistryFrozenError(name)
        if name in self._providers:
            raise DuplicateProviderError(name)
        self._providers[name] = provider
        logger.debug(f"Registered authz provider '{name}'")

    def resolve(self, name: str) -> Optional[Any]:
        """Look up a provider by name; None when not registered."""
        return self._providers.get(name)

    def names(self) -> List[str]:
        """List registered provider names in registration order."""
        return list(self._providers)

    def freeze(self) -> "ProviderRegistry":
        """Stop accepting registrations."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, name: str) -> bool:
        return name in self._providers

    def __len__(self) -> int:
        return len(self._providers)
