"""
Reference authorization providers.

These cover the common cases (any authenticated user, named users, group
membership) and make the default provider available out of the box. Groups
are read from ``context.attributes["groups"]``, as asserted by whatever
authenticated the request.
"""

import logging

from ..core.types import DEFAULT_PROVIDER, RequestContext, Verdict, mask_includes
from .registry import AuthzProvider, ProviderRegistry


logger = logging.getLogger(__name__)


class ValidUserProvider(AuthzProvider):
    """Grant any request that carries an identity."""

    async def check_authorization(self, context: RequestContext, method_mask: int,
                                  requirement: str) -> Verdict:
        if not mask_includes(method_mask, context.method):
            return Verdict.DENIED
        return Verdict.GRANTED if context.user else Verdict.DENIED


class UserProvider(AuthzProvider):
    """Grant when the identity is one of the whitespace-separated names."""

    async def check_authorization(self, context: RequestContext, method_mask: int,
                                  requirement: str) -> Verdict:
        if not mask_includes(method_mask, context.method):
            return Verdict.DENIED
        if not context.user:
            return Verdict.DENIED
        return Verdict.GRANTED if context.user in requirement.split() else Verdict.DENIED


class GroupProvider(AuthzProvider):
    """Grant when the identity belongs to any of the named groups."""

    async def check_authorization(self, context: RequestContext, method_mask: int,
                                  requirement: str) -> Verdict:
        if not mask_includes(method_mask, context.method):
            return Verdict.DENIED
        if not context.user:
            return Verdict.DENIED

        groups = context.attributes.get("groups")
        if groups is None:
            return Verdict.DENIED
        if not isinstance(groups, (list, tuple, set, frozenset)):
            # Malformed assertion from the authentication layer
            logger.error(
                f"user {context.user}: groups attribute is not a list of names "
                f"for \"{context.uri}\""
            )
            return Verdict.ERROR

        wanted = set(requirement.split())
        return Verdict.GRANTED if wanted.intersection(groups) else Verdict.DENIED


def register_builtin_providers(registry: ProviderRegistry) -> ProviderRegistry:
    """Register valid-user, user and group on ``registry``."""
    registry.register(DEFAULT_PROVIDER, ValidUserProvider())
    registry.register("user", UserProvider())
    registry.register("group", GroupProvider())
    return registry
