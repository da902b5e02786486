"""
Parsing of the Require directive and of method restriction blocks.

``Require <provider> [requirement...]`` takes raw arguments: the first token
names the provider, everything after it is handed to the provider verbatim.
A Require nested inside ``Limit`` or ``LimitExcept`` takes the enclosing
method restriction as its method mask.
"""

from dataclasses import dataclass
from typing import Iterable

from ..core.types import ALL_METHODS, method_from_name
from ..errors import DirectiveSyntaxError


@dataclass(frozen=True)
class RequireDirective:
    """A parsed Require directive, not yet resolved against a registry."""
    provider_name: str
    requirement: str
    method_mask: int = ALL_METHODS


def parse_require_directive(raw_args: str, method_mask: int = ALL_METHODS) -> RequireDirective:
    """
    Split raw Require arguments into provider name and requirement.

    >>> parse_require_directive("group admins staff")
    RequireDirective(provider_name='group', requirement='admins staff', method_mask=-1)
    """
    if raw_args is not None and not isinstance(raw_args, str):
        raise DirectiveSyntaxError(f"Require arguments must be text, got {raw_args!r}",
                                   directive="Require")
    if raw_args is None or not raw_args.strip():
        raise DirectiveSyntaxError("Require takes at least one argument", directive="Require")

    parts = raw_args.strip().split(None, 1)
    provider_name = parts[0]
    requirement = parts[1].strip() if len(parts) > 1 else ""
    return RequireDirective(provider_name, requirement, method_mask)


def _mask_for(methods: Iterable[str], directive: str) -> int:
    if isinstance(methods, str):
        methods = methods.split()
    elif not isinstance(methods, (list, tuple, set, frozenset)):
        raise DirectiveSyntaxError(f"{directive}: expected a list of methods, got {methods!r}",
                                   directive=directive)
    mask = 0
    seen = False
    for name in methods:
        seen = True
        if not isinstance(name, str):
            raise DirectiveSyntaxError(f"{directive}: method names must be text, got {name!r}",
                                       directive=directive)
        method = method_from_name(name)
        if method is None:
            raise DirectiveSyntaxError(f"{directive}: unknown method {name!r}", directive=directive)
        mask |= method
    if not seen:
        raise DirectiveSyntaxError(f"{directive} requires at least one method", directive=directive)
    return int(mask)


def method_mask_from_limit(methods: Iterable[str]) -> int:
    """Mask covering only ``methods`` (``<Limit GET POST>``)."""
    return _mask_for(methods, "Limit")


def method_mask_from_limit_except(methods: Iterable[str]) -> int:
    """Mask covering every method except ``methods`` (``<LimitExcept GET>``)."""
    return ~_mask_for(methods, "LimitExcept")
