"""
Core types and data structures for the authzgate decision engine.

Defines the tri-state provider verdict, the externally visible outcome,
HTTP method masks, provider bindings and the per-request context.
"""

from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import Any, Dict, List, Optional
import uuid


class Verdict(Enum):
    """Result of a single provider check."""
    GRANTED = "granted"
    DENIED = "denied"
    ERROR = "error"


class Outcome(Enum):
    """Result of a whole evaluation, as seen by the hosting pipeline."""
    CONTINUE = "continue"
    CHALLENGE_AND_DENY = "challenge_and_deny"
    SERVER_ERROR = "server_error"

    @property
    def http_status(self) -> int:
        """HTTP status code the hosting pipeline should answer with."""
        return _OUTCOME_STATUS[self]


_OUTCOME_STATUS = {
    Outcome.CONTINUE: 200,
    Outcome.CHALLENGE_AND_DENY: 401,
    Outcome.SERVER_ERROR: 500,
}


class Method(IntFlag):
    """HTTP methods a binding can be restricted to."""
    GET = 1 << 0
    PUT = 1 << 1
    POST = 1 << 2
    DELETE = 1 << 3
    CONNECT = 1 << 4
    OPTIONS = 1 << 5
    TRACE = 1 << 6
    PATCH = 1 << 7
    PROPFIND = 1 << 8
    PROPPATCH = 1 << 9
    MKCOL = 1 << 10
    COPY = 1 << 11
    MOVE = 1 << 12
    LOCK = 1 << 13
    UNLOCK = 1 << 14


# Masks are plain ints. A negative mask is open-ended: it also covers
# extension methods Method does not name (ALL_METHODS, or a LimitExcept mask).
ALL_METHODS = -1


def method_from_name(name: str) -> Optional[Method]:
    """
    Map an HTTP method name to its Method flag.

    HEAD is authorized as GET. Returns None for methods outside the known set.
    """
    name = name.strip().upper()
    if name == "HEAD":
        name = "GET"
    try:
        return Method[name]
    except KeyError:
        return None


def mask_includes(mask: int, method: str) -> bool:
    """Check whether a method mask covers the named method."""
    if mask == ALL_METHODS:
        return True
    flag = method_from_name(method)
    if flag is None:
        return mask < 0
    return bool(mask & flag)


def mask_to_names(mask: int) -> List[str]:
    """List the method names covered by a mask, for display and logging."""
    if mask == ALL_METHODS:
        return ["*"]
    names = [m.name for m in Method if mask & m]
    if mask < 0:
        names.append("*")
    return names


@dataclass(frozen=True)
class ProviderBinding:
    """
    One configured (provider, requirement, method mask) triple within a scope.

    Instances are created by ScopeBindingsBuilder.bind, which guarantees the
    provider reference was resolved and exposes check_authorization.
    """
    provider_name: str
    requirement: str
    method_mask: int
    provider: Any = field(repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "provider_name": self.provider_name,
            "requirement": self.requirement,
            "methods": mask_to_names(self.method_mask),
        }


@dataclass
class RequestContext:
    """
    Per-request authorization input.

    ``user`` is the identity established by authentication, or None when the
    request is anonymous. ``active_provider`` is a diagnostic slot naming the
    provider currently being consulted; nothing in the decision logic reads it.
    """
    method: str
    uri: str
    user: Optional[str] = None
    request_id: str = field(default_factory=lambda: f"req_{uuid.uuid4().hex[:16]}")
    attributes: Dict[str, Any] = field(default_factory=dict)
    response_headers: Dict[str, str] = field(default_factory=dict)
    active_provider: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "request_id": self.request_id,
            "method": self.method,
            "uri": self.uri,
            "user": self.user,
            "attributes": self.attributes,
        }


# Provider consulted when a scope declares no bindings at all.
DEFAULT_PROVIDER = "valid-user"
