"""
Applicability queries over published scope bindings.

These answer questions about the configuration without running any
provider; upstream components use them to decide whether authorization
needs to happen at all.
"""

from ..core.types import mask_includes
from ..scope.bindings import ScopeBindings


class ApplicabilityQuery:
    """Read-only view of one scope's bindings."""

    def __init__(self, bindings: ScopeBindings):
        self._bindings = bindings

    def raw_bindings(self) -> ScopeBindings:
        """The bindings as published, for introspection."""
        return self._bindings

    def requires_auth(self, method: str) -> bool:
        """True if at least one binding's method mask covers ``method``."""
        return any(mask_includes(b.method_mask, method) for b in self._bindings)
