"""
Scope table: merged, frozen bindings for every configured resource path.

Scopes nest by path prefix (``/admin/reports`` inside ``/admin`` inside ``/``).
Each scope's own bindings are merged with its nearest configured ancestor's
merged bindings, so the table holds the effective bindings for every path.
"""

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Tuple
import logging
import posixpath

from ..providers.registry import ProviderRegistry
from .bindings import EMPTY_BINDINGS, ScopeBindings, ScopeBindingsBuilder, merge_scope_bindings
from .directives import RequireDirective


logger = logging.getLogger(__name__)


def normalize_scope_path(path: str) -> str:
    """Canonical form of a scope path: absolute, no trailing slash except root."""
    if not path:
        return "/"
    path = posixpath.normpath("/" + path.lstrip("/"))
    return path


def request_scope_path(uri: str) -> str:
    """
    Literal scope path of a request URI.

    The query is dropped and empty segments are collapsed. Dot segments are
    kept, so the scope is chosen from the path the application routes on.
    """
    segments = [s for s in uri.split("?", 1)[0].split("/") if s]
    return "/" + "/".join(segments)


def has_dot_segments(uri: str) -> bool:
    """True if the path of ``uri`` contains a ``.`` or ``..`` segment."""
    return any(s in (".", "..") for s in uri.split("?", 1)[0].split("/"))


def _parent_paths(path: str) -> Iterable[str]:
    """Yield the ancestors of ``path``, nearest first, ending with ``/``."""
    while path != "/":
        path = posixpath.dirname(path)
        yield path


class ScopeTable:
    """
    Read-only mapping of scope path to effective ScopeBindings.

    Built once per configuration generation by build_scope_table and never
    mutated afterwards.
    """

    def __init__(self, scopes: Mapping[str, ScopeBindings]):
        self._scopes = MappingProxyType(dict(scopes))

    def resolve(self, uri: str) -> Tuple[str, ScopeBindings]:
        """
        Find the most specific scope covering ``uri``.

        Returns the scope path and its bindings; a URI outside every scope
        gets ``("/", EMPTY_BINDINGS)``.
        """
        path = request_scope_path(uri)
        if path in self._scopes:
            return path, self._scopes[path]
        for parent in _parent_paths(path):
            if parent in self._scopes:
                return parent, self._scopes[parent]
        return "/", EMPTY_BINDINGS

    def bindings_for(self, uri: str) -> ScopeBindings:
        return self.resolve(uri)[1]

    def paths(self) -> List[str]:
        return sorted(self._scopes)

    def __contains__(self, path: str) -> bool:
        return normalize_scope_path(path) in self._scopes

    def __len__(self) -> int:
        return len(self._scopes)


def build_scope_table(declarations: Mapping[str, Iterable[RequireDirective]],
                      registry: ProviderRegistry) -> ScopeTable:
    """
    Resolve, freeze and merge the Require directives declared per scope path.

    Parents are processed before children so every scope merges against its
    ancestor's already merged bindings. Any UnknownProviderError or
    UnsupportedCapabilityError aborts the whole table.
    """
    own: Dict[str, ScopeBindings] = {}
    for raw_path, directives in declarations.items():
        path = normalize_scope_path(raw_path)
        builder = ScopeBindingsBuilder(registry, scope=path)
        for directive in directives or ():
            builder.bind(directive.provider_name, directive.requirement, directive.method_mask)
        own[path] = builder.freeze()

    merged: Dict[str, ScopeBindings] = {}
    for path in sorted(own, key=lambda p: (p.count("/") if p != "/" else 0, p)):
        parent = _nearest(merged, path)
        merged[path] = merge_scope_bindings(parent, own[path])
        logger.debug(f"Scope {path}: providers {merged[path].provider_names()}")

    return ScopeTable(merged)


def _nearest(merged: Mapping[str, ScopeBindings], path: str) -> ScopeBindings:
    for parent in _parent_paths(path):
        if parent in merged:
            return merged[parent]
    return EMPTY_BINDINGS
