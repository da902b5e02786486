"""
Scope declarations from configuration documents.

A document maps scope paths to their Require directives::

    scopes:
      /:
        require: ["valid-user"]
      /admin:
        require:
          - "user alice bob"
          - directive: "group admins"
            limit: [POST, PUT]
      /admin/public: {}

A directive is either the raw Require arguments or a mapping with
``directive`` and at most one of ``limit`` / ``limit_except``. A scope with
no directives inherits its parent's bindings.
"""

from typing import Any, Dict, List, Mapping
import logging

from ..core.types import ALL_METHODS
from ..errors import ConfigurationError
from ..providers.registry import ProviderRegistry
from ..util.config import load_config_file
from .directives import (
    RequireDirective,
    method_mask_from_limit,
    method_mask_from_limit_except,
    parse_require_directive,
)
from .table import ScopeTable, build_scope_table, normalize_scope_path


logger = logging.getLogger(__name__)


def _parse_entry(entry: Any, scope: str) -> RequireDirective:
    if isinstance(entry, str):
        return parse_require_directive(entry)

    if not isinstance(entry, Mapping):
        raise ConfigurationError(f"Require entry must be a string or a mapping, got {entry!r}",
                                 scope=scope)
    if "limit" in entry and "limit_except" in entry:
        raise ConfigurationError("A Require entry cannot have both limit and limit_except",
                                 scope=scope)

    method_mask = ALL_METHODS
    if "limit" in entry:
        method_mask = method_mask_from_limit(entry["limit"])
    elif "limit_except" in entry:
        method_mask = method_mask_from_limit_except(entry["limit_except"])

    return parse_require_directive(entry.get("directive"), method_mask)


def parse_scope_document(document: Mapping[str, Any]) -> Dict[str, List[RequireDirective]]:
    """
    Turn a loaded configuration document into per-scope Require directives.

    Raises ConfigurationError (or DirectiveSyntaxError) naming the offending
    scope when the document is malformed.
    """
    scopes = document.get("scopes", {}) if isinstance(document, Mapping) else None
    if not isinstance(scopes, Mapping):
        raise ConfigurationError("'scopes' must be a mapping of path to scope settings")

    declarations: Dict[str, List[RequireDirective]] = {}
    for raw_path, settings in scopes.items():
        path = normalize_scope_path(str(raw_path))
        if path in declarations:
            raise ConfigurationError(f"Scope {path} is declared more than once", scope=path)

        if settings is None:
            entries = []
        elif isinstance(settings, list):
            entries = settings
        elif isinstance(settings, Mapping):
            entries = settings.get("require") or []
        else:
            raise ConfigurationError(f"Settings for scope {path} must be a mapping or list",
                                     scope=path)

        if not isinstance(entries, list):
            raise ConfigurationError(f"'require' for scope {path} must be a list", scope=path)

        directives = []
        for entry in entries:
            try:
                directives.append(_parse_entry(entry, path))
            except ConfigurationError as e:
                if not e.context.scope:
                    e.context.scope = path
                raise
        declarations[path] = directives

    return declarations


def load_scope_table(file_path: str, registry: ProviderRegistry) -> ScopeTable:
    """Load a JSON/YAML scope document and build its frozen ScopeTable."""
    document = load_config_file(file_path)
    try:
        table = build_scope_table(parse_scope_document(document), registry)
    except ConfigurationError as e:
        e.context.metadata.setdefault("file", file_path)
        raise
    logger.info(f"Loaded {len(table)} authz scope(s) from {file_path}")
    return table


def scope_table_from_document(document: Mapping[str, Any], registry: ProviderRegistry) -> ScopeTable:
    """Build a ScopeTable from an already loaded document."""
    return build_scope_table(parse_scope_document(document), registry)
