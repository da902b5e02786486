"""
Scope binding store, directive parsing and the per-path scope table.
"""

from .bindings import (
    EMPTY_BINDINGS,
    ScopeBindings,
    ScopeBindingsBuilder,
    merge_scope_bindings,
)

from .directives import (
    RequireDirective,
    parse_require_directive,
    method_mask_from_limit,
    method_mask_from_limit_except,
)

from .table import (
    ScopeTable,
    build_scope_table,
    normalize_scope_path,
    request_scope_path,
    has_dot_segments,
)

from .loader import (
    parse_scope_document,
    load_scope_table,
    scope_table_from_document,
)

__all__ = [
    # Bindings
    'EMPTY_BINDINGS',
    'ScopeBindings',
    'ScopeBindingsBuilder',
    'merge_scope_bindings',

    # Directives
    'RequireDirective',
    'parse_require_directive',
    'method_mask_from_limit',
    'method_mask_from_limit_except',

    # Scope table
    'ScopeTable',
    'build_scope_table',
    'normalize_scope_path',
    'request_scope_path',
    'has_dot_segments',

    # Loading
    'parse_scope_document',
    'load_scope_table',
    'scope_table_from_document',
]
