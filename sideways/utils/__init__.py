"""
Utility modules for sideways.
"""

from .patterns import (
    Pattern,
    parse_patterns,
    load_patterns
)

from .resolve import (
    IgnoreOracle,
    ResolvedEntry,
    ResolvedSet,
    normalize_path,
    expand_glob,
    resolve_patterns
)

from .provision import (
    Action,
    Manifest,
    find_conflicts,
    plan_actions,
    planned_manifest,
    apply_actions
)

from .report import (
    format_manifest,
    format_conflicts,
    format_failures
)

__all__ = [
    # pattern files
    'Pattern',
    'parse_patterns',
    'load_patterns',

    # resolution
    'IgnoreOracle',
    'ResolvedEntry',
    'ResolvedSet',
    'normalize_path',
    'expand_glob',
    'resolve_patterns',

    # provisioning
    'Action',
    'Manifest',
    'find_conflicts',
    'plan_actions',
    'planned_manifest',
    'apply_actions',

    # reporting
    'format_manifest',
    'format_conflicts',
    'format_failures'
]
