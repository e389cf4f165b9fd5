"""
Command for checking what the pattern files select, without provisioning anything.
"""

import sys

from sideways.core import SidewaysRepo
from sideways.utils.patterns import load_patterns
from sideways.utils.resolve import resolve_patterns
from sideways.utils.provision import find_conflicts, plan_actions, planned_manifest
from sideways.utils.report import format_conflicts, format_manifest


def check_patterns(repo: SidewaysRepo, verbose: bool = False) -> int:
    """Resolve both pattern files and report selections and conflicts."""
    copy_path = repo.copy_patterns_file
    symlink_path = repo.symlink_patterns_file

    copy_patterns = load_patterns(copy_path)
    symlink_patterns = load_patterns(symlink_path)

    if verbose:
        print(f"Base: {repo.repo_path}")
        print(f"  {copy_path.name}: {len(copy_patterns)} pattern(s)"
              f"{'' if copy_path.exists() else ' (missing)'}")
        print(f"  {symlink_path.name}: {len(symlink_patterns)} pattern(s)"
              f"{'' if symlink_path.exists() else ' (missing)'}")

    if not copy_patterns and not symlink_patterns:
        print(f"No patterns configured ({copy_path.name}, {symlink_path.name})")
        return 0

    copy_set = resolve_patterns(copy_patterns, repo.repo_path, repo)
    symlink_set = resolve_patterns(symlink_patterns, repo.repo_path, repo)

    conflicts = find_conflicts(copy_set, symlink_set)
    if conflicts:
        for line in format_conflicts(conflicts, copy_path.name, symlink_path.name):
            print(f"sw: {line}", file=sys.stderr)
        return 1

    lines = format_manifest(planned_manifest(plan_actions(copy_set, symlink_set)))
    if not lines:
        print("Patterns match no ignored files")
        return 0

    for line in lines:
        print(line)
    return 0
