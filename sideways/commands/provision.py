"""
Command for provisioning ignored files from the base checkout into a new worktree.
"""

import logging
import sys
from pathlib import Path

from sideways.core import SidewaysRepo, ConflictError, DEFAULT_OPTIONS
from sideways.utils.patterns import load_patterns
from sideways.utils.resolve import IgnoreOracle, resolve_patterns
from sideways.utils.provision import (
    Manifest,
    apply_actions,
    find_conflicts,
    plan_actions,
    planned_manifest,
)
from sideways.utils.report import format_conflicts, format_failures, format_manifest

logger = logging.getLogger(__name__)


def provision_worktree(
    base_root: Path,
    dest_root: Path,
    oracle: IgnoreOracle,
    copy_file: str = DEFAULT_OPTIONS['copy_file'],
    symlink_file: str = DEFAULT_OPTIONS['symlink_file'],
    on_collision: str = DEFAULT_OPTIONS['on_collision'],
    dry_run: bool = False,
) -> Manifest:
    """Copy or symlink the ignored files selected by the pattern files.

    Raises ConflictError, before touching ``dest_root``, when a path is
    selected by both pattern files.
    """
    base_root = Path(base_root)
    dest_root = Path(dest_root)

    copy_patterns = load_patterns(base_root / copy_file)
    symlink_patterns = load_patterns(base_root / symlink_file)
    if not copy_patterns and not symlink_patterns:
        return Manifest()

    copy_set = resolve_patterns(copy_patterns, base_root, oracle)
    symlink_set = resolve_patterns(symlink_patterns, base_root, oracle)

    conflicts = find_conflicts(copy_set, symlink_set)
    if conflicts:
        raise ConflictError(conflicts, copy_file, symlink_file)

    actions = plan_actions(copy_set, symlink_set)
    logger.debug("Planned %d action(s) for %s", len(actions), dest_root)

    if dry_run:
        return planned_manifest(actions)
    return apply_actions(actions, base_root, dest_root, on_collision)


def provision(
    repo: SidewaysRepo,
    destination: str,
    dry_run: bool = False,
    verbose: bool = False
) -> int:
    """Provision a worktree from the repository's base checkout."""
    dest_root = Path(destination).resolve()
    if not dest_root.is_dir():
        print(f"Error: Worktree directory does not exist: {dest_root}", file=sys.stderr)
        return 1

    if dest_root == repo.repo_path.resolve():
        print("Error: Destination is the base checkout itself", file=sys.stderr)
        return 1

    if not repo.is_valid_worktree(str(dest_root)):
        logger.warning("%s is not a registered worktree of %s", dest_root, repo.repo_path)

    copy_file = repo.get_option('copy_file')
    symlink_file = repo.get_option('symlink_file')

    if verbose:
        print(f"Base:     {repo.repo_path}")
        print(f"Worktree: {dest_root}")

    try:
        manifest = provision_worktree(
            repo.repo_path,
            dest_root,
            repo,
            copy_file=copy_file,
            symlink_file=symlink_file,
            on_collision=repo.get_collision_policy(),
            dry_run=dry_run,
        )
    except ConflictError as e:
        for line in format_conflicts(e.paths, copy_file, symlink_file):
            print(f"sw: {line}", file=sys.stderr)
        print("Nothing was provisioned", file=sys.stderr)
        return 1

    for line in format_manifest(manifest):
        print(line)

    for line in format_failures(manifest):
        print(line, file=sys.stderr)

    if dry_run and (manifest.copied or manifest.linked):
        print("Dry run - no changes made")

    return 0
