"""
Plan and apply copy/symlink provisioning of ignored files into a new worktree.
"""

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from .resolve import ResolvedEntry, ResolvedSet

logger = logging.getLogger(__name__)

COPY = 'copy'
SYMLINK = 'symlink'


@dataclass(frozen=True)
class Action:
    """One provisioning step: copy or symlink a resolved entry."""
    kind: str
    entry: ResolvedEntry

    @property
    def destination(self) -> str:
        """Destination path relative to the new worktree."""
        return self.entry.path


@dataclass
class Manifest:
    """Record of which actions succeeded and which failed."""
    copied: List[ResolvedEntry] = field(default_factory=list)
    linked: List[ResolvedEntry] = field(default_factory=list)
    failed: List[Tuple[Action, str]] = field(default_factory=list)

    def record(self, action: Action) -> None:
        if action.kind == COPY:
            self.copied.append(action.entry)
        else:
            self.linked.append(action.entry)

    @property
    def is_empty(self) -> bool:
        return not (self.copied or self.linked or self.failed)


def find_conflicts(copy_set: ResolvedSet, symlink_set: ResolvedSet) -> List[str]:
    """Return every path selected by both pattern files, in copy order."""
    return [entry.path for entry in copy_set if entry.path in symlink_set]


def plan_actions(copy_set: ResolvedSet, symlink_set: ResolvedSet) -> List[Action]:
    """Build the action list: copies not claimed for symlinking, then symlinks."""
    actions = [
        Action(COPY, entry) for entry in copy_set
        if entry.path not in symlink_set
    ]
    actions.extend(Action(SYMLINK, entry) for entry in symlink_set)
    return actions


def planned_manifest(actions: List[Action]) -> Manifest:
    """Manifest of what apply_actions would do, for dry runs."""
    manifest = Manifest()
    for action in actions:
        manifest.record(action)
    return manifest


def _copy_file(src, dst, on_collision: str = 'overwrite', follow_symlinks: bool = False):
    if on_collision == 'skip' and os.path.lexists(dst):
        logger.info("Keeping existing %s", dst)
        return dst
    return shutil.copy2(src, dst, follow_symlinks=follow_symlinks)


def _copy_directory(src: Path, dst: Path, on_collision: str) -> None:
    dst.parent.mkdir(parents=True, exist_ok=True)
    if not dst.exists():
        shutil.copytree(src, dst, symlinks=True)
        return

    if not dst.is_dir():
        raise NotADirectoryError(f"{dst} exists and is not a directory")

    # Merge into the existing directory instead of nesting src inside it
    shutil.copytree(
        src,
        dst,
        symlinks=True,
        dirs_exist_ok=True,
        copy_function=lambda s, d: _copy_file(s, d, on_collision),
    )


def _apply_copy(entry: ResolvedEntry, base_root: Path, dest_root: Path, on_collision: str) -> None:
    src = base_root / entry.path
    dst = dest_root / entry.path

    if entry.is_directory:
        _copy_directory(src, dst, on_collision)
        return

    # copy2 would nest the file inside an existing directory
    if dst.is_dir():
        raise IsADirectoryError(f"{dst} exists and is a directory")

    dst.parent.mkdir(parents=True, exist_ok=True)
    _copy_file(src, dst, on_collision, follow_symlinks=True)


def _apply_symlink(entry: ResolvedEntry, base_root: Path, dest_root: Path) -> None:
    src = base_root / entry.path
    dst = dest_root / entry.path

    if not os.path.lexists(src):
        raise FileNotFoundError(f"{src} no longer exists")

    dst.parent.mkdir(parents=True, exist_ok=True)
    os.symlink(src, dst, target_is_directory=entry.is_directory)


def apply_actions(
    actions: List[Action],
    base_root: Path,
    dest_root: Path,
    on_collision: str = 'overwrite',
) -> Manifest:
    """Execute actions against the new worktree.

    A failing action is logged and recorded, and the remaining actions still
    run. Symlinks point at the absolute source path in ``base_root``.
    """
    base_root = Path(os.path.abspath(base_root))
    dest_root = Path(os.path.abspath(dest_root))
    manifest = Manifest()

    for action in actions:
        try:
            if action.kind == COPY:
                _apply_copy(action.entry, base_root, dest_root, on_collision)
            else:
                _apply_symlink(action.entry, base_root, dest_root)
        except OSError as e:
            logger.warning("Failed to %s %s: %s", action.kind, action.entry.display, e)
            manifest.failed.append((action, str(e)))
            continue

        logger.debug("%s %s -> %s", action.kind, action.entry.display, dest_root / action.destination)
        manifest.record(action)

    return manifest
