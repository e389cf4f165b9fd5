"""
Resolve provisioning patterns to concrete, git-ignored paths in the base checkout.
"""

import glob
import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable, Iterable, Iterator, List, Optional, Protocol, Set

from .patterns import Pattern

logger = logging.getLogger(__name__)


class IgnoreOracle(Protocol):
    """Answers whether paths (relative to the base checkout) are ignored."""

    def ignored(self, paths: Iterable[str]) -> Set[str]:
        ...

    def has_ignored_within(self, directory: str) -> bool:
        ...


@dataclass(frozen=True)
class ResolvedEntry:
    """A concrete ignored path relative to the base checkout."""
    path: str
    is_directory: bool = False

    @property
    def display(self) -> str:
        return f"{self.path}/" if self.is_directory else self.path


class ResolvedSet:
    """Ordered collection of entries, deduplicated by normalized path."""

    def __init__(self, entries: Iterable[ResolvedEntry] = ()):
        self.entries: List[ResolvedEntry] = []
        self._seen: Set[str] = set()
        for entry in entries:
            self.add(entry)

    def add(self, entry: ResolvedEntry) -> bool:
        """Add an entry unless its path was already added. Returns True if added."""
        key = normalize_path(entry.path)
        if key in self._seen:
            return False
        self._seen.add(key)
        self.entries.append(entry)
        return True

    def paths(self) -> List[str]:
        return [entry.path for entry in self.entries]

    def __contains__(self, path: str) -> bool:
        return normalize_path(path) in self._seen

    def __iter__(self) -> Iterator[ResolvedEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


GlobFunc = Callable[[str, Path], List[str]]


def normalize_path(path: str) -> str:
    """Canonical form used for dedup and conflicts: POSIX separators, no trailing slash."""
    normalized = path.replace('\\', '/').rstrip('/')
    while normalized.startswith('./'):
        normalized = normalized[2:]
    return normalized


def is_safe_pattern(text: str) -> bool:
    """Reject patterns that could reach outside the base checkout or name all of it."""
    path = PurePosixPath(text.replace('\\', '/'))
    if not path.parts or path.is_absolute() or text.startswith('~'):
        return False
    return '..' not in path.parts


def expand_glob(pattern: str, root: Path) -> List[str]:
    """Expand a glob pattern relative to ``root`` without touching the working directory.

    ``*`` and ``?`` never cross a path separator and also match dot-files.
    ``**`` is not recursive here; it matches a single path segment like ``*``.
    """
    matches = glob.glob(pattern, root_dir=str(root), include_hidden=True)
    return sorted(normalize_path(m) for m in matches)


def _inside_git_dir(path: str) -> bool:
    return '.git' in PurePosixPath(path).parts


def _resolve_directory(pattern: Pattern, base_root: Path, oracle: IgnoreOracle) -> Optional[ResolvedEntry]:
    candidate = normalize_path(pattern.stripped)
    if candidate in ('', '.') or _inside_git_dir(candidate):
        return None
    if not (base_root / candidate).is_dir():
        logger.debug("Directory pattern %r: %s does not exist", pattern.text, candidate)
        return None

    if candidate in oracle.ignored([candidate]) or oracle.has_ignored_within(candidate):
        return ResolvedEntry(candidate, is_directory=True)

    logger.debug("Directory pattern %r: %s holds no ignored files", pattern.text, candidate)
    return None


def _resolve_files(
    pattern: Pattern,
    base_root: Path,
    oracle: IgnoreOracle,
    glob_func: GlobFunc,
) -> List[ResolvedEntry]:
    candidates = [
        path for path in glob_func(pattern.text, base_root)
        if not _inside_git_dir(path) and (base_root / path).is_file()
    ]
    if not candidates:
        logger.debug("Pattern %r matched no files", pattern.text)
        return []

    # One oracle call per pattern, however many files it matched
    ignored = {normalize_path(p) for p in oracle.ignored(candidates)}
    skipped = [path for path in candidates if path not in ignored]
    if skipped:
        logger.debug("Pattern %r: skipping %d file(s) not ignored by git: %s",
                     pattern.text, len(skipped), ', '.join(skipped))
    return [ResolvedEntry(path) for path in candidates if path in ignored]


def resolve_patterns(
    patterns: List[Pattern],
    base_root: Path,
    oracle: IgnoreOracle,
    glob_func: GlobFunc = expand_glob,
) -> ResolvedSet:
    """Resolve patterns, in order, to the ignored entries they select.

    Patterns that match nothing contribute nothing. When several patterns
    select the same path the first one wins. Raises IgnoreOracleError if git
    cannot be queried.
    """
    resolved = ResolvedSet()

    for pattern in patterns:
        if not is_safe_pattern(pattern.text):
            logger.warning("Ignoring pattern not naming a path inside the checkout: %s", pattern.text)
            continue

        if pattern.is_directory:
            entry = _resolve_directory(pattern, base_root, oracle)
            entries = [entry] if entry else []
        else:
            entries = _resolve_files(pattern, base_root, oracle, glob_func)

        for entry in entries:
            if not resolved.add(entry):
                logger.debug("Pattern %r: %s already selected", pattern.text, entry.path)

    return resolved

