"""
Core sideways functionality - Git repository wrapper, configuration and ignore oracle.
"""

import json
import logging
import os
import tempfile
import tomllib
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set

import git
from git import Repo
from git.exc import GitCommandError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = '.swconfig'

DEFAULT_OPTIONS = {
    'copy_file': '.swcopy',
    'symlink_file': '.swsymlink',
    'on_collision': 'overwrite',
}

COLLISION_POLICIES = ('overwrite', 'skip')


class SidewaysError(Exception):
    """Base exception for sideways operations."""
    pass


class ConflictError(SidewaysError):
    """Raised when the same path is claimed by both pattern files."""

    def __init__(self, paths: List[str], copy_file: str = '', symlink_file: str = ''):
        self.paths = list(paths)
        self.copy_file = copy_file
        self.symlink_file = symlink_file
        super().__init__(
            f"{len(self.paths)} path(s) listed in both {copy_file or 'copy'} "
            f"and {symlink_file or 'symlink'} patterns: {', '.join(self.paths)}"
        )


class IgnoreOracleError(SidewaysError):
    """Raised when git cannot answer whether paths are ignored."""
    pass


class SidewaysRepo:
    """Wrapper around a Git checkout for sideways operations.

    Besides configuration it acts as the ignore oracle: it answers which
    relative paths are excluded from version control, in batches.
    """

    def __init__(self, repo_path: Optional[str] = None):
        """Initialize with a path inside the checkout (defaults to current directory)."""
        start = Path(repo_path) if repo_path else Path.cwd()
        try:
            self.repo = Repo(start, search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
            raise SidewaysError(f"Not a Git repository: {start}")
        if self.repo.working_tree_dir is None:
            raise SidewaysError(f"Repository has no working tree: {start}")
        self.repo_path = Path(self.repo.working_tree_dir)

    @classmethod
    def open_base(cls, path: Optional[str] = None) -> 'SidewaysRepo':
        """Open the base (main) checkout of the repository containing ``path``."""
        repo = cls(path)
        base_dir = repo.get_base_dir()
        if base_dir.resolve() == repo.repo_path.resolve():
            return repo
        logger.debug("Using base checkout %s", base_dir)
        return cls(str(base_dir))

    @property
    def config_file(self) -> Path:
        """Path to .swconfig file."""
        return self.repo_path / CONFIG_FILE_NAME

    def load_config(self) -> Dict[str, Any]:
        """Load .swconfig file."""
        if not self.config_file.exists():
            return {'options': {}}

        try:
            with open(self.config_file, 'rb') as f:
                config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise SidewaysError(f"Invalid configuration in {self.config_file}: {e}")

        config.setdefault('options', {})
        return config

    def save_config(self, config: Dict[str, Any]) -> None:
        """Save configuration to .swconfig file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            f.write('# sideways configuration\n\n')
            f.write('[options]\n')
            for key, value in config.get('options', {}).items():
                if isinstance(value, bool):
                    f.write(f'{key} = {str(value).lower()}\n')
                elif isinstance(value, str):
                    # JSON string escapes are valid TOML basic strings
                    f.write(f'{key} = {json.dumps(value)}\n')
                else:
                    f.write(f'{key} = {value}\n')

    def get_option(self, key: str, default: Any = None) -> Any:
        """Get a configuration option value, falling back to built-in defaults."""
        options = self.load_config().get('options', {})
        if key in options:
            return options[key]
        if default is None:
            return DEFAULT_OPTIONS.get(key)
        return default

    def set_option(self, key: str, value: Any) -> None:
        """Set a configuration option value."""
        if key == 'on_collision' and value not in COLLISION_POLICIES:
            raise SidewaysError(
                f"on_collision must be one of {', '.join(COLLISION_POLICIES)}, got {value!r}"
            )
        config = self.load_config()
        config['options'][key] = value
        self.save_config(config)

    @property
    def copy_patterns_file(self) -> Path:
        """Path to the copy pattern file."""
        return self.repo_path / self.get_option('copy_file')

    @property
    def symlink_patterns_file(self) -> Path:
        """Path to the symlink pattern file."""
        return self.repo_path / self.get_option('symlink_file')

    def get_collision_policy(self) -> str:
        """Get the policy for files that already exist when merging directories."""
        policy = self.get_option('on_collision')
        if policy not in COLLISION_POLICIES:
            raise SidewaysError(
                f"Invalid on_collision option {policy!r} in {self.config_file} "
                f"(expected one of {', '.join(COLLISION_POLICIES)})"
            )
        return policy

    def get_worktrees(self) -> List[dict]:
        """Get all worktrees for this repository, main worktree first."""
        try:
            output = self.repo.git.worktree('list', '--porcelain')
        except GitCommandError as e:
            raise SidewaysError(f"Failed to list worktrees: {e.stderr.strip()}")

        worktrees = []
        current_worktree = {}
        for line in output.split('\n'):
            line = line.strip()
            if line.startswith('worktree '):
                if current_worktree:
                    worktrees.append(current_worktree)
                current_worktree = {'path': line[9:]}
            elif line.startswith('HEAD '):
                current_worktree['head'] = line[5:]
            elif line.startswith('branch '):
                current_worktree['branch'] = line[7:]

        if current_worktree:
            worktrees.append(current_worktree)

        return worktrees

    def get_base_dir(self) -> Path:
        """Get the base checkout (the first worktree is always the main one)."""
        worktrees = self.get_worktrees()
        if not worktrees:
            return self.repo_path
        return Path(worktrees[0]['path'])

    def is_valid_worktree(self, path: str) -> bool:
        """Check if a path is a registered worktree of this repository."""
        worktree_path = Path(path).resolve()
        try:
            return any(
                Path(wt['path']).resolve() == worktree_path
                for wt in self.get_worktrees()
            )
        except SidewaysError:
            return False

    def ignored(self, paths: Iterable[str]) -> Set[str]:
        """Return the subset of ``paths`` (relative to the checkout) that git ignores.

        All paths are answered by a single ``git check-ignore`` call. The
        paths go to git on stdin, NUL separated, so the batch size is not
        limited by the command line. Tracked files are never reported.
        """
        paths = list(paths)
        if not paths:
            return set()

        with tempfile.TemporaryFile() as batch:
            batch.write(b''.join(os.fsencode(p) + b'\0' for p in paths))
            batch.seek(0)
            try:
                output = self.repo.git.check_ignore('--stdin', '-z', istream=batch)
            except GitCommandError as e:
                # check-ignore exits 1 when none of the paths is ignored
                if e.status == 1:
                    return set()
                raise IgnoreOracleError(
                    f"git check-ignore failed with status {e.status}: {_stderr(e)}"
                )
            except OSError as e:
                raise IgnoreOracleError(f"Could not run git check-ignore: {e}")

        return {p for p in output.split('\0') if p}

    def has_ignored_within(self, directory: str) -> bool:
        """Check whether any ignored file exists beneath ``directory``."""
        try:
            output = self.repo.git.ls_files(
                '--others', '--ignored', '--exclude-standard', '-z', '--', directory
            )
        except GitCommandError as e:
            raise IgnoreOracleError(
                f"git ls-files failed for {directory}: {_stderr(e)}"
            )
        return bool(output.strip('\0'))


def _stderr(error: GitCommandError) -> str:
    stderr = error.stderr
    if isinstance(stderr, bytes):
        stderr = stderr.decode('utf-8', errors='replace')
    return (stderr or '').strip()
