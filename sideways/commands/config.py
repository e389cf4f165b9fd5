"""
Command for managing configuration in sideways.
"""

import sys
from typing import Dict, List, Optional

from sideways.core import SidewaysRepo, DEFAULT_OPTIONS


def manage_config(
    repo: SidewaysRepo,
    get_key: Optional[str] = None,
    set_value: Optional[List[str]] = None,
    list_config: bool = False,
    verbose: bool = False
) -> int:
    """Manage configuration options."""
    if verbose:
        print(f"Configuration file: {repo.config_file}")

    if get_key:
        value = repo.get_option(get_key)
        if value is None:
            print(f"Configuration key '{get_key}' not found")
            return 1
        print(f"{get_key} = {value}")
        return 0

    elif set_value:
        key, value = set_value
        if key not in DEFAULT_OPTIONS:
            print(f"Error: Unknown configuration key '{key}'", file=sys.stderr)
            return 1

        repo.set_option(key, value)
        print(f"Set {key} = {value}")
        return 0

    elif list_config:
        options = repo.load_config().get('options', {})
        print("sideways configuration:")
        print("-" * 40)
        for key, desc in _get_config_descriptions().items():
            current_value = options.get(key, DEFAULT_OPTIONS[key])
            source = '' if key in options else ' (default)'
            print(f"  {key} = {current_value}{source}")
            if verbose:
                print(f"      {desc}")

        unknown = sorted(set(options) - set(DEFAULT_OPTIONS))
        for key in unknown:
            print(f"  {key} = {options[key]} (unknown, ignored)")
        return 0

    else:
        options = repo.load_config().get('options', {})
        print("sideways configuration summary:")
        print("-" * 40)
        print(f"  Copy patterns:    {repo.copy_patterns_file}"
              f"{'' if repo.copy_patterns_file.exists() else ' (missing)'}")
        print(f"  Symlink patterns: {repo.symlink_patterns_file}"
              f"{'' if repo.symlink_patterns_file.exists() else ' (missing)'}")
        print(f"  On collision:     {repo.get_option('on_collision')}")
        print(f"  Options set:      {len(options)}")
        return 0


def _get_config_descriptions() -> Dict[str, str]:
    """Get descriptions for available configuration keys."""
    return {
        'copy_file': 'File in the base checkout listing patterns to copy (default: ".swcopy")',
        'symlink_file': 'File in the base checkout listing patterns to symlink (default: ".swsymlink")',
        'on_collision': 'What to do with existing files when merging directories: overwrite or skip',
    }
