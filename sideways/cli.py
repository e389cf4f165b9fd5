"""
CLI interface for sideways.
"""

import sys
import argparse
import logging
from typing import Optional, List

from . import __version__
from .core import SidewaysRepo, SidewaysError
from .commands.check import check_patterns
from .commands.config import manage_config
from .commands.provision import provision

LOG_FORMAT = 'sw: %(levelname)s: %(message)s'


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Send sideways log records to stderr."""
    logger = logging.getLogger('sideways')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return logger


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='sideways',
        description='Provision gitignored files from the base checkout into git worktrees'
    )

    # Add global options
    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be done without actually doing it'
    )

    parser.add_argument(
        '--base',
        help='Any path inside the repository (default: current directory)'
    )

    # Add subcommands
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    provision_parser = subparsers.add_parser(
        'provision', help='Copy/symlink ignored files into a new worktree'
    )
    provision_parser.add_argument('destination', help='Path of the new worktree')

    subparsers.add_parser('check', help='Show what a new worktree would receive')

    config_parser = subparsers.add_parser('config', help='Manage configuration')
    config_group = config_parser.add_mutually_exclusive_group()
    config_group.add_argument('--get', help='Get configuration value')
    config_group.add_argument('--set', nargs=2, metavar=('KEY', 'VALUE'), help='Set configuration value')
    config_group.add_argument('--list', action='store_true', help='List all configuration')

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    if args is None:
        args = sys.argv[1:]

    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    setup_logging(parsed_args.verbose)

    try:
        repo = SidewaysRepo.open_base(parsed_args.base)

        # Dispatch to appropriate command handler
        if parsed_args.command == 'provision':
            return provision(repo, parsed_args.destination, parsed_args.dry_run, parsed_args.verbose)
        elif parsed_args.command == 'check':
            return check_patterns(repo, parsed_args.verbose)
        elif parsed_args.command == 'config':
            return manage_config(
                repo,
                parsed_args.get,
                parsed_args.set,
                parsed_args.list,
                parsed_args.verbose
            )
        else:
            print(f"Command '{parsed_args.command}' not implemented", file=sys.stderr)
            return 1

    except SidewaysError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        if parsed_args.verbose:
            import traceback
            traceback.print_exc()
        else:
            print(f"Unexpected error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
