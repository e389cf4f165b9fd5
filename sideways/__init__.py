"""
sideways - provision gitignored files into new git worktrees.

Copies or symlinks selected ignored files (.env, local notes, databases)
from the base checkout into a freshly created worktree.
"""

__version__ = "0.1.0"
__author__ = "sideways"
