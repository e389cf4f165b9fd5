"""
Utilities for loading provisioning pattern files (.swcopy, .swsymlink).
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from ..core import SidewaysError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pattern:
    """A single line from a pattern file."""
    text: str

    @property
    def is_directory(self) -> bool:
        """True if the pattern names a whole directory (trailing separator)."""
        return self.text.endswith('/')

    @property
    def stripped(self) -> str:
        """Pattern text without the trailing separator."""
        return self.text.rstrip('/')


def parse_patterns(content: str) -> List[Pattern]:
    """Parse pattern file content, skipping blank lines and comments."""
    patterns = []
    for line in content.splitlines():
        if not line.lstrip() or line.lstrip().startswith('#'):
            continue
        patterns.append(Pattern(line.rstrip()))
    return patterns


def load_patterns(pattern_path: Path) -> List[Pattern]:
    """Load patterns from a file; a missing file means no patterns."""
    if not pattern_path.is_file():
        logger.debug("No pattern file at %s", pattern_path)
        return []

    try:
        with open(pattern_path, 'r', encoding='utf-8') as f:
            patterns = parse_patterns(f.read())
    except UnicodeDecodeError as e:
        raise SidewaysError(f"Pattern file {pattern_path} is not valid UTF-8: {e}")

    logger.debug("Loaded %d pattern(s) from %s", len(patterns), pattern_path)
    return patterns
