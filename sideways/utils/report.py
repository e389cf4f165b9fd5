"""
Human-readable output for provisioning runs.
"""

from typing import List

from .provision import Manifest

COPY_LABEL = '  copy  '
LINK_LABEL = '  link  '


def format_manifest(manifest: Manifest) -> List[str]:
    """One line per copied entry, then one line per linked entry."""
    lines = [f"{COPY_LABEL}{entry.display}" for entry in manifest.copied]
    lines.extend(f"{LINK_LABEL}{entry.display}" for entry in manifest.linked)
    return lines


def format_conflicts(conflicts: List[str], copy_file: str, symlink_file: str) -> List[str]:
    """One error line per path claimed by both pattern files."""
    return [
        f"conflict: {path} is listed in both {copy_file} and {symlink_file}"
        for path in conflicts
    ]


def format_failures(manifest: Manifest) -> List[str]:
    """Summary of actions that could not be completed."""
    if not manifest.failed:
        return []

    report = [f"{len(manifest.failed)} item(s) could not be provisioned:"]
    for action, error in manifest.failed:
        report.append(f"  {action.kind} {action.entry.display}: {error}")
    return report
