"""Git helpers used to attribute notifications to a person."""

from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)

UNKNOWN_USER = "Unknown User"


def get_git_username(cwd: str | None = None) -> str:
    """Get the configured git user name.

    Best-effort: a missing git binary, a timeout, a non-zero exit or an empty
    value all yield "Unknown User".
    """
    try:
        result = subprocess.run(
            ["git", "config", "--get", "user.name"],
            check=True,
            capture_output=True,
            text=True,
            timeout=5,
            cwd=cwd,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Could not read git user.name: {e}")
        return UNKNOWN_USER
    return result.stdout.strip() or UNKNOWN_USER
