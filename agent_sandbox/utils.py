"""
Utilities
"""

from pathlib import Path
from typing import Optional


def display_path(path: Path, home: Optional[Path] = None) -> str:
    """
    Render path with ~ when it lives under home.

    Args:
        path: Path to render
        home: Home directory (defaults to the current user's)

    Returns:
        "~/..." form, or the path unchanged when outside home
    """
    home = Path(home) if home else Path.home()
    try:
        relative = Path(path).relative_to(home)
    except ValueError:
        return str(path)
    if str(relative) == ".":
        return "~"
    return f"~/{relative}"
