#!/usr/bin/env python3
"""
Auxiliary utility functions for Kenosis

Formatting helpers shared by the reporter and the CLI.
"""

import pathlib
from typing import Optional


def format_bytes(size_bytes: int) -> str:
    """Format byte size into human-readable string

    Args:
        size_bytes: Size in bytes to format

    Returns:
        Formatted string like "1.2 GiB", "345 MiB", "12 KiB", or "789 B"
    """
    if size_bytes >= 1024**4:
        return f"{size_bytes / (1024**4):.1f} TiB"
    if size_bytes >= 1024**3:
        return f"{size_bytes / (1024**3):.1f} GiB"
    if size_bytes >= 1024**2:
        return f"{size_bytes / (1024**2):.1f} MiB"
    if size_bytes >= 1024:
        return f"{size_bytes / 1024:.1f} KiB"
    return f"{size_bytes} B"


def format_path_for_display(path: str, home_path: Optional[str] = None) -> str:
    """Format file path for display by replacing home directory with ~

    Args:
        path: File path to format
        home_path: Home directory path (defaults to platform home)

    Returns:
        Path with a leading home directory replaced by ~
    """
    if home_path is None:
        home_path = str(pathlib.Path.home())

    if path == home_path or path.startswith(home_path.rstrip("/") + "/"):
        return "~" + path[len(home_path.rstrip("/")) :]
    return path


def truncate_path(path: str, max_length: int = 60) -> str:
    """Truncate long paths for display

    Args:
        path: Path to truncate
        max_length: Maximum length before truncation

    Returns:
        Truncated path with ... in the middle if too long
    """
    if len(path) <= max_length:
        return path

    available = max_length - 3  # Account for "..."
    start_len = available // 2
    end_len = available - start_len

    return f"{path[:start_len]}...{path[-end_len:]}"


def usage_bar(percent_used: float, width: int = 30) -> tuple[str, str]:
    """Split a usage bar into its (used, free) segments"""
    used = int(max(0.0, min(percent_used, 100.0)) / 100.0 * width)
    return "█" * used, "░" * (width - used)
