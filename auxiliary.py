#!/usr/bin/env python3
"""
Auxiliary utility functions for Ogkos

Pure formatting helpers shared by the tree display and the console UI.
"""

import pathlib
from typing import Optional

SIZE_PREFIXES = ["", "k", "M", "G", "T", "P", "E", "Z", "Y"]


def format_size(size_bytes: int) -> str:
    """Format byte size into a decimal (SI) human-readable string

    Args:
        size_bytes: Size in bytes to format

    Returns:
        Formatted string like "600.00B", "1.50kB" or "2.34GB"
    """
    value = float(size_bytes)
    prefix_index = 0
    while value > 1000.0 and prefix_index < len(SIZE_PREFIXES) - 1:
        value /= 1000.0
        prefix_index += 1
    return f"{value:.2f}{SIZE_PREFIXES[prefix_index]}B"


def format_path_for_display(path: str, home_path: Optional[str] = None) -> str:
    """Format file path for display

    Strips a leading "./" and replaces the home directory with ~

    Args:
        path: File path to format
        home_path: Home directory path (defaults to platform home)

    Returns:
        Display form of the path
    """
    if path.startswith("./"):
        path = path[2:]

    if home_path is None:
        home_path = str(pathlib.Path.home())

    if home_path and home_path != "/" and (path == home_path or path.startswith(home_path + "/")):
        return "~" + path[len(home_path) :]
    return path


def truncate_path(path: str, max_length: int = 50) -> str:
    """Truncate long paths for display

    Args:
        path: Path to truncate
        max_length: Maximum length before truncation

    Returns:
        Truncated path with ... in the middle if too long
    """
    if len(path) <= max_length:
        return path

    # Calculate how much space we have for path parts
    available = max_length - 3  # Account for "..."

    # Split roughly in half
    start_len = available // 2
    end_len = available - start_len

    return f"{path[:start_len]}...{path[-end_len:]}"
