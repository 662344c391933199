"""RSML file discovery."""

from __future__ import annotations

import re
from pathlib import Path

# ".rsml" and numbered variants such as ".rsml01"
RSML_PATH_RE = re.compile(r".*\.(rsml|rsml\d{2})$", re.IGNORECASE)


def is_rsml_path(path: Path | str) -> bool:
    """Whether ``path`` names an RSML file (``.rsml`` or ``.rsmlNN``)."""
    return RSML_PATH_RE.match(Path(path).name) is not None


def find_rsml_files(directory: Path | str, recursive: bool = False) -> list[Path]:
    """
    List the RSML files of a directory.

    Args:
        directory: Directory to scan
        recursive: Also scan subdirectories

    Returns:
        Matching files, sorted by path

    Raises:
        NotADirectoryError: If ``directory`` is not a directory
    """
    root = Path(directory)
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")
    candidates = root.rglob("*") if recursive else root.iterdir()
    return sorted(p for p in candidates if p.is_file() and is_rsml_path(p))
