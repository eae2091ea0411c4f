"""Application version, read from the VERSION file at the repo root."""

from __future__ import annotations

from pathlib import Path

# backend/version.py -> repo root
VERSION_FILE = Path(__file__).resolve().parent.parent / "VERSION"
UNKNOWN_VERSION = "0.0.0"


def get_version(path: Path = VERSION_FILE) -> str:
    """First line of ``path``; UNKNOWN_VERSION when the file is missing or empty."""
    try:
        lines = path.read_text(encoding="utf-8").strip().splitlines()
    except OSError:
        return UNKNOWN_VERSION
    return lines[0].strip() if lines else UNKNOWN_VERSION
