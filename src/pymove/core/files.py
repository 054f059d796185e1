"""Source file reading and atomic writing.

Files are handled as UTF-8 bytes so line terminators round-trip unchanged.
"""

from __future__ import annotations

import os
from pathlib import Path


def read_source(path: Path) -> str:
    return path.read_bytes().decode("utf-8")


def write_text_atomic(path: Path, content: str) -> None:
    """Write ``content`` to a sibling temp file, then rename it over ``path``.

    A crash mid-write leaves either the old or the new file, never a
    partial one. File permissions of an existing target are kept.
    """
    tmp = path.with_name(f".{path.name}.pymove.tmp")
    tmp.write_bytes(content.encode("utf-8"))
    try:
        if path.exists():
            os.chmod(tmp, path.stat().st_mode)
        tmp.replace(path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def join_lines(lines: list[str], newline: str, *, trailing: bool) -> str:
    """Inverse of splitting on ``newline``; ``trailing`` adds a final terminator."""
    text = newline.join(lines)
    if trailing and lines:
        text += newline
    return text
