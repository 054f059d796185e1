"""Tests for source reading and atomic writes."""

from __future__ import annotations

import stat
from pathlib import Path

from pymove.core.files import join_lines, read_source, write_text_atomic


class TestReadSource:
    def test_keeps_crlf(self, tmp_path: Path) -> None:
        path = tmp_path / "m.py"
        path.write_bytes(b"a = 1\r\nb = 2\r\n")
        assert read_source(path) == "a = 1\r\nb = 2\r\n"


class TestWriteTextAtomic:
    """Atomic replacement of file contents."""

    def test_writes_new_file(self, tmp_path: Path) -> None:
        path = tmp_path / "m.py"
        write_text_atomic(path, "x = 1\n")
        assert path.read_bytes() == b"x = 1\n"

    def test_replaces_without_leaving_temp_files(self, tmp_path: Path) -> None:
        path = tmp_path / "m.py"
        path.write_text("old\n")
        write_text_atomic(path, "new\r\n")
        assert path.read_bytes() == b"new\r\n"
        assert [p.name for p in tmp_path.iterdir()] == ["m.py"]

    def test_keeps_permissions(self, tmp_path: Path) -> None:
        path = tmp_path / "script.py"
        path.write_text("#!/usr/bin/env python\n")
        path.chmod(0o755)
        write_text_atomic(path, "#!/usr/bin/env python3\n")
        assert stat.S_IMODE(path.stat().st_mode) == 0o755


class TestJoinLines:
    def test_trailing_newline(self) -> None:
        assert join_lines(["a", "b"], "\n", trailing=True) == "a\nb\n"

    def test_without_trailing_newline(self) -> None:
        assert join_lines(["a", "b"], "\r\n", trailing=False) == "a\r\nb"

    def test_empty(self) -> None:
        assert join_lines([], "\n", trailing=True) == ""
