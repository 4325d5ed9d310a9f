"""
test_output.py - 원자적 쓰기 + 출력 락 테스트

검증:
- 완성된 파일만 남음 (temp 파일 없음)
- 실패 시 기존 파일 보존
- 락 timeout → OUTPUT_LOCK_TIMEOUT
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from filelock import FileLock

from src.core.output import (
    atomic_write_json,
    atomic_write_text,
    output_lock,
)
from src.domain.errors import ErrorCodes, ScaffoldError


class TestAtomicWriteText:
    """atomic_write_text 테스트."""

    def test_writes_file(self, tmp_path: Path):
        """파일 생성 + 내용 일치."""
        path = tmp_path / "plugin.php"

        atomic_write_text(path, "<?php\n")

        assert path.read_text(encoding="utf-8") == "<?php\n"

    def test_creates_parent_dirs(self, tmp_path: Path):
        """상위 디렉터리 자동 생성."""
        path = tmp_path / "a" / "b" / "plugin.php"

        atomic_write_text(path, "x")

        assert path.exists()

    def test_no_newline_translation(self, tmp_path: Path):
        """줄바꿈 변환 없음 (바이트 그대로)."""
        path = tmp_path / "crlf.txt"

        atomic_write_text(path, "a\r\nb\n")

        assert path.read_bytes() == b"a\r\nb\n"

    def test_no_temp_files_left(self, tmp_path: Path):
        """성공 후 temp 파일 없음."""
        atomic_write_text(tmp_path / "out.txt", "content")

        assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]

    def test_failure_keeps_original(self, tmp_path: Path):
        """rename 실패 → 기존 파일 유지, temp 정리."""
        path = tmp_path / "out.txt"
        path.write_text("original", encoding="utf-8")

        with patch("src.core.output.os.replace", side_effect=OSError("boom")):
            with pytest.raises(OSError):
                atomic_write_text(path, "new content")

        assert path.read_text(encoding="utf-8") == "original"
        assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]


class TestAtomicWriteJson:
    """atomic_write_json 테스트."""

    def test_round_trip(self, tmp_path: Path):
        path = tmp_path / "data.json"

        atomic_write_json(path, {"name": "테스트", "n": 1})

        assert json.loads(path.read_text(encoding="utf-8")) == {"name": "테스트", "n": 1}


class TestOutputLock:
    """output_lock 테스트."""

    def test_lock_in_locks_dir(self, tmp_path: Path):
        """locks_dir 지정 시 그 안에 락 파일."""
        output = tmp_path / "out" / "plugin.php"
        locks_dir = tmp_path / ".locks"

        with output_lock(output, locks_dir=locks_dir):
            assert (locks_dir / ".plugin.php.lock").exists()

    def test_timeout_raises(self, tmp_path: Path):
        """다른 곳에서 락 보유 중 → OUTPUT_LOCK_TIMEOUT."""
        output = tmp_path / "plugin.php"
        holder = FileLock(tmp_path / ".plugin.php.lock")

        with holder:
            with pytest.raises(ScaffoldError) as exc_info:
                with output_lock(output, timeout=0.1):
                    pass

        assert exc_info.value.code == ErrorCodes.OUTPUT_LOCK_TIMEOUT
        assert exc_info.value.context["path"] == str(output)
