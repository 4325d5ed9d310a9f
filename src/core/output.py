"""
출력 파일 관리: 원자적 쓰기 + 출력 경로 락.

규칙:
- 부분 출력 금지: temp → fsync → rename, 실패 시 temp 삭제
- 같은 출력 경로에 대한 동시 생성은 락으로 직렬화
- fsync 실패 시 경고 남기고 계속 진행 (best-effort 내구성)
"""

import json
import logging
import os
import tempfile
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from filelock import FileLock, Timeout

from src.domain.errors import ErrorCodes, ScaffoldError

logger = logging.getLogger(__name__)

# 출력 락 timeout (초)
DEFAULT_LOCK_TIMEOUT = 10.0


# =============================================================================
# Lock Management
# =============================================================================

@contextmanager
def output_lock(
    output_path: Path,
    timeout: float = DEFAULT_LOCK_TIMEOUT,
    locks_dir: Path | None = None,
) -> Generator[None, None, None]:
    """
    출력 파일 단위 락.

    락 파일: <locks_dir>/<output 이름>.lock (locks_dir 없으면 출력 디렉토리)

    Args:
        output_path: 보호할 출력 파일 경로
        timeout: 락 대기 시간 (초)
        locks_dir: 락 파일 디렉토리

    Raises:
        ScaffoldError: OUTPUT_LOCK_TIMEOUT
    """
    lock_dir = locks_dir or output_path.parent
    lock_dir.mkdir(parents=True, exist_ok=True)
    lock_path = lock_dir / f".{output_path.name}.lock"
    lock = FileLock(lock_path, timeout=timeout)

    try:
        lock.acquire()
    except Timeout as e:
        raise ScaffoldError(
            ErrorCodes.OUTPUT_LOCK_TIMEOUT,
            path=str(output_path),
            timeout=timeout,
        ) from e

    try:
        yield
    finally:
        lock.release()


# =============================================================================
# Atomic Write
# =============================================================================

def _fsync_dir(dir_path: Path) -> None:
    """
    디렉토리 fsync (가능한 환경에서).

    rename 후 디렉토리 엔트리까지 내구성을 강화하려면 필요.
    """
    try:
        dir_fd = os.open(str(dir_path), os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)
    except (OSError, AttributeError) as e:
        # O_DIRECTORY 미지원 (Windows), 권한 문제 등
        logger.warning(
            f"Directory fsync failed for {dir_path}: {e}. "
            f"Rename durability may not be guaranteed."
        )


def atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    """
    원자적 텍스트 쓰기.

    동작:
    - 중간 상태 없음: temp → rename
    - 실패 시 cleanup: temp 파일 삭제, 기존 파일은 그대로

    Args:
        path: 저장할 파일 경로
        text: 파일 내용
        encoding: 인코딩 (기본 UTF-8)
    """
    dir_path = path.parent
    dir_path.mkdir(parents=True, exist_ok=True)

    temp_path = None
    try:
        # newline="" → 줄바꿈 변환 없이 그대로 기록
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=dir_path,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding=encoding,
            newline="",
        ) as f:
            temp_path = Path(f.name)
            f.write(text)
            f.flush()
            try:
                os.fsync(f.fileno())
            except OSError as e:
                logger.warning(
                    f"File fsync failed for {path}: {e}. "
                    f"Data may not be durable on power loss."
                )

        os.replace(temp_path, path)
        _fsync_dir(dir_path)

    except Exception:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass
        raise


def atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    """원자적 JSON 쓰기 (run log 등)."""
    atomic_write_text(path, json.dumps(data, indent=2, ensure_ascii=False))
