"""
Run logging: run log schema, events, warnings

규칙:
- 생성 요청마다 run log 저장 (성공/실패 모두)
- 경고 필수 컨텍스트: level, code, action_id, target, message
"""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from src.core.ids import generate_run_id
from src.core.output import atomic_write_json
from src.domain.schemas import RunLog, WarningLog

# =============================================================================
# Run Log Management
# =============================================================================


def create_run_log(template_id: str) -> RunLog:
    """
    새 RunLog 생성.

    Args:
        template_id: 렌더할 템플릿 ID

    Returns:
        초기화된 RunLog
    """
    return RunLog(
        run_id=generate_run_id(),
        template_id=template_id,
        started_at=datetime.now(UTC).isoformat(),
        result="pending",
    )


def emit_warning(
    run_log: RunLog,
    code: str,
    action_id: str,
    target: str,
    message: str,
) -> None:
    """
    경고 이벤트 기록.

    Args:
        run_log: RunLog 인스턴스
        code: 경고 코드
        action_id: 액션 ID (예: lint_template)
        target: 대상 토큰/파일
        message: 경고 메시지
    """
    run_log.warnings.append(
        WarningLog(
            level="warning",
            code=code,
            action_id=action_id,
            target=target,
            message=message,
        )
    )


def complete_run_log(
    run_log: RunLog,
    success: bool,
    output_path: Path | None = None,
    tokens_hash: str | None = None,
    output_hash: str | None = None,
    error_code: str | None = None,
    error_context: dict[str, Any] | None = None,
) -> None:
    """
    RunLog 완료 처리.

    Args:
        run_log: RunLog 인스턴스
        success: 성공 여부
        output_path: 생성된 파일 경로
        tokens_hash: 토큰 테이블 해시
        output_hash: 렌더 결과 해시
        error_code: 에러 코드 (실패 시)
        error_context: 에러 컨텍스트 (실패 시)
    """
    run_log.finished_at = datetime.now(UTC).isoformat()
    run_log.result = "success" if success else "failed"
    run_log.output_path = str(output_path) if output_path else None
    run_log.tokens_hash = tokens_hash
    run_log.output_hash = output_hash

    if not success:
        run_log.error_code = error_code
        run_log.error_context = error_context


def save_run_log(run_log: RunLog, logs_dir: Path) -> Path:
    """
    RunLog를 파일로 저장.

    Args:
        run_log: RunLog 인스턴스
        logs_dir: logs/ 디렉터리 경로

    Returns:
        저장된 파일 경로
    """
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"run_{run_log.run_id}.json"
    atomic_write_json(log_path, run_log.to_dict())
    return log_path


def load_run_log(log_path: Path) -> dict[str, Any]:
    """RunLog 파일 로드."""
    data: dict[str, Any] = json.loads(log_path.read_text(encoding="utf-8"))
    return data


def list_run_logs(logs_dir: Path) -> list[Path]:
    """
    logs/ 디렉터리의 모든 run log 파일 목록.

    Args:
        logs_dir: logs/ 디렉터리 경로

    Returns:
        로그 파일 경로 목록 (최신순)
    """
    if not logs_dir.exists():
        return []

    logs = list(logs_dir.glob("run_*.json"))
    logs.sort(key=lambda p: (p.stat().st_mtime, p.name), reverse=True)
    return logs
