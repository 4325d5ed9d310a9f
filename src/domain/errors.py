"""
Error definitions for the scaffolder.

규칙:
- 조용한 실패 금지 → 미해결 placeholder는 그대로 출력하지 않고 명시적 실패
- 부분 출력 금지 → 에러 발생 시 출력 파일을 남기지 않음
"""

from typing import Any


class ScaffoldError(Exception):
    """
    스캐폴딩 정책 위반 시 발생하는 에러.

    Usage:
        raise ScaffoldError("TEMPLATE_NOT_FOUND", template_id="wp_plugin_main")
    """

    def __init__(self, code: str, **context: Any) -> None:
        self.code = code
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"[{self.code}] {ctx_str}" if ctx_str else f"[{self.code}]"

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            **self.context,
        }


class UnresolvedTokenError(ScaffoldError):
    """
    토큰 테이블에 값이 없는 placeholder.

    token/line/column은 문서 순서상 첫 번째 미해결 placeholder 기준.
    missing에는 미해결 토큰 전체가 (중복 없이, 문서 순서로) 들어간다.
    """

    def __init__(
        self,
        token: str,
        line: int = 0,
        column: int = 0,
        missing: list[str] | None = None,
    ) -> None:
        self.token = token
        self.line = line
        self.column = column
        self.missing = list(missing) if missing else [token]
        super().__init__(
            ErrorCodes.UNRESOLVED_TOKEN,
            token=token,
            line=line,
            column=column,
            missing=self.missing,
        )


class MalformedPlaceholderError(ScaffoldError):
    """토큰 테이블 키가 placeholder 문법과 맞지 않음."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(ErrorCodes.MALFORMED_PLACEHOLDER, name=name)


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Render ===
    UNRESOLVED_TOKEN = "UNRESOLVED_TOKEN"
    MALFORMED_PLACEHOLDER = "MALFORMED_PLACEHOLDER"
    RENDER_FAILED = "RENDER_FAILED"

    # === Templates ===
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    TEMPLATE_EXISTS = "TEMPLATE_EXISTS"
    INVALID_TEMPLATE_ID = "INVALID_TEMPLATE_ID"
    INVALID_MANIFEST = "INVALID_MANIFEST"
    TEMPLATE_LOCK_TIMEOUT = "TEMPLATE_LOCK_TIMEOUT"
    DELETE_NOT_ALLOWED = "DELETE_NOT_ALLOWED"

    # === Config ===
    INVALID_CONFIG = "INVALID_CONFIG"

    # === Output ===
    OUTPUT_EXISTS = "OUTPUT_EXISTS"
    OUTPUT_LOCK_TIMEOUT = "OUTPUT_LOCK_TIMEOUT"
    INVALID_OUTPUT_PATH = "INVALID_OUTPUT_PATH"
