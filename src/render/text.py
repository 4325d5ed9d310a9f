"""
텍스트 렌더러: [TOKEN] 템플릿 → 최종 파일.

규칙:
- 전체 렌더 성공 후에만 쓰기 (미해결 토큰 → 파일 생성 없음)
- 원자적 쓰기 + 출력 경로 락
- 기존 파일 덮어쓰기는 명시적으로 허용한 경우만
"""

import logging
from collections.abc import Mapping
from pathlib import Path

from src.core.output import DEFAULT_LOCK_TIMEOUT, atomic_write_text, output_lock
from src.core.placeholders import placeholder_names, render
from src.domain.constants import TEMPLATE_ENCODING
from src.domain.errors import ErrorCodes, ScaffoldError

logger = logging.getLogger(__name__)


class TextRenderer:
    """
    텍스트 템플릿 렌더러.

    Usage:
        renderer = TextRenderer(template_path)
        renderer.render_to(tokens, output_path)
    """

    def __init__(self, template_path: Path):
        """
        Args:
            template_path: 템플릿 파일 경로

        Raises:
            ScaffoldError: TEMPLATE_NOT_FOUND
        """
        if not template_path.exists():
            raise ScaffoldError(
                ErrorCodes.TEMPLATE_NOT_FOUND,
                path=str(template_path),
            )

        self.template_path = template_path
        self._text: str | None = None

    @property
    def text(self) -> str:
        """템플릿 본문 (lazy, 줄바꿈 변환 없음)."""
        if self._text is None:
            self._text = self.template_path.read_bytes().decode(TEMPLATE_ENCODING)
        return self._text

    def get_placeholders(self) -> list[str]:
        """템플릿에서 사용된 placeholder 목록."""
        return placeholder_names(self.text)

    def render(self, tokens: Mapping[str, str]) -> str:
        """
        메모리 렌더 (I/O 없음).

        Raises:
            UnresolvedTokenError, MalformedPlaceholderError
        """
        return render(self.text, tokens)

    def render_to(
        self,
        tokens: Mapping[str, str],
        output_path: Path,
        overwrite: bool = False,
        locks_dir: Path | None = None,
    ) -> Path:
        """
        렌더 후 파일로 저장.

        Args:
            tokens: 토큰 테이블
            output_path: 출력 파일 경로
            overwrite: 기존 파일 덮어쓰기 허용
            locks_dir: 출력 락 파일 디렉토리

        Returns:
            저장된 파일 경로

        Raises:
            UnresolvedTokenError: 미해결 토큰 (파일 생성 없음)
            ScaffoldError: OUTPUT_EXISTS, OUTPUT_LOCK_TIMEOUT, RENDER_FAILED
        """
        # 쓰기 전에 전체 렌더 → 실패 시 아무것도 남지 않음
        rendered = self.render(tokens)
        return self.write(rendered, output_path, overwrite=overwrite, locks_dir=locks_dir)

    def write(
        self,
        rendered: str,
        output_path: Path,
        overwrite: bool = False,
        locks_dir: Path | None = None,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    ) -> Path:
        """
        렌더 결과를 원자적으로 저장.

        Raises:
            ScaffoldError: OUTPUT_EXISTS, OUTPUT_LOCK_TIMEOUT, RENDER_FAILED
        """
        with output_lock(output_path, timeout=lock_timeout, locks_dir=locks_dir):
            if output_path.exists() and not overwrite:
                raise ScaffoldError(
                    ErrorCodes.OUTPUT_EXISTS,
                    path=str(output_path),
                )

            try:
                atomic_write_text(output_path, rendered, encoding=TEMPLATE_ENCODING)
            except OSError as e:
                raise ScaffoldError(
                    ErrorCodes.RENDER_FAILED,
                    template=str(self.template_path),
                    path=str(output_path),
                    error=str(e),
                ) from e

        logger.info(f"Rendered {self.template_path.name} → {output_path}")
        return output_path


def render_file(
    template_path: Path,
    tokens: Mapping[str, str],
    output_path: Path,
    overwrite: bool = False,
) -> Path:
    """
    템플릿 파일 렌더 (간편 함수).

    Args:
        template_path: 템플릿 파일 경로
        tokens: 토큰 테이블
        output_path: 출력 파일 경로
        overwrite: 기존 파일 덮어쓰기 허용

    Returns:
        저장된 파일 경로
    """
    renderer = TextRenderer(template_path)
    return renderer.render_to(tokens, output_path, overwrite=overwrite)
