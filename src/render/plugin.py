"""
플러그인 생성: PluginConfig + 템플릿 → <slug>/<slug>.php

흐름:
1. 설정 검증 → 토큰 테이블 구성 (추가 토큰은 설정 값을 덮어씀)
2. 템플릿 검사 (경고만 run log에 기록)
3. 메모리 렌더 → 성공 시에만 원자적 쓰기
4. Run Log: 항상 저장 (성공/실패 모두)
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.core.hashing import compute_text_hash, compute_tokens_hash
from src.core.logging import (
    complete_run_log,
    create_run_log,
    emit_warning,
    save_run_log,
)
from src.core.output import DEFAULT_LOCK_TIMEOUT
from src.core.placeholders import render
from src.domain.constants import DEFAULT_OUTPUT_FILENAME, DEFAULT_TEMPLATE_ID
from src.domain.errors import ErrorCodes, ScaffoldError
from src.domain.schemas import PluginConfig, RunLog
from src.render.text import TextRenderer
from src.templates.lint import lint_template
from src.templates.manager import TemplateManager

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """생성 결과."""

    run_id: str
    template_id: str
    text: str
    output_path: Path
    written: bool
    tokens_hash: str
    output_hash: str
    warnings: list[str] = field(default_factory=list)
    log_path: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "template_id": self.template_id,
            "output_path": str(self.output_path),
            "filename": self.output_path.name,
            "written": self.written,
            "tokens_hash": self.tokens_hash,
            "output_hash": self.output_hash,
            "warnings": self.warnings,
            "text": self.text,
        }


class PluginGenerator:
    """
    플러그인 진입 파일 생성기.

    Usage:
        generator = PluginGenerator(manager, output_dir, logs_dir)
        result = generator.generate(config)
    """

    def __init__(
        self,
        manager: TemplateManager,
        output_dir: Path,
        logs_dir: Path | None = None,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    ):
        """
        Args:
            manager: 템플릿 저장소
            output_dir: 생성 파일 루트 (<output_dir>/<slug>/...)
            logs_dir: run log 저장 위치 (None이면 저장 안 함)
            lock_timeout: 출력 락 대기 시간 (초)
        """
        self.manager = manager
        self.output_dir = output_dir
        self.logs_dir = logs_dir
        self.lock_timeout = lock_timeout

    def build_tokens(
        self,
        config: PluginConfig | None,
        extra_tokens: Mapping[str, str] | None = None,
    ) -> dict[str, str]:
        """
        토큰 테이블 구성.

        Raises:
            ScaffoldError: INVALID_CONFIG
        """
        tokens: dict[str, str] = {}
        if config is not None:
            config.validate()
            tokens.update(config.to_tokens())
        if extra_tokens:
            tokens.update(extra_tokens)
        return tokens

    def output_path_for(
        self,
        template_id: str,
        tokens: Mapping[str, str],
        config: PluginConfig | None = None,
    ) -> Path:
        """
        출력 경로 계산.

        manifest의 output_filename도 같은 placeholder 규칙으로 렌더.
        manifest에 없으면 설정의 <slug>.php, 설정도 없으면 [PLUGIN_SLUG].php.

        Raises:
            ScaffoldError: INVALID_OUTPUT_PATH (output_dir 밖으로 나가는 경로)
        """
        manifest = self.manager.get_manifest(template_id)
        pattern = manifest.get("output_filename")
        if pattern:
            filename = render(pattern, tokens)
        elif config is not None:
            filename = config.output_filename
        else:
            filename = render(DEFAULT_OUTPUT_FILENAME, tokens)

        if config is not None:
            output_path = self.output_dir / config.plugin_slug / filename
        else:
            output_path = self.output_dir / filename

        # 토큰 값에 ../ 또는 절대 경로가 섞여도 output_dir 밖에는 쓰지 않음
        root = self.output_dir.resolve()
        resolved = output_path.resolve()
        if root not in resolved.parents:
            raise ScaffoldError(
                ErrorCodes.INVALID_OUTPUT_PATH,
                template_id=template_id,
                filename=filename,
                output_dir=str(self.output_dir),
            )
        return output_path

    def generate(
        self,
        config: PluginConfig | None,
        template_id: str = DEFAULT_TEMPLATE_ID,
        extra_tokens: Mapping[str, str] | None = None,
        overwrite: bool = False,
        dry_run: bool = False,
    ) -> GenerationResult:
        """
        플러그인 파일 생성.

        Args:
            config: 플러그인 설정 (None이면 extra_tokens만 사용)
            template_id: 템플릿 ID
            extra_tokens: 추가/덮어쓸 토큰
            overwrite: 기존 파일 덮어쓰기 허용
            dry_run: 렌더만 하고 파일은 쓰지 않음

        Returns:
            GenerationResult

        Raises:
            UnresolvedTokenError: 미해결 토큰 (파일 생성 없음)
            ScaffoldError: INVALID_CONFIG, TEMPLATE_NOT_FOUND, OUTPUT_EXISTS 등
        """
        run_log = create_run_log(template_id)
        tokens_hash = None

        try:
            tokens = self.build_tokens(config, extra_tokens)
            tokens_hash = compute_tokens_hash(tokens)

            manifest = self.manager.get_manifest(template_id)
            renderer = TextRenderer(self.manager.get_template_file(template_id))

            report = lint_template(renderer.text, manifest.get("tokens", {}).keys())
            warnings = report.warnings()
            for message in warnings:
                emit_warning(
                    run_log,
                    code="TEMPLATE_LINT",
                    action_id="lint_template",
                    target=template_id,
                    message=message,
                )
                logger.warning(f"[{template_id}] {message}")

            rendered = renderer.render(tokens)
            output_path = self.output_path_for(template_id, tokens, config)

            if not dry_run:
                renderer.write(
                    rendered,
                    output_path,
                    overwrite=overwrite,
                    locks_dir=self.output_dir / ".locks",
                    lock_timeout=self.lock_timeout,
                )

            output_hash = compute_text_hash(rendered)
            complete_run_log(
                run_log,
                success=True,
                output_path=None if dry_run else output_path,
                tokens_hash=tokens_hash,
                output_hash=output_hash,
            )

        except ScaffoldError as e:
            complete_run_log(
                run_log,
                success=False,
                tokens_hash=tokens_hash,
                error_code=e.code,
                error_context=e.context,
            )
            logger.error(f"Generation failed ({run_log.run_id}): {e}")
            self._save_log(run_log)
            raise
        except Exception as e:
            complete_run_log(
                run_log,
                success=False,
                tokens_hash=tokens_hash,
                error_code=ErrorCodes.RENDER_FAILED,
                error_context={"error_type": type(e).__name__, "error": str(e)},
            )
            logger.exception(f"Generation failed ({run_log.run_id}): {e}")
            self._save_log(run_log)
            raise

        log_path = self._save_log(run_log)
        return GenerationResult(
            run_id=run_log.run_id,
            template_id=template_id,
            text=rendered,
            output_path=output_path,
            written=not dry_run,
            tokens_hash=tokens_hash,
            output_hash=output_hash,
            warnings=warnings,
            log_path=log_path,
        )

    def _save_log(self, run_log: RunLog) -> Path | None:
        if self.logs_dir is None:
            return None
        return save_run_log(run_log, self.logs_dir)


def generate_plugin(
    config: PluginConfig,
    output_dir: Path,
    manager: TemplateManager,
    template_id: str = DEFAULT_TEMPLATE_ID,
    overwrite: bool = False,
    dry_run: bool = False,
    logs_dir: Path | None = None,
) -> GenerationResult:
    """
    플러그인 파일 생성 (간편 함수).

    Returns:
        GenerationResult
    """
    generator = PluginGenerator(manager, output_dir=output_dir, logs_dir=logs_dir)
    return generator.generate(
        config,
        template_id=template_id,
        overwrite=overwrite,
        dry_run=dry_run,
    )
