"""
템플릿 관리자: 템플릿 저장소 조회 + custom 템플릿 CRUD.

규칙:
- base/ 템플릿은 읽기 전용 (수정/삭제 불가)
- template_id 네이밍: 소문자 + 숫자 + 밑줄, 최대 50자
- 중복 template_id 생성 시 에러 (fail-fast)
- 템플릿 본문은 UTF-8 그대로 보관 (줄바꿈 변환 없음)
"""

import json
import logging
import re
import shutil
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Any

import yaml
from filelock import FileLock, Timeout

from src.core.output import atomic_write_json, atomic_write_text
from src.core.placeholders import placeholder_names
from src.domain.constants import (
    DEFAULT_OUTPUT_FILENAME,
    TEMPLATE_ENCODING,
    TEMPLATE_FILENAME,
    TEMPLATE_MANIFEST_FILENAME,
    TEMPLATE_META_FILENAME,
)
from src.domain.errors import ErrorCodes, ScaffoldError

logger = logging.getLogger(__name__)

# =============================================================================
# Exceptions
# =============================================================================

class TemplateError(ScaffoldError):
    """템플릿 관련 에러."""

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.message = message
        super().__init__(code, **context)

    def _format_message(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


# =============================================================================
# Constants
# =============================================================================

# template_id 네이밍 규칙
TEMPLATE_ID_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_]*[a-z0-9]$")
TEMPLATE_ID_MAX_LENGTH = 50
FORBIDDEN_CHARS = set('/\\:*?"<>| ')


# =============================================================================
# Validation
# =============================================================================

def validate_template_id(template_id: str) -> None:
    """
    template_id 유효성 검증.

    규칙:
    - 소문자 + 숫자 + 언더스코어만 허용
    - 시작/끝은 소문자 또는 숫자
    - 최대 50자
    - 금지 문자: / \\ : * ? " < > | 공백

    Args:
        template_id: 검증할 ID

    Raises:
        TemplateError: INVALID_TEMPLATE_ID
    """
    if not template_id:
        raise TemplateError(
            ErrorCodes.INVALID_TEMPLATE_ID,
            "template_id cannot be empty",
        )

    if len(template_id) > TEMPLATE_ID_MAX_LENGTH:
        raise TemplateError(
            ErrorCodes.INVALID_TEMPLATE_ID,
            f"template_id exceeds {TEMPLATE_ID_MAX_LENGTH} characters",
            length=len(template_id),
        )

    found_forbidden = set(template_id) & FORBIDDEN_CHARS
    if found_forbidden:
        raise TemplateError(
            ErrorCodes.INVALID_TEMPLATE_ID,
            f"template_id contains forbidden characters: {sorted(found_forbidden)}",
            forbidden=sorted(found_forbidden),
        )

    if not TEMPLATE_ID_PATTERN.match(template_id):
        raise TemplateError(
            ErrorCodes.INVALID_TEMPLATE_ID,
            "template_id must be lowercase alphanumeric with underscores, "
            "start/end with alphanumeric",
            pattern=TEMPLATE_ID_PATTERN.pattern,
        )


def validate_output_filename(output_filename: str) -> None:
    """
    output_filename 패턴 검증.

    렌더 후 출력 루트 밖으로 나갈 수 있는 패턴은 등록 단계에서 거부.
    (렌더된 최종 경로는 PluginGenerator.output_path_for에서 다시 확인)

    Raises:
        TemplateError: INVALID_OUTPUT_PATH (빈 값, 절대 경로, .. 포함)
    """
    path = PurePosixPath(output_filename.replace("\\", "/"))
    if (
        not output_filename.strip()
        or path.is_absolute()
        or PureWindowsPath(output_filename).is_absolute()
        or ".." in path.parts
    ):
        raise TemplateError(
            ErrorCodes.INVALID_OUTPUT_PATH,
            "output_filename must be a relative path inside the output directory",
            output_filename=output_filename,
        )


def get_template_path(
    templates_root: Path,
    template_id: str,
    category: str = "custom",
) -> Path:
    """
    템플릿 폴더 경로 반환.

    Args:
        templates_root: templates/ 루트 경로
        template_id: 템플릿 ID
        category: "base" 또는 "custom"

    Returns:
        템플릿 폴더 경로
    """
    return templates_root / category / template_id


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class TemplateMeta:
    """템플릿 메타데이터 (meta.json 또는 manifest.yaml에서 구성)."""
    template_id: str
    display_name: str
    category: str = "custom"
    description: str = ""
    output_filename: str = DEFAULT_OUTPUT_FILENAME

    created_at: str = ""
    created_by: str = ""
    updated_at: str = ""

    tokens: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "template_id": self.template_id,
            "display_name": self.display_name,
            "category": self.category,
            "description": self.description,
            "output_filename": self.output_filename,
            "created_at": self.created_at,
            "created_by": self.created_by,
            "updated_at": self.updated_at,
            "tokens": list(self.tokens),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TemplateMeta":
        return cls(
            template_id=data["template_id"],
            display_name=data.get("display_name", data["template_id"]),
            category=data.get("category", "custom"),
            description=data.get("description", ""),
            output_filename=data.get("output_filename", DEFAULT_OUTPUT_FILENAME),
            created_at=data.get("created_at", ""),
            created_by=data.get("created_by", ""),
            updated_at=data.get("updated_at", ""),
            tokens=list(data.get("tokens", [])),
        )


# =============================================================================
# Template Manager
# =============================================================================

class TemplateManager:
    """
    템플릿 저장소 관리자.

    구조:
    templates/<category>/<template_id>/
    ├── template.php     # placeholder 포함 본문
    ├── manifest.yaml    # 토큰 설명, 출력 파일명
    └── meta.json        # custom 템플릿만 (생성자, 시각)
    """

    # 락 timeout (초)
    LOCK_TIMEOUT = 10.0

    def __init__(self, templates_root: Path):
        """
        Args:
            templates_root: templates/ 루트 경로
        """
        self.templates_root = templates_root
        self.custom_dir = templates_root / "custom"
        self.base_dir = templates_root / "base"
        self._locks_dir = templates_root / ".locks"

    @contextmanager
    def _template_lock(self, template_id: str) -> Generator[None, None, None]:
        """
        템플릿별 락 획득.

        Raises:
            TemplateError: TEMPLATE_LOCK_TIMEOUT
        """
        self._locks_dir.mkdir(parents=True, exist_ok=True)
        lock_file = self._locks_dir / f"{template_id}.lock"
        lock = FileLock(lock_file, timeout=self.LOCK_TIMEOUT)

        try:
            lock.acquire()
        except Timeout as e:
            raise TemplateError(
                ErrorCodes.TEMPLATE_LOCK_TIMEOUT,
                f"Failed to acquire lock for template '{template_id}'",
                template_id=template_id,
                timeout=self.LOCK_TIMEOUT,
            ) from e

        try:
            yield
        finally:
            lock.release()

    # =========================================================================
    # Create
    # =========================================================================

    def create(
        self,
        template_id: str,
        template_text: str,
        display_name: str,
        created_by: str,
        description: str = "",
        output_filename: str = DEFAULT_OUTPUT_FILENAME,
        token_descriptions: dict[str, str] | None = None,
    ) -> Path:
        """
        새 custom 템플릿 생성.

        Args:
            template_id: 템플릿 ID
            template_text: placeholder 포함 본문
            display_name: 표시 이름
            created_by: 생성자
            description: 설명
            output_filename: 출력 파일명 패턴 (placeholder 사용 가능)
            token_descriptions: {토큰 이름: 설명} (manifest용)

        Returns:
            생성된 템플릿 폴더 경로

        Raises:
            TemplateError: INVALID_TEMPLATE_ID, INVALID_OUTPUT_PATH, TEMPLATE_EXISTS
        """
        validate_template_id(template_id)
        validate_output_filename(output_filename)

        with self._template_lock(template_id):
            if (self.base_dir / template_id).exists() or (
                self.custom_dir / template_id
            ).exists():
                raise TemplateError(
                    ErrorCodes.TEMPLATE_EXISTS,
                    f"Template '{template_id}' already exists",
                    template_id=template_id,
                )

            template_path = self.custom_dir / template_id
            template_path.mkdir(parents=True)

            atomic_write_text(
                template_path / TEMPLATE_FILENAME,
                template_text,
                encoding=TEMPLATE_ENCODING,
            )

            tokens = placeholder_names(template_text)
            descriptions = token_descriptions or {}

            now = datetime.now(UTC).isoformat()
            meta = TemplateMeta(
                template_id=template_id,
                display_name=display_name,
                category="custom",
                description=description,
                output_filename=output_filename,
                created_at=now,
                created_by=created_by,
                updated_at=now,
                tokens=tokens,
            )
            atomic_write_json(template_path / TEMPLATE_META_FILENAME, meta.to_dict())

            manifest = {
                "template_id": template_id,
                "display_name": display_name,
                "description": description,
                "output_filename": output_filename,
                "tokens": {
                    name: {"description": descriptions.get(name, "")}
                    for name in tokens
                },
            }
            self._save_manifest(template_path, manifest)

            logger.info(f"Template created: {template_id} ({len(tokens)} tokens)")
            return template_path

    # =========================================================================
    # Read
    # =========================================================================

    def get_manifest(self, template_id: str) -> dict[str, Any]:
        """
        템플릿 manifest 조회.

        manifest.yaml이 없으면 본문에서 토큰 목록을 만들어 반환.

        Raises:
            TemplateError: TEMPLATE_NOT_FOUND, INVALID_MANIFEST
        """
        template_path = self._get_template_path(template_id)
        manifest_path = template_path / TEMPLATE_MANIFEST_FILENAME

        if not manifest_path.exists():
            text = self.load_template_text(template_id)
            return {
                "template_id": template_id,
                "display_name": template_id,
                "output_filename": DEFAULT_OUTPUT_FILENAME,
                "tokens": {name: {"description": ""} for name in placeholder_names(text)},
            }

        try:
            with open(manifest_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise TemplateError(
                ErrorCodes.INVALID_MANIFEST,
                f"{TEMPLATE_MANIFEST_FILENAME} of '{template_id}' is not valid YAML",
                template_id=template_id,
                error=str(e),
            ) from e

        if not isinstance(data, dict) or not isinstance(data.get("tokens") or {}, dict):
            raise TemplateError(
                ErrorCodes.INVALID_MANIFEST,
                f"{TEMPLATE_MANIFEST_FILENAME} of '{template_id}' must be a mapping with a tokens mapping",
                template_id=template_id,
            )

        data["tokens"] = data.get("tokens") or {}
        return data

    def get_meta(self, template_id: str) -> TemplateMeta:
        """
        템플릿 메타데이터 조회.

        custom: meta.json / base: manifest.yaml 기반

        Raises:
            TemplateError: TEMPLATE_NOT_FOUND
        """
        template_path = self._get_template_path(template_id)
        meta_path = template_path / TEMPLATE_META_FILENAME

        if meta_path.exists():
            data = json.loads(meta_path.read_text(encoding="utf-8"))
            return TemplateMeta.from_dict(data)

        manifest = self.get_manifest(template_id)
        return TemplateMeta(
            template_id=manifest.get("template_id", template_id),
            display_name=manifest.get("display_name", template_id),
            category=template_path.parent.name,
            description=manifest.get("description", ""),
            output_filename=manifest.get("output_filename", DEFAULT_OUTPUT_FILENAME),
            tokens=list(manifest.get("tokens", {})),
        )

    def get_template_file(self, template_id: str) -> Path:
        """
        template.php 경로.

        Raises:
            TemplateError: TEMPLATE_NOT_FOUND
        """
        template_file = self._get_template_path(template_id) / TEMPLATE_FILENAME
        if not template_file.exists():
            raise TemplateError(
                ErrorCodes.TEMPLATE_NOT_FOUND,
                f"{TEMPLATE_FILENAME} not found for '{template_id}'",
                template_id=template_id,
            )
        return template_file

    def load_template_text(self, template_id: str) -> str:
        """템플릿 본문 (줄바꿈 변환 없이)."""
        template_file = self.get_template_file(template_id)
        return template_file.read_bytes().decode(TEMPLATE_ENCODING)

    def list_templates(self, category: str = "all") -> list[TemplateMeta]:
        """
        템플릿 목록 조회.

        Args:
            category: "base", "custom", 또는 "all"

        Returns:
            TemplateMeta 목록 (template_id 순)
        """
        results = []

        dirs_to_scan = []
        if category in ("base", "all"):
            dirs_to_scan.append(self.base_dir)
        if category in ("custom", "all"):
            dirs_to_scan.append(self.custom_dir)

        for scan_dir in dirs_to_scan:
            if not scan_dir.exists():
                continue

            for template_dir in sorted(scan_dir.iterdir()):
                if not template_dir.is_dir() or template_dir.name.startswith("."):
                    continue
                if not (template_dir / TEMPLATE_FILENAME).exists():
                    continue

                try:
                    results.append(self.get_meta(template_dir.name))
                except (json.JSONDecodeError, KeyError, TemplateError) as e:
                    logger.warning(f"Skipping broken template {template_dir}: {e}")
                    continue

        return results

    # =========================================================================
    # Delete
    # =========================================================================

    def delete(self, template_id: str) -> None:
        """
        custom 템플릿 삭제.

        Raises:
            TemplateError: TEMPLATE_NOT_FOUND, DELETE_NOT_ALLOWED (base 템플릿)
        """
        validate_template_id(template_id)

        with self._template_lock(template_id):
            template_path = self._get_template_path(template_id)

            if template_path.parent != self.custom_dir:
                raise TemplateError(
                    ErrorCodes.DELETE_NOT_ALLOWED,
                    f"Template '{template_id}' is a base template and cannot be deleted",
                    template_id=template_id,
                )

            shutil.rmtree(template_path)
            logger.info(f"Template deleted: {template_id}")

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _get_template_path(self, template_id: str) -> Path:
        """템플릿 경로 반환 (존재 확인, custom 우선)."""
        validate_template_id(template_id)

        for category_dir in (self.custom_dir, self.base_dir):
            path = category_dir / template_id
            if path.is_dir():
                return path

        raise TemplateError(
            ErrorCodes.TEMPLATE_NOT_FOUND,
            f"Template '{template_id}' not found",
            template_id=template_id,
        )

    def _save_manifest(self, template_path: Path, manifest: dict[str, Any]) -> Path:
        """manifest.yaml 저장."""
        manifest_path = template_path / TEMPLATE_MANIFEST_FILENAME
        atomic_write_text(
            manifest_path,
            yaml.safe_dump(manifest, default_flow_style=False, allow_unicode=True, sort_keys=False),
        )
        return manifest_path
