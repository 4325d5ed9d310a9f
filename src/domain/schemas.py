"""
Data schemas for the scaffolder.

규칙:
- 토큰 이름 통일: 템플릿 placeholder와 동일한 대문자 키 사용
- 플러그인 설정은 불변 (frozen dataclass), 전역 상수 대신 명시적으로 전달
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from src.domain.errors import ErrorCodes, ScaffoldError

# =============================================================================
# Template Schemas
# =============================================================================

@dataclass(frozen=True)
class Placeholder:
    """템플릿 안의 placeholder 하나 (위치는 1-based)."""
    name: str
    offset: int
    line: int
    column: int

    @property
    def marker(self) -> str:
        return f"[{self.name}]"


# =============================================================================
# Plugin Config
# =============================================================================

class HookVariant(str, Enum):
    """
    초기화 함수를 연결할 WordPress 액션.

    원래 거의 같은 템플릿 두 벌이 hook 이름만 달랐던 것을 옵션 하나로 통합.
    """
    INIT = "init"
    PLUGINS_LOADED = "plugins_loaded"


SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
VERSION_PATTERN = re.compile(r"^\d+(?:\.\d+)*(?:[-+][0-9A-Za-z.-]+)?$")
PREFIX_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# from_dict에서 문자열만 허용하는 필드
_STRING_FIELDS = (
    "project_name",
    "plugin_slug",
    "version",
    "description",
    "author_name",
    "project_homepage",
    "plugin_constant",
    "function_prefix",
)

# PluginConfig.to_tokens()가 채우는 토큰 (manifest.yaml과 동일)
PLUGIN_TOKENS = (
    "PROJECT_NAME",
    "PROJECT_HOMEPAGE",
    "PROJECT_DESCRIPTION",
    "VERSION",
    "AUTHOR_NAME",
    "PLUGIN_SLUG",
    "PLUGIN_CONSTANT",
    "PLUGIN_FUNCTION_PREFIX",
    "INIT_HOOK",
    "BLOCKS_INIT_CALL",
    "BLOCKS_FUNCTION",
)

_BLOCKS_INIT_CALL = """
    // Register Gutenberg blocks.
    {prefix}_register_blocks();
"""

_BLOCKS_FUNCTION = """
/**
 * Register Gutenberg blocks.
 */
function {prefix}_register_blocks() {{
    $build_dir = __DIR__ . '/build/blocks';

    if ( ! file_exists( $build_dir ) ) {{
        return;
    }}

    $block_json_files = glob( $build_dir . '/*/block.json' );

    foreach ( $block_json_files as $block_json_file ) {{
        register_block_type( dirname( $block_json_file ) );
    }}
}}
"""


@dataclass(frozen=True)
class PluginConfig:
    """
    생성할 플러그인 설정.

    PHP 쪽 전역 define() 상수(<PREFIX>_VERSION 등)의 값은 모두 여기서 파생된다.
    plugin_constant / function_prefix가 비어 있으면 slug에서 계산.
    """
    project_name: str
    plugin_slug: str
    version: str = "0.1.0"
    description: str = ""
    author_name: str = ""
    project_homepage: str = ""

    hook: HookVariant = HookVariant.INIT
    register_blocks: bool = True

    plugin_constant: str | None = None
    function_prefix: str | None = None

    @property
    def constant_prefix(self) -> str:
        if self.plugin_constant:
            return self.plugin_constant
        return self.plugin_slug.upper().replace("-", "_")

    @property
    def prefix(self) -> str:
        if self.function_prefix:
            return self.function_prefix
        return self.plugin_slug.lower().replace("-", "_")

    @property
    def output_filename(self) -> str:
        return f"{self.plugin_slug}.php"

    def validate(self) -> None:
        """
        설정 유효성 검증.

        Raises:
            ScaffoldError: INVALID_CONFIG
        """
        if not self.project_name.strip():
            raise ScaffoldError(
                ErrorCodes.INVALID_CONFIG,
                field="project_name",
                reason="project_name cannot be empty",
            )

        if not SLUG_PATTERN.match(self.plugin_slug):
            raise ScaffoldError(
                ErrorCodes.INVALID_CONFIG,
                field="plugin_slug",
                value=self.plugin_slug,
                pattern=SLUG_PATTERN.pattern,
            )

        if not VERSION_PATTERN.match(self.version):
            raise ScaffoldError(
                ErrorCodes.INVALID_CONFIG,
                field="version",
                value=self.version,
            )

        for name, value in (
            ("plugin_constant", self.constant_prefix),
            ("function_prefix", self.prefix),
        ):
            if not PREFIX_PATTERN.match(value):
                raise ScaffoldError(
                    ErrorCodes.INVALID_CONFIG,
                    field=name,
                    value=value,
                )

    def to_tokens(self) -> dict[str, str]:
        """플러그인 템플릿용 토큰 테이블."""
        prefix = self.prefix
        return {
            "PROJECT_NAME": self.project_name,
            "PROJECT_HOMEPAGE": self.project_homepage,
            "PROJECT_DESCRIPTION": self.description,
            "VERSION": self.version,
            "AUTHOR_NAME": self.author_name,
            "PLUGIN_SLUG": self.plugin_slug,
            "PLUGIN_CONSTANT": self.constant_prefix,
            "PLUGIN_FUNCTION_PREFIX": prefix,
            "INIT_HOOK": self.hook.value,
            "BLOCKS_INIT_CALL": (
                _BLOCKS_INIT_CALL.format(prefix=prefix) if self.register_blocks else ""
            ),
            "BLOCKS_FUNCTION": (
                _BLOCKS_FUNCTION.format(prefix=prefix) if self.register_blocks else ""
            ),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_name": self.project_name,
            "plugin_slug": self.plugin_slug,
            "version": self.version,
            "description": self.description,
            "author_name": self.author_name,
            "project_homepage": self.project_homepage,
            "hook": self.hook.value,
            "register_blocks": self.register_blocks,
            "plugin_constant": self.plugin_constant,
            "function_prefix": self.function_prefix,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PluginConfig":
        """
        dict → PluginConfig.

        YAML은 1.10 같은 버전을 float로 읽으므로 문자열 필드는 문자열만 허용
        (숫자로 보이는 값은 따옴표로 감싸야 함).

        Raises:
            ScaffoldError: INVALID_CONFIG (필수 키 누락, 타입 불일치, 알 수 없는 hook)
        """
        for key in ("project_name", "plugin_slug"):
            if not data.get(key):
                raise ScaffoldError(
                    ErrorCodes.INVALID_CONFIG,
                    field=key,
                    reason="required",
                )

        for key in _STRING_FIELDS:
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ScaffoldError(
                    ErrorCodes.INVALID_CONFIG,
                    field=key,
                    value=repr(value),
                    reason="must be a string (quote it in YAML)",
                )

        register_blocks = data.get("register_blocks", True)
        if not isinstance(register_blocks, bool):
            raise ScaffoldError(
                ErrorCodes.INVALID_CONFIG,
                field="register_blocks",
                value=repr(register_blocks),
                reason="must be true or false",
            )

        hook = data.get("hook", HookVariant.INIT)
        try:
            hook = HookVariant(hook)
        except ValueError as e:
            raise ScaffoldError(
                ErrorCodes.INVALID_CONFIG,
                field="hook",
                value=hook,
                allowed=[h.value for h in HookVariant],
            ) from e

        return cls(
            project_name=data["project_name"],
            plugin_slug=data["plugin_slug"],
            version=data.get("version") or "0.1.0",
            description=data.get("description") or "",
            author_name=data.get("author_name") or "",
            project_homepage=data.get("project_homepage") or "",
            hook=hook,
            register_blocks=register_blocks,
            plugin_constant=data.get("plugin_constant"),
            function_prefix=data.get("function_prefix"),
        )


def load_plugin_config(config_path: Path) -> PluginConfig:
    """
    YAML 파일에서 플러그인 설정 로드.

    최상위에 plugin: 섹션이 있으면 그 안을 사용.

    Args:
        config_path: plugin.yaml 경로

    Returns:
        PluginConfig

    Raises:
        ScaffoldError: INVALID_CONFIG
    """
    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ScaffoldError(
            ErrorCodes.INVALID_CONFIG,
            path=str(config_path),
            reason="top level must be a mapping",
        )

    section = data.get("plugin", data)
    return PluginConfig.from_dict(section)


# =============================================================================
# Run Log Schemas
# =============================================================================

@dataclass
class WarningLog:
    """
    경고 로그.

    경고 필수 컨텍스트: level, code, action_id, target, message
    """
    level: str = "warning"
    code: str = ""
    action_id: str = ""
    target: str = ""
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "action_id": self.action_id,
            "target": self.target,
            "message": self.message,
        }


@dataclass
class RunLog:
    """
    생성 실행 로그.

    한 번의 생성 요청 = 하나의 RunLog.
    """
    run_id: str
    template_id: str
    started_at: str  # ISO 8601
    finished_at: str | None = None
    result: str = "pending"  # pending, success, failed

    output_path: str | None = None

    # Hashes (재현성 확인용)
    tokens_hash: str | None = None
    output_hash: str | None = None

    warnings: list[WarningLog] = field(default_factory=list)

    # Error (if failed)
    error_code: str | None = None
    error_context: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "template_id": self.template_id,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "result": self.result,
            "output_path": self.output_path,
            "tokens_hash": self.tokens_hash,
            "output_hash": self.output_hash,
            "warnings": [w.to_dict() for w in self.warnings],
            "error_code": self.error_code,
            "error_context": self.error_context,
        }
