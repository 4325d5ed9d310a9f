"""
설정 로드: default.yaml

규칙:
- 파일이 없으면 기본값 사용
- 상대 경로는 프로젝트 루트 기준으로 해석
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from src.domain.constants import DEFAULT_TEMPLATE_ID

PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "default.yaml"


@dataclass(frozen=True)
class ScaffoldSettings:
    """스캐폴더 실행 설정."""
    templates_root: Path
    output_dir: Path
    logs_dir: Path
    default_template: str = DEFAULT_TEMPLATE_ID
    overwrite: bool = False
    lock_timeout: float = 10.0


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """설정 파일 로드 (없으면 빈 dict)."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}
        return data


def load_settings(
    config_path: Path | None = None,
    base_dir: Path = PROJECT_ROOT,
) -> ScaffoldSettings:
    """
    default.yaml → ScaffoldSettings.

    Args:
        config_path: 설정 파일 경로 (None이면 프로젝트 루트 default.yaml)
        base_dir: 상대 경로 기준 디렉터리

    Returns:
        ScaffoldSettings
    """
    config = load_config(config_path)
    paths = config.get("paths", {})
    generation = config.get("generation", {})
    output = config.get("output", {})

    def _resolve(value: str) -> Path:
        path = Path(value)
        return path if path.is_absolute() else base_dir / path

    return ScaffoldSettings(
        templates_root=_resolve(paths.get("templates_root", "templates")),
        output_dir=_resolve(paths.get("output_dir", "build/plugins")),
        logs_dir=_resolve(paths.get("logs_dir", "build/logs")),
        default_template=generation.get("default_template", DEFAULT_TEMPLATE_ID),
        overwrite=bool(generation.get("overwrite", False)),
        lock_timeout=float(output.get("lock_timeout", 10.0)),
    )
