"""
Pytest fixtures for the scaffolder tests.

테스트 구성:
- 정상 케이스, 토큰 누락 케이스 분리
- 파일 출력은 항상 tmp_path 아래
"""

import shutil
from pathlib import Path

import pytest

from src.domain.schemas import HookVariant, PluginConfig
from src.templates.manager import TemplateManager

# =============================================================================
# Path Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """프로젝트 루트 경로."""
    return Path(__file__).parent.parent


@pytest.fixture
def base_templates_root(project_root: Path) -> Path:
    """저장소에 포함된 templates/ 경로."""
    return project_root / "templates"


@pytest.fixture
def templates_root(tmp_path: Path, base_templates_root: Path) -> Path:
    """테스트용 templates/ 복사본 (base 포함, custom 비어 있음)."""
    root = tmp_path / "templates"
    shutil.copytree(base_templates_root / "base", root / "base")
    (root / "custom").mkdir(parents=True)
    return root


@pytest.fixture
def manager(templates_root: Path) -> TemplateManager:
    """TemplateManager 인스턴스."""
    return TemplateManager(templates_root)


# =============================================================================
# Template / Token Fixtures
# =============================================================================

@pytest.fixture
def sample_template() -> str:
    """두 줄짜리 헤더 템플릿."""
    return "Plugin Name: [PROJECT_NAME]\nVersion: [VERSION]"


@pytest.fixture
def sample_tokens() -> dict[str, str]:
    """sample_template에 맞는 토큰 테이블."""
    return {"PROJECT_NAME": "Acme", "VERSION": "1.0.0"}


@pytest.fixture
def plugin_config() -> PluginConfig:
    """정상 케이스 플러그인 설정."""
    return PluginConfig(
        project_name="Acme Forms",
        plugin_slug="acme-forms",
        version="1.2.0",
        description="Contact forms for Acme",
        author_name="Acme Inc.",
        project_homepage="https://acme.example",
        hook=HookVariant.INIT,
        register_blocks=True,
    )


@pytest.fixture
def settings_path(tmp_path: Path, templates_root: Path) -> Path:
    """tmp_path 기준 default.yaml."""
    path = tmp_path / "default.yaml"
    path.write_text(
        "paths:\n"
        f"  templates_root: {templates_root.as_posix()}\n"
        f"  output_dir: {(tmp_path / 'out').as_posix()}\n"
        f"  logs_dir: {(tmp_path / 'logs').as_posix()}\n"
        "generation:\n"
        "  default_template: wp_plugin_main\n",
        encoding="utf-8",
    )
    return path
