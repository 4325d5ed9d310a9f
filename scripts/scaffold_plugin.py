#!/usr/bin/env python3
"""
scaffold_plugin.py - WordPress 플러그인 진입 파일 생성 스크립트

토큰 공급 방식:
1. --config plugin.yaml (PluginConfig 필드, plugin: 섹션 허용)
2. --name / --slug / --version 등 개별 옵션 (설정 파일 값 덮어씀)
3. --set KEY=VALUE (템플릿 토큰 직접 지정, 최종 우선)

사용법:
    # 설정 파일로 생성
    uv run python scripts/scaffold_plugin.py --config plugin.yaml

    # 옵션만으로 생성 (plugins_loaded hook, 블록 등록 없음)
    uv run python scripts/scaffold_plugin.py --name "Acme Forms" --slug acme-forms \\
        --hook plugins_loaded --no-blocks

    # 렌더 결과만 출력
    uv run python scripts/scaffold_plugin.py --config plugin.yaml --dry-run

    # 템플릿에 필요한 토큰 중 빠진 것만 확인
    uv run python scripts/scaffold_plugin.py --template my_template --list-missing
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

# 프로젝트 루트 (src 패키지 임포트용)
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.core.config import load_config, load_settings  # noqa: E402
from src.core.placeholders import missing_tokens  # noqa: E402
from src.domain.errors import ScaffoldError, UnresolvedTokenError  # noqa: E402
from src.domain.schemas import HookVariant, PluginConfig  # noqa: E402
from src.render.plugin import PluginGenerator  # noqa: E402
from src.templates.manager import TemplateManager  # noqa: E402

logger = logging.getLogger("scaffold_plugin")

# CLI 옵션 → PluginConfig 필드
OPTION_FIELDS = {
    "name": "project_name",
    "slug": "plugin_slug",
    "version": "version",
    "description": "description",
    "author": "author_name",
    "homepage": "project_homepage",
    "hook": "hook",
    "constant": "plugin_constant",
    "prefix": "function_prefix",
}


def parse_assignments(assignments: list[str]) -> dict[str, str]:
    """
    KEY=VALUE 목록 → dict.

    Raises:
        ValueError: '=' 없는 항목
    """
    tokens = {}
    for item in assignments:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid --set value (expected KEY=VALUE): {item!r}")
        tokens[key.strip()] = value
    return tokens


def build_config_data(args: argparse.Namespace) -> dict[str, Any]:
    """설정 파일 + CLI 옵션 병합 (CLI 우선)."""
    data: dict[str, Any] = {}

    if args.config:
        loaded = load_config(Path(args.config))
        data.update(loaded.get("plugin", loaded))

    for option, field_name in OPTION_FIELDS.items():
        value = getattr(args, option, None)
        if value is not None:
            data[field_name] = value

    if args.no_blocks:
        data["register_blocks"] = False

    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="[TOKEN] 템플릿 기반 WordPress 플러그인 진입 파일 생성",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", type=str, help="플러그인 설정 YAML 경로")
    parser.add_argument("--name", type=str, help="플러그인 이름 (Plugin Name)")
    parser.add_argument("--slug", type=str, help="플러그인 slug (예: acme-forms)")
    parser.add_argument("--version", type=str, help="플러그인 버전")
    parser.add_argument("--description", type=str, help="플러그인 설명")
    parser.add_argument("--author", type=str, help="작성자")
    parser.add_argument("--homepage", type=str, help="플러그인/작성자 URI")
    parser.add_argument(
        "--hook",
        choices=[h.value for h in HookVariant],
        help="초기화 함수를 연결할 액션 (기본: init)",
    )
    parser.add_argument("--constant", type=str, help="define() 상수 접두사 (기본: slug 대문자)")
    parser.add_argument("--prefix", type=str, help="PHP 함수 접두사 (기본: slug 소문자)")
    parser.add_argument("--no-blocks", action="store_true", help="블록 등록 코드 제외")
    parser.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="템플릿 토큰 직접 지정 (여러 번 사용 가능)",
    )
    parser.add_argument("--template", type=str, help="템플릿 ID (기본: default.yaml 설정)")
    parser.add_argument("--output-dir", type=str, help="출력 루트 디렉터리")
    parser.add_argument("--overwrite", action="store_true", help="기존 파일 덮어쓰기")
    parser.add_argument("--dry-run", action="store_true", help="파일을 쓰지 않고 결과만 출력")
    parser.add_argument(
        "--list-missing",
        action="store_true",
        help="값이 없는 토큰만 출력하고 종료",
    )
    parser.add_argument("--settings", type=str, help="default.yaml 경로")
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    args = build_parser().parse_args(argv)

    settings = load_settings(Path(args.settings) if args.settings else None)
    output_dir = Path(args.output_dir) if args.output_dir else settings.output_dir
    template_id = args.template or settings.default_template

    manager = TemplateManager(settings.templates_root)
    generator = PluginGenerator(
        manager,
        output_dir=output_dir,
        logs_dir=settings.logs_dir,
        lock_timeout=settings.lock_timeout,
    )

    try:
        extra_tokens = parse_assignments(args.set)
        config_data = build_config_data(args)
        config = PluginConfig.from_dict(config_data) if config_data else None

        if args.list_missing:
            tokens = generator.build_tokens(config, extra_tokens)
            missing = missing_tokens(manager.load_template_text(template_id), tokens)
            for name in missing:
                print(name)
            return 1 if missing else 0

        result = generator.generate(
            config,
            template_id=template_id,
            extra_tokens=extra_tokens,
            overwrite=args.overwrite or settings.overwrite,
            dry_run=args.dry_run,
        )

    except UnresolvedTokenError as e:
        logger.error(
            f"Unresolved token [{e.token}] at line {e.line}, column {e.column}"
        )
        logger.error(f"Missing tokens: {', '.join(e.missing)}")
        return 1
    except ScaffoldError as e:
        logger.error(f"Generation failed: {e}")
        return 1
    except (ValueError, OSError) as e:
        logger.error(str(e))
        return 1

    if args.dry_run:
        sys.stdout.write(result.text)
    else:
        logger.info(f"Generated: {result.output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
