"""
Domain Constants: 스캐폴더 전역 상수.

placeholder 문법, 템플릿 저장소 구조, 출력 경로 정책 등.
"""

import re

# =============================================================================
# Placeholder Grammar (placeholder 문법)
# =============================================================================
# [TOKEN_NAME] 형식. TOKEN_NAME은 대문자/숫자/밑줄, 숫자로 시작 불가.
# 문법에 맞지 않는 대괄호 텍스트([not_a_token] 등)는 리터럴로 취급.

TOKEN_NAME_PATTERN = re.compile(r"^[A-Z_][A-Z0-9_]*$")
PLACEHOLDER_PATTERN = re.compile(r"\[([A-Z_][A-Z0-9_]*)\]")

# lint 전용: 대괄호 안의 식별자 비슷한 텍스트 (대소문자/공백 포함)
BRACKET_CANDIDATE_PATTERN = re.compile(r"\[([A-Za-z_][A-Za-z0-9_ ]*)\]")

# =============================================================================
# Template Directory Structure (템플릿 디렉토리 구조)
# =============================================================================
# templates/<category>/<template_id>/
# ├── template.php    # placeholder 포함 본문
# ├── manifest.yaml   # 토큰 목록, 출력 파일명
# └── meta.json       # custom 템플릿 메타데이터

TEMPLATE_FILENAME = "template.php"
TEMPLATE_MANIFEST_FILENAME = "manifest.yaml"
TEMPLATE_META_FILENAME = "meta.json"

TEMPLATE_CATEGORIES = ("base", "custom")
DEFAULT_TEMPLATE_ID = "wp_plugin_main"

# =============================================================================
# Output (출력 정책)
# =============================================================================
# <output_dir>/<plugin_slug>/<plugin_slug>.php

DEFAULT_OUTPUT_FILENAME = "[PLUGIN_SLUG].php"
RUN_LOGS_DIR = "logs"
TEMPLATE_ENCODING = "utf-8"

# =============================================================================
# ID Prefixes
# =============================================================================

RUN_ID_PREFIX = "RUN-"
