"""
Templates layer: 템플릿 저장소 관리 모듈.

역할:
- 템플릿 조회/생성/삭제 (manager.py)
- 템플릿 검사 (lint.py)

주의: 폴더 구분
- src/templates/ → 코드 (이 모듈)
- templates/ (루트) → 데이터 저장소 (base/, custom/)
"""

from .lint import (
    LintReport,
    lint_template,
)
from .manager import (
    TemplateError,
    TemplateManager,
    TemplateMeta,
    get_template_path,
    validate_output_filename,
    validate_template_id,
)

__all__ = [
    # manager
    "TemplateManager",
    "TemplateMeta",
    "TemplateError",
    "validate_template_id",
    "validate_output_filename",
    "get_template_path",
    # lint
    "LintReport",
    "lint_template",
]
