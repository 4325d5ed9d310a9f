"""
Templates Routes: 템플릿 조회/등록 + 토큰 테이블 렌더.

- GET /api/templates → 템플릿 목록
- GET /api/templates/{template_id} → manifest, placeholder, 검사 결과
- POST /api/templates → custom 템플릿 등록
- DELETE /api/templates/{template_id} → custom 템플릿 삭제
- POST /api/render/{template_id} → {"tokens": {...}} 렌더 (파일 쓰기 없음)
"""

from typing import Any

from fastapi import APIRouter, Body, HTTPException, Request

from src.core.hashing import compute_text_hash
from src.core.placeholders import render
from src.domain.constants import DEFAULT_OUTPUT_FILENAME
from src.templates.lint import lint_template
from src.templates.manager import TemplateManager

# Routers
api_router = APIRouter()  # /api/templates
render_router = APIRouter()  # /api/render


def _manager(request: Request) -> TemplateManager:
    return request.app.state.template_manager


def _require_str_mapping(value: Any, name: str) -> dict[str, str]:
    """JSON 객체 → {str: str} (아니면 422)."""
    if not isinstance(value, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    ):
        raise HTTPException(
            status_code=422,
            detail={"code": "INVALID_REQUEST", "message": f"'{name}' must be an object of strings"},
        )
    return value


# =============================================================================
# Templates API
# =============================================================================

@api_router.get("")
async def list_templates(request: Request, category: str = "all") -> list[dict[str, Any]]:
    """템플릿 목록."""
    return [meta.to_dict() for meta in _manager(request).list_templates(category)]


@api_router.get("/{template_id}")
async def get_template(request: Request, template_id: str) -> dict[str, Any]:
    """템플릿 상세: 메타데이터 + manifest + 검사 결과."""
    manager = _manager(request)
    meta = manager.get_meta(template_id)
    manifest = manager.get_manifest(template_id)
    text = manager.load_template_text(template_id)
    report = lint_template(text, manifest.get("tokens", {}).keys())

    return {
        **meta.to_dict(),
        "manifest": manifest,
        "placeholders": report.placeholders,
        "lint": report.to_dict(),
    }


@api_router.post("", status_code=201)
async def create_template(
    request: Request,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """
    custom 템플릿 등록.

    body: template_id, template_text, display_name, created_by,
          description?, output_filename?
    """
    for key in ("template_id", "template_text", "display_name"):
        if not isinstance(payload.get(key), str) or not payload[key]:
            raise HTTPException(
                status_code=422,
                detail={"code": "INVALID_REQUEST", "message": f"'{key}' is required"},
            )

    manager = _manager(request)
    manager.create(
        template_id=payload["template_id"],
        template_text=payload["template_text"],
        display_name=payload["display_name"],
        created_by=str(payload.get("created_by", "api")),
        description=str(payload.get("description", "")),
        output_filename=str(payload.get("output_filename", DEFAULT_OUTPUT_FILENAME)),
    )

    report = lint_template(payload["template_text"])
    return {
        **manager.get_meta(payload["template_id"]).to_dict(),
        "warnings": report.warnings(),
    }


@api_router.delete("/{template_id}")
async def delete_template(request: Request, template_id: str) -> dict[str, str]:
    """custom 템플릿 삭제."""
    _manager(request).delete(template_id)
    return {"status": "deleted", "template_id": template_id}


# =============================================================================
# Render API
# =============================================================================

@render_router.post("/{template_id}")
async def render_template(
    request: Request,
    template_id: str,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """
    토큰 테이블로 템플릿 렌더.

    미해결 토큰 → 422 {"detail": {"code": "UNRESOLVED_TOKEN", "token", "line", "column", "missing"}}
    """
    tokens = _require_str_mapping(payload.get("tokens", {}), "tokens")

    text = _manager(request).load_template_text(template_id)
    rendered = render(text, tokens)

    return {
        "template_id": template_id,
        "text": rendered,
        "output_hash": compute_text_hash(rendered),
    }
