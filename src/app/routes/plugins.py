"""
Plugins Routes: 플러그인 설정 → 진입 파일 생성.

- POST /api/plugins → 미리보기 (기본, 파일 쓰기 없음)
- POST /api/plugins?write=true → settings.output_dir에 저장

Run Log: 항상 저장 (성공/실패 모두)
"""

from typing import Any

from fastapi import APIRouter, Body, HTTPException, Request

from src.domain.schemas import PluginConfig
from src.render.plugin import PluginGenerator

api_router = APIRouter()


@api_router.post("")
async def generate_plugin(
    request: Request,
    payload: dict[str, Any] = Body(...),
    write: bool = False,
    overwrite: bool = False,
) -> dict[str, Any]:
    """
    플러그인 진입 파일 생성.

    body: PluginConfig 필드 + template_id? + tokens? (추가 토큰)
    """
    settings = request.app.state.settings

    extra_tokens = payload.get("tokens") or {}
    if not isinstance(extra_tokens, dict):
        raise HTTPException(
            status_code=422,
            detail={"code": "INVALID_REQUEST", "message": "'tokens' must be an object"},
        )

    config = PluginConfig.from_dict(payload)
    generator = PluginGenerator(
        request.app.state.template_manager,
        output_dir=settings.output_dir,
        logs_dir=settings.logs_dir,
        lock_timeout=settings.lock_timeout,
    )

    result = generator.generate(
        config,
        template_id=payload.get("template_id") or settings.default_template,
        extra_tokens={str(k): str(v) for k, v in extra_tokens.items()},
        overwrite=overwrite,
        dry_run=not write,
    )
    return result.to_dict()
