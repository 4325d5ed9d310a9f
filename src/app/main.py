"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uv run uvicorn src.app.main:app --reload
- 프로덕션: uv run uvicorn src.app.main:app
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.app.routes import plugins, templates
from src.core.config import load_settings
from src.domain.errors import ErrorCodes, ScaffoldError
from src.templates.manager import TemplateManager

# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    애플리케이션 생명주기 관리.

    시작 시: 설정 로드, 템플릿 저장소 초기화
    """
    # 테스트에서 미리 주입한 설정은 유지
    if not hasattr(app.state, "settings"):
        app.state.settings = load_settings()
    app.state.template_manager = TemplateManager(app.state.settings.templates_root)

    yield


# =============================================================================
# App Instance
# =============================================================================

app = FastAPI(
    title="WordPress Plugin Scaffolder",
    description="[TOKEN] 템플릿 → WordPress 플러그인 진입 파일 생성",
    version="0.1.0",
    lifespan=lifespan,
)


# =============================================================================
# Error Handlers
# =============================================================================

# 에러 코드 → HTTP 상태
ERROR_STATUS = {
    ErrorCodes.UNRESOLVED_TOKEN: 422,
    ErrorCodes.MALFORMED_PLACEHOLDER: 422,
    ErrorCodes.INVALID_CONFIG: 422,
    ErrorCodes.INVALID_OUTPUT_PATH: 422,
    ErrorCodes.INVALID_TEMPLATE_ID: 400,
    ErrorCodes.TEMPLATE_NOT_FOUND: 404,
    ErrorCodes.TEMPLATE_EXISTS: 409,
    ErrorCodes.DELETE_NOT_ALLOWED: 409,
    ErrorCodes.OUTPUT_EXISTS: 409,
    ErrorCodes.TEMPLATE_LOCK_TIMEOUT: 503,
    ErrorCodes.OUTPUT_LOCK_TIMEOUT: 503,
}


@app.exception_handler(ScaffoldError)
async def scaffold_error_handler(request: Request, exc: ScaffoldError) -> JSONResponse:
    """ScaffoldError → {"detail": {code, ...context}}."""
    return JSONResponse(
        status_code=ERROR_STATUS.get(exc.code, 500),
        content={"detail": exc.to_dict()},
    )


# =============================================================================
# Routes
# =============================================================================

app.include_router(templates.api_router, prefix="/api/templates", tags=["Templates API"])
app.include_router(templates.render_router, prefix="/api/render", tags=["Render API"])
app.include_router(plugins.api_router, prefix="/api/plugins", tags=["Plugins API"])


# =============================================================================
# Root Endpoints
# =============================================================================


@app.get("/")
async def root() -> dict[str, Any]:
    """엔드포인트 목록."""
    return {
        "message": "WordPress Plugin Scaffolder",
        "endpoints": {
            "templates": "/api/templates",
            "render": "/api/render/{template_id}",
            "plugins": "/api/plugins",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    """헬스 체크."""
    return {"status": "ok"}


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
