"""FastAPI 애플리케이션 진입점."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from fastapi.responses import JSONResponse, Response
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from app.api import places
from app.api.dependencies import require_service_secret
from app.core.config import Settings, get_settings
from app.core.logger import get_logger
from app.core.logging_config import configure_logging
from app.core.timeout_policy import get_timeout_policy
from app.database import init_db
from app.services.google_places_service import get_google_places_service

configure_logging()
logger = get_logger(__name__)

DOCS_MODES = frozenset({"disabled", "secret", "public"})
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
    "Cache-Control": "no-store",
}


def _csv(value: str) -> list[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


def _docs_mode(settings: Settings) -> str:
    mode = (settings.DOCS_MODE or "").strip().lower()
    if mode not in DOCS_MODES:
        logger.warning("알 수 없는 DOCS_MODE(%s)이므로 문서를 비활성화합니다.", settings.DOCS_MODE)
        return "disabled"
    return mode


@asynccontextmanager
async def lifespan(app_: FastAPI):
    """기동 시 테이블을 준비하고, 종료 시 외부 API 세션을 닫습니다."""
    await asyncio.to_thread(init_db)
    logger.info("Database tables are ready")
    yield
    if get_google_places_service.cache_info().currsize:
        provider = get_google_places_service()
        if provider is not None:
            provider.close()
        get_google_places_service.cache_clear()


def _install_network_middlewares(app_: FastAPI, settings: Settings) -> None:
    """프록시 헤더, 허용 호스트, CORS 미들웨어를 설정값에 따라 붙입니다."""
    if settings.PROXY_HEADERS_ENABLED:
        app_.add_middleware(
            ProxyHeadersMiddleware,
            trusted_hosts=_csv(settings.PROXY_TRUSTED_HOSTS) or ["127.0.0.1"],
        )

    if allowed_hosts := _csv(settings.TRUSTED_HOSTS):
        app_.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)

    origins = _csv(settings.CORS_ALLOW_ORIGINS)
    if not origins:
        return
    allow_credentials = settings.CORS_ALLOW_CREDENTIALS
    if allow_credentials and "*" in origins:
        logger.warning("와일드카드 origin에는 자격 증명을 허용할 수 없어 CORS_ALLOW_CREDENTIALS를 무시합니다.")
        allow_credentials = False
    app_.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=_csv(settings.CORS_ALLOW_METHODS) or ["GET"],
        allow_headers=_csv(settings.CORS_ALLOW_HEADERS) or ["Authorization", "Content-Type"],
    )


def _install_http_middlewares(app_: FastAPI, settings: Settings) -> None:
    """요청 타임아웃과 보안 헤더 미들웨어를 붙입니다."""
    request_timeout = get_timeout_policy(settings).request_timeout_seconds

    @app_.middleware("http")
    async def enforce_request_timeout(request: Request, call_next) -> Response:
        try:
            return await asyncio.wait_for(call_next(request), timeout=request_timeout)
        except TimeoutError:
            logger.warning("Request exceeded %ds: %s %s", request_timeout, request.method, request.url.path)
            return JSONResponse(status_code=504, content={"detail": "요청 처리 시간이 초과되었습니다."})

    @app_.middleware("http")
    async def add_security_headers(request: Request, call_next) -> Response:
        response = await call_next(request)
        if not settings.SECURITY_HEADERS_ENABLED:
            return response
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        if settings.ENABLE_HSTS and request.url.scheme == "https":
            response.headers.setdefault("Strict-Transport-Security", f"max-age={settings.HSTS_MAX_AGE_SECONDS}")
        return response


def _install_secret_docs(app_: FastAPI) -> None:
    """서비스 시크릿 헤더가 있어야 열리는 문서 경로를 등록합니다."""
    guarded = [Depends(require_service_secret)]

    @app_.get("/openapi.json", include_in_schema=False, dependencies=guarded)
    def openapi_json() -> JSONResponse:
        return JSONResponse(app_.openapi())

    @app_.get("/docs", include_in_schema=False, dependencies=guarded)
    def swagger_ui() -> Response:
        return get_swagger_ui_html(openapi_url="/openapi.json", title=f"{app_.title} - Swagger UI")

    @app_.get("/redoc", include_in_schema=False, dependencies=guarded)
    def redoc_ui() -> Response:
        return get_redoc_html(openapi_url="/openapi.json", title=f"{app_.title} - ReDoc")


def create_app(settings: Settings | None = None) -> FastAPI:
    """설정에 맞춰 애플리케이션을 조립합니다."""
    settings = settings or get_settings()
    docs_mode = _docs_mode(settings)
    public_docs = docs_mode == "public"

    app_ = FastAPI(
        title="SnapPoint Place Engine",
        docs_url="/docs" if public_docs else None,
        redoc_url="/redoc" if public_docs else None,
        openapi_url="/openapi.json" if public_docs else None,
        lifespan=lifespan,
    )
    _install_network_middlewares(app_, settings)
    _install_http_middlewares(app_, settings)
    app_.include_router(places.router)
    if docs_mode == "secret":
        _install_secret_docs(app_)

    @app_.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
        detail = str(exc) if settings.EXPOSE_INTERNAL_ERRORS else "내부 서버 오류가 발생했습니다."
        return JSONResponse(status_code=500, content={"detail": detail})

    @app_.get("/")
    def health_check() -> dict:
        """헬스 체크 엔드포인트."""
        return {"status": "ok", "message": "SnapPoint Place Engine is running"}

    return app_


app = create_app()
