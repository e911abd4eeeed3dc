from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hackjudge.logging import configure_logging
from hackjudge.settings import get_settings

from hackjudge.api.routes_analyze import router as analyze_router
from hackjudge.api.routes_evaluate import router as evaluate_router
from hackjudge.api.routes_health import router as health_router
from hackjudge.api.routes_meetings import router as meetings_router
from hackjudge.api.routes_parse import router as parse_router
from hackjudge.api.routes_session import router as session_router
from hackjudge.api.routes_submissions import router as submissions_router

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors or any(err.get("type") == "missing" for err in errors):
        return "Missing required fields"
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return f"Invalid request: {loc}: {first.get('msg', 'invalid value')}"


def _install_error_handlers(app: FastAPI) -> None:
    # Every error leaves the API as {"success": false, "error": "..."}.

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"success": False, "error": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error. path=%s", request.url.path)
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc) or "Internal server error"})


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    # Validate configuration and fail fast if critical errors found
    settings.validate_and_fail_fast()

    app = FastAPI(
        title="Hackathon Judge Service",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    _install_error_handlers(app)

    app.include_router(health_router)
    app.include_router(session_router)
    app.include_router(meetings_router)
    app.include_router(submissions_router)
    app.include_router(parse_router)
    app.include_router(analyze_router)
    app.include_router(evaluate_router)
    return app


app = create_app()
