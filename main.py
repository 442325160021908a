

#main.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from db import close_pool
from middleware import RequestContextMiddleware, REQUEST_ID_HEADER
from routes.health import router as health_router
from routes.payout_requests import router as payout_requests_router
from routes.roles import router as roles_router
from services.errors import CashbookError, StorageError
from services.observability import configure_logging
from settings import settings, validate_env_settings

logger = logging.getLogger("cashbook")


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)
    validate_env_settings()

    app = FastAPI(title="Cashbook Admin API", version="1.0.0")

    # -----------------------------
    # MIDDLEWARE
    # -----------------------------
    app.add_middleware(RequestContextMiddleware)

    # -----------------------------
    # ROUTERS
    # -----------------------------
    app.include_router(health_router)
    app.include_router(payout_requests_router)
    app.include_router(roles_router)

    @app.exception_handler(CashbookError)
    async def cashbook_error_handler(request: Request, exc: CashbookError):
        if isinstance(exc, StorageError):
            logger.error(
                "storage failure on %s %s",
                request.method,
                request.url.path,
                exc_info=exc.__cause__ or exc,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        response = JSONResponse(
            status_code=500,
            content={"code": "INTERNAL_ERROR", "detail": "Internal server error"},
        )
        # ServerErrorMiddleware sits outside RequestContextMiddleware
        req_id = getattr(request.state, "request_id", None)
        if req_id:
            response.headers[REQUEST_ID_HEADER] = req_id
        return response

    @app.on_event("shutdown")
    def _close_pool() -> None:
        close_pool()

    return app


app = create_app()
