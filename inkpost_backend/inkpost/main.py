from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import redis.asyncio as redis
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.v1.endpoints import posts, users
from .core import config
from .core.errors import AppError
from .core.logging import configure_logging
from .core.memory_redis import AsyncMemoryRedis
from .core.store import BlogStore
from .core.uploads import FileArea


log = structlog.get_logger(__name__)


def _build_redis_client() -> Any:
    if config.use_memory_store():
        log.info("store_backend", backend="memory")
        return AsyncMemoryRedis()
    log.info("store_backend", backend="redis", url=config.get_redis_url())
    return redis.from_url(config.get_redis_url(), decode_responses=True)


@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore[override]
    if config.get_jwt_secret() == config.DEV_JWT_SECRET:
        log.warning("jwt_secret_unset", hint="set JWT_SECRET outside development")
    app.state.files.ensure()
    store = BlogStore(_build_redis_client())
    try:
        await store.ping()
    except redis.RedisError as e:
        # keep booting; requests touching the store will fail with 500
        log.warning("store_unreachable", error=str(e))
    app.state.store = store
    yield
    app.state.store = None
    await store.close()


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("request_failed", path=request.url.path, status=exc.status_code, message=exc.message)
    return JSONResponse({"message": exc.message}, status_code=exc.status_code)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Not Found - {request.url.path}"
    else:
        message = str(exc.detail)
    return JSONResponse({"message": message}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse({"message": message}, status_code=422)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled_error", path=request.url.path)
    return JSONResponse({"message": "An unknown error occurred"}, status_code=500)


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Inkpost Backend", version="0.1.0", lifespan=lifespan)
    app.state.files = FileArea(config.get_upload_dir())
    app.state.store = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    @app.get("/healthz")
    async def healthz() -> dict[str, Any]:
        status: dict[str, Any] = {"ok": True}
        store = app.state.store
        if store is None:
            status["store"] = {"connected": False, "message": "store not initialized"}
            return status
        try:
            status["store"] = {"connected": await store.ping()}
        except redis.RedisError as e:  # pragma: no cover - diagnostic only
            status["store"] = {"connected": False, "error": str(e)}
        return status

    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(posts.router, prefix="/api/posts", tags=["posts"])
    app.mount("/uploads", StaticFiles(directory=app.state.files.root, check_dir=False), name="uploads")
    return app


app = create_app()
