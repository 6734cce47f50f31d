"""
main.py – FastAPI app entry point (slim wire-up only).
Connects routes, middleware, error handlers and the lifespan. No business logic.
"""
import logging
from contextlib import asynccontextmanager
from dotenv import load_dotenv
load_dotenv()

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import VERSION, Settings
from .core.errors import MESSAGES
from .core.seeder import FoodSeeder
from .db.migrate import run_migrations
from .db.session import dispose_all, ensure_database_dir
from .deps import get_settings, get_store
from .middleware import (
    SECURITY_HEADERS,
    RateLimitMiddleware,
    ResponseCacheMiddleware,
    SecurityHeadersMiddleware,
    Utf8ContentTypeMiddleware,
)
from .routes import foods, system

logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    store = get_store()

    logger.info(f"Opening database {settings.core.database_url}…")
    ensure_database_dir(settings.core.database_url)
    run_migrations(store.engine)

    report = await FoodSeeder(store, settings.core.seed_dir).run()
    logger.info(f"Ready ({report.inserted} new foods). Serving on {settings.api.base_url}")
    yield
    dispose_all()
    logger.info("Shutdown.")


# ── Error envelopes ────────────────────────────────────────────────────────────

def _error(status: int, message: str) -> JSONResponse:
    # Unhandled errors are answered outside the middleware stack, so stamp headers here too
    return JSONResponse(
        status_code=status,
        content={"status": status, "message": message},
        headers=SECURITY_HEADERS,
        media_type="application/json; charset=utf-8",
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        # Unknown route, not a missing food
        return _error(404, MESSAGES["not_found"])
    return _error(exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug(f"Rejected {request.url.path}: {exc.errors()}")
    return _error(400, MESSAGES["invalid_request"])


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error(500, MESSAGES["internal"])


# ── App factory ────────────────────────────────────────────────────────────────

def create_app(settings: Settings) -> FastAPI:
    app = FastAPI(
        title="Food Catalog API",
        description="Read-only nutrition catalog: lookup, listing and ranked search.",
        version=VERSION,
        lifespan=lifespan,
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # add_middleware stacks outward: the last one added sees the request first
    app.add_middleware(ResponseCacheMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
        max_age=3600,
    )
    app.add_middleware(Utf8ContentTypeMiddleware)

    app.include_router(system.router, prefix=settings.route_prefix)
    app.include_router(foods.router, prefix=settings.route_prefix)
    return app


app = create_app(get_settings())


def run() -> None:
    settings = get_settings()
    uvicorn.run("food_api.main:app", host=settings.api.host, port=settings.api.port)


if __name__ == "__main__":
    run()
