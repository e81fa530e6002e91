# shop_service/main.py
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from shop_service.api import api_router
from shop_service.api.responses import error_response, success_response
from shop_service.config import Settings, load_settings
from shop_service.db.database import make_engine, make_sessionmaker
from shop_service.db.init_db import init_db
from shop_service.exceptions import ServiceError

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else err.get("msg", "invalid value"))
    return "Invalid input: " + "; ".join(parts) if parts else "Invalid input"


def register_exception_handlers(app: FastAPI):
    """Every error leaves the service in the response envelope."""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        logger.debug("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.message)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(status.HTTP_400_BAD_REQUEST, _validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def create_app(settings: Optional[Settings] = None, engine=None) -> FastAPI:
    """Build the application.

    Settings are resolved once here and kept on ``app.state``; the token
    secret reaches the auth code only through them. ``engine`` lets tests
    supply their own database.
    """
    if settings is None:
        settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if engine is None:
        engine = make_engine(settings.database_url, echo=settings.db_echo)

    # Tables are created on startup
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        await init_db(engine)
        logger.info("Database ready")
        yield
        await engine.dispose()

    app = FastAPI(title="Shop API", version="1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = make_sessionmaker(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = (time.perf_counter() - start) * 1000
        logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed)
        return response

    register_exception_handlers(app)
    app.include_router(api_router)

    @app.get("/")
    async def health_check():
        """Health check."""
        return success_response({"status": "shop_service running"})

    return app


def run():
    import uvicorn

    settings = load_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
