"""
FastAPI Application Entry Point
Main application setup and route registration
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import Optional
from databases import Database
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.config import Settings, settings as default_settings
from app.database import create_database, connect_db, disconnect_db
from app.db_init import initialize_database
from app.routes import auth, users, items, transactions, messages, bookmarks, organizations, events, payments, health

logger = logging.getLogger(__name__)

ERROR_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    502: "payment_provider_error",
}


def setup_logging(level: str) -> None:
    """Configure root logging once for the whole process"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("databases").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("stripe").setLevel(logging.WARNING)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request"""
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logging.getLogger("app.access").info(
            "%s %s %d %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response


def error_body(status_code: int, message: str, details=None) -> dict:
    body = {"error": ERROR_CODES.get(status_code, "error"), "message": message}
    if details is not None:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure with the same {"error", "message"} envelope"""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        body = error_body(400, "Request validation failed", jsonable_encoder(exc.errors()))
        body["error"] = "validation_error"
        return JSONResponse(status_code=400, content=body)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "internal_error", "message": "Internal server error"},
        )


def create_app(config: Settings = default_settings, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application

    The database handle is created here (or passed in) and stored on
    app.state; routes receive it through the get_database dependency.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(config.LOG_LEVEL)
        await connect_db(app.state.database)
        await initialize_database(app.state.database, with_seed=config.SEED_DATA)
        logger.info("%s started in %s mode", config.APP_NAME, config.APP_ENV)
        yield
        await disconnect_db(app.state.database)
        logger.info("Shutdown complete")

    app = FastAPI(
        title=config.APP_NAME,
        description="Campus clothing marketplace",
        version="1.0.0",
        debug=config.DEBUG,
        lifespan=lifespan
    )
    app.state.database = database if database is not None else create_database(config)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(items.router, prefix="/api/items", tags=["Items"])
    app.include_router(transactions.router, prefix="/api/transactions", tags=["Transactions"])
    app.include_router(messages.router, prefix="/api/messages", tags=["Messages"])
    app.include_router(bookmarks.router, prefix="/api/bookmarks", tags=["Bookmarks"])
    app.include_router(organizations.router, prefix="/api/organizations", tags=["Organizations"])
    app.include_router(events.router, prefix="/api/events", tags=["Events"])
    app.include_router(payments.router, prefix="/api/payments", tags=["Payments"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.DEBUG
    )
