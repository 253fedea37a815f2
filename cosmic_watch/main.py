"""
Cosmic Watch application.

Builds the FastAPI app that serves both the JSON API under /api and the
dashboard pages.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cosmic_watch import __version__, api, pages
from cosmic_watch.config import Settings, get_settings
from cosmic_watch.database import Database
from cosmic_watch.feed import build_feed_client
from cosmic_watch.preferences import BrowserPreferences
from cosmic_watch.security import (
    BROWSER_COOKIE,
    BROWSER_COOKIE_MAX_AGE,
    new_browser_id,
    read_browser_id,
    sign_browser_id,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("cosmic_watch")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    logger.info(f"Cosmic Watch starting with {settings.data_source} data source")
    yield
    logger.info("Cosmic Watch shutting down")


def jsonable_errors(exc: RequestValidationError):
    return [{"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()]


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed fields are a plain 400."""
    return JSONResponse(status_code=400, content={"detail": "Missing required fields", "errors": jsonable_errors(exc)})


async def not_found_handler(request: Request, exc: StarletteHTTPException):
    """Unknown page paths get the not-found page; the API keeps JSON errors."""
    if exc.status_code != 404 or request.url.path.startswith("/api"):
        return await http_exception_handler(request, exc)
    prefs = pages.get_preferences(request)
    return pages.render(request, "not_found.html", prefs, status_code=404, message="Lost in the void. This sector does not exist.")


async def browser_cookie_middleware(request: Request, call_next):
    """Give every page visitor a signed browser id; the API is token-only."""
    if request.url.path.startswith("/api"):
        return await call_next(request)

    settings = request.app.state.settings
    browser_id = read_browser_id(request.cookies.get(BROWSER_COOKIE), settings)
    minted = browser_id is None
    if minted:
        browser_id = new_browser_id()
    request.state.browser_id = browser_id

    response = await call_next(request)
    if minted:
        response.set_cookie(
            BROWSER_COOKIE,
            sign_browser_id(browser_id, settings),
            max_age=BROWSER_COOKIE_MAX_AGE,
            httponly=True,
            samesite="lax",
        )
    return response


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Wire settings, storage and the feed client into a fresh app."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Cosmic Watch API",
        description="Near-Earth object dashboard, watchlists and alerts",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = Database(settings.data_file)
    app.state.preferences = BrowserPreferences(settings.preferences_dir)
    app.state.feed_client = build_feed_client(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.middleware("http")(browser_cookie_middleware)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, not_found_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api.router)
    app.include_router(pages.router)

    return app


def run():
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
