# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException
from starlette.staticfiles import StaticFiles

from castrelay.logging import logger
from castrelay.middlewares.correlation_id import CorrelationIDMiddleware
from castrelay.routing import collect_subrouters
from castrelay.settings import app_settings


class SinglePageStaticFiles(StaticFiles):
    """Static files that serve `index.html` for unknown paths."""

    async def get_response(self, path, scope):
        try:
            return await super().get_response(path, scope)
        except HTTPException as ex:
            if ex.status_code != 404:
                raise
            return await super().get_response("index.html", scope)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup only logs the effective keep-alive timing. Shutdown cancels
    Host claims still waiting out their grace period, so no task outlives
    the event loop.
    """
    logger.info(
        f"Application startup: ws ping interval {app_settings.WS_PING_INTERVAL}s, "
        f"timeout {app_settings.WS_PING_TIMEOUT}s, "
        f"host grace period {app_settings.host_grace_period}s"
    )

    yield

    logger.info("Application shutdown initiated")

    from castrelay.managers.host_arbiter import host_arbiter

    await host_arbiter.shutdown()
    logger.info("Application shutdown complete")


def application() -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    - Routers are collected from `api/http` and `api/ws/consumers` by
      `collect_subrouters()`.
    - `CORSMiddleware` allows the origins in `ALLOWED_ORIGINS`.
    - `CorrelationIDMiddleware` tags HTTP requests for logging.
    - When `STATIC_DIR` is set, the browser client is served from it at
      "/" with `index.html` as fallback for unknown paths.
    """
    app = FastAPI(
        title="castrelay",
        description="Signaling relay between one Host and many Viewers",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(collect_subrouters())

    # Middlewares (execute in REVERSE order of registration)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.ALLOWED_ORIGINS,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIDMiddleware)

    if app_settings.STATIC_DIR:
        if os.path.isdir(app_settings.STATIC_DIR):
            app.mount(
                "/",
                SinglePageStaticFiles(
                    directory=app_settings.STATIC_DIR, html=True
                ),
                name="static",
            )
            logger.info(f"Serving static files from {app_settings.STATIC_DIR}")
        else:
            logger.warning(
                f"STATIC_DIR {app_settings.STATIC_DIR} is not a directory, "
                "static files disabled"
            )

    return app


app = application()  # Need for fastapi cli
