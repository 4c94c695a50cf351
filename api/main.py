from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from comments import router as comments_router
from core.logs import configure_logging
from core.settings import Settings, load_settings
from likes import router as likes_router
from storage import Storage, StorageError, create_storage
from users import router as users_router
from videos import router as videos_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Open the store once per process.
    storage: Storage = app.state.storage
    await storage.start()
    logger.info("storage_started backend=%s", type(storage).__name__)
    try:
        yield
    finally:
        await storage.close()


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("storage_failure method=%s path=%s error=%s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Storage failure."},
    )


def create_app(settings: Settings | None = None, storage: Storage | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="short-video feed api", lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = storage or create_storage(settings)

    # Allow the frontend dev server to call this API from the browser.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StorageError, storage_error_handler)

    app.include_router(videos_router.router, tags=["videos"])
    app.include_router(users_router.router, tags=["users"])
    app.include_router(comments_router.router, tags=["comments"])
    app.include_router(likes_router.router, tags=["likes"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
