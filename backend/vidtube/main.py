# vidtube/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vidtube.config import settings
from vidtube.core.db import init_db, close_db
from vidtube.core.errors import register_exception_handlers
from vidtube.core.bootstrap import run_startup_reconciliation

from vidtube.api.v1.routers import (
    comments,
    dashboard,
    healthcheck,
    likes,
    playlists,
    subscriptions,
    tweets,
    users,
    videos,
)

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Every error leaves as {statusCode, success: false, message, errors, data: null}
register_exception_handlers(app)


@app.on_event("startup")
async def on_startup():
    await init_db()
    summary = await run_startup_reconciliation()
    logger.info("[startup] reconciliation done: %s", summary)


@app.on_event("shutdown")
async def on_shutdown():
    await close_db()


# REST
app.include_router(healthcheck.router, prefix="/api/v1")
app.include_router(users.router, prefix="/api/v1")
app.include_router(videos.router, prefix="/api/v1")
app.include_router(comments.router, prefix="/api/v1")
app.include_router(likes.router, prefix="/api/v1")
app.include_router(subscriptions.router, prefix="/api/v1")
app.include_router(playlists.router, prefix="/api/v1")
app.include_router(tweets.router, prefix="/api/v1")
app.include_router(dashboard.router, prefix="/api/v1")


@app.get("/healthz")
def healthz():
    return {"ok": True}
