"""
Watchlist API — FastAPI application entry point.

Routers are registered here. Each service lives in watchlist/api/.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from watchlist.api import auth, catalog, movies
from watchlist.core.config import settings
from watchlist.core.logging import configure_logging

configure_logging()

app = FastAPI(
    title="Watchlist API",
    description="Backend for the movie watchlist app.",
    version="0.3.0",
    docs_url="/docs" if settings.ENABLE_DOCS else None,
    redoc_url="/redoc" if settings.ENABLE_DOCS else None,
)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(auth.router,    prefix="/auth",    tags=["auth"])
app.include_router(movies.router,  prefix="/movies",  tags=["movies"])
app.include_router(catalog.router, prefix="/catalog", tags=["catalog"])

# ── Posters ───────────────────────────────────────────────────────────────────
app.mount("/media", StaticFiles(directory=settings.MEDIA_ROOT, check_dir=False), name="media")


# ── Health check ──────────────────────────────────────────────────────────────
@app.get("/health", tags=["system"])
def health_check() -> dict:
    """Liveness probe. Returns 200 when the server is up."""
    return {"status": "ok", "version": app.version, "env": settings.APP_ENV}
