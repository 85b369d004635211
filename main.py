import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from utils.logger import setup_logging
from stores import AkindoClient
from routes import pages_router, tools_router, wave_hacks_router

# ──────────────────────────────────────────────
#  Logging
# ──────────────────────────────────────────────

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────
#  Lifespan (startup / shutdown)
# ──────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the upstream client on startup, close it on teardown."""
    logger.info("Starting up — connecting to Akindo API...")
    client = AkindoClient(
        base_url=settings.akindo_api_url,
        timeout=settings.request_timeout,
        retry_limit=settings.retry_limit,
        retry_backoff=settings.retry_backoff,
    )
    await client.connect()
    app.state.akindo_client = client

    yield  # App is running

    logger.info("Shutting down — closing upstream client...")
    await client.close()
    logger.info("Shutdown complete")


# ──────────────────────────────────────────────
#  App
# ──────────────────────────────────────────────

app = FastAPI(
    title="Wave Hacks Viewer",
    description="Web pages, JSON API and chat-assistant tools over the Akindo Wave Hacks API",
    version=settings.server_version,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(wave_hacks_router)
app.include_router(tools_router)
app.include_router(pages_router)


# Health check
@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "ok"}


# ──────────────────────────────────────────────
#  Run with: uvicorn main:app --reload
# ──────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.app_env == "development",
    )
