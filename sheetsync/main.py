import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sheetsync.config import settings
from sheetsync.database import close_db, init_db
from sheetsync.routers import sync

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    settings.EXCEL_DIR.mkdir(parents=True, exist_ok=True)
    await init_db()
    logger.info("Workbooks are read from and written to %s", settings.EXCEL_DIR)
    yield
    # Shutdown
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register all routers under /api/v1
API_PREFIX = "/api/v1"
app.include_router(sync.router, prefix=API_PREFIX)


@app.get("/health")
async def health_check() -> dict:
    return {"status": "ok", "version": settings.APP_VERSION}
