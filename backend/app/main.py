import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.middleware.exceptions import register_exception_handlers
from app.routers import backup, cards, health, invoices
from app.utils.numbering import close_redis

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("kartat")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Kartat starting (%s, counters=%s)",
        settings.environment, settings.card_counter_backend,
    )
    yield
    await close_redis()
    logger.info("Kartat stopped")


app = FastAPI(
    title="Kartat",
    description="Produce intake cards, Arabic name search and farmer settlement invoices",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(cards.router, prefix="/api/cards", tags=["cards"])
app.include_router(invoices.router, prefix="/api/invoices", tags=["invoices"])
app.include_router(backup.router, prefix="/api/backup", tags=["backup"])
