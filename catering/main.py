import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catering.core.config import AUTO_CREATE_TABLES, BUSINESS_NAME, DATABASE_URL, ENV
from catering.core.database import Base, engine
from catering.core.error_handlers import register_error_handlers
from catering.core.logging_setup import configure_logging
from catering.core.startup_checks import ensure_migrations_applied, validate_database_environment, validate_settings
from catering.deps import get_settings
from catering.middleware.observability import ObservabilityMiddleware
import catering.models  # registers every table on Base.metadata before create_all
from catering.routers.admin_auth import router as admin_auth_router
from catering.routers.admin_menu import router as admin_menu_router
from catering.routers.admin_orders import router as admin_orders_router
from catering.routers.admin_promo_codes import router as admin_promo_codes_router
from catering.routers.internal_metrics import router as internal_metrics_router
from catering.routers.menu import router as menu_router
from catering.routers.orders import router as orders_router
from catering.routers.webhooks import router as webhooks_router
from catering.services.notifications import shutdown_default_executor

configure_logging()

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"
REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini")))


def _startup_tasks() -> None:
    try:
        validate_database_environment()
        validate_settings(get_settings())
        if AUTO_CREATE_TABLES and DATABASE_URL.startswith("sqlite"):
            Base.metadata.create_all(bind=engine)
        ensure_migrations_applied(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
    except Exception:
        logger.exception("%s ERROR startup failed", STARTUP_PREFIX)
        raise
    logger.info("%s ready env=%s", STARTUP_PREFIX, ENV)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield
    shutdown_default_executor()


app = FastAPI(
    title=f"{BUSINESS_NAME} Catering API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)
register_error_handlers(app, expose_errors=get_settings().is_dev)

app.include_router(menu_router)
app.include_router(orders_router)
app.include_router(admin_auth_router)
app.include_router(admin_orders_router)
app.include_router(admin_menu_router)
app.include_router(admin_promo_codes_router)
app.include_router(webhooks_router)
app.include_router(internal_metrics_router)


@app.get("/api/health")
def health():
    return {
        "status": "ok",
        "message": f"{BUSINESS_NAME} API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
