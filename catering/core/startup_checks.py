from __future__ import annotations

import logging
from pathlib import Path

from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from catering.core.config import DATABASE_URL, ENV_NORMALIZED, Settings

logger = logging.getLogger(__name__)
MIGRATIONS_PREFIX = "[MIGRATIONS]"
CONFIG_PREFIX = "[CONFIG]"
DEFAULT_JWT_SECRET = "your-super-secret-jwt-key"


def validate_database_environment(env: str = ENV_NORMALIZED, database_url: str = DATABASE_URL) -> None:
    if env in {"prod", "production"} and database_url.startswith("sqlite"):
        logger.critical("%s SQLite is forbidden in production", MIGRATIONS_PREFIX)
        raise RuntimeError("SQLite is forbidden in production environment")


def validate_settings(settings: Settings) -> None:
    """Log configuration gaps; refuse to start production with the default JWT secret."""
    if not settings.admin_password_hash:
        logger.warning("%s ADMIN_PASSWORD_HASH not set, admin login is disabled", CONFIG_PREFIX)
    if settings.jwt_secret == DEFAULT_JWT_SECRET:
        if settings.env.lower() in {"prod", "production"}:
            logger.critical("%s JWT_SECRET must be set in production", CONFIG_PREFIX)
            raise RuntimeError("JWT_SECRET must be set in production")
        logger.warning("%s using the default JWT_SECRET", CONFIG_PREFIX)
    if settings.email_provider == "log":
        logger.warning("%s EMAIL_PROVIDER=log, emails are recorded but not delivered", CONFIG_PREFIX)
    if settings.payment_provider == "mock":
        logger.warning("%s PAYMENT_PROVIDER=mock, invoices are not created in Stripe", CONFIG_PREFIX)
    elif not settings.stripe_webhook_secret:
        logger.warning("%s STRIPE_WEBHOOK_SECRET not set, payments must be marked manually", CONFIG_PREFIX)


def ensure_migrations_applied(*, engine: Engine, alembic_config_path: Path, env: str = ENV_NORMALIZED) -> None:
    """Refuse to serve a database whose Alembic revision is behind the code."""
    if env in {"test", "dev", "development", "local"}:
        logger.info("%s migration check skipped env=%s", MIGRATIONS_PREFIX, env)
        return
    if not alembic_config_path.exists():
        logger.critical("%s missing %s", MIGRATIONS_PREFIX, alembic_config_path)
        raise RuntimeError("alembic config not found")

    scripts = ScriptDirectory.from_config(Config(str(alembic_config_path)))
    code_heads = set(scripts.get_heads())

    with engine.connect() as connection:
        if not inspect(connection).has_table("alembic_version"):
            logger.critical("%s database was never migrated, run `alembic upgrade head`", MIGRATIONS_PREFIX)
            raise RuntimeError("Database has no migration state")
        database_heads = set(MigrationContext.configure(connection).get_current_heads())

    if database_heads != code_heads:
        logger.critical(
            "%s database at %s, code expects %s",
            MIGRATIONS_PREFIX,
            ", ".join(sorted(database_heads)) or "nothing",
            ", ".join(sorted(code_heads)),
        )
        raise RuntimeError("Pending migrations detected")
    logger.info("%s database at head %s", MIGRATIONS_PREFIX, ", ".join(sorted(code_heads)))
