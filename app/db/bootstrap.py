# app/db/bootstrap.py
import logging
import os
from alembic import command
from alembic.config import Config

from app.core.config import settings
from app.db.session import SessionLocal
from app.db.init_db import init_db
from app.services.auth import purge_expired

logger = logging.getLogger(__name__)

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

def run_migrations_and_seed() -> None:
    cfg = Config(os.path.join(BASE_DIR, "alembic.ini"))
    cfg.set_main_option("script_location", os.path.join(BASE_DIR, "migrations"))
    command.upgrade(cfg, "head")

    with SessionLocal() as db:
        if settings.SEED_DEMO_DATA and not settings.is_production:
            init_db(db)
        n = purge_expired(db)
        if n:
            logger.info("purged %d expired refresh tokens", n)
