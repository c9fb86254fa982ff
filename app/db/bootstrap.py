# app/db/bootstrap.py
import os
from alembic import command
from alembic.config import Config

from app.core.config import settings
from app.core.logging import get_logger
from app.db.session import SessionLocal
from app.db.init_db import init_db

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
log = get_logger(__name__)

def run_migrations_and_seed() -> None:
    # explicit paths so it works from any working directory
    cfg = Config(os.path.join(BASE_DIR, "alembic.ini"))
    cfg.set_main_option("script_location", os.path.join(BASE_DIR, "migrations"))

    command.upgrade(cfg, "head")
    log.info("migrations_applied")

    with SessionLocal() as db:
        init_db(db, settings)
