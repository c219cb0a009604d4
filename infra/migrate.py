# infra/migrate.py
from __future__ import annotations
import logging
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

from infra.db.base import resolve_db_url

logger = logging.getLogger(__name__)


def _app_dir() -> Path:
    """
    Directory the running code lives in:
    - frozen builds: the unpacked bundle (sys._MEIPASS) or the executable's folder;
    - source checkout: the project root (infra -> project root).
    """
    if getattr(sys, "frozen", False):
        meipass = getattr(sys, "_MEIPASS", None)
        if meipass:
            return Path(meipass).resolve()
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


def migration_dir() -> Path:
    app_dir = _app_dir()
    candidates = [app_dir / "migration", app_dir / "_internal" / "migration"]
    for c in candidates:
        if c.exists():
            return c
    raise RuntimeError(
        "Alembic script_location missing. Tried the following locations: "
        + ", ".join(str(p) for p in candidates)
    )


def run_migrations(db_url: str | None = None) -> None:
    script_location = migration_dir()
    alembic_ini = script_location / "alembic.ini"
    if not alembic_ini.exists():
        raise RuntimeError(f"Alembic config missing: {alembic_ini}")

    url = db_url or resolve_db_url()
    cfg = Config(str(alembic_ini))
    cfg.set_main_option("script_location", str(script_location))
    # configparser interpolation treats % specially
    cfg.set_main_option("sqlalchemy.url", url.replace("%", "%%"))

    logger.info("Upgrading schema at %s to head", url)
    command.upgrade(cfg, "head")
