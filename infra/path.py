# infra/path.py
from __future__ import annotations
import os
import sys
from pathlib import Path

APP_NAME = "PMSchedulingEngine"
COMPANY_NAME = "TECHASH"


def user_data_dir() -> Path:
    """
    Per-user data directory (logs, default SQLite database).

    Honours PM_DATA_DIR when set, otherwise:
        Windows: %APPDATA%\\TECHASH\\PMSchedulingEngine
        macOS:   ~/Library/Application Support/TECHASH/PMSchedulingEngine
        Linux:   $XDG_DATA_HOME/TECHASH/PMSchedulingEngine
    """
    override = (os.getenv("PM_DATA_DIR") or "").strip()
    if override:
        path = Path(override)
    elif sys.platform.startswith("win"):
        path = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming")) / COMPANY_NAME / APP_NAME
    elif sys.platform == "darwin":
        path = Path.home() / "Library" / "Application Support" / COMPANY_NAME / APP_NAME
    else:
        path = Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share")) / COMPANY_NAME / APP_NAME
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_db_path() -> Path:
    return user_data_dir() / "schedule.db"
