"""
Runtime configuration read from environment variables.

A ``.env`` file in the project root is loaded once at import time (existing
variables win). Getters read ``os.environ`` on every call so the launcher and
the tests can change settings without reloading modules.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

PACKAGE_DIR = Path(__file__).parent
PROJECT_ROOT = PACKAGE_DIR.parent

env_file = PROJECT_ROOT / ".env"
if env_file.exists():
    load_dotenv(dotenv_path=env_file, override=False)

DEFAULT_ADMIN_PASSWORD = "5123"
DEFAULT_SECRET = "CHANGE_ME_SET_JWT_SECRET"


def get_data_dir() -> str:
    return os.environ.get("MEDREF_DATA_DIR") or str(PACKAGE_DIR)


def get_db_path() -> str:
    explicit = os.environ.get("MEDREF_DB_PATH")
    if explicit:
        return explicit
    return os.path.join(get_data_dir(), "medref.db")


def get_admin_password() -> str:
    return os.environ.get("ADMIN_PASSWORD") or DEFAULT_ADMIN_PASSWORD


def get_secret() -> str:
    return os.environ.get("MEDREF_SECRET") or os.environ.get("JWT_SECRET") or DEFAULT_SECRET


def get_host() -> str:
    return os.environ.get("MEDREF_HOST", "127.0.0.1")


def get_port() -> int:
    try:
        return int(os.environ.get("MEDREF_PORT", "5000"))
    except ValueError:
        return 5000


def get_log_level() -> str:
    return os.environ.get("MEDREF_LOG_LEVEL", "INFO").upper()
