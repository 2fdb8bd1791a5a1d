"""Database factory functions."""

from pathlib import Path
from typing import Optional

from moneymngr.config import get_settings
from moneymngr.database.sqlalchemy_db import SQLAlchemyDatabase
from moneymngr.utils.log import get_logger

log = get_logger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".moneymngr"


def default_database_path() -> Path:
    """Location of the ledger when nothing else is configured."""
    DEFAULT_DATA_DIR.mkdir(parents=True, exist_ok=True)
    return DEFAULT_DATA_DIR / "moneymngr.db"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite-backed ledger store.

    Args:
        database_path: SQLite file, or ":memory:". Falls back to
            MONEYMNGR_DB_PATH, then ~/.moneymngr/moneymngr.db
    """
    path = database_path or get_settings().db_path or str(default_database_path())
    if path != ":memory:":
        Path(path).expanduser().parent.mkdir(parents=True, exist_ok=True)
        path = str(Path(path).expanduser())
    log.debug("database_opened", path=path)
    return SQLAlchemyDatabase(f"sqlite:///{path}")
