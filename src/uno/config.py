"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, database_url="sqlite:///app.db")
    """

    # Development server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    log_level: str = "info"

    # Views
    template_dir: str | Path = "templates"

    # Data access
    database_url: str | None = None
    sql_dir: str | Path = "sql"
    db_echo: bool = False  # Print every statement with timing to stderr

    # Sessions (signed cookies, disabled while secret_key is empty)
    secret_key: str = ""
    session_cookie: str = "uno_session"
    session_max_age: int = 86400  # 24 hours
