"""SQL access for uno.

SQL text in, dicts / dataclasses / Models out. Not an ORM.

Basic usage::

    from uno.data import Database

    db = Database("sqlite:///app.db", sql_dir="sql")

    dao = db.dao()
    users = dao.sql(f"SELECT * FROM users WHERE id IN ({dao.bind([1, 2, 3])})").list()

    dao = db.dao()
    user = dao.file("users/by_email", {"email": dao.bind(email)}).one(User)
"""

from uno.data.dao import Dao
from uno.data.database import Database
from uno.data.errors import (
    DataError,
    InsecureFileAccess,
    PendingStatement,
    QueryError,
    TooManyRows,
    UnknownBinder,
    UnsafeIdentifier,
)
from uno.data.escaping import ParamType, ansi_style_escaper, mysql_style_escaper

__all__ = [
    "Dao",
    "DataError",
    "Database",
    "InsecureFileAccess",
    "ParamType",
    "PendingStatement",
    "QueryError",
    "TooManyRows",
    "UnknownBinder",
    "UnsafeIdentifier",
    "ansi_style_escaper",
    "mysql_style_escaper",
]
