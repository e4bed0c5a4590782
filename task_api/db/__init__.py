"""Database package"""

from task_api.db.base import Base
from task_api.db.session import dispose_engine, get_db, get_engine, init_db

__all__ = ["Base", "dispose_engine", "get_db", "get_engine", "init_db"]
