from planrun.db.base import Base
from planrun.db.session import async_session_maker, close_db, get_db, init_db

__all__ = ["Base", "async_session_maker", "close_db", "get_db", "init_db"]
