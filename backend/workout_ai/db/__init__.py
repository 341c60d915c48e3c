from workout_ai.db.base import Base
from workout_ai.db.session import engine, get_db, init_db

__all__ = ["Base", "engine", "get_db", "init_db"]
