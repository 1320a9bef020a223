"""Database models and bootstrap helpers."""

from .db_init import init_db
from .db_models import Base, SlotModel

__all__ = ["Base", "SlotModel", "init_db"]
