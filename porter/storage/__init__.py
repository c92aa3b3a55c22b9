"""Storage module: async database, chat ORM model, and keyed document store."""

from porter.storage.database import Database
from porter.storage.documents import ChatStore
from porter.storage.models import Base, ChatRecord

__all__ = ["Base", "ChatRecord", "ChatStore", "Database"]
