"""Keyed document store for chats: create, find, save.

Each call runs in its own session and commits on its own. There is no
transaction spanning a find and a later save; serialize those in the
caller if two writers may touch the same id.
"""

import logging

from sqlalchemy import update

from porter.storage.database import Database
from porter.storage.models import ChatRecord

logger = logging.getLogger(__name__)


class ChatStore:
    def __init__(self, database: Database) -> None:
        self._db = database

    async def create(self, **fields) -> ChatRecord:
        """Insert a new chat document and return it with its generated id."""
        async with self._db.session() as session:
            record = ChatRecord(**fields)
            session.add(record)
            await session.commit()
            await session.refresh(record)
            logger.debug("Created chat %s", record.id)
            return record

    async def find(self, chat_id: str) -> ChatRecord | None:
        async with self._db.session() as session:
            return await session.get(ChatRecord, chat_id)

    async def save(self, record: ChatRecord) -> None:
        """Write the record's current title, messages and tasks back by id."""
        async with self._db.session() as session:
            await session.execute(
                update(ChatRecord)
                .where(ChatRecord.id == record.id)
                .values(
                    title=record.title,
                    messages=list(record.messages),
                    tasks=list(record.tasks),
                )
            )
            await session.commit()
