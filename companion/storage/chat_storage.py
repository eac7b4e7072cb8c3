from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

import aiosqlite

from companion.models import PetMemory, TimeInfo, utc_now_iso

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ChatMessage:
    id: int
    user_id: str
    pet_id: str
    role: str
    content: str
    created_at: str
    emotion: str | None = None
    emotion_score: float | None = None


class ChatStorage:
    def __init__(self, db_path: str | Path = "data/petalk.db") -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @asynccontextmanager
    async def _connect(self):
        async with aiosqlite.connect(str(self.db_path)) as conn:
            conn.row_factory = aiosqlite.Row
            yield conn

    async def _ensure_initialized(self) -> None:
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return

            async with self._connect() as conn:
                await conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS chat_messages (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        user_id TEXT NOT NULL,
                        pet_id TEXT NOT NULL,
                        role TEXT NOT NULL,
                        content TEXT NOT NULL,
                        emotion TEXT,
                        emotion_score REAL,
                        created_at TEXT NOT NULL
                    )
                    """
                )
                await conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS pet_memories (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        user_id TEXT NOT NULL,
                        pet_id TEXT NOT NULL,
                        memory_type TEXT NOT NULL,
                        title TEXT NOT NULL,
                        content TEXT NOT NULL,
                        importance INTEGER NOT NULL,
                        time_info TEXT,
                        created_at TEXT NOT NULL
                    )
                    """
                )
                await conn.execute(
                    "CREATE INDEX IF NOT EXISTS idx_pet_memories_pet ON pet_memories (pet_id, importance)"
                )
                await conn.commit()
            self._initialized = True

    async def append_message(
        self,
        user_id: str,
        pet_id: str,
        role: str,
        content: str,
        emotion: str | None = None,
        score: float | None = None,
    ) -> ChatMessage:
        await self._ensure_initialized()
        created_at = utc_now_iso()

        async with self._connect() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO chat_messages (user_id, pet_id, role, content, emotion, emotion_score, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (user_id, pet_id, role, content, emotion, score, created_at),
            )
            await conn.commit()
            message_id = int(cursor.lastrowid)
        return ChatMessage(
            id=message_id, user_id=user_id, pet_id=pet_id, role=role,
            content=content, created_at=created_at,
            emotion=emotion, emotion_score=score,
        )

    async def append_memory(self, user_id: str, pet_id: str, memory: PetMemory) -> PetMemory:
        """Persist *memory* under the given owner and pet; returns it with ``id`` set."""
        await self._ensure_initialized()
        time_info = json.dumps(memory.time_info.to_dict()) if memory.time_info else None

        async with self._connect() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO pet_memories
                    (user_id, pet_id, memory_type, title, content, importance, time_info, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id, pet_id, memory.memory_type, memory.title, memory.content,
                    memory.importance, time_info, memory.created_at,
                ),
            )
            await conn.commit()
            memory_id = int(cursor.lastrowid)

        memory.id = str(memory_id)
        memory.user_id = user_id
        memory.pet_id = pet_id
        return memory

    async def top_memories(self, pet_id: str, limit: int = 5) -> list[PetMemory]:
        """Most important memories first; among equals, the newest first."""
        await self._ensure_initialized()

        async with self._connect() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM pet_memories
                WHERE pet_id = ?
                ORDER BY importance DESC, id DESC
                LIMIT ?
                """,
                (pet_id, limit),
            )
            rows = await cursor.fetchall()
        return [self._row_to_memory(row) for row in rows]

    async def recent_messages(self, user_id: str, pet_id: str, limit: int = 20) -> list[ChatMessage]:
        """Last *limit* messages, oldest first."""
        await self._ensure_initialized()

        async with self._connect() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM chat_messages
                WHERE user_id = ? AND pet_id = ?
                ORDER BY id DESC
                LIMIT ?
                """,
                (user_id, pet_id, limit),
            )
            rows = await cursor.fetchall()
        return [
            ChatMessage(
                id=row["id"],
                user_id=row["user_id"],
                pet_id=row["pet_id"],
                role=row["role"],
                content=row["content"],
                created_at=row["created_at"],
                emotion=row["emotion"],
                emotion_score=row["emotion_score"],
            )
            for row in reversed(rows)
        ]

    @staticmethod
    def _row_to_memory(row: aiosqlite.Row) -> PetMemory:
        time_info = None
        if row["time_info"]:
            try:
                time_info = TimeInfo.from_dict(json.loads(row["time_info"]))
            except (ValueError, KeyError, TypeError):
                logger.warning("Unreadable time_info on memory %s", row["id"])
        return PetMemory(
            id=str(row["id"]),
            pet_id=row["pet_id"],
            user_id=row["user_id"],
            memory_type=row["memory_type"],
            title=row["title"],
            content=row["content"],
            importance=row["importance"],
            time_info=time_info,
            created_at=row["created_at"],
        )
