"""SQLite-backed association between users and their workbooks."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import aiosqlite
from pydantic import BaseModel, Field

from .config import settings
from .sheets.client import SheetsStoreClient

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class WorkbookRecord(BaseModel):
    """The workbook a user's data lives in."""

    user_id: str
    workbook_id: str
    owner_name: str
    created_at: datetime = Field(default_factory=_utc_now)


class WorkbookRegistry:
    """Persistent storage for user to workbook associations."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path else settings.database_path
        self._connection: Optional[aiosqlite.Connection] = None

    async def initialize(self):
        """Initialize the database and create tables."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(str(self.db_path))

        await self._connection.executescript(
            """
            CREATE TABLE IF NOT EXISTS workbooks (
                user_id TEXT PRIMARY KEY,
                workbook_id TEXT NOT NULL,
                owner_name TEXT NOT NULL,
                created_at TEXT NOT NULL
            );
            """
        )
        await self._connection.commit()
        logger.info("WorkbookRegistry initialized")

    async def close(self):
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def get(self, user_id: str) -> Optional[WorkbookRecord]:
        """Get the workbook registered for a user."""
        async with self._connection.execute(
            "SELECT user_id, workbook_id, owner_name, created_at FROM workbooks WHERE user_id = ?",
            (user_id,),
        ) as cursor:
            row = await cursor.fetchone()
            if row:
                return WorkbookRecord(
                    user_id=row[0],
                    workbook_id=row[1],
                    owner_name=row[2],
                    created_at=datetime.fromisoformat(row[3]),
                )
        return None

    async def save(self, user_id: str, workbook_id: str, owner_name: str) -> WorkbookRecord:
        """Register (or replace) a user's workbook."""
        record = WorkbookRecord(user_id=user_id, workbook_id=workbook_id, owner_name=owner_name)
        await self._connection.execute(
            """
            INSERT OR REPLACE INTO workbooks (user_id, workbook_id, owner_name, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (record.user_id, record.workbook_id, record.owner_name, record.created_at.isoformat()),
        )
        await self._connection.commit()
        return record

    async def forget(self, user_id: str) -> bool:
        """Drop a user's registration."""
        cursor = await self._connection.execute(
            "DELETE FROM workbooks WHERE user_id = ?", (user_id,)
        )
        await self._connection.commit()
        return cursor.rowcount > 0


async def open_workbook(
    registry: WorkbookRegistry,
    client: SheetsStoreClient,
    user_id: str,
    owner_name: str,
) -> WorkbookRecord:
    """Return the user's workbook, creating a new one if it is gone or missing."""
    record = await registry.get(user_id)
    if record and await client.verify_access(record.workbook_id):
        return record

    if record:
        logger.warning(
            f"Workbook {record.workbook_id} of user {user_id} is no longer accessible, creating a new one"
        )
    workbook_id = await client.create_workbook(owner_name)
    return await registry.save(user_id, workbook_id, owner_name)
