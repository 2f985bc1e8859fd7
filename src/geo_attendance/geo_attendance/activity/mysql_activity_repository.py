from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import ActivityLogEntry
from .repository import ActivityLogRepository


class MySQLActivityLogRepository(ActivityLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, entry: ActivityLogEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activity_logs(type, title, description, entity_id, entity_type, user_id, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.type.value,
                    entry.title,
                    entry.description,
                    entry.entity_id,
                    entry.entity_type,
                    entry.user_id,
                    entry.created_at,
                ),
            )
            return int(cur.lastrowid)
