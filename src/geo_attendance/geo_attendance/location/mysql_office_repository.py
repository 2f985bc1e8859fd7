from __future__ import annotations

from typing import Sequence

from ..core.constants import DEFAULT_OFFICE_RADIUS_M
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import OfficeLocation
from .repository import OfficeLocationRepository


class MySQLOfficeLocationRepository(OfficeLocationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(self) -> Sequence[OfficeLocation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT office_id, name, latitude, longitude, radius_m
                FROM office_locations
                WHERE is_active=1
                ORDER BY office_id
                """
            )
            rows = fetchall(cur)
            return [
                OfficeLocation(
                    office_id=str(r["office_id"]),
                    name=r["name"],
                    latitude=float(r["latitude"]),
                    longitude=float(r["longitude"]),
                    radius_m=float(r.get("radius_m") or DEFAULT_OFFICE_RADIUS_M),
                )
                for r in rows
            ]
