from __future__ import annotations

import logging
from typing import Sequence

from ..core.enums import Department
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import DepartmentTiming
from .repository import DepartmentTimingRepository

logger = logging.getLogger(__name__)


class MySQLDepartmentTimingRepository(DepartmentTimingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[DepartmentTiming]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT department, check_in_time, check_out_time, working_hours
                FROM department_timings
                ORDER BY department
                """
            )
            rows = fetchall(cur)

        out: list[DepartmentTiming] = []
        for r in rows:
            dept = Department.parse(r["department"])
            if dept is None:
                logger.warning("[timing] skipping unknown department row %r", r["department"])
                continue
            out.append(
                DepartmentTiming.create(
                    department=dept,
                    check_in_time=r.get("check_in_time"),
                    check_out_time=r.get("check_out_time"),
                    working_hours=r.get("working_hours"),
                )
            )
        return out
