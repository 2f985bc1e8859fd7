from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ActivityType


@dataclass(frozen=True)
class ActivityLogEntry:
    """Audit entry written after each attendance event."""

    type: ActivityType
    title: str
    description: str
    entity_id: Optional[str]
    entity_type: str
    user_id: str
    created_at: datetime
