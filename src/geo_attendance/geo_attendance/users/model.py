from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class User:
    """Directory entry for an employee.

    Note: department is kept as the raw stored string; timing lookup falls
    back to the default department when it is unknown.
    """

    user_id: str
    display_name: str
    department: Optional[str]
    is_active: bool = True
