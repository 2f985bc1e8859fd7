from __future__ import annotations

from typing import Protocol, Sequence

from .model import DepartmentTiming


class DepartmentTimingRepository(Protocol):
    """Read-only source of department shift windows."""

    def list_all(self) -> Sequence[DepartmentTiming]:
        raise NotImplementedError
