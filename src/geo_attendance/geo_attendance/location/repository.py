from __future__ import annotations

from typing import Protocol, Sequence

from .model import OfficeLocation


class OfficeLocationRepository(Protocol):
    """Read-only office catalogue."""

    def list_active(self) -> Sequence[OfficeLocation]:
        raise NotImplementedError
