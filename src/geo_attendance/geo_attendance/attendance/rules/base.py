from __future__ import annotations

from abc import ABC, abstractmethod

from ...location.model import LocationValidationResult
from ..model import CheckInRequest


class AttendanceTypeRule(ABC):
    """Strategy Pattern: business rules of one attendance type.

    ``check`` returns silently when the check-in is acceptable and raises a
    DomainError otherwise.
    """

    @abstractmethod
    def check(self, request: CheckInRequest, location: LocationValidationResult) -> None:
        raise NotImplementedError
