from __future__ import annotations

from abc import ABC, abstractmethod

from ...shifts.model import ShiftRecord


class WorkingHoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for shift hours)."""

    @abstractmethod
    def working_hours(self, shift: ShiftRecord) -> float:
        raise NotImplementedError
