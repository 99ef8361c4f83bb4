from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class LatenessDecision:
    is_late: bool = False
    late_minutes: int = 0


class LatenessPolicy(ABC):
    """Strategy Pattern: encapsulate how we decide whether a check-in is late."""

    @abstractmethod
    def evaluate(self, *, check_in_at: datetime) -> LatenessDecision:
        raise NotImplementedError
