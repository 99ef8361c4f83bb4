from __future__ import annotations

from datetime import datetime

from .base import LatenessDecision, LatenessPolicy


class NoLatenessPolicy(LatenessPolicy):
    """No cutoff configured: nobody is ever late."""

    def evaluate(self, *, check_in_at: datetime) -> LatenessDecision:
        return LatenessDecision()
