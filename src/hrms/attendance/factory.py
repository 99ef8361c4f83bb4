from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from ..common.datetime_utils import BUSINESS_TZ
from ..core.exceptions import ValidationError
from .policies.base import LatenessPolicy
from .policies.cutoff_policy import CutoffLatenessPolicy
from .policies.no_lateness_policy import NoLatenessPolicy


@dataclass
class LatenessPolicyFactory:
    """Factory Pattern: choose the lateness policy from configuration."""

    tz: timezone = BUSINESS_TZ

    def from_settings(self, *, late_cutoff: Optional[str], grace_minutes: int = 0) -> LatenessPolicy:
        value = (late_cutoff or "").strip()
        if not value:
            return NoLatenessPolicy()
        try:
            cutoff = datetime.strptime(value, "%H:%M").time()
        except ValueError:
            raise ValidationError(f"LATE_CUTOFF must be HH:MM, got {value!r}")
        return CutoffLatenessPolicy(cutoff, grace_minutes=grace_minutes, tz=self.tz)
