from __future__ import annotations

import math
from datetime import datetime, time, timedelta, timezone

from ...common.datetime_utils import BUSINESS_TZ, as_utc
from .base import LatenessDecision, LatenessPolicy


class CutoffLatenessPolicy(LatenessPolicy):
    """Late when checking in after ``cutoff`` (business-local) plus grace.

    ``late_minutes`` counts whole minutes past the cutoff itself, not past the
    grace window.
    """

    def __init__(self, cutoff: time, *, grace_minutes: int = 0, tz: timezone = BUSINESS_TZ):
        self._cutoff = cutoff
        self._grace = timedelta(minutes=int(grace_minutes))
        self._tz = tz

    def evaluate(self, *, check_in_at: datetime) -> LatenessDecision:
        local = as_utc(check_in_at).astimezone(self._tz)
        cutoff_at = datetime.combine(local.date(), self._cutoff, tzinfo=self._tz)
        if local <= cutoff_at + self._grace:
            return LatenessDecision()
        late_minutes = math.floor((local - cutoff_at).total_seconds() / 60)
        return LatenessDecision(is_late=True, late_minutes=late_minutes)
