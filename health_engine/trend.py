"""Health trend and history tracking against the previous cached score."""

from datetime import datetime
from typing import Optional, Tuple

from .config import HealthScoringConfig
from .results import CustomerHealthScore, HealthHistory, SignificantChange

MAJOR_CHANGE_REASON = "major behavior change"
MODERATE_CHANGE_REASON = "moderate behavior change"


class TrendTracker:
    """
    Compare a new overall score with the customer's previous snapshot.

    Trend (absolute points):
    - delta > +5: IMPROVING
    - delta < -5: DECLINING
    - otherwise, or no previous snapshot: STABLE

    History direction uses the relative change: > +2% UP, < -2% DOWN.
    """

    def __init__(self, config: HealthScoringConfig):
        self.config = config

    def trend(self, current_score: int, previous: Optional[CustomerHealthScore]) -> str:
        if previous is None:
            return "STABLE"
        delta = current_score - previous.overall_health_score
        if delta > self.config.trend_threshold:
            return "IMPROVING"
        if delta < -self.config.trend_threshold:
            return "DECLINING"
        return "STABLE"

    def history(
        self,
        current_score: int,
        previous: Optional[CustomerHealthScore],
        now: datetime,
    ) -> HealthHistory:
        previous_score = previous.overall_health_score if previous is not None else current_score
        if previous_score != 0:
            change_percentage = (current_score - previous_score) / previous_score * 100
        else:
            change_percentage = 0.0

        threshold = self.config.direction_threshold_pct
        if change_percentage > threshold:
            direction = "UP"
        elif change_percentage < -threshold:
            direction = "DOWN"
        else:
            direction = "STABLE"

        changes = ()
        gap = abs(current_score - previous_score)
        if gap > self.config.significant_change:
            reason = MAJOR_CHANGE_REASON if gap > self.config.major_change else MODERATE_CHANGE_REASON
            changes = (SignificantChange(
                date=now,
                old_score=previous_score,
                new_score=current_score,
                reason=reason,
            ),)

        return HealthHistory(
            current_score=current_score,
            previous_score=previous_score,
            change_percentage=change_percentage,
            trend_direction=direction,
            significant_changes=changes,
        )

    def track(
        self,
        current_score: int,
        previous: Optional[CustomerHealthScore],
        now: datetime,
    ) -> Tuple[str, HealthHistory]:
        """Trend label and history record in one call."""
        return self.trend(current_score, previous), self.history(current_score, previous, now)
