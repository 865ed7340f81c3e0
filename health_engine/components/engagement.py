"""Engagement scoring component."""

import numpy as np
import pandas as pd

from .base import BaseScorer, mapped_points, round_half_up, tiered_points


class EngagementScorer(BaseScorer):
    """
    Score how actively the customer interacts with the business.

    Points:
    - Visit count: >50: 30, >20: 25, >10: 20, >5: 15, else 10
    - Communication response rate: round(rate * 0.25), up to 25
    - Loyalty engagement: HIGH 20, MEDIUM 15, else 10
    - Feedback: 3 per entry, capped at 15
    - Campaign response rate: round(rate * 0.1), up to 10
    """

    name = "engagement"

    @property
    def required_columns(self) -> list[str]:
        return [
            "VISIT_COUNT",
            "RESPONSE_RATE",
            "LOYALTY_ENGAGEMENT",
            "FEEDBACK_COUNT",
            "CAMPAIGN_RESPONSE_RATE",
        ]

    def calculate(self, df: pd.DataFrame) -> pd.Series:
        """Calculate engagement points."""
        cfg = self.config

        visits = tiered_points(
            df["VISIT_COUNT"], cfg.engagement_visit_thresholds, cfg.engagement_visit_default
        )
        response = round_half_up(df["RESPONSE_RATE"] * cfg.engagement_response_factor)
        loyalty = mapped_points(
            df["LOYALTY_ENGAGEMENT"], cfg.loyalty_engagement_points, cfg.loyalty_engagement_default
        )
        feedback = np.minimum(
            df["FEEDBACK_COUNT"] * cfg.feedback_points_per_item, cfg.feedback_points_cap
        )
        campaign = round_half_up(df["CAMPAIGN_RESPONSE_RATE"] * cfg.campaign_response_factor)

        return visits + response + loyalty + feedback + campaign
