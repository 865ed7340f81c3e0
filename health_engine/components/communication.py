"""Communication responsiveness scoring component."""

import numpy as np
import pandas as pd

from ..inputs import UNKNOWN_CHANNEL
from .base import BaseScorer, round_half_up, tiered_points


class CommunicationScorer(BaseScorer):
    """
    Score responsiveness to outbound communication.

    Customers without any communication summary get a neutral 50.

    Points:
    - Response rate: round(rate * 0.4), up to 40
    - Engagement score: round(score * 0.3), up to 30
    - Frequency per month: >4: 20, >2: 15, >0: 10, else 5
    - Preferred channel: 10 when a named channel is known, else 5
    """

    name = "communication"

    @property
    def required_columns(self) -> list[str]:
        return [
            "HAS_COMMUNICATION_SUMMARY",
            "RESPONSE_RATE",
            "COMMUNICATION_ENGAGEMENT",
            "COMMUNICATION_FREQUENCY",
            "PREFERRED_CHANNEL",
        ]

    def calculate(self, df: pd.DataFrame) -> pd.Series:
        """Calculate communication points."""
        cfg = self.config

        response = round_half_up(df["RESPONSE_RATE"] * cfg.communication_response_factor)
        engagement = round_half_up(df["COMMUNICATION_ENGAGEMENT"] * cfg.communication_engagement_factor)
        frequency = tiered_points(
            df["COMMUNICATION_FREQUENCY"], cfg.frequency_thresholds, cfg.frequency_default
        )
        channel = df["PREFERRED_CHANNEL"].fillna("").astype(str)
        named = (channel != "") & (channel != UNKNOWN_CHANNEL)
        channel_points = np.where(named, cfg.channel_known_points, cfg.channel_unknown_points)

        total = response + engagement + frequency + channel_points
        return np.where(
            df["HAS_COMMUNICATION_SUMMARY"].astype(bool),
            total,
            cfg.communication_default,
        )
