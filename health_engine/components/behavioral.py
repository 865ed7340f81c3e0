"""Behavioral pattern scoring component."""

import numpy as np
import pandas as pd

from .base import BaseScorer, mapped_points, tiered_points


class BehavioralScorer(BaseScorer):
    """
    Score how settled and valuable the customer's habits are.

    Points:
    - Preferred visit days: 10 each, capped at 30
    - Seasonal pattern: 20 when a most active month is known, else 10
    - Price segment: PREMIUM 25, MODERATE 20, else 15
    - Average order size: >200k: 15, >100k: 10, else 5
    - Service preferences: 5 each, capped at 10
    """

    name = "behavioral"

    @property
    def required_columns(self) -> list[str]:
        return [
            "PREFERRED_DAY_COUNT",
            "SEASONAL_PATTERN_KNOWN",
            "PRICE_SEGMENT",
            "AVERAGE_ORDER_SIZE",
            "SERVICE_PREFERENCE_COUNT",
        ]

    def calculate(self, df: pd.DataFrame) -> pd.Series:
        """Calculate behavioral points."""
        cfg = self.config

        days = np.minimum(df["PREFERRED_DAY_COUNT"] * cfg.preferred_day_points, cfg.preferred_day_cap)
        seasonal = np.where(
            df["SEASONAL_PATTERN_KNOWN"].astype(bool),
            cfg.seasonal_known_points,
            cfg.seasonal_unknown_points,
        )
        segment = mapped_points(df["PRICE_SEGMENT"], cfg.price_segment_points, cfg.price_segment_default)
        order_size = tiered_points(df["AVERAGE_ORDER_SIZE"], cfg.order_size_thresholds, cfg.order_size_default)
        services = np.minimum(
            df["SERVICE_PREFERENCE_COUNT"] * cfg.service_preference_points, cfg.service_preference_cap
        )

        return days + seasonal + segment + order_size + services
