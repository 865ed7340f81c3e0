"""Loyalty standing scoring component."""

import numpy as np
import pandas as pd

from .base import BaseScorer, mapped_points, round_half_up, tiered_points


class LoyaltyScorer(BaseScorer):
    """
    Score the customer's loyalty programme standing.

    Points:
    - Tier: PLATINUM 25, GOLD 20, SILVER 15, else 10
    - Current points: >2000: 20, >1000: 15, >500: 10, else 5
    - Spending trend: INCREASING 25, STABLE 20, else 10
    - Visit regularity: round(visit frequency score * 0.2)
    - Loyalty transactions: 1 each, capped at 10
    """

    name = "loyalty"

    @property
    def required_columns(self) -> list[str]:
        return [
            "TIER_LEVEL",
            "CURRENT_POINTS",
            "SPENDING_TREND",
            "VISIT_FREQUENCY_SCORE",
            "LOYALTY_TRANSACTION_COUNT",
        ]

    def calculate(self, df: pd.DataFrame) -> pd.Series:
        """Calculate loyalty points."""
        cfg = self.config

        tier = mapped_points(df["TIER_LEVEL"], cfg.tier_points, cfg.tier_default)
        points = tiered_points(df["CURRENT_POINTS"], cfg.points_thresholds, cfg.points_default)
        trend = mapped_points(df["SPENDING_TREND"], cfg.loyalty_trend_points, cfg.loyalty_trend_default)
        regularity = round_half_up(df["VISIT_FREQUENCY_SCORE"] * cfg.visit_frequency_factor)
        transactions = np.minimum(df["LOYALTY_TRANSACTION_COUNT"], cfg.loyalty_transaction_cap)

        return tier + points + trend + regularity + transactions
