"""Profitability scoring component."""

import pandas as pd

from .base import BaseScorer, mapped_points, tiered_points


class ProfitabilityScorer(BaseScorer):
    """
    Score the customer's value to the business.

    Points:
    - Lifetime spend: >10M: 40, >5M: 30, >2M: 20, >500k: 10, else 5
    - Average order value: >300k: 25, >150k: 20, >75k: 15, else 10
    - Visit count: >50: 20, >20: 15, >10: 10, else 5
    - Spending trend: INCREASING 15, STABLE 10, else 5
    """

    name = "profitability"

    @property
    def required_columns(self) -> list[str]:
        return [
            "LIFETIME_SPENT",
            "AVERAGE_ORDER_VALUE",
            "VISIT_COUNT",
            "SPENDING_TREND",
        ]

    def calculate(self, df: pd.DataFrame) -> pd.Series:
        """Calculate profitability points."""
        cfg = self.config

        lifetime = tiered_points(df["LIFETIME_SPENT"], cfg.lifetime_value_thresholds, cfg.lifetime_value_default)
        order_value = tiered_points(df["AVERAGE_ORDER_VALUE"], cfg.order_value_thresholds, cfg.order_value_default)
        visits = tiered_points(df["VISIT_COUNT"], cfg.profit_visit_thresholds, cfg.profit_visit_default)
        trend = mapped_points(df["SPENDING_TREND"], cfg.profit_trend_points, cfg.profit_trend_default)

        return lifetime + order_value + visits + trend
