"""Satisfaction scoring component."""

import pandas as pd

from .base import BaseScorer


class SatisfactionScorer(BaseScorer):
    """
    Pass through the upstream satisfaction score.

    The insights generator owns this signal; when it is missing the
    generator's documented default for customers without feedback (75)
    is used.
    """

    name = "satisfaction"

    @property
    def required_columns(self) -> list[str]:
        return ["SATISFACTION_SCORE"]

    def calculate(self, df: pd.DataFrame) -> pd.Series:
        return (
            pd.to_numeric(df["SATISFACTION_SCORE"], errors="coerce")
            .fillna(self.config.satisfaction_default)
        )
