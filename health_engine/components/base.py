"""Base class for health scoring components."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, List, Tuple

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from ..config import HealthScoringConfig

MIN_SCORE = 0
MAX_SCORE = 100


def round_half_up(values):
    """Round .5 away from zero for non-negative values (2.5 -> 3, not 2)."""
    return np.floor(np.asarray(values, dtype=float) + 0.5)


def tiered_points(
    values: pd.Series,
    thresholds: List[Tuple[float, int]],
    default: int,
) -> np.ndarray:
    """Points for the first threshold the value is strictly above."""
    conditions = [values > threshold for threshold, _ in thresholds]
    choices = [points for _, points in thresholds]
    return np.select(conditions, choices, default=default)


def mapped_points(values: pd.Series, points: Dict[str, int], default: int) -> pd.Series:
    """Points looked up by category, default for anything unmapped."""
    return values.map(points).fillna(default)


class BaseScorer(ABC):
    """
    Abstract base class for scoring components.

    Each component calculates one 0-100 sub-score of customer health
    using vectorized pandas operations over the aggregate frame.
    """

    name: str = "base"

    def __init__(self, config: "HealthScoringConfig"):
        """
        Initialize scorer with configuration.

        Args:
            config: HealthScoringConfig instance with thresholds and points
        """
        self.config = config

    @abstractmethod
    def calculate(self, df: pd.DataFrame) -> pd.Series:
        """
        Sum the component's points for all rows (before clamping).

        Args:
            df: Aggregate DataFrame with required columns

        Returns:
            Series of raw point totals
        """
        pass

    @property
    @abstractmethod
    def required_columns(self) -> list[str]:
        """List of columns required by this scorer."""
        pass

    def score(self, df: pd.DataFrame) -> pd.Series:
        """Component score clamped to 0-100."""
        self.validate(df)
        raw = pd.Series(self.calculate(df), index=df.index, dtype=float)
        clamped = round_half_up(raw.clip(MIN_SCORE, MAX_SCORE))
        return pd.Series(clamped, index=df.index).astype(int)

    def validate(self, df: pd.DataFrame) -> None:
        """Validate required columns exist."""
        missing = set(self.required_columns) - set(df.columns)
        if missing:
            raise ValueError(
                f"{self.__class__.__name__} requires columns: {missing}"
            )
