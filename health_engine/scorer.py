"""
Main HealthScorer class - orchestrates scoring components.

Usage:
    from health_engine import HealthScorer, HealthScoringConfig

    # With default config
    scorer = HealthScorer()
    result = scorer.score(df)

    # With custom config
    config = HealthScoringConfig(tier_points={"PLATINUM": 30, ...})
    scorer = HealthScorer(config)
    result = scorer.score(df)

    # Access results
    print(result.df[["CUSTOMER_ID", "HEALTH_SCORE", "HEALTH_LEVEL"]])
    print(result.summary())
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from .config import HealthScoringConfig, DEFAULT_CONFIG
from .components import (
    EngagementScorer,
    LoyaltyScorer,
    BehavioralScorer,
    CommunicationScorer,
    SatisfactionScorer,
    ProfitabilityScorer,
)
from .components.base import round_half_up
from .results import ScoringComponents
from .schemas import validate_aggregates

# Worst first
HEALTH_LEVEL_ORDER = ["CRITICAL", "POOR", "FAIR", "GOOD", "EXCELLENT"]


@dataclass
class ScoringResult:
    """
    Container for scoring results with component breakdown.

    Attributes:
        df: Validated aggregate DataFrame with scores added
        component_columns: List of component score column names
    """

    df: pd.DataFrame
    component_columns: list[str]

    def get_at_risk(self, max_level: str = "POOR") -> pd.DataFrame:
        """
        Get customers at or below a health level.

        Args:
            max_level: Healthiest level to include ("CRITICAL" ... "EXCELLENT")

        Returns:
            DataFrame filtered to customers at or below the specified level
        """
        max_idx = HEALTH_LEVEL_ORDER.index(max_level)
        valid_levels = HEALTH_LEVEL_ORDER[: max_idx + 1]
        return self.df[self.df["HEALTH_LEVEL"].isin(valid_levels)]

    def summary(self) -> pd.DataFrame:
        """
        Customer counts and average score per health level.

        Returns:
            DataFrame indexed by health level, worst first
        """
        summary = (
            self.df.groupby("HEALTH_LEVEL")
            .agg(
                count=("CUSTOMER_ID", "count"),
                avg_score=("HEALTH_SCORE", "mean"),
            )
            .round(1)
        )
        order = [level for level in HEALTH_LEVEL_ORDER if level in summary.index]
        return summary.loc[order]

    def component_breakdown(self) -> pd.DataFrame:
        """
        Show average contribution of each component.

        Returns:
            DataFrame with component statistics
        """
        stats = {}
        for col in self.component_columns:
            component_name = col.replace("_score", "")
            stats[component_name] = {
                "mean": self.df[col].mean(),
                "max": self.df[col].max(),
                "min": self.df[col].min(),
            }
        return pd.DataFrame(stats).T.round(1)


class HealthScorer:
    """
    Vectorized customer health scoring engine.

    Calculates the six component scores independently using pandas
    operations, then combines them into a weighted 0-100 health score.

    Components (default weight):
    - Engagement (25%): visits, responsiveness, loyalty and campaign activity
    - Loyalty (20%): tier, points, spending trend, regularity
    - Behavioral (15%): visit pattern, price segment, order size
    - Communication (15%): response rate, engagement, channel
    - Satisfaction (15%): upstream satisfaction signal
    - Profitability (10%): lifetime value, order value, visit volume
    """

    def __init__(self, config: Optional[HealthScoringConfig] = None):
        """
        Initialize scorer with configuration.

        Args:
            config: HealthScoringConfig instance. Uses DEFAULT_CONFIG if None.
        """
        self.config = config or DEFAULT_CONFIG
        self._init_components()

    def _init_components(self) -> None:
        """Initialize all scoring components."""
        self.components = {
            "engagement": EngagementScorer(self.config),
            "loyalty": LoyaltyScorer(self.config),
            "behavioral": BehavioralScorer(self.config),
            "communication": CommunicationScorer(self.config),
            "satisfaction": SatisfactionScorer(self.config),
            "profitability": ProfitabilityScorer(self.config),
        }

    def validate_input(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Validate and coerce the aggregate frame.

        Raises:
            pandera.errors.SchemaError: If a column is missing or out of range
        """
        return validate_aggregates(df)

    def aggregate(self, components: pd.DataFrame) -> pd.Series:
        """Weighted sum of component score columns, rounded and clipped to 0-100."""
        weighted = sum(
            components[f"{name}_score"] * weight
            for name, weight in self.config.weights.items()
        )
        overall = round_half_up(np.clip(weighted, 0, 100))
        return pd.Series(overall, index=components.index).astype(int)

    def score(self, df: pd.DataFrame) -> ScoringResult:
        """
        Calculate health scores for all customers.

        Args:
            df: Aggregate DataFrame (one row per customer)

        Returns:
            ScoringResult with scores and component breakdown

        Example:
            >>> scorer = HealthScorer()
            >>> result = scorer.score(aggregates_df)
            >>> at_risk = result.get_at_risk("POOR")
        """
        result = self.validate_input(df.copy())

        component_cols = []
        for name, component in self.components.items():
            col_name = f"{name}_score"
            result[col_name] = component.score(result)
            component_cols.append(col_name)

        result["HEALTH_SCORE"] = self.aggregate(result)
        result["HEALTH_LEVEL"] = result["HEALTH_SCORE"].apply(self.config.get_health_level)

        return ScoringResult(df=result, component_columns=component_cols)

    def score_single(self, row: dict) -> tuple[int, str, ScoringComponents]:
        """
        Score a single customer (convenience method).

        Args:
            row: Dictionary with aggregate fields

        Returns:
            (health score, health level, component scores)
        """
        result = self.score(pd.DataFrame([row]))
        scored = result.df.iloc[0]
        components = ScoringComponents(**{
            col: int(scored[col]) for col in result.component_columns
        })
        return int(scored["HEALTH_SCORE"]), scored["HEALTH_LEVEL"], components


def generate_sample_aggregates(n_customers: int = 100, seed: int = 42) -> pd.DataFrame:
    """
    Generate realistic aggregate data for testing.

    Distributions loosely follow a restaurant CRM customer base:
    - Most customers have few visits, a long tail visits weekly
    - Loyalty tiers skew towards BRONZE/SILVER
    - Roughly a fifth of customers have no communication history
    """
    rng = np.random.default_rng(seed)

    visits = np.clip(rng.geometric(p=0.08, size=n_customers) - 1, 0, 100)
    feedback = np.clip(rng.poisson(lam=1.5, size=n_customers), 0, 50)
    tiers = rng.choice(
        ["NONE", "BRONZE", "SILVER", "GOLD", "PLATINUM"],
        size=n_customers,
        p=[0.10, 0.40, 0.28, 0.15, 0.07],
    )
    points = np.where(tiers == "NONE", 0, rng.integers(0, 3000, size=n_customers))
    has_comm = rng.random(n_customers) > 0.2

    satisfaction = np.where(
        feedback == 0,
        np.nan,
        np.clip(rng.normal(loc=72, scale=15, size=n_customers), 0, 100).round(1),
    )

    return pd.DataFrame(
        {
            "CUSTOMER_ID": [f"CUST_{i:04d}" for i in range(n_customers)],
            "VISIT_COUNT": visits,
            "FEEDBACK_COUNT": feedback,
            "CAMPAIGN_DELIVERY_COUNT": rng.integers(0, 31, size=n_customers),
            "LOYALTY_TRANSACTION_COUNT": np.minimum(visits, 50),
            "TIER_LEVEL": tiers,
            "CURRENT_POINTS": points,
            "LIFETIME_SPENT": (visits * rng.uniform(50_000, 250_000, size=n_customers)).round(0),
            "CURRENT_MONTH_SPENT": rng.uniform(0, 1_500_000, size=n_customers).round(0),
            "CHURN_PROBABILITY": rng.uniform(0, 100, size=n_customers).round(1),
            "SPENDING_TREND": rng.choice(
                ["INCREASING", "STABLE", "DECREASING"], size=n_customers, p=[0.3, 0.45, 0.25]
            ),
            "SATISFACTION_SCORE": satisfaction,
            "VISIT_FREQUENCY_SCORE": rng.uniform(0, 100, size=n_customers).round(1),
            "LOYALTY_ENGAGEMENT": rng.choice(
                ["HIGH", "MEDIUM", "LOW"], size=n_customers, p=[0.2, 0.35, 0.45]
            ),
            "CAMPAIGN_RESPONSE_RATE": rng.uniform(0, 60, size=n_customers).round(1),
            "AVERAGE_ORDER_VALUE": rng.uniform(30_000, 400_000, size=n_customers).round(0),
            "HAS_COMMUNICATION_SUMMARY": has_comm,
            "RESPONSE_RATE": np.where(has_comm, rng.uniform(0, 100, size=n_customers), 0.0).round(1),
            "COMMUNICATION_ENGAGEMENT": np.where(has_comm, rng.uniform(0, 100, size=n_customers), 0.0).round(1),
            "COMMUNICATION_FREQUENCY": np.where(has_comm, rng.uniform(0, 8, size=n_customers), 0.0).round(2),
            "PREFERRED_CHANNEL": np.where(
                has_comm, rng.choice(["SMS", "EMAIL", "PHONE", "UNKNOWN"], size=n_customers), "UNKNOWN"
            ),
            "PREFERRED_DAY_COUNT": rng.integers(0, 5, size=n_customers),
            "SEASONAL_PATTERN_KNOWN": visits > 3,
            "PRICE_SEGMENT": rng.choice(
                ["BUDGET", "MODERATE", "PREMIUM"], size=n_customers, p=[0.35, 0.45, 0.2]
            ),
            "AVERAGE_ORDER_SIZE": rng.uniform(30_000, 300_000, size=n_customers).round(0),
            "SERVICE_PREFERENCE_COUNT": rng.integers(0, 4, size=n_customers),
        }
    )
