"""
Scoring configuration for the customer health engine.

All weights, point tables and thresholds live here for easy tuning.
Threshold tables are ordered lists of (threshold, value) pairs that are
evaluated top-down; the first match wins and the *_default value applies
when nothing matches.
"""

import math
from dataclasses import asdict, dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml


COMPONENT_NAMES = (
    "engagement",
    "loyalty",
    "behavioral",
    "communication",
    "satisfaction",
    "profitability",
)


@dataclass
class HealthScoringConfig:
    """
    Configuration for all scoring components and downstream classifiers.

    Component scores are 0-100 each. The overall health score is their
    weighted sum (weights must add up to 1.0), so it is also 0-100.
    """

    # === Component weights (sum = 1.0) ===
    weights: Dict[str, float] = field(default_factory=lambda: {
        "engagement": 0.25,
        "loyalty": 0.20,
        "behavioral": 0.15,
        "communication": 0.15,
        "satisfaction": 0.15,
        "profitability": 0.10,
    })

    # === Engagement (0-100) ===
    # Visit count: strictly greater than threshold
    engagement_visit_thresholds: List[Tuple[int, int]] = field(default_factory=lambda: [
        (50, 30),
        (20, 25),
        (10, 20),
        (5, 15),
    ])
    engagement_visit_default: int = 10
    engagement_response_factor: float = 0.25
    loyalty_engagement_points: Dict[str, int] = field(default_factory=lambda: {
        "HIGH": 20,
        "MEDIUM": 15,
    })
    loyalty_engagement_default: int = 10
    feedback_points_per_item: int = 3
    feedback_points_cap: int = 15
    campaign_response_factor: float = 0.1

    # === Loyalty (0-100) ===
    tier_points: Dict[str, int] = field(default_factory=lambda: {
        "PLATINUM": 25,
        "GOLD": 20,
        "SILVER": 15,
    })
    tier_default: int = 10
    points_thresholds: List[Tuple[int, int]] = field(default_factory=lambda: [
        (2000, 20),
        (1000, 15),
        (500, 10),
    ])
    points_default: int = 5
    loyalty_trend_points: Dict[str, int] = field(default_factory=lambda: {
        "INCREASING": 25,
        "STABLE": 20,
    })
    loyalty_trend_default: int = 10
    visit_frequency_factor: float = 0.2
    loyalty_transaction_cap: int = 10

    # === Behavioral (0-100) ===
    preferred_day_points: int = 10
    preferred_day_cap: int = 30
    seasonal_known_points: int = 20
    seasonal_unknown_points: int = 10
    price_segment_points: Dict[str, int] = field(default_factory=lambda: {
        "PREMIUM": 25,
        "MODERATE": 20,
    })
    price_segment_default: int = 15
    order_size_thresholds: List[Tuple[float, int]] = field(default_factory=lambda: [
        (200_000, 15),
        (100_000, 10),
    ])
    order_size_default: int = 5
    service_preference_points: int = 5
    service_preference_cap: int = 10

    # === Communication (0-100) ===
    communication_default: int = 50  # no communication summary at all
    communication_response_factor: float = 0.4
    communication_engagement_factor: float = 0.3
    frequency_thresholds: List[Tuple[float, int]] = field(default_factory=lambda: [
        (4, 20),
        (2, 15),
        (0, 10),
    ])
    frequency_default: int = 5
    channel_known_points: int = 10
    channel_unknown_points: int = 5

    # === Satisfaction (0-100) ===
    # Upstream default for customers without feedback
    satisfaction_default: int = 75

    # === Profitability (0-100) ===
    lifetime_value_thresholds: List[Tuple[float, int]] = field(default_factory=lambda: [
        (10_000_000, 40),
        (5_000_000, 30),
        (2_000_000, 20),
        (500_000, 10),
    ])
    lifetime_value_default: int = 5
    order_value_thresholds: List[Tuple[float, int]] = field(default_factory=lambda: [
        (300_000, 25),
        (150_000, 20),
        (75_000, 15),
    ])
    order_value_default: int = 10
    profit_visit_thresholds: List[Tuple[int, int]] = field(default_factory=lambda: [
        (50, 20),
        (20, 15),
        (10, 10),
    ])
    profit_visit_default: int = 5
    profit_trend_points: Dict[str, int] = field(default_factory=lambda: {
        "INCREASING": 15,
        "STABLE": 10,
    })
    profit_trend_default: int = 5

    # === Health levels (score >= threshold) ===
    health_levels: List[Tuple[int, str]] = field(default_factory=lambda: [
        (90, "EXCELLENT"),
        (75, "GOOD"),
        (60, "FAIR"),
        (40, "POOR"),
    ])
    health_level_default: str = "CRITICAL"

    # === Trend tracking ===
    trend_threshold: int = 5            # points, strictly greater
    direction_threshold_pct: float = 2.0
    significant_change: int = 10
    major_change: int = 20

    # === Risk assessment ===
    low_health_threshold: int = 40
    low_health_probability_floor: float = 70
    absence_days: int = 60
    low_satisfaction_threshold: float = 50
    churn_risk_levels: List[Tuple[float, str]] = field(default_factory=lambda: [
        (80, "CRITICAL"),
        (60, "HIGH"),
        (30, "MEDIUM"),
    ])
    churn_risk_default: str = "LOW"
    no_visit_days: int = 999

    # === Engagement analysis ===
    engagement_weights: Dict[str, float] = field(default_factory=lambda: {
        "communication_response_rate": 0.20,
        "visit_frequency": 0.25,
        "loyalty_participation": 0.15,
        "feedback_engagement": 0.15,
        "campaign_engagement": 0.15,
        "social_influence": 0.10,
    })
    loyalty_participation_active: int = 80
    loyalty_participation_inactive: int = 20
    feedback_engagement_active: int = 70
    feedback_engagement_inactive: int = 30
    engagement_levels: List[Tuple[float, str]] = field(default_factory=lambda: [
        (80, "HIGHLY_ENGAGED"),
        (60, "MODERATELY_ENGAGED"),
        (40, "LIGHTLY_ENGAGED"),
    ])
    engagement_level_default: str = "DISENGAGED"

    # === Predictions ===
    spending_multipliers: Dict[str, float] = field(default_factory=lambda: {
        "INCREASING": 1.1,
        "DECREASING": 0.9,
    })
    spending_multiplier_default: float = 1.0
    spending_confidence: int = 70
    next_visit_confidence_default: int = 50
    ltv_timeframe_months: int = 24

    # === Automated insights ===
    critical_health_threshold: int = 40
    critical_churn_threshold: float = 70
    recommend_health_threshold: int = 60
    recommend_satisfaction_threshold: float = 70
    inactive_days: int = 30
    points_reminder_threshold: int = 500

    # === Benchmark ===
    segment_average: float = 70
    rankings: List[Tuple[int, str]] = field(default_factory=lambda: [
        (90, "TOP_10"),
        (75, "TOP_25"),
        (40, "AVERAGE"),
        (25, "BELOW_AVERAGE"),
    ])
    ranking_default: str = "BOTTOM_10"

    # === Update scheduling ===
    daily_below: int = 40
    weekly_below: int = 60
    update_intervals_days: Dict[str, int] = field(default_factory=lambda: {
        "DAILY": 1,
        "WEEKLY": 7,
        "MONTHLY": 30,
    })

    # === Facade ===
    cache_capacity: int = 1000
    alert_window_hours: int = 24
    metrics_window_days: int = 7
    max_batch_size: int = 20
    communication_history_limit: int = 50
    read_workers: int = 4
    batch_workers: int = 4

    # === Metadata ===
    version: str = "1.0.0"

    def __post_init__(self):
        # YAML gives back lists; keep tables as (threshold, value) tuples
        for name, value in list(vars(self).items()):
            if name.endswith(("_thresholds", "_levels", "rankings")) and isinstance(value, list):
                setattr(self, name, [tuple(item) for item in value])
        self.validate()

    def validate(self) -> None:
        """Check weight tables and sizes are usable."""
        missing = set(COMPONENT_NAMES) - set(self.weights)
        if missing:
            raise ValueError(f"Missing component weights: {sorted(missing)}")
        total = sum(self.weights.values())
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Component weights must sum to 1.0, got {total}")
        if any(w < 0 for w in self.weights.values()):
            raise ValueError("Component weights must be non-negative")
        engagement_total = sum(self.engagement_weights.values())
        if not math.isclose(engagement_total, 1.0, abs_tol=1e-9):
            raise ValueError(
                f"Engagement weights must sum to 1.0, got {engagement_total}"
            )
        if self.cache_capacity < 1:
            raise ValueError("cache_capacity must be at least 1")
        for frequency in ("DAILY", "WEEKLY", "MONTHLY"):
            if self.update_intervals_days.get(frequency, 0) <= 0:
                raise ValueError(f"Update interval for {frequency} must be positive")

    # --- classification helpers -------------------------------------------

    @staticmethod
    def _first_at_least(value: float, table: List[Tuple[float, str]], default: str) -> str:
        for threshold, label in table:
            if value >= threshold:
                return label
        return default

    @staticmethod
    def _first_above(value: float, table: List[Tuple[float, str]], default: str) -> str:
        for threshold, label in table:
            if value > threshold:
                return label
        return default

    def get_health_level(self, score: float) -> str:
        """Map overall health score to a health level."""
        return self._first_at_least(score, self.health_levels, self.health_level_default)

    def get_churn_risk(self, probability: float) -> str:
        """Map churn probability (0-100) to a churn risk tier."""
        return self._first_above(probability, self.churn_risk_levels, self.churn_risk_default)

    def get_engagement_level(self, composite: float) -> str:
        """Map composite engagement value to an engagement level."""
        return self._first_at_least(composite, self.engagement_levels, self.engagement_level_default)

    def get_ranking(self, percentile: float) -> str:
        """Map industry percentile to a benchmark ranking band."""
        return self._first_at_least(percentile, self.rankings, self.ranking_default)

    def get_update_frequency(self, score: int, health_level: str) -> str:
        """Severe health is re-scored more often."""
        if health_level == "CRITICAL" or score < self.daily_below:
            return "DAILY"
        if health_level == "POOR" or score < self.weekly_below:
            return "WEEKLY"
        return "MONTHLY"

    def get_update_interval(self, frequency: str) -> timedelta:
        return timedelta(days=self.update_intervals_days[frequency])

    # --- serialization ------------------------------------------------------

    @classmethod
    def from_yaml(cls, path: Path | str) -> "HealthScoringConfig":
        """Load configuration from YAML file (missing keys keep defaults)."""
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict:
        """Convert to plain dictionary (tuples become lists)."""
        data = asdict(self)
        for name, value in data.items():
            if isinstance(value, list):
                data[name] = [list(item) if isinstance(item, tuple) else item for item in value]
        return data

    def with_overrides(self, **overrides) -> "HealthScoringConfig":
        """Copy of this config with some fields replaced."""
        data = self.to_dict()
        data.update(overrides)
        return HealthScoringConfig(**data)


# Default configuration instance
DEFAULT_CONFIG = HealthScoringConfig()


def load_config(path: Optional[Path | str] = None) -> HealthScoringConfig:
    """Load config from YAML, or the defaults when no path is given."""
    if path is None:
        return HealthScoringConfig()
    return HealthScoringConfig.from_yaml(path)
