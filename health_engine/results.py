"""
Result records produced by the health engine.

Every record is a frozen dataclass; list-valued fields are tuples so a
CustomerHealthScore cannot change after it is produced. to_dict() renders
the camelCase wire format consumed by the HTTP layer, with enumeration
values emitted verbatim.
"""

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from typing import Any, Dict, Literal, Optional, Tuple

HealthLevel = Literal["EXCELLENT", "GOOD", "FAIR", "POOR", "CRITICAL"]
HealthTrend = Literal["IMPROVING", "STABLE", "DECLINING"]
ChurnRisk = Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]
EngagementLevel = Literal["HIGHLY_ENGAGED", "MODERATELY_ENGAGED", "LIGHTLY_ENGAGED", "DISENGAGED"]
TrendDirection = Literal["UP", "DOWN", "STABLE"]
Ranking = Literal["TOP_10", "TOP_25", "AVERAGE", "BELOW_AVERAGE", "BOTTOM_10"]
UpdateFrequency = Literal["DAILY", "WEEKLY", "MONTHLY"]
AlertType = Literal["CRITICAL_HEALTH", "HIGH_CHURN_RISK", "DECLINING_TREND"]
AlertPriority = Literal["HIGH", "MEDIUM", "LOW"]


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def to_wire(value: Any) -> Any:
    """Recursively convert records to JSON-ready camelCase structures."""
    if is_dataclass(value) and not isinstance(value, type):
        return {_camel(f.name): to_wire(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {key: to_wire(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_wire(item) for item in value]
    if isinstance(value, datetime):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class ScoringComponents:
    engagement_score: int
    loyalty_score: int
    behavioral_score: int
    communication_score: int
    satisfaction_score: int
    profitability_score: int

    def as_dict(self) -> Dict[str, int]:
        """Component name -> score, keyed like the config weights."""
        return {f.name.replace("_score", ""): getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class RiskAssessment:
    churn_risk: ChurnRisk
    churn_probability: float
    risk_factors: Tuple[str, ...] = ()
    mitigation_strategies: Tuple[str, ...] = ()


@dataclass(frozen=True)
class EngagementAnalysis:
    level: EngagementLevel
    communication_response_rate: float
    visit_frequency: float
    loyalty_participation: float
    feedback_engagement: float
    campaign_engagement: float
    social_influence: float
    composite_score: float


@dataclass(frozen=True)
class NextVisitPrediction:
    probability: float
    expected_date: Optional[datetime]
    confidence: float


@dataclass(frozen=True)
class SpendingPrediction:
    next_month_spending: float
    spending_trend: str
    confidence: float


@dataclass(frozen=True)
class LifetimeValuePrediction:
    predicted_ltv: float
    growth_potential: float
    timeframe: int  # months


@dataclass(frozen=True)
class PredictionModels:
    next_visit_prediction: NextVisitPrediction
    spending_prediction: SpendingPrediction
    lifetime_value_prediction: LifetimeValuePrediction


@dataclass(frozen=True)
class SignificantChange:
    date: datetime
    old_score: int
    new_score: int
    reason: str


@dataclass(frozen=True)
class HealthHistory:
    current_score: int
    previous_score: int
    change_percentage: float
    trend_direction: TrendDirection
    significant_changes: Tuple[SignificantChange, ...] = ()


@dataclass(frozen=True)
class AutomatedInsights:
    critical_alerts: Tuple[str, ...] = ()
    opportunities: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()
    next_best_actions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BenchmarkComparison:
    segment_average: float
    industry_percentile: int
    ranking: Ranking


@dataclass(frozen=True)
class CustomerHealthScore:
    """Complete health assessment of one customer at one point in time."""

    customer_id: str
    overall_health_score: int
    health_level: HealthLevel
    health_trend: HealthTrend
    scoring_components: ScoringComponents
    risk_assessment: RiskAssessment
    engagement_analysis: EngagementAnalysis
    prediction_models: PredictionModels
    health_history: HealthHistory
    automated_insights: AutomatedInsights
    benchmark_comparison: BenchmarkComparison
    last_updated: datetime
    next_update_due: datetime
    update_frequency: UpdateFrequency

    def to_dict(self) -> dict:
        return to_wire(self)

    def summary(self) -> dict:
        """Compact projection for list views."""
        return to_wire({
            "customerId": self.customer_id,
            "overallHealthScore": self.overall_health_score,
            "healthLevel": self.health_level,
            "healthTrend": self.health_trend,
            "churnRisk": self.risk_assessment.churn_risk,
            "churnProbability": self.risk_assessment.churn_probability,
            "engagementLevel": self.engagement_analysis.level,
            "criticalAlerts": self.automated_insights.critical_alerts,
            "nextBestActions": self.automated_insights.next_best_actions,
            "lastUpdated": self.last_updated,
            "nextUpdateDue": self.next_update_due,
        })


@dataclass(frozen=True)
class HealthScoringMetrics:
    """Distribution of recently cached scores."""

    total_customers: int
    average_health_score: float
    health_distribution: Dict[str, int] = field(default_factory=dict)
    churn_risk_distribution: Dict[str, int] = field(default_factory=dict)
    engagement_distribution: Dict[str, int] = field(default_factory=dict)
    trends_analysis: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return to_wire(self)


@dataclass(frozen=True)
class HealthScoreAlert:
    customer_id: str
    customer_name: str
    health_score: int
    alert_type: AlertType
    message: str
    priority: AlertPriority

    def to_dict(self) -> dict:
        return to_wire(self)
