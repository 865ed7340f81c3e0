"""Rule-based alerts, opportunities, recommendations and next best actions."""

from dataclasses import dataclass
from typing import Optional

from .config import HealthScoringConfig
from .inputs import CustomerAggregates
from .results import AutomatedInsights

CRITICAL_HEALTH_ALERT = "Customer health score is at a critical level"
HIGH_CHURN_ALERT = "High probability of customer churn"
PREMIUM_OPPORTUNITY = "Spending is increasing - offer premium products"
LOYALTY_UPGRADE_OPPORTUNITY = "High loyalty programme engagement - tier upgrade opportunity"
IMPROVE_EXPERIENCE = "Improve the customer experience"
SATISFACTION_SURVEY = "Follow up with a satisfaction survey"
SERVICE_REVIEW = "Review and fix service weak points"
INVITE_VISIT = "Contact the customer and invite them to visit"
REDEEM_POINTS = "Remind the customer to redeem loyalty points"


@dataclass(frozen=True)
class InsightResult:
    """Insights plus the reason they are empty when rule evaluation failed."""

    insights: AutomatedInsights
    warning: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.warning is None


class InsightGenerator:
    """Evaluate insight rules. Never raises."""

    def __init__(self, config: HealthScoringConfig):
        self.config = config

    def generate(self, aggregates: CustomerAggregates, overall_score: int) -> InsightResult:
        try:
            return InsightResult(self._evaluate(aggregates, overall_score))
        except Exception as e:
            return InsightResult(
                AutomatedInsights(),
                warning=f"Insight generation failed for {aggregates.customer_id}: {e!r}",
            )

    def _evaluate(self, aggregates: CustomerAggregates, overall_score: int) -> AutomatedInsights:
        cfg = self.config
        insights = aggregates.insights

        critical_alerts = []
        if overall_score < cfg.critical_health_threshold:
            critical_alerts.append(CRITICAL_HEALTH_ALERT)
        if insights.churn_probability > cfg.critical_churn_threshold:
            critical_alerts.append(HIGH_CHURN_ALERT)

        opportunities = []
        if insights.spending_trend == "INCREASING":
            opportunities.append(PREMIUM_OPPORTUNITY)
        if insights.loyalty_engagement == "HIGH":
            opportunities.append(LOYALTY_UPGRADE_OPPORTUNITY)

        recommendations = []
        if overall_score < cfg.recommend_health_threshold:
            recommendations.append(IMPROVE_EXPERIENCE)
            recommendations.append(SATISFACTION_SURVEY)
        if aggregates.satisfaction(cfg.satisfaction_default) < cfg.recommend_satisfaction_threshold:
            recommendations.append(SERVICE_REVIEW)

        next_best_actions = []
        if aggregates.days_since_last_visit(cfg.no_visit_days) > cfg.inactive_days:
            next_best_actions.append(INVITE_VISIT)
        if aggregates.current_points > cfg.points_reminder_threshold:
            next_best_actions.append(REDEEM_POINTS)

        return AutomatedInsights(
            critical_alerts=tuple(critical_alerts),
            opportunities=tuple(opportunities),
            recommendations=tuple(recommendations),
            next_best_actions=tuple(next_best_actions),
        )
