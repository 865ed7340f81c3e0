"""Churn risk assessment."""

from .config import HealthScoringConfig
from .inputs import CustomerAggregates
from .results import RiskAssessment

LOW_HEALTH_FACTOR = "Low health score"
ABSENCE_FACTOR = "Prolonged absence"
ABSENCE_MITIGATION = "Re-engagement contact"
DECLINING_SPEND_FACTOR = "Declining spend"
DECLINING_SPEND_MITIGATION = "Targeted discount"
LOW_SATISFACTION_FACTOR = "Low satisfaction"
LOW_SATISFACTION_MITIGATION = "Service review"


class RiskAssessor:
    """
    Refine the upstream churn probability and explain it.

    A low health score (< 40) raises the probability to at least 70. The
    tier is read off the adjusted probability: > 80 CRITICAL, > 60 HIGH,
    > 30 MEDIUM, else LOW.
    """

    def __init__(self, config: HealthScoringConfig):
        self.config = config

    def assess(self, aggregates: CustomerAggregates, overall_score: int) -> RiskAssessment:
        cfg = self.config
        probability = min(max(float(aggregates.insights.churn_probability), 0.0), 100.0)
        factors = []
        mitigations = []

        if overall_score < cfg.low_health_threshold:
            probability = max(probability, cfg.low_health_probability_floor)
            factors.append(LOW_HEALTH_FACTOR)

        if aggregates.days_since_last_visit(cfg.no_visit_days) > cfg.absence_days:
            factors.append(ABSENCE_FACTOR)
            mitigations.append(ABSENCE_MITIGATION)

        if aggregates.insights.spending_trend == "DECREASING":
            factors.append(DECLINING_SPEND_FACTOR)
            mitigations.append(DECLINING_SPEND_MITIGATION)

        if aggregates.satisfaction(cfg.satisfaction_default) < cfg.low_satisfaction_threshold:
            factors.append(LOW_SATISFACTION_FACTOR)
            mitigations.append(LOW_SATISFACTION_MITIGATION)

        return RiskAssessment(
            churn_risk=cfg.get_churn_risk(probability),
            churn_probability=probability,
            risk_factors=tuple(factors),
            mitigation_strategies=tuple(mitigations),
        )
