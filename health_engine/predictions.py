"""Rule-based projections of next visit, spend and lifetime value."""

from .config import HealthScoringConfig
from .inputs import CustomerAggregates
from .results import (
    LifetimeValuePrediction,
    NextVisitPrediction,
    PredictionModels,
    SpendingPrediction,
)


class PredictionModel:
    """
    Project near-term behavior from upstream signals.

    Not a trained model: every figure is a fixed transformation of an
    upstream signal, with documented confidence defaults where upstream
    provides none.
    """

    def __init__(self, config: HealthScoringConfig):
        self.config = config

    def predict(self, aggregates: CustomerAggregates) -> PredictionModels:
        cfg = self.config
        insights = aggregates.insights

        next_visit = NextVisitPrediction(
            probability=max(0.0, 100.0 - float(insights.churn_probability)),
            expected_date=insights.next_visit_date,
            confidence=insights.visit_frequency_score or cfg.next_visit_confidence_default,
        )

        multiplier = cfg.spending_multipliers.get(
            insights.spending_trend, cfg.spending_multiplier_default
        )
        spending = SpendingPrediction(
            next_month_spending=float(aggregates.current_month_spent) * multiplier,
            spending_trend=insights.spending_trend,
            confidence=cfg.spending_confidence,
        )

        predicted_ltv = insights.lifetime_value_prediction
        if predicted_ltv is None:
            predicted_ltv = insights.lifetime_value_growth
        lifetime_value = LifetimeValuePrediction(
            predicted_ltv=predicted_ltv,
            growth_potential=insights.lifetime_value_growth,
            timeframe=cfg.ltv_timeframe_months,
        )

        return PredictionModels(
            next_visit_prediction=next_visit,
            spending_prediction=spending,
            lifetime_value_prediction=lifetime_value,
        )
