"""Engagement level analysis."""

from .config import HealthScoringConfig
from .inputs import CustomerAggregates
from .results import EngagementAnalysis


class EngagementAnalyzer:
    """
    Classify how engaged a customer is from six sub-signals.

    Loyalty participation and feedback engagement are proxies: 80/20 for
    having any loyalty points, 70/30 for having left any feedback.
    """

    def __init__(self, config: HealthScoringConfig):
        self.config = config

    def signals(self, aggregates: CustomerAggregates) -> dict:
        cfg = self.config
        communication = aggregates.communication
        return {
            "communication_response_rate": communication.response_rate if communication else 0.0,
            "visit_frequency": aggregates.insights.visit_frequency_score,
            "loyalty_participation": (
                cfg.loyalty_participation_active
                if aggregates.current_points > 0
                else cfg.loyalty_participation_inactive
            ),
            "feedback_engagement": (
                cfg.feedback_engagement_active
                if aggregates.profile.feedback
                else cfg.feedback_engagement_inactive
            ),
            "campaign_engagement": aggregates.insights.campaign_response_rate,
            "social_influence": aggregates.insights.referral_score,
        }

    def analyze(self, aggregates: CustomerAggregates) -> EngagementAnalysis:
        signals = self.signals(aggregates)
        composite = sum(
            signals[name] * weight for name, weight in self.config.engagement_weights.items()
        )
        return EngagementAnalysis(
            level=self.config.get_engagement_level(composite),
            composite_score=composite,
            **signals,
        )
