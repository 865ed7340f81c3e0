"""
Input records supplied by the engine's collaborators.

Collaborators hand over these dataclasses; CustomerAggregates flattens them
into a single row of the aggregate frame, which is validated once against
AGGREGATE_INPUT_SCHEMA before any scoring happens.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Literal, Optional

import pandas as pd

SpendingTrend = Literal["INCREASING", "STABLE", "DECREASING"]
LoyaltyEngagement = Literal["HIGH", "MEDIUM", "LOW"]
PriceSegment = Literal["BUDGET", "MODERATE", "PREMIUM"]

# Maximum list lengths read from the profile store
MAX_VISITS = 100
MAX_FEEDBACK = 50
MAX_CAMPAIGN_DELIVERIES = 30
MAX_LOYALTY_TRANSACTIONS = 50

UNKNOWN_CHANNEL = "UNKNOWN"
DEFAULT_CHANNEL = "SMS"
NO_TIER = "NONE"


@dataclass
class LoyaltyAccount:
    """Loyalty programme standing of a customer."""

    tier_level: str = "BRONZE"
    current_points: int = 0
    lifetime_spent: float = 0.0
    current_month_spent: float = 0.0
    last_visit_date: Optional[datetime] = None


@dataclass
class CustomerProfile:
    """
    Customer record with its most recent activity.

    Lists are newest-first and trimmed to the store's read limits.
    """

    customer_id: str
    name: str = ""
    loyalty: Optional[LoyaltyAccount] = None
    visits: List[Any] = field(default_factory=list)
    feedback: List[Any] = field(default_factory=list)
    campaign_deliveries: List[Any] = field(default_factory=list)
    loyalty_transactions: List[Any] = field(default_factory=list)

    def __post_init__(self):
        self.visits = list(self.visits)[:MAX_VISITS]
        self.feedback = list(self.feedback)[:MAX_FEEDBACK]
        self.campaign_deliveries = list(self.campaign_deliveries)[:MAX_CAMPAIGN_DELIVERIES]
        self.loyalty_transactions = list(self.loyalty_transactions)[:MAX_LOYALTY_TRANSACTIONS]


@dataclass
class CustomerInsights:
    """Signals produced by the upstream customer insights generator."""

    churn_probability: float = 0.0
    spending_trend: SpendingTrend = "STABLE"
    satisfaction_score: Optional[float] = None
    visit_frequency_score: float = 0.0
    loyalty_engagement: LoyaltyEngagement = "LOW"
    campaign_response_rate: float = 0.0
    referral_score: float = 0.0
    lifetime_value_growth: float = 0.0
    lifetime_value_prediction: Optional[float] = None
    average_order_value: float = 0.0
    next_visit_date: Optional[datetime] = None


@dataclass
class CommunicationSummary:
    """Summary statistics of a customer's communication history."""

    response_rate: float = 0.0
    engagement_score: float = 0.0
    communication_frequency: float = 0.0
    preferred_channel: str = DEFAULT_CHANNEL  # tracker default for an empty history


@dataclass
class BehavioralProfile:
    """Behavioral preference fields from the enhanced profile engine."""

    preferred_visit_days: List[str] = field(default_factory=list)
    most_active_month: Optional[str] = None
    price_segment: PriceSegment = "BUDGET"
    average_order_size: float = 0.0
    service_preferences: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class CustomerAggregates:
    """All collaborator data for one customer, plus what scoring needs from it."""

    profile: CustomerProfile
    insights: CustomerInsights
    communication: Optional[CommunicationSummary]
    behavior: BehavioralProfile
    as_of: datetime

    @property
    def customer_id(self) -> str:
        return self.profile.customer_id

    @property
    def current_points(self) -> int:
        return self.profile.loyalty.current_points if self.profile.loyalty else 0

    @property
    def current_month_spent(self) -> float:
        return self.profile.loyalty.current_month_spent if self.profile.loyalty else 0.0

    def days_since_last_visit(self, no_visit_days: int = 999) -> int:
        """Whole days since the last recorded visit."""
        loyalty = self.profile.loyalty
        if loyalty is None or loyalty.last_visit_date is None:
            return no_visit_days
        return (self.as_of - loyalty.last_visit_date).days

    def satisfaction(self, default: float) -> float:
        score = self.insights.satisfaction_score
        if score is None or (isinstance(score, float) and math.isnan(score)):
            return default
        return score

    def to_row(self) -> dict:
        """Flatten into one aggregate-frame row."""
        loyalty = self.profile.loyalty
        communication = self.communication
        satisfaction = self.insights.satisfaction_score
        return {
            "CUSTOMER_ID": self.customer_id,
            # profile
            "VISIT_COUNT": len(self.profile.visits),
            "FEEDBACK_COUNT": len(self.profile.feedback),
            "CAMPAIGN_DELIVERY_COUNT": len(self.profile.campaign_deliveries),
            "LOYALTY_TRANSACTION_COUNT": len(self.profile.loyalty_transactions),
            "TIER_LEVEL": loyalty.tier_level if loyalty else NO_TIER,
            "CURRENT_POINTS": self.current_points,
            "LIFETIME_SPENT": float(loyalty.lifetime_spent) if loyalty else 0.0,
            "CURRENT_MONTH_SPENT": float(self.current_month_spent),
            # insights
            "CHURN_PROBABILITY": float(self.insights.churn_probability),
            "SPENDING_TREND": self.insights.spending_trend,
            "SATISFACTION_SCORE": float("nan") if satisfaction is None else float(satisfaction),
            "VISIT_FREQUENCY_SCORE": float(self.insights.visit_frequency_score),
            "LOYALTY_ENGAGEMENT": self.insights.loyalty_engagement,
            "CAMPAIGN_RESPONSE_RATE": float(self.insights.campaign_response_rate),
            "AVERAGE_ORDER_VALUE": float(self.insights.average_order_value),
            # communication
            "HAS_COMMUNICATION_SUMMARY": communication is not None,
            "RESPONSE_RATE": float(communication.response_rate) if communication else 0.0,
            "COMMUNICATION_ENGAGEMENT": float(communication.engagement_score) if communication else 0.0,
            "COMMUNICATION_FREQUENCY": float(communication.communication_frequency) if communication else 0.0,
            "PREFERRED_CHANNEL": (communication.preferred_channel or UNKNOWN_CHANNEL) if communication else UNKNOWN_CHANNEL,
            # behavior
            "PREFERRED_DAY_COUNT": len(self.behavior.preferred_visit_days),
            "SEASONAL_PATTERN_KNOWN": bool(self.behavior.most_active_month),
            "PRICE_SEGMENT": self.behavior.price_segment,
            "AVERAGE_ORDER_SIZE": float(self.behavior.average_order_size),
            "SERVICE_PREFERENCE_COUNT": len(self.behavior.service_preferences),
        }

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([self.to_row()])
