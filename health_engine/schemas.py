"""
Data schema definitions for the health engine.

Uses Pandera for runtime validation of the aggregate frame so that bad
collaborator payloads are caught once, at ingestion, before scoring.
"""

from pandera import Column, Check, DataFrameSchema

from .inputs import (
    MAX_CAMPAIGN_DELIVERIES,
    MAX_FEEDBACK,
    MAX_LOYALTY_TRANSACTIONS,
    MAX_VISITS,
    NO_TIER,
)

SPENDING_TRENDS = ["INCREASING", "STABLE", "DECREASING"]
LOYALTY_ENGAGEMENTS = ["HIGH", "MEDIUM", "LOW"]
PRICE_SEGMENTS = ["BUDGET", "MODERATE", "PREMIUM"]
TIER_LEVELS = ["BRONZE", "SILVER", "GOLD", "PLATINUM", NO_TIER]

HEALTH_LEVELS = ["EXCELLENT", "GOOD", "FAIR", "POOR", "CRITICAL"]


def _count(maximum: int, description: str) -> Column:
    return Column(
        int,
        nullable=False,
        checks=[
            Check.greater_than_or_equal_to(0),
            Check.less_than_or_equal_to(maximum),
        ],
        description=description,
    )


def _percent(description: str, nullable: bool = False) -> Column:
    return Column(
        float,
        nullable=nullable,
        checks=Check.in_range(0, 100),
        description=description,
    )


def _non_negative(description: str) -> Column:
    return Column(
        float,
        nullable=False,
        checks=Check.greater_than_or_equal_to(0),
        description=description,
    )


# Schema for one-row-per-customer aggregate data
AGGREGATE_INPUT_SCHEMA = DataFrameSchema(
    {
        "CUSTOMER_ID": Column(
            str,
            nullable=False,
            unique=True,
            checks=Check.str_length(min_value=1),
            description="Unique customer identifier",
        ),
        "VISIT_COUNT": _count(MAX_VISITS, "Number of recent visits read"),
        "FEEDBACK_COUNT": _count(MAX_FEEDBACK, "Number of feedback entries read"),
        "CAMPAIGN_DELIVERY_COUNT": _count(MAX_CAMPAIGN_DELIVERIES, "Number of campaign deliveries read"),
        "LOYALTY_TRANSACTION_COUNT": _count(MAX_LOYALTY_TRANSACTIONS, "Number of loyalty transactions read"),
        "TIER_LEVEL": Column(
            str,
            nullable=False,
            checks=Check.isin(TIER_LEVELS),
            description="Loyalty tier (NONE when the customer has no loyalty account)",
        ),
        "CURRENT_POINTS": Column(
            int,
            nullable=False,
            checks=Check.greater_than_or_equal_to(0),
            description="Current loyalty point balance",
        ),
        "LIFETIME_SPENT": _non_negative("Lifetime spend"),
        "CURRENT_MONTH_SPENT": _non_negative("Spend in the current month"),
        "CHURN_PROBABILITY": _percent("Upstream churn probability (0-100)"),
        "SPENDING_TREND": Column(
            str,
            nullable=False,
            checks=Check.isin(SPENDING_TRENDS),
            description="Upstream spending trend",
        ),
        "SATISFACTION_SCORE": _percent("Upstream satisfaction (null when unavailable)", nullable=True),
        "VISIT_FREQUENCY_SCORE": _percent("Upstream visit frequency score"),
        "LOYALTY_ENGAGEMENT": Column(
            str,
            nullable=False,
            checks=Check.isin(LOYALTY_ENGAGEMENTS),
            description="Upstream loyalty engagement tier",
        ),
        # Visits inside campaign windows per delivered campaign, so it can exceed 100
        "CAMPAIGN_RESPONSE_RATE": _non_negative("Campaign response rate (%)"),
        "AVERAGE_ORDER_VALUE": _non_negative("Average order value"),
        "HAS_COMMUNICATION_SUMMARY": Column(bool, nullable=False),
        # Inbound/outbound ratio can exceed 100 when customers write first
        "RESPONSE_RATE": _non_negative("Communication response rate (%)"),
        "COMMUNICATION_ENGAGEMENT": _non_negative("Communication engagement score"),
        "COMMUNICATION_FREQUENCY": _non_negative("Communications per month"),
        "PREFERRED_CHANNEL": Column(str, nullable=False),
        "PREFERRED_DAY_COUNT": Column(
            int,
            nullable=False,
            checks=Check.greater_than_or_equal_to(0),
            description="Number of preferred visit weekdays",
        ),
        "SEASONAL_PATTERN_KNOWN": Column(bool, nullable=False),
        "PRICE_SEGMENT": Column(
            str,
            nullable=False,
            checks=Check.isin(PRICE_SEGMENTS),
        ),
        "AVERAGE_ORDER_SIZE": _non_negative("Average order size"),
        "SERVICE_PREFERENCE_COUNT": Column(
            int,
            nullable=False,
            checks=Check.greater_than_or_equal_to(0),
        ),
    },
    strict=False,  # Allow extra columns
    coerce=True,
    description="Schema for customer health scoring input data",
)


# Schema for scored output data
HEALTH_OUTPUT_SCHEMA = DataFrameSchema(
    {
        "CUSTOMER_ID": Column(str, nullable=False),
        "HEALTH_SCORE": Column(
            int,
            nullable=False,
            checks=Check.in_range(0, 100),
        ),
        "HEALTH_LEVEL": Column(
            str,
            nullable=False,
            checks=Check.isin(HEALTH_LEVELS),
        ),
        **{
            f"{name}_score": Column(int, nullable=False, checks=Check.in_range(0, 100))
            for name in (
                "engagement",
                "loyalty",
                "behavioral",
                "communication",
                "satisfaction",
                "profitability",
            )
        },
    },
    strict=False,
    description="Schema for customer health scoring output data",
)


def validate_aggregates(df):
    """Validate and coerce an aggregate frame. Raises pandera.errors.SchemaError."""
    return AGGREGATE_INPUT_SCHEMA.validate(df)


__all__ = [
    "AGGREGATE_INPUT_SCHEMA",
    "HEALTH_OUTPUT_SCHEMA",
    "validate_aggregates",
]
