"""
Pytest fixtures for customer health engine tests.
"""

from datetime import datetime, timedelta

import pytest

# Add package to path
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from health_engine.collaborators import (
    CommunicationHistoryProvider,
    CustomerInsightsEngine,
    CustomerProfileStore,
    EnhancedProfileEngine,
)
from health_engine.config import HealthScoringConfig
from health_engine.engine import HealthEngine
from health_engine.inputs import (
    BehavioralProfile,
    CommunicationSummary,
    CustomerAggregates,
    CustomerInsights,
    CustomerProfile,
    LoyaltyAccount,
)
from health_engine.scorer import HealthScorer, generate_sample_aggregates

NOW = datetime(2024, 3, 15, 12, 0, 0)


class FakeClock:
    """Settable clock shared by engine and cache."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryProfileStore(CustomerProfileStore):
    def __init__(self, profiles=None):
        self.profiles = {p.customer_id: p for p in (profiles or [])}
        self.fail = False

    def get(self, customer_id):
        if self.fail:
            raise ConnectionError("profile store unavailable")
        return self.profiles.get(customer_id)


class InMemoryInsightsEngine(CustomerInsightsEngine):
    def __init__(self, insights=None):
        self.insights = dict(insights or {})
        self.fail = False

    def generate(self, customer_id):
        if self.fail:
            raise TimeoutError("insights engine timed out")
        return self.insights.get(customer_id, CustomerInsights())


class InMemoryCommunicationProvider(CommunicationHistoryProvider):
    def __init__(self, summaries=None):
        self.summaries = dict(summaries or {})
        self.calls = []

    def get(self, customer_id, limit):
        self.calls.append((customer_id, limit))
        return self.summaries.get(customer_id, CommunicationSummary())


class InMemoryProfileEngine(EnhancedProfileEngine):
    def __init__(self, behaviors=None):
        self.behaviors = dict(behaviors or {})

    def generate(self, customer_id):
        return self.behaviors.get(customer_id, BehavioralProfile())


@pytest.fixture
def default_config():
    """Default scoring configuration."""
    return HealthScoringConfig()


@pytest.fixture
def scorer(default_config):
    """HealthScorer with default config."""
    return HealthScorer(default_config)


@pytest.fixture
def sample_data():
    """100 sample customers with realistic distributions."""
    return generate_sample_aggregates(n_customers=100, seed=42)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def new_customer_aggregates():
    """Brand-new customer: no visits, feedback, loyalty account or communication history."""
    return CustomerAggregates(
        profile=CustomerProfile(customer_id="NEW_001", name="New Customer"),
        insights=CustomerInsights(),
        communication=CommunicationSummary(),
        behavior=BehavioralProfile(),
        as_of=NOW,
    )


@pytest.fixture
def loyal_customer_aggregates():
    """Long-standing, highly engaged customer."""
    return CustomerAggregates(
        profile=CustomerProfile(
            customer_id="LOYAL_001",
            name="Loyal Customer",
            loyalty=LoyaltyAccount(
                tier_level="PLATINUM",
                current_points=2500,
                lifetime_spent=12_000_000,
                current_month_spent=800_000,
                last_visit_date=NOW - timedelta(days=3),
            ),
            visits=list(range(60)),
            feedback=list(range(6)),
            campaign_deliveries=list(range(10)),
            loyalty_transactions=list(range(20)),
        ),
        insights=CustomerInsights(
            churn_probability=10,
            spending_trend="INCREASING",
            satisfaction_score=92,
            visit_frequency_score=90,
            loyalty_engagement="HIGH",
            campaign_response_rate=80,
            referral_score=70,
            lifetime_value_growth=3_000_000,
            lifetime_value_prediction=15_000_000,
            average_order_value=350_000,
            next_visit_date=NOW + timedelta(days=5),
        ),
        communication=CommunicationSummary(
            response_rate=90,
            engagement_score=85,
            communication_frequency=5,
            preferred_channel="SMS",
        ),
        behavior=BehavioralProfile(
            preferred_visit_days=["FRIDAY", "SATURDAY", "SUNDAY"],
            most_active_month="DECEMBER",
            price_segment="PREMIUM",
            average_order_size=250_000,
            service_preferences=["DINE_IN", "TAKEAWAY"],
        ),
        as_of=NOW,
    )


@pytest.fixture
def single_customer(new_customer_aggregates):
    """Single aggregate row for simple tests."""
    return new_customer_aggregates.to_frame()


@pytest.fixture
def profile_store(loyal_customer_aggregates):
    return InMemoryProfileStore([
        CustomerProfile(customer_id="NEW_001", name="New Customer"),
        loyal_customer_aggregates.profile,
    ])


@pytest.fixture
def insights_engine(loyal_customer_aggregates):
    return InMemoryInsightsEngine({"LOYAL_001": loyal_customer_aggregates.insights})


@pytest.fixture
def communication_provider(loyal_customer_aggregates):
    return InMemoryCommunicationProvider({"LOYAL_001": loyal_customer_aggregates.communication})


@pytest.fixture
def profile_engine(loyal_customer_aggregates):
    return InMemoryProfileEngine({"LOYAL_001": loyal_customer_aggregates.behavior})


@pytest.fixture
def engine(profile_store, insights_engine, communication_provider, profile_engine, default_config, clock):
    """HealthEngine over in-memory collaborators and a fixed clock."""
    with HealthEngine(
        profile_store,
        insights_engine,
        communication_provider,
        profile_engine,
        config=default_config,
        clock=clock,
    ) as health_engine:
        yield health_engine


@pytest.fixture
def add_customer(profile_store, insights_engine):
    """Register an extra customer on the fake collaborators."""

    def _add(customer_id, name="Customer", insights=None, **profile_fields):
        profile_store.profiles[customer_id] = CustomerProfile(
            customer_id=customer_id, name=name, **profile_fields
        )
        if insights is not None:
            insights_engine.insights[customer_id] = insights

    return _add
