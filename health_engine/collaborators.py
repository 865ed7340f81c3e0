"""
Read-only collaborator interfaces consumed by the health engine.

Implementations wrap the real data stores and upstream services. They may
raise CustomerNotFoundError for unknown customers; any other exception is
treated as a dependency failure by the engine.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .inputs import BehavioralProfile, CommunicationSummary, CustomerInsights, CustomerProfile


class CustomerProfileStore(ABC):
    """Customer record with bounded activity lists."""

    @abstractmethod
    def get(self, customer_id: str) -> Optional[CustomerProfile]:
        """Return the profile, or None when the customer does not exist."""
        pass


class CustomerInsightsEngine(ABC):
    """Upstream churn, spending and satisfaction signals."""

    @abstractmethod
    def generate(self, customer_id: str) -> CustomerInsights:
        pass


class CommunicationHistoryProvider(ABC):
    """Summary of the customer's communication history."""

    @abstractmethod
    def get(self, customer_id: str, limit: int) -> Optional[CommunicationSummary]:
        """Return the summary of the last `limit` communications, or None if there is none."""
        pass


class EnhancedProfileEngine(ABC):
    """Behavioral preferences derived from visit history."""

    @abstractmethod
    def generate(self, customer_id: str) -> BehavioralProfile:
        pass
