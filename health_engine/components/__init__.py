"""Scoring components for customer health."""

from .base import BaseScorer
from .engagement import EngagementScorer
from .loyalty import LoyaltyScorer
from .behavioral import BehavioralScorer
from .communication import CommunicationScorer
from .satisfaction import SatisfactionScorer
from .profitability import ProfitabilityScorer

__all__ = [
    "BaseScorer",
    "EngagementScorer",
    "LoyaltyScorer",
    "BehavioralScorer",
    "CommunicationScorer",
    "SatisfactionScorer",
    "ProfitabilityScorer",
]
