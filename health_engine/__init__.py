"""
Customer Health Engine Package

Rule-based customer health scoring with churn risk, engagement,
predictions and automated insights.
"""

from .scorer import HealthScorer, generate_sample_aggregates
from .config import HealthScoringConfig, load_config
from .engine import HealthEngine
from .cache import HealthScoreCache
from .errors import CustomerNotFoundError, DependencyError, HealthEngineError
from .results import CustomerHealthScore

__all__ = [
    "HealthScorer",
    "HealthScoringConfig",
    "HealthEngine",
    "HealthScoreCache",
    "CustomerHealthScore",
    "CustomerNotFoundError",
    "DependencyError",
    "HealthEngineError",
    "generate_sample_aggregates",
    "load_config",
]
__version__ = "1.0.0"
