"""Benchmark comparison against a segment baseline."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from .components.base import round_half_up
from .config import HealthScoringConfig
from .inputs import CustomerAggregates
from .results import BenchmarkComparison

logger = logging.getLogger(__name__)


class BenchmarkProvider(ABC):
    """Source of the segment average a customer is compared against."""

    @abstractmethod
    def segment_average(self, aggregates: CustomerAggregates) -> float:
        pass


class StaticBenchmarkProvider(BenchmarkProvider):
    """Fixed baseline for every segment."""

    def __init__(self, average: float = 70):
        self.average = average

    def segment_average(self, aggregates: CustomerAggregates) -> float:
        return self.average


class BenchmarkComparator:
    """
    Position a customer's score against the baseline.

    Percentile is the rounded overall score. Ranking bands:
    >= 90 TOP_10, >= 75 TOP_25, >= 40 AVERAGE, >= 25 BELOW_AVERAGE,
    else BOTTOM_10.
    """

    def __init__(self, config: HealthScoringConfig, provider: Optional[BenchmarkProvider] = None):
        self.config = config
        self.fallback = StaticBenchmarkProvider(config.segment_average)
        self.provider = provider or self.fallback

    def compare(self, aggregates: CustomerAggregates, overall_score: float) -> BenchmarkComparison:
        try:
            average = self.provider.segment_average(aggregates)
        except Exception:
            logger.warning(
                "Benchmark provider failed for %s, using static baseline",
                aggregates.customer_id,
                exc_info=True,
            )
            average = self.fallback.segment_average(aggregates)

        percentile = int(round_half_up(overall_score))
        return BenchmarkComparison(
            segment_average=average,
            industry_percentile=percentile,
            ranking=self.config.get_ranking(percentile),
        )
