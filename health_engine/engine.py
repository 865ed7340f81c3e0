"""
HealthEngine - the stateful facade over the scoring pipeline.

Usage:
    from health_engine import HealthEngine

    with HealthEngine(profiles, insights, communications, behavior) as engine:
        score = engine.generate_health_score("CUST_0001")
        print(score.summary())

        alerts = engine.get_health_score_alerts()
        metrics = engine.get_health_scoring_metrics()

The engine owns its HealthScoreCache (or is handed one) and is the only
unit with side effects: it writes the cache and, when configured, an
audit record for every generated score and every failed one.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

import pandas as pd
from pandera.errors import SchemaError

from .audit import HealthScoreAuditLog
from .benchmark import BenchmarkComparator, BenchmarkProvider
from .cache import HealthScoreCache
from .collaborators import (
    CommunicationHistoryProvider,
    CustomerInsightsEngine,
    CustomerProfileStore,
    EnhancedProfileEngine,
)
from .config import DEFAULT_CONFIG, HealthScoringConfig
from .engagement import EngagementAnalyzer
from .errors import CustomerNotFoundError, DependencyError
from .inputs import (
    BehavioralProfile,
    CommunicationSummary,
    CustomerAggregates,
    CustomerInsights,
    CustomerProfile,
)
from .insights import InsightGenerator
from .predictions import PredictionModel
from .results import CustomerHealthScore, HealthScoreAlert, HealthScoringMetrics
from .risk import RiskAssessor
from .scorer import HEALTH_LEVEL_ORDER, HealthScorer
from .trend import TrendTracker

logger = logging.getLogger(__name__)

CHURN_RISK_ORDER = ["LOW", "MEDIUM", "HIGH", "CRITICAL"]
ENGAGEMENT_LEVEL_ORDER = ["HIGHLY_ENGAGED", "MODERATELY_ENGAGED", "LIGHTLY_ENGAGED", "DISENGAGED"]
TREND_ORDER = ["IMPROVING", "STABLE", "DECLINING"]

# A missing communication summary is allowed and scores as neutral
_COLLABORATOR_TYPES = {
    "profile_store": CustomerProfile,
    "insights_engine": CustomerInsights,
    "communication_provider": (CommunicationSummary, type(None)),
    "profile_engine": BehavioralProfile,
}


def _distribution(values: pd.Series, vocabulary: List[str]) -> Dict[str, int]:
    """Count per label, with every label of the vocabulary present."""
    counts = values.value_counts().reindex(vocabulary, fill_value=0)
    return {label: int(count) for label, count in counts.items()}


class HealthEngine:
    """
    Generate, cache and query customer health scores.

    Collaborator reads for one customer run concurrently on a small read
    pool; batch requests fan out across customers on a separate pool so
    batch workers never wait on their own executor.
    """

    def __init__(
        self,
        profile_store: CustomerProfileStore,
        insights_engine: CustomerInsightsEngine,
        communication_provider: CommunicationHistoryProvider,
        profile_engine: EnhancedProfileEngine,
        config: Optional[HealthScoringConfig] = None,
        cache: Optional[HealthScoreCache] = None,
        benchmark_provider: Optional[BenchmarkProvider] = None,
        audit_log: Optional[HealthScoreAuditLog] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.profile_store = profile_store
        self.insights_engine = insights_engine
        self.communication_provider = communication_provider
        self.profile_engine = profile_engine
        self.config = config or DEFAULT_CONFIG
        self.clock = clock
        self.cache = cache if cache is not None else HealthScoreCache(self.config.cache_capacity, clock=clock)
        self.audit_log = audit_log

        self.scorer = HealthScorer(self.config)
        self.trend_tracker = TrendTracker(self.config)
        self.risk_assessor = RiskAssessor(self.config)
        self.engagement_analyzer = EngagementAnalyzer(self.config)
        self.prediction_model = PredictionModel(self.config)
        self.insight_generator = InsightGenerator(self.config)
        self.benchmark_comparator = BenchmarkComparator(self.config, benchmark_provider)

        self._read_pool = ThreadPoolExecutor(
            max_workers=self.config.read_workers,
            thread_name_prefix="health-read",
        )

    def __enter__(self) -> "HealthEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Shut down the collaborator read pool."""
        self._read_pool.shutdown(wait=True)

    # --- scoring ------------------------------------------------------------

    def generate_health_score(self, customer_id: str) -> CustomerHealthScore:
        """
        Compute, cache and return a fresh health score.

        Args:
            customer_id: Customer to score

        Returns:
            CustomerHealthScore

        Raises:
            ValueError: If customer_id is blank
            CustomerNotFoundError: If the profile store has no such customer
            DependencyError: If a collaborator fails or returns the wrong type
            SchemaError: If the collaborator data fails validation
        """
        if not customer_id or not customer_id.strip():
            raise ValueError("customer_id must be a non-empty string")

        now = self.clock()
        try:
            aggregates = self._load_aggregates(customer_id, now)

            with self.cache.lock(customer_id):
                previous = self.cache.get_score(customer_id)
                score = self._build_score(aggregates, previous, now)
                try:
                    self.cache.put(score)
                except Exception:
                    logger.exception("Failed to cache health score for %s", customer_id)
        except (CustomerNotFoundError, DependencyError, SchemaError) as e:
            self._audit_failure(customer_id, e)
            raise

        if self.audit_log is not None:
            try:
                self.audit_log.log_score(score)
            except Exception:
                logger.exception("Failed to write audit record for %s", customer_id)

        logger.info(
            "Scored %s: %d (%s, %s)",
            customer_id,
            score.overall_health_score,
            score.health_level,
            score.health_trend,
        )
        return score

    def _audit_failure(self, customer_id: str, error: Exception) -> None:
        if self.audit_log is None:
            return
        try:
            self.audit_log.log_failure(customer_id, str(error))
        except Exception:
            logger.exception("Failed to write audit record for %s", customer_id)

    def get_batch_health_scores(self, customer_ids: List[str]) -> List[CustomerHealthScore]:
        """
        Score several customers in parallel.

        Results are in input order. The first per-customer error is raised.
        """
        if not customer_ids:
            raise ValueError("customer_ids must not be empty")
        if len(customer_ids) > self.config.max_batch_size:
            raise ValueError(
                f"At most {self.config.max_batch_size} customers per batch, got {len(customer_ids)}"
            )

        workers = min(self.config.batch_workers, len(customer_ids))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="health-batch") as pool:
            return list(pool.map(self.generate_health_score, customer_ids))

    def _load_aggregates(self, customer_id: str, now: datetime) -> CustomerAggregates:
        """Read all four collaborators concurrently."""
        futures = {
            "profile_store": self._read_pool.submit(self.profile_store.get, customer_id),
            "insights_engine": self._read_pool.submit(self.insights_engine.generate, customer_id),
            "communication_provider": self._read_pool.submit(
                self.communication_provider.get,
                customer_id,
                self.config.communication_history_limit,
            ),
            "profile_engine": self._read_pool.submit(self.profile_engine.generate, customer_id),
        }

        results = {}
        for source, future in futures.items():
            try:
                results[source] = future.result()
            except CustomerNotFoundError:
                raise
            except Exception as e:
                raise DependencyError(source, customer_id, e) from e

            if source == "profile_store" and results[source] is None:
                raise CustomerNotFoundError(customer_id)

            expected = _COLLABORATOR_TYPES[source]
            if not isinstance(results[source], expected):
                error = TypeError(
                    f"{source} returned {type(results[source]).__name__} for {customer_id}"
                )
                raise DependencyError(source, customer_id, error) from error

        return CustomerAggregates(
            profile=results["profile_store"],
            insights=results["insights_engine"],
            communication=results["communication_provider"],
            behavior=results["profile_engine"],
            as_of=now,
        )

    def _build_score(
        self,
        aggregates: CustomerAggregates,
        previous: Optional[CustomerHealthScore],
        now: datetime,
    ) -> CustomerHealthScore:
        overall, level, components = self.scorer.score_single(aggregates.to_row())
        trend, history = self.trend_tracker.track(overall, previous, now)

        insight_result = self.insight_generator.generate(aggregates, overall)
        if not insight_result.ok:
            logger.warning(insight_result.warning)

        frequency = self.config.get_update_frequency(overall, level)
        return CustomerHealthScore(
            customer_id=aggregates.customer_id,
            overall_health_score=overall,
            health_level=level,
            health_trend=trend,
            scoring_components=components,
            risk_assessment=self.risk_assessor.assess(aggregates, overall),
            engagement_analysis=self.engagement_analyzer.analyze(aggregates),
            prediction_models=self.prediction_model.predict(aggregates),
            health_history=history,
            automated_insights=insight_result.insights,
            benchmark_comparison=self.benchmark_comparator.compare(aggregates, overall),
            last_updated=now,
            next_update_due=now + self.config.get_update_interval(frequency),
            update_frequency=frequency,
        )

    # --- cache queries ------------------------------------------------------

    def get_health_scoring_metrics(self) -> HealthScoringMetrics:
        """Distributions over scores cached within the metrics window."""
        cutoff = self.clock() - timedelta(days=self.config.metrics_window_days)
        recent = [entry.score for entry in self.cache.entries() if entry.timestamp > cutoff]

        df = pd.DataFrame(
            [
                {
                    "health_score": score.overall_health_score,
                    "health_level": score.health_level,
                    "churn_risk": score.risk_assessment.churn_risk,
                    "engagement_level": score.engagement_analysis.level,
                    "health_trend": score.health_trend,
                }
                for score in recent
            ],
            columns=["health_score", "health_level", "churn_risk", "engagement_level", "health_trend"],
        )

        return HealthScoringMetrics(
            total_customers=len(df),
            average_health_score=float(df["health_score"].mean()) if len(df) else 0.0,
            health_distribution=_distribution(df["health_level"], HEALTH_LEVEL_ORDER[::-1]),
            churn_risk_distribution=_distribution(df["churn_risk"], CHURN_RISK_ORDER),
            engagement_distribution=_distribution(df["engagement_level"], ENGAGEMENT_LEVEL_ORDER),
            trends_analysis=_distribution(df["health_trend"], TREND_ORDER),
        )

    def get_health_score_alerts(self) -> List[HealthScoreAlert]:
        """
        Alerts for customers scored within the alert window.

        Rules are checked in order and the first match wins:
        - overall score < 40: CRITICAL_HEALTH (HIGH)
        - churn probability > 70: HIGH_CHURN_RISK (HIGH)
        - trend DECLINING: DECLINING_TREND (MEDIUM)

        Returns:
            Alerts sorted by ascending health score
        """
        cfg = self.config
        cutoff = self.clock() - timedelta(hours=cfg.alert_window_hours)

        alerts = []
        for entry in self.cache.entries():
            if entry.timestamp <= cutoff:
                continue
            score = entry.score
            probability = score.risk_assessment.churn_probability

            if score.overall_health_score < cfg.critical_health_threshold:
                alert_type, priority = "CRITICAL_HEALTH", "HIGH"
            elif probability > cfg.critical_churn_threshold:
                alert_type, priority = "HIGH_CHURN_RISK", "HIGH"
            elif score.health_trend == "DECLINING":
                alert_type, priority = "DECLINING_TREND", "MEDIUM"
            else:
                continue

            try:
                profile = self.profile_store.get(entry.customer_id)
            except Exception:
                logger.warning("Skipping alert for %s: profile lookup failed", entry.customer_id, exc_info=True)
                continue
            if profile is None:
                logger.warning("Skipping alert for %s: customer no longer exists", entry.customer_id)
                continue

            if alert_type == "CRITICAL_HEALTH":
                message = f"Health score of {profile.name} is critical ({score.overall_health_score})"
            elif alert_type == "HIGH_CHURN_RISK":
                message = f"High churn probability for {profile.name} ({probability:g}%)"
            else:
                message = f"Health score of {profile.name} is declining"

            alerts.append(HealthScoreAlert(
                customer_id=entry.customer_id,
                customer_name=profile.name,
                health_score=score.overall_health_score,
                alert_type=alert_type,
                message=message,
                priority=priority,
            ))

        return sorted(alerts, key=lambda alert: alert.health_score)

    def get_customers_needing_health_updates(self) -> List[str]:
        """Ids of cached customers whose next update is due."""
        now = self.clock()
        return [
            entry.customer_id
            for entry in self.cache.entries()
            if entry.score.next_update_due <= now
        ]
