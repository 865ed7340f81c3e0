"""
Tests for the HealthEngine facade: scoring, caching and cache queries.
"""

import logging
import threading
from dataclasses import replace
from datetime import timedelta

import pytest

from health_engine import CustomerNotFoundError, DependencyError, HealthEngine
from health_engine.audit import HealthScoreAuditLog
from health_engine.inputs import CustomerInsights
from health_engine.insights import CRITICAL_HEALTH_ALERT
from health_engine.risk import LOW_SATISFACTION_FACTOR

from conftest import NOW


class TestGenerateHealthScore:
    """End-to-end scoring through the facade."""

    def test_new_customer_scenario(self, engine):
        score = engine.generate_health_score("NEW_001")

        assert score.overall_health_score == 33
        assert score.health_level == "CRITICAL"
        assert score.health_trend == "STABLE"
        assert score.risk_assessment.churn_risk == "HIGH"
        assert score.engagement_analysis.level == "DISENGAGED"
        assert score.automated_insights.critical_alerts == (CRITICAL_HEALTH_ALERT,)
        assert score.benchmark_comparison.ranking == "BELOW_AVERAGE"
        assert score.update_frequency == "DAILY"
        assert score.last_updated == NOW
        assert score.next_update_due == NOW + timedelta(days=1)

    def test_loyal_customer(self, engine):
        score = engine.generate_health_score("LOYAL_001")

        assert score.overall_health_score == 96
        assert score.health_level == "EXCELLENT"
        assert score.risk_assessment.churn_risk == "LOW"
        assert score.update_frequency == "MONTHLY"
        assert score.next_update_due == NOW + timedelta(days=30)

    def test_high_upstream_churn_is_critical(self, engine, add_customer):
        add_customer("CHURN_001", insights=CustomerInsights(churn_probability=85))

        score = engine.generate_health_score("CHURN_001")

        assert score.risk_assessment.churn_probability == 85
        assert score.risk_assessment.churn_risk == "CRITICAL"

    def test_communication_history_limit(self, engine):
        engine.generate_health_score("NEW_001")
        assert engine.communication_provider.calls == [("NEW_001", 50)]

    def test_rescoring_is_idempotent(self, engine):
        first = engine.generate_health_score("NEW_001")
        second = engine.generate_health_score("NEW_001")

        assert second.overall_health_score == first.overall_health_score
        assert second.health_trend == "STABLE"
        assert second.health_history.previous_score == 33
        assert second.health_history.change_percentage == 0
        assert second.health_history.trend_direction == "STABLE"
        assert len(engine.cache) == 1

    def test_improving_trend(self, engine, loyal_customer_aggregates):
        engine.generate_health_score("NEW_001")
        engine.insights_engine.insights["NEW_001"] = loyal_customer_aggregates.insights

        score = engine.generate_health_score("NEW_001")

        assert score.overall_health_score == 47
        assert score.health_trend == "IMPROVING"
        assert score.health_history.trend_direction == "UP"
        assert len(score.health_history.significant_changes) == 1

    def test_declining_trend(self, engine):
        engine.generate_health_score("LOYAL_001")
        engine.insights_engine.insights["LOYAL_001"] = CustomerInsights()

        score = engine.generate_health_score("LOYAL_001")

        assert score.overall_health_score == 83
        assert score.health_trend == "DECLINING"
        assert score.health_history.previous_score == 96

    @pytest.mark.parametrize("customer_id", ["", "   "])
    def test_blank_id_rejected(self, engine, customer_id):
        with pytest.raises(ValueError):
            engine.generate_health_score(customer_id)

    def test_unknown_customer(self, engine):
        with pytest.raises(CustomerNotFoundError) as exc_info:
            engine.generate_health_score("GHOST")

        assert exc_info.value.customer_id == "GHOST"
        assert "GHOST" not in engine.cache

    def test_not_found_raised_by_store(self, engine, monkeypatch):
        def missing(customer_id):
            raise CustomerNotFoundError(customer_id)

        monkeypatch.setattr(engine.profile_store, "get", missing)

        with pytest.raises(CustomerNotFoundError):
            engine.generate_health_score("NEW_001")

    def test_dependency_failure_wrapped(self, engine):
        engine.insights_engine.fail = True

        with pytest.raises(DependencyError) as exc_info:
            engine.generate_health_score("NEW_001")

        assert exc_info.value.source == "insights_engine"
        assert isinstance(exc_info.value.__cause__, TimeoutError)
        assert len(engine.cache) == 0

    @pytest.mark.parametrize("source,attribute", [
        ("profile_engine", "generate"),
        ("insights_engine", "generate"),
    ])
    def test_wrong_return_type_is_dependency_error(self, engine, monkeypatch, source, attribute):
        monkeypatch.setattr(getattr(engine, source), attribute, lambda customer_id: None)

        with pytest.raises(DependencyError) as exc_info:
            engine.generate_health_score("NEW_001")

        assert exc_info.value.source == source
        assert isinstance(exc_info.value.__cause__, TypeError)
        assert len(engine.cache) == 0

    def test_missing_communication_summary_is_neutral(self, engine, monkeypatch):
        monkeypatch.setattr(engine.communication_provider, "get", lambda customer_id, limit: None)

        score = engine.generate_health_score("NEW_001")

        assert score.scoring_components.communication_score == 50

    def test_campaign_response_rate_above_100(self, engine, add_customer):
        """Campaign visits can outnumber deliveries, so the rate is not capped at 100."""
        add_customer("CAMP_001", insights=CustomerInsights(campaign_response_rate=250.0))

        score = engine.generate_health_score("CAMP_001")

        # 10 visits + 10 LOW loyalty engagement + round(250 * 0.1)
        assert score.scoring_components.engagement_score == 45
        assert 0 <= score.overall_health_score <= 100

    def test_satisfaction_component_rounded_but_rules_use_raw_value(self, engine, add_customer):
        add_customer("SAT_001", insights=CustomerInsights(satisfaction_score=49.6))

        score = engine.generate_health_score("SAT_001")

        assert score.scoring_components.satisfaction_score == 50
        assert LOW_SATISFACTION_FACTOR in score.risk_assessment.risk_factors

    def test_cache_write_failure_still_returns(self, engine, monkeypatch, caplog):
        caplog.set_level(logging.WARNING)

        def broken_put(score):
            raise MemoryError("cache full")

        monkeypatch.setattr(engine.cache, "put", broken_put)

        score = engine.generate_health_score("NEW_001")

        assert score.overall_health_score == 33
        assert "Failed to cache health score for NEW_001" in caplog.text

    def test_insight_failure_logged(self, engine, monkeypatch, caplog):
        caplog.set_level(logging.WARNING)

        def broken(aggregates, overall_score):
            raise KeyError("rules")

        monkeypatch.setattr(engine.insight_generator, "_evaluate", broken)

        score = engine.generate_health_score("NEW_001")

        assert score.automated_insights.critical_alerts == ()
        assert score.automated_insights.next_best_actions == ()
        assert "Insight generation failed for NEW_001" in caplog.text

    def test_to_dict_wire_format(self, engine):
        data = engine.generate_health_score("LOYAL_001").to_dict()

        assert data["customerId"] == "LOYAL_001"
        assert data["overallHealthScore"] == 96
        assert data["scoringComponents"]["engagementScore"] == 96
        assert data["riskAssessment"]["churnRisk"] == "LOW"
        assert data["predictionModels"]["lifetimeValuePrediction"]["timeframe"] == 24
        assert data["lastUpdated"] == NOW.isoformat()
        assert isinstance(data["automatedInsights"]["opportunities"], list)

    def test_summary(self, engine):
        summary = engine.generate_health_score("NEW_001").summary()

        assert summary["healthLevel"] == "CRITICAL"
        assert summary["churnRisk"] == "HIGH"
        assert summary["engagementLevel"] == "DISENGAGED"
        assert summary["criticalAlerts"] == [CRITICAL_HEALTH_ALERT]


class TestAuditLog:
    """Audit records written by the engine."""

    def _engine(self, engine, audit_log):
        return HealthEngine(
            engine.profile_store,
            engine.insights_engine,
            engine.communication_provider,
            engine.profile_engine,
            config=engine.config,
            audit_log=audit_log,
            clock=engine.clock,
        )

    def test_score_recorded(self, engine, tmp_path):
        audit_log = HealthScoreAuditLog(tmp_path / "audit", config_version="1.0.0")
        with self._engine(engine, audit_log) as audited:
            audited.generate_health_score("NEW_001")
            audited.generate_health_score("LOYAL_001")

        history = audit_log.get_customer_history("NEW_001")
        assert len(history) == 1
        assert history[0]["result"]["overallHealthScore"] == 33
        assert history[0]["config_version"] == "1.0.0"

        summary = audit_log.get_summary_dataframe()
        assert len(summary) == 2
        assert set(summary["health_level"]) == {"CRITICAL", "EXCELLENT"}

    def test_failure_record(self, tmp_path):
        audit_log = HealthScoreAuditLog(tmp_path)
        audit_log.log_failure("X/1", "boom")

        logs = audit_log.get_all_logs()
        assert logs[0]["status"] == "ERROR"
        assert audit_log.get_customer_history("X/1") == []

    def test_audit_failure_does_not_fail_scoring(self, engine, tmp_path, monkeypatch, caplog):
        caplog.set_level(logging.WARNING)
        audit_log = HealthScoreAuditLog(tmp_path)

        def broken(score):
            raise OSError("disk full")

        monkeypatch.setattr(audit_log, "log_score", broken)

        with self._engine(engine, audit_log) as audited:
            score = audited.generate_health_score("NEW_001")

        assert score.overall_health_score == 33
        assert "Failed to write audit record for NEW_001" in caplog.text

    def test_unknown_customer_recorded_as_error(self, engine, tmp_path):
        audit_log = HealthScoreAuditLog(tmp_path)
        with self._engine(engine, audit_log) as audited:
            with pytest.raises(CustomerNotFoundError):
                audited.generate_health_score("GHOST")

        logs = audit_log.get_all_logs()
        assert len(logs) == 1
        assert logs[0]["customer_id"] == "GHOST"
        assert logs[0]["status"] == "ERROR"
        assert "GHOST" in logs[0]["error"]

    def test_dependency_failure_recorded_as_error(self, engine, tmp_path):
        engine.insights_engine.fail = True
        audit_log = HealthScoreAuditLog(tmp_path)
        with self._engine(engine, audit_log) as audited:
            with pytest.raises(DependencyError):
                audited.generate_health_score("NEW_001")

        logs = audit_log.get_all_logs()
        assert [log["status"] for log in logs] == ["ERROR"]
        assert "insights_engine" in logs[0]["error"]

    def test_failure_record_error_keeps_original_exception(self, engine, tmp_path, monkeypatch, caplog):
        caplog.set_level(logging.WARNING)
        audit_log = HealthScoreAuditLog(tmp_path)

        def broken(customer_id, error):
            raise OSError("disk full")

        monkeypatch.setattr(audit_log, "log_failure", broken)

        with self._engine(engine, audit_log) as audited:
            with pytest.raises(CustomerNotFoundError):
                audited.generate_health_score("GHOST")

        assert "Failed to write audit record for GHOST" in caplog.text

    def test_rescoring_with_fixed_clock_keeps_both_records(self, engine, tmp_path):
        audit_log = HealthScoreAuditLog(tmp_path)
        with self._engine(engine, audit_log) as audited:
            audited.generate_health_score("NEW_001")
            audited.generate_health_score("NEW_001")

        assert len(audit_log.get_customer_history("NEW_001")) == 2


class TestBatchScoring:
    """Tests for get_batch_health_scores."""

    def test_results_in_input_order(self, engine, add_customer):
        ids = [f"B{i:02d}" for i in range(18)] + ["LOYAL_001", "NEW_001"]
        for customer_id in ids[:18]:
            add_customer(customer_id)

        scores = engine.get_batch_health_scores(ids)

        assert [s.customer_id for s in scores] == ids
        assert scores[-2].overall_health_score == 96
        assert len(engine.cache) == 20

    def test_empty_batch_rejected(self, engine):
        with pytest.raises(ValueError):
            engine.get_batch_health_scores([])

    def test_oversized_batch_rejected(self, engine):
        with pytest.raises(ValueError, match="At most 20"):
            engine.get_batch_health_scores(["NEW_001"] * 21)

    def test_error_propagates(self, engine):
        with pytest.raises(CustomerNotFoundError):
            engine.get_batch_health_scores(["NEW_001", "GHOST"])

    def test_same_customer_scored_concurrently(self, engine, monkeypatch):
        """Each write sees the score written just before it as its previous score."""
        counter = iter(range(1000))
        counter_lock = threading.Lock()

        def changing_insights(customer_id):
            with counter_lock:
                n = next(counter)
            return CustomerInsights(satisfaction_score=float((n * 37) % 101))

        monkeypatch.setattr(engine.insights_engine, "generate", changing_insights)

        writes = []
        original_put = engine.cache.put

        def recording_put(score):
            writes.append(score)
            return original_put(score)

        monkeypatch.setattr(engine.cache, "put", recording_put)

        scores = engine.get_batch_health_scores(["NEW_001"] * 20)

        assert len(writes) == 20
        assert {id(s) for s in scores} == {id(s) for s in writes}
        assert writes[0].health_history.previous_score == writes[0].overall_health_score
        for before, after in zip(writes, writes[1:]):
            assert after.health_history.previous_score == before.overall_health_score
        assert engine.cache.get_score("NEW_001") is writes[-1]


class TestMetrics:
    """Tests for get_health_scoring_metrics."""

    def test_empty_cache(self, engine):
        metrics = engine.get_health_scoring_metrics()

        assert metrics.total_customers == 0
        assert metrics.average_health_score == 0
        assert sum(metrics.health_distribution.values()) == 0
        assert set(metrics.churn_risk_distribution) == {"LOW", "MEDIUM", "HIGH", "CRITICAL"}

    def test_distributions(self, engine):
        engine.generate_health_score("NEW_001")
        engine.generate_health_score("LOYAL_001")

        metrics = engine.get_health_scoring_metrics()

        assert metrics.total_customers == 2
        assert metrics.average_health_score == pytest.approx(64.5)
        assert metrics.health_distribution == {
            "EXCELLENT": 1, "GOOD": 0, "FAIR": 0, "POOR": 0, "CRITICAL": 1,
        }
        assert metrics.churn_risk_distribution == {"LOW": 1, "MEDIUM": 0, "HIGH": 1, "CRITICAL": 0}
        assert metrics.engagement_distribution["HIGHLY_ENGAGED"] == 1
        assert metrics.engagement_distribution["DISENGAGED"] == 1
        assert metrics.trends_analysis == {"IMPROVING": 0, "STABLE": 2, "DECLINING": 0}

    def test_window_excludes_old_scores(self, engine, clock):
        engine.generate_health_score("NEW_001")
        clock.advance(days=8)
        engine.generate_health_score("LOYAL_001")

        metrics = engine.get_health_scoring_metrics()

        assert metrics.total_customers == 1
        assert metrics.average_health_score == 96

    def test_to_dict(self, engine):
        engine.generate_health_score("NEW_001")
        data = engine.get_health_scoring_metrics().to_dict()

        assert data["totalCustomers"] == 1
        assert data["healthDistribution"]["CRITICAL"] == 1


class TestAlerts:
    """Tests for get_health_score_alerts."""

    def test_alert_types_and_order(self, engine, add_customer, loyal_customer_aggregates):
        add_customer(
            "CHURNER",
            name="Churner",
            insights=replace(loyal_customer_aggregates.insights, churn_probability=75),
        )
        engine.generate_health_score("LOYAL_001")
        engine.insights_engine.insights["LOYAL_001"] = CustomerInsights()
        engine.generate_health_score("LOYAL_001")
        engine.generate_health_score("CHURNER")
        engine.generate_health_score("NEW_001")

        alerts = engine.get_health_score_alerts()

        assert [(a.customer_id, a.alert_type, a.priority) for a in alerts] == [
            ("NEW_001", "CRITICAL_HEALTH", "HIGH"),
            ("CHURNER", "HIGH_CHURN_RISK", "HIGH"),
            ("LOYAL_001", "DECLINING_TREND", "MEDIUM"),
        ]
        assert [a.health_score for a in alerts] == [33, 47, 83]
        assert alerts[0].customer_name == "New Customer"
        assert "New Customer" in alerts[0].message

    def test_healthy_customers_have_no_alerts(self, engine):
        engine.generate_health_score("LOYAL_001")
        assert engine.get_health_score_alerts() == []

    def test_first_matching_rule_wins(self, engine, add_customer):
        """Critical health and high churn together report CRITICAL_HEALTH only."""
        add_customer("BOTH", insights=CustomerInsights(churn_probability=95))
        engine.generate_health_score("BOTH")

        alerts = engine.get_health_score_alerts()

        assert len(alerts) == 1
        assert alerts[0].alert_type == "CRITICAL_HEALTH"

    def test_window_is_24_hours(self, engine, clock):
        engine.generate_health_score("NEW_001")
        clock.advance(hours=25)
        assert engine.get_health_score_alerts() == []

    def test_lookup_failure_skips_alert(self, engine, caplog):
        caplog.set_level(logging.WARNING)
        engine.generate_health_score("NEW_001")
        del engine.profile_store.profiles["NEW_001"]

        assert engine.get_health_score_alerts() == []
        assert "Skipping alert for NEW_001" in caplog.text

    def test_store_error_skips_alert(self, engine):
        engine.generate_health_score("NEW_001")
        engine.profile_store.fail = True
        assert engine.get_health_score_alerts() == []


class TestUpdateScheduling:
    """Tests for get_customers_needing_health_updates."""

    def test_due_by_frequency(self, engine, clock):
        engine.generate_health_score("NEW_001")
        engine.generate_health_score("LOYAL_001")

        assert engine.get_customers_needing_health_updates() == []

        clock.advance(days=1)
        assert engine.get_customers_needing_health_updates() == ["NEW_001"]

        clock.advance(days=29)
        assert engine.get_customers_needing_health_updates() == ["NEW_001", "LOYAL_001"]

    @pytest.mark.parametrize("score,level,expected", [
        (33, "CRITICAL", "DAILY"),
        (45, "POOR", "WEEKLY"),
        (65, "FAIR", "MONTHLY"),
        (95, "EXCELLENT", "MONTHLY"),
    ])
    def test_update_frequency(self, default_config, score, level, expected):
        assert default_config.get_update_frequency(score, level) == expected
