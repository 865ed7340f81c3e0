"""
Audit logging for generated health scores.

Writes one JSON record per generated score (and per failure) so any
score can be traced back to the exact components and config version that
produced it.
"""

import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from .results import CustomerHealthScore


def _safe_name(customer_id: str) -> str:
    return "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in customer_id)


class HealthScoreAuditLog:
    """Structured JSON records of health score computations."""

    def __init__(self, logs_dir: Path | str, config_version: str = ""):
        """
        Initialize audit log.

        Args:
            logs_dir: Directory to write record files
            config_version: Scoring config version stamped on every record
        """
        self.logs_dir = Path(logs_dir)
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        self.config_version = config_version

    def log_score(self, score: "CustomerHealthScore") -> Path:
        """
        Write a record for a generated score.

        Args:
            score: CustomerHealthScore returned to the caller

        Returns:
            Path to record file
        """
        stamp = score.last_updated.strftime("%Y%m%dT%H%M%S%f")
        log_entry = {
            "customer_id": score.customer_id,
            "timestamp": score.last_updated.isoformat(),
            "config_version": self.config_version,
            "status": "SCORED",
            "result": score.to_dict(),
        }

        log_path = self.logs_dir / f"score_{_safe_name(score.customer_id)}_{stamp}_{uuid.uuid4().hex[:8]}.json"
        with open(log_path, "w") as f:
            json.dump(log_entry, f, indent=2, default=str)

        return log_path

    def log_failure(self, customer_id: str, error: str) -> Path:
        """
        Write a record for a failed computation.

        Args:
            customer_id: Customer whose score failed
            error: Error message

        Returns:
            Path to record file
        """
        now = datetime.now()
        log_entry = {
            "customer_id": customer_id,
            "timestamp": now.isoformat(),
            "config_version": self.config_version,
            "status": "ERROR",
            "error": error,
        }

        stamp = now.strftime("%Y%m%dT%H%M%S%f")
        log_path = self.logs_dir / f"error_{_safe_name(customer_id)}_{stamp}_{uuid.uuid4().hex[:8]}.json"
        with open(log_path, "w") as f:
            json.dump(log_entry, f, indent=2)

        return log_path

    def get_all_logs(self) -> list[dict]:
        """
        Load all records.

        Returns:
            List of record dictionaries, sorted by timestamp
        """
        logs = []
        for log_file in self.logs_dir.glob("*.json"):
            with open(log_file) as f:
                logs.append(json.load(f))
        return sorted(logs, key=lambda log: log["timestamp"])

    def get_customer_history(self, customer_id: str) -> list[dict]:
        """Scored records for one customer, oldest first."""
        return [
            log for log in self.get_all_logs()
            if log["customer_id"] == customer_id and log["status"] == "SCORED"
        ]

    def get_summary_dataframe(self) -> pd.DataFrame:
        """
        Get summary of all records as DataFrame.

        Returns:
            DataFrame with one row per record, newest first
        """
        logs = self.get_all_logs()
        if not logs:
            return pd.DataFrame()

        summary = []
        for log in logs:
            entry = {
                "customer_id": log["customer_id"],
                "timestamp": log["timestamp"],
                "status": log["status"],
            }
            result = log.get("result")
            if result:
                entry["health_score"] = result["overallHealthScore"]
                entry["health_level"] = result["healthLevel"]
                entry["health_trend"] = result["healthTrend"]
                entry["churn_risk"] = result["riskAssessment"]["churnRisk"]
            summary.append(entry)

        df = pd.DataFrame(summary)
        return df.sort_values("timestamp", ascending=False)
