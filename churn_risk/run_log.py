"""
Run logging for the churn risk pipeline.

Writes one JSON log per batch run (success or failure).
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from .pipeline import BatchResult


class RunLogger:
    """Structured JSON logging for batch runs."""

    def __init__(self, logs_dir: Path | str):
        """
        Initialize logger.

        Args:
            logs_dir: Directory to write log files
        """
        self.logs_dir = Path(logs_dir)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    def log_run(self, result: "BatchResult") -> Path:
        """
        Log a completed batch run.

        Args:
            result: BatchResult from the pipeline

        Returns:
            Path to log file
        """
        log_entry = {
            "batch_id": result.batch_id,
            "timestamp": result.timestamp,
            "model_version": result.model_version,
            "source": result.source,
            "summary": result.summary.to_dict(),
            "parse_warnings": [str(w) for w in result.warnings],
            "status": "SUCCESS",
        }

        log_path = self.logs_dir / f"run_{result.batch_id}.json"
        with open(log_path, "w") as f:
            json.dump(log_entry, f, indent=2, default=str)

        return log_path

    def log_failure(self, batch_id: str, stage: str, error: str) -> Path:
        """
        Log a batch that was rejected or errored.

        Args:
            batch_id: Unique batch ID
            stage: Pipeline stage that failed (parse, validate, predict)
            error: Error message

        Returns:
            Path to log file
        """
        log_entry = {
            "batch_id": batch_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "stage": stage,
            "status": "ERROR",
            "error": error,
        }

        log_path = self.logs_dir / f"run_{batch_id}.json"
        with open(log_path, "w") as f:
            json.dump(log_entry, f, indent=2)

        return log_path

    def get_all_logs(self) -> list[dict]:
        """
        Load all run logs.

        Returns:
            List of log dictionaries, sorted by timestamp
        """
        logs = []
        for log_file in self.logs_dir.glob("run_*.json"):
            with open(log_file) as f:
                logs.append(json.load(f))
        return sorted(logs, key=lambda log: log.get("timestamp", ""))

    def get_summary_dataframe(self) -> pd.DataFrame:
        """
        Get summary of all runs as DataFrame.

        Returns:
            DataFrame with one row per run, newest first
        """
        logs = self.get_all_logs()
        if not logs:
            return pd.DataFrame()

        summary = []
        for log in logs:
            entry = {
                "batch_id": log["batch_id"],
                "timestamp": log["timestamp"],
                "status": log["status"],
            }

            if "summary" in log:
                stats = log["summary"]
                for key in [
                    "total_customers",
                    "success_rate",
                    "high_risk_customers",
                    "total_annual_revenue_at_risk",
                ]:
                    entry[key] = stats.get(key)
            else:
                entry["error"] = log.get("error")

            summary.append(entry)

        df = pd.DataFrame(summary)
        return df.sort_values("timestamp", ascending=False)
