"""
End-to-end churn risk pipeline.

parse -> validate -> score (local heuristic or remote service) -> aggregate

Usage:
    from churn_risk import ChurnPipeline, PipelineConfig

    pipeline = ChurnPipeline(PipelineConfig(seed=42))
    result = pipeline.run_batch(csv_text)
    print(result.summary.success_rate)
    result.write_csv("exports/")

    assessment = pipeline.assess_single(form_data)
"""

import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

import pandas as pd

from .aggregator import BatchSummary, aggregate
from .config import PipelineConfig
from .exceptions import (
    ParseWarning,
    RemoteServiceError,
    SchemaError,
    ValidationFailed,
    ValidationIssue,
)
from .exporter import to_delimited, to_frame, write_csv
from .parser import CsvParser
from .remote import PredictionClient
from .run_log import RunLogger
from .scorer import PredictionOutcome, RiskAssessment, RiskScorer
from .validator import RecordValidator, invalid_rows, normalize_record

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """
    Everything produced by one batch run.

    Attributes:
        outcomes: One outcome per accepted input row, in input order
        summary: Aggregate statistics over outcomes
        warnings: Rows skipped by the parser
        issues: Validation issues of rows reported as ERROR (partial mode)
        source: "heuristic", "remote" or "heuristic-fallback"
    """

    outcomes: List[PredictionOutcome]
    summary: BatchSummary
    batch_id: str
    timestamp: str
    model_version: str
    source: str
    warnings: List[ParseWarning] = field(default_factory=list)
    issues: List[ValidationIssue] = field(default_factory=list)

    def to_frame(self) -> pd.DataFrame:
        return to_frame(self.outcomes)

    def to_csv(self) -> str:
        return to_delimited(self.outcomes)

    def write_csv(self, directory: Path | str = ".") -> Path:
        return write_csv(self.outcomes, directory)


class ChurnPipeline:
    """
    Orchestrates parsing, validation, scoring and aggregation.

    Scoring goes to the remote prediction service when a client is
    configured, otherwise to the local heuristic. Validation is
    all-or-nothing unless PipelineConfig.allow_partial is set, in which
    case invalid rows become ERROR outcomes and the rest are scored.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        scorer: Optional[RiskScorer] = None,
        client: Optional[PredictionClient] = None,
        run_logger: Optional[RunLogger] = None,
    ):
        self.config = config or PipelineConfig()
        self.parser = CsvParser(numeric_policy=self.config.numeric_policy)
        self.validator = RecordValidator()
        self.scorer = scorer or RiskScorer(self.config.scoring, seed=self.config.seed)

        if client is None and self.config.use_remote:
            client = PredictionClient(self.config.service)
        self.client = client

        if run_logger is None and self.config.logs_dir:
            run_logger = RunLogger(self.config.logs_dir)
        self.run_logger = run_logger

    def _fail(self, batch_id: str, stage: str, error: Exception) -> None:
        if self.run_logger is not None:
            self.run_logger.log_failure(batch_id, stage, str(error))

    def assess_single(self, form_data: Mapping) -> RiskAssessment:
        """
        Assess one customer submitted through a form.

        Raises:
            ValidationFailed: If any field is missing or invalid
            RemoteServiceError: If the service fails and fallback is off
        """
        self.validator.ensure_valid([form_data])
        record = normalize_record(form_data)

        if self.client is not None:
            try:
                return self.client.predict(record)
            except RemoteServiceError as exc:
                if not self.config.fallback_to_heuristic:
                    raise
                logger.warning(
                    "Remote prediction failed for %s, using heuristic: %s",
                    record["customer_id"],
                    exc,
                )
        return self.scorer.score(record)

    def _predict(
        self, records: List[Dict[str, object]], batch_id: str
    ) -> Tuple[List[PredictionOutcome], str, str]:
        """Score valid records. Returns (outcomes, source, model_version)."""
        heuristic_version = self.config.scoring.model_version
        if not records:
            return [], "heuristic", heuristic_version

        if self.client is not None:
            try:
                response = self.client.predict_batch(records)
                if len(response.outcomes) != len(records):
                    raise RemoteServiceError(
                        f"Prediction service returned {len(response.outcomes)} "
                        f"result(s) for {len(records)} customer(s)"
                    )
                return response.outcomes, "remote", response.model_version
            except RemoteServiceError as exc:
                if not self.config.fallback_to_heuristic:
                    self._fail(batch_id, "predict", exc)
                    raise
                logger.warning("Remote batch prediction failed, using heuristic: %s", exc)
                source = "heuristic-fallback"
        else:
            source = "heuristic"

        assessments = self.scorer.score_records(records)
        return [PredictionOutcome.success(a) for a in assessments], source, heuristic_version

    def run_batch(self, text: str) -> BatchResult:
        """
        Run the full pipeline over delimited text.

        Raises:
            SchemaError: If the input structure is invalid
            ValidationFailed: If any row is invalid and partial mode is off
            RemoteServiceError: If the batch call fails and fallback is off
        """
        batch_id = uuid.uuid4().hex[:12]

        try:
            parsed = self.parser.parse(text)
        except SchemaError as exc:
            self._fail(batch_id, "parse", exc)
            raise

        issues = self.validator.validate(parsed.records, parsed.rows)
        if issues and not self.config.allow_partial:
            logger.info("Batch %s rejected with %d issue(s)", batch_id, len(issues))
            error = ValidationFailed(issues)
            self._fail(batch_id, "validate", error)
            raise error

        bad_rows = invalid_rows(issues)
        messages: Dict[int, List[str]] = defaultdict(list)
        for issue in issues:
            messages[issue.row].append(issue.message)

        valid = [
            normalize_record(record)
            for record, row in zip(parsed.records, parsed.rows)
            if row not in bad_rows
        ]
        predicted, source, model_version = self._predict(valid, batch_id)

        # Merge back into input order
        predicted_iter = iter(predicted)
        outcomes = []
        for record, row in zip(parsed.records, parsed.rows):
            if row in bad_rows:
                customer_id = str(record.get("customer_id") or "").strip() or None
                outcomes.append(
                    PredictionOutcome.failure(customer_id, "; ".join(messages[row]))
                )
            else:
                outcomes.append(next(predicted_iter))

        result = BatchResult(
            outcomes=outcomes,
            summary=aggregate(outcomes),
            batch_id=batch_id,
            timestamp=datetime.now(timezone.utc).isoformat(),
            model_version=model_version,
            source=source,
            warnings=parsed.warnings,
            issues=issues,
        )
        logger.info(
            "Batch %s scored %d customer(s) via %s",
            batch_id,
            result.summary.total_customers,
            source,
        )
        if self.run_logger is not None:
            self.run_logger.log_run(result)
        return result

    def score_frame(self, df: pd.DataFrame) -> BatchResult:
        """Run the pipeline over a DataFrame (e.g. from generate_sample_data)."""
        return self.run_batch(df.to_csv(index=False))
