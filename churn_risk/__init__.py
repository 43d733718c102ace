"""
Churn Risk Pipeline

Ingests customer usage data, validates it and produces churn risk
assessments with batch-level revenue exposure.
"""

from .aggregator import BatchSummary, aggregate
from .config import PipelineConfig, ScoringConfig, ServiceConfig
from .exceptions import (
    ChurnPipelineError,
    ParseWarning,
    RemoteServiceError,
    SchemaError,
    ValidationFailed,
    ValidationIssue,
)
from .exporter import to_delimited, write_csv
from .parser import CsvParser, parse
from .pipeline import BatchResult, ChurnPipeline
from .scorer import PredictionOutcome, RiskAssessment, RiskScorer, generate_sample_data
from .validator import RecordValidator, validate

__all__ = [
    "BatchResult",
    "BatchSummary",
    "ChurnPipeline",
    "ChurnPipelineError",
    "CsvParser",
    "ParseWarning",
    "PipelineConfig",
    "PredictionOutcome",
    "RecordValidator",
    "RemoteServiceError",
    "RiskAssessment",
    "RiskScorer",
    "SchemaError",
    "ScoringConfig",
    "ServiceConfig",
    "ValidationFailed",
    "ValidationIssue",
    "aggregate",
    "generate_sample_data",
    "parse",
    "to_delimited",
    "validate",
    "write_csv",
]
__version__ = "1.0.0"
