"""Error taxonomy for the churn risk pipeline."""

from dataclasses import dataclass
from typing import Optional, Sequence


class ChurnPipelineError(Exception):
    """Base class for all pipeline errors."""


class SchemaError(ChurnPipelineError):
    """Input structure is malformed or missing required columns."""


class ValidationFailed(ChurnPipelineError):
    """One or more rows violate field constraints. Nothing was scored."""

    def __init__(self, issues: Sequence["ValidationIssue"]):
        self.issues = list(issues)
        super().__init__(
            f"{len(self.issues)} validation issue(s): "
            + "; ".join(str(issue) for issue in self.issues)
        )


class RemoteServiceError(ChurnPipelineError):
    """The prediction service could not be reached or answered badly."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True)
class ValidationIssue:
    """A single constraint violation on one field of one input row."""

    row: int
    field: str
    message: str

    def __str__(self) -> str:
        return f"Row {self.row}: {self.message}"


@dataclass(frozen=True)
class ParseWarning:
    """A data row that was skipped during parsing. Non-fatal."""

    row: int
    message: str

    def __str__(self) -> str:
        return f"Row {self.row}: {self.message}"
