"""
CSV export of prediction outcomes.

Every row has the same columns. Error outcomes are rendered with fallback
literals instead of blanks so downstream spreadsheets line up.
"""

from datetime import date
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from .scorer import PredictionOutcome

EXPORT_COLUMNS = [
    "customer_id",
    "churn_probability",
    "risk_level",
    "confidence",
    "recommended_action",
    "priority",
    "monthly_risk_ghs",
    "annual_risk_ghs",
    "intervention_timeline",
    "success_probability",
    "status",
]

ERROR_FALLBACKS = {
    "customer_id": "N/A",
    "churn_probability": 0,
    "risk_level": "ERROR",
    "confidence": "N/A",
    "recommended_action": "MANUAL_REVIEW",
    "priority": "HIGH",
    "monthly_risk_ghs": 0,
    "annual_risk_ghs": 0,
    "intervention_timeline": "ASAP",
    "success_probability": 0,
    "status": "ERROR",
}


def outcome_row(outcome: PredictionOutcome) -> dict:
    """Flatten one outcome into export columns."""
    if not outcome.ok:
        row = dict(ERROR_FALLBACKS)
        if outcome.customer_id:
            row["customer_id"] = outcome.customer_id
        return row

    a = outcome.assessment
    return {
        "customer_id": a.customer_id,
        "churn_probability": a.churn_probability,
        "risk_level": a.risk_level,
        "confidence": a.confidence,
        "recommended_action": a.recommended_action,
        "priority": a.priority,
        "monthly_risk_ghs": a.estimated_revenue_risk.monthly_risk_ghs,
        "annual_risk_ghs": a.estimated_revenue_risk.annual_risk_ghs,
        "intervention_timeline": a.intervention_timeline,
        "success_probability": a.success_probability,
        "status": outcome.status,
    }


def to_frame(outcomes: Sequence[PredictionOutcome]) -> pd.DataFrame:
    # object dtype: fallback 0 must render as "0", not "0.0"
    return pd.DataFrame(
        [outcome_row(o) for o in outcomes], columns=EXPORT_COLUMNS, dtype=object
    )


def to_delimited(outcomes: Sequence[PredictionOutcome], delimiter: str = ",") -> str:
    """
    Render outcomes as delimited text with a header row.

    Values containing the delimiter or quotes are quoted.
    """
    return to_frame(outcomes).to_csv(index=False, sep=delimiter, lineterminator="\n")


def export_filename(today: Optional[date] = None) -> str:
    """Dated export filename, e.g. churn_predictions_2025-01-31.csv."""
    today = today or date.today()
    return f"churn_predictions_{today.isoformat()}.csv"


def write_csv(
    outcomes: Sequence[PredictionOutcome],
    directory: Path | str = ".",
    today: Optional[date] = None,
) -> Path:
    """
    Write outcomes to a dated CSV file.

    Returns:
        Path to the written file
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(today)
    path.write_text(to_delimited(outcomes))
    return path
