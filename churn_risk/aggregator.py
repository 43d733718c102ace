"""Batch-level summary statistics over prediction outcomes."""

from dataclasses import asdict, dataclass, field
from typing import Dict, Sequence

import pandas as pd

from .scorer import PredictionOutcome

RISK_BUCKETS = ["HIGH", "MEDIUM", "LOW", "VERY_LOW", "ERROR"]

SUCCESS_RATE_DECIMALS = 2
PROBABILITY_DECIMALS = 3
REVENUE_DECIMALS = 2


@dataclass(frozen=True)
class BatchSummary:
    """
    Aggregate view of one batch.

    Attributes:
        total_customers: Number of outcomes
        successful_predictions: Outcomes with an assessment
        failed_predictions: Outcomes marked ERROR
        success_rate: Percentage of successes, 2 decimals
        average_churn_probability: Mean over successes (0 if none)
        risk_distribution: Count per risk level, plus ERROR for failures
        total_annual_revenue_at_risk: Sum of annual_risk_ghs over successes
        high_risk_customers: Successes with risk_level HIGH
        customers_needing_immediate_attention: HIGH risk and CRITICAL priority
    """

    total_customers: int
    successful_predictions: int
    failed_predictions: int
    success_rate: float
    average_churn_probability: float
    risk_distribution: Dict[str, int] = field(default_factory=dict)
    total_annual_revenue_at_risk: float = 0.0
    high_risk_customers: int = 0
    customers_needing_immediate_attention: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def aggregate(outcomes: Sequence[PredictionOutcome]) -> BatchSummary:
    """
    Summarize a batch of outcomes.

    Pure function of its input; outcomes are not modified.
    """
    total = len(outcomes)
    df = pd.DataFrame(
        [
            {
                "risk_level": o.assessment.risk_level,
                "priority": o.assessment.priority,
                "churn_probability": o.assessment.churn_probability,
                "annual_risk_ghs": o.assessment.estimated_revenue_risk.annual_risk_ghs,
            }
            for o in outcomes
            if o.ok
        ],
        columns=["risk_level", "priority", "churn_probability", "annual_risk_ghs"],
    )
    successful = len(df)
    failed = total - successful

    distribution = {bucket: 0 for bucket in RISK_BUCKETS}
    for level, count in df["risk_level"].value_counts().items():
        distribution[level] = distribution.get(level, 0) + int(count)
    distribution["ERROR"] = failed

    is_high = df["risk_level"] == "HIGH"

    return BatchSummary(
        total_customers=total,
        successful_predictions=successful,
        failed_predictions=failed,
        success_rate=round(successful / total * 100, SUCCESS_RATE_DECIMALS) if total else 0.0,
        average_churn_probability=(
            round(float(df["churn_probability"].mean()), PROBABILITY_DECIMALS)
            if successful
            else 0.0
        ),
        risk_distribution=distribution,
        total_annual_revenue_at_risk=round(
            float(df["annual_risk_ghs"].sum()), REVENUE_DECIMALS
        ),
        high_risk_customers=int(is_high.sum()),
        customers_needing_immediate_attention=int(
            (is_high & (df["priority"] == "CRITICAL")).sum()
        ),
    )
