"""
Heuristic churn risk scorer.

Used when no live model response is available. Counts five risk indicators,
turns the count into a churn probability and derives the business insights
(priority, timeline, revenue at risk) from it.

Usage:
    from churn_risk import RiskScorer

    scorer = RiskScorer(seed=42)
    assessment = scorer.score(record)

    # Vectorized over a batch
    frame = scorer.score_frame(df)
    print(frame[["customer_id", "risk_score", "churn_probability", "risk_level"]])
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .config import ScoringConfig, DEFAULT_CONFIG
from .components import (
    LatePaymentIndicator,
    ServiceCallIndicator,
    DeviceAgeIndicator,
    MonthlyChargeIndicator,
    TenureIndicator,
)
from .schemas import ASSESSMENT_OUTPUT_SCHEMA, CONTRACT_TYPES, FIELDS


@dataclass(frozen=True)
class RevenueRisk:
    """Monetary exposure if the customer churns (GHS)."""

    monthly_risk_ghs: float
    annual_risk_ghs: float
    customer_lifetime_value: float


@dataclass(frozen=True)
class RiskAssessment:
    """
    Churn risk assessment for one customer.

    Produced by RiskScorer or parsed from the prediction service.
    """

    customer_id: str
    churn_probability: float
    risk_level: str
    confidence: str
    recommended_action: str
    priority: str
    next_steps: Tuple[str, ...]
    estimated_revenue_risk: RevenueRisk
    intervention_timeline: str
    success_probability: float
    timestamp: str = ""
    model_version: str = ""
    features_used: int = 0
    raw_response: Optional[str] = None
    risk_score: Optional[int] = None

    def to_dict(self) -> dict:
        """Nested representation matching the prediction service payload."""
        return {
            "customer_id": self.customer_id,
            "prediction": {
                "churn_probability": self.churn_probability,
                "risk_level": self.risk_level,
                "confidence": self.confidence,
                "raw_response": self.raw_response,
            },
            "business_insights": {
                "recommended_action": self.recommended_action,
                "priority": self.priority,
                "next_steps": list(self.next_steps),
                "estimated_revenue_risk": asdict(self.estimated_revenue_risk),
                "intervention_timeline": self.intervention_timeline,
                "success_probability": self.success_probability,
            },
            "timestamp": self.timestamp,
            "model_version": self.model_version,
            "features_used": self.features_used,
        }


@dataclass(frozen=True)
class PredictionOutcome:
    """Result of assessing one customer: an assessment or an error."""

    customer_id: Optional[str]
    status: str
    assessment: Optional[RiskAssessment] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, assessment: RiskAssessment) -> "PredictionOutcome":
        return cls(
            customer_id=assessment.customer_id,
            status="SUCCESS",
            assessment=assessment,
        )

    @classmethod
    def failure(cls, customer_id: Optional[str], error: str) -> "PredictionOutcome":
        return cls(customer_id=customer_id, status="ERROR", error=error)

    @property
    def ok(self) -> bool:
        return self.status == "SUCCESS" and self.assessment is not None


class RiskScorer:
    """
    Vectorized heuristic churn scorer.

    Indicators (each adds 1 to risk_score):
    - late_payments > 3
    - customer_service_calls > 5
    - device_age_months > 36
    - monthly_charge > 60
    - account_length_months < 12

    churn_probability = clamp(0.2 + 0.15 * risk_score + U(0, 0.2), 0, 1)

    The uniform term comes from an injectable numpy Generator so results
    are reproducible under a fixed seed. Set ScoringConfig.noise_scale to 0
    to remove it entirely.
    """

    REQUIRED_COLUMNS = [
        "customer_id",
        "late_payments",
        "customer_service_calls",
        "device_age_months",
        "monthly_charge",
        "account_length_months",
    ]

    def __init__(
        self,
        config: Optional[ScoringConfig] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        """
        Initialize scorer.

        Args:
            config: ScoringConfig instance. Uses DEFAULT_CONFIG if None.
            rng: Random generator for the perturbation term
            seed: Seed for a fresh generator when rng is not given
        """
        self.config = config or DEFAULT_CONFIG
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self._init_indicators()

    def _init_indicators(self) -> None:
        """Initialize all risk indicators."""
        self.indicators = {
            "late_payments": LatePaymentIndicator(self.config),
            "service_calls": ServiceCallIndicator(self.config),
            "device_age": DeviceAgeIndicator(self.config),
            "monthly_charge": MonthlyChargeIndicator(self.config),
            "tenure": TenureIndicator(self.config),
        }

    def validate_input(self, df: pd.DataFrame) -> None:
        """
        Validate required columns exist.

        Raises:
            ValueError: If required columns are missing
        """
        missing = set(self.REQUIRED_COLUMNS) - set(df.columns)
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

    def _noise(self, size: int, rng: Optional[np.random.Generator]) -> np.ndarray:
        if self.config.noise_scale <= 0:
            return np.zeros(size)
        generator = rng if rng is not None else self.rng
        return np.asarray(generator.uniform(0.0, self.config.noise_scale, size=size))

    def score_frame(
        self,
        df: pd.DataFrame,
        rng: Optional[np.random.Generator] = None,
    ) -> pd.DataFrame:
        """
        Score every row of a DataFrame.

        Args:
            df: DataFrame with required columns
            rng: Overrides the scorer's generator for this call

        Returns:
            Copy of df with indicator flags, risk_score, churn_probability,
            risk_level, priority and revenue columns added
        """
        self.validate_input(df)
        result = df.copy()

        flag_cols = []
        for name, indicator in self.indicators.items():
            col_name = f"{name}_flag"
            result[col_name] = indicator.flag(result)
            flag_cols.append(col_name)

        result["risk_score"] = result[flag_cols].sum(axis=1).astype(int)

        raw = (
            self.config.base_probability
            + result["risk_score"] * self.config.probability_step
            + self._noise(len(result), rng)
        ).clip(0.0, 1.0)

        # Tiers use the unrounded probability
        result["risk_level"] = raw.map(self.config.get_risk_level)
        result["churn_probability"] = raw.round(self.config.probability_decimals)
        result["priority"] = result["risk_level"].map(self.config.get_priority)

        # Missing or non-positive charges fall back to the default
        monthly = pd.to_numeric(result["monthly_charge"], errors="coerce")
        monthly = monthly.where(monthly > 0, self.config.default_monthly_charge)
        result["monthly_risk_ghs"] = monthly.astype(float)
        result["annual_risk_ghs"] = monthly * self.config.annual_multiplier
        result["customer_lifetime_value"] = monthly * self.config.lifetime_multiplier

        result["customer_id"] = result["customer_id"].astype(str)
        return ASSESSMENT_OUTPUT_SCHEMA.validate(result)

    def _assessment_from_row(self, row: pd.Series, timestamp: str) -> RiskAssessment:
        risk_level = row["risk_level"]
        probability = float(row["churn_probability"])
        label = "1" if probability > 0.5 else "0"
        raw_response = json.dumps(
            {"predictions": [{"predicted_label": label, "probability": probability}]}
        )
        return RiskAssessment(
            customer_id=str(row["customer_id"]),
            churn_probability=probability,
            risk_level=risk_level,
            confidence="HIGH" if risk_level == "HIGH" else "MEDIUM",
            recommended_action=(
                "IMMEDIATE_INTERVENTION" if risk_level == "HIGH" else "PROACTIVE_ENGAGEMENT"
            ),
            priority=row["priority"],
            next_steps=tuple(self.config.next_steps),
            estimated_revenue_risk=RevenueRisk(
                monthly_risk_ghs=float(row["monthly_risk_ghs"]),
                annual_risk_ghs=float(row["annual_risk_ghs"]),
                customer_lifetime_value=float(row["customer_lifetime_value"]),
            ),
            intervention_timeline=self.config.get_timeline(risk_level),
            success_probability=self.config.get_success_probability(risk_level),
            timestamp=timestamp,
            model_version=self.config.model_version,
            features_used=self.config.features_used,
            raw_response=raw_response,
            risk_score=int(row["risk_score"]),
        )

    def score_records(
        self,
        records: Sequence[Mapping],
        rng: Optional[np.random.Generator] = None,
    ) -> List[RiskAssessment]:
        """Score a batch of records, one assessment each, in input order."""
        if not records:
            return []
        frame = self.score_frame(pd.DataFrame(list(records)), rng=rng)
        timestamp = datetime.now(timezone.utc).isoformat()
        return [
            self._assessment_from_row(row, timestamp)
            for _, row in frame.iterrows()
        ]

    def score(
        self,
        record: Mapping,
        rng: Optional[np.random.Generator] = None,
    ) -> RiskAssessment:
        """
        Score a single customer record.

        Example:
            >>> scorer = RiskScorer(seed=7)
            >>> assessment = scorer.score(record)
            >>> assessment.risk_level
            'MEDIUM'
        """
        return self.score_records([record], rng=rng)[0]


def generate_sample_data(n_customers: int = 100, seed: int = 42) -> pd.DataFrame:
    """
    Generate plausible customer usage data for demos and tests.

    Every generated row passes validation.
    """
    rng = np.random.default_rng(seed)

    data = {
        "customer_id": [f"CUST_{i:03d}" for i in range(1, n_customers + 1)],
        "monthly_sms": rng.integers(10, 110, size=n_customers),
        "monthly_minutes": rng.integers(50, 350, size=n_customers),
        "monthly_data_gb": (rng.random(n_customers) * 10 + 1).round(2),
        "monthly_charge": rng.integers(20, 100, size=n_customers),
        "late_payments": rng.integers(0, 10, size=n_customers),
        "is_fraud": np.zeros(n_customers, dtype=int),
        "international_calls": rng.integers(0, 5, size=n_customers),
        "device_age_months": rng.integers(6, 66, size=n_customers),
        "customer_service_calls": rng.integers(0, 15, size=n_customers),
        "contract_type": rng.choice(list(CONTRACT_TYPES[:2]), size=n_customers),
        "city": rng.choice(["Accra", "Kumasi", "Tamale", "Cape Coast"], size=n_customers),
        "age": rng.integers(20, 70, size=n_customers),
        "account_length_months": rng.integers(1, 61, size=n_customers),
    }
    return pd.DataFrame(data, columns=[spec.name for spec in FIELDS])
