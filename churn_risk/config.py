"""
Configuration for the churn risk pipeline.

All heuristic thresholds and business rules live in ScoringConfig so they
can be tuned without touching the scoring components. Service and pipeline
options load from YAML:

    config = PipelineConfig.from_yaml("configs/production.yaml")
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, List, Literal, Optional

import yaml


@dataclass
class ScoringConfig:
    """
    Configuration for the heuristic risk scorer.

    churn_probability = base_probability
                        + risk_score * probability_step
                        + U(0, noise_scale)

    where risk_score counts the indicators that fire (0-5).
    """

    # === Risk indicators ===
    late_payments_threshold: int = 3          # fires when > 3
    service_calls_threshold: int = 5          # fires when > 5
    device_age_threshold: int = 36            # fires when > 36 months
    monthly_charge_threshold: float = 60.0    # fires when > 60 GHS
    account_length_threshold: int = 12        # fires when < 12 months

    # === Probability ===
    base_probability: float = 0.2
    probability_step: float = 0.15
    noise_scale: float = 0.2
    probability_decimals: int = 3

    # === Risk tiers (strictly greater than) ===
    high_threshold: float = 0.7
    medium_threshold: float = 0.4

    # === Revenue exposure ===
    default_monthly_charge: float = 50.0      # when charge is missing or <= 0
    annual_multiplier: int = 12
    lifetime_multiplier: int = 48

    # === Business insights ===
    next_steps: List[str] = field(default_factory=lambda: [
        "Send targeted retention offer",
        "Analyze usage patterns",
        "Consider loyalty program enrollment",
        "Monitor for 30 days",
    ])
    timelines: Dict[str, str] = field(default_factory=lambda: {
        "HIGH": "1-2 days",
        "default": "3-7 days",
    })
    success_probabilities: Dict[str, float] = field(default_factory=lambda: {
        "HIGH": 0.6,
        "default": 0.8,
    })

    # === Metadata ===
    model_version: str = "heuristic-v1"
    features_used: int = 14

    def get_risk_level(self, probability: float) -> str:
        """Map churn probability to risk level."""
        if probability > self.high_threshold:
            return "HIGH"
        if probability > self.medium_threshold:
            return "MEDIUM"
        return "LOW"

    def get_priority(self, risk_level: str) -> str:
        """Map risk level to intervention priority."""
        return {"HIGH": "CRITICAL", "MEDIUM": "HIGH"}.get(risk_level, "LOW")

    def get_timeline(self, risk_level: str) -> str:
        return self.timelines.get(risk_level, self.timelines["default"])

    def get_success_probability(self, risk_level: str) -> float:
        return self.success_probabilities.get(
            risk_level, self.success_probabilities["default"]
        )


@dataclass
class ServiceConfig:
    """Connection settings for the remote prediction service."""

    base_url: str = ""
    predict_path: str = "/predict"
    batch_path: str = "/predict/batch"
    timeout_seconds: float = 15.0
    headers: Dict[str, str] = field(default_factory=lambda: {
        "Content-Type": "application/json",
    })

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def url_for(self, path: str) -> str:
        return self.base_url.rstrip("/") + path


@dataclass
class PipelineConfig:
    """
    Configuration for a pipeline run.

    Load from YAML:
        config = PipelineConfig.from_yaml("pipeline.yaml")

    Create programmatically:
        config = PipelineConfig(
            use_remote=True,
            service=ServiceConfig(base_url="https://example.com/dev"),
        )
    """

    use_remote: bool = False
    allow_partial: bool = False
    fallback_to_heuristic: bool = False

    # How the parser treats numeric values that fail to parse:
    # "zero" substitutes 0, "missing" leaves them for the validator,
    # "strict" raises SchemaError
    numeric_policy: Literal["zero", "missing", "strict"] = "zero"

    seed: Optional[int] = None
    logs_dir: Optional[str] = None

    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "PipelineConfig":
        data = dict(data or {})
        scoring = ScoringConfig(**data.pop("scoring", {}) or {})
        service = ServiceConfig(**data.pop("service", {}) or {})
        return cls(scoring=scoring, service=service, **data)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "PipelineConfig":
        """Load configuration from YAML file."""
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data)

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(asdict(self), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict:
        return asdict(self)


# Default configuration instance
DEFAULT_CONFIG = ScoringConfig()
