"""
Client for the remote churn prediction service.

The service takes one customer (or a whole batch) wrapped in a {"body": ...}
envelope and answers with the nested prediction payload. Responses are
checked against Pydantic models before they are turned into assessments.

Usage:
    from churn_risk.config import ServiceConfig
    from churn_risk.remote import PredictionClient

    client = PredictionClient(ServiceConfig(base_url="https://api.example.com/dev"))
    assessment = client.predict(record)
    batch = client.predict_batch(records)
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

import requests
from pydantic import BaseModel, Field, ValidationError

from .config import ServiceConfig
from .exceptions import RemoteServiceError
from .schemas import FIELDS
from .scorer import PredictionOutcome, RevenueRisk, RiskAssessment

logger = logging.getLogger(__name__)


class EstimatedRevenueRisk(BaseModel):
    monthly_risk_ghs: float = Field(..., ge=0)
    annual_risk_ghs: float = Field(..., ge=0)
    customer_lifetime_value: float = Field(..., ge=0)


class Prediction(BaseModel):
    churn_probability: float = Field(..., ge=0, le=1)
    risk_level: str
    confidence: str
    raw_response: Optional[str] = None


class BusinessInsights(BaseModel):
    recommended_action: str
    priority: str
    next_steps: List[str] = Field(default_factory=list)
    estimated_revenue_risk: EstimatedRevenueRisk
    intervention_timeline: str
    success_probability: float = Field(..., ge=0, le=1)


class PredictionPayload(BaseModel):
    """Single prediction response."""

    customer_id: str
    prediction: Prediction
    business_insights: BusinessInsights
    timestamp: str = ""
    model_version: str = ""
    features_used: int = 0

    def to_assessment(self) -> RiskAssessment:
        insights = self.business_insights
        revenue = insights.estimated_revenue_risk
        return RiskAssessment(
            customer_id=self.customer_id,
            churn_probability=self.prediction.churn_probability,
            risk_level=self.prediction.risk_level.upper(),
            confidence=self.prediction.confidence,
            recommended_action=insights.recommended_action,
            priority=insights.priority.upper(),
            next_steps=tuple(insights.next_steps),
            estimated_revenue_risk=RevenueRisk(
                monthly_risk_ghs=revenue.monthly_risk_ghs,
                annual_risk_ghs=revenue.annual_risk_ghs,
                customer_lifetime_value=revenue.customer_lifetime_value,
            ),
            intervention_timeline=insights.intervention_timeline,
            success_probability=insights.success_probability,
            timestamp=self.timestamp,
            model_version=self.model_version,
            features_used=self.features_used,
            raw_response=self.prediction.raw_response,
        )


class BatchPayload(BaseModel):
    """Batch prediction response."""

    batch_id: str = ""
    timestamp: str = ""
    model_version: str = ""
    summary: Optional[Dict[str, Any]] = None
    results: List[Dict[str, Any]]


@dataclass
class RemoteBatchResponse:
    """Per-customer outcomes of one batch call, in request order."""

    outcomes: List[PredictionOutcome]
    batch_id: str = ""
    timestamp: str = ""
    model_version: str = ""
    summary: Optional[Dict[str, Any]] = field(default=None)


def to_wire(record: Mapping) -> Dict[str, str]:
    """Render a record the way the service expects: every field as text."""
    body = {}
    for spec in FIELDS:
        value = record.get(spec.name)
        if value is None:
            body[spec.name] = ""
        elif isinstance(value, float) and value.is_integer():
            body[spec.name] = str(int(value))
        else:
            body[spec.name] = str(value)
    return body


def unwrap(payload: Any) -> Any:
    """Strip a gateway envelope of the form {"statusCode": ..., "body": "<json>"}."""
    if isinstance(payload, dict) and isinstance(payload.get("body"), str):
        try:
            return json.loads(payload["body"])
        except ValueError:
            raise RemoteServiceError("Prediction service returned an unreadable body") from None
    return payload


class PredictionClient:
    """HTTP client for single and batch predictions."""

    def __init__(
        self,
        config: ServiceConfig,
        session: Optional[requests.Session] = None,
    ):
        if not config.enabled:
            raise ValueError("ServiceConfig.base_url is required for remote predictions")
        self.config = config
        self.session = session or requests.Session()

    def _post(self, path: str, payload: dict) -> Any:
        url = self.config.url_for(path)
        try:
            response = self.session.post(
                url,
                json=payload,
                headers=self.config.headers,
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.error("Prediction request to %s failed: %s", url, exc)
            raise RemoteServiceError(f"Prediction request failed: {exc}") from exc

        if not response.ok:
            logger.error("Prediction service returned HTTP %s", response.status_code)
            raise RemoteServiceError(
                f"Prediction request failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise RemoteServiceError("Prediction service returned invalid JSON") from exc
        return unwrap(data)

    def predict(self, record: Mapping) -> RiskAssessment:
        """
        Request a prediction for one customer.

        Raises:
            RemoteServiceError: On network failure, non-2xx status or a
                response that does not match the prediction payload
        """
        data = self._post(self.config.predict_path, {"body": to_wire(record)})
        try:
            return PredictionPayload.model_validate(data).to_assessment()
        except ValidationError as exc:
            raise RemoteServiceError(f"Malformed prediction response: {exc}") from exc

    def predict_batch(self, records: Sequence[Mapping]) -> RemoteBatchResponse:
        """
        Request predictions for a whole batch in one call.

        Items the service marks as failed become ERROR outcomes; a failure
        of the call itself raises.

        Raises:
            RemoteServiceError: If the call fails or the response is malformed
        """
        body = {"customers": [to_wire(record) for record in records]}
        data = self._post(self.config.batch_path, {"body": body})
        try:
            payload = BatchPayload.model_validate(data)
        except ValidationError as exc:
            raise RemoteServiceError(f"Malformed batch response: {exc}") from exc

        outcomes = []
        for item in payload.results:
            if item.get("status") == "ERROR" or item.get("error"):
                outcomes.append(
                    PredictionOutcome.failure(
                        item.get("customer_id"),
                        str(item.get("error") or "Prediction failed"),
                    )
                )
                continue
            try:
                assessment = PredictionPayload.model_validate(item).to_assessment()
            except ValidationError as exc:
                logger.warning(
                    "Malformed result for customer %s: %s", item.get("customer_id"), exc
                )
                outcomes.append(
                    PredictionOutcome.failure(item.get("customer_id"), "Malformed prediction")
                )
                continue
            outcomes.append(PredictionOutcome.success(assessment))

        logger.info(
            "Batch %s returned %d result(s)", payload.batch_id or "<unnamed>", len(outcomes)
        )
        return RemoteBatchResponse(
            outcomes=outcomes,
            batch_id=payload.batch_id,
            timestamp=payload.timestamp,
            model_version=payload.model_version,
            summary=payload.summary,
        )
