"""
Pytest fixtures for churn risk pipeline tests.
"""

import pandas as pd
import pytest

# Add package to path
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from churn_risk.config import PipelineConfig, ScoringConfig
from churn_risk.scorer import RiskScorer, generate_sample_data


HEADER = (
    "customer_id,monthly_sms,monthly_minutes,monthly_data_gb,monthly_charge,"
    "late_payments,is_fraud,international_calls,device_age_months,"
    "customer_service_calls,contract_type,city,age,account_length_months"
)


def make_record(**overrides):
    """A valid, low-risk customer record with optional overrides."""
    record = {
        "customer_id": "CUST_001",
        "monthly_sms": 40.0,
        "monthly_minutes": 120.0,
        "monthly_data_gb": 3.5,
        "monthly_charge": 45.0,
        "late_payments": 0.0,
        "is_fraud": 0.0,
        "international_calls": 1.0,
        "device_age_months": 12.0,
        "customer_service_calls": 1.0,
        "contract_type": "monthly",
        "city": "Accra",
        "age": 34.0,
        "account_length_months": 24.0,
    }
    record.update(overrides)
    return record


def to_csv_text(records):
    """Render records as comma-delimited text in schema column order."""
    return pd.DataFrame(records).to_csv(index=False)


@pytest.fixture
def default_config():
    """Default scoring configuration."""
    return ScoringConfig()


@pytest.fixture
def quiet_config():
    """Scoring configuration with the random term disabled."""
    return ScoringConfig(noise_scale=0.0)


@pytest.fixture
def scorer(quiet_config):
    """Deterministic RiskScorer."""
    return RiskScorer(quiet_config)


@pytest.fixture
def pipeline_config(quiet_config):
    """Local-only pipeline configuration."""
    return PipelineConfig(scoring=quiet_config, seed=42)


@pytest.fixture
def sample_data():
    """100 generated customers, all valid."""
    return generate_sample_data(n_customers=100, seed=42)


@pytest.fixture
def valid_record():
    return make_record()


@pytest.fixture
def high_risk_record():
    """Every risk indicator fires."""
    return make_record(
        customer_id="CUST_HIGH",
        late_payments=5.0,
        customer_service_calls=8.0,
        device_age_months=48.0,
        monthly_charge=75.0,
        account_length_months=6.0,
    )


@pytest.fixture
def edge_cases():
    """Records sitting exactly on each indicator threshold."""
    return pd.DataFrame([
        # At thresholds: no indicator fires
        make_record(
            customer_id="EDGE_AT",
            late_payments=3.0,
            customer_service_calls=5.0,
            device_age_months=36.0,
            monthly_charge=60.0,
            account_length_months=12.0,
        ),
        # Just past thresholds: every indicator fires
        make_record(
            customer_id="EDGE_PAST",
            late_payments=4.0,
            customer_service_calls=6.0,
            device_age_months=37.0,
            monthly_charge=60.01,
            account_length_months=11.0,
        ),
    ])


@pytest.fixture
def csv_text():
    """Three valid customers as CSV text."""
    return to_csv_text([
        make_record(customer_id="CUST_001"),
        make_record(customer_id="CUST_002", late_payments=6.0, monthly_charge=80.0),
        make_record(customer_id="CUST_003", account_length_months=3.0),
    ])
