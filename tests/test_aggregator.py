"""
Tests for batch summary statistics.
"""

from dataclasses import replace

import pytest

from churn_risk.aggregator import RISK_BUCKETS, aggregate
from churn_risk.scorer import PredictionOutcome

from conftest import make_record


@pytest.fixture
def high_risk_outcomes(scorer, high_risk_record):
    return [
        PredictionOutcome.success(
            scorer.score(dict(high_risk_record, customer_id=f"CUST_H{i}"))
        )
        for i in range(3)
    ]


@pytest.fixture
def failures():
    return [
        PredictionOutcome.failure("CUST_E1", "Prediction failed"),
        PredictionOutcome.failure(None, "timeout"),
    ]


class TestAggregate:

    def test_three_high_two_failed(self, high_risk_outcomes, failures):
        summary = aggregate(high_risk_outcomes + failures)

        assert summary.total_customers == 5
        assert summary.successful_predictions == 3
        assert summary.failed_predictions == 2
        assert summary.success_rate == 60.0
        assert summary.risk_distribution["HIGH"] == 3
        assert summary.risk_distribution["ERROR"] == 2
        assert summary.high_risk_customers == 3
        assert summary.customers_needing_immediate_attention == 3

    def test_average_over_successes_only(self, scorer, valid_record, high_risk_record, failures):
        outcomes = [
            PredictionOutcome.success(scorer.score(valid_record)),
            PredictionOutcome.success(scorer.score(high_risk_record)),
        ] + failures
        summary = aggregate(outcomes)

        assert summary.average_churn_probability == pytest.approx((0.2 + 0.95) / 2, abs=1e-3)

    def test_revenue_sums_successes(self, scorer):
        outcomes = [
            PredictionOutcome.success(scorer.score(make_record(monthly_charge=45.0))),
            PredictionOutcome.success(scorer.score(make_record(monthly_charge=80.0))),
            PredictionOutcome.failure("X", "boom"),
        ]
        summary = aggregate(outcomes)

        assert summary.total_annual_revenue_at_risk == pytest.approx(540.0 + 960.0)

    def test_all_buckets_present(self, scorer, valid_record):
        summary = aggregate([PredictionOutcome.success(scorer.score(valid_record))])

        assert list(summary.risk_distribution) == RISK_BUCKETS
        assert summary.risk_distribution["LOW"] == 1
        assert summary.risk_distribution["VERY_LOW"] == 0

    def test_immediate_attention_needs_critical_priority(self, high_risk_outcomes):
        """A HIGH assessment with non-CRITICAL priority is not immediate."""
        downgraded = replace(high_risk_outcomes[0].assessment, priority="HIGH")
        outcomes = [PredictionOutcome.success(downgraded)] + high_risk_outcomes[1:]

        summary = aggregate(outcomes)
        assert summary.high_risk_customers == 3
        assert summary.customers_needing_immediate_attention == 2

    def test_empty_batch(self):
        summary = aggregate([])

        assert summary.total_customers == 0
        assert summary.success_rate == 0.0
        assert summary.average_churn_probability == 0.0
        assert summary.total_annual_revenue_at_risk == 0.0

    def test_all_failed(self, failures):
        summary = aggregate(failures)

        assert summary.success_rate == 0.0
        assert summary.average_churn_probability == 0.0
        assert summary.risk_distribution["ERROR"] == 2

    def test_success_rate_precision(self, scorer, valid_record, failures):
        outcomes = [PredictionOutcome.success(scorer.score(valid_record))] + failures
        summary = aggregate(outcomes)

        assert summary.success_rate == 33.33

    def test_does_not_mutate_outcomes(self, high_risk_outcomes, failures):
        outcomes = high_risk_outcomes + failures
        before = list(outcomes)
        aggregate(outcomes)

        assert outcomes == before

    def test_to_dict(self, high_risk_outcomes):
        data = aggregate(high_risk_outcomes).to_dict()

        assert data["total_customers"] == 3
        assert data["risk_distribution"]["HIGH"] == 3
