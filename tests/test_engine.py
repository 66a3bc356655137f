"""Tests for the phase runner."""

from unittest.mock import patch

import pytest

from payout_forecast.engine import ForecastEngine, PhaseResult
from payout_forecast.generators import generate_claims
from payout_forecast.io import claims_from_frame


@pytest.fixture
def claims():
    return claims_from_frame(generate_claims(n_policies=150, random_state=21))


class TestPhaseResult:
    """Test PhaseResult truthiness."""

    def test_truthiness_follows_success(self):
        assert PhaseResult("aggregation", True)
        assert not PhaseResult("aggregation", False, "boom")


class TestForecastEngine:
    """Test phase ordering and failure handling."""

    def test_default_run(self, claims):
        engine = ForecastEngine(claims)
        results = engine.run(month=3)

        assert [r.phase for r in results] == ["aggregation", "prediction"]
        assert all(results)
        assert engine.clusters is None
        assert len(engine.predictions) == len(engine.summaries)
        assert all(p.month == 3 for p in engine.predictions)

    def test_default_run_uses_self_centroids(self, claims):
        engine = ForecastEngine(claims)
        engine.run(month=5)
        by_policy = {s.policy_id: s for s in engine.summaries}
        for p in engine.predictions:
            s = by_policy[p.policy_id]
            assert p.target_mean == s.mean
            assert p.mean_time_between_payouts == s.avg_between_time

    def test_clustered_run(self, claims):
        engine = ForecastEngine(claims)
        results = engine.run(month=12, cluster=True, k=4, epsilon=0.5, random_state=2)

        assert [r.phase for r in results] == ["aggregation", "clustering", "prediction"]
        assert all(results)
        assert 1 <= engine.clusters.n_clusters <= 4
        centroids = set(engine.clusters.centroids.values())
        assert all(s.centroid in centroids for s in engine.summaries)

    def test_predictions_need_summaries(self, claims):
        result = ForecastEngine(claims).calculate_predictions(0)
        assert not result
        assert "run aggregation first" in result.diagnostic

    def test_clustering_needs_summaries(self, claims):
        result = ForecastEngine(claims).compute_clusters(k=3)
        assert not result
        assert "run aggregation first" in result.diagnostic

    def test_aggregation_failure_stops_run(self, make_claim):
        engine = ForecastEngine(
            [make_claim(1, "2016-11-01", 5.0), make_claim(1, "2017-02-01", 5.0)]
        )
        results = engine.run(month=0)

        assert len(results) == 1
        assert not results[0]
        assert "AggregationError" in results[0].diagnostic
        assert engine.summaries is None
        assert engine.predictions is None

    def test_clustering_failure_stops_run(self, claims):
        engine = ForecastEngine(claims)
        results = engine.run(month=0, cluster=True, k=0)

        assert [r.phase for r in results] == ["aggregation", "clustering"]
        assert not results[-1]
        assert engine.predictions is None

    def test_prediction_failure_returns_no_partial_output(self, claims):
        engine = ForecastEngine(claims)
        assert engine.calculate_policy_summaries()

        with patch("payout_forecast.prediction.efm", side_effect=ZeroDivisionError("x")):
            result = engine.calculate_predictions(4)

        assert not result
        assert "PredictionError" in result.diagnostic
        assert engine.predictions is None

    def test_empty_claims(self):
        engine = ForecastEngine([])
        results = engine.run(month=0)

        assert all(results)
        assert engine.summaries == []
        assert engine.predictions == []
