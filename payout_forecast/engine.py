"""
Phase runner for one forecast month.

    engine = ForecastEngine(claims)
    engine.calculate_policy_summaries()    # PhaseResult
    engine.compute_clusters(k, epsilon)    # optional PhaseResult
    engine.calculate_predictions(month)    # PhaseResult

Each phase either completes fully or fails as a whole: exceptions are
caught at the phase boundary, logged, and reported through the returned
PhaseResult. A phase whose inputs were never produced refuses to run.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from . import aggregation, clustering, prediction
from .clustering import ClusteringResult
from .schemas import PayoutPrediction, PayoutSummary, RawClaim

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhaseResult:
    phase: str
    success: bool
    diagnostic: Optional[str] = None
    elapsed_ms: float = 0.0

    def __bool__(self) -> bool:
        return self.success


class ForecastEngine:
    """Holds one run's claims, summaries and predictions."""

    def __init__(self, claims: Iterable[RawClaim]):
        self.claims: list[RawClaim] = list(claims)
        self.summaries: Optional[list[PayoutSummary]] = None
        self.clusters: Optional[ClusteringResult] = None
        self.predictions: Optional[list[PayoutPrediction]] = None

    def _run(self, phase: str, fn: Callable[[], Any]) -> PhaseResult:
        start = time.perf_counter()
        try:
            fn()
        except Exception as exc:
            logger.exception("%s failed", phase)
            return PhaseResult(phase, False, f"{type(exc).__name__}: {exc}",
                               (time.perf_counter() - start) * 1000)
        elapsed = (time.perf_counter() - start) * 1000
        logger.info("%s finished in %.1f ms", phase, elapsed)
        return PhaseResult(phase, True, None, elapsed)

    # ---------------- Phases ---------------- #

    def calculate_policy_summaries(self) -> PhaseResult:
        def run() -> None:
            self.summaries = None
            self.summaries = aggregation.aggregate_claims(self.claims)

        return self._run("aggregation", run)

    def compute_clusters(
        self,
        k: Optional[int] = None,
        epsilon: Optional[float] = None,
        random_state: Optional[int] = None,
    ) -> PhaseResult:
        if self.summaries is None:
            return PhaseResult("clustering", False, "no payout summaries; run aggregation first")

        def run() -> None:
            self.clusters = None
            self.clusters = clustering.compute_clusters(
                self.summaries, k=k, epsilon=epsilon, random_state=random_state
            )

        return self._run("clustering", run)

    def calculate_predictions(self, month: int) -> PhaseResult:
        if self.summaries is None:
            return PhaseResult("prediction", False, "no payout summaries; run aggregation first")

        def run() -> None:
            self.predictions = None
            self.predictions = prediction.predict_payouts(self.summaries, month)

        return self._run("prediction", run)

    def run(
        self,
        month: int,
        cluster: bool = False,
        k: Optional[int] = None,
        epsilon: Optional[float] = None,
        random_state: Optional[int] = None,
    ) -> list[PhaseResult]:
        """Run the phases in order, stopping at the first failure."""
        results = [self.calculate_policy_summaries()]
        if results[-1] and cluster:
            results.append(self.compute_clusters(k, epsilon, random_state))
        if results[-1]:
            results.append(self.calculate_predictions(month))
        return results
