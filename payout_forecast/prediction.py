"""
Per-policy, per-month payout estimate.

    estimated = round(target_mean * timing_probability * (1 - efm(t)), 2)

target_mean and the mean inter-payout gap come from the policy's (cluster)
centroid. timing_probability scores the gap since the last payout against
the policy's own gap distribution, and efm ("error from mean") is the
min-max normalised most recent payout.
"""

from __future__ import annotations

import math
from typing import Iterable

from . import config
from .errors import PredictionError
from .schemas import PayoutPrediction, PayoutSummary


# ---------------- Error-from-mean signal ---------------- #

def efm(summary: PayoutSummary, t: int) -> float:
    if summary.range > 0:
        return (summary.most_recent_paid_amount(t) - summary.min_payout) / summary.range
    return 0.0


def efm_integral(summary: PayoutSummary, t: int) -> float:
    """Running sum of efm over payout months before t, weighted by the gap to the prior payout."""
    total = 0.0
    for month in summary.payout_months:
        if month < t:
            total += efm(summary, month) * (month - summary.previous_payout_month(month))
    return total


def efm_derivative(summary: PayoutSummary, t: int) -> float:
    prev_t = summary.most_recent_payout_month(t)
    if t == prev_t:
        return 0.0
    return (efm(summary, t) - efm(summary, prev_t)) / (t - prev_t)


# ---------------- Timing ---------------- #

def timing_probability(gap: float, avg_gap: float, std_gap: float) -> float:
    """Linear falloff of a gap z-score inside a window of +/- 2 * std_gap.

    The window is measured in raw std units while the score is a z-score;
    this mix is intentional and kept as is.
    """
    if std_gap <= 0:
        return 0.0
    z = (gap - avg_gap) / std_gap
    window = 2 * std_gap
    if abs(z) > window:
        return 0.0
    return abs(z - window) / window


# ---------------- Predictions ---------------- #

def predict_payout(summary: PayoutSummary, t: int) -> PayoutPrediction:
    """Prediction for one policy and forecast month index t (12 = Jan of next year)."""
    if t < 0:
        raise PredictionError(f"forecast month must be >= 0, got {t}")

    avg_t = summary.centroid.x
    target_mean = summary.centroid.y
    prev_t = summary.most_recent_payout_month(t)
    std_t = summary.std_dev_between_time

    efm_t = efm(summary, t)
    prob = timing_probability(t - prev_t, avg_t, std_t)

    estimate = target_mean * prob * (1 - efm_t)
    if math.isnan(estimate):
        estimate = 0.0

    if t > config.LAST_OBSERVED_MONTH:
        actual = math.nan
    else:
        actual = summary.paid_amount(t)

    return PayoutPrediction(
        policy_id=summary.policy_id,
        year=config.FORECAST_YEAR + t // 12,
        month=t,
        previous_payout_month=prev_t,
        mean_time_between_payouts=avg_t,
        timing_probability=prob,
        target_mean=target_mean,
        efm=efm_t,
        efm_integral=efm_integral(summary, t),
        efm_derivative=efm_derivative(summary, t),
        estimated_payout=round(estimate, config.PAYOUT_DECIMALS),
        actual_payout=actual,
    )


def predict_payouts(summaries: Iterable[PayoutSummary], t: int) -> list[PayoutPrediction]:
    """Predictions for every summary; any failure aborts the whole batch."""
    predictions = []
    for summary in summaries:
        try:
            predictions.append(predict_payout(summary, t))
        except PredictionError:
            raise
        except Exception as exc:
            raise PredictionError(
                f"policy {summary.policy_id}, month {t}: {exc}"
            ) from exc
    return predictions
