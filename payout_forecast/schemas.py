"""
Record types for the payout forecast.

These types define the **contract** between:
- the CSV loader (RawClaim)
- the aggregation pipeline (MonthlySummary, PayoutSummary)
- the clustering engine (Centroid, PayoutSummary.centroid)
- the prediction engine and CSV writer (PayoutPrediction)

Month indices are 0-based throughout (0 = January of the forecast year).
"""

from __future__ import annotations

import calendar
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

import numpy as np

from . import config


# ---------------- Raw claim ---------------- #

@dataclass(frozen=True)
class RawClaim:
    policy_id: int
    claim_date: date
    claimed_amount: float
    paid_amount: float   # 0 for denied / unpaid claims

    @property
    def month(self) -> int:
        return self.claim_date.month - 1

    def sort_key(self) -> tuple[int, date]:
        return (self.policy_id, self.claim_date)


# ---------------- Monthly summary ---------------- #

@dataclass(frozen=True)
class MonthlySummary:
    policy_id: int
    month: int           # 0..11
    paid_sum: float
    paid_count: int


# ---------------- Centroid ---------------- #

@dataclass(frozen=True)
class Centroid:
    """A point in (mean inter-payout gap, mean payout) space."""

    x: float = 0.0
    y: float = 0.0

    def distance_to(self, other: Centroid) -> float:
        """Euclidean distance rounded to ``config.DISTANCE_DECIMALS``.

        NaN coordinates yield NaN; callers decide how to treat it.
        """
        d = math.hypot(self.x - other.x, self.y - other.y)
        if math.isnan(d):
            return d
        return round(d, config.DISTANCE_DECIMALS)


# ---------------- Payout summary ---------------- #

@dataclass
class PayoutSummary:
    """Yearly payout rollup for one policy.

    ``payout_months`` is strictly increasing and parallel to
    ``payout_amounts``. ``centroid`` starts as the policy's own
    (avg_between_time, mean) point and is reassigned by clustering.
    """

    policy_id: int
    year_sum: float
    payout_amounts: list[float]
    payout_months: list[int]
    centroid: Optional[Centroid] = None
    min_payout: float = field(init=False)
    max_payout: float = field(init=False)

    def __post_init__(self) -> None:
        if len(self.payout_amounts) != len(self.payout_months):
            raise ValueError(
                f"policy {self.policy_id}: {len(self.payout_amounts)} amounts "
                f"but {len(self.payout_months)} months"
            )
        if not self.payout_amounts:
            raise ValueError(f"policy {self.policy_id}: empty payout timeline")

        self.min_payout = min(self.payout_amounts)
        self.max_payout = max(self.payout_amounts)
        if self.centroid is None:
            self.centroid = self.self_centroid

    # ---------------- Payout amount statistics ---------------- #

    @property
    def count(self) -> int:
        return len(self.payout_amounts)

    @property
    def mean(self) -> float:
        return self.year_sum / self.count

    @property
    def range(self) -> float:
        return self.max_payout - self.min_payout

    @property
    def variance(self) -> float:
        return float(np.var(self.payout_amounts))

    @property
    def standard_deviation(self) -> float:
        return math.sqrt(self.variance)

    # ---------------- Timeline statistics ---------------- #

    @property
    def avg_between_time(self) -> float:
        if self.count < 2:
            return 0.0
        return float(np.mean(np.diff(self.payout_months)))

    @property
    def var_between_time(self) -> float:
        if self.count < 2:
            return 0.0
        gaps = np.diff(self.payout_months)
        return float(np.mean((gaps - self.avg_between_time) ** 2))

    @property
    def std_dev_between_time(self) -> float:
        return math.sqrt(self.var_between_time)

    @property
    def self_centroid(self) -> Centroid:
        return Centroid(self.avg_between_time, self.mean)

    # ---------------- Timeline lookups ---------------- #

    def paid_amount(self, month: int) -> float:
        """Ground-truth payout recorded for ``month``, 0 when there was none."""
        for m, amount in zip(self.payout_months, self.payout_amounts):
            if m == month:
                return amount
        return 0.0

    def _recent_index(self, t: int) -> Optional[int]:
        # Index of the latest payout at or before t (t clamped to the observed year).
        if t <= 0:
            return None
        t = min(t, config.LAST_OBSERVED_MONTH)

        if self.count == 1:
            return 0
        if self.payout_months[0] >= t:
            return None

        i = sum(1 for m in self.payout_months if m < t)
        i = min(i, self.count - 1)
        return i - 1 if self.payout_months[i] > t else i

    def _paid_before_index(self, t: int) -> Optional[int]:
        # Index of the latest payout strictly before t (t clamped to the observed year).
        # A lone earlier payout does not count; at least two must precede t.
        if t <= 0:
            return None
        t = min(t, config.LAST_OBSERVED_MONTH)

        i = sum(1 for m in self.payout_months if m < t) - 1
        return i if i >= 1 else None

    def _previous_index(self, t: int) -> Optional[int]:
        # Index of the payout before the latest one preceding t.
        if t <= 0:
            return None
        t = min(t, config.LAST_OBSERVED_MONTH)

        i = sum(1 for m in self.payout_months if m < t)
        i = min(i, self.count - 1)
        if i > 1:
            return i - 2 if self.payout_months[i] > t else i - 1
        return i

    def most_recent_payout_month(self, t: int) -> int:
        i = self._recent_index(t)
        return 0 if i is None else self.payout_months[i]

    def most_recent_paid_amount(self, t: int) -> float:
        """Latest payout amount strictly before t.

        0 unless at least two payouts precede t.
        """
        i = self._paid_before_index(t)
        return 0.0 if i is None else self.payout_amounts[i]

    def previous_payout_month(self, t: int) -> int:
        i = self._previous_index(t)
        return 0 if i is None else self.payout_months[i]

    def previous_paid_amount(self, t: int) -> float:
        i = self._previous_index(t)
        return 0.0 if i is None else self.payout_amounts[i]


# ---------------- Prediction ---------------- #

@dataclass(frozen=True)
class PayoutPrediction:
    policy_id: int
    year: int
    month: int           # forecast index, 0 = Jan FORECAST_YEAR, 12 = Jan next year
    previous_payout_month: int
    mean_time_between_payouts: float
    timing_probability: float
    target_mean: float
    efm: float
    efm_integral: float
    efm_derivative: float
    estimated_payout: float
    actual_payout: float  # NaN when the month has no ground truth

    @property
    def month_name(self) -> str:
        return calendar.month_name[self.month % 12 + 1]

    @property
    def previous_month_name(self) -> str:
        return calendar.month_name[self.previous_payout_month % 12 + 1]

    @property
    def percent_error(self) -> float:
        est, act = self.estimated_payout, self.actual_payout
        if math.isnan(act):
            return 0.0
        if act > 0:
            return 100 * (est - act) / act
        if est > 0:
            return 100 * (est - act) / est
        return 0.0

    def to_record(self) -> dict:
        """Row in ``config.OUTPUT_COLUMNS`` order."""
        values = [
            self.policy_id,
            self.year,
            self.month_name,
            self.previous_month_name,
            self.mean_time_between_payouts,
            self.timing_probability,
            self.target_mean,
            self.efm,
            self.efm_integral,
            self.efm_derivative,
            self.estimated_payout,
            self.actual_payout,
            self.percent_error,
        ]
        return dict(zip(config.OUTPUT_COLUMNS, values))
