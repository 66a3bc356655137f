"""
Claim-level rows -> per-policy monthly sums -> per-policy yearly payout summaries.

Claims are sorted by (policy_id, claim_date) and walked once by a small
state machine. The running monthly sum is flushed on every month change
and on every policy change (month is checked first), and once more at the
end of the stream. Only paid claims (paid_amount > 0) contribute to the
sums, so a flushed month always carries a positive payout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, Optional

from .errors import AggregationError
from .schemas import MonthlySummary, PayoutSummary, RawClaim

logger = logging.getLogger(__name__)


# ---------------- Monthly pass ---------------- #

class _State(Enum):
    NO_CURRENT_POLICY = auto()
    IN_POLICY = auto()


@dataclass
class _MonthAccumulator:
    state: _State = _State.NO_CURRENT_POLICY
    policy_id: Optional[int] = None
    month: Optional[int] = None
    paid_sum: float = 0.0
    paid_count: int = 0
    flushed: list[MonthlySummary] = field(default_factory=list)

    def flush(self) -> None:
        if self.paid_count > 0:
            self.flushed.append(
                MonthlySummary(self.policy_id, self.month, self.paid_sum, self.paid_count)
            )
        self.paid_sum = 0.0
        self.paid_count = 0

    def reduce(self, claim: RawClaim) -> None:
        month = claim.month

        if self.state is _State.NO_CURRENT_POLICY:
            self.state = _State.IN_POLICY
            self.policy_id = claim.policy_id
            self.month = month
        else:
            if month != self.month:
                self.flush()
                self.month = month
            if claim.policy_id != self.policy_id:
                self.flush()
                self.policy_id = claim.policy_id
                self.month = month

        # unpaid / denied claims keep the timeline moving but add nothing
        if claim.paid_amount > 0:
            self.paid_sum += claim.paid_amount
            self.paid_count += 1


def summarize_months(claims: Iterable[RawClaim]) -> list[MonthlySummary]:
    """Monthly paid sums/counts, ordered by (policy_id, month)."""
    acc = _MonthAccumulator()
    for claim in sorted(claims, key=RawClaim.sort_key):
        acc.reduce(claim)
    acc.flush()
    return acc.flushed


# ---------------- Yearly pass ---------------- #

def build_payout_summaries(monthly: Iterable[MonthlySummary]) -> list[PayoutSummary]:
    """Group consecutive monthly summaries of the same policy into yearly rollups."""
    summaries: list[PayoutSummary] = []

    policy_id: Optional[int] = None
    year_sum = 0.0
    amounts: list[float] = []
    months: list[int] = []

    def close() -> None:
        if policy_id is not None:
            summaries.append(PayoutSummary(policy_id, year_sum, amounts, months))

    for row in monthly:
        if row.policy_id != policy_id:
            close()
            policy_id = row.policy_id
            year_sum = 0.0
            amounts = []
            months = []
        elif row.month <= months[-1]:
            raise AggregationError(
                f"policy {row.policy_id}: month {row.month} follows month {months[-1]}; "
                "claims must come from a single calendar year"
            )

        year_sum += row.paid_sum
        amounts.append(row.paid_sum)
        months.append(row.month)

    close()
    return summaries


def aggregate_claims(claims: Iterable[RawClaim]) -> list[PayoutSummary]:
    """Full aggregation: one PayoutSummary per policy with at least one paid month.

    Policies whose claims were all unpaid produce no summary.
    """
    claims = list(claims)
    monthly = summarize_months(claims)
    summaries = build_payout_summaries(monthly)

    logger.info(
        "Aggregated %d claims into %d monthly rows and %d policy summaries",
        len(claims),
        len(monthly),
        len(summaries),
    )
    return summaries
