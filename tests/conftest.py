"""Pytest configuration and shared fixtures."""

from datetime import date

import pytest

from payout_forecast.schemas import PayoutSummary, RawClaim


@pytest.fixture
def make_claim():
    """Build a RawClaim from (policy_id, 'YYYY-MM-DD', paid[, claimed])."""

    def _make(policy_id, day, paid, claimed=None):
        y, m, d = (int(part) for part in day.split("-"))
        return RawClaim(policy_id, date(y, m, d), paid if claimed is None else claimed, paid)

    return _make


@pytest.fixture
def quarterly_summary():
    """Payouts every three months: Jan 100, Apr 150, Jul 200."""
    return PayoutSummary(7, 450.0, [100.0, 150.0, 200.0], [0, 3, 6])


@pytest.fixture
def irregular_summary():
    """Gaps of 1, 3 and 2 months with four distinct amounts."""
    return PayoutSummary(9, 1000.0, [100.0, 400.0, 200.0, 300.0], [1, 2, 5, 7])


@pytest.fixture
def single_summary():
    return PayoutSummary(11, 80.0, [80.0], [5])
