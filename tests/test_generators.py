"""Tests for the synthetic claims generator."""

import pandas as pd

from payout_forecast import config
from payout_forecast.generators import generate_claims
from payout_forecast.io import claims_from_frame, read_claims


class TestGenerateClaims:
    """Test generate_claims."""

    def test_layout(self):
        claims = generate_claims(n_policies=50, random_state=1)
        assert list(claims.columns) == config.INPUT_COLUMNS
        assert not claims.empty

    def test_deterministic_for_seed(self):
        a = generate_claims(n_policies=40, random_state=9)
        b = generate_claims(n_policies=40, random_state=9)
        pd.testing.assert_frame_equal(a, b)

    def test_values_are_plausible(self):
        claims = generate_claims(n_policies=300, year=2016, random_state=2)
        dates = pd.to_datetime(claims["ClaimDate"], format=config.INPUT_DATE_FORMAT)

        assert (dates.dt.year == 2016).all()
        assert claims["PolicyId"].between(1, 300).all()
        assert (claims["ClaimedAmount"] > 0).all()
        assert (claims["PaidAmount"] >= 0).all()
        assert (claims["PaidAmount"] <= claims["ClaimedAmount"]).all()
        # some claims are denied outright
        assert (claims["PaidAmount"] == 0).any()

    def test_parses_back_without_loss(self, tmp_path):
        claims = generate_claims(n_policies=30, random_state=4)
        path = tmp_path / "claims.csv"
        claims.to_csv(path, index=False)

        assert len(read_claims(path)) == len(claims)
        assert read_claims(path) == claims_from_frame(claims)

    def test_no_policies(self):
        claims = generate_claims(n_policies=0)
        assert claims.empty
        assert list(claims.columns) == config.INPUT_COLUMNS
