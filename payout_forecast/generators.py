"""
Synthetic claim-level data for one calendar year.

Design goals:
- Heterogeneous claim frequency across policies (Gamma frailty, so some
  policies claim every month and many never do).
- Heavy right tail on claim severity (lognormal).
- A share of claims is denied outright and carries a paid amount of 0.

The output frame uses the input CSV layout, so it can be written with
``to_csv(index=False)`` and read back with ``io.read_claims``.
"""

from __future__ import annotations

from datetime import date, timedelta

import numpy as np
import pandas as pd

from . import config


def generate_claims(
    n_policies: int | None = None,
    year: int | None = None,
    random_state: int | None = None,
) -> pd.DataFrame:
    """Generate claims for ``n_policies`` policies over the 12 months of ``year``.

    Returns:
        DataFrame with columns [PolicyId, ClaimDate, ClaimedAmount, PaidAmount],
        dates formatted with ``config.INPUT_DATE_FORMAT``.
    """
    n_policies = n_policies if n_policies is not None else config.N_SYNTHETIC_POLICIES
    year = year if year is not None else config.FORECAST_YEAR
    seed = random_state if random_state is not None else config.SEED_CLAIMS
    rng = np.random.default_rng(seed)

    # Policy-level latent frailty (Gamma) to induce overdispersion
    frailty = rng.gamma(shape=0.6, scale=1 / 0.6, size=n_policies)

    # Policy-level severity multiplier (breed / age / plan in real data)
    severity_mult = rng.lognormal(mean=0.0, sigma=0.35, size=n_policies)

    sigma = config.SEVERITY_SIGMA
    mu = np.log(config.CLAIM_SEVERITY) - 0.5 * sigma ** 2
    lo, hi = config.PAID_SHARE_RANGE

    rows: list[dict] = []

    for i in range(n_policies):
        policy_id = i + 1
        lam = config.MONTHLY_CLAIM_FREQ * frailty[i]
        counts = rng.poisson(lam, size=12)

        for month, n_claims in enumerate(counts, start=1):
            month_start = date(year, month, 1)
            for _ in range(int(n_claims)):
                claim_date = month_start + timedelta(days=int(rng.integers(0, 28)))
                claimed = float(rng.lognormal(mean=mu, sigma=sigma) * severity_mult[i])

                denied = rng.random() < config.DENIAL_RATE
                paid = 0.0 if denied else claimed * rng.uniform(lo, hi)

                rows.append(
                    {
                        "PolicyId": policy_id,
                        "ClaimDate": claim_date.strftime(config.INPUT_DATE_FORMAT),
                        "ClaimedAmount": round(claimed, 2),
                        "PaidAmount": round(paid, 2),
                    }
                )

    claims = pd.DataFrame(rows, columns=config.INPUT_COLUMNS)

    # Loader output is unordered in practice
    return claims.sample(frac=1.0, random_state=seed).reset_index(drop=True)
