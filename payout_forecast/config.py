"""
Configuration for the per-policy payout forecast.

The defaults reproduce a single calendar year of claim-level history
(Jan..Dec of FORECAST_YEAR) and a 13 month forecast window whose last
month is January of the following year.
"""

# ---------------- Forecast horizon ---------------- #

FORECAST_YEAR: int = 2016

# 0 = Jan FORECAST_YEAR ... 12 = Jan FORECAST_YEAR + 1
N_FORECAST_MONTHS: int = 13

# Last month index with ground truth in the input data
LAST_OBSERVED_MONTH: int = 11

MONTH_LABELS = [
    "Jan16", "Feb16", "Mar16", "Apr16", "May16", "Jun16",
    "Jul16", "Aug16", "Sep16", "Oct16", "Nov16", "Dec16",
    "Jan17",
]


# ---------------- Clustering ---------------- #

# The reference run forecasts from each policy's own statistics
CLUSTERING_ENABLED: bool = False

DEFAULT_N_CLUSTERS: int = 45
DEFAULT_EPSILON: float = 0.1

# Hard stop for the convergence loop (the all-pairs sum rarely drops below epsilon)
MAX_CLUSTER_ITERATIONS: int = 100


# ---------------- Rounding ---------------- #

DISTANCE_DECIMALS: int = 2
PAYOUT_DECIMALS: int = 2


# ---------------- CSV layout ---------------- #

INPUT_COLUMNS = ["PolicyId", "ClaimDate", "ClaimedAmount", "PaidAmount"]
INPUT_DATE_FORMAT: str = "%Y-%m-%d"

OUTPUT_COLUMNS = [
    "PolicyId",
    "Year",
    "Month",
    "PrevMonth",
    "MeanTimeBetween",
    "TimingProb",
    "TargetMean",
    "Efm",
    "EfmI",
    "EfmD",
    "EstimatedPayout",
    "ActualPayout",
    "PercentError",
]
OUTPUT_PREFIX: str = "Predictions"
MANIFEST_NAME: str = "run_manifest.json"


# ---------------- Synthetic claims ---------------- #

N_SYNTHETIC_POLICIES: int = 2_000

# Mean claims per policy per month before frailty
MONTHLY_CLAIM_FREQ: float = 0.18

# Mean claimed amount per claim (pet-health style, USD)
CLAIM_SEVERITY: float = 650.0
SEVERITY_SIGMA: float = 0.8

# Fraction of claims denied outright (paid amount 0)
DENIAL_RATE: float = 0.12

# Paid share of the claimed amount for accepted claims
PAID_SHARE_RANGE = (0.7, 0.9)


# ---------------- Random seeds ---------------- #

SEED_CLAIMS: int = 44
SEED_CLUSTERING: int = 45
