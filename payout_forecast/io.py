"""
CSV boundary: claim rows in, prediction rows out.

Input layout (one claim per row, optional header):
    PolicyId,ClaimDate,ClaimedAmount,PaidAmount
    17,2016-03-04,420.00,336.00

Rows whose PolicyId is not an integer (headers, comments) are ignored.
Rows with an unparseable date or amount are dropped with a warning.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from . import config
from .schemas import PayoutPrediction, RawClaim

logger = logging.getLogger(__name__)


# ---------------- Claims ---------------- #

def claims_from_frame(frame: pd.DataFrame) -> list[RawClaim]:
    """Parse a frame in the input CSV layout into RawClaim records."""
    frame = frame[config.INPUT_COLUMNS].astype(str)

    policy_ids = frame["PolicyId"].str.strip()
    frame = frame[policy_ids.str.fullmatch(r"\d+", na=False)]

    dates = pd.to_datetime(
        frame["ClaimDate"].str.strip(), format=config.INPUT_DATE_FORMAT, errors="coerce"
    )
    claimed = pd.to_numeric(frame["ClaimedAmount"], errors="coerce")
    paid = pd.to_numeric(frame["PaidAmount"], errors="coerce")

    ok = dates.notna() & claimed.notna() & paid.notna()
    n_bad = int((~ok).sum())
    if n_bad:
        logger.warning("Skipped %d claim rows with an unparseable date or amount", n_bad)

    return [
        RawClaim(int(pid), ts.date(), float(c), float(p))
        for pid, ts, c, p in zip(
            frame["PolicyId"][ok], dates[ok], claimed[ok], paid[ok]
        )
    ]


def read_claims(path: Path) -> list[RawClaim]:
    """Load claim rows from a CSV file. A missing file raises FileNotFoundError."""
    path = Path(path)
    try:
        raw = pd.read_csv(
            path,
            header=None,
            usecols=range(len(config.INPUT_COLUMNS)),
            dtype=str,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        logger.warning("No claim rows in %s", path)
        return []
    raw.columns = config.INPUT_COLUMNS

    claims = claims_from_frame(raw)
    logger.info("Read %d claims from %s", len(claims), path)
    return claims


# ---------------- Predictions ---------------- #

def prediction_path(input_path: Path, month: int, output_dir: Optional[Path] = None) -> Path:
    """``Predictions<Label>.csv`` beside the input file, or in ``output_dir``."""
    folder = Path(output_dir) if output_dir is not None else Path(input_path).parent
    return folder / f"{config.OUTPUT_PREFIX}{config.MONTH_LABELS[month]}.csv"


def predictions_to_frame(predictions: Iterable[PayoutPrediction]) -> pd.DataFrame:
    return pd.DataFrame(
        [p.to_record() for p in predictions], columns=config.OUTPUT_COLUMNS
    )


def write_predictions(predictions: Iterable[PayoutPrediction], path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    predictions_to_frame(predictions).to_csv(path, index=False)
    return path


def read_predictions(path: Path) -> pd.DataFrame:
    return pd.read_csv(path)
