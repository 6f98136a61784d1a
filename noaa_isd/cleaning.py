"""
Removal of spurious rows from a normalized observation table.
"""

import logging
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from .support_data import FAILING_QUALITY_CODES, NON_HOURLY_REPORT_TYPES

logger = logging.getLogger(__name__)

# Ceiling and visibility are not required; of the wind fields only the type is
REQUIRED_FIELDS = ('REPORT_TYPE', 'WND_TYPE', 'TMP', 'SLP', 'DEW')
QC_CHECKED_FIELDS = ('WND_DIR', 'WND_SPEED', 'VIS_DIST', 'CIG_HEIGHT')


def clean(
    observations: pd.DataFrame,
    required: Sequence[str] = REQUIRED_FIELDS,
    qc_checked: Sequence[str] = QC_CHECKED_FIELDS,
    failing_codes: Iterable[str] = FAILING_QUALITY_CODES,
) -> pd.DataFrame:
    """
    Drops observations that are not usable hourly reports.

    Bogus, summary-of-day and summary-of-month reports are first standardized
    to a missing report type. Rows whose quality code for any of `qc_checked`
    is in `failing_codes` are dropped, then rows missing any `required` field.
    The input table is left untouched.

    Args:
        observations (pd.DataFrame): A table produced by `normalize_observations`.
        required (Sequence[str]): Fields that must not be missing.
        qc_checked (Sequence[str]): Fields whose quality code is checked.
        failing_codes (Iterable[str]): Quality codes that mark a value as erroneous.

    Returns:
        pd.DataFrame: A new, filtered table.
    """
    df = observations.copy()
    failing_codes = list(failing_codes)
    n_start = len(df)

    if 'REPORT_TYPE' in df.columns:
        non_hourly = df['REPORT_TYPE'].isin(NON_HOURLY_REPORT_TYPES)
        if non_hourly.any():
            df.loc[non_hourly, 'REPORT_TYPE'] = np.nan
            if 'REPORT_TYPE_DESCR' in df.columns:
                df.loc[non_hourly, 'REPORT_TYPE_DESCR'] = np.nan

    for field in qc_checked:
        qc_col = f"{field}_QC"
        if qc_col in df.columns:
            failed = df[qc_col].isin(failing_codes)
            if failed.any():
                logger.info(f"Dropping {int(failed.sum())} rows with failing {field} quality codes.")
                df = df.loc[~failed]

    present = [field for field in required if field in df.columns]
    missing_fields = [field for field in required if field not in df.columns]
    if missing_fields:
        logger.warning(f"Required fields not in table, not checked: {missing_fields}")
    if present:
        n_before = len(df)
        df = df.dropna(subset=present)
        if len(df) < n_before:
            logger.info(f"Dropping {n_before - len(df)} rows with missing values in {present}.")

    logger.info(f"Kept {len(df)} of {n_start} observations after cleaning.")
    return df


def summarize_failed_quality_codes(
    observations: pd.DataFrame,
    failing_codes: Iterable[str] = FAILING_QUALITY_CODES,
) -> pd.Series:
    """
    Counts values flagged with a failing quality code, per variable.

    Args:
        observations (pd.DataFrame): A normalized observation table.
        failing_codes (Iterable[str]): Quality codes that mark a value as erroneous.

    Returns:
        pd.Series: Count of failing codes indexed by variable name, largest first.
    """
    failing_codes = list(failing_codes)
    counts = {}
    for qc_col in [col for col in observations.columns if col.endswith('_QC')]:
        counts[qc_col[:-3]] = int(observations[qc_col].isin(failing_codes).sum())
    return pd.Series(counts, dtype='int64').sort_values(ascending=False)
