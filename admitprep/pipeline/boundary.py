# admitprep/pipeline/boundary.py

import logging
from typing import Optional, Tuple

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


# =============================================================================
# Plausibility audit (non-destructive)
# =============================================================================
def plausibility_check(
    series: pd.Series,
    bounds: Optional[Tuple[float, float]],
    *,
    feature_name: Optional[str] = None,
    min_fraction_in_range: float = 0.8,
) -> float:
    """
    Fraction of non-missing values inside `bounds`.

    Warns when the fraction falls below `min_fraction_in_range`, which
    usually means the column was recorded in another unit. Never changes
    data. Returns NaN when there is nothing to check.
    """
    if bounds is None:
        return np.nan

    values = series.dropna()
    if values.empty:
        return np.nan

    low, high = bounds
    frac_in_range = float(((values >= low) & (values <= high)).mean())

    if frac_in_range < min_fraction_in_range:
        q05, q50, q95 = np.nanpercentile(values.astype(float), [5, 50, 95])
        logger.warning(
            f"[PlausibilityCheck] {feature_name or series.name}: "
            f"only {frac_in_range:.1%} of values within [{low}, {high}]. "
            f"Observed P5/P50/P95 = {q05:.3g}/{q50:.3g}/{q95:.3g}. "
            f"Possible unit mismatch."
        )

    return frac_in_range


# =============================================================================
# Range gating
# =============================================================================
def out_of_range(
    series: pd.Series,
    bounds: Optional[Tuple[float, float]],
) -> pd.Series:
    """Non-missing values outside the inclusive [low, high] interval."""
    if bounds is None:
        return pd.Series(False, index=series.index)
    low, high = bounds
    return (series < low) | (series > high)


def gate_range(
    series: pd.Series,
    bounds: Optional[Tuple[float, float]],
    *,
    feature_name: Optional[str] = None,
) -> Tuple[pd.Series, int]:
    """
    Audit, then set out-of-range values to missing.

    Rows are kept and nothing is clipped; missing input stays missing.

    Returns
    -------
    (gated series, number of values set to missing)
    """
    name = feature_name or series.name
    plausibility_check(series, bounds, feature_name=name)

    invalid = out_of_range(series, bounds)
    n_gated = int(invalid.sum())
    if n_gated:
        logger.info(f"'{name}': {n_gated} value(s) outside {bounds} -> missing")

    return series.mask(invalid), n_gated
