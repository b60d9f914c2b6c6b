# admitprep/pipeline/demographics.py

import logging
from typing import Dict, Mapping

import pandas as pd

from admitprep.core.errors import require_columns

logger = logging.getLogger(__name__)

EHR_SEX_COL = "ehr_sex"
BIRTH_SEX_COL = "sex_at_birth"
ZIP_COL = "zip_code"


# =============================================================================
# Helpers
# =============================================================================
def gender_incongruence(ehr_sex: pd.Series, sex_at_birth: pd.Series) -> pd.Series:
    """1 where both values are present and differ (case-sensitive), else 0."""
    both_present = ehr_sex.notna() & sex_at_birth.notna()
    return (both_present & (ehr_sex != sex_at_birth)).astype(int)


def lump_rare_levels(series: pd.Series, threshold: float, other_label: str) -> pd.Series:
    """
    Replace levels whose share of non-missing values is strictly below
    `threshold` with `other_label`. Missing stays missing.
    """
    observed = series.dropna()
    if observed.empty:
        return series.copy()

    props = observed.value_counts(normalize=True)
    rare = props.index[props < threshold]
    return series.where(~series.isin(rare), other_label)


def _as_text(value) -> str:
    # ZIPs parsed as numbers come back as floats when the column has gaps
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def zip_prefix(series: pd.Series, n: int = 3) -> pd.Series:
    """First `n` characters of each non-missing ZIP; shorter values pass through."""
    return series.map(lambda v: _as_text(v)[:n], na_action="ignore")


# =============================================================================
# Main API
# =============================================================================
def add_demographic_features(
    df: pd.DataFrame,
    *,
    lump_threshold: float,
    lump_labels: Mapping[str, str],
    ehr_sex_col: str = EHR_SEX_COL,
    birth_sex_col: str = BIRTH_SEX_COL,
    zip_col: str = ZIP_COL,
) -> pd.DataFrame:
    """
    Adds gender_incongruence_flag and zip_3_digit; lumps rare levels of the
    columns named in `lump_labels` (race, ethnicity) into their "other" label.
    """
    require_columns(
        df,
        [ehr_sex_col, birth_sex_col, zip_col, *lump_labels],
        stage="demographics",
    )
    df_out = df.copy()

    df_out["gender_incongruence_flag"] = gender_incongruence(
        df_out[ehr_sex_col], df_out[birth_sex_col]
    )

    lumped: Dict[str, int] = {}
    for col, other_label in lump_labels.items():
        before = df_out[col].nunique(dropna=True)
        df_out[col] = lump_rare_levels(df_out[col], lump_threshold, other_label)
        lumped[col] = before - df_out[col].nunique(dropna=True)

    df_out["zip_3_digit"] = zip_prefix(df_out[zip_col])

    logger.info(
        f"Demographics: {int(df_out['gender_incongruence_flag'].sum())} incongruent, "
        f"levels merged per column {lumped}"
    )
    return df_out
