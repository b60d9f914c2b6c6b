# admitprep/pipeline/medications.py

import logging

import pandas as pd

from admitprep.core.errors import require_columns

logger = logging.getLogger(__name__)

MED_COUNT_COL = "active_med_count"
STATIN_COL = "statin_name"
ACE_ARB_COL = "ace_arb_name"


def add_medication_features(
    df: pd.DataFrame,
    *,
    polypharmacy_threshold: int = 5,
    med_count_col: str = MED_COUNT_COL,
    statin_col: str = STATIN_COL,
    ace_arb_col: str = ACE_ARB_COL,
) -> pd.DataFrame:
    """
    is_polypharmacy_flag: count > threshold (missing count -> 0).
    is_on_statin / is_on_ace_arb: named-medication column is non-missing.
    """
    require_columns(df, [med_count_col, statin_col, ace_arb_col], stage="medications")
    df_out = df.copy()

    med_count = pd.to_numeric(df_out[med_count_col], errors="coerce")
    df_out["is_polypharmacy_flag"] = (med_count > polypharmacy_threshold).astype(int)
    df_out["is_on_statin"] = df_out[statin_col].notna().astype(int)
    df_out["is_on_ace_arb"] = df_out[ace_arb_col].notna().astype(int)

    logger.info(
        f"Medications: polypharmacy={int(df_out['is_polypharmacy_flag'].sum())}, "
        f"statin={int(df_out['is_on_statin'].sum())}, "
        f"ace/arb={int(df_out['is_on_ace_arb'].sum())}"
    )
    return df_out
