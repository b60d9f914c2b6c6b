# admitprep/pipeline/sdoh.py

import logging
import re
from typing import Dict, Tuple

import pandas as pd

from admitprep.core.errors import require_columns

logger = logging.getLogger(__name__)

TRIGGERS_COL = "social_risk_triggers"
INCOME_COL = "household_income"
SIZE_COL = "household_size"

# Flag name -> keywords searched (case-insensitive substring) in the triggers text
SDOH_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "financial_strain": ("fpl", "insurance", "financial"),
    "food_insecurity": ("food", "nutrition"),
    "housing_insecurity": ("housing",),
    "transportation_issue": ("transportation",),
}


# =============================================================================
# Helpers
# =============================================================================
def keyword_flag(text: pd.Series, keywords: Tuple[str, ...]) -> pd.Series:
    """1 if any keyword occurs anywhere in the text, else 0 (missing -> 0)."""
    pattern = "|".join(re.escape(k) for k in keywords)
    hits = text.astype("string").str.contains(pattern, case=False, regex=True)
    return hits.fillna(False).astype(int)


def per_capita(income: pd.Series, size: pd.Series) -> pd.Series:
    """income / size where size > 0; missing otherwise."""
    income = pd.to_numeric(income, errors="coerce")
    size = pd.to_numeric(size, errors="coerce")
    return income / size.where(size > 0)


# =============================================================================
# Main API
# =============================================================================
def add_sdoh_features(
    df: pd.DataFrame,
    *,
    prefix: str = "sdoh_",
    triggers_col: str = TRIGGERS_COL,
    income_col: str = INCOME_COL,
    size_col: str = SIZE_COL,
) -> pd.DataFrame:
    """Adds the four sdoh_* keyword flags and income_per_capita."""
    require_columns(df, [triggers_col, income_col, size_col], stage="sdoh")
    df_out = df.copy()

    for name, keywords in SDOH_KEYWORDS.items():
        df_out[f"{prefix}{name}"] = keyword_flag(df_out[triggers_col], keywords)

    df_out["income_per_capita"] = per_capita(df_out[income_col], df_out[size_col])

    prevalence = {
        name: int(df_out[f"{prefix}{name}"].sum()) for name in SDOH_KEYWORDS
    }
    logger.info(f"SDOH flags set: {prevalence}")
    return df_out
