# admitprep/pipeline/normalizer.py

import logging
import re
import unicodedata
from typing import Iterable, List

import pandas as pd

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_NON_ALNUM = re.compile(r"[^0-9a-zA-Z]+")


# =============================================================================
# Column names
# =============================================================================
def clean_name(name) -> str:
    """
    Canonical snake_case ASCII identifier for a single column name.

    "Patient ID" -> "patient_id", "ehrSex" -> "ehr_sex", "Género" -> "genero",
    "1st Visit" -> "x1st_visit".
    """
    text = unicodedata.normalize("NFKD", str(name))
    text = text.encode("ascii", "ignore").decode("ascii")
    text = _CAMEL_BOUNDARY.sub(r"\1_\2", text)
    text = _NON_ALNUM.sub("_", text).strip("_").lower()

    if not text:
        return "x"
    if text[0].isdigit():
        text = "x" + text
    return text


def clean_names(names: Iterable) -> List[str]:
    """Clean every name, suffixing duplicates with _2, _3, ..."""
    used = set()
    out = []
    for raw in names:
        base = clean_name(raw)
        candidate, n = base, 1
        while candidate in used:
            n += 1
            candidate = f"{base}_{n}"
        used.add(candidate)
        out.append(candidate)
    return out


# =============================================================================
# Sentinels
# =============================================================================
def _is_text_column(series: pd.Series) -> bool:
    return pd.api.types.is_object_dtype(series) or pd.api.types.is_string_dtype(series)


def replace_sentinels(df: pd.DataFrame, sentinels: Iterable[str]) -> pd.DataFrame:
    """
    Turn every text cell exactly equal (case-sensitive) to a sentinel into
    a missing value.

    One pass per column using set membership over all sentinels at once.
    """
    sentinel_set = set(sentinels)
    df_out = df.copy()
    total = 0

    if not sentinel_set:
        return df_out

    for col in df_out.columns:
        if not _is_text_column(df_out[col]):
            continue

        hits = df_out[col].isin(sentinel_set)
        n_hits = int(hits.sum())
        if n_hits:
            df_out[col] = df_out[col].mask(hits)
            total += n_hits
            logger.debug(f"'{col}': {n_hits} sentinel value(s) -> missing")

    logger.info(f"Sentinel substitution: {total} cell(s) set to missing")
    return df_out


# =============================================================================
# Main API
# =============================================================================
def normalize_table(df: pd.DataFrame, sentinels: Iterable[str]) -> pd.DataFrame:
    """
    Canonicalize column names, then harmonize sentinel strings to missing.

    Idempotent: a second call renames nothing and substitutes nothing.
    """
    df_out = df.copy()
    renamed = clean_names(df_out.columns)
    changed = sum(a != b for a, b in zip(df_out.columns, renamed))
    df_out.columns = renamed
    if changed:
        logger.info(f"Renamed {changed} column(s) to canonical form")

    return replace_sentinels(df_out, sentinels)
