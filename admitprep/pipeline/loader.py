# admitprep/pipeline/loader.py

import logging
import os
from typing import Dict, Iterable, Optional

import pandas as pd

from admitprep.pipeline.normalizer import clean_name

logger = logging.getLogger(__name__)


def _text_dtypes(
    path: str,
    encoding: str,
    text_columns: Iterable[str],
) -> Dict[str, object]:
    """Raw headers whose canonical name is in `text_columns` -> str."""
    wanted = set(text_columns)
    if not wanted:
        return {}
    header = pd.read_csv(path, encoding=encoding, nrows=0).columns
    return {raw: str for raw in header if clean_name(raw) in wanted}


def load_table(
    path: str,
    *,
    encoding: str = "utf-8",
    text_columns: Iterable[str] = (),
    dtype: Optional[Dict[str, object]] = None,
) -> pd.DataFrame:
    """
    Read a comma-separated extract (header row first) into a DataFrame.

    Only parsing happens here:
    - empty cells are the only values missing at parse time; literals such
      as "NA" or "null" stay text and are left to sentinel substitution
    - columns named in `text_columns` (canonical names, e.g. "zip_code")
      are read as text so leading zeros survive
    - `dtype` (raw header names) overrides both
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Input file not found: {path}")

    dtypes = _text_dtypes(path, encoding, text_columns)
    dtypes.update(dtype or {})

    df = pd.read_csv(
        path,
        encoding=encoding,
        dtype=dtypes or None,
        keep_default_na=False,
        na_values=[""],
    )
    logger.info(f"Loaded {path}: {df.shape[0]} rows, {df.shape[1]} columns")
    return df
