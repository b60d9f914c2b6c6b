# admitprep/pipeline/pruning.py

import logging
from typing import Iterable

import pandas as pd

from admitprep.core.errors import require_columns

logger = logging.getLogger(__name__)


def prune_columns(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    """
    Drop explicitly named columns.

    A named column that does not exist is a schema error, not a no-op.
    """
    columns = list(columns)
    require_columns(df, columns, stage="prune")

    df_out = df.drop(columns=columns)
    if columns:
        logger.info(f"Pruned {len(columns)} column(s): {columns}")
    return df_out
