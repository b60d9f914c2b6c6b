# admitprep/pipeline/assembly.py

import logging
from typing import Iterable, List, Sequence, Tuple

import pandas as pd

from admitprep.core.config import PipelineConfig
from admitprep.core.errors import SchemaError, require_columns

logger = logging.getLogger(__name__)


# =============================================================================
# Internal helpers
# =============================================================================
def select_output_columns(
    df: pd.DataFrame,
    output_columns: Iterable[str],
    prefix: str,
) -> List[str]:
    """
    Explicit columns in their given order, then every `prefix`-matched
    column of `df` not already listed, in table order.
    """
    selected = list(dict.fromkeys(output_columns))
    selected += [
        c for c in df.columns
        if prefix and c.startswith(prefix) and c not in selected
    ]
    return selected


def recode_target(series: pd.Series, levels: Sequence[str]) -> pd.Series:
    """
    Two-level ordered categorical, negative class first.

    Missing stays missing; any other unrecognized label is a SchemaError.
    """
    levels = tuple(levels)
    unexpected = series.notna() & ~series.isin(levels)
    if unexpected.any():
        bad = sorted(series[unexpected].astype(str).unique())
        raise SchemaError(
            f"Target '{series.name}' has label(s) outside {levels}: {bad}",
            columns=[series.name],
        )

    return pd.Series(
        pd.Categorical(series, categories=list(levels), ordered=True),
        index=series.index,
        name=series.name,
    )


def coerce_numeric_columns(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    """
    Re-type configured numeric columns that arrived as text.

    A sentinel inside a numeric column leaves it text-typed after
    substitution; left alone it would be routed as a nominal predictor.
    Values that do not parse become missing.
    """
    df_out = df.copy()
    for col in columns:
        if col not in df_out.columns or pd.api.types.is_numeric_dtype(df_out[col]):
            continue

        present = df_out[col].notna()
        df_out[col] = pd.to_numeric(df_out[col], errors="coerce")
        n_lost = int((present & df_out[col].isna()).sum())
        if n_lost:
            logger.warning(f"'{col}': {n_lost} non-numeric value(s) -> missing")
        logger.debug(f"'{col}' re-typed as {df_out[col].dtype}")
    return df_out


# =============================================================================
# Main API
# =============================================================================
def assemble_dataset(df: pd.DataFrame, config: PipelineConfig) -> pd.DataFrame:
    """
    Project onto the configured output columns (plus sdoh_* by prefix),
    re-type numeric columns, recode the target and validate the result.
    """
    target = config.target_col
    columns = select_output_columns(df, config.output_columns, config.sdoh_prefix)
    if target not in columns:
        columns.append(target)

    require_columns(df, columns, stage="assemble")

    df_out = coerce_numeric_columns(df[columns], config.numeric_columns)
    df_out[target] = recode_target(df_out[target], config.target_levels)

    if config.drop_missing_target:
        n_before = len(df_out)
        df_out = df_out.dropna(subset=[target]).reset_index(drop=True)
        logger.info(f"Dropped {n_before - len(df_out)} row(s) with missing target")

    validate_shape(df_out, n_rows_in=len(df), expected_columns=columns)

    logger.info(
        f"Assembled dataset: {df_out.shape[0]} rows, {df_out.shape[1]} columns; "
        f"target distribution {df_out[target].value_counts(dropna=False).to_dict()}"
    )
    return df_out


def validate_shape(
    df: pd.DataFrame,
    *,
    n_rows_in: int,
    expected_columns: Sequence[str],
) -> Tuple[int, int]:
    """Rows never grow through assembly; columns match the projection exactly."""
    if len(df) > n_rows_in:
        raise SchemaError(f"Assembly produced more rows than input: {len(df)} > {n_rows_in}")
    if list(df.columns) != list(expected_columns):
        raise SchemaError(
            "Assembled columns do not match projection",
            columns=sorted(set(df.columns) ^ set(expected_columns)),
        )
    return df.shape
