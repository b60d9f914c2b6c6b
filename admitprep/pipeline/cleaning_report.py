# admitprep/pipeline/cleaning_report.py

from typing import Dict, List, Optional

import pandas as pd

from admitprep.core.feature_registry import FEATURE_REGISTRY
from admitprep.core.spec import FeatureSpec


def build_cleaning_report(
    df: pd.DataFrame,
    registry: Optional[Dict[str, FeatureSpec]] = None,
    *,
    sdoh_prefix: str = "sdoh_",
) -> pd.DataFrame:
    """
    One audit row per column of the assembled dataset.

    Parameters
    ----------
    df : assembled dataset
    registry : feature registry (defaults to FEATURE_REGISTRY)

    Returns
    -------
    pd.DataFrame
    """
    registry = FEATURE_REGISTRY if registry is None else registry
    rows: List[dict] = []

    for col in df.columns:
        spec = registry.get(col)
        if spec is not None:
            role, domain = spec.table_role, spec.clinical_domain
        elif col.startswith(sdoh_prefix):
            role, domain = "feature", "sdoh"
        else:
            role, domain = "feature", "other"

        rows.append({
            "feature": col,
            "role": role,
            "domain": domain,
            "dtype": str(df[col].dtype),
            "missing_rate": float(df[col].isna().mean()) if len(df) else 0.0,
            "n_levels": int(df[col].nunique(dropna=True)),
            "clip_bounds": spec.clip_bounds if spec is not None else None,
        })

    return pd.DataFrame(rows)


def export_cleaning_report(
    df_report: pd.DataFrame,
    path: str,
):
    df_report.to_csv(path, index=False)
