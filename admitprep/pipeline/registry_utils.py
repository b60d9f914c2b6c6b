# admitprep/pipeline/registry_utils.py

import hashlib
import json
from typing import Dict, Iterable, List

import pandas as pd

from admitprep.core.spec import PreprocessingSpec, RoleSelector


# =============================================================================
# Spec hashing (reproducibility contract)
# =============================================================================
def hash_spec(spec: PreprocessingSpec) -> str:
    """
    Deterministic SHA-256 of a PreprocessingSpec.

    Notes
    -----
    - Only the declarative definition is hashed, never data
    - Stable across runs and machines
    """
    payload = json.dumps(spec.to_dict(), sort_keys=True)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


# =============================================================================
# Role-based column routing
# =============================================================================
def route_columns_by_role(
    df: pd.DataFrame,
    *,
    target: str,
    id_columns: Iterable[str] = (),
) -> Dict[str, List[str]]:
    """
    Split dataframe columns by role.

    Returns
    -------
    dict with keys:
        - id
        - outcome
        - numeric
        - nominal
    """
    id_columns = tuple(c for c in id_columns if c in df.columns)
    excluded = (target,) + id_columns

    return {
        "id": list(id_columns),
        "outcome": [target] if target in df.columns else [],
        "numeric": RoleSelector("numeric_predictor", exclude=excluded)(df),
        "nominal": RoleSelector("nominal_predictor", exclude=excluded)(df),
    }
