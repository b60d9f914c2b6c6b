# admitprep/pipeline/vitals.py

import logging
from typing import Callable, List, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from admitprep.core.errors import require_columns
from admitprep.pipeline.boundary import gate_range

logger = logging.getLogger(__name__)

BP_COL = "blood_pressure"
BMI_COL = "bmi"
A1C_COL = "a1c"
BP_SEPARATOR = "/"
OTHER_NA = "Other/NA"


# =============================================================================
# Decision tables (first matching rule wins)
# =============================================================================
# Stage 1 and Stage 2 overlap under "or"; rule order settles it.
BP_RULES: List[Tuple[str, Callable[[pd.Series, pd.Series], pd.Series]]] = [
    ("Normal", lambda sys, dia: (sys < 120) & (dia < 80)),
    ("Elevated", lambda sys, dia: (sys < 130) & (dia < 80)),
    ("Hypertension Stage 1", lambda sys, dia: (sys < 140) | (dia < 90)),
    ("Hypertension Stage 2", lambda sys, dia: (sys >= 140) | (dia >= 90)),
]

BMI_RULES: List[Tuple[str, Callable[[pd.Series], pd.Series]]] = [
    ("Underweight", lambda bmi: bmi < 18.5),
    ("Normal", lambda bmi: bmi < 25),
    ("Overweight", lambda bmi: bmi < 30),
    ("Obese", lambda bmi: bmi >= 30),
]


def evaluate_rules(
    rules: Sequence[Tuple[str, Callable[..., pd.Series]]],
    *operands: pd.Series,
    default: str = OTHER_NA,
) -> pd.Series:
    """
    Label each row with the first rule whose predicate holds.

    Comparisons against missing operands are False, so rows no rule can
    decide fall through to `default`.
    """
    index = operands[0].index
    conditions = [np.asarray(pred(*operands), dtype=bool) for _, pred in rules]
    labels = [label for label, _ in rules]
    return pd.Series(
        np.select(conditions, labels, default=default),
        index=index,
        dtype=object,
    )


# =============================================================================
# Helpers
# =============================================================================
def to_float(series: pd.Series) -> pd.Series:
    """Numeric coercion; unparseable text becomes missing."""
    return pd.to_numeric(series, errors="coerce").astype(float)


def split_blood_pressure(
    series: pd.Series,
    separator: str = BP_SEPARATOR,
) -> Tuple[pd.Series, pd.Series]:
    """Split "systolic/diastolic" text into two float Series."""
    text = series.map(lambda v: "".join(str(v).split()), na_action="ignore").astype(object)
    parts = text.str.split(separator, n=1, expand=True).reindex(columns=[0, 1])
    return to_float(parts[0]), to_float(parts[1])


def bp_category(systolic: pd.Series, diastolic: pd.Series) -> pd.Series:
    return evaluate_rules(BP_RULES, systolic, diastolic)


def bmi_category(bmi: pd.Series) -> pd.Series:
    return evaluate_rules(BMI_RULES, bmi)


# =============================================================================
# Main API
# =============================================================================
def add_vital_features(
    df: pd.DataFrame,
    *,
    vital_bounds: Mapping[str, Tuple[float, float]],
    bp_col: str = BP_COL,
    bmi_col: str = BMI_COL,
    a1c_col: str = A1C_COL,
) -> pd.DataFrame:
    """
    Splits blood pressure into systolic/diastolic (source column kept),
    range-gates BMI, A1C and both pressures, and adds bp_category,
    bmi_category and pulse_pressure.
    """
    require_columns(df, [bp_col, bmi_col, a1c_col], stage="vitals")
    df_out = df.copy()

    systolic, diastolic = split_blood_pressure(df_out[bp_col])

    gated = {}
    df_out["systolic"], gated["systolic"] = gate_range(
        systolic, vital_bounds.get("systolic"), feature_name="systolic"
    )
    df_out["diastolic"], gated["diastolic"] = gate_range(
        diastolic, vital_bounds.get("diastolic"), feature_name="diastolic"
    )
    df_out[bmi_col], gated["bmi"] = gate_range(
        to_float(df_out[bmi_col]), vital_bounds.get("bmi"), feature_name="bmi"
    )
    df_out[a1c_col], gated["a1c"] = gate_range(
        to_float(df_out[a1c_col]), vital_bounds.get("a1c"), feature_name="a1c"
    )

    df_out["bp_category"] = bp_category(df_out["systolic"], df_out["diastolic"])
    df_out["bmi_category"] = bmi_category(df_out[bmi_col])
    df_out["pulse_pressure"] = df_out["systolic"] - df_out["diastolic"]

    logger.info(
        f"Vitals: bp_category {df_out['bp_category'].value_counts().to_dict()}; "
        f"range-gated {gated}"
    )
    return df_out
