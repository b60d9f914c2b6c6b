from dataclasses import dataclass, field, asdict
from typing import Optional, Tuple, Literal, Dict, List, Any

import pandas as pd


@dataclass(frozen=True)
class FeatureSpec:
    # =====================
    # Identity
    # =====================
    name: str
    display_en: str

    # =====================
    # Representation
    # =====================
    unit: Optional[str] = None

    value_type: Literal[
        "numeric",      # re-typed to numbers at assembly
        "nominal",      # kept as labels (codes, categories)
    ] = "numeric"

    # =====================
    # Modeling control
    # =====================
    clinical_domain: str = "other"

    table_role: Literal[
        "feature",      # model input
        "outcome",      # classification target
        "id",           # identifiers, carried but never a predictor
    ] = "feature"

    # =====================
    # Clinical constraints
    # =====================
    clip_bounds: Optional[Tuple[float, float]] = None
    # inclusive; values outside become missing, never clipped


# =============================================================================
# Column-role predicates
# =============================================================================
Role = Literal["numeric_predictor", "nominal_predictor", "all_predictors"]

ROLES: Tuple[str, ...] = ("numeric_predictor", "nominal_predictor", "all_predictors")


@dataclass(frozen=True)
class RoleSelector:
    """
    Callable column selector bound to a role, not to column names.

    Usable directly as a scikit-learn ColumnTransformer column spec.
    """

    role: Role
    exclude: Tuple[str, ...] = ()

    def __call__(self, df: pd.DataFrame) -> List[str]:
        cols = [c for c in df.columns if c not in self.exclude]
        if self.role == "numeric_predictor":
            return [c for c in cols if _is_numeric(df[c])]
        if self.role == "nominal_predictor":
            return [c for c in cols if not _is_numeric(df[c])]
        return cols


def _is_numeric(series: pd.Series) -> bool:
    return pd.api.types.is_numeric_dtype(series) and not pd.api.types.is_bool_dtype(series)


# =============================================================================
# Preprocessing recipe value objects
# =============================================================================
Operation = Literal[
    "impute_median",
    "impute_mode",
    "encode_dummy",
    "normalize",
    "drop_zero_variance",
]

# impute before encode before normalize before zero-variance filter
STEP_ORDER: Tuple[str, ...] = (
    "impute_median",
    "impute_mode",
    "encode_dummy",
    "normalize",
    "drop_zero_variance",
)


@dataclass(frozen=True)
class TransformStep:
    name: str
    operation: Operation
    role: Role
    params: Tuple[Tuple[str, Any], ...] = ()

    @property
    def rank(self) -> int:
        return STEP_ORDER.index(self.operation)

    def param_dict(self) -> Dict[str, Any]:
        return dict(self.params)


@dataclass(frozen=True)
class PreprocessingSpec:
    """
    Declarative, unfitted preprocessing recipe.

    Steps reference column roles, so the recipe stays valid for any table
    of the same general shape. Fitting and applying it belongs to the
    modeling phase.
    """

    target: str
    id_columns: Tuple[str, ...] = ()
    steps: Tuple[TransformStep, ...] = field(default_factory=tuple)

    @property
    def step_names(self) -> List[str]:
        return [s.name for s in self.steps]

    def selector(self, role: Role) -> RoleSelector:
        return RoleSelector(role=role, exclude=(self.target,) + tuple(self.id_columns))

    def resolve(self, df: pd.DataFrame) -> Dict[str, List[str]]:
        """Columns each step would act on for `df` (no fitting)."""
        return {s.name: self.selector(s.role)(df) for s in self.steps}

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["steps"] = [
            {
                "name": s.name,
                "operation": s.operation,
                "role": s.role,
                "params": s.param_dict(),
            }
            for s in self.steps
        ]
        payload["id_columns"] = list(self.id_columns)
        return payload

    def to_sklearn(self):
        """
        Compile into an unfitted scikit-learn Pipeline.

        Numeric and nominal branches run inside a ColumnTransformer, each
        keeping impute -> encode/normalize order; the zero-variance filter
        runs last on the combined matrix.
        """
        from sklearn.compose import ColumnTransformer
        from sklearn.feature_selection import VarianceThreshold
        from sklearn.impute import SimpleImputer
        from sklearn.pipeline import Pipeline
        from sklearn.preprocessing import OneHotEncoder, StandardScaler

        numeric_steps, nominal_steps, tail = [], [], []

        for step in self.steps:
            params = step.param_dict()
            if step.operation == "impute_median":
                numeric_steps.append((step.name, SimpleImputer(strategy="median")))
            elif step.operation == "impute_mode":
                nominal_steps.append((step.name, SimpleImputer(strategy="most_frequent")))
            elif step.operation == "encode_dummy":
                nominal_steps.append((
                    step.name,
                    OneHotEncoder(
                        handle_unknown="ignore",
                        sparse_output=False,
                        drop=params.get("drop"),
                    ),
                ))
            elif step.operation == "normalize":
                numeric_steps.append((step.name, StandardScaler()))
            elif step.operation == "drop_zero_variance":
                tail.append((step.name, VarianceThreshold(threshold=params.get("threshold", 0.0))))

        branches = []
        if numeric_steps:
            branches.append(("numeric", Pipeline(numeric_steps), self.selector("numeric_predictor")))
        if nominal_steps:
            branches.append(("nominal", Pipeline(nominal_steps), self.selector("nominal_predictor")))

        return Pipeline(
            [("roles", ColumnTransformer(branches, remainder="drop"))] + tail
        )
