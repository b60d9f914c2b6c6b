"""
preprocessing.py

Builds the declarative PreprocessingSpec handed to the modeling phase:

    median-impute numeric -> mode-impute nominal -> dummy-encode nominal
    -> center/scale numeric -> drop zero-variance

Steps are bound to column roles, not names. Nothing here fits or applies
the recipe.
"""

import logging
from typing import Dict, Iterable, Optional, Tuple

import pandas as pd

from admitprep.core.errors import SchemaError, require_columns
from admitprep.core.spec import PreprocessingSpec, Role, TransformStep
from admitprep.pipeline.registry_utils import hash_spec, route_columns_by_role

logger = logging.getLogger(__name__)


# =============================================================================
# Step factory
# =============================================================================
# operation -> (step name, default role)
STEP_DEFAULTS: Dict[str, Tuple[str, Role]] = {
    "impute_median": ("impute-numeric", "numeric_predictor"),
    "impute_mode": ("impute-nominal", "nominal_predictor"),
    "encode_dummy": ("encode-nominal", "nominal_predictor"),
    "normalize": ("normalize-numeric", "numeric_predictor"),
    "drop_zero_variance": ("drop-zero-variance", "all_predictors"),
}


def build_step(operation: str, role: Optional[Role] = None, **params) -> TransformStep:
    if operation not in STEP_DEFAULTS:
        raise ValueError(f"Unknown preprocessing operation: {operation}")
    name, default_role = STEP_DEFAULTS[operation]
    return TransformStep(
        name=name,
        operation=operation,
        role=role or default_role,
        params=tuple(sorted(params.items())),
    )


# =============================================================================
# Builder
# =============================================================================
class PreprocessingSpecBuilder:
    """
    Collects steps in any call order; build() always emits them in the
    fixed impute -> encode -> normalize -> zero-variance order.
    """

    def __init__(self, target: str, id_columns: Iterable[str] = ()):
        self.target = target
        self.id_columns = tuple(id_columns)
        self._steps: Dict[str, TransformStep] = {}

    def _add(self, step: TransformStep) -> "PreprocessingSpecBuilder":
        if step.operation in self._steps:
            logger.debug(f"Replacing existing '{step.name}' step")
        self._steps[step.operation] = step
        return self

    def impute_median(self, role: Role = "numeric_predictor") -> "PreprocessingSpecBuilder":
        return self._add(build_step("impute_median", role))

    def impute_mode(self, role: Role = "nominal_predictor") -> "PreprocessingSpecBuilder":
        return self._add(build_step("impute_mode", role))

    def encode_dummy(
        self,
        role: Role = "nominal_predictor",
        drop: Optional[str] = None,
    ) -> "PreprocessingSpecBuilder":
        return self._add(build_step("encode_dummy", role, drop=drop))

    def normalize(self, role: Role = "numeric_predictor") -> "PreprocessingSpecBuilder":
        return self._add(build_step("normalize", role))

    def drop_zero_variance(
        self,
        role: Role = "all_predictors",
        threshold: float = 0.0,
    ) -> "PreprocessingSpecBuilder":
        return self._add(build_step("drop_zero_variance", role, threshold=threshold))

    def build(self) -> PreprocessingSpec:
        steps = tuple(sorted(self._steps.values(), key=lambda s: s.rank))
        return PreprocessingSpec(
            target=self.target,
            id_columns=self.id_columns,
            steps=steps,
        )


# =============================================================================
# Main API
# =============================================================================
def build_preprocessing_spec(
    df: pd.DataFrame,
    *,
    target: str,
    id_columns: Iterable[str] = (),
) -> PreprocessingSpec:
    """
    Build the standard five-step spec against an assembled table.

    Raises SchemaError when the target is absent or no predictor column
    remains once the target and identifiers are set aside.
    """
    require_columns(df, [target], stage="preprocessing")
    routed = route_columns_by_role(df, target=target, id_columns=id_columns)

    if not routed["numeric"] and not routed["nominal"]:
        raise SchemaError("No predictor columns available for preprocessing")

    spec = (
        PreprocessingSpecBuilder(target, routed["id"])
        .impute_median()
        .impute_mode()
        .encode_dummy()
        .normalize()
        .drop_zero_variance()
        .build()
    )

    logger.info(
        f"PreprocessingSpec {hash_spec(spec)[:12]}: "
        f"{len(routed['numeric'])} numeric, {len(routed['nominal'])} nominal predictor(s); "
        f"steps {spec.step_names}"
    )
    return spec
