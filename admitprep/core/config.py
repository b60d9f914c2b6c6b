"""
config.py

Named configuration inputs consumed by the pipeline stages.

Defaults come from FEATURE_REGISTRY (output columns, vital bounds, target,
identifiers) plus the cleaning constants below. A JSON file may override
any field; see configs/pipeline_config.json.
"""

import json
import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional, Tuple

from .feature_registry import FEATURE_REGISTRY

logger = logging.getLogger(__name__)

# =============================================================================
# Defaults
# =============================================================================
# Case-sensitive literals meaning "no data" in the raw extract.
DEFAULT_SENTINELS: Tuple[str, ...] = (
    "",
    "unknown",
    "refused",
    "declined",
    "not reported",
    "N/A",
)

DEFAULT_LUMP_LABELS: Dict[str, str] = {
    "race": "Other Race",
    "ethnicity": "Other Ethnicity",
}

DEFAULT_PRUNE_COLUMNS: Tuple[str, ...] = ("bmi_percentile",)

# Canonical names of code-like columns read as text so leading zeros survive.
DEFAULT_TEXT_COLUMNS: Tuple[str, ...] = ("zip_code",)


def _registry_output_columns() -> Tuple[str, ...]:
    return tuple(FEATURE_REGISTRY)


def _registry_bounds() -> Dict[str, Tuple[float, float]]:
    return {
        name: spec.clip_bounds
        for name, spec in FEATURE_REGISTRY.items()
        if spec.clip_bounds is not None
    }


def _registry_role(role: str) -> Tuple[str, ...]:
    return tuple(n for n, s in FEATURE_REGISTRY.items() if s.table_role == role)


def _registry_numeric() -> Tuple[str, ...]:
    return tuple(
        n for n, s in FEATURE_REGISTRY.items()
        if s.table_role == "feature" and s.value_type == "numeric"
    )


# =============================================================================
# Config object
# =============================================================================
@dataclass(frozen=True)
class PipelineConfig:
    # =====================
    # Normalizer / pruner
    # =====================
    sentinels: Tuple[str, ...] = DEFAULT_SENTINELS
    prune_columns: Tuple[str, ...] = DEFAULT_PRUNE_COLUMNS
    encoding: str = "utf-8"
    text_columns: Tuple[str, ...] = DEFAULT_TEXT_COLUMNS

    # =====================
    # Feature engine
    # =====================
    lump_threshold: float = 0.01
    lump_labels: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_LUMP_LABELS))
    vital_bounds: Dict[str, Tuple[float, float]] = field(default_factory=_registry_bounds)
    polypharmacy_threshold: int = 5

    # =====================
    # Assembler
    # =====================
    output_columns: Tuple[str, ...] = field(default_factory=_registry_output_columns)
    numeric_columns: Tuple[str, ...] = field(default_factory=_registry_numeric)
    sdoh_prefix: str = "sdoh_"
    target_col: str = field(default_factory=lambda: _registry_role("outcome")[0])
    target_levels: Tuple[str, str] = ("No", "Yes")  # negative, positive
    id_columns: Tuple[str, ...] = field(default_factory=lambda: _registry_role("id"))
    drop_missing_target: bool = False


# =============================================================================
# Loading
# =============================================================================
def _coerce(name: str, value: Any) -> Any:
    if name == "vital_bounds":
        bounds = {}
        for col, pair in value.items():
            if len(pair) != 2 or pair[0] > pair[1]:
                raise ValueError(f"Invalid bounds for '{col}': {pair}")
            bounds[col] = (float(pair[0]), float(pair[1]))
        return bounds
    if name == "target_levels":
        if len(value) != 2:
            raise ValueError(f"target_levels needs exactly two labels, got {value}")
        return tuple(value)
    if isinstance(value, list):
        return tuple(value)
    return value


def load_config(path: Optional[str] = None, **overrides) -> PipelineConfig:
    """
    Build a PipelineConfig from defaults, an optional JSON file and keyword
    overrides (applied last).

    The JSON may be flat or nested under a "pipeline_config" key.
    """
    config = PipelineConfig()
    values: Dict[str, Any] = {}

    if path is not None:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        values.update(raw.get("pipeline_config", raw))
        logger.info(f"Loaded pipeline configuration from {path}")

    values.update(overrides)

    known = {f.name for f in fields(PipelineConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown configuration key(s): {unknown}")

    return replace(config, **{k: _coerce(k, v) for k, v in values.items()})
