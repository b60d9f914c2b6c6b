"""
features.py

FeatureEngine: the per-domain derivations (demographics, SDOH, vitals,
medications) behind one entry point.

Each domain transform is registered under a name and takes
(DataFrame, PipelineConfig) -> DataFrame. Domains do not share outputs,
so their order does not matter; all of them expect normalized input.
"""

import logging
from typing import Callable, Dict, Iterable, Optional

import pandas as pd

from admitprep.core.config import PipelineConfig
from admitprep.pipeline.demographics import add_demographic_features
from admitprep.pipeline.medications import add_medication_features
from admitprep.pipeline.sdoh import add_sdoh_features
from admitprep.pipeline.vitals import add_vital_features

logger = logging.getLogger(__name__)

DomainTransform = Callable[[pd.DataFrame, PipelineConfig], pd.DataFrame]

# =============================================================================
# Internal registry
# =============================================================================
_DOMAIN_REGISTRY: Dict[str, DomainTransform] = {}


def register_domain(name: str) -> Callable[[DomainTransform], DomainTransform]:
    """
    Decorator to register a domain transform.

    Args:
        name: Key accepted by engineer_features(domains=...)
    """
    def decorator(func: DomainTransform) -> DomainTransform:
        if name in _DOMAIN_REGISTRY:
            raise KeyError(f"Duplicate domain registered: '{name}'")
        _DOMAIN_REGISTRY[name] = func
        return func
    return decorator


# =============================================================================
# Domains
# =============================================================================
@register_domain("demographics")
def _demographics(df: pd.DataFrame, config: PipelineConfig) -> pd.DataFrame:
    return add_demographic_features(
        df,
        lump_threshold=config.lump_threshold,
        lump_labels=config.lump_labels,
    )


@register_domain("sdoh")
def _sdoh(df: pd.DataFrame, config: PipelineConfig) -> pd.DataFrame:
    return add_sdoh_features(df, prefix=config.sdoh_prefix)


@register_domain("vitals")
def _vitals(df: pd.DataFrame, config: PipelineConfig) -> pd.DataFrame:
    return add_vital_features(df, vital_bounds=config.vital_bounds)


@register_domain("medications")
def _medications(df: pd.DataFrame, config: PipelineConfig) -> pd.DataFrame:
    return add_medication_features(
        df, polypharmacy_threshold=config.polypharmacy_threshold
    )


DOMAIN_REGISTRY: Dict[str, DomainTransform] = _DOMAIN_REGISTRY


# =============================================================================
# Main API
# =============================================================================
def engineer_features(
    df: pd.DataFrame,
    config: PipelineConfig,
    domains: Optional[Iterable[str]] = None,
) -> pd.DataFrame:
    """
    Run the selected domain transforms (all by default) in sequence.

    Returns a new DataFrame with the same rows and the derived columns added.
    """
    selected = list(domains) if domains is not None else list(DOMAIN_REGISTRY)
    unknown = [d for d in selected if d not in DOMAIN_REGISTRY]
    if unknown:
        raise KeyError(f"Unknown feature domain(s): {unknown}")

    df_out = df.copy()
    for name in selected:
        n_cols = df_out.shape[1]
        df_out = DOMAIN_REGISTRY[name](df_out, config)
        logger.info(f"[{name}] +{df_out.shape[1] - n_cols} column(s)")

    if len(df_out) != len(df):
        raise RuntimeError(
            f"Feature engineering changed row count: {len(df)} -> {len(df_out)}"
        )
    return df_out
