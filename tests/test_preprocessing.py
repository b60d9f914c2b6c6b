"""
Unit Tests for the PreprocessingSpec builder
Tests step order, role predicates, fingerprinting and scikit-learn compilation
"""

import json

import numpy as np
import pandas as pd
import pytest

from admitprep.core.errors import SchemaError
from admitprep.core.spec import PreprocessingSpec, RoleSelector
from admitprep.pipeline.assembly import assemble_dataset
from admitprep.pipeline.features import engineer_features
from admitprep.pipeline.preprocessing import (
    PreprocessingSpecBuilder,
    build_preprocessing_spec,
)
from admitprep.pipeline.registry_utils import hash_spec, route_columns_by_role

STEP_NAMES = [
    "impute-numeric",
    "impute-nominal",
    "encode-nominal",
    "normalize-numeric",
    "drop-zero-variance",
]


# Fixtures

@pytest.fixture
def assembled(normalized_extract, config):
    return assemble_dataset(engineer_features(normalized_extract, config), config)


@pytest.fixture
def tiny_frame():
    """Numeric, constant and nominal predictors plus a target"""
    return pd.DataFrame({
        "age": [1.0, np.nan, 3.0],
        "const": [1, 1, 1],
        "color": ["a", np.nan, "b"],
        "admission": pd.Categorical(["No", "Yes", "No"], categories=["No", "Yes"], ordered=True),
    })


# Step Order Tests

def test_step_order(assembled, config):
    spec = build_preprocessing_spec(
        assembled, target=config.target_col, id_columns=config.id_columns
    )

    assert isinstance(spec, PreprocessingSpec)
    assert spec.step_names == STEP_NAMES


def test_step_order_independent_of_column_order(assembled, config):
    shuffled = assembled[list(reversed(assembled.columns))]

    spec = build_preprocessing_spec(shuffled, target=config.target_col)

    assert spec.step_names == STEP_NAMES


def test_builder_sorts_steps():
    """Calls in any order still produce the fixed order"""
    spec = (
        PreprocessingSpecBuilder("admission")
        .drop_zero_variance()
        .normalize()
        .encode_dummy()
        .impute_mode()
        .impute_median()
        .build()
    )

    assert spec.step_names == STEP_NAMES


def test_steps_reference_roles_not_names(assembled, config):
    spec = build_preprocessing_spec(assembled, target=config.target_col)

    roles = [s.role for s in spec.steps]
    assert roles == [
        "numeric_predictor",
        "nominal_predictor",
        "nominal_predictor",
        "numeric_predictor",
        "all_predictors",
    ]
    assert "age" not in json.dumps(spec.to_dict())


# Role Tests

def test_resolve_excludes_target_and_ids(assembled, config):
    spec = build_preprocessing_spec(
        assembled, target=config.target_col, id_columns=config.id_columns
    )

    resolved = spec.resolve(assembled)

    assert "age" in resolved["impute-numeric"]
    assert "bp_category" in resolved["encode-nominal"]
    for cols in resolved.values():
        assert "admission" not in cols
        assert "patient_id" not in cols


def test_route_columns_by_role(tiny_frame):
    routed = route_columns_by_role(tiny_frame, target="admission")

    assert routed["numeric"] == ["age", "const"]
    assert routed["nominal"] == ["color"]
    assert routed["outcome"] == ["admission"]
    assert routed["id"] == []


def test_role_selector_rebinds_to_new_table():
    """The same predicate adapts when the column set changes"""
    selector = RoleSelector("numeric_predictor", exclude=("admission",))

    assert selector(pd.DataFrame({"a": [1], "admission": [0]})) == ["a"]
    assert selector(pd.DataFrame({"b": [1.0], "c": ["x"]})) == ["b"]


# Error Tests

def test_no_predictors_raises():
    df = pd.DataFrame({"patient_id": [1, 2], "admission": ["No", "Yes"]})

    with pytest.raises(SchemaError):
        build_preprocessing_spec(df, target="admission", id_columns=["patient_id"])


def test_missing_target_raises(tiny_frame):
    with pytest.raises(SchemaError):
        build_preprocessing_spec(tiny_frame, target="outcome")


# Fingerprint Tests

def test_hash_is_deterministic(assembled, config):
    a = build_preprocessing_spec(assembled, target=config.target_col)
    b = build_preprocessing_spec(assembled.copy(), target=config.target_col)

    assert hash_spec(a) == hash_spec(b)
    assert len(hash_spec(a)) == 64


def test_hash_changes_with_definition(tiny_frame):
    a = build_preprocessing_spec(tiny_frame, target="admission")
    b = PreprocessingSpecBuilder("admission").impute_median().build()

    assert hash_spec(a) != hash_spec(b)


# Compilation Tests

def test_to_sklearn_is_unfitted_pipeline(tiny_frame):
    from sklearn.pipeline import Pipeline

    pipe = build_preprocessing_spec(tiny_frame, target="admission").to_sklearn()

    assert isinstance(pipe, Pipeline)
    assert [name for name, _ in pipe.steps] == ["roles", "drop-zero-variance"]
    assert not hasattr(pipe.steps[-1][1], "variances_")


def test_to_sklearn_downstream_fit(tiny_frame):
    """Downstream fit imputes, encodes, scales and drops the constant column"""
    pipe = build_preprocessing_spec(tiny_frame, target="admission").to_sklearn()

    Xt = pipe.fit_transform(tiny_frame.drop(columns=["admission"]))

    assert Xt.shape == (3, 3)
    assert not np.isnan(Xt).any()
