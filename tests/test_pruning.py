"""
Unit Tests for ColumnPruner
"""

import pandas as pd
import pytest

from admitprep.core.errors import SchemaError
from admitprep.pipeline.pruning import prune_columns


@pytest.fixture
def small_frame():
    return pd.DataFrame({"a": [1, 2], "b": [3, 4], "bmi_percentile": [None, None]})


def test_prune_drops_named_columns(small_frame):
    """Named columns are removed, others kept in order"""
    out = prune_columns(small_frame, ["bmi_percentile"])

    assert list(out.columns) == ["a", "b"]
    assert len(out) == len(small_frame)


def test_prune_missing_column_raises(small_frame):
    """Pruning a column that does not exist is a schema error"""
    with pytest.raises(SchemaError) as exc:
        prune_columns(small_frame, ["bmi_percentile", "not_there"])

    assert exc.value.columns == ("not_there",)


def test_prune_nothing(small_frame):
    """An empty prune list returns an equal copy"""
    out = prune_columns(small_frame, [])

    pd.testing.assert_frame_equal(out, small_frame)
    assert out is not small_frame
