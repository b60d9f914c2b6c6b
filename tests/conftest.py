"""
Shared fixtures: a small raw extract with un-normalized headers.
"""

import numpy as np
import pandas as pd
import pytest

from admitprep.core.config import PipelineConfig


@pytest.fixture
def raw_extract():
    """Raw extract as it would come out of the loader"""
    return pd.DataFrame({
        "Patient ID": [1, 2, 3, 4, 5],
        "Age": [70, 45, 62, 33, 58],
        "EHR Sex": ["M", "F", "M", "unknown", "F"],
        "Sex at Birth": ["F", "F", "M", "M", ""],
        "Race": ["White", "Black", "White", "Asian", "unknown"],
        "Ethnicity": ["Not Hispanic", "Hispanic", "Not Hispanic", "Not Hispanic", "Unknown"],
        "Zip Code": ["02134", "10001", "9", np.nan, "60614"],
        "Social Risk Triggers": [
            "Below FPL; food bank referral",
            "Housing unstable",
            np.nan,
            "Needs TRANSPORTATION to clinic",
            "lost insurance",
        ],
        "Household Income": [60000, 50000, 40000, np.nan, 30000],
        "Household Size": [3, 0, 2, 1, np.nan],
        "Blood Pressure": ["118/76", "145/95", "125/78", "unknown", "abc/80"],
        "BMI": [27.5, 14.0, 31.2, 22.0, np.nan],
        "A1C": [6.1, 5.4, 25.0, np.nan, 7.2],
        "BMI Percentile": [np.nan, np.nan, np.nan, np.nan, np.nan],
        "Active Med Count": [7, 2, np.nan, 6, 5],
        "Statin Name": ["atorvastatin", np.nan, "simvastatin", "", np.nan],
        "ACE ARB Name": [np.nan, "lisinopril", "", np.nan, "losartan"],
        "Admission": ["Yes", "No", "No", "Yes", "No"],
    })


@pytest.fixture
def config():
    """Default configuration"""
    return PipelineConfig()


@pytest.fixture
def normalized_extract(raw_extract, config):
    """Extract after name canonicalization and sentinel harmonization"""
    from admitprep.pipeline.normalizer import normalize_table
    return normalize_table(raw_extract, config.sentinels)
