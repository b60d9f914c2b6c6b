"""
Integration Tests for the end-to-end pipeline and CLI
"""

import json
from pathlib import Path

import pandas as pd
import pytest

from admitprep.core.errors import SchemaError
from admitprep.pipeline.cleaning_report import build_cleaning_report
from admitprep.pipeline.run_pipeline import main, prepare_table, run_pipeline

CONFIG_PATH = Path(__file__).resolve().parent.parent / "configs" / "pipeline_config.json"


# Fixtures

@pytest.fixture
def extract_csv(tmp_path, raw_extract):
    path = tmp_path / "extract.csv"
    raw_extract.to_csv(path, index=False, encoding="utf-8")
    return path


# Pipeline Tests

def test_prepare_table(raw_extract, config):
    df_final, spec = prepare_table(raw_extract, config)

    assert len(df_final) == len(raw_extract)
    assert df_final["zip_3_digit"].tolist()[:3] == ["021", "100", "9"]
    assert spec.target == "admission"
    assert spec.id_columns == ("patient_id",)


def test_run_pipeline_from_csv(extract_csv, config):
    """ZIP is read as text by default, so the leading zero survives"""
    df_final, spec = run_pipeline(str(extract_csv), config)

    assert df_final.loc[0, "zip_3_digit"] == "021"
    assert df_final["race"].isna().tolist() == [False, False, False, False, True]
    assert df_final.loc[4, "ethnicity"] == "Unknown"
    assert len(spec.steps) == 5


def test_na_like_literals_reach_the_output(tmp_path, raw_extract, config):
    """Only configured sentinels become missing; other NA-like text is data"""
    raw = raw_extract.copy()
    raw["Ethnicity"] = ["n/a", "NA", "null", "None", "Hispanic"]
    path = tmp_path / "na_like.csv"
    raw.to_csv(path, index=False, encoding="utf-8")

    df_final, _ = run_pipeline(str(path), config)

    assert df_final["ethnicity"].tolist() == ["n/a", "NA", "null", "None", "Hispanic"]


def test_configured_sentinel_from_csv_is_missing(tmp_path, raw_extract, config):
    raw = raw_extract.copy()
    raw["Ethnicity"] = ["N/A", "Hispanic", "Hispanic", "Not Hispanic", "Not Hispanic"]
    path = tmp_path / "sentinel.csv"
    raw.to_csv(path, index=False, encoding="utf-8")

    df_final, _ = run_pipeline(str(path), config)

    assert df_final["ethnicity"].isna().tolist() == [True, False, False, False, False]


def test_sentinel_in_numeric_column_keeps_numeric_role(tmp_path, raw_extract, config):
    """age with an "unknown" cell is median-imputed and scaled, not one-hot encoded"""
    raw = raw_extract.copy()
    raw["Age"] = ["70", "unknown", "62", "33", "58"]
    path = tmp_path / "age_sentinel.csv"
    raw.to_csv(path, index=False, encoding="utf-8")

    df_final, spec = run_pipeline(str(path), config)
    roles = spec.resolve(df_final)

    assert pd.api.types.is_numeric_dtype(df_final["age"])
    assert df_final["age"].isna().tolist() == [False, True, False, False, False]
    assert "age" in roles["impute-numeric"]
    assert "age" in roles["normalize-numeric"]
    assert "age" not in roles["impute-nominal"]
    assert "zip_3_digit" in roles["impute-nominal"]


def test_run_pipeline_missing_prune_column(extract_csv, config):
    df = pd.read_csv(extract_csv).drop(columns=["BMI Percentile"])

    with pytest.raises(SchemaError):
        prepare_table(df, config)


def test_accented_headers_survive_loading(tmp_path, raw_extract, config):
    raw = raw_extract.rename(columns={"Age": "Âge"})
    path = tmp_path / "accented.csv"
    raw.to_csv(path, index=False, encoding="utf-8")

    df_final, _ = run_pipeline(str(path), config)

    assert df_final["age"].tolist() == raw_extract["Age"].tolist()


def test_missing_input_file(tmp_path, config):
    with pytest.raises(FileNotFoundError):
        run_pipeline(str(tmp_path / "nope.csv"), config)


# Report Tests

def test_cleaning_report(raw_extract, config):
    df_final, _ = prepare_table(raw_extract, config)

    report = build_cleaning_report(df_final)

    assert list(report["feature"]) == list(df_final.columns)
    row = report.set_index("feature").loc["bmi"]
    assert row["role"] == "feature"
    assert row["domain"] == "vitals"
    assert row["clip_bounds"] == (15, 60)
    assert report.set_index("feature").loc["sdoh_food_insecurity", "domain"] == "sdoh"
    assert report.set_index("feature").loc["patient_id", "role"] == "id"


# CLI Tests

def test_main_writes_outputs(tmp_path, extract_csv):
    out_csv = tmp_path / "final.csv"
    spec_json = tmp_path / "spec.json"
    report_csv = tmp_path / "report.csv"

    code = main([
        str(extract_csv),
        "--config", str(CONFIG_PATH),
        "--output", str(out_csv),
        "--spec-json", str(spec_json),
        "--report", str(report_csv),
        "--text-columns", "Zip Code",
    ])

    assert code == 0
    assert len(pd.read_csv(out_csv)) == 5
    payload = json.loads(spec_json.read_text())
    assert [s["name"] for s in payload["steps"]][0] == "impute-numeric"
    assert len(payload["sha256"]) == 64
    assert report_csv.exists()


def test_main_schema_error_exit_code(tmp_path, extract_csv):
    bad_config = tmp_path / "bad.json"
    bad_config.write_text(json.dumps({"prune_columns": ["does_not_exist"]}))

    assert main([str(extract_csv), "--config", str(bad_config)]) == 1
