# admitprep/pipeline/run_pipeline.py

import argparse
import json
import logging
import sys
from typing import Optional, Tuple

import pandas as pd

from admitprep.core.config import PipelineConfig, load_config
from admitprep.core.errors import SchemaError
from admitprep.core.spec import PreprocessingSpec
from admitprep.pipeline.assembly import assemble_dataset
from admitprep.pipeline.cleaning_report import build_cleaning_report, export_cleaning_report
from admitprep.pipeline.features import engineer_features
from admitprep.pipeline.loader import load_table
from admitprep.pipeline.normalizer import normalize_table
from admitprep.pipeline.preprocessing import build_preprocessing_spec
from admitprep.pipeline.pruning import prune_columns
from admitprep.pipeline.registry_utils import hash_spec

logger = logging.getLogger(__name__)


def prepare_table(
    df_raw: pd.DataFrame,
    config: PipelineConfig,
) -> Tuple[pd.DataFrame, PreprocessingSpec]:
    """Stages 2-6 on an already loaded table."""
    # ---------------------
    # Normalize + prune
    # ---------------------
    df = normalize_table(df_raw, config.sentinels)
    df = prune_columns(df, config.prune_columns)

    # ---------------------
    # Feature engine
    # ---------------------
    df = engineer_features(df, config)

    # ---------------------
    # Assemble + recipe
    # ---------------------
    df_final = assemble_dataset(df, config)
    spec = build_preprocessing_spec(
        df_final,
        target=config.target_col,
        id_columns=config.id_columns,
    )
    return df_final, spec


def run_pipeline(
    input_path: str,
    config: Optional[PipelineConfig] = None,
    *,
    dtype=None,
) -> Tuple[pd.DataFrame, PreprocessingSpec]:
    """Load -> normalize -> prune -> features -> assemble -> spec."""
    config = config or PipelineConfig()
    df_raw = load_table(
        input_path,
        encoding=config.encoding,
        text_columns=config.text_columns,
        dtype=dtype,
    )
    return prepare_table(df_raw, config)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Clean and feature-engineer a healthcare extract for admission-risk modeling"
    )
    parser.add_argument("input", help="Comma-separated input extract")
    parser.add_argument("--config", default=None, help="Pipeline config JSON")
    parser.add_argument("--output", default=None, help="Write assembled table to this CSV")
    parser.add_argument("--spec-json", default=None, help="Write PreprocessingSpec JSON here")
    parser.add_argument("--report", default=None, help="Write column audit report CSV here")
    parser.add_argument(
        "--text-columns",
        nargs="*",
        default=[],
        help="Extra raw column names to read as text (zip_code is read as text by default)",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    config = load_config(args.config)
    dtype = {c: str for c in args.text_columns} or None

    try:
        df_final, spec = run_pipeline(args.input, config, dtype=dtype)
    except SchemaError as e:
        logger.error(f"Schema error: {e}")
        return 1

    # ---------------------
    # Export
    # ---------------------
    if args.output:
        df_final.to_csv(args.output, index=False)
        logger.info(f"Saved assembled table to {args.output}")

    if args.spec_json:
        with open(args.spec_json, "w", encoding="utf-8") as f:
            json.dump(
                {"sha256": hash_spec(spec), **spec.to_dict()},
                f,
                indent=2,
            )
        logger.info(f"Saved PreprocessingSpec to {args.spec_json}")

    if args.report:
        report = build_cleaning_report(df_final, sdoh_prefix=config.sdoh_prefix)
        export_cleaning_report(report, args.report)
        logger.info(f"Saved cleaning report to {args.report}")

    logger.info("Pipeline completed successfully.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
