# admitprep/core/errors.py

from typing import Iterable


class SchemaError(Exception):
    """
    Input table is incompatible with the pipeline schema.

    Raised when a referenced column is absent or a target column carries
    an unrecognized label. Always fatal for the run.
    """

    def __init__(self, message: str, columns: Iterable[str] = ()):
        self.columns = tuple(columns)
        super().__init__(message)


def require_columns(df, columns: Iterable[str], *, stage: str) -> None:
    """Raise SchemaError if any of `columns` is missing from `df`."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SchemaError(
            f"[{stage}] missing required column(s): {missing}",
            columns=missing,
        )
