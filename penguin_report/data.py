"""Data loader for the penguins measurements table."""
from pathlib import Path
from typing import Iterable, Union

import pandas as pd

from .errors import DataUnavailableError, SchemaMismatchError

REQUIRED_COLUMNS = (
    "species",
    "island",
    "bill_length_mm",
    "bill_depth_mm",
    "flipper_length_mm",
    "body_mass_g",
    "sex",
    "year",
)


def require_columns(df: pd.DataFrame, columns: Iterable[str], stage: str) -> None:
    """Raise SchemaMismatchError naming every column ``stage`` needs but lacks."""
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise SchemaMismatchError(f"{stage}: missing column(s) {missing}")


def load_dataset(path: Union[str, Path]) -> pd.DataFrame:
    """Read the dataset CSV and return it unmodified."""
    path = Path(path)
    if not path.is_file():
        raise DataUnavailableError(f"Dataset not found: {path}")

    try:
        df = pd.read_csv(path)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise DataUnavailableError(f"Could not read dataset {path}: {e}") from e

    if df.empty:
        raise DataUnavailableError(f"Dataset {path} has no rows")
    require_columns(df, REQUIRED_COLUMNS, "load_dataset")
    return df


def require_complete(df: pd.DataFrame, columns: Iterable[str], stage: str) -> None:
    """Raise SchemaMismatchError naming every column in ``columns`` holding nulls."""
    columns = list(columns)
    counts = df[columns].isna().sum()
    incomplete = counts[counts > 0]
    if not incomplete.empty:
        detail = ", ".join(f"{col} ({n})" for col, n in incomplete.items())
        raise SchemaMismatchError(f"{stage}: missing values in {detail}")
