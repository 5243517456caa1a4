"""Row and column cleanup ahead of splitting."""
from typing import Sequence

import pandas as pd

from .config import DROP_COLUMNS, TARGET
from .data import require_columns


def preprocess(
    df: pd.DataFrame,
    target: str = TARGET,
    drop_columns: Sequence[str] = DROP_COLUMNS,
) -> pd.DataFrame:
    """Drop rows with a missing target and remove ``drop_columns``.

    Returns a new frame with a fresh RangeIndex; the input is left untouched.
    """
    require_columns(df, [target, *drop_columns], "preprocess")
    cleaned = df.loc[df[target].notna()].drop(columns=list(drop_columns))
    return cleaned.reset_index(drop=True)
