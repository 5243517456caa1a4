"""Stratified train/test split."""
from dataclasses import dataclass
import math

import pandas as pd
from sklearn.model_selection import train_test_split

from .config import RANDOM_STATE, TARGET, TEST_SIZE
from .data import require_columns
from .errors import DegenerateSplitError, EmptyDatasetError


@dataclass(frozen=True)
class Split:
    """Disjoint train/test frames carved out of one preprocessed dataset."""

    train: pd.DataFrame
    test: pd.DataFrame

    @property
    def sizes(self):
        return len(self.train), len(self.test)


def check_stratifiable(y: pd.Series, test_size: float) -> None:
    """Fail fast when ``y`` cannot be split with every class on both sides."""
    counts = y.value_counts()
    if len(counts) < 2:
        raise DegenerateSplitError(
            f"Target '{y.name}' has {len(counts)} class(es); at least 2 are required"
        )
    too_small = counts[counts < 2]
    if not too_small.empty:
        raise DegenerateSplitError(
            f"Class(es) {list(too_small.index)} of '{y.name}' have fewer than 2 records"
        )
    n_test = math.ceil(len(y) * test_size)
    if n_test < len(counts) or len(y) - n_test < len(counts):
        raise DegenerateSplitError(
            f"A {test_size:.2f} split of {len(y)} records cannot hold all "
            f"{len(counts)} classes on both sides"
        )


def stratified_split(
    df: pd.DataFrame,
    target: str = TARGET,
    test_size: float = TEST_SIZE,
    seed: int = RANDOM_STATE,
) -> Split:
    """Split ``df`` into train/test, preserving the class mix of ``target``."""
    require_columns(df, [target], "stratified_split")
    if df.empty:
        raise EmptyDatasetError("stratified_split: dataset is empty")
    check_stratifiable(df[target], test_size)

    train, test = train_test_split(
        df,
        test_size=test_size,
        stratify=df[target],
        shuffle=True,
        random_state=seed,
    )
    return Split(train=train.reset_index(drop=True), test=test.reset_index(drop=True))
