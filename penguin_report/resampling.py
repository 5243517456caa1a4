"""Bootstrap resampling of the training set for internal validation."""
from dataclasses import dataclass
from typing import List

import numpy as np
import pandas as pd

from .config import N_BOOTSTRAPS, RANDOM_STATE
from .errors import EmptyDatasetError


@dataclass(frozen=True)
class BootstrapSample:
    """One draw with replacement plus its out-of-bag complement.

    Indices are positional (``iloc``) into the frame the sample was drawn from.
    """

    sample_id: int
    in_bag: np.ndarray
    out_of_bag: np.ndarray

    @property
    def label(self) -> str:
        return f"Bootstrap{self.sample_id:02d}"

    @property
    def n_records(self) -> int:
        return len(self.in_bag)

    @property
    def oob_fraction(self) -> float:
        return len(self.out_of_bag) / len(self.in_bag)

    def analysis(self, df: pd.DataFrame) -> pd.DataFrame:
        """Rows drawn into the bag (duplicates included)."""
        return df.iloc[self.in_bag].reset_index(drop=True)

    def assessment(self, df: pd.DataFrame) -> pd.DataFrame:
        """Rows never drawn; the validation set for this sample."""
        return df.iloc[self.out_of_bag].reset_index(drop=True)


def bootstraps(
    df: pd.DataFrame,
    n_samples: int = N_BOOTSTRAPS,
    seed: int = RANDOM_STATE,
) -> List[BootstrapSample]:
    """Draw ``n_samples`` independent bootstrap samples of ``df``."""
    n = len(df)
    if n == 0:
        raise EmptyDatasetError("bootstraps: dataset is empty")
    if n_samples < 1:
        raise ValueError(f"n_samples must be positive, got {n_samples}")

    rng = np.random.default_rng(seed)
    samples = []
    for sample_id in range(1, n_samples + 1):
        in_bag = rng.integers(0, n, size=n)
        out_of_bag = np.setdiff1d(np.arange(n), in_bag)
        samples.append(BootstrapSample(sample_id, in_bag, out_of_bag))
    return samples
