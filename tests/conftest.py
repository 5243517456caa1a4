"""
Shared fixtures: synthetic penguin tables.
"""

import numpy as np
import pandas as pd
import pytest

SPECIES = ['Adelie', 'Chinstrap', 'Gentoo']


def make_penguins(n_per_species=60, seed=0, male_mass_shift=2000.0, n_unsexed=6):
    """Penguin-shaped frame where body mass alone separates the sexes."""
    rng = np.random.default_rng(seed)
    frames = []
    for species in SPECIES:
        male = np.arange(n_per_species) % 2 == 0
        frames.append(pd.DataFrame({
            'species': species,
            'island': rng.choice(['Biscoe', 'Dream', 'Torgersen'], size=n_per_species),
            'bill_length_mm': rng.normal(44.0, 5.0, size=n_per_species),
            'bill_depth_mm': rng.normal(17.0, 2.0, size=n_per_species),
            'flipper_length_mm': rng.normal(200.0, 14.0, size=n_per_species),
            'body_mass_g': rng.normal(3500.0, 100.0, size=n_per_species) + male * male_mass_shift,
            'sex': np.where(male, 'male', 'female').astype(object),
            'year': rng.choice([2007, 2008, 2009], size=n_per_species),
        }))
    df = pd.concat(frames, ignore_index=True)
    df.insert(0, 'penguin_id', np.arange(len(df)))
    if n_unsexed:
        df.loc[rng.choice(len(df), size=n_unsexed, replace=False), 'sex'] = np.nan
    return df


@pytest.fixture
def penguins():
    return make_penguins()


@pytest.fixture
def clean_penguins(penguins):
    """Penguins with a known sex and without island/year."""
    return penguins.dropna(subset=['sex']).drop(columns=['island', 'year']).reset_index(drop=True)


@pytest.fixture
def penguins_csv(tmp_path, penguins):
    path = tmp_path / 'penguins.csv'
    penguins.to_csv(path, index=False)
    return path
