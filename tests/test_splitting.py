"""
Tests for the stratified split and bootstrap resampling
"""

import math

import numpy as np
import pandas as pd
import pytest

from penguin_report.errors import DegenerateSplitError, EmptyDatasetError
from penguin_report.resampling import bootstraps
from penguin_report.splitting import stratified_split


class TestStratifiedSplit:
    """Test the train/test splitter."""

    def test_sizes_add_up(self, clean_penguins):
        split = stratified_split(clean_penguins, test_size=0.25, seed=1)
        assert len(split.train) + len(split.test) == len(clean_penguins)
        assert len(split.test) == math.ceil(0.25 * len(clean_penguins))

    def test_disjoint_and_complete(self, clean_penguins):
        """Train and test partition the input records."""
        split = stratified_split(clean_penguins, seed=1)
        train_ids = set(split.train['penguin_id'])
        test_ids = set(split.test['penguin_id'])
        assert not train_ids & test_ids, "Train and test overlap"
        assert train_ids | test_ids == set(clean_penguins['penguin_id'])

    def test_class_balance_preserved(self):
        """Each class keeps its share on both sides, within rounding."""
        df = pd.DataFrame({
            'x': np.arange(200),
            'sex': ['male'] * 140 + ['female'] * 60,
        })
        split = stratified_split(df, test_size=0.25, seed=7)
        for part in (split.train, split.test):
            share = (part['sex'] == 'male').mean()
            assert abs(share - 0.7) <= 1.0 / len(part), f"Share {share} drifted from 0.7"

    def test_same_seed_same_split(self, clean_penguins):
        first = stratified_split(clean_penguins, seed=42)
        second = stratified_split(clean_penguins, seed=42)
        pd.testing.assert_frame_equal(first.train, second.train)
        pd.testing.assert_frame_equal(first.test, second.test)

    def test_different_seed_different_split(self, clean_penguins):
        first = stratified_split(clean_penguins, seed=1)
        second = stratified_split(clean_penguins, seed=2)
        assert set(first.test['penguin_id']) != set(second.test['penguin_id'])

    def test_single_class_raises(self, clean_penguins):
        df = clean_penguins.assign(sex='female')
        with pytest.raises(DegenerateSplitError, match="1 class"):
            stratified_split(df)

    def test_tiny_class_raises(self):
        df = pd.DataFrame({'x': range(10), 'sex': ['male'] * 9 + ['female']})
        with pytest.raises(DegenerateSplitError, match="fewer than 2"):
            stratified_split(df)

    def test_test_side_too_small(self):
        df = pd.DataFrame({'x': range(8), 'sex': ['male', 'female'] * 4})
        with pytest.raises(DegenerateSplitError):
            stratified_split(df, test_size=0.1)

    def test_empty_raises(self, clean_penguins):
        with pytest.raises(EmptyDatasetError):
            stratified_split(clean_penguins.iloc[0:0])


class TestBootstraps:
    """Test the bootstrap resampler."""

    def test_count_and_size(self, clean_penguins):
        samples = bootstraps(clean_penguins, n_samples=5, seed=3)
        assert len(samples) == 5
        for sample in samples:
            assert sample.n_records == len(clean_penguins)
            assert len(sample.analysis(clean_penguins)) == len(clean_penguins)

    def test_labels(self, clean_penguins):
        samples = bootstraps(clean_penguins, n_samples=3, seed=3)
        assert [s.label for s in samples] == ['Bootstrap01', 'Bootstrap02', 'Bootstrap03']

    def test_reproducible(self, clean_penguins):
        first = bootstraps(clean_penguins, n_samples=4, seed=11)
        second = bootstraps(clean_penguins, n_samples=4, seed=11)
        for a, b in zip(first, second):
            np.testing.assert_array_equal(a.in_bag, b.in_bag)
            np.testing.assert_array_equal(a.out_of_bag, b.out_of_bag)

    def test_samples_differ(self, clean_penguins):
        first, second = bootstraps(clean_penguins, n_samples=2, seed=11)
        assert not np.array_equal(first.in_bag, second.in_bag)

    def test_out_of_bag_is_complement(self, clean_penguins):
        """Distinct in-bag rows and out-of-bag rows partition the training set."""
        for sample in bootstraps(clean_penguins, n_samples=5, seed=5):
            drawn = set(sample.in_bag.tolist())
            oob = set(sample.out_of_bag.tolist())
            assert not drawn & oob
            assert drawn | oob == set(range(len(clean_penguins)))

    def test_assessment_rows(self, clean_penguins):
        sample = bootstraps(clean_penguins, n_samples=1, seed=5)[0]
        oob = sample.assessment(clean_penguins)
        drawn_ids = set(sample.analysis(clean_penguins)['penguin_id'])
        assert not set(oob['penguin_id']) & drawn_ids

    def test_oob_fraction_near_one_over_e(self):
        df = pd.DataFrame({'x': np.arange(5000)})
        fractions = [s.oob_fraction for s in bootstraps(df, n_samples=10, seed=0)]
        assert abs(np.mean(fractions) - math.exp(-1)) < 0.01

    def test_empty_raises(self, clean_penguins):
        with pytest.raises(EmptyDatasetError):
            bootstraps(clean_penguins.iloc[0:0], n_samples=2)

    def test_non_positive_count(self, clean_penguins):
        with pytest.raises(ValueError):
            bootstraps(clean_penguins, n_samples=0)
