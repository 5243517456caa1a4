"""
Tests for loading and preprocessing the penguins table
"""

import pandas as pd
import pytest

from penguin_report.data import REQUIRED_COLUMNS, load_dataset
from penguin_report.errors import DataUnavailableError, SchemaMismatchError
from penguin_report.preprocessing import preprocess


class TestLoadDataset:
    """Test the data loader."""

    def test_loads_unmodified(self, penguins_csv, penguins):
        """Loaded frame matches the file contents."""
        df = load_dataset(penguins_csv)
        assert len(df) == len(penguins)
        assert list(df.columns) == list(penguins.columns)
        assert df['sex'].isna().sum() == penguins['sex'].isna().sum()

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataUnavailableError, match="not found"):
            load_dataset(tmp_path / 'nope.csv')

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'empty.csv'
        path.write_text('')
        with pytest.raises(DataUnavailableError):
            load_dataset(path)

    def test_header_only(self, tmp_path):
        path = tmp_path / 'header.csv'
        path.write_text(','.join(REQUIRED_COLUMNS) + '\n')
        with pytest.raises(DataUnavailableError, match="no rows"):
            load_dataset(path)

    def test_missing_column(self, tmp_path, penguins):
        """A schema without body mass is rejected."""
        path = tmp_path / 'partial.csv'
        penguins.drop(columns=['body_mass_g']).to_csv(path, index=False)
        with pytest.raises(SchemaMismatchError, match="body_mass_g"):
            load_dataset(path)


class TestPreprocess:
    """Test row/column cleanup."""

    def test_no_null_target(self, penguins):
        out = preprocess(penguins)
        assert out['sex'].notna().all(), "Null targets survived preprocessing"
        assert len(out) == penguins['sex'].notna().sum()

    def test_schema_minus_dropped(self, penguins):
        out = preprocess(penguins)
        expected = [c for c in penguins.columns if c not in ('island', 'year')]
        assert list(out.columns) == expected

    def test_input_untouched(self, penguins):
        before = penguins.copy()
        preprocess(penguins)
        pd.testing.assert_frame_equal(penguins, before)

    def test_deterministic(self, penguins):
        pd.testing.assert_frame_equal(preprocess(penguins), preprocess(penguins))

    def test_fresh_index(self, penguins):
        out = preprocess(penguins)
        assert list(out.index) == list(range(len(out)))

    def test_custom_columns(self, penguins):
        out = preprocess(penguins, target='sex', drop_columns=['year'])
        assert 'island' in out.columns
        assert 'year' not in out.columns

    def test_missing_target_column(self, penguins):
        with pytest.raises(SchemaMismatchError, match="sex"):
            preprocess(penguins.drop(columns=['sex']))

    def test_missing_drop_column(self, penguins):
        with pytest.raises(SchemaMismatchError, match="island"):
            preprocess(penguins.drop(columns=['island']))
