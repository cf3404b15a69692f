"""Tests for Darfur dataset utilities."""

import logging

import numpy as np
import pandas as pd
import pytest

from ovb_sensitivity.core.regression import OLSRegression
from ovb_sensitivity.data import (
    DARFUR_COVARIATES,
    DARFUR_FORMULA,
    DARFUR_OUTCOME,
    DARFUR_TREATMENT,
    DarfurDataLoader,
    load_darfur,
)


@pytest.fixture
def darfur_csv(tmp_path, darfur_like_data):
    """Darfur-like CSV with one incomplete row and an extra column."""
    data = darfur_like_data.copy()
    data["wouldvote"] = 1
    data["age"] = data["age"].astype(float)
    data.loc[3, "age"] = np.nan
    path = tmp_path / "darfur.csv"
    data.to_csv(path, index=False)
    return path


class TestDarfurDataLoader:
    """Test cases for the Darfur data loader."""

    def test_initialization_with_path(self, darfur_csv):
        """Test loader initialization with explicit path."""
        loader = DarfurDataLoader(data_path=darfur_csv)
        assert loader.data_path == darfur_csv

    def test_explicit_path_not_found(self, tmp_path):
        """Test that a wrong explicit path is reported."""
        with pytest.raises(FileNotFoundError, match="not found at"):
            DarfurDataLoader(data_path=tmp_path / "missing.csv")

    def test_search_in_data_directory(self, darfur_csv, tmp_path, monkeypatch):
        """Test discovery through the data/ directory of the working directory."""
        (tmp_path / "data").mkdir()
        target = tmp_path / "data" / "darfur.csv"
        darfur_csv.rename(target)
        monkeypatch.chdir(tmp_path)

        assert DarfurDataLoader().data_path.resolve() == target.resolve()

    def test_search_in_configured_directory(self, darfur_csv, tmp_path, monkeypatch):
        """Test discovery through OVB_DATA_DIR."""
        elsewhere = tmp_path / "elsewhere" / "cwd"
        elsewhere.mkdir(parents=True)
        monkeypatch.chdir(elsewhere)
        monkeypatch.setenv("OVB_DATA_DIR", str(tmp_path))

        expected = (tmp_path / "darfur.csv").resolve()
        assert DarfurDataLoader().data_path.resolve() == expected

    def test_file_not_found(self, tmp_path, monkeypatch):
        """Test loader initialization when file is not found."""
        empty = tmp_path / "a" / "b"
        empty.mkdir(parents=True)
        monkeypatch.chdir(empty)

        with pytest.raises(FileNotFoundError, match="OVB_DATA_DIR"):
            DarfurDataLoader()

    def test_load_raw_data(self, darfur_csv):
        """Test that raw data keeps every column and row."""
        raw = DarfurDataLoader(darfur_csv).load_raw_data()

        assert len(raw) == 800
        assert "wouldvote" in raw.columns
        assert raw["age"].isna().sum() == 1

    def test_load_processed_data(self, darfur_csv, caplog):
        """Test column selection and removal of incomplete rows."""
        caplog.set_level(logging.INFO, logger="ovb_sensitivity.data.darfur")
        processed = DarfurDataLoader(darfur_csv).load_processed_data()

        assert list(processed.columns) == [
            DARFUR_OUTCOME,
            DARFUR_TREATMENT,
            *DARFUR_COVARIATES,
        ]
        assert len(processed) == 799
        assert processed.index.equals(pd.RangeIndex(799))
        assert "Excluded 1 observations" in caplog.text

    def test_load_processed_data_missing_columns(self, tmp_path):
        """Test that missing columns are reported."""
        path = tmp_path / "darfur.csv"
        pd.DataFrame({DARFUR_OUTCOME: [0.1], DARFUR_TREATMENT: [1]}).to_csv(
            path, index=False
        )

        with pytest.raises(KeyError, match="female"):
            DarfurDataLoader(path).load_processed_data()

    def test_get_dataset_info(self, darfur_csv):
        """Test the dataset summary."""
        info = DarfurDataLoader(darfur_csv).get_dataset_info()

        assert info["n_observations"] == 800
        assert info["missing_data"]["age"] == 1
        assert set(info["treatment_distribution"]) == {0, 1}
        assert "mean" in info["outcome_statistics"]


class TestLoadDarfur:
    """Test cases for the convenience loader."""

    def test_processed(self, darfur_csv):
        """Test that the processed data fit the standard model."""
        data = load_darfur(darfur_csv)
        model = OLSRegression.from_formula(DARFUR_FORMULA, data)

        assert model.residual_dof() == 799 - len(model.coefficient_names())

    def test_raw(self, darfur_csv):
        """Test the unprocessed variant."""
        assert "wouldvote" in load_darfur(darfur_csv, processed=False).columns
