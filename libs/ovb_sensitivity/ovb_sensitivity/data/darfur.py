"""Darfur survey dataset utilities.

The Darfur dataset (Hazlett, 2019) records attitudes towards peace of
individuals in Darfur who were or were not directly harmed by violence in
2003-2004. It is the running example of Cinelli & Hazlett (2020).

Key variables:
- directlyharmed: Treatment (1 = directly harmed by violence)
- peacefactor: Outcome (index of pro-peace attitudes)
- female: Benchmark covariate, gender being the main determinant of
  targeting besides village
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pandas as pd

from shared.config import get_config

logger = logging.getLogger(__name__)

DARFUR_FILENAME = "darfur.csv"
DARFUR_OUTCOME = "peacefactor"
DARFUR_TREATMENT = "directlyharmed"
DARFUR_COVARIATES = [
    "age",
    "farmer_dar",
    "herder_dar",
    "pastvoted",
    "hhsize_darfur",
    "female",
    "village",
]
DARFUR_FORMULA = (
    f"{DARFUR_OUTCOME} ~ {DARFUR_TREATMENT} + " + " + ".join(DARFUR_COVARIATES)
)


class DarfurDataLoader:
    """Loader for the Darfur dataset with column validation."""

    def __init__(self, data_path: str | Path | None = None):
        """Initialize the Darfur data loader.

        Args:
            data_path: Path to the Darfur CSV file. If None, looks in the
                configured ``data_dir`` and then in the current directory
                and its parents.
        """
        self.data_path = self._find_darfur_file(data_path)
        self._raw_data: pd.DataFrame | None = None

    def _find_darfur_file(self, data_path: str | Path | None) -> Path:
        """Find the Darfur dataset file.

        Raises:
            FileNotFoundError: If the file cannot be found
        """
        if data_path:
            path = Path(data_path)
            if path.exists():
                return path
            raise FileNotFoundError(f"Darfur data file not found at: {data_path}")

        search_paths = []
        data_dir = get_config().data_dir
        if data_dir is not None:
            search_paths.append(Path(data_dir) / DARFUR_FILENAME)
        cwd = Path.cwd()
        search_paths += [
            cwd / DARFUR_FILENAME,
            cwd / "data" / DARFUR_FILENAME,
            cwd.parent / DARFUR_FILENAME,
            cwd.parent / "data" / DARFUR_FILENAME,
        ]

        for path in search_paths:
            if path.exists():
                logger.debug(f"Using Darfur data at {path}")
                return path

        raise FileNotFoundError(
            f"Darfur data file '{DARFUR_FILENAME}' not found. Please provide an "
            "explicit path, set OVB_DATA_DIR, or place the file in the current "
            "directory or a parent directory."
        )

    def load_raw_data(self) -> pd.DataFrame:
        """Load the raw dataset with all original columns."""
        if self._raw_data is None:
            self._raw_data = pd.read_csv(self.data_path)
        return self._raw_data.copy()

    def load_processed_data(self, columns: list[str] | None = None) -> pd.DataFrame:
        """Load the columns of the standard model, dropping incomplete rows.

        Args:
            columns: Columns to keep; defaults to outcome, treatment and the
                standard covariates

        Returns:
            DataFrame ready for ``OLSRegression.from_formula``

        Raises:
            KeyError: If any requested column is absent from the file
        """
        if columns is None:
            columns = [DARFUR_OUTCOME, DARFUR_TREATMENT, *DARFUR_COVARIATES]

        df = self.load_raw_data()
        missing_columns = [col for col in columns if col not in df.columns]
        if missing_columns:
            raise KeyError(f"Missing columns in Darfur dataset: {missing_columns}")

        df_subset = df[columns]
        initial_n = len(df_subset)
        df_subset = df_subset.dropna()
        dropped = initial_n - len(df_subset)
        if dropped > 0:
            logger.info(f"Excluded {dropped} observations with missing values")

        return df_subset.reset_index(drop=True)

    def get_dataset_info(self) -> dict[str, Any]:
        """Basic statistics about the dataset."""
        df = self.load_raw_data()
        info: dict[str, Any] = {
            "n_observations": len(df),
            "n_variables": len(df.columns),
            "variables": list(df.columns),
            "missing_data": df.isnull().sum().to_dict(),
        }
        if DARFUR_TREATMENT in df.columns:
            info["treatment_distribution"] = (
                df[DARFUR_TREATMENT].value_counts().to_dict()
            )
        if DARFUR_OUTCOME in df.columns:
            info["outcome_statistics"] = df[DARFUR_OUTCOME].describe().to_dict()
        return info


def load_darfur(
    data_path: str | Path | None = None, processed: bool = True
) -> pd.DataFrame:
    """Convenience function to load the Darfur data.

    Args:
        data_path: Path to the Darfur CSV file
        processed: If True, keep only complete rows of the standard model's
            columns; otherwise return every column

    Returns:
        DataFrame
    """
    loader = DarfurDataLoader(data_path=data_path)
    if processed:
        return loader.load_processed_data()
    return loader.load_raw_data()
