"""Shared test fixtures for the sensitivity analysis library.

The Darfur-like data mimic the structure of the running example of
Cinelli & Hazlett (2020): a binary treatment, a pro-peace outcome index,
a gender benchmark and village fixed effects.
"""

import os

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from ovb_sensitivity.core.regression import OLSRegression
from ovb_sensitivity.data import DARFUR_FORMULA
from shared.config import reset_config


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Isolate every test from OVB_* environment variables and cached config."""
    for name in list(os.environ):
        if name.upper().startswith("OVB_"):
            monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def close_figures():
    """Close matplotlib figures created by a test."""
    yield
    plt.close("all")


@pytest.fixture
def random_state():
    """Provide a consistent random state for reproducible tests."""
    return 42


@pytest.fixture
def darfur_like_data(random_state):
    """Synthetic data with the columns of the Darfur example."""
    rng = np.random.default_rng(random_state)
    n = 800
    n_villages = 20

    village = rng.integers(0, n_villages, n)
    village_effect = rng.normal(0, 0.3, n_villages)[village]
    female = rng.binomial(1, 0.45, n)
    age = rng.integers(18, 80, n)
    farmer_dar = rng.binomial(1, 0.5, n)
    herder_dar = rng.binomial(1, 0.2, n)
    pastvoted = rng.binomial(1, 0.6, n)
    hhsize_darfur = rng.integers(1, 15, n)

    p_harmed = np.clip(0.4 - 0.2 * female + 0.3 * village_effect, 0.05, 0.95)
    directlyharmed = rng.binomial(1, p_harmed)
    peacefactor = (
        0.1 * directlyharmed
        - 0.2 * female
        + 0.002 * age
        + 0.05 * farmer_dar
        + village_effect
        + rng.normal(0, 0.3, n)
    )

    return pd.DataFrame(
        {
            "peacefactor": peacefactor,
            "directlyharmed": directlyharmed,
            "age": age,
            "farmer_dar": farmer_dar,
            "herder_dar": herder_dar,
            "pastvoted": pastvoted,
            "hhsize_darfur": hhsize_darfur,
            "female": female,
            "village": [f"v{i:02d}" for i in village],
        }
    )


@pytest.fixture
def darfur_model(darfur_like_data):
    """Outcome regression of the Darfur example on the synthetic data."""
    return OLSRegression.from_formula(DARFUR_FORMULA, darfur_like_data)


@pytest.fixture
def simple_model(random_state):
    """Small regression without categorical covariates."""
    rng = np.random.default_rng(random_state)
    n = 200
    x1 = rng.normal(0, 1, n)
    x2 = rng.normal(0, 1, n)
    d = 0.5 * x1 + rng.normal(0, 1, n)
    y = 1.0 + 0.8 * d + 0.6 * x1 - 0.3 * x2 + rng.normal(0, 1, n)
    data = pd.DataFrame({"y": y, "d": d, "x1": x1, "x2": x2})
    return OLSRegression.from_formula("y ~ d + x1 + x2", data)


@pytest.fixture
def collinear_model(darfur_like_data):
    """Regression with a duplicated dummy column."""
    data = darfur_like_data.assign(female_copy=darfur_like_data["female"])
    return OLSRegression.from_formula(
        "peacefactor ~ directlyharmed + female + female_copy + age", data
    )
