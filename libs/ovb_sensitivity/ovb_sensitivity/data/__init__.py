"""Example datasets."""

from .darfur import (
    DARFUR_COVARIATES,
    DARFUR_FORMULA,
    DARFUR_OUTCOME,
    DARFUR_TREATMENT,
    DarfurDataLoader,
    load_darfur,
)

__all__ = [
    "DARFUR_COVARIATES",
    "DARFUR_FORMULA",
    "DARFUR_OUTCOME",
    "DARFUR_TREATMENT",
    "DarfurDataLoader",
    "load_darfur",
]
