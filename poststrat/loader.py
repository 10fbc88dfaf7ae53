"""
Survey table loading.

Reads tab-separated survey responses and generates synthetic surveys with the
same schema for testing.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional

import numpy as np
import pandas as pd

from .frame import OUTCOME_FIELDS
from .strata import AGE_BRACKETS, GENDER_CODES

REQUIRED_COLUMNS = ("gender", "age") + OUTCOME_FIELDS

# Oldest age drawn for the open-ended 65+ band
MAX_SYNTHETIC_AGE = 90

# Outcome answers are coded 1 (never) to 5 (very often)
OUTCOME_CODES = (1, 2, 3, 4, 5)


def load_survey(
    path: Path | str,
    sep: str = "\t",
    required_columns=REQUIRED_COLUMNS,
) -> pd.DataFrame:
    """
    Load a survey response table.

    Args:
        path: File to read (tab-separated by default)
        sep: Field delimiter
        required_columns: Columns the file must provide

    Returns:
        DataFrame with one row per respondent

    Raises:
        FileNotFoundError: If ``path`` does not exist
        ValueError: If required columns are missing
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Survey file not found: {path}")

    df = pd.read_csv(path, sep=sep)

    missing = [c for c in required_columns if c not in df.columns]
    if missing:
        raise ValueError(
            f"Required columns not in {path.name}: {missing}. "
            f"Columns: {df.columns.tolist()}"
        )

    return df


def generate_synthetic_survey(
    n_samples: int = 1000,
    seed: Optional[int] = None,
    age_weights: Optional[Mapping[str, float]] = None,
    female_share: float = 0.5,
    missing_rate: float = 0.0,
) -> pd.DataFrame:
    """
    Generate a synthetic survey with the full response schema.

    Outcome answers drift with age (younger respondents joke and seek
    information more often), so surveys with different age mixes have
    visibly different outcome distributions.

    Args:
        n_samples: Number of respondents
        seed: Random seed for reproducibility
        age_weights: Share of respondents per age band label
            (default: equal shares across all bands)
        female_share: Probability a respondent is female
        missing_rate: Probability that each of gender, age and every outcome
            is missing or invalid for a respondent

    Returns:
        DataFrame with gender, age and the outcome columns
    """
    if seed is not None:
        np.random.seed(seed)

    brackets = {b.label: b for b in AGE_BRACKETS}
    if age_weights is None:
        age_weights = {label: 1.0 for label in brackets}
    unknown = set(age_weights) - set(brackets)
    if unknown:
        raise ValueError(f"Unknown age bands: {sorted(unknown)}")

    labels = list(age_weights)
    probs = np.array([age_weights[label] for label in labels], dtype=float)
    probs = probs / probs.sum()

    bands = np.random.choice(labels, size=n_samples, p=probs)
    ages = np.empty(n_samples, dtype=float)
    for label in labels:
        mask = bands == label
        bracket = brackets[label]
        upper = min(bracket.upper, MAX_SYNTHETIC_AGE + 1)
        ages[mask] = np.random.randint(bracket.lower, upper, mask.sum())

    female, male = GENDER_CODES
    gender = np.where(np.random.random(n_samples) < female_share, female, male)
    gender = gender.astype(object)

    # Youngest respondents centre near 4, oldest near 2
    age_effect = (ages - 13) / (MAX_SYNTHETIC_AGE - 13)
    data = {"gender": gender, "age": ages}
    for i, field in enumerate(OUTCOME_FIELDS):
        centre = 4.0 - 2.0 * age_effect + 0.1 * i
        answers = np.rint(np.random.normal(centre, 0.8))
        data[field] = np.clip(answers, OUTCOME_CODES[0], OUTCOME_CODES[-1])

    df = pd.DataFrame(data)

    if missing_rate > 0:
        gender_bad = np.random.random(n_samples) < missing_rate
        df.loc[gender_bad, "gender"] = "unknown"
        for col in ("age",) + OUTCOME_FIELDS:
            df.loc[np.random.random(n_samples) < missing_rate, col] = np.nan

    return df
