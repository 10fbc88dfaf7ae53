"""
Stratum classification.

Maps a respondent's gender and age to a stratum label ``{gender}_{ageband}``.
Age bands are declared as an ordered list of half-open intervals, so every
whole-year age from 13 upwards lands in exactly one band:

    13-17, 18-24, 25-44, 45-64, 65+

Respondents with an unrecognised gender code, a missing or non-numeric age,
or an age below the first band are excluded (classified as ``None``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd

GENDER_CODES = ("female", "male")


@dataclass(frozen=True)
class AgeBracket:
    """Half-open age interval ``[lower, upper)`` with a display label."""

    lower: float
    upper: float
    label: str

    def contains(self, age: float) -> bool:
        return self.lower <= age < self.upper


AGE_BRACKETS = (
    AgeBracket(13, 18, "13-17"),
    AgeBracket(18, 25, "18-24"),
    AgeBracket(25, 45, "25-44"),
    AgeBracket(45, 65, "45-64"),
    AgeBracket(65, np.inf, "65+"),
)


def stratum_label(gender: str, band: str) -> str:
    """Join a gender code and an age band label."""
    return f"{gender}_{band}"


def _parse_age(age) -> Optional[float]:
    if age is None:
        return None
    try:
        value = float(age)
    except (TypeError, ValueError):
        return None
    if np.isnan(value):
        return None
    return value


@dataclass(frozen=True)
class StrataClassifier:
    """
    Gender x age-band classifier.

    Attributes:
        gender_codes: The recognised gender codes; anything else is excluded
        brackets: Ordered, non-overlapping age brackets
    """

    gender_codes: Sequence[str] = GENDER_CODES
    brackets: Sequence[AgeBracket] = AGE_BRACKETS

    def __post_init__(self):
        if len(set(self.gender_codes)) != len(self.gender_codes):
            raise ValueError(f"Duplicate gender codes: {self.gender_codes}")
        for prev, nxt in zip(self.brackets, self.brackets[1:]):
            if prev.upper != nxt.lower:
                raise ValueError(
                    f"Age brackets must be contiguous: "
                    f"{prev.label} ends at {prev.upper}, "
                    f"{nxt.label} starts at {nxt.lower}"
                )

    @property
    def strata(self) -> list[str]:
        """Every stratum label this classifier can produce, in order."""
        return [
            stratum_label(gender, bracket.label)
            for gender in self.gender_codes
            for bracket in self.brackets
        ]

    def age_band(self, age) -> Optional[str]:
        """Return the band label for ``age``, or None if it has none."""
        value = _parse_age(age)
        if value is None:
            return None
        for bracket in self.brackets:
            if bracket.contains(value):
                return bracket.label
        return None

    def classify(self, gender, age) -> Optional[str]:
        """
        Classify a single respondent.

        Args:
            gender: Raw gender value
            age: Raw age value (int, float, numeric string or missing)

        Returns:
            Stratum label, or None if the respondent is excluded
        """
        matched = [code for code in self.gender_codes if code == gender]
        if not matched:
            return None
        band = self.age_band(age)
        if band is None:
            return None
        return stratum_label(matched[0], band)

    def assign(
        self,
        df: pd.DataFrame,
        gender_col: str = "gender",
        age_col: str = "age",
    ) -> pd.Series:
        """
        Classify every row of a table.

        Args:
            df: Respondent table
            gender_col: Column holding gender codes
            age_col: Column holding ages

        Returns:
            Series aligned with ``df.index``; excluded rows are NaN
        """
        missing = {gender_col, age_col} - set(df.columns)
        if missing:
            raise ValueError(
                f"Columns required for stratification not in data: {missing}"
            )

        gender = df[gender_col]
        ages = pd.to_numeric(df[age_col], errors="coerce")

        # Labels come from the configured codes, not the column dtype
        result = pd.Series(np.nan, index=df.index, dtype=object, name="stratum")
        for code in self.gender_codes:
            is_code = gender == code
            for bracket in self.brackets:
                mask = is_code & (ages >= bracket.lower) & (ages < bracket.upper)
                if mask.any():
                    result[mask] = stratum_label(code, bracket.label)

        return result
