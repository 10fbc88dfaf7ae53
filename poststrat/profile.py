"""
Population target proportions.

Builds the stratum composition of the reference survey. The resulting
profile is immutable and only lists strata observed at least once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

import numpy as np
import pandas as pd

from .errors import EmptyPopulationError
from .strata import StrataClassifier

PROPORTION_TOLERANCE = 1e-9


@dataclass(frozen=True)
class PopulationProfile:
    """
    Stratum -> proportion mapping of a reference population.

    Attributes:
        proportions: Read-only mapping of stratum label to share (sums to 1)
        counts: Read-only mapping of stratum label to observed count, empty
            when the profile was built from proportions directly
    """

    proportions: Mapping[str, float]
    counts: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(
            self, "proportions", MappingProxyType(dict(self.proportions))
        )
        object.__setattr__(self, "counts", MappingProxyType(dict(self.counts)))

    @classmethod
    def from_proportions(cls, proportions: Mapping[str, float]) -> "PopulationProfile":
        """
        Build a profile from known shares, e.g. published census margins.

        Zero shares are dropped. Raises ValueError if any share is negative
        or the shares do not sum to 1.
        """
        shares = {k: float(v) for k, v in proportions.items()}
        negative = [k for k, v in shares.items() if v < 0]
        if negative:
            raise ValueError(f"Negative population proportions: {negative}")
        total = sum(shares.values())
        if abs(total - 1.0) > 1e-6:
            raise ValueError(
                f"Population proportions must sum to 1, got {total:.6f}"
            )
        return cls(proportions={k: v for k, v in shares.items() if v > 0})

    @property
    def strata(self) -> list[str]:
        return sorted(self.proportions)

    @property
    def total(self) -> int:
        """Number of reference records the profile was built from."""
        return int(sum(self.counts.values()))

    def __getitem__(self, stratum: str) -> float:
        return self.proportions[stratum]

    def __contains__(self, stratum: object) -> bool:
        return stratum in self.proportions

    def __len__(self) -> int:
        return len(self.proportions)

    def to_series(self) -> pd.Series:
        series = pd.Series(dict(self.proportions), name="proportion", dtype=float)
        series.index.name = "stratum"
        return series.sort_index()


def build_population_profile(
    reference: pd.DataFrame,
    classifier: Optional[StrataClassifier] = None,
    gender_col: str = "gender",
    age_col: str = "age",
) -> PopulationProfile:
    """
    Compute target stratum proportions from a reference survey.

    Args:
        reference: Reference respondent table (survey A)
        classifier: Stratum classifier (default gender x age bands)
        gender_col: Column holding gender codes
        age_col: Column holding ages

    Returns:
        PopulationProfile over the strata observed in ``reference``

    Raises:
        EmptyPopulationError: If no record can be classified
    """
    if classifier is None:
        classifier = StrataClassifier()

    strata = classifier.assign(reference, gender_col=gender_col, age_col=age_col)
    counts = strata.dropna().value_counts()

    total = int(counts.sum())
    if total == 0:
        raise EmptyPopulationError(
            f"No classifiable records in reference data "
            f"({len(reference):,} rows before filtering)"
        )

    proportions = counts / total
    if not np.isclose(proportions.sum(), 1.0, atol=PROPORTION_TOLERANCE):
        raise RuntimeError(
            f"Stratum proportions sum to {proportions.sum():.12f}, expected 1"
        )

    return PopulationProfile(
        proportions={str(k): float(v) for k, v in proportions.items()},
        counts={str(k): int(v) for k, v in counts.items()},
    )
