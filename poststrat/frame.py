"""
Survey frame construction.

Filters the target survey down to respondents that can be weighted: a valid
stratum and a value on every outcome field. Unlike stratification, outcome
completeness is mandatory; nothing is imputed.

Every weighting stage returns a new WeightedFrame snapshot rather than
mutating the previous one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .errors import UncoveredStrataError
from .profile import PopulationProfile
from .strata import StrataClassifier

OUTCOME_FIELDS = (
    "info_seeking",
    "info_giving",
    "opinion_seeking",
    "opinion_giving",
    "joking",
)


@dataclass(frozen=True, eq=False)
class WeightedFrame:
    """
    Filtered respondents with one weight each.

    Attributes:
        data: Table with a ``stratum`` column, the outcome columns and a
            ``weight`` column, indexed by respondent
        outcome_fields: Names of the outcome columns
        n_dropped: Records excluded while building the frame
    """

    data: pd.DataFrame
    outcome_fields: tuple[str, ...] = OUTCOME_FIELDS
    n_dropped: int = 0

    @property
    def n(self) -> int:
        return len(self.data)

    @property
    def weights(self) -> np.ndarray:
        return self.data["weight"].to_numpy(dtype=float, copy=True)

    @property
    def total_weight(self) -> float:
        return float(self.data["weight"].sum())

    @property
    def strata(self) -> set[str]:
        return set(self.data["stratum"].unique())

    def stratum_counts(self) -> pd.Series:
        """Respondent count per stratum."""
        return self.data["stratum"].value_counts().sort_index()

    def with_weights(self, weights) -> "WeightedFrame":
        """Return a new frame carrying ``weights``; this frame is unchanged."""
        weights = np.asarray(weights, dtype=float)
        if weights.shape != (self.n,):
            raise ValueError(
                f"Expected {self.n} weights, got shape {weights.shape}"
            )
        data = self.data.copy()
        data["weight"] = weights
        return WeightedFrame(
            data=data,
            outcome_fields=self.outcome_fields,
            n_dropped=self.n_dropped,
        )


def build_survey_frame(
    target: pd.DataFrame,
    outcome_fields: Sequence[str] = OUTCOME_FIELDS,
    classifier: Optional[StrataClassifier] = None,
    gender_col: str = "gender",
    age_col: str = "age",
) -> WeightedFrame:
    """
    Build the weightable frame from the target survey.

    Args:
        target: Target respondent table (survey B)
        outcome_fields: Outcome columns every retained record must have
        classifier: Stratum classifier (default gender x age bands)
        gender_col: Column holding gender codes
        age_col: Column holding ages

    Returns:
        WeightedFrame with every weight set to 1.0

    Raises:
        ValueError: If an outcome column is not in ``target``
    """
    if classifier is None:
        classifier = StrataClassifier()

    outcome_fields = tuple(outcome_fields)
    missing = set(outcome_fields) - set(target.columns)
    if missing:
        raise ValueError(
            f"Outcome fields not in data: {sorted(missing)}. "
            f"Available: {list(target.columns)}"
        )

    strata = classifier.assign(target, gender_col=gender_col, age_col=age_col)
    keep = strata.notna() & target[list(outcome_fields)].notna().all(axis=1)

    data = target.loc[keep, list(outcome_fields)].copy()
    data.insert(0, "stratum", strata[keep].astype(str))
    data["weight"] = 1.0

    return WeightedFrame(
        data=data,
        outcome_fields=outcome_fields,
        n_dropped=int((~keep).sum()),
    )


def check_coverage(frame: WeightedFrame, profile: PopulationProfile) -> None:
    """
    Ensure every stratum in the frame has a population target.

    Raises:
        UncoveredStrataError: Listing frame strata absent from ``profile``
    """
    uncovered = {s for s in frame.strata if s not in profile}
    if uncovered:
        raise UncoveredStrataError(uncovered)
