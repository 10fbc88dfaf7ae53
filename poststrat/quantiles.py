"""
Weighted quantile recovery of outcome distributions.

Outcome fields are discrete numeric codes. Evaluating the weighted quantile
function at ``num_points`` evenly spaced levels in [0, 1] and tabulating the
results recovers (approximately) the weighted probability mass of each code.

Quantiles use step-function (inverse CDF) semantics: the quantile at level
``p`` is the smallest value whose cumulative weight share is at least ``p``.
No value between two observed codes is ever produced.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .frame import WeightedFrame

DEFAULT_NUM_POINTS = 201

WEIGHTED = "weighted"
UNWEIGHTED = "unweighted"
REFERENCE = "reference"

OUTPUT_COLUMNS = [
    "outcome_value",
    "estimated_mass",
    "distribution_category",
    "outcome_field",
]


def quantile_levels(num_points: int) -> np.ndarray:
    """Evenly spaced probability levels from 0 to 1 inclusive."""
    if num_points < 2:
        raise ValueError(f"num_points must be at least 2, got {num_points}")
    return np.linspace(0.0, 1.0, num_points)


def weighted_quantile(values, weights, probs) -> np.ndarray:
    """
    Step-function weighted quantiles.

    Args:
        values: Observations (n,)
        weights: Non-negative probability mass of each observation (n,)
        probs: Levels in [0, 1]

    Returns:
        Array of observed values, one per level

    Raises:
        ValueError: On misaligned input, negative weights, zero total weight
            or levels outside [0, 1]
    """
    values = np.asarray(values)
    weights = np.asarray(weights, dtype=float)
    probs = np.atleast_1d(np.asarray(probs, dtype=float))

    if values.shape != weights.shape or values.ndim != 1:
        raise ValueError(
            f"values and weights must be aligned 1d arrays, "
            f"got {values.shape} and {weights.shape}"
        )
    if (weights < 0).any():
        raise ValueError("Weights must be non-negative")
    if ((probs < 0) | (probs > 1)).any():
        raise ValueError("Quantile levels must lie in [0, 1]")

    # Zero-mass observations can never be a quantile
    positive = weights > 0
    if not positive.any():
        raise ValueError("Weighted quantile requires positive total weight")
    values = values[positive]
    weights = weights[positive]

    order = np.argsort(values, kind="stable")
    values = values[order]
    cumulative = np.cumsum(weights[order])
    cumulative /= cumulative[-1]

    idx = np.searchsorted(cumulative, probs, side="left")
    idx = np.minimum(idx, len(values) - 1)
    return values[idx]


def weighted_mean(values, weights) -> float:
    """Weighted arithmetic mean."""
    values = np.asarray(values, dtype=float)
    weights = np.asarray(weights, dtype=float)
    total = weights.sum()
    if total <= 0:
        raise ValueError("Weighted mean requires positive total weight")
    return float(np.dot(values, weights) / total)


@dataclass
class QuantileTable:
    """
    Estimated distribution of one outcome field.

    Attributes:
        outcome_field: Name of the outcome column
        category: Which distribution this is (weighted, unweighted, reference)
        masses: Estimated mass per outcome value, sorted by value, sums to 1
    """

    outcome_field: str
    category: str
    masses: pd.Series

    def mean(self) -> float:
        """Expected outcome code under this distribution."""
        return float(np.dot(self.masses.index.to_numpy(dtype=float), self.masses.to_numpy()))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "outcome_value": self.masses.index.to_numpy(),
            "estimated_mass": self.masses.to_numpy(dtype=float),
            "distribution_category": self.category,
            "outcome_field": self.outcome_field,
        }, columns=OUTPUT_COLUMNS)


def _empirical_masses(values: pd.Series) -> pd.Series:
    masses = values.value_counts(normalize=True).sort_index()
    masses.index.name = "outcome_value"
    masses.name = "estimated_mass"
    return masses


@dataclass
class WeightedQuantileEstimator:
    """
    Recover weighted outcome distributions from the quantile function.

    Attributes:
        num_points: Number of evenly spaced levels in [0, 1]
            (201 gives a step of 0.005)
    """

    num_points: int = DEFAULT_NUM_POINTS

    def __post_init__(self):
        if self.num_points < 2:
            raise ValueError(
                f"num_points must be at least 2, got {self.num_points}"
            )

    def estimate(
        self,
        frame: WeightedFrame,
        field: str,
        category: str = WEIGHTED,
    ) -> QuantileTable:
        """
        Weighted distribution of ``field`` in ``frame``.

        Raises:
            ValueError: If ``field`` is not an outcome of the frame or the
                frame is empty
        """
        if field not in frame.outcome_fields:
            raise ValueError(
                f"Unknown outcome field: {field}. "
                f"Frame outcomes: {list(frame.outcome_fields)}"
            )
        if frame.n == 0:
            raise ValueError("Cannot estimate a distribution from an empty frame")

        quantiles = weighted_quantile(
            frame.data[field].to_numpy(),
            frame.weights,
            quantile_levels(self.num_points),
        )
        masses = pd.Series(quantiles).value_counts().sort_index() / self.num_points
        masses.index.name = "outcome_value"
        masses.name = "estimated_mass"
        return QuantileTable(outcome_field=field, category=category, masses=masses)

    def unweighted(
        self,
        data: pd.DataFrame,
        field: str,
        category: str = REFERENCE,
    ) -> QuantileTable:
        """
        Plain empirical distribution of ``field`` in an unweighted table.

        Missing values are dropped.
        """
        if field not in data.columns:
            raise ValueError(f"Outcome field not in data: {field}")
        values = data[field].dropna()
        if values.empty:
            raise ValueError(f"No observed values for {field}")
        return QuantileTable(
            outcome_field=field,
            category=category,
            masses=_empirical_masses(values),
        )

    def compare(
        self,
        frame: WeightedFrame,
        reference: pd.DataFrame,
        fields: Optional[Sequence[str]] = None,
    ) -> pd.DataFrame:
        """
        Side-by-side distributions for each outcome field.

        For every field, stacks the reference survey's unweighted
        distribution, the frame's raw (unweighted) distribution and the
        frame's weighted distribution.

        Returns:
            Long table with columns outcome_value, estimated_mass,
            distribution_category, outcome_field
        """
        if fields is None:
            fields = frame.outcome_fields

        tables = []
        for field in fields:
            tables.append(self.unweighted(reference, field, category=REFERENCE))
            tables.append(self.unweighted(frame.data, field, category=UNWEIGHTED))
            tables.append(self.estimate(frame, field, category=WEIGHTED))

        return pd.concat([t.to_frame() for t in tables], ignore_index=True)
