"""
Weight trimming.

Clips weights into ``[lower, upper]`` to bound the influence of any single
respondent. Weights are NOT renormalised afterwards: the trimmed total can
drift away from the respondent count, and callers relying on population
totals must account for that.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

import numpy as np
import pandas as pd

from ..frame import WeightedFrame


@dataclass(frozen=True)
class WeightSummary:
    """Distribution of a weight vector."""

    count: int
    total: float
    min: float
    q1: float
    median: float
    mean: float
    q3: float
    max: float

    def to_dict(self) -> dict:
        return asdict(self)

    def to_series(self) -> pd.Series:
        return pd.Series(self.to_dict(), name="weight")


def summarize_weights(weights) -> WeightSummary:
    """
    Summarise weights (quartiles by linear interpolation).

    Raises:
        ValueError: If ``weights`` is empty
    """
    w = np.asarray(weights, dtype=float)
    if w.size == 0:
        raise ValueError("Cannot summarise an empty weight vector")

    q1, median, q3 = np.percentile(w, [25, 50, 75])
    return WeightSummary(
        count=int(w.size),
        total=float(w.sum()),
        min=float(w.min()),
        q1=float(q1),
        median=float(median),
        mean=float(w.mean()),
        q3=float(q3),
        max=float(w.max()),
    )


@dataclass
class TrimResult:
    """Trimmed frame and the weight distribution before and after."""

    frame: WeightedFrame
    before: WeightSummary
    after: WeightSummary
    n_raised: int
    n_lowered: int

    @property
    def n_trimmed(self) -> int:
        return self.n_raised + self.n_lowered


@dataclass
class WeightTrimmer:
    """
    Clip weights into a closed range.

    Attributes:
        lower: Weights below this are raised to it (0 < lower < 1)
        upper: Weights above this are lowered to it (upper > 1)
    """

    lower: float = 0.3
    upper: float = 5.0

    def __post_init__(self):
        if not 0 < self.lower < 1 < self.upper:
            raise ValueError(
                f"Trim bounds must satisfy 0 < lower < 1 < upper, "
                f"got lower={self.lower}, upper={self.upper}"
            )

    def run(self, frame: WeightedFrame) -> TrimResult:
        """
        Trim weights and report their distribution before and after.

        Deterministic and idempotent: trimming an already trimmed frame with
        the same bounds returns identical weights.
        """
        weights = frame.weights
        trimmed = np.clip(weights, self.lower, self.upper)

        return TrimResult(
            frame=frame.with_weights(trimmed),
            before=summarize_weights(weights),
            after=summarize_weights(trimmed),
            n_raised=int((weights < self.lower).sum()),
            n_lowered=int((weights > self.upper).sum()),
        )

    def trim(self, frame: WeightedFrame) -> WeightedFrame:
        """Return a new frame with trimmed weights."""
        return self.run(frame).frame
