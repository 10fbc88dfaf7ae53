"""
Post-stratification weighting.

Each stratum ``h`` with population share ``p_h`` gets an integer target
frequency

    F_h = max(round(p_h * n), 1)   if p_h > 0, else 0

where ``n`` is the frame size, and every respondent in the stratum gets the
same weight ``F_h / n_h``.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field

import numpy as np

from ..errors import DegenerateStratumWarning, EmptyFrameError, StrataMismatchError
from ..frame import WeightedFrame, check_coverage
from ..profile import PopulationProfile


def target_frequency(proportion: float, n: int) -> int:
    """
    Integer target count for a stratum.

    Rounds half to even (Python ``round``). Positive shares never get a zero
    target, so a stratum whose expected count rounds to 0 is floored to 1.
    """
    if proportion <= 0:
        return 0
    return max(int(round(proportion * n)), 1)


@dataclass
class PostStratificationResult:
    """Weighted frame plus the per-stratum quantities behind it."""

    frame: WeightedFrame
    target_frequencies: dict[str, int]
    stratum_counts: dict[str, int]
    stratum_weights: dict[str, float]
    degenerate_strata: list[str] = field(default_factory=list)
    unmatched_strata: list[str] = field(default_factory=list)
    missing_strata: list[str] = field(default_factory=list)


@dataclass
class PostStratificationWeighter:
    """
    Single-stage post-stratification weighter.

    Attributes:
        allow_partial: Tolerate strata present on only one side. Frame
            strata without a population target keep ``fallback_weight``;
            profile strata with no respondents contribute nothing.
        fallback_weight: Weight for respondents in unmatched strata
    """

    allow_partial: bool = False
    fallback_weight: float = 1.0

    def run(
        self,
        frame: WeightedFrame,
        profile: PopulationProfile,
    ) -> PostStratificationResult:
        """
        Compute post-stratification weights.

        Args:
            frame: Survey frame to weight
            profile: Population target proportions

        Returns:
            PostStratificationResult holding a new WeightedFrame

        Raises:
            EmptyFrameError: If the frame has no respondents
            UncoveredStrataError: Frame strata without a target (strict mode)
            StrataMismatchError: Profile strata without respondents (strict mode)
        """
        if frame.n == 0:
            raise EmptyFrameError(
                f"No respondents left to weight "
                f"({frame.n_dropped:,} records dropped as incomplete)"
            )

        counts = frame.stratum_counts()
        frame_strata = set(counts.index)
        unmatched = sorted(frame_strata - set(profile.strata))
        missing = sorted(set(profile.strata) - frame_strata)

        if not self.allow_partial:
            check_coverage(frame, profile)
            if missing:
                raise StrataMismatchError(
                    missing,
                    f"Population strata with no respondents in the survey "
                    f"frame: {missing}",
                )

        n = frame.n
        targets: dict[str, int] = {}
        stratum_weights: dict[str, float] = {}
        degenerate: list[str] = []

        for stratum in profile.strata:
            proportion = profile[stratum]
            targets[stratum] = target_frequency(proportion, n)
            if proportion > 0 and round(proportion * n) == 0:
                degenerate.append(stratum)

            n_h = int(counts.get(stratum, 0))
            if n_h > 0:
                stratum_weights[stratum] = targets[stratum] / n_h

        for stratum in unmatched:
            stratum_weights[stratum] = self.fallback_weight

        if degenerate:
            warnings.warn(
                f"Target frequency floored to 1 for strata {degenerate} "
                f"(n={n})",
                DegenerateStratumWarning,
                stacklevel=2,
            )

        weights = frame.data["stratum"].map(stratum_weights).to_numpy(dtype=float)
        if np.isnan(weights).any():
            unweighted = sorted(frame.strata - set(stratum_weights))
            raise RuntimeError(f"No weight assigned to strata: {unweighted}")

        return PostStratificationResult(
            frame=frame.with_weights(weights),
            target_frequencies=targets,
            stratum_counts={str(k): int(v) for k, v in counts.items()},
            stratum_weights=stratum_weights,
            degenerate_strata=degenerate,
            unmatched_strata=unmatched,
            missing_strata=missing,
        )

    def weight(
        self,
        frame: WeightedFrame,
        profile: PopulationProfile,
    ) -> WeightedFrame:
        """Return a new frame with post-stratification weights."""
        return self.run(frame, profile).frame
