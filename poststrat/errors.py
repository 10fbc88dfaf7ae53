"""
Errors and warnings raised while post-stratifying a survey.

Per-record exclusions (invalid gender, missing age, missing outcome) are not
errors: records are dropped silently and only counted. Dataset-level problems
always propagate to the caller.
"""

from __future__ import annotations

from typing import Iterable


class PostStratificationError(Exception):
    """Base class for dataset-level reweighting failures."""
    pass


class EmptyPopulationError(PostStratificationError):
    """Raised when no reference record survives stratum classification."""
    pass


class EmptyFrameError(PostStratificationError):
    """Raised when no survey record is left to weight."""
    pass


class StrataMismatchError(PostStratificationError):
    """Raised when the frame and profile cover different strata."""

    def __init__(self, strata: Iterable[str], message: str | None = None):
        self.strata = sorted(strata)
        if message is None:
            message = f"Strata not covered on both sides: {self.strata}"
        super().__init__(message)


class UncoveredStrataError(StrataMismatchError):
    """Raised when frame respondents fall in strata absent from the profile."""

    def __init__(self, strata: Iterable[str]):
        strata = sorted(strata)
        super().__init__(
            strata,
            f"No population target for strata present in the survey frame: "
            f"{strata}",
        )


class DegenerateStratumWarning(UserWarning):
    """A stratum's target frequency was floored to 1."""
    pass
