"""
Weighting methods.

- PostStratificationWeighter: one weight per gender x age stratum
- WeightTrimmer: clip weights into a bounded range
"""

from .poststratify import (
    PostStratificationResult,
    PostStratificationWeighter,
    target_frequency,
)
from .trimming import TrimResult, WeightSummary, WeightTrimmer, summarize_weights

__all__ = [
    "PostStratificationResult",
    "PostStratificationWeighter",
    "target_frequency",
    "TrimResult",
    "WeightSummary",
    "WeightTrimmer",
    "summarize_weights",
]
