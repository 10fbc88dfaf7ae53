"""
Post-stratification reweighting of survey samples.

Reweights one survey (B) so its gender x age composition matches a reference
survey (A), trims extreme weights, and recovers weighted outcome
distributions for comparison with the reference.

Pipeline stages:
- StrataClassifier: respondent -> stratum label
- build_population_profile: reference survey -> target proportions
- build_survey_frame: target survey -> weightable frame
- PostStratificationWeighter / WeightTrimmer: weights
- WeightedQuantileEstimator: weighted outcome distributions
"""

from .errors import (
    DegenerateStratumWarning,
    EmptyFrameError,
    EmptyPopulationError,
    PostStratificationError,
    StrataMismatchError,
    UncoveredStrataError,
)
from .strata import AGE_BRACKETS, GENDER_CODES, AgeBracket, StrataClassifier
from .profile import PopulationProfile, build_population_profile
from .frame import OUTCOME_FIELDS, WeightedFrame, build_survey_frame, check_coverage
from .methods import (
    PostStratificationResult,
    PostStratificationWeighter,
    TrimResult,
    WeightSummary,
    WeightTrimmer,
    summarize_weights,
    target_frequency,
)
from .quantiles import (
    QuantileTable,
    WeightedQuantileEstimator,
    weighted_mean,
    weighted_quantile,
)
from .config import PipelineConfig
from .loader import generate_synthetic_survey, load_survey
from .pipeline import PipelineResult, run_pipeline

__all__ = [
    # Errors
    "DegenerateStratumWarning",
    "EmptyFrameError",
    "EmptyPopulationError",
    "PostStratificationError",
    "StrataMismatchError",
    "UncoveredStrataError",
    # Strata
    "AGE_BRACKETS",
    "GENDER_CODES",
    "AgeBracket",
    "StrataClassifier",
    # Profile
    "PopulationProfile",
    "build_population_profile",
    # Frame
    "OUTCOME_FIELDS",
    "WeightedFrame",
    "build_survey_frame",
    "check_coverage",
    # Methods
    "PostStratificationResult",
    "PostStratificationWeighter",
    "TrimResult",
    "WeightSummary",
    "WeightTrimmer",
    "summarize_weights",
    "target_frequency",
    # Quantiles
    "QuantileTable",
    "WeightedQuantileEstimator",
    "weighted_mean",
    "weighted_quantile",
    # Config, loading, pipeline
    "PipelineConfig",
    "generate_synthetic_survey",
    "load_survey",
    "PipelineResult",
    "run_pipeline",
]
