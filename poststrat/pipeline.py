"""
Post-stratification pipeline: reweight survey B to survey A's composition.

Builds the population profile from the reference survey, post-stratifies the
target survey by gender x age band, trims the weights, and recovers weighted
outcome distributions next to the reference's unweighted ones.

Usage:
    python -m poststrat.pipeline --reference a.tsv --target b.tsv --output out.tsv
    python -m poststrat.pipeline --reference a.tsv --target b.tsv --config cfg.yaml
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .config import PipelineConfig
from .frame import WeightedFrame, build_survey_frame
from .methods import (
    PostStratificationResult,
    PostStratificationWeighter,
    TrimResult,
    WeightTrimmer,
)
from .profile import PopulationProfile, build_population_profile
from .quantiles import REFERENCE, UNWEIGHTED, WEIGHTED, WeightedQuantileEstimator
from .strata import StrataClassifier


@dataclass
class PipelineResult:
    """Everything produced by one reweighting run."""
    profile: PopulationProfile
    weighting: PostStratificationResult
    trimming: TrimResult
    comparison: pd.DataFrame

    @property
    def frame(self) -> WeightedFrame:
        """Final frame with trimmed weights."""
        return self.trimming.frame

    def mean_comparison(self) -> pd.DataFrame:
        """
        Mean outcome code per field and distribution category.

        Fields with non-numeric outcome codes have no mean and come out NaN.
        """
        codes = pd.to_numeric(self.comparison["outcome_value"], errors="coerce")
        df = self.comparison.assign(
            contribution=codes * self.comparison["estimated_mass"]
        )
        return (
            df.groupby(["outcome_field", "distribution_category"])["contribution"]
            .sum(min_count=1)
            .unstack("distribution_category")
        )


def run_pipeline(
    reference: pd.DataFrame,
    target: pd.DataFrame,
    config: Optional[PipelineConfig] = None,
    verbose: bool = True,
) -> PipelineResult:
    """
    Run the full reweighting pipeline.

    Args:
        reference: Reference survey (A) whose composition is the target
        target: Survey (B) to reweight
        config: Pipeline options (defaults if None)
        verbose: Print progress and diagnostics

    Returns:
        PipelineResult with profile, weights, trim diagnostics and the
        distribution comparison table
    """
    if config is None:
        config = PipelineConfig()

    classifier = StrataClassifier(gender_codes=config.gender_codes)

    profile = build_population_profile(reference, classifier=classifier)
    if verbose:
        print(f"Reference profile: {profile.total:,} records in {len(profile)} strata")
        for stratum, share in profile.to_series().items():
            print(f"  {stratum:<16} {share:6.1%}")

    frame = build_survey_frame(
        target, outcome_fields=config.outcome_fields, classifier=classifier
    )
    if verbose:
        print(f"Survey frame: {frame.n:,} respondents "
              f"({frame.n_dropped:,} dropped as incomplete)")

    weighter = PostStratificationWeighter(allow_partial=config.allow_partial_strata)
    weighting = weighter.run(frame, profile)
    if verbose:
        print("Target frequencies:")
        for stratum, freq in weighting.target_frequencies.items():
            n_h = weighting.stratum_counts.get(stratum, 0)
            print(f"  {stratum:<16} F={freq:<6} n={n_h:<6} "
                  f"w={weighting.stratum_weights.get(stratum, float('nan')):.3f}")
        if weighting.degenerate_strata:
            print(f"  Floored to 1: {', '.join(weighting.degenerate_strata)}")
        if weighting.unmatched_strata:
            print(f"  No target (kept at fallback weight): "
                  f"{', '.join(weighting.unmatched_strata)}")

    trimmer = WeightTrimmer(
        lower=config.lower_trim_bound, upper=config.upper_trim_bound
    )
    trimming = trimmer.run(weighting.frame)
    if verbose:
        print(f"Trimmed {trimming.n_trimmed:,} weights to "
              f"[{trimmer.lower}, {trimmer.upper}]")
        summary = pd.DataFrame({
            "before": trimming.before.to_series(),
            "after": trimming.after.to_series(),
        })
        print(summary.round(3).to_string())
        print(f"Total weight {trimming.after.total:,.1f} vs {frame.n:,} respondents")

    estimator = WeightedQuantileEstimator(num_points=config.num_quantile_points)
    comparison = estimator.compare(trimming.frame, reference, config.outcome_fields)

    result = PipelineResult(
        profile=profile,
        weighting=weighting,
        trimming=trimming,
        comparison=comparison,
    )

    if verbose:
        print("\nMean outcome by distribution:")
        print(result.mean_comparison()[[REFERENCE, UNWEIGHTED, WEIGHTED]]
              .round(3).to_string())

    return result


def main(argv=None):
    import argparse

    from .loader import load_survey

    parser = argparse.ArgumentParser(
        description="Post-stratify survey B to the composition of survey A"
    )
    parser.add_argument("--reference", required=True, help="Reference survey (A), TSV")
    parser.add_argument("--target", required=True, help="Survey to reweight (B), TSV")
    parser.add_argument("--output", help="Write the comparison table here (TSV)")
    parser.add_argument("--config", help="YAML file with pipeline options")
    parser.add_argument("--lower", type=float, help="Lower trim bound (default 0.3)")
    parser.add_argument("--upper", type=float, help="Upper trim bound (default 5)")
    parser.add_argument("--points", type=int, help="Number of quantile points (default 201)")
    parser.add_argument(
        "--allow-partial", action="store_true", default=None,
        help="Tolerate strata present in only one survey",
    )
    parser.add_argument("--quiet", action="store_true", help="Don't print diagnostics")
    args = parser.parse_args(argv)

    config = PipelineConfig.from_yaml(args.config) if args.config else PipelineConfig()
    config = config.updated(
        lower_trim_bound=args.lower,
        upper_trim_bound=args.upper,
        num_quantile_points=args.points,
        allow_partial_strata=args.allow_partial,
    )

    required = ("gender", "age") + config.outcome_fields
    reference = load_survey(args.reference, required_columns=required)
    target = load_survey(args.target, required_columns=required)

    result = run_pipeline(reference, target, config=config, verbose=not args.quiet)

    if args.output:
        result.comparison.to_csv(args.output, sep="\t", index=False)
        if not args.quiet:
            print(f"\nWrote {len(result.comparison):,} rows to {args.output}")


if __name__ == "__main__":
    main()
