"""Tests for survey frame construction."""

import numpy as np
import pandas as pd
import pytest

from poststrat.errors import StrataMismatchError, UncoveredStrataError
from poststrat.frame import OUTCOME_FIELDS, build_survey_frame, check_coverage
from poststrat.profile import PopulationProfile


@pytest.fixture
def target():
    return pd.DataFrame({
        "gender": ["female", "male", "male", "other", "female", "female"],
        "age": [20, 30, np.nan, 40, 70, 15],
        "info_seeking": [1, 2, 3, 4, 5, np.nan],
        "info_giving": [1, 2, 3, 4, 5, 1],
        "opinion_seeking": [1, 2, 3, 4, 5, 1],
        "opinion_giving": [1, 2, 3, 4, 5, 1],
        "joking": [1, 2, 3, 4, 5, 1],
    }, index=[101, 102, 103, 104, 105, 106])


class TestBuildSurveyFrame:
    """Tests for build_survey_frame()."""

    def test_drops_incomplete_records(self, target):
        """Invalid gender, missing age and missing outcomes should be dropped."""
        frame = build_survey_frame(target)
        assert list(frame.data.index) == [101, 102, 105]
        assert frame.n == 3
        assert frame.n_dropped == 3

    def test_labels_strata(self, target):
        """Retained records should carry their stratum label."""
        frame = build_survey_frame(target)
        assert list(frame.data["stratum"]) == ["female_18-24", "male_25-44", "female_65+"]

    def test_keeps_outcomes(self, target):
        """Retained records should keep every outcome value."""
        frame = build_survey_frame(target)
        for field in OUTCOME_FIELDS:
            assert field in frame.data.columns
        assert frame.data.loc[105, "joking"] == 5

    def test_initial_weights_are_one(self, target):
        """Weights should start at 1."""
        frame = build_survey_frame(target)
        assert (frame.weights == 1.0).all()
        assert frame.total_weight == 3.0

    def test_subset_of_outcomes(self, target):
        """Only the named outcome fields should be required."""
        frame = build_survey_frame(target, outcome_fields=["joking"])
        assert frame.n == 4
        assert frame.outcome_fields == ("joking",)

    def test_missing_outcome_column(self, target):
        """Naming an outcome the data lacks should raise."""
        with pytest.raises(ValueError, match="not_a_field"):
            build_survey_frame(target, outcome_fields=["joking", "not_a_field"])


class TestWeightedFrame:
    """Tests for WeightedFrame snapshots."""

    def test_with_weights_returns_new_frame(self, target):
        """with_weights should leave the original frame untouched."""
        frame = build_survey_frame(target)
        updated = frame.with_weights([0.5, 2.0, 1.5])
        assert list(updated.weights) == [0.5, 2.0, 1.5]
        assert (frame.weights == 1.0).all()
        assert updated.n_dropped == frame.n_dropped

    def test_with_weights_shape_checked(self, target):
        """Weight vectors of the wrong length should be rejected."""
        frame = build_survey_frame(target)
        with pytest.raises(ValueError):
            frame.with_weights([1.0, 2.0])

    def test_stratum_counts(self, target):
        """stratum_counts should count respondents per stratum."""
        frame = build_survey_frame(target)
        counts = frame.stratum_counts()
        assert counts.to_dict() == {"female_18-24": 1, "female_65+": 1, "male_25-44": 1}


class TestCheckCoverage:
    """Tests for check_coverage()."""

    def test_covered(self, target):
        """No error when every frame stratum has a target."""
        frame = build_survey_frame(target)
        profile = PopulationProfile.from_proportions({
            "female_18-24": 0.3, "male_25-44": 0.3, "female_65+": 0.2, "male_65+": 0.2,
        })
        check_coverage(frame, profile)

    def test_uncovered_strata_listed(self, target):
        """Frame strata without a target should be listed in the error."""
        frame = build_survey_frame(target)
        profile = PopulationProfile.from_proportions({"female_18-24": 1.0})
        with pytest.raises(UncoveredStrataError) as excinfo:
            check_coverage(frame, profile)
        assert excinfo.value.strata == ["female_65+", "male_25-44"]
        assert isinstance(excinfo.value, StrataMismatchError)
