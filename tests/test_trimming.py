"""Tests for weight trimming and weight summaries."""

import numpy as np
import pandas as pd
import pytest

from poststrat.frame import WeightedFrame
from poststrat.methods import WeightTrimmer, summarize_weights


def make_frame(weights) -> WeightedFrame:
    data = pd.DataFrame({
        "stratum": "A",
        "joking": 1,
        "weight": np.asarray(weights, dtype=float),
    })
    return WeightedFrame(data=data, outcome_fields=("joking",))


@pytest.fixture
def skewed_frame():
    return make_frame([0.1, 0.5, 1.0, 2.0, 10.0])


class TestWeightTrimmer:
    """Tests for WeightTrimmer."""

    def test_clips_to_bounds(self, skewed_frame):
        """Weights outside the bounds should be moved onto them."""
        trimmed = WeightTrimmer(lower=0.3, upper=5.0).trim(skewed_frame)
        assert list(trimmed.weights) == [0.3, 0.5, 1.0, 2.0, 5.0]

    def test_all_weights_within_bounds(self):
        """No trimmed weight should lie outside [lower, upper]."""
        np.random.seed(42)
        frame = make_frame(np.random.lognormal(0, 1.5, 1000))

        trimmed = WeightTrimmer(lower=0.3, upper=5.0).trim(frame)

        assert trimmed.weights.min() >= 0.3
        assert trimmed.weights.max() <= 5.0

    def test_idempotent(self):
        """Trimming twice with the same bounds should change nothing."""
        np.random.seed(42)
        frame = make_frame(np.random.lognormal(0, 1.5, 1000))
        trimmer = WeightTrimmer(lower=0.3, upper=5.0)

        once = trimmer.trim(frame)
        twice = trimmer.trim(once)

        np.testing.assert_array_equal(once.weights, twice.weights)

    def test_no_renormalisation(self, skewed_frame):
        """Trimmed weights should not be rescaled back to the sample size."""
        trimmed = WeightTrimmer(lower=0.3, upper=5.0).trim(skewed_frame)
        assert trimmed.total_weight == pytest.approx(8.8)
        assert trimmed.total_weight != trimmed.n

    def test_input_frame_unchanged(self, skewed_frame):
        """Trimming should return a new frame."""
        WeightTrimmer().trim(skewed_frame)
        assert list(skewed_frame.weights) == [0.1, 0.5, 1.0, 2.0, 10.0]

    def test_counts_trimmed_weights(self, skewed_frame):
        """run() should count raised and lowered weights."""
        result = WeightTrimmer(lower=0.3, upper=5.0).run(skewed_frame)
        assert result.n_raised == 1
        assert result.n_lowered == 1
        assert result.n_trimmed == 2

    def test_summaries_before_and_after(self, skewed_frame):
        """run() should return weight distributions before and after."""
        result = WeightTrimmer(lower=0.3, upper=5.0).run(skewed_frame)

        assert result.before.min == pytest.approx(0.1)
        assert result.before.max == pytest.approx(10.0)
        assert result.before.median == pytest.approx(1.0)
        assert result.before.mean == pytest.approx(2.72)

        assert result.after.min == pytest.approx(0.3)
        assert result.after.max == pytest.approx(5.0)
        assert result.after.q1 == pytest.approx(0.5)
        assert result.after.q3 == pytest.approx(2.0)
        assert result.after.mean == pytest.approx(1.76)

    @pytest.mark.parametrize("lower,upper", [(1.2, 5.0), (0.3, 0.9), (0.0, 5.0), (0.5, 1.0)])
    def test_invalid_bounds(self, lower, upper):
        """Bounds must satisfy 0 < lower < 1 < upper."""
        with pytest.raises(ValueError, match="lower"):
            WeightTrimmer(lower=lower, upper=upper)


class TestSummarizeWeights:
    """Tests for summarize_weights()."""

    def test_quartiles(self):
        """Quartiles should use linear interpolation."""
        summary = summarize_weights([1.0, 2.0, 3.0, 4.0])
        assert summary.count == 4
        assert summary.total == 10.0
        assert summary.q1 == pytest.approx(1.75)
        assert summary.median == pytest.approx(2.5)
        assert summary.q3 == pytest.approx(3.25)

    def test_to_dict_keys(self):
        """to_dict should expose every statistic."""
        summary = summarize_weights([1.0, 2.0])
        assert set(summary.to_dict()) == {
            "count", "total", "min", "q1", "median", "mean", "q3", "max",
        }

    def test_empty_raises(self):
        """An empty weight vector cannot be summarised."""
        with pytest.raises(ValueError):
            summarize_weights([])
