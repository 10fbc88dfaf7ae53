"""
Pipeline configuration.

Options can come from a YAML file, a dict, or command-line flags:

    lower_trim_bound: 0.3
    upper_trim_bound: 5
    num_quantile_points: 201
    allow_partial_strata: false
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from .frame import OUTCOME_FIELDS
from .strata import GENDER_CODES


@dataclass
class PipelineConfig:
    """Options recognised by the reweighting pipeline."""

    lower_trim_bound: float = 0.3
    upper_trim_bound: float = 5.0
    num_quantile_points: int = 201
    allow_partial_strata: bool = False
    outcome_fields: tuple[str, ...] = OUTCOME_FIELDS
    gender_codes: tuple[str, ...] = GENDER_CODES

    def __post_init__(self):
        self.outcome_fields = tuple(self.outcome_fields)
        self.gender_codes = tuple(self.gender_codes)
        self.validate()
        self.lower_trim_bound = float(self.lower_trim_bound)
        self.upper_trim_bound = float(self.upper_trim_bound)
        self.num_quantile_points = int(self.num_quantile_points)

    def validate(self) -> None:
        """
        Check option values.

        Raises:
            ValueError: If an option has the wrong type or an invalid value
        """
        for name in ("lower_trim_bound", "upper_trim_bound"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")
        points = self.num_quantile_points
        if isinstance(points, bool) or not (
            isinstance(points, int)
            or (isinstance(points, float) and points.is_integer())
        ):
            raise ValueError(
                f"num_quantile_points must be a whole number, got {points!r}"
            )
        if not isinstance(self.allow_partial_strata, bool):
            raise ValueError(
                f"allow_partial_strata must be true or false, "
                f"got {self.allow_partial_strata!r}"
            )
        if not 0 < self.lower_trim_bound < 1 < self.upper_trim_bound:
            raise ValueError(
                f"Trim bounds must satisfy 0 < lower < 1 < upper, got "
                f"lower={self.lower_trim_bound}, upper={self.upper_trim_bound}"
            )
        if self.num_quantile_points < 2:
            raise ValueError(
                f"num_quantile_points must be at least 2, "
                f"got {self.num_quantile_points}"
            )
        if not self.outcome_fields:
            raise ValueError("At least one outcome field is required")
        if len(self.gender_codes) != 2:
            raise ValueError(
                f"Exactly two gender codes are required, got {self.gender_codes}"
            )

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> "PipelineConfig":
        """
        Build a config from a mapping of option names.

        Raises:
            ValueError: On unrecognised option names
        """
        known = {f.name for f in fields(cls)}
        unknown = set(options) - known
        if unknown:
            raise ValueError(
                f"Unknown configuration options: {sorted(unknown)}. "
                f"Valid options: {sorted(known)}"
            )
        return cls(**options)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "PipelineConfig":
        """Load a config from a YAML file; an empty file gives the defaults."""
        with open(path) as f:
            options = yaml.safe_load(f) or {}
        if not isinstance(options, dict):
            raise ValueError(f"Expected a mapping in {path}, got {type(options).__name__}")
        return cls.from_dict(options)

    def updated(self, **overrides: Any) -> "PipelineConfig":
        """Copy with the non-None ``overrides`` applied."""
        options = {f.name: getattr(self, f.name) for f in fields(self)}
        options.update({k: v for k, v in overrides.items() if v is not None})
        return self.from_dict(options)
