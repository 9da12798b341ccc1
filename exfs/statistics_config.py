#
#   Copyright 2024 Hopsworks AB
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.
#
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Union

import humps
from exfs import util


class StatisticsConfig:
    """Configuration of the statistics computed for a feature group.

    # Arguments
        enabled: Compute descriptive statistics on every write, defaults to `True`.
        correlations: Additionally compute pairwise correlations of numerical
            features, defaults to `False`.
        histograms: Additionally compute value histograms, defaults to `False`.
        exact_uniqueness: Additionally compute uniqueness, distinctness and entropy,
            defaults to `False`.
        columns: Restrict the computation to a subset of the features, defaults to
            all features.
    """

    def __init__(
        self,
        enabled: bool = True,
        correlations: bool = False,
        histograms: bool = False,
        exact_uniqueness: bool = False,
        columns: Optional[List[str]] = None,
        **kwargs,
    ):
        # use setters for input validation
        self.enabled = enabled
        self.correlations = correlations
        self.histograms = histograms
        self.exact_uniqueness = exact_uniqueness
        self.columns = columns

    @classmethod
    def from_response_json(cls, json_dict: Dict[str, Any]) -> "StatisticsConfig":
        json_decamelized = humps.decamelize(json_dict)
        return cls(**json_decamelized)

    @classmethod
    def from_value(
        cls, statistics_config: Optional[Union["StatisticsConfig", Dict[str, Any], bool]]
    ) -> "StatisticsConfig":
        """Build a configuration from the forms accepted by feature group constructors.

        `None` maps to the default configuration, a boolean toggles `enabled` only.
        """
        if isinstance(statistics_config, StatisticsConfig):
            return statistics_config
        elif isinstance(statistics_config, dict):
            return cls(**statistics_config)
        elif isinstance(statistics_config, bool):
            return cls(enabled=statistics_config)
        elif statistics_config is None:
            return cls()
        else:
            raise TypeError(
                "The argument `statistics_config` has to be `None` of type `StatisticsConfig, `bool` or `dict`, but is of type: `{}`".format(
                    type(statistics_config)
                )
            )

    def json(self) -> str:
        return json.dumps(self, cls=util.FeatureStoreEncoder)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self._enabled,
            "correlations": self._correlations,
            "histograms": self._histograms,
            "exactUniqueness": self._exact_uniqueness,
            "columns": self._columns,
        }

    @staticmethod
    def _check_flag(name: str, value: Any) -> bool:
        if not isinstance(value, bool):
            raise TypeError(
                "Statistics configuration `{}` has to be a boolean, got `{}`.".format(
                    name, type(value).__name__
                )
            )
        return value

    @property
    def enabled(self) -> bool:
        """Enable statistics, by default this computes only descriptive statistics."""
        return self._enabled

    @enabled.setter
    def enabled(self, enabled: bool):
        self._enabled = self._check_flag("enabled", enabled)

    @property
    def correlations(self) -> bool:
        """Enable correlations as an additional statistic to be computed for each
        feature pair."""
        return self._correlations

    @correlations.setter
    def correlations(self, correlations: bool):
        self._correlations = self._check_flag("correlations", correlations)

    @property
    def histograms(self) -> bool:
        """Enable histograms as an additional statistic to be computed for each
        feature."""
        return self._histograms

    @histograms.setter
    def histograms(self, histograms: bool):
        self._histograms = self._check_flag("histograms", histograms)

    @property
    def exact_uniqueness(self) -> bool:
        """Enable exact uniqueness as an additional statistic to be computed for each
        feature."""
        return self._exact_uniqueness

    @exact_uniqueness.setter
    def exact_uniqueness(self, exact_uniqueness: bool):
        self._exact_uniqueness = self._check_flag("exact_uniqueness", exact_uniqueness)

    @property
    def columns(self) -> List[str]:
        """Subset of columns to compute statistics for, empty means all."""
        return self._columns

    @columns.setter
    def columns(self, columns: Optional[List[str]]):
        self._columns = [util.autofix_feature_name(col) for col in columns or []]

    def __str__(self) -> str:
        return self.json()

    def __repr__(self) -> str:
        return (
            f"StatisticsConfig({self._enabled}, {self._correlations}, {self._histograms},"
            f" {self._exact_uniqueness},"
            f" {self._columns})"
        )
