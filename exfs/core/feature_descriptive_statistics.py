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
from typing import Any, Dict, Optional, Union

import humps
from exfs import util


class FeatureDescriptiveStatistics:
    """Descriptive statistics of a single feature of a statistics snapshot."""

    # profile keys produced by the engine mapped to attribute names
    _PROFILE_KEYS = {
        "numRecordsNull": "num_null_values",
        "numRecordsNonNull": "num_non_null_values",
        "completeness": "completeness",
        "approximateNumDistinctValues": "approx_num_distinct_values",
        "exactNumDistinctValues": "exact_num_distinct_values",
        "distinctness": "distinctness",
        "uniqueness": "uniqueness",
        "entropy": "entropy",
        "minimum": "min",
        "maximum": "max",
        "sum": "sum",
        "mean": "mean",
        "stdDev": "stddev",
        "approxPercentiles": "percentiles",
    }
    _EXTENDED_KEYS = ["histogram", "correlations", "unique_values"]

    def __init__(
        self,
        feature_name: str,
        feature_type: Optional[str] = None,
        count: Optional[int] = None,
        completeness: Optional[float] = None,
        num_non_null_values: Optional[int] = None,
        num_null_values: Optional[int] = None,
        approx_num_distinct_values: Optional[int] = None,
        min: Optional[float] = None,
        max: Optional[float] = None,
        sum: Optional[float] = None,
        mean: Optional[float] = None,
        stddev: Optional[float] = None,
        percentiles: Optional[list] = None,
        distinctness: Optional[float] = None,
        entropy: Optional[float] = None,
        uniqueness: Optional[float] = None,
        exact_num_distinct_values: Optional[int] = None,
        extended_statistics: Optional[Union[dict, str]] = None,
        id: Optional[int] = None,
        **kwargs,
    ):
        self._id = id
        self._feature_name = util.autofix_feature_name(feature_name)
        self._feature_type = feature_type
        self._count = count
        self._completeness = completeness
        self._num_non_null_values = num_non_null_values
        self._num_null_values = num_null_values
        self._approx_num_distinct_values = approx_num_distinct_values
        self._min = min
        self._max = max
        self._sum = sum
        self._mean = mean
        self._stddev = stddev
        self._percentiles = percentiles
        self._distinctness = distinctness
        self._entropy = entropy
        self._uniqueness = uniqueness
        self._exact_num_distinct_values = exact_num_distinct_values
        self._extended_statistics = (
            json.loads(extended_statistics)
            if isinstance(extended_statistics, str)
            else extended_statistics
        )

    @classmethod
    def from_response_json(
        cls, json_dict: Dict[str, Any]
    ) -> "FeatureDescriptiveStatistics":
        json_decamelized = humps.decamelize(json_dict)
        return cls(**json_decamelized)

    @classmethod
    def from_profile_json(
        cls, json_dict: Dict[str, Any]
    ) -> "FeatureDescriptiveStatistics":
        """Build the statistics of one column from the engine profile output."""
        stats_dict = {
            "feature_name": json_dict["column"],
            "feature_type": json_dict.get("dataType"),
            "count": json_dict.get("count"),
        }
        if stats_dict["count"] == 0:
            # empty data, the remaining metrics are meaningless
            return cls(**stats_dict)

        for profile_key, name in cls._PROFILE_KEYS.items():
            if profile_key in json_dict:
                stats_dict[name] = json_dict[profile_key]

        extended_statistics = {
            key: json_dict[key] for key in cls._EXTENDED_KEYS if key in json_dict
        }
        stats_dict["extended_statistics"] = extended_statistics or None
        return cls(**stats_dict)

    def to_dict(self) -> Dict[str, Any]:
        _dict = {
            "id": self._id,
            "featureName": self._feature_name,
            "featureType": self._feature_type,
            "count": self._count,
            "completeness": self._completeness,
            "numNonNullValues": self._num_non_null_values,
            "numNullValues": self._num_null_values,
            "approxNumDistinctValues": self._approx_num_distinct_values,
            "min": self._min,
            "max": self._max,
            "sum": self._sum,
            "mean": self._mean,
            "stddev": self._stddev,
            "percentiles": self._percentiles,
            "distinctness": self._distinctness,
            "entropy": self._entropy,
            "uniqueness": self._uniqueness,
            "exactNumDistinctValues": self._exact_num_distinct_values,
        }
        if self._extended_statistics is not None:
            _dict["extendedStatistics"] = json.dumps(self._extended_statistics)
        return _dict

    def json(self) -> str:
        return json.dumps(self, cls=util.FeatureStoreEncoder)

    def __repr__(self) -> str:
        return f"FeatureDescriptiveStatistics({self._feature_name!r}, {self._feature_type!r})"

    @property
    def id(self) -> Optional[int]:
        return self._id

    @property
    def feature_name(self) -> str:
        """Name of the feature."""
        return self._feature_name

    @property
    def feature_type(self) -> Optional[str]:
        """Data type of the feature. One of Boolean, Fractional, Integral or String."""
        return self._feature_type

    @property
    def count(self) -> Optional[int]:
        """Number of values."""
        return self._count

    @property
    def completeness(self) -> Optional[float]:
        """Fraction of non-null values in a column."""
        return self._completeness

    @property
    def num_non_null_values(self) -> Optional[int]:
        return self._num_non_null_values

    @property
    def num_null_values(self) -> Optional[int]:
        return self._num_null_values

    @property
    def approx_num_distinct_values(self) -> Optional[int]:
        return self._approx_num_distinct_values

    @property
    def min(self) -> Optional[float]:
        return self._min

    @property
    def max(self) -> Optional[float]:
        return self._max

    @property
    def sum(self) -> Optional[float]:
        return self._sum

    @property
    def mean(self) -> Optional[float]:
        return self._mean

    @property
    def stddev(self) -> Optional[float]:
        """Standard deviation of the feature values."""
        return self._stddev

    @property
    def percentiles(self) -> Optional[list]:
        return self._percentiles

    @property
    def distinctness(self) -> Optional[float]:
        """Fraction of distinct values over the number of all values."""
        return self._distinctness

    @property
    def entropy(self) -> Optional[float]:
        return self._entropy

    @property
    def uniqueness(self) -> Optional[float]:
        """Fraction of values occurring exactly once over the number of all values."""
        return self._uniqueness

    @property
    def exact_num_distinct_values(self) -> Optional[int]:
        return self._exact_num_distinct_values

    @property
    def extended_statistics(self) -> Optional[dict]:
        """Histograms and correlations, if computed."""
        return self._extended_statistics
