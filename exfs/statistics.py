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
from exfs.core.feature_descriptive_statistics import FeatureDescriptiveStatistics


class Statistics:
    """A persisted snapshot of descriptive statistics of a feature group."""

    DEFAULT_ROW_PERCENTAGE = 1.0

    def __init__(
        self,
        computation_time: int,
        row_percentage: float = DEFAULT_ROW_PERCENTAGE,
        feature_descriptive_statistics: Optional[
            Union[
                FeatureDescriptiveStatistics,
                List[FeatureDescriptiveStatistics],
                List[Dict[str, Any]],
                Dict[str, Any],
            ]
        ] = None,
        feature_group_id: Optional[int] = None,
        window_start_commit_time: Optional[int] = None,
        window_end_commit_time: Optional[int] = None,
        id: Optional[int] = None,
        **kwargs,
    ) -> None:
        self._id = id
        self._computation_time = computation_time
        self._row_percentage = row_percentage
        self._feature_descriptive_statistics = self._parse_descriptive_statistics(
            feature_descriptive_statistics
        )
        self._feature_group_id = feature_group_id
        self._window_start_commit_time = window_start_commit_time
        self._window_end_commit_time = window_end_commit_time

    def _parse_descriptive_statistics(
        self, desc_statistics
    ) -> Optional[List[FeatureDescriptiveStatistics]]:
        if desc_statistics is None:
            return None
        elif isinstance(desc_statistics, FeatureDescriptiveStatistics):
            return [desc_statistics]
        elif isinstance(desc_statistics, dict):
            # paginated collection or a single item
            items = desc_statistics.get("items", [desc_statistics])
            return [FeatureDescriptiveStatistics.from_response_json(fds) for fds in items]
        elif isinstance(desc_statistics, list):
            return [
                (
                    fds
                    if isinstance(fds, FeatureDescriptiveStatistics)
                    else FeatureDescriptiveStatistics.from_response_json(fds)
                )
                for fds in desc_statistics
            ]
        else:
            raise ValueError(
                "Descriptive statistics must be a FeatureDescriptiveStatistics object or a dictionary"
            )

    @classmethod
    def from_response_json(
        cls, json_dict: Dict[str, Any]
    ) -> Optional[Union["Statistics", List["Statistics"]]]:
        json_decamelized: dict = humps.decamelize(json_dict)
        # a collection response is always returned as a list, even with a single item
        if "count" in json_decamelized:
            if json_decamelized["count"] == 0 or not json_decamelized.get("items"):
                return None
            return [cls(**config) for config in json_decamelized["items"]]
        return cls(**json_decamelized)

    def to_dict(self) -> Dict[str, Any]:
        # the feature group id is part of the URI
        _dict = {
            "computationTime": self._computation_time,
            "rowPercentage": self._row_percentage,
            "windowStartCommitTime": self._window_start_commit_time,
            "windowEndCommitTime": self._window_end_commit_time,
        }
        if self._feature_descriptive_statistics is not None:
            _dict["featureDescriptiveStatistics"] = [
                fds.to_dict() for fds in self._feature_descriptive_statistics
            ]
        return _dict

    def json(self) -> str:
        return json.dumps(self, cls=util.FeatureStoreEncoder)

    def __str__(self) -> str:
        return self.json()

    def __repr__(self) -> str:
        return f"Statistics({self._computation_time!r})"

    def get_feature_statistics(
        self, feature_name: str
    ) -> Optional[FeatureDescriptiveStatistics]:
        """Descriptive statistics of a single feature, `None` if not computed."""
        name = util.autofix_feature_name(feature_name)
        for fds in self._feature_descriptive_statistics or []:
            if fds.feature_name == name:
                return fds
        return None

    @property
    def id(self) -> Optional[int]:
        return self._id

    @property
    def computation_time(self) -> int:
        """Time at which the statistics were computed, in epoch milliseconds."""
        return self._computation_time

    @property
    def row_percentage(self) -> float:
        """Percentage of data on which statistics were computed."""
        return self._row_percentage

    @property
    def feature_descriptive_statistics(
        self,
    ) -> Optional[List[FeatureDescriptiveStatistics]]:
        """List of feature descriptive statistics."""
        return self._feature_descriptive_statistics

    @property
    def feature_group_id(self) -> Optional[int]:
        """Id of the feature group on whose data the statistics were computed."""
        return self._feature_group_id

    @property
    def window_start_commit_time(self) -> Optional[int]:
        return self._window_start_commit_time

    @property
    def window_end_commit_time(self) -> Optional[int]:
        return self._window_end_commit_time
