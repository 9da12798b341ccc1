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

from typing import Dict, List, Optional, Union

from exfs import client, statistics


class StatisticsApi:
    def __init__(self, feature_store_id, entity_type):
        """Statistics endpoint for the `featuregroups` resource.

        :param feature_store_id: id of the respective featurestore
        :type feature_store_id: int
        :param entity_type: "featuregroups"
        :type entity_type: str
        """
        self._feature_store_id = feature_store_id
        self._entity_type = entity_type

    def post(self, metadata_instance, stats) -> Optional[statistics.Statistics]:
        _client = client.get_instance()
        path_params = self.get_path(metadata_instance)

        headers = {"content-type": "application/json"}
        stats = statistics.Statistics.from_response_json(
            _client._send_request(
                "POST", path_params, headers=headers, data=stats.json()
            )
        )
        return self._extract_single_stats(stats)

    def get(
        self,
        metadata_instance,
        computation_time=None,
        feature_names=None,
    ) -> Optional[statistics.Statistics]:
        """Get single statistics of an entity.

        Without a computation time the most recent statistics are returned.

        :param metadata_instance: metadata object of the instance to get statistics of
        :type metadata_instance: ExternalFeatureGroup
        :param computation_time: Time at which statistics where computed, the latest
            statistics computed at or before this time are returned
        :type computation_time: int
        :param feature_names: List of feature names of which statistics are retrieved
        :type feature_names: List[str]
        """
        _client = client.get_instance()
        path_params = self.get_path(metadata_instance)

        headers = {"content-type": "application/json"}
        query_params = self._build_get_query_params(
            computation_time=computation_time,
            feature_names=feature_names,
            # retrieve only one entity statistics, including the feature descriptive statistics
            offset=0,
            limit=1,
            with_content=True,
        )

        # response is either a single item or not found exception
        stats = statistics.Statistics.from_response_json(
            _client._send_request("GET", path_params, query_params, headers=headers)
        )
        return self._extract_single_stats(stats)

    def get_all(
        self,
        metadata_instance,
        computation_time=None,
        feature_names=None,
    ) -> Optional[List[statistics.Statistics]]:
        """Get all statistics of an entity, without the feature descriptive statistics.

        :param metadata_instance: metadata object of the instance to get statistics of
        :type metadata_instance: ExternalFeatureGroup
        :param computation_time: Upper bound for the computation time
        :type computation_time: int
        :param feature_names: List of feature names of which statistics are retrieved
        :type feature_names: List[str]
        """
        _client = client.get_instance()
        path_params = self.get_path(metadata_instance)

        headers = {"content-type": "application/json"}
        query_params = self._build_get_query_params(
            computation_time=computation_time,
            feature_names=feature_names,
            offset=0,
            limit=None,
            with_content=False,
        )

        stats = statistics.Statistics.from_response_json(
            _client._send_request("GET", path_params, query_params, headers=headers)
        )
        if stats is None:
            return []
        return stats if isinstance(stats, list) else [stats]

    def get_path(self, metadata_instance) -> list:
        _client = client.get_instance()
        return [
            "project",
            _client._project_id,
            "featurestores",
            self._feature_store_id,
            self._entity_type,
            metadata_instance.id,
            "statistics",
        ]

    def _extract_single_stats(self, stats) -> Optional[statistics.Statistics]:
        return stats[0] if isinstance(stats, list) else stats

    def _build_get_query_params(
        self,
        computation_time=None,
        feature_names=None,
        offset=0,
        limit=None,
        with_content=False,
    ) -> dict:
        query_params: Dict[str, Union[int, str, List[str]]] = {"offset": offset}
        if limit is not None:
            query_params["limit"] = limit
        if with_content:
            query_params["fields"] = "content"

        query_params["sort_by"] = ["computation_time:desc"]
        if computation_time is not None:
            query_params["filter_by"] = [
                "computation_time_ltoeq:" + str(computation_time)
            ]

        if feature_names is not None:
            query_params["feature_names"] = feature_names

        return query_params
