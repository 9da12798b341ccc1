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
import logging
import warnings
from datetime import datetime
from typing import List, Optional, Union

from exfs import engine, statistics, util
from exfs.client import exceptions
from exfs.core import statistics_api
from exfs.core.feature_descriptive_statistics import FeatureDescriptiveStatistics


_logger = logging.getLogger(__name__)


class StatisticsEngine:
    def __init__(self, feature_store_id, entity_type):
        self._statistics_api = statistics_api.StatisticsApi(
            feature_store_id, entity_type
        )

    def compute_and_save_statistics(
        self, metadata_instance, feature_dataframe=None
    ) -> Optional[statistics.Statistics]:
        """Compute statistics for a dataframe and send the result json to the feature store.

        Args:
            metadata_instance: ExternalFeatureGroup. Metadata of the entity containing the data.
            feature_dataframe: Pandas or Polars DataFrame to compute the statistics on.
                If `None`, the entity is read in full.
        Returns:
            Statistics. Statistics metadata containing a list of single feature descriptive statistics.
        """
        if feature_dataframe is None:
            feature_dataframe = metadata_instance.read()

        computation_time = int(float(datetime.now().timestamp()) * 1000)
        stats_str = self.profile_statistics_with_config(
            feature_dataframe, metadata_instance.statistics_config
        )
        desc_stats = self._parse_profile_statistics(stats_str)
        stats = statistics.Statistics(
            computation_time=computation_time,
            feature_descriptive_statistics=desc_stats,
        )
        _logger.debug(
            "Computed statistics of %d features for `%s`, version `%s`",
            len(desc_stats),
            metadata_instance.name,
            metadata_instance.version,
        )
        return self._statistics_api.post(metadata_instance, stats)

    @staticmethod
    def profile_statistics_with_config(feature_dataframe, statistics_config) -> str:
        """Compute statistics on a feature DataFrame based on a given configuration.
        Args:
            feature_dataframe: Pandas or Polars DataFrame to compute the statistics on.
            statistics_config: StatisticsConfig. Configuration for the statistics to be computed.
        Returns:
            str. Serialized features statistics.
        """
        return StatisticsEngine.profile_statistics(
            feature_dataframe,
            statistics_config.columns,
            statistics_config.correlations,
            statistics_config.histograms,
            statistics_config.exact_uniqueness,
        )

    @staticmethod
    def profile_statistics(
        feature_dataframe, columns, correlations, histograms, exact_uniqueness
    ) -> str:
        """Compute statistics on a feature DataFrame.
        Args:
            feature_dataframe: Pandas or Polars DataFrame to compute the statistics on.
            columns: List[str]. List of feature names to compute the statistics on.
            correlations: bool. Whether to compute correlations or not.
            histograms: bool. Whether to compute histograms or not.
            exact_uniqueness: bool. Whether to compute exact uniqueness values or not.
        Returns:
            str. Serialized features statistics.
        """
        if len(feature_dataframe.head(1)) == 0:
            warnings.warn(
                "There is no data in the entity that you are trying to compute "
                "statistics for. A possible cause might be that the external source "
                "is empty.",
                category=util.StatisticsWarning,
                stacklevel=1,
            )
            # if empty data, set count to 0 and return
            col_stats = [
                {"column": col_name, "count": 0}
                for col_name in (columns or list(feature_dataframe.columns))
            ]
            return json.dumps({"columns": col_stats})
        return engine.get_instance().profile(
            feature_dataframe, columns, correlations, histograms, exact_uniqueness
        )

    def get(
        self,
        metadata_instance,
        feature_names: Optional[List[str]] = None,
        computation_time: Optional[Union[str, int, datetime]] = None,
    ) -> Optional[statistics.Statistics]:
        """Get statistics of an entity computed at a specific time.
           If the computation time is not provided, the most recently computed statistics will be retrieved.

        Args:
            metadata_instance: ExternalFeatureGroup. Metadata of the entity containing the data.
            feature_names: List[str]. List of feature names of which statistics are retrieved.
            computation_time: Union[str, int, datetime]. Timestamp or computation time when statistics where computed.
        Returns:
            Statistics. Statistics metadata containing a list of single feature descriptive statistics.
        """
        computation_timestamp = util.convert_event_time_to_timestamp(computation_time)
        try:
            return self._statistics_api.get(
                metadata_instance,
                computation_time=computation_timestamp,
                feature_names=feature_names,
            )
        except exceptions.RestAPIError as e:
            if self._is_statistics_not_found(e):
                return None
            raise e

    def get_all(
        self,
        metadata_instance,
        feature_names: Optional[List[str]] = None,
        computation_time: Optional[Union[str, int, datetime]] = None,
    ) -> Optional[List[statistics.Statistics]]:
        """Get all statistics of an entity computed before a specific time.
           If the computation time is not provided, all the statistics will be retrieved.

        Args:
            metadata_instance: ExternalFeatureGroup. Metadata of the entity containing the data.
            feature_names: List[str]. List of feature names of which statistics are retrieved.
            computation_time: Union[str, int, datetime]. Timestamp or computation time when statistics where computed.
        Returns:
            List[Statistics]. Statistics metadata, without the feature descriptive statistics.
        """
        computation_timestamp = util.convert_event_time_to_timestamp(computation_time)
        try:
            return self._statistics_api.get_all(
                metadata_instance,
                computation_time=computation_timestamp,
                feature_names=feature_names,
            )
        except exceptions.RestAPIError as e:
            if self._is_statistics_not_found(e):
                return None
            raise e

    @staticmethod
    def _is_statistics_not_found(error: exceptions.RestAPIError) -> bool:
        return (
            error.response.status_code == 404
            and error.response.json().get("errorCode", "")
            == exceptions.RestAPIError.FeatureStoreErrorCode.STATISTICS_NOT_FOUND
        )

    def _parse_profile_statistics(self, stats) -> List[FeatureDescriptiveStatistics]:
        if isinstance(stats, str):
            stats = json.loads(stats)
        return [
            FeatureDescriptiveStatistics.from_profile_json(col_stats)
            for col_stats in stats["columns"]
        ]
