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

import json

import pandas as pd
import pytest
from exfs import statistics, util
from exfs.client import exceptions
from exfs.core import statistics_engine
from exfs.statistics_config import StatisticsConfig


class TestStatisticsEngine:
    def test_compute_and_save_statistics(self, mocker, dataframe_fixture_prices):
        # Arrange
        mock_stats_api = mocker.patch("exfs.core.statistics_api.StatisticsApi")
        mock_engine_get_instance = mocker.patch("exfs.engine.get_instance")
        mock_engine_get_instance.return_value.profile.return_value = json.dumps(
            {
                "columns": [
                    {"column": "symbol", "dataType": "String", "count": 4},
                    {"column": "price", "dataType": "Fractional", "count": 4},
                ]
            }
        )
        s_engine = statistics_engine.StatisticsEngine(67, "featuregroups")
        fg = mocker.Mock()
        fg.statistics_config = StatisticsConfig(columns=["symbol", "price"])
        fg.read.return_value = dataframe_fixture_prices

        # Act
        result = s_engine.compute_and_save_statistics(fg)

        # Assert
        fg.read.assert_called_once_with()
        mock_engine_get_instance.return_value.profile.assert_called_once_with(
            dataframe_fixture_prices, ["symbol", "price"], False, False, False
        )
        posted_fg, posted_stats = mock_stats_api.return_value.post.call_args[0]
        assert posted_fg is fg
        assert [
            fds.feature_name for fds in posted_stats.feature_descriptive_statistics
        ] == ["symbol", "price"]
        assert posted_stats.computation_time > 0
        assert result is mock_stats_api.return_value.post.return_value

    def test_compute_and_save_statistics_given_dataframe(
        self, mocker, dataframe_fixture_prices
    ):
        # Arrange
        mocker.patch("exfs.core.statistics_api.StatisticsApi")
        mock_engine_get_instance = mocker.patch("exfs.engine.get_instance")
        mock_engine_get_instance.return_value.profile.return_value = '{"columns": []}'
        s_engine = statistics_engine.StatisticsEngine(67, "featuregroups")
        fg = mocker.Mock()
        fg.statistics_config = StatisticsConfig()

        # Act
        s_engine.compute_and_save_statistics(fg, dataframe_fixture_prices)

        # Assert
        assert fg.read.call_count == 0

    def test_profile_statistics_empty(self, mocker):
        # Arrange
        mock_engine_get_instance = mocker.patch("exfs.engine.get_instance")
        df = pd.DataFrame({"symbol": pd.Series([], dtype=str)})

        # Act
        with pytest.warns(util.StatisticsWarning):
            result = statistics_engine.StatisticsEngine.profile_statistics(
                df, None, False, False, False
            )

        # Assert
        assert json.loads(result) == {"columns": [{"column": "symbol", "count": 0}]}
        assert mock_engine_get_instance.return_value.profile.call_count == 0

    def test_get_not_found(self, mocker):
        # Arrange
        mock_stats_api = mocker.patch("exfs.core.statistics_api.StatisticsApi")
        response = mocker.Mock()
        response.status_code = 404
        response.json.return_value = {"errorCode": 270228}
        mock_stats_api.return_value.get_all.side_effect = exceptions.RestAPIError(
            "url", response
        )
        s_engine = statistics_engine.StatisticsEngine(67, "featuregroups")

        # Act
        result = s_engine.get_all(mocker.Mock())

        # Assert
        assert result is None

    def test_get_converts_computation_time(self, mocker):
        # Arrange
        mock_stats_api = mocker.patch("exfs.core.statistics_api.StatisticsApi")
        mock_stats_api.return_value.get.return_value = statistics.Statistics(
            computation_time=1709290800000
        )
        s_engine = statistics_engine.StatisticsEngine(67, "featuregroups")
        fg = mocker.Mock()

        # Act
        result = s_engine.get(fg, computation_time=1709290800)

        # Assert
        mock_stats_api.return_value.get.assert_called_once_with(
            fg, computation_time=1709290800000, feature_names=None
        )
        assert result.computation_time == 1709290800000
