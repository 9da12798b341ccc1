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

import pytest
from exfs import statistics_config


class TestStatisticsConfig:
    def test_from_response_json(self, backend_fixtures):
        # Arrange
        json = backend_fixtures["statistics_config"]["get"]["response"]

        # Act
        sc = statistics_config.StatisticsConfig.from_response_json(json)

        # Assert
        assert sc.enabled is True
        assert sc.correlations is True
        assert sc.histograms is False
        assert sc.exact_uniqueness is True
        assert sc.columns == ["symbol", "price"]

    def test_from_response_json_basic_info(self, backend_fixtures):
        # Arrange
        json = backend_fixtures["statistics_config"]["get_basic_info"]["response"]

        # Act
        sc = statistics_config.StatisticsConfig.from_response_json(json)

        # Assert
        assert sc.enabled is True
        assert sc.correlations is False
        assert sc.histograms is False
        assert sc.exact_uniqueness is False
        assert sc.columns == []

    def test_from_value_none(self):
        # Act
        sc = statistics_config.StatisticsConfig.from_value(None)

        # Assert
        assert sc.enabled is True
        assert sc.histograms is False

    def test_from_value_bool(self):
        # Act
        sc = statistics_config.StatisticsConfig.from_value(False)

        # Assert
        assert sc.enabled is False
        assert sc.correlations is False

    def test_from_value_dict(self):
        # Act
        sc = statistics_config.StatisticsConfig.from_value(
            {"histograms": True, "columns": ["Price"]}
        )

        # Assert
        assert sc.enabled is True
        assert sc.histograms is True
        assert sc.columns == ["price"]

    def test_from_value_instance(self):
        # Arrange
        config = statistics_config.StatisticsConfig(correlations=True)

        # Act
        sc = statistics_config.StatisticsConfig.from_value(config)

        # Assert
        assert sc is config

    def test_from_value_unsupported(self):
        # Act
        with pytest.raises(TypeError):
            statistics_config.StatisticsConfig.from_value("yes")

    def test_flag_must_be_bool(self):
        # Arrange
        sc = statistics_config.StatisticsConfig()

        # Act
        with pytest.raises(TypeError) as e_info:
            sc.enabled = "false"

        # Assert
        assert "enabled" in str(e_info.value)
        assert sc.enabled is True

    def test_to_dict(self):
        # Arrange
        sc = statistics_config.StatisticsConfig(
            enabled=False, exact_uniqueness=True, columns=["symbol"]
        )

        # Act
        result = sc.to_dict()

        # Assert
        assert result == {
            "enabled": False,
            "correlations": False,
            "histograms": False,
            "exactUniqueness": True,
            "columns": ["symbol"],
        }
