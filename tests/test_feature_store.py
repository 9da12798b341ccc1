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

import warnings

import pytest
from exfs import feature_group, feature_store, storage_connector, util
from exfs.client import exceptions
from exfs.feature import Feature


def _feature_store(backend_fixtures):
    return feature_store.FeatureStore.from_response_json(
        backend_fixtures["feature_store"]["get"]["response"]
    )


class TestFeatureStore:
    def test_from_response_json(self, mocker, backend_fixtures):
        # Arrange
        mocker.patch("exfs.core.feature_group_api.FeatureGroupApi")
        mocker.patch("exfs.core.storage_connector_api.StorageConnectorApi")

        # Act
        fs = _feature_store(backend_fixtures)

        # Assert
        assert fs.id == 67
        assert fs.name == "demo_featurestore"
        assert fs.project_name == "demo"
        assert fs.project_id == 119
        assert fs.online_featurestore_name == "demo"
        assert fs.offline_featurestore_name == "demo_featurestore"
        assert fs.online_enabled is True

    def test_get_external_feature_group(self, mocker, backend_fixtures):
        # Arrange
        mock_fg_api = mocker.patch("exfs.core.feature_group_api.FeatureGroupApi")
        mocker.patch("exfs.core.storage_connector_api.StorageConnectorApi")
        fs = _feature_store(backend_fixtures)
        fg = mocker.Mock()
        mock_fg_api.return_value.get.return_value = fg

        # Act
        with warnings.catch_warnings(record=True) as warning_record:
            warnings.simplefilter("always")
            result = fs.get_external_feature_group("prices", version=2)

        # Assert
        assert len(warning_record) == 0
        mock_fg_api.return_value.get.assert_called_once_with(67, "prices", 2)
        assert result is fg
        assert result.feature_store is fs

    def test_get_external_feature_group_default_version(
        self, mocker, backend_fixtures
    ):
        # Arrange
        mock_fg_api = mocker.patch("exfs.core.feature_group_api.FeatureGroupApi")
        mocker.patch("exfs.core.storage_connector_api.StorageConnectorApi")
        fs = _feature_store(backend_fixtures)

        # Act
        with pytest.warns(util.VersionWarning):
            fs.get_external_feature_group("prices")

        # Assert
        mock_fg_api.return_value.get.assert_called_once_with(67, "prices", 1)

    def test_get_external_feature_groups(self, mocker, backend_fixtures):
        # Arrange
        mock_fg_api = mocker.patch("exfs.core.feature_group_api.FeatureGroupApi")
        mocker.patch("exfs.core.storage_connector_api.StorageConnectorApi")
        fs = _feature_store(backend_fixtures)
        fgs = [mocker.Mock(), mocker.Mock()]
        mock_fg_api.return_value.get.return_value = fgs

        # Act
        result = fs.get_external_feature_groups("prices")

        # Assert
        mock_fg_api.return_value.get.assert_called_once_with(67, "prices", None)
        assert result == fgs
        assert all(fg.feature_store is fs for fg in result)

    def test_get_storage_connector(self, mocker, backend_fixtures):
        # Arrange
        mocker.patch("exfs.core.feature_group_api.FeatureGroupApi")
        mock_sc_api = mocker.patch(
            "exfs.core.storage_connector_api.StorageConnectorApi"
        )
        fs = _feature_store(backend_fixtures)

        # Act
        result = fs.get_storage_connector("warehouse")

        # Assert
        mock_sc_api.return_value.get.assert_called_once_with(67, "warehouse")
        assert result is mock_sc_api.return_value.get.return_value

    def test_get_online_storage_connector(self, mocker, backend_fixtures):
        # Arrange
        mocker.patch("exfs.core.feature_group_api.FeatureGroupApi")
        mock_sc_api = mocker.patch(
            "exfs.core.storage_connector_api.StorageConnectorApi"
        )
        fs = _feature_store(backend_fixtures)

        # Act
        fs.get_online_storage_connector()

        # Assert
        mock_sc_api.return_value.get_online_connector.assert_called_once_with(67)

    def test_create_external_feature_group(self, mocker, backend_fixtures):
        # Arrange
        mock_fg_api = mocker.patch("exfs.core.feature_group_api.FeatureGroupApi")
        mocker.patch("exfs.core.storage_connector_api.StorageConnectorApi")
        fs = _feature_store(backend_fixtures)
        connector = storage_connector.S3Connector(
            id=3, name="prices_bucket", featurestore_id=67, bucket="test-bucket"
        )

        # Act
        fg = fs.create_external_feature_group(
            "prices",
            storage_connector=connector,
            data_format="parquet",
            path="prices/2024",
            version=1,
            primary_key=["Symbol"],
            features=[Feature("symbol", type="string"), Feature("price", type="double")],
            statistics_config=False,
        )

        # Assert
        assert isinstance(fg, feature_group.ExternalFeatureGroup)
        assert fg.feature_store is fs
        assert fg.feature_store_id == 67
        assert fg.feature_store_name == "demo_featurestore"
        assert fg.primary_key == ["symbol"]
        assert fg.data_format == "PARQUET"
        assert fg.path == "prices/2024"
        assert fg.options == {}
        assert fg.description == ""
        assert fg.statistics_config.enabled is False
        assert fg.id is None
        # nothing is persisted before save
        assert mock_fg_api.return_value.method_calls == []

    def test_create_external_feature_group_invalid_primary_key(
        self, mocker, backend_fixtures
    ):
        # Arrange
        mocker.patch("exfs.core.feature_group_api.FeatureGroupApi")
        mocker.patch("exfs.core.storage_connector_api.StorageConnectorApi")
        fs = _feature_store(backend_fixtures)
        connector = storage_connector.JdbcConnector(
            id=1, name="warehouse", featurestore_id=67
        )

        # Act
        with pytest.raises(exceptions.FeatureStoreException):
            fs.create_external_feature_group(
                "prices",
                storage_connector=connector,
                query="SELECT * FROM prices",
                primary_key=["isin"],
                features=[Feature("symbol", type="string")],
            )
