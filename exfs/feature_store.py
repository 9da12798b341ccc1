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

import datetime
import warnings
from typing import Any, Dict, List, Optional, Union

import humps
from exfs import feature, feature_group, storage_connector, util
from exfs.core import feature_group_api, storage_connector_api
from exfs.decorators import typechecked
from exfs.statistics_config import StatisticsConfig


@typechecked
class FeatureStore:
    DEFAULT_VERSION = 1

    def __init__(
        self,
        featurestore_id: int,
        featurestore_name: str,
        created: Union[str, datetime.datetime],
        project_name: str,
        project_id: int,
        offline_featurestore_name: str,
        online_enabled: bool,
        num_feature_groups: Optional[int] = None,
        num_storage_connectors: Optional[int] = None,
        online_featurestore_name: Optional[str] = None,
        **kwargs,
    ) -> None:
        self._id = featurestore_id
        self._name = featurestore_name
        self._created = created
        self._project_name = project_name
        self._project_id = project_id
        self._online_feature_store_name = online_featurestore_name
        self._offline_feature_store_name = offline_featurestore_name
        self._online_enabled = online_enabled
        self._num_feature_groups = num_feature_groups
        self._num_storage_connectors = num_storage_connectors

        self._feature_group_api: feature_group_api.FeatureGroupApi = (
            feature_group_api.FeatureGroupApi()
        )
        self._storage_connector_api: storage_connector_api.StorageConnectorApi = (
            storage_connector_api.StorageConnectorApi()
        )

    @classmethod
    def from_response_json(cls, json_dict: Dict[str, Any]) -> FeatureStore:
        json_decamelized = humps.decamelize(json_dict)
        # fields below are not used by the client
        json_decamelized.pop("hdfs_store_path", None)
        json_decamelized.pop("featurestore_description", None)
        json_decamelized.pop("inode_id", None)
        return cls(**json_decamelized)

    def get_external_feature_group(
        self, name: str, version: Optional[int] = None
    ) -> "feature_group.ExternalFeatureGroup":
        """Get an external feature group entity from the feature store.

        Getting an external feature group from the Feature Store means getting its
        metadata handle so you can subsequently read the data into a Pandas or
        Polars DataFrame or use the `Query`-API to select a subset of its features.

        !!! example
            ```python
            # connect to the Feature Store
            fs = ...

            prices_fg = fs.get_external_feature_group("prices", version=1)
            ```
        # Arguments
            name: Name of the external feature group to get.
            version: Version of the external feature group to retrieve,
                defaults to `None` and will return the `version=1`.

        # Returns
            `ExternalFeatureGroup`: The external feature group metadata object.

        # Raises
            `exfs.client.exceptions.RestAPIError`: If unable to retrieve feature group from the feature store.
        """
        if version is None:
            warnings.warn(
                "No version provided for getting feature group `{}`, defaulting to `{}`.".format(
                    name, self.DEFAULT_VERSION
                ),
                util.VersionWarning,
                stacklevel=1,
            )
            version = self.DEFAULT_VERSION
        feature_group_object = self._feature_group_api.get(
            self.id,
            name,
            version,
        )
        feature_group_object.feature_store = self
        return feature_group_object

    def get_external_feature_groups(
        self, name: str
    ) -> List["feature_group.ExternalFeatureGroup"]:
        """Get a list of all versions of an external feature group entity from the feature store.

        !!! example
            ```python
            prices_fgs = fs.get_external_feature_groups("prices")
            ```

        # Arguments
            name: Name of the external feature group to get.

        # Returns
            `List[ExternalFeatureGroup]`: List of external feature group metadata objects.

        # Raises
            `exfs.client.exceptions.RestAPIError`: If unable to retrieve feature group from the feature store.
        """
        feature_group_objects = self._feature_group_api.get(self.id, name, None)
        for fg_object in feature_group_objects:
            fg_object.feature_store = self
        return feature_group_objects

    def get_storage_connector(self, name: str) -> "storage_connector.StorageConnector":
        """Get a previously created storage connector from the feature store.

        Storage connectors encapsulate all information needed to read from a
        specific external source. This source can be S3 or a JDBC compliant
        database.

        If you want to connect to the online feature store, see the
        `get_online_storage_connector` method to get the JDBC connector for the Online
        Feature Store.

        !!! example
            ```python
            # connect to the Feature Store
            fs = ...

            sc = fs.get_storage_connector("warehouse")
            ```

        # Arguments
            name: Name of the storage connector to retrieve.

        # Returns
            `StorageConnector`. Storage connector object.
        """
        return self._storage_connector_api.get(self._id, name)

    def get_online_storage_connector(self) -> "storage_connector.StorageConnector":
        """Get the storage connector for the Online Feature Store of the respective
        project's feature store.

        !!! example
            ```python
            online_storage_connector = fs.get_online_storage_connector()
            ```

        # Returns
            `StorageConnector`. JDBC storage connector to the Online Feature Store.
        """
        return self._storage_connector_api.get_online_connector(self._id)

    def create_external_feature_group(
        self,
        name: str,
        storage_connector: storage_connector.StorageConnector,
        query: Optional[str] = None,
        data_format: Optional[str] = None,
        path: Optional[str] = "",
        options: Optional[Dict[str, str]] = None,
        version: Optional[int] = None,
        description: Optional[str] = "",
        primary_key: Optional[List[str]] = None,
        features: Optional[List[feature.Feature]] = None,
        statistics_config: Optional[Union[StatisticsConfig, bool, dict]] = None,
        event_time: Optional[str] = None,
        online_enabled: Optional[bool] = False,
        topic_name: Optional[str] = None,
        notification_topic_name: Optional[str] = None,
    ) -> "feature_group.ExternalFeatureGroup":
        """Create an external feature group metadata object.

        !!! example
            ```python
            # connect to the Feature Store
            fs = ...

            prices_fg = fs.create_external_feature_group(
                                name="prices",
                                version=1,
                                description="Daily closing prices",
                                query="SELECT symbol, ts, price FROM prices",
                                storage_connector=connector,
                                primary_key=['symbol'],
                                event_time='ts'
                                )
            ```

        !!! note "Lazy"
            This method is lazy and does not persist any metadata in the
            feature store on its own. To persist the feature group metadata in the feature store,
            call the `save()` method.

        You can enable online storage for external feature groups, however, the sync from the
        external storage to the online storage needs to be done manually:

        ```python
        prices_fg = fs.create_external_feature_group(
                    name="prices",
                    version=1,
                    query="SELECT symbol, ts, price FROM prices",
                    storage_connector=connector,
                    primary_key=['symbol'],
                    event_time='ts',
                    online_enabled=True
                    )
        prices_fg.save()

        # read from external storage and filter data to sync to online
        df = prices_fg.read()
        df = df[df["symbol"] == "ACME"]

        # insert to online storage
        prices_fg.insert(df)
        ```

        # Arguments
            name: Name of the external feature group to create.
            storage_connector: the storage connector to use to establish connectivity
                with the data source.
            query: A string containing a SQL query valid for the target data source.
                The query will be used to pull data from the data source when the
                feature group is used.
            data_format: If the external feature group refers to a directory with data,
                the data format to use when reading it (`"csv"`, `"tsv"` or `"parquet"`).
            path: The location within the scope of the storage connector, from where to read
                the data for the external feature group.
            options: Additional options to be used by the engine when reading data from the
                specified storage connector. For example, `{"delimiter": ";"}` when reading
                CSV files.
            version: Version of the external feature group, defaults to `None` and
                the feature store assigns the next free version on `save()`.
            description: A string describing the contents of the external feature group to
                improve discoverability for Data Scientists, defaults to empty string
                `""`.
            primary_key: A list of feature names to be used as primary key for the
                feature group. Defaults to empty list `[]`, and the feature group won't
                have any primary key.
            features: Optionally, define the schema of the external feature group manually as a
                list of `Feature` objects. Defaults to empty list `[]` and will use the
                schema information of the DataFrame resulting by reading the data source.
            statistics_config: A configuration object, or a dictionary with keys
                "`enabled`" to generally enable descriptive statistics computation for
                this external feature group, `"correlations`" to turn on feature correlation
                computation, `"histograms"` to compute feature value frequencies and
                `"exact_uniqueness"` to compute uniqueness, distinctness and entropy.
                The values should be booleans indicating the setting. To fully turn off
                statistics computation pass `statistics_config=False`. Defaults to
                `None` and will compute only descriptive statistics.
            event_time: Optionally, provide the name of the feature containing the event
                time for the features in this feature group. Defaults to `None`.
            online_enabled: Define whether it should be possible to sync the feature group to
                the online feature store for low latency access, defaults to `False`.
            topic_name: Optionally, define the name of the topic used for data ingestion. If left undefined it
                defaults to using project topic.
            notification_topic_name: Optionally, define the name of the topic used for sending notifications when entries
                are inserted or updated on the online feature store. If left undefined no notifications are sent.

        # Returns
            `ExternalFeatureGroup`. The external feature group metadata object.

        # Raises
            `exfs.client.exceptions.FeatureStoreException`. If the primary key or event
                time is not a feature of the given schema.
        """
        feature_group_object = feature_group.ExternalFeatureGroup(
            name=name,
            query=query,
            data_format=data_format,
            path=path,
            options=options or {},
            storage_connector=storage_connector,
            version=version,
            description=description,
            primary_key=primary_key or [],
            featurestore_id=self._id,
            featurestore_name=self._name,
            features=features or [],
            statistics_config=statistics_config,
            event_time=event_time,
            online_enabled=online_enabled,
            topic_name=topic_name,
            notification_topic_name=notification_topic_name,
        )
        feature_group_object.feature_store = self
        return feature_group_object

    @property
    def id(self) -> int:
        """Id of the feature store."""
        return self._id

    @property
    def name(self) -> str:
        """Name of the feature store."""
        return self._name

    @property
    def project_name(self) -> str:
        """Name of the project in which the feature store is located."""
        return self._project_name

    @property
    def project_id(self) -> int:
        """Id of the project in which the feature store is located."""
        return self._project_id

    @property
    def online_featurestore_name(self) -> Optional[str]:
        """Name of the online feature store database."""
        return self._online_feature_store_name

    @property
    def online_enabled(self) -> bool:
        """Indicator whether online feature store is enabled."""
        return self._online_enabled

    @property
    def offline_featurestore_name(self) -> str:
        """Name of the offline feature store database."""
        return self._offline_feature_store_name
