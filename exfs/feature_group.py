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

import copy
import json
import logging
import warnings
from datetime import datetime
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Optional,
    Union,
)

import humps
import numpy as np
import pandas as pd
import polars as pl
from exfs import engine, feature, util
from exfs import storage_connector as sc
from exfs.client.exceptions import (
    FeatureGroupConfigurationError,
    FeatureStoreException,
    UnsupportedOperationException,
)
from exfs.constructor import query
from exfs.core import (
    external_feature_group_engine,
    feature_store_api,
    statistics_engine,
)
from exfs.data_source import DataSource
from exfs.decorators import typechecked
from exfs.statistics import Statistics
from exfs.statistics_config import StatisticsConfig
from fastavro.schema import SchemaParseException, parse_schema


if TYPE_CHECKING:
    from exfs import feature_store as feature_store_mod


_logger = logging.getLogger(__name__)


class FeatureGroupBase:
    """Identity, schema and statistics behaviour shared by feature group variants."""

    ENTITY_TYPE = "featuregroups"

    def __init__(
        self,
        name: Optional[str],
        version: Optional[int],
        featurestore_id: Optional[int],
        location: Optional[str],
        event_time: Optional[str] = None,
        online_enabled: bool = False,
        id: Optional[int] = None,
        online_topic_name: Optional[str] = None,
        topic_name: Optional[str] = None,
        notification_topic_name: Optional[str] = None,
        deprecated: bool = False,
        **kwargs,
    ) -> None:
        self._version = version
        self._name = name
        self.event_time = event_time
        self._online_enabled = online_enabled
        self._location = location
        self._id = id
        self._subject = None
        self._online_topic_name = online_topic_name
        self._topic_name = topic_name
        self._notification_topic_name = notification_topic_name
        self._deprecated = deprecated
        self._feature_store_id = featurestore_id
        self._feature_store = None

        self._statistics_engine: statistics_engine.StatisticsEngine = (
            statistics_engine.StatisticsEngine(featurestore_id, self.ENTITY_TYPE)
        )

        self.check_deprecated()

    def check_deprecated(self) -> None:
        if self.deprecated:
            warnings.warn(
                f"Feature Group `{self._name}`, version `{self._version}` is deprecated",
                stacklevel=1,
            )

    def select_all(
        self,
        include_primary_key: Optional[bool] = True,
        include_event_time: Optional[bool] = True,
    ) -> query.Query:
        """Select all features in the feature group and return a query object.

        !!! example
            ```python
            from exfs.feature import Feature
            fg = fs.create_external_feature_group(
                    "prices",
                    storage_connector=connector,
                    query="SELECT * FROM prices",
                    features=[
                            Feature("symbol", type="string"),
                            Feature("ts", type="bigint"),
                            Feature("price", type="double")
                            ],
                    primary_key=["symbol"],
                    event_time="ts")

            query = fg.select_all()
            query.features
            # [Feature('symbol', ...), Feature('ts', ...), Feature('price', ...)]

            query = fg.select_all(include_primary_key=False, include_event_time=False)
            query.features
            # [Feature('price', ...)]
            ```

        # Arguments
            include_primary_key: If True, include primary key of the feature group
                to the feature list. Defaults to True.
            include_event_time: If True, include event time of the feature group
                to the feature list. Defaults to True.
        # Returns
            `Query`. A query object with all features of the feature group.
        """
        if include_event_time and include_primary_key:
            return query.Query(
                left_feature_group=self,
                left_features=self._features or [],
                feature_store_name=self._feature_store_name,
                feature_store_id=self._feature_store_id,
            )
        excluded = []
        if not include_primary_key:
            excluded += self.primary_key
        if not include_event_time and self.event_time:
            excluded.append(self.event_time)
        return self.select_except(excluded)

    def select(self, features: List[Union[str, feature.Feature]]) -> query.Query:
        """Select a subset of features of the feature group and return a query object.

        The features are selected in the given order. Names are not checked
        against the schema of the feature group until the query is read.

        !!! example
            ```python
            query = fg.select(["price", "symbol"])
            query.features
            # [Feature('price', ...), Feature('symbol', ...)]
            ```

        # Arguments
            features: A list of `Feature` objects or feature names as
                strings to be selected.

        # Returns
            `Query`: A query object with the selected features of the feature group.
        """
        return query.Query(
            left_feature_group=self,
            left_features=list(features),
            feature_store_name=self._feature_store_name,
            feature_store_id=self._feature_store_id,
        )

    def select_features(self, features: List[feature.Feature]) -> query.Query:
        """Select the given `Feature` objects and return a query object.

        # Arguments
            features: A list of `Feature` objects, selected in the given order.

        # Returns
            `Query`: A query object with the selected features of the feature group.
        """
        return self.select(features)

    def select_except(
        self, features: Optional[List[Union[str, feature.Feature]]] = None
    ) -> query.Query:
        """Select all features of the feature group except the provided `features`
        and return a query object.

        The remaining features keep the order of the feature group schema.

        !!! example
            ```python
            query = fg.select_except(["ts"])
            query.features
            # [Feature('symbol', ...), Feature('price', ...)]
            ```

        # Arguments
            features: A list of `Feature` objects or feature names as
                strings to be excluded from the selection. Defaults to [],
                selecting all features.

        # Returns
            `Query`: A query object with the selected features of the feature group.
        """
        if features:
            except_features = {
                f.name if isinstance(f, feature.Feature) else util.autofix_feature_name(f)
                for f in features
            }
            return query.Query(
                left_feature_group=self,
                left_features=[
                    f for f in self._features or [] if f.name not in except_features
                ],
                feature_store_name=self._feature_store_name,
                feature_store_id=self._feature_store_id,
            )
        else:
            return self.select_all()

    def select_except_features(
        self, features: Optional[List[feature.Feature]] = None
    ) -> query.Query:
        """Select all features except the given `Feature` objects and return a query object.

        # Arguments
            features: A list of `Feature` objects to be excluded from the selection.

        # Returns
            `Query`: A query object with the remaining features in schema order.
        """
        return self.select_except(features)

    def get_feature(self, name: str) -> feature.Feature:
        """Retrieve a `Feature` object from the schema of the feature group.

        There are several ways to access features of a feature group:

        !!! example
            ```python
            fg.price
            fg["price"]
            fg.get_feature("price")
            ```

        !!! note
            Attribute access to features works only for non-reserved names. For example
            features named `id` or `name` will not be accessible via `fg.name`, instead
            this will return the name of the feature group itself. Fall back on using
            the `get_feature` method.

        # Arguments:
            name: The name of the feature to retrieve

        # Returns:
            Feature: The feature object

        # Raises
            `exfs.client.exceptions.FeatureStoreException`.
        """
        try:
            return self.__getitem__(name)
        except KeyError as err:
            raise FeatureStoreException(
                f"'FeatureGroup' object has no feature called '{name}'."
            ) from err

    def update_statistics_config(self) -> "FeatureGroupBase":
        """Update the statistics configuration of the feature group.

        Change the `statistics_config` object and persist the changes by calling
        this method.

        !!! example
            ```python
            fg.statistics_config.histograms = True
            fg.update_statistics_config()
            ```

        # Returns
            `FeatureGroup`. The updated metadata object of the feature group.

        # Raises
            `exfs.client.exceptions.RestAPIError`.
        """
        self._feature_group_engine.update_statistics_config(self)
        return self

    def update_description(self, description: str) -> "FeatureGroupBase":
        """Update the description of the feature group.

        !!! info "Safe update"
            This method updates the feature group description safely. In case of failure
            your local metadata object will keep the old description.

        # Arguments
            description: New description string.

        # Returns
            `FeatureGroup`. The updated feature group object.
        """
        self._feature_group_engine.update_description(self, description)
        return self

    def update_features(
        self, features: Union[feature.Feature, List[feature.Feature]]
    ) -> "FeatureGroupBase":
        """Add features to the schema of the feature group.

        Behaves like `append_features`: the schema only grows, features
        with a name already in the schema are rejected.

        # Arguments
            features: `Feature` or list of features.

        # Returns
            `FeatureGroup`. The updated feature group object.

        # Raises
            `exfs.client.exceptions.FeatureStoreException`. If a name collides
                with an existing feature or is provided twice.
        """
        return self.append_features(features)

    def update_feature_description(
        self, feature_name: str, description: str
    ) -> "FeatureGroupBase":
        """Update the description of a single feature in this feature group.

        !!! example
            ```python
            fg.update_feature_description(feature_name="price",
                                          description="Closing price in USD.")
            ```

        !!! info "Safe update"
            This method updates the feature description safely. In case of failure
            your local metadata object will keep the old description.

        # Arguments
            feature_name: Name of the feature to be updated.
            description: New description string.

        # Returns
            `FeatureGroup`. The updated feature group object.
        """
        f_copy = copy.deepcopy(self.get_feature(feature_name))
        f_copy.description = description
        self._feature_group_engine.update_feature_description(self, f_copy)
        return self

    def append_features(
        self, features: Union[feature.Feature, List[feature.Feature]]
    ) -> "FeatureGroupBase":
        """Append features to the schema of the feature group.

        !!! example
            ```python
            fg.append_features(Feature(name="volume", type="bigint"))
            ```

        !!! info "Safe append"
            This method appends the features to the feature group description safely.
            In case of failure your local metadata object will contain the correct
            schema.

        It is only possible to append features to a feature group. Removing
        features is considered a breaking change.

        # Arguments
            features: Feature or list. A feature object or list thereof to append to
                the schema of the feature group.

        # Returns
            `FeatureGroup`. The updated feature group object.

        # Raises
            `exfs.client.exceptions.FeatureStoreException`. If a name collides
                with an existing feature or is provided twice.
        """
        new_features = []
        if isinstance(features, feature.Feature):
            new_features.append(features)
        elif isinstance(features, list):
            for feat in features:
                if isinstance(feat, feature.Feature):
                    new_features.append(feat)
                else:
                    raise TypeError(
                        "The argument `features` has to be of type `Feature` or "
                        "a list thereof, but an element is of type: `{}`".format(
                            type(feat)
                        )
                    )
        else:
            raise TypeError(
                "The argument `features` has to be of type `Feature` or a list "
                "thereof, but is of type: `{}`".format(type(features))
            )
        self._feature_group_engine.append_features(self, new_features)
        return self

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self.__getitem__(name)
        except KeyError as err:
            raise AttributeError(
                f"'FeatureGroup' object has no attribute '{name}'. "
                "If you are trying to access a feature, fall back on "
                "using the `get_feature` method."
            ) from err

    def __getitem__(self, name: str) -> feature.Feature:
        if not isinstance(name, str):
            raise TypeError(
                f"Expected type `str`, got `{type(name)}`. "
                "Features are accessible by name."
            )
        name = util.autofix_feature_name(name)
        matches = [
            f for f in self.__getattribute__("_features") or [] if f.name == name
        ]
        if len(matches) == 1:
            return matches[0]
        else:
            raise KeyError(f"'FeatureGroup' object has no feature called '{name}'.")

    @property
    def statistics_config(self) -> StatisticsConfig:
        """Statistics configuration object defining the settings for statistics
        computation of the feature group."""
        return self._statistics_config

    @statistics_config.setter
    def statistics_config(
        self,
        statistics_config: Optional[Union[StatisticsConfig, Dict[str, Any], bool]],
    ) -> None:
        self._statistics_config = StatisticsConfig.from_value(statistics_config)

    @property
    def feature_store_id(self) -> Optional[int]:
        return self._feature_store_id

    @property
    def feature_store(self) -> "feature_store_mod.FeatureStore":
        if self._feature_store is None:
            self._feature_store = feature_store_api.FeatureStoreApi().get(
                self._feature_store_id
            )
        return self._feature_store

    @feature_store.setter
    def feature_store(self, feature_store: "feature_store_mod.FeatureStore") -> None:
        self._feature_store = feature_store

    @property
    def name(self) -> Optional[str]:
        """Name of the feature group."""
        return self._name

    @property
    def version(self) -> Optional[int]:
        """Version number of the feature group."""
        return self._version

    def get_fg_name(self) -> str:
        return f"{self.name}_{self.version}"

    @property
    def statistics(self) -> Optional[Statistics]:
        """Get the latest computed statistics for the whole feature group."""
        return self._statistics_engine.get(self)

    @property
    def primary_key(self) -> List[str]:
        """List of features building the primary key."""
        return self._primary_key

    @primary_key.setter
    def primary_key(self, new_primary_key: Optional[List[str]]) -> None:
        self._primary_key = [
            util.autofix_feature_name(pk) for pk in (new_primary_key or [])
        ]

    def get_statistics(
        self,
        computation_time: Optional[Union[str, int, datetime]] = None,
        feature_names: Optional[List[str]] = None,
    ) -> Optional[Statistics]:
        """Returns the statistics computed at a specific time for the current feature group.

        If `computation_time` is `None`, the most recent statistics are returned.

        !!! example
            ```python
            fg_statistics = fg.get_statistics(computation_time=None)
            ```

        # Arguments
            computation_time: Date and time when statistics were computed. Defaults to `None`. Strings should
                be formatted in one of the following formats `%Y-%m-%d`, `%Y-%m-%d %H`, `%Y-%m-%d %H:%M`, `%Y-%m-%d %H:%M:%S`,
                or `%Y-%m-%d %H:%M:%S.%f`.
            feature_names: List of feature names of which statistics are retrieved.
        # Returns
            `Statistics`. Statistics object, `None` if no statistics were computed yet.

        # Raises
            `exfs.client.exceptions.RestAPIError`
        """
        return self._statistics_engine.get(
            self, computation_time=computation_time, feature_names=feature_names
        )

    def get_all_statistics(
        self,
        computation_time: Optional[Union[str, int, datetime]] = None,
        feature_names: Optional[List[str]] = None,
    ) -> Optional[List[Statistics]]:
        """Returns all the statistics metadata computed before a specific time for the current feature group.

        If `computation_time` is `None`, all the statistics metadata are returned.

        # Arguments
            computation_time: Date and time when statistics were computed. Defaults to `None`.
            feature_names: List of feature names of which statistics are retrieved.

        # Returns
            `List[Statistics]`. Statistics objects.

        # Raises
            `exfs.client.exceptions.RestAPIError`
        """
        return self._statistics_engine.get_all(
            self, computation_time=computation_time, feature_names=feature_names
        )

    def compute_statistics(self) -> Optional[Statistics]:
        """Recompute the statistics for the feature group and save them to the
        feature store.

        The feature group is read in full from its external source. Nothing is
        read when statistics are disabled in the `statistics_config`.

        !!! example
            ```python
            statistics_metadata = fg.compute_statistics()
            ```

        # Returns
            `Statistics`. The statistics metadata object, `None` if statistics are disabled.

        # Raises
            `exfs.client.exceptions.RestAPIError`. Unable to persist the statistics.
        """
        if self.statistics_config.enabled:
            return self._statistics_engine.compute_and_save_statistics(self)
        _logger.info(
            "The statistics are not enabled of feature group `%s`, with version"
            " `%s`. No statistics computed.",
            self._name,
            self._version,
        )
        return None

    @property
    def event_time(self) -> Optional[str]:
        """Event time feature in the feature group."""
        return self._event_time

    @event_time.setter
    def event_time(self, feature_name: Optional[str]) -> None:
        if feature_name is None:
            self._event_time = None
            return
        elif isinstance(feature_name, str):
            self._event_time = util.autofix_feature_name(feature_name)
            return

        raise ValueError(
            "event_time must be a string corresponding to an existing feature name of the Feature Group."
        )

    @property
    def location(self) -> Optional[str]:
        return self._location

    @property
    def online_enabled(self) -> bool:
        """Setting if the feature group is available in online storage."""
        return self._online_enabled

    @online_enabled.setter
    def online_enabled(self, online_enabled: bool) -> None:
        self._online_enabled = online_enabled

    @property
    def online_topic_name(self) -> Optional[str]:
        """The topic used for online feature group data ingestion."""
        return self._online_topic_name

    @property
    def topic_name(self) -> Optional[str]:
        """The topic used for feature group data ingestion."""
        return self._topic_name

    @topic_name.setter
    def topic_name(self, topic_name: Optional[str]) -> None:
        self._topic_name = topic_name

    @property
    def notification_topic_name(self) -> Optional[str]:
        """The topic used for feature group notifications."""
        return self._notification_topic_name

    @notification_topic_name.setter
    def notification_topic_name(self, notification_topic_name: Optional[str]) -> None:
        self._notification_topic_name = notification_topic_name

    @property
    def deprecated(self) -> bool:
        """Setting if the feature group is deprecated."""
        return self._deprecated

    @property
    def subject(self) -> Dict[str, Any]:
        """Subject of the feature group."""
        if self._subject is None:
            # cache the schema
            self._subject = self._feature_group_engine.get_subject(self)
        return self._subject

    @property
    def avro_schema(self) -> str:
        """Avro schema representation of the feature group."""
        return self.subject["schema"]

    def get_complex_features(self) -> List[str]:
        """Returns the names of all features with a complex data type in this
        feature group.

        !!! example
            ```python
            complex_dtype_features = fg.get_complex_features()
            ```
        """
        return [f.name for f in self.features if f.is_complex()]

    def _get_encoded_avro_schema(self) -> str:
        complex_features = self.get_complex_features()
        schema = json.loads(self.avro_schema)

        for field in schema["fields"]:
            if field["name"] in complex_features:
                field["type"] = ["null", "bytes"]

        schema_s = json.dumps(schema)
        try:
            parse_schema(json.loads(schema_s))
        except (SchemaParseException, ValueError) as e:
            raise FeatureStoreException(
                "Failed to construct Avro Schema: {}".format(e)
            ) from e
        return schema_s

    def _get_feature_avro_schema(self, feature_name: str) -> str:
        for field in json.loads(self.avro_schema)["fields"]:
            if field["name"] == feature_name:
                return json.dumps(field["type"])

    @property
    def features(self) -> List["feature.Feature"]:
        """Feature Group schema (alias)"""
        return self._features

    @property
    def schema(self) -> List["feature.Feature"]:
        """Feature Group schema"""
        return self._features

    @features.setter
    def features(self, new_features: List["feature.Feature"]) -> None:
        self._features = new_features


@typechecked
class ExternalFeatureGroup(FeatureGroupBase):
    """Feature group whose data is stored in an external source.

    The feature store keeps the metadata of the group (schema, keys, the
    source it points to). The data is read from the source through the
    storage connector of the group and can additionally be written to the
    online storage with `insert`.
    """

    EXTERNAL_FEATURE_GROUP = "ON_DEMAND_FEATURE_GROUP"
    ENTITY_TYPE = "featuregroups"

    def __init__(
        self,
        storage_connector: Optional[Union[sc.StorageConnector, Dict[str, Any]]],
        query: Optional[str] = None,
        data_format: Optional[str] = None,
        path: Optional[str] = None,
        options: Optional[Union[Dict[str, Any], List[Dict[str, Any]]]] = None,
        name: Optional[str] = None,
        version: Optional[int] = None,
        description: Optional[str] = None,
        primary_key: Optional[List[str]] = None,
        featurestore_id: Optional[int] = None,
        featurestore_name: Optional[str] = None,
        created: Optional[str] = None,
        creator: Optional[Dict[str, Any]] = None,
        id: Optional[int] = None,
        features: Optional[Union[List[Dict[str, Any]], List[feature.Feature]]] = None,
        location: Optional[str] = None,
        statistics_config: Optional[Union[StatisticsConfig, Dict[str, Any], bool]] = None,
        event_time: Optional[str] = None,
        online_enabled: bool = False,
        href: Optional[str] = None,
        online_topic_name: Optional[str] = None,
        topic_name: Optional[str] = None,
        notification_topic_name: Optional[str] = None,
        deprecated: bool = False,
        **kwargs,
    ) -> None:
        if name is None:
            raise FeatureGroupConfigurationError("name")
        if storage_connector is None:
            raise FeatureGroupConfigurationError("storage_connector")

        super().__init__(
            name,
            version,
            featurestore_id,
            location,
            event_time=event_time,
            online_enabled=online_enabled,
            id=id,
            online_topic_name=online_topic_name,
            topic_name=topic_name,
            notification_topic_name=notification_topic_name,
            deprecated=deprecated,
        )

        self._feature_store_name = featurestore_name
        self._description = description
        self._created = created
        self._creator = creator
        self._href = href

        self._features = [
            feature.Feature.from_response_json(feat) if isinstance(feat, dict) else feat
            for feat in (features or [])
        ]
        if self._id and primary_key is None:
            # returned by the feature store, the keys are flagged on the features
            self.primary_key = [feat.name for feat in self._features if feat.primary]
        else:
            self.primary_key = primary_key
        self.statistics_config = statistics_config

        self._data_source = DataSource(
            storage_connector,
            query=query,
            path=path,
            data_format=data_format,
            options=options,
        )

        self._feature_group_engine: "external_feature_group_engine.ExternalFeatureGroupEngine" = external_feature_group_engine.ExternalFeatureGroupEngine(
            featurestore_id
        )

        if self._features:
            util.verify_attribute_key_names(self)

    def save(self) -> None:
        """Persist the metadata for this external feature group.

        Without calling this method, your feature group will only exist
        in your Python Kernel, but not in the feature store. When no features
        are given, the schema is inferred from the external source.

        ```python
        query = "SELECT * FROM prices"

        fg = feature_store.create_external_feature_group(name="prices",
            version=1,
            description="Daily closing prices",
            query=query,
            storage_connector=connector,
            primary_key=['symbol'],
            event_time='ts'
        )

        fg.save()
        ```

        If statistics are enabled, they are computed over the data of the
        external source afterwards. A failure while computing them does not
        undo the registration.

        # Raises
            `exfs.client.exceptions.RestAPIError`. Unable to register the feature group.
            `exfs.client.exceptions.FeatureStoreException`. The primary key or event
                time is not part of the schema.
        """
        self._feature_group_engine.save(self)

        if self.statistics_config.enabled:
            self._statistics_engine.compute_and_save_statistics(self)

    def insert(
        self,
        features: Union[pd.DataFrame, pl.DataFrame],
        write_options: Optional[Dict[str, Any]] = None,
        storage: Optional[str] = None,
    ) -> None:
        """Insert the dataframe feature values ONLY in the online feature store.

        External Feature Groups contain metadata about feature data in an external storage system.
        External storage systems are usually offline, meaning feature values cannot be retrieved in real-time.
        In order to use the feature values for real-time use-cases, you can insert them
        in the Online Feature Store via this method. The external source itself is never
        written to.

        The first insert registers the feature group if it was not saved yet. Afterwards
        the statistics are recomputed if they are enabled.

        !!! example
            ```python
            fg = fs.get_external_feature_group(name="prices", version=1)

            fg.insert(prices_df, write_options={"kafka_producer_config": {"linger.ms": 100}})
            ```

        # Arguments
            features: DataFrame. Features to be saved.
            write_options: Additional write options as key-value pairs, defaults to `{}`.
                They are handed to the engine unchanged and can contain the following entries:
                * key `kafka_producer_config` and value an object of type [properties](https://docs.confluent.io/platform/current/clients/librdkafka/html/md_CONFIGURATION.html)
                  used to configure the Kafka client.
                * key `internal_kafka` and value `True` or `False` in case you established
                  connectivity from you Python environment to the internal advertised
                  listeners of the Kafka Cluster. Defaults to `False`.
            storage: Not supported, external feature groups only accept writes to the
                online storage.

        # Raises
            `exfs.client.exceptions.UnsupportedOperationException`. If `storage` is provided.
            `exfs.client.exceptions.FeatureStoreException`. If the feature group is not
                online enabled or the dataframe does not match its schema.
            `exfs.client.exceptions.RestAPIError`. e.g fail to create feature group.
        """
        if storage is not None:
            raise UnsupportedOperationException(
                f"insert(storage={storage!r})", "external feature groups"
            )
        feature_dataframe = engine.get_instance().convert_to_default_dataframe(features)

        if write_options is None:
            write_options = {}

        self._feature_group_engine.insert(
            self,
            feature_dataframe=feature_dataframe,
            write_options=write_options,
        )

        self.compute_statistics()

    def insert_stream(self, features: Any, *args, **kwargs) -> None:
        """Not supported, the data of external feature groups is managed outside
        of the feature store.

        # Raises
            `exfs.client.exceptions.UnsupportedOperationException`. Always.
        """
        raise UnsupportedOperationException("insert_stream", "external feature groups")

    def read(
        self,
        online: bool = False,
        dataframe_type: str = "default",
        read_options: Optional[Dict[str, Any]] = None,
    ) -> Union[pd.DataFrame, pl.DataFrame, np.ndarray, List[List[Any]]]:
        """Get the feature group as a DataFrame.

        !!! example
            ```python
            fg = fs.get_external_feature_group(name="prices", version=1)

            df = fg.read()
            online_df = fg.read(online=True)
            ```

        # Arguments
            online: bool, optional. If `True` read from online feature store, defaults
                to `False`, reading from the external source.
            dataframe_type: str, optional. The type of the returned dataframe.
                Possible values are `"default"`, `"pandas"`, `"polars"`, `"numpy"` or `"python"`.
                Defaults to "default", which maps to a Pandas dataframe.
            read_options: Additional options as key/value pairs handed to the engine.
                Defaults to `None`.
        # Returns
            `DataFrame`: The dataframe containing the feature data.
            `pandas.DataFrame`. A Pandas DataFrame.
            `polars.DataFrame`. A Polars DataFrame.
            `numpy.ndarray`. A two-dimensional Numpy array.
            `list`. A two-dimensional Python list.

        # Raises
            `exfs.client.exceptions.RestAPIError`.
            `exfs.client.exceptions.FeatureStoreException`.
        """
        _logger.debug(
            "Getting feature group: %s from the featurestore %s",
            self._name,
            self._feature_store_name,
        )
        return self.select_all().read(
            online=online,
            dataframe_type=dataframe_type,
            read_options=read_options or {},
        )

    def show(self, n: int, online: bool = False) -> pd.DataFrame:
        """Show the first `n` rows of the feature group.

        !!! example
            ```python
            fg.show(5)
            fg.show(5, online=True)
            ```

        # Arguments
            n: int. Number of rows to show.
            online: bool, optional. If `True` read from online feature store, defaults
                to `False`.
        """
        return self.select_all().show(n, online)

    @classmethod
    def from_response_json(
        cls, json_dict: Union[Dict[str, Any], List[Dict[str, Any]]]
    ) -> Union["ExternalFeatureGroup", List["ExternalFeatureGroup"]]:
        json_decamelized = humps.decamelize(json_dict)
        if isinstance(json_decamelized, dict):
            _ = json_decamelized.pop("type", None)
            return cls(**json_decamelized)
        for fg in json_decamelized:
            _ = fg.pop("type", None)
        return [cls(**fg) for fg in json_decamelized]

    def update_from_response_json(
        self, json_dict: Dict[str, Any]
    ) -> "ExternalFeatureGroup":
        json_decamelized = humps.decamelize(json_dict)
        _ = json_decamelized.pop("type", None)
        # the backend does not return credentials, keep the connector of the user
        json_decamelized["storage_connector"] = self.storage_connector
        feature_store = self._feature_store
        self.__init__(**json_decamelized)
        self._feature_store = feature_store
        return self

    def json(self) -> str:
        return json.dumps(self, cls=util.FeatureStoreEncoder)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self._id,
            "name": self._name,
            "description": self._description,
            "version": self._version,
            "features": self._features,
            "featurestoreId": self._feature_store_id,
            "query": self._data_source.query,
            "dataFormat": self._data_source.data_format,
            "path": self._data_source.path,
            "options": [
                {"name": k, "value": v} for k, v in self._data_source.options.items()
            ]
            if self._data_source.options
            else None,
            "storageConnector": self._data_source.storage_connector.to_dict(),
            "type": "onDemandFeaturegroupDTO",
            "statisticsConfig": self._statistics_config,
            "eventTime": self._event_time,
            "onlineEnabled": self._online_enabled,
            "spine": False,
            "topicName": self.topic_name,
            "notificationTopicName": self.notification_topic_name,
            "deprecated": self.deprecated,
        }

    def __repr__(self) -> str:
        return f"ExternalFeatureGroup({self._name!r}, {self._version!r}, {self._id!r})"

    @property
    def id(self) -> Optional[int]:
        return self._id

    @property
    def description(self) -> Optional[str]:
        return self._description

    @description.setter
    def description(self, new_description: Optional[str]) -> None:
        self._description = new_description

    @property
    def data_source(self) -> DataSource:
        """Pointer to the data of the feature group in the external source."""
        return self._data_source

    @property
    def query(self) -> Optional[str]:
        return self._data_source.query

    @property
    def data_format(self) -> Optional[str]:
        return self._data_source.data_format

    @property
    def path(self) -> Optional[str]:
        return self._data_source.path

    @property
    def options(self) -> Dict[str, Any]:
        return self._data_source.options

    @property
    def storage_connector(self) -> "sc.StorageConnector":
        return self._data_source.storage_connector

    @property
    def time_travel_format(self) -> None:
        """External feature groups do not support time travel."""
        return None

    @property
    def creator(self) -> Optional[Dict[str, Any]]:
        return self._creator

    @property
    def created(self) -> Optional[str]:
        return self._created

    @property
    def feature_store_name(self) -> Optional[str]:
        """Name of the feature store in which the feature group is located."""
        return self._feature_store_name
