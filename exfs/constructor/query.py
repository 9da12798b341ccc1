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
import warnings
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd
import polars as pl
from exfs import engine, storage_connector, util
from exfs import feature_group as fg_mod
from exfs.client.exceptions import FeatureStoreException
from exfs.constructor.fs_query import FsQuery
from exfs.core import query_constructor_api, storage_connector_api
from exfs.decorators import typechecked
from exfs.feature import Feature


@typechecked
class Query:
    """Lazy selection of features of an external feature group.

    A query holds its own copy of the selected features and exposes no
    operation to change them, so queries built from the same feature group
    never affect each other or the feature group.
    """

    ERROR_MESSAGE_FEATURE_NOT_FOUND = (
        "Feature name '{}' could not found be found in query."
    )

    def __init__(
        self,
        left_feature_group: fg_mod.ExternalFeatureGroup,
        left_features: List[Union[str, Feature, Dict]],
        feature_store_name: Optional[str] = None,
        feature_store_id: Optional[int] = None,
        **kwargs,
    ) -> None:
        self._feature_store_name = feature_store_name
        self._feature_store_id = feature_store_id
        self._left_feature_group = left_feature_group
        self._left_features: Tuple[Feature, ...] = tuple(
            copy.copy(feat) for feat in util.parse_features(list(left_features))
        )
        self._query_constructor_api: "query_constructor_api.QueryConstructorApi" = (
            query_constructor_api.QueryConstructorApi()
        )
        self._storage_connector_api: "storage_connector_api.StorageConnectorApi" = (
            storage_connector_api.StorageConnectorApi()
        )

    def _prep_read(
        self, online: bool, read_options: Dict[str, Any]
    ) -> Tuple[str, Optional["storage_connector.JdbcConnector"]]:
        self._check_read_supported(online)
        fs_query = self._query_constructor_api.construct_query(self)

        if online:
            sql_query = self._to_string(fs_query, online)
            online_conn = self._storage_connector_api.get_online_connector(
                self._feature_store_id
            )
        else:
            online_conn = None
            sql_query = self._to_string(fs_query, online)
            # Register external feature groups as temporary tables
            fs_query.register_external(read_options)

        return sql_query, online_conn

    def read(
        self,
        online: bool = False,
        dataframe_type: str = "default",
        read_options: Optional[Dict[str, Any]] = None,
    ) -> Union[pd.DataFrame, pl.DataFrame, np.ndarray, List[List[Any]]]:
        """Read the specified query into a DataFrame.

        It is possible to specify the storage (online/offline) to read from and the
        type of the output DataFrame (Pandas, Polars, Numpy, Python Lists).

        # Arguments
            online: Read from online storage. Defaults to `False`.
            dataframe_type: DataFrame type to return. Defaults to `"default"`.
            read_options: Dictionary of read options, handed to the engine
                without interpretation. Defaults to `{}`.

        # Returns
            `DataFrame`: DataFrame depending on the chosen type.

        # Raises
            `exfs.client.exceptions.FeatureStoreException`: If reading online from a
                feature group which is not online enabled.
            `exfs.client.exceptions.RestAPIError`: If the query could not be constructed.
        """
        if not read_options:
            read_options = {}
        sql_query, online_conn = self._prep_read(online, read_options)

        return engine.get_instance().sql(
            sql_query,
            self._feature_store_name,
            online_conn,
            dataframe_type,
            read_options,
        )

    def show(self, n: int, online: bool = False) -> pd.DataFrame:
        """Show the first N rows of the Query.

        !!! example "Show the first 10 rows"
            ```python
            fg = fs.get_external_feature_group("...")

            query = fg.select(["symbol", "price"])

            query.show(10)
            ```

        # Arguments
            n: Number of rows to show.
            online: Show from online storage. Defaults to `False`.
        """
        read_options = {}
        sql_query, online_conn = self._prep_read(online, read_options)
        return engine.get_instance().show(
            sql_query, self._feature_store_name, n, online_conn, read_options
        )

    def json(self) -> str:
        return json.dumps(self, cls=util.FeatureStoreEncoder)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "featureStoreName": self._feature_store_name,
            "featureStoreId": self._feature_store_id,
            "leftFeatureGroup": self._left_feature_group,
            "leftFeatures": list(self._left_features),
            "joins": [],
            "hiveEngine": True,
        }

    def _check_read_supported(self, online: bool) -> None:
        if not isinstance(online, bool):
            warnings.warn(
                f"Passed {online} as value to online kwarg for `read` method. The `online` parameter is expected to be a boolean"
                + " to specify whether to read from the Online Feature Store.",
                stacklevel=1,
            )
        if online and self._left_feature_group.online_enabled is False:
            raise FeatureStoreException(
                f"Found {self._left_feature_group.name} in query Feature Groups which is not `online_enabled`."
                + "If you intend to use the Online Feature Store, please enable the Feature Group"
                + " for online serving by setting `online_enabled=True` on creation. Otherwise, set online=False"
                + " when using the `read` method."
            )

    def _to_string(self, fs_query: "FsQuery", online: bool = False) -> str:
        if online:
            return fs_query.query_online
        return fs_query.query

    def __str__(self) -> str:
        return self._query_constructor_api.construct_query(self).query

    def __repr__(self) -> str:
        return f"Query({self._left_feature_group.name!r}, {[f.name for f in self._left_features]!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Query):
            return NotImplemented
        return self._left_feature_group is other._left_feature_group and [
            f.name for f in self._left_features
        ] == [f.name for f in other._left_features]

    def __hash__(self) -> int:
        return hash(
            (id(self._left_feature_group), tuple(f.name for f in self._left_features))
        )

    @property
    def left_feature_group(self) -> fg_mod.ExternalFeatureGroup:
        """Feature group the features of the query are selected from."""
        return self._left_feature_group

    @property
    def featuregroups(self) -> List[fg_mod.ExternalFeatureGroup]:
        """List of feature groups used in the query"""
        return [self._left_feature_group]

    @property
    def features(self) -> List[Feature]:
        """List of all features in the query"""
        return list(self._left_features)

    @property
    def feature_store_name(self) -> Optional[str]:
        return self._feature_store_name

    @property
    def feature_store_id(self) -> Optional[int]:
        return self._feature_store_id

    def get_feature(self, feature_name: str) -> Feature:
        """
        Get a feature by name.

        # Arguments
            feature_name: `str`. Name of the feature to get.

        # Returns
            `Feature`. Feature object.

        # Raises
            `exfs.client.exceptions.FeatureStoreException`: If the query does not
                select a feature with that name.
        """
        name = util.autofix_feature_name(feature_name)
        for feat in self._left_features:
            if feat.name == name:
                return feat
        raise FeatureStoreException(
            Query.ERROR_MESSAGE_FEATURE_NOT_FOUND.format(feature_name)
        )

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self.get_feature(name)
        except FeatureStoreException as err:
            raise AttributeError(f"'Query' object has no attribute '{name}'. ") from err

    def __getitem__(self, name: str) -> Feature:
        return self.get_feature(name)
