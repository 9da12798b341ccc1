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
import numpy as np
import pandas as pd
import polars as pl
from exfs import storage_connector as sc
from exfs import util


class DataSource:
    """Pointer to data stored outside of the feature store.

    A data source holds a query and/or a path bound to a storage connector.
    Both may be set, the connector decides which one it reads: query based
    connectors (JDBC) run the query, path based connectors (S3) read the path.
    """

    def __init__(
        self,
        storage_connector: Union[sc.StorageConnector, Dict[str, Any]],
        query: Optional[str] = None,
        path: Optional[str] = None,
        data_format: Optional[str] = None,
        options: Optional[Union[Dict[str, Any], List[Dict[str, Any]]]] = None,
        **kwargs,
    ) -> None:
        if isinstance(storage_connector, dict):
            storage_connector = sc.StorageConnector.from_response_json(
                storage_connector
            )
        self._storage_connector = storage_connector
        self._query = query
        self._path = path
        self._data_format = data_format.upper() if data_format else None
        if isinstance(options, list):
            # options are returned by the backend as a list of name/value pairs
            options = {option["name"]: option["value"] for option in options}
        self._options = options or {}

    @classmethod
    def from_response_json(
        cls, json_dict: Optional[Dict[str, Any]]
    ) -> Optional["DataSource"]:
        if json_dict is None:
            return None
        json_decamelized = humps.decamelize(json_dict)
        return cls(**json_decamelized)

    def read(
        self,
        dataframe_type: str = "default",
        read_options: Optional[Dict[str, Any]] = None,
    ) -> Union[pd.DataFrame, pl.DataFrame, np.ndarray, List[List[Any]]]:
        """Read the data the source points to through its storage connector.

        # Arguments
            dataframe_type: The type of the returned dataframe. Defaults to `"default"`.
            read_options: Options merged over the options of the data source.

        # Returns
            `DataFrame`.
        """
        options = {**self._options, **(read_options or {})}
        return self._storage_connector.read(
            query=self._query,
            data_format=self._data_format,
            options=options,
            path=self._path,
            dataframe_type=dataframe_type,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self._query,
            "path": self._path,
            "dataFormat": self._data_format,
            "options": [{"name": k, "value": v} for k, v in self._options.items()],
            "storageConnector": self._storage_connector.to_dict(),
        }

    def json(self) -> str:
        return json.dumps(self, cls=util.FeatureStoreEncoder)

    def __repr__(self) -> str:
        return (
            f"DataSource({self._storage_connector.name!r}, query={self._query!r}, "
            f"path={self._path!r}, data_format={self._data_format!r})"
        )

    @property
    def storage_connector(self) -> sc.StorageConnector:
        """Storage connector giving access to the external source."""
        return self._storage_connector

    @property
    def query(self) -> Optional[str]:
        """Query evaluated by the external source."""
        return self._query

    @property
    def path(self) -> Optional[str]:
        """Path of the data within the external source."""
        return self._path

    @property
    def data_format(self) -> Optional[str]:
        return self._data_format

    @property
    def options(self) -> Dict[str, Any]:
        return self._options
