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

import logging
from typing import Any, Dict, List, Optional

import humps
from exfs import engine
from exfs.constructor import external_feature_group_alias


_logger = logging.getLogger(__name__)


class FsQuery:
    """SQL constructed by the metadata service for a `Query`."""

    def __init__(
        self,
        query: str,
        on_demand_feature_groups: Optional[List[Dict[str, Any]]] = None,
        query_online: Optional[str] = None,
        href: Optional[str] = None,
        expand: Optional[List[str]] = None,
        items: Optional[List[Dict[str, Any]]] = None,
        type: Optional[str] = None,
        **kwargs,
    ) -> None:
        self._query = query
        self._query_online = query_online

        if on_demand_feature_groups is not None:
            self._on_demand_fg_aliases = [
                external_feature_group_alias.ExternalFeatureGroupAlias.from_response_json(
                    fg
                )
                for fg in on_demand_feature_groups
            ]
        else:
            self._on_demand_fg_aliases = []

    @classmethod
    def from_response_json(cls, json_dict: Dict[str, Any]) -> "FsQuery":
        json_decamelized = humps.decamelize(json_dict)
        return cls(**json_decamelized)

    @property
    def query(self) -> str:
        """Query string to run against the offline engine."""
        return self._query

    @property
    def query_online(self) -> Optional[str]:
        """Query string to run against the online store."""
        return self._query_online

    @property
    def on_demand_fg_aliases(
        self,
    ) -> List["external_feature_group_alias.ExternalFeatureGroupAlias"]:
        return self._on_demand_fg_aliases

    def register_external(
        self, read_options: Optional[Dict[str, Any]] = None
    ) -> None:
        """Register the source of every external feature group of the query as a
        temporary table of the engine, under the alias used in the query string.
        `read_options` are handed to the read of each source."""
        for external_fg_alias in self._on_demand_fg_aliases:
            _logger.debug(
                "Registering external feature group `%s` as `%s`",
                external_fg_alias.on_demand_feature_group.name,
                external_fg_alias.alias,
            )
            engine.get_instance().register_external_temporary_table(
                external_fg_alias.on_demand_feature_group,
                external_fg_alias.alias,
                read_options,
            )
