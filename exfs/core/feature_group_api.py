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

import warnings
from typing import List, Optional, Union

from exfs import client, util
from exfs import feature_group as fg_mod


class FeatureGroupApi:
    BACKEND_FG_EXTERNAL = "onDemandFeaturegroupDTO"

    def save(
        self, feature_group_instance: fg_mod.ExternalFeatureGroup
    ) -> fg_mod.ExternalFeatureGroup:
        """Save feature group metadata to the feature store.

        :param feature_group_instance: metadata object of feature group to be
            saved
        :type feature_group_instance: ExternalFeatureGroup
        :return: updated metadata object of the feature group
        :rtype: ExternalFeatureGroup
        """
        _client = client.get_instance()
        path_params = [
            "project",
            _client._project_id,
            "featurestores",
            feature_group_instance.feature_store_id,
            "featuregroups",
        ]
        query_params = {"expand": ["features"]}
        headers = {"content-type": "application/json"}
        feature_group_object = feature_group_instance.update_from_response_json(
            _client._send_request(
                "POST",
                path_params,
                headers=headers,
                data=feature_group_instance.json(),
                query_params=query_params,
            ),
        )
        return feature_group_object

    def get(
        self, feature_store_id: int, name: str, version: Optional[int]
    ) -> Union[fg_mod.ExternalFeatureGroup, List[fg_mod.ExternalFeatureGroup]]:
        """Get the metadata of a feature group with a certain name and version.

        :param feature_store_id: feature store id
        :type feature_store_id: int
        :param name: name of the feature group
        :type name: str
        :param version: version of the feature group, `None` returns all versions
        :type version: int

        :return: feature group metadata object
        :rtype: ExternalFeatureGroup, List[ExternalFeatureGroup]
        """
        _client = client.get_instance()
        path_params = [
            "project",
            _client._project_id,
            "featurestores",
            feature_store_id,
            "featuregroups",
            name,
        ]
        query_params = {"expand": ["features"]}
        if version is not None:
            query_params["version"] = version

        fg_objs = []
        for fg_json in _client._send_request("GET", path_params, query_params):
            if fg_json["type"] != FeatureGroupApi.BACKEND_FG_EXTERNAL:
                raise ValueError(
                    f"Unknown feature group type: {fg_json['type']}, expected: "
                    + FeatureGroupApi.BACKEND_FG_EXTERNAL
                )
            fg_objs.append(fg_mod.ExternalFeatureGroup.from_response_json(fg_json))

        if version is not None:
            self._check_features(fg_objs[0])
            return fg_objs[0]
        else:
            for fg_obj in fg_objs:
                self._check_features(fg_obj)
            return fg_objs

    def update_metadata(
        self,
        feature_group_instance: fg_mod.ExternalFeatureGroup,
        feature_group_copy: fg_mod.ExternalFeatureGroup,
        query_parameter: str,
        query_parameter_value=True,
    ) -> fg_mod.ExternalFeatureGroup:
        """Update the metadata of a feature group.

        This only updates description, statistics configuration and schema/features. The
        `feature_group_copy` is the metadata object sent to the backend, while
        `feature_group_instance` is the user object, which is only updated
        after a successful REST call.

        # Arguments
            feature_group_instance: ExternalFeatureGroup. User metadata object of the
                feature group.
            feature_group_copy: ExternalFeatureGroup. Metadata object of the feature
                group with the information to be updated.
            query_parameter: str. Query parameter that controls which information is updated. E.g. "updateMetadata".
            query_parameter_value: Str. Value of the query_parameter.

        # Returns
            ExternalFeatureGroup. The updated feature group metadata object.
        """
        _client = client.get_instance()
        path_params = [
            "project",
            _client._project_id,
            "featurestores",
            feature_group_instance.feature_store_id,
            "featuregroups",
            feature_group_instance.id,
        ]
        headers = {"content-type": "application/json"}
        query_params = {query_parameter: query_parameter_value}
        feature_group_object = feature_group_instance.update_from_response_json(
            _client._send_request(
                "PUT",
                path_params,
                query_params,
                headers=headers,
                data=feature_group_copy.json(),
            ),
        )
        return feature_group_object

    def _check_features(self, feature_group_instance) -> None:
        if not feature_group_instance._features:
            warnings.warn(
                f"Feature Group `{feature_group_instance._name}`, version `{feature_group_instance._version}` has no features (to resolve this issue contact the admin or delete and recreate the feature group)",
                util.FeatureGroupWarning,
                stacklevel=1,
            )
