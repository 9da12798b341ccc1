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

from exfs import util
from exfs.client.exceptions import FeatureStoreException
from exfs.core import feature_group_api, kafka_api


class FeatureGroupBaseEngine:
    ENTITY_TYPE = "featuregroups"

    def __init__(self, feature_store_id):
        self._feature_store_id = feature_store_id
        self._feature_group_api = feature_group_api.FeatureGroupApi()
        self._kafka_api = kafka_api.KafkaApi()

    def update_statistics_config(self, feature_group):
        """Update the statistics configuration of a feature group."""
        self._feature_group_api.update_metadata(
            feature_group, feature_group, "updateStatsConfig"
        )

    def _verify_schema_compatibility(self, feature_group_features, dataframe_features):
        err = []
        feature_df_dict = {
            util.autofix_feature_name(feat.name): feat.type
            for feat in dataframe_features
        }
        for feature_fg in feature_group_features:
            name = util.autofix_feature_name(feature_fg.name)
            fg_type = (feature_fg.type or "").lower().replace(" ", "")
            # check if feature exists dataframe
            if name in feature_df_dict:
                df_type = (feature_df_dict[name] or "").lower().replace(" ", "")
                # remove match from lookup table
                del feature_df_dict[name]

                # check if types match
                if fg_type != df_type:
                    # don't check structs for exact match
                    if fg_type.startswith("struct") and df_type.startswith("struct"):
                        continue

                    err += [
                        f"{name} (expected type: '{fg_type}', "
                        f"derived from input: '{df_type}') has the wrong type."
                    ]

            else:
                err += [
                    f"{name} (type: '{feature_fg.type}') is missing from "
                    f"input dataframe."
                ]

        # any features that are left in lookup table are superfluous
        for feature_df_name, feature_df_type in feature_df_dict.items():
            err += [
                f"{util.autofix_feature_name(feature_df_name)} (type: '{feature_df_type}') does not exist "
                f"in feature group."
            ]

        if len(err) > 0:
            raise FeatureStoreException(
                "Features are not compatible with Feature Group schema: "
                + "".join(["\n - " + e for e in err])
                + "\nNote that feature (or column) names are case insensitive and "
                "spaces are automatically replaced with underscores."
            )

    def get_subject(self, feature_group):
        return self._kafka_api.get_subject(feature_group.get_fg_name())
