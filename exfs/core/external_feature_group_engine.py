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

from exfs import engine, util
from exfs import feature_group as fg
from exfs.client.exceptions import FeatureStoreException
from exfs.core import feature_group_base_engine


_logger = logging.getLogger(__name__)


class ExternalFeatureGroupEngine(feature_group_base_engine.FeatureGroupBaseEngine):
    def save(self, feature_group):
        if feature_group.features is None or len(feature_group.features) == 0:
            # If the user didn't specify the schema, parse it from the external source
            external_dataset = engine.get_instance().register_external_temporary_table(
                feature_group, "read_ondmd"
            )
            feature_group.features = engine.get_instance().parse_schema_feature_group(
                external_dataset
            )
            _logger.info(
                "Inferred schema of feature group `%s` from its external source: %s",
                feature_group.name,
                [feat.name for feat in feature_group.features],
            )

        # set primary key columns
        util.verify_attribute_key_names(feature_group)
        for feat in feature_group.features:
            if feat.name in feature_group.primary_key:
                feat.primary = True

        self._feature_group_api.save(feature_group)

    def insert(self, feature_group, feature_dataframe, write_options: dict):
        if not feature_group.online_enabled:
            raise FeatureStoreException(
                "Online storage is not enabled for this feature group. External feature groups can only store data in"
                + " online storage. To create an offline only external feature group, use the `save` method."
            )

        schema = engine.get_instance().parse_schema_feature_group(feature_dataframe)

        if not feature_group.id:
            # only save metadata if feature group does not exist
            feature_group.features = schema
            self.save(feature_group)
        else:
            # else, just verify that feature group schema matches user-provided dataframe
            self._verify_schema_compatibility(feature_group.features, schema)

        engine.get_instance().save_dataframe(
            feature_group=feature_group,
            dataframe=feature_dataframe,
            operation=None,
            online_enabled=feature_group.online_enabled,
            storage="online",
            offline_write_options=write_options,
            online_write_options=write_options,
        )

    def _update_features_metadata(self, feature_group, features):
        # perform changes on copy in case the update fails, so we don't leave
        # the user object in corrupted state
        copy_feature_group = fg.ExternalFeatureGroup.from_response_json(
            feature_group.to_dict()
        )
        copy_feature_group.features = features
        self._feature_group_api.update_metadata(
            feature_group, copy_feature_group, "updateMetadata"
        )
        feature_group.features = features

    def _check_new_features(self, feature_group, new_features):
        existing = {feat.name for feat in feature_group.features or []}
        new_names = [util.autofix_feature_name(feat.name) for feat in new_features]

        collisions = [name for name in new_names if name in existing]
        if collisions:
            raise FeatureStoreException(
                "Feature(s) {} already exist in feature group `{}`, version `{}`. "
                "Features can only be appended, use `update_feature_description` "
                "to change the metadata of an existing feature.".format(
                    collisions, feature_group.name, feature_group.version
                )
            )
        duplicates = sorted({name for name in new_names if new_names.count(name) > 1})
        if duplicates:
            raise FeatureStoreException(
                "Feature(s) {} are provided more than once.".format(duplicates)
            )
        untyped = [
            name for name, feat in zip(new_names, new_features) if not feat.type
        ]
        if untyped:
            raise FeatureStoreException(
                "Feature(s) {} have no type. Appended features need a type.".format(
                    untyped
                )
            )

    def append_features(self, feature_group, new_features):
        """Appends features to a feature group."""
        self._check_new_features(feature_group, new_features)
        self._update_features_metadata(
            feature_group, list(feature_group.features or []) + list(new_features)
        )

    def update_feature_description(self, feature_group, updated_feature):
        """Replaces a feature of the schema keeping its position."""
        self._update_features_metadata(
            feature_group,
            [
                updated_feature if feat.name == updated_feature.name else feat
                for feat in feature_group.features
            ],
        )

    def update_description(self, feature_group, description):
        """Updates the description of a feature group."""
        copy_feature_group = fg.ExternalFeatureGroup.from_response_json(
            feature_group.to_dict()
        )
        copy_feature_group.description = description
        self._feature_group_api.update_metadata(
            feature_group, copy_feature_group, "updateMetadata"
        )
        feature_group.description = description
