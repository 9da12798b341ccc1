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

from exfs.constructor import fs_query


class TestFsQuery:
    def test_from_response_json(self, backend_fixtures):
        # Arrange
        json = backend_fixtures["fs_query"]["get"]["response"]

        # Act
        q = fs_query.FsQuery.from_response_json(json)

        # Assert
        assert q.query == (
            "SELECT `fg0`.`symbol` `symbol`, `fg0`.`price` `price` FROM `fg0`"
        )
        assert q.query_online == (
            "SELECT `fg0`.`symbol` `symbol`, `fg0`.`price` `price` FROM"
            " `demo`.`prices_1` `fg0`"
        )
        assert len(q.on_demand_fg_aliases) == 1
        assert q.on_demand_fg_aliases[0].alias == "fg0"
        assert q.on_demand_fg_aliases[0].on_demand_feature_group.name == "prices"

    def test_from_response_json_basic_info(self, backend_fixtures):
        # Arrange
        json = backend_fixtures["fs_query"]["get_basic_info"]["response"]

        # Act
        q = fs_query.FsQuery.from_response_json(json)

        # Assert
        assert q.query == "SELECT 1"
        assert q.query_online is None
        assert q.on_demand_fg_aliases == []

    def test_register_external(self, mocker, backend_fixtures):
        # Arrange
        mock_engine_get_instance = mocker.patch("exfs.engine.get_instance")
        q = fs_query.FsQuery.from_response_json(
            backend_fixtures["fs_query"]["get"]["response"]
        )

        # Act
        q.register_external()

        # Assert
        mock_engine_get_instance.return_value.register_external_temporary_table.assert_called_once_with(
            q.on_demand_fg_aliases[0].on_demand_feature_group, "fg0", None
        )

    def test_register_external_none(self, mocker, backend_fixtures):
        # Arrange
        mock_engine_get_instance = mocker.patch("exfs.engine.get_instance")
        q = fs_query.FsQuery.from_response_json(
            backend_fixtures["fs_query"]["get_basic_info"]["response"]
        )

        # Act
        q.register_external()

        # Assert
        assert (
            mock_engine_get_instance.return_value.register_external_temporary_table.call_count
            == 0
        )

    def test_register_external_read_options(self, mocker, backend_fixtures):
        # Arrange
        mock_engine_get_instance = mocker.patch("exfs.engine.get_instance")
        q = fs_query.FsQuery.from_response_json(
            backend_fixtures["fs_query"]["get"]["response"]
        )

        # Act
        q.register_external({"sep": ";"})

        # Assert
        mock_engine_get_instance.return_value.register_external_temporary_table.assert_called_once_with(
            q.on_demand_fg_aliases[0].on_demand_feature_group, "fg0", {"sep": ";"}
        )
