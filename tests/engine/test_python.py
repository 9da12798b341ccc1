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

import json
from io import BytesIO

import boto3
import numpy as np
import pandas as pd
import polars as pl
import pyarrow as pa
import pytest
from exfs import storage_connector, util
from exfs.client import exceptions
from exfs.engine import python
from exfs.feature import Feature
from moto import mock_aws


PRICES_AVRO_SCHEMA = json.dumps(
    {
        "type": "record",
        "name": "prices_1",
        "namespace": "demo_featurestore.db",
        "fields": [
            {"name": "symbol", "type": ["null", "string"]},
            {"name": "ts", "type": ["null", "long"]},
            {"name": "price", "type": ["null", "double"]},
        ],
    }
)


class TestPython:
    def test_sql_offline(self, dataframe_fixture_prices):
        # Arrange
        python_engine = python.Engine()
        python_engine._sql_context.register(
            "fg0", pl.from_pandas(dataframe_fixture_prices)
        )

        # Act
        result = python_engine.sql(
            "SELECT symbol, price FROM fg0 WHERE price > 11",
            "demo_featurestore",
            None,
            "default",
            {},
        )

        # Assert
        assert isinstance(result, pd.DataFrame)
        assert list(result.columns) == ["symbol", "price"]
        assert result["price"].tolist() == [11.5, 13.0]

    def test_sql_offline_polars(self, dataframe_fixture_prices):
        # Arrange
        python_engine = python.Engine()
        python_engine._sql_context.register(
            "fg0", pl.from_pandas(dataframe_fixture_prices)
        )

        # Act
        result = python_engine.sql(
            "SELECT symbol FROM fg0", "demo_featurestore", None, "polars", {}
        )

        # Assert
        assert isinstance(result, pl.DataFrame)
        assert result.height == 4

    def test_sql_offline_python(self, dataframe_fixture_prices):
        # Arrange
        python_engine = python.Engine()
        python_engine._sql_context.register(
            "fg0", pl.from_pandas(dataframe_fixture_prices)
        )

        # Act
        result = python_engine.sql(
            "SELECT symbol, ts FROM fg0 WHERE symbol = 'INIT' ORDER BY ts",
            "demo_featurestore",
            None,
            "python",
            {},
        )

        # Assert
        assert result == [["INIT", 1709290800], ["INIT", 1709377200]]

    def test_sql_invalid_dataframe_type(self):
        # Arrange
        python_engine = python.Engine()

        # Act
        with pytest.raises(exceptions.FeatureStoreException) as e_info:
            python_engine.sql("SELECT 1", None, None, "spark", {})

        # Assert
        assert "dataframe_type : spark not supported" in str(e_info.value)

    def test_sql_online(self, mocker):
        # Arrange
        mock_create_mysql_engine = mocker.patch("exfs.util.create_mysql_engine")
        mock_read_sql = mocker.patch(
            "pandas.read_sql",
            return_value=pd.DataFrame({"symbol": ["ACME"], "price": [10.5]}),
        )
        python_engine = python.Engine()
        online_conn = mocker.Mock()

        # Act
        result = python_engine.sql(
            "SELECT * FROM `demo`.`prices_1`",
            "demo_featurestore",
            online_conn,
            "numpy",
            {},
        )

        # Assert
        mock_create_mysql_engine.assert_called_once_with(online_conn, True, None)
        assert mock_read_sql.call_count == 1
        assert mock_create_mysql_engine.return_value.dispose.call_count == 1
        assert isinstance(result, np.ndarray)
        assert result.tolist() == [["ACME", 10.5]]

    def test_sql_online_read_options(self, mocker):
        # Arrange
        mock_create_mysql_engine = mocker.patch("exfs.util.create_mysql_engine")
        mocker.patch("pandas.read_sql", return_value=pd.DataFrame())
        python_engine = python.Engine()
        online_conn = mocker.Mock()

        # Act
        python_engine.sql(
            "SELECT 1",
            "demo_featurestore",
            online_conn,
            "default",
            {"external": False, "sqlalchemy_options": {"pool_size": 2}},
        )

        # Assert
        mock_create_mysql_engine.assert_called_once_with(
            online_conn, False, {"pool_size": 2}
        )

    def test_show(self, dataframe_fixture_prices):
        # Arrange
        python_engine = python.Engine()
        python_engine._sql_context.register(
            "fg0", pl.from_pandas(dataframe_fixture_prices)
        )

        # Act
        result = python_engine.show("SELECT * FROM fg0", "demo_featurestore", 2, None)

        # Assert
        assert len(result) == 2

    def test_register_external_temporary_table(self, mocker):
        # Arrange
        python_engine = python.Engine()
        external_fg = mocker.Mock()
        external_fg.data_source.read.return_value = pd.DataFrame(
            {"Symbol": ["ACME", "INIT"], "Close Price": [10.5, 11.5]}
        )

        # Act
        result = python_engine.register_external_temporary_table(external_fg, "fg0")
        registered = python_engine.sql(
            "SELECT symbol, close_price FROM fg0", None, None, "default", {}
        )

        # Assert
        assert list(result.columns) == ["symbol", "close_price"]
        assert registered["close_price"].tolist() == [10.5, 11.5]
        external_fg.data_source.read.assert_called_once_with(read_options=None)

    def test_register_external_temporary_table_read_options(self, mocker):
        # Arrange
        python_engine = python.Engine()
        external_fg = mocker.Mock()
        external_fg.data_source.read.return_value = pd.DataFrame({"symbol": ["ACME"]})

        # Act
        python_engine.register_external_temporary_table(
            external_fg, "fg0", {"sep": ";"}
        )

        # Assert
        external_fg.data_source.read.assert_called_once_with(read_options={"sep": ";"})

    def test_return_dataframe_type(self, dataframe_fixture_prices):
        # Arrange
        python_engine = python.Engine()

        # Assert
        assert (
            python_engine._return_dataframe_type(dataframe_fixture_prices, "default")
            is dataframe_fixture_prices
        )
        assert isinstance(
            python_engine._return_dataframe_type(dataframe_fixture_prices, "polars"),
            pl.DataFrame,
        )
        assert python_engine._return_dataframe_type(
            dataframe_fixture_prices, "numpy"
        ).shape == (4, 3)
        assert python_engine._return_dataframe_type(
            dataframe_fixture_prices, "python"
        )[0] == ["ACME", 1709290800, 10.5]

    def test_return_dataframe_type_polars_to_pandas(
        self, dataframe_fixture_prices_polars
    ):
        # Arrange
        python_engine = python.Engine()

        # Act
        result = python_engine._return_dataframe_type(
            dataframe_fixture_prices_polars, "pandas"
        )

        # Assert
        assert isinstance(result, pd.DataFrame)
        assert list(result.columns) == ["symbol", "ts", "price"]

    def test_read_jdbc_without_query(self):
        # Arrange
        python_engine = python.Engine()
        connector = storage_connector.JdbcConnector(
            id=1,
            name="warehouse",
            featurestore_id=67,
            connection_string="jdbc:mysql://10.0.0.5:3306/warehouse",
        )

        # Act
        with pytest.raises(exceptions.FeatureStoreException):
            python_engine.read(
                connector, None, connector.connector_options(), None, "default"
            )

    def test_read_jdbc(self, mocker):
        # Arrange
        mock_create_engine = mocker.patch("exfs.engine.python.create_engine")
        mocker.patch(
            "pandas.read_sql", return_value=pd.DataFrame({"symbol": ["ACME"]})
        )
        python_engine = python.Engine()
        options = {
            "url": "jdbc:mysql://10.0.0.5:3306/warehouse",
            "user": "reader",
            "password": "secret",
            "query": "SELECT symbol FROM prices",
        }

        # Act
        result = python_engine.read(
            mocker.Mock(type="JDBC", JDBC="JDBC"), None, options, None, "polars"
        )

        # Assert
        url = mock_create_engine.call_args[0][0]
        assert url.drivername == "mysql+pymysql"
        assert url.host == "10.0.0.5"
        assert url.port == 3306
        assert url.database == "warehouse"
        assert url.username == "reader"
        assert url.password == "secret"
        assert mock_create_engine.return_value.dispose.call_count == 1
        assert isinstance(result, pl.DataFrame)

    def test_read_without_data_format(self):
        # Arrange
        python_engine = python.Engine()
        connector = storage_connector.S3Connector(
            id=3, name="prices_bucket", featurestore_id=67, bucket="test-bucket"
        )

        # Act
        with pytest.raises(exceptions.FeatureStoreException):
            python_engine.read(
                connector, None, {}, "s3://test-bucket/prices", "default"
            )

    def test_read_unsupported_connector(self, mocker):
        # Arrange
        python_engine = python.Engine()
        connector = mocker.Mock(type="HOPSFS", JDBC="JDBC", S3="S3")

        # Act
        with pytest.raises(NotImplementedError):
            python_engine.read(connector, "csv", {}, "/apps/prices", "default")

    def test_read_s3_csv(self):
        # Arrange
        python_engine = python.Engine()

        with mock_aws():
            s3 = boto3.client("s3", region_name="us-east-1")
            s3.create_bucket(Bucket="test-bucket")
            s3.put_object(
                Bucket="test-bucket",
                Key="prices/part-0.csv",
                Body=b"symbol,price\nACME,10.5\nACME,11.0\n",
            )
            s3.put_object(
                Bucket="test-bucket",
                Key="prices/part-1.csv",
                Body=b"symbol,price\nINIT,11.5\n",
            )
            s3.put_object(Bucket="test-bucket", Key="prices/_SUCCESS", Body=b"")
            connector = storage_connector.S3Connector(
                id=3,
                name="prices_bucket",
                featurestore_id=67,
                access_key="testing",
                secret_key="testing",
                bucket="test-bucket",
                region="us-east-1",
            )

            # Act
            result = python_engine.read(
                connector, "csv", {}, "s3://test-bucket/prices", "default"
            )

        # Assert
        assert sorted(result["symbol"].tolist()) == ["ACME", "ACME", "INIT"]
        assert list(result.index) == [0, 1, 2]

    def test_read_s3_parquet_polars(self, dataframe_fixture_prices):
        # Arrange
        python_engine = python.Engine()
        buffer = BytesIO()
        dataframe_fixture_prices.to_parquet(buffer, index=False)

        with mock_aws():
            s3 = boto3.client("s3", region_name="us-east-1")
            s3.create_bucket(Bucket="test-bucket")
            s3.put_object(
                Bucket="test-bucket",
                Key="prices/2024/part-0.parquet",
                Body=buffer.getvalue(),
            )
            connector = storage_connector.S3Connector(
                id=3,
                name="prices_bucket",
                featurestore_id=67,
                access_key="testing",
                secret_key="testing",
                bucket="test-bucket",
                region="us-east-1",
            )

            # Act
            result = python_engine.read(
                connector, "parquet", {}, "s3://test-bucket/prices/2024", "polars"
            )

        # Assert
        assert isinstance(result, pl.DataFrame)
        assert result.height == 4
        assert result.columns == ["symbol", "ts", "price"]

    def test_read_s3_no_files(self):
        # Arrange
        python_engine = python.Engine()

        with mock_aws():
            s3 = boto3.client("s3", region_name="us-east-1")
            s3.create_bucket(Bucket="test-bucket")
            connector = storage_connector.S3Connector(
                id=3,
                name="prices_bucket",
                featurestore_id=67,
                access_key="testing",
                secret_key="testing",
                bucket="test-bucket",
                region="us-east-1",
            )

            # Act
            with pytest.raises(exceptions.FeatureStoreException):
                python_engine.read(
                    connector, "csv", {}, "s3://test-bucket/missing", "default"
                )

    def test_read_pandas_unsupported_format(self):
        # Arrange
        python_engine = python.Engine()

        # Act
        with pytest.raises(TypeError):
            python_engine._read_pandas("avro", BytesIO(b""))

    def test_profile(self, dataframe_fixture_prices):
        # Arrange
        python_engine = python.Engine()

        # Act
        result = json.loads(
            python_engine.profile(
                dataframe_fixture_prices,
                relevant_columns=None,
                correlations=True,
                histograms=True,
                exact_uniqueness=True,
            )
        )

        # Assert
        columns = {col["column"]: col for col in result["columns"]}
        assert set(columns) == {"symbol", "ts", "price"}
        assert columns["symbol"]["dataType"] == "String"
        assert columns["ts"]["dataType"] == "Integral"
        price = columns["price"]
        assert price["dataType"] == "Fractional"
        assert price["count"] == 4
        assert price["numRecordsNull"] == 0
        assert price["minimum"] == 10.5
        assert price["maximum"] == 13.0
        assert price["sum"] == 46.0
        assert price["mean"] == 11.5
        assert price["exactNumDistinctValues"] == 4
        assert price["uniqueness"] == 1.0
        assert [c["column"] for c in price["correlations"]] == ["ts"]
        assert {"value": "ACME", "count": 2} in columns["symbol"]["histogram"]

    def test_profile_relevant_columns(self, dataframe_fixture_basic):
        # Arrange
        python_engine = python.Engine()

        # Act
        result = json.loads(
            python_engine.profile(
                dataframe_fixture_basic,
                relevant_columns=["state", "measurement"],
                correlations=False,
                histograms=False,
                exact_uniqueness=False,
            )
        )

        # Assert
        assert [col["column"] for col in result["columns"]] == ["state", "measurement"]
        state = result["columns"][0]
        assert state["numRecordsNull"] == 2
        assert state["completeness"] == 0.5
        assert "histogram" not in state
        assert "correlations" not in result["columns"][1]

    def test_profile_missing_strings_and_timestamps(self):
        # Arrange
        python_engine = python.Engine()
        df = pd.DataFrame(
            {
                "symbol": ["a", np.nan, "b", "c"],
                "ts": pd.to_datetime(["2024-01-01", None, None, "2024-01-02"]),
            }
        )

        # Act
        result = json.loads(python_engine.profile(df, None, False, True))

        # Assert
        columns = {col["column"]: col for col in result["columns"]}
        assert columns["symbol"]["dataType"] == "String"
        assert columns["symbol"]["numRecordsNull"] == 1
        assert columns["symbol"]["completeness"] == 0.75
        assert columns["symbol"]["exactNumDistinctValues"] == 3
        assert columns["ts"]["numRecordsNull"] == 2
        assert columns["ts"]["numRecordsNonNull"] == 2
        assert columns["ts"]["completeness"] == 0.5

    def test_profile_polars(self, dataframe_fixture_prices_polars):
        # Arrange
        python_engine = python.Engine()

        # Act
        result = json.loads(
            python_engine.profile(dataframe_fixture_prices_polars, None, False, False)
        )

        # Assert
        assert len(result["columns"]) == 3

    def test_convert_to_default_dataframe(self, dataframe_fixtures_column_spaced):
        # Arrange
        python_engine = python.Engine()

        # Act
        with pytest.warns(util.FeatureGroupWarning) as warning_record:
            result = python_engine.convert_to_default_dataframe(
                dataframe_fixtures_column_spaced
            )

        # Assert
        assert len(warning_record) == 2
        assert list(result.columns) == [
            "primary_key",
            "state_1",
            "measure_ment_taken",
        ]
        assert list(dataframe_fixtures_column_spaced.columns) == [
            "Primary Key",
            "staTe 1",
            "Measure ment taken",
        ]

    def test_convert_to_default_dataframe_timezones(self, dataframe_fixture_times):
        # Arrange
        python_engine = python.Engine()

        # Act
        result = python_engine.convert_to_default_dataframe(dataframe_fixture_times)

        # Assert
        assert result["event_timestamp_pacific"][0] == pd.Timestamp(
            "2022-07-03T07:00:00"
        )
        assert result["event_timestamp_pacific"].dt.tz is None

    def test_convert_to_default_dataframe_polars(self, dataframe_fixture_prices_polars):
        # Arrange
        python_engine = python.Engine()

        # Act
        result = python_engine.convert_to_default_dataframe(
            dataframe_fixture_prices_polars
        )

        # Assert
        assert isinstance(result, pd.DataFrame)

    def test_convert_to_default_dataframe_unsupported(self):
        # Arrange
        python_engine = python.Engine()

        # Act
        with pytest.raises(TypeError):
            python_engine.convert_to_default_dataframe([["ACME", 10.5]])

    def test_parse_schema_feature_group(self, dataframe_fixture_prices):
        # Arrange
        python_engine = python.Engine()

        # Act
        result = python_engine.parse_schema_feature_group(dataframe_fixture_prices)

        # Assert
        assert [(f.name, f.type) for f in result] == [
            ("symbol", "string"),
            ("ts", "bigint"),
            ("price", "double"),
        ]

    def test_parse_schema_feature_group_complex(self):
        # Arrange
        python_engine = python.Engine()
        df = pd.DataFrame(
            {
                "Quotes": [[1.0, 2.0]],
                "meta": [{"venue": "XETRA", "lot": 10}],
            }
        )

        # Act
        result = python_engine.parse_schema_feature_group(df)

        # Assert
        assert [(f.name, f.type) for f in result] == [
            ("quotes", "array<double>"),
            ("meta", "struct<venue:string,lot:bigint>"),
        ]

    def test_convert_pandas_dtype_unsupported(self):
        # Act
        with pytest.raises(ValueError):
            python.Engine._convert_pandas_dtype_to_offline_type(pa.decimal128(10, 2))

    def test_save_dataframe_offline_rejected(self, mocker, dataframe_fixture_prices):
        # Arrange
        mock_write = mocker.patch(
            "exfs.engine.python.Engine._write_dataframe_kafka"
        )
        python_engine = python.Engine()

        # Act
        with pytest.raises(exceptions.FeatureStoreException):
            python_engine.save_dataframe(
                feature_group=mocker.Mock(),
                dataframe=dataframe_fixture_prices,
                operation=None,
                online_enabled=True,
                storage="offline",
                offline_write_options={},
                online_write_options={},
            )

        # Assert
        assert mock_write.call_count == 0

    def test_save_dataframe_online(self, mocker, dataframe_fixture_prices):
        # Arrange
        mock_write = mocker.patch(
            "exfs.engine.python.Engine._write_dataframe_kafka"
        )
        python_engine = python.Engine()
        fg = mocker.Mock()

        # Act
        python_engine.save_dataframe(
            feature_group=fg,
            dataframe=dataframe_fixture_prices,
            operation=None,
            online_enabled=True,
            storage="online",
            offline_write_options={"mode": "append"},
            online_write_options={"mode": "append"},
        )

        # Assert
        mock_write.assert_called_once_with(
            fg, dataframe_fixture_prices, {"mode": "append"}
        )

    def test_get_kafka_config(self, mocker, backend_fixtures):
        # Arrange
        mock_sc_api = mocker.patch(
            "exfs.core.storage_connector_api.StorageConnectorApi"
        )
        mock_sc_api.return_value.get_kafka_connector.return_value = (
            storage_connector.StorageConnector.from_response_json(
                backend_fixtures["storage_connector"]["get_kafka_external"]["response"]
            )
        )
        python_engine = python.Engine()

        # Act
        with pytest.warns(util.StorageWarning):
            config = python_engine._get_kafka_config(
                67, {"kafka_producer_config": {"linger.ms": 100}}
            )

        # Assert
        mock_sc_api.return_value.get_kafka_connector.assert_called_once_with(67, True)
        assert config["bootstrap.servers"] == "broker1:9092,broker2:9092"
        assert config["security.protocol"] == "SASL_SSL"
        assert config["ssl.endpoint.identification.algorithm"] == "none"
        assert config["sasl.username"] == "222"
        assert config["sasl.password"] == "111"
        assert config["queue.buffering.max.messages"] == "500"
        assert config["linger.ms"] == 100
        assert "unknown.java.option" not in config

    def test_get_kafka_config_internal(self, mocker):
        # Arrange
        mock_sc_api = mocker.patch(
            "exfs.core.storage_connector_api.StorageConnectorApi"
        )
        python_engine = python.Engine()

        # Act
        python_engine._get_kafka_config(67, {"internal_kafka": True})

        # Assert
        mock_sc_api.return_value.get_kafka_connector.assert_called_once_with(
            67, False
        )

    def test_write_dataframe_kafka(self, mocker, dataframe_fixture_prices):
        # Arrange
        mock_producer = mocker.patch("exfs.engine.python.Producer")
        mocker.patch(
            "exfs.engine.python.Engine._get_kafka_config",
            return_value={"bootstrap.servers": "broker1:9092"},
        )
        python_engine = python.Engine()
        fg = mocker.Mock()
        fg.id = 15
        fg.primary_key = ["symbol"]
        fg.online_topic_name = "119_15_prices_1_onlinefs"
        fg.subject = {"id": 7}
        fg.feature_store.project_id = 119
        fg.get_complex_features.return_value = []
        fg._get_encoded_avro_schema.return_value = PRICES_AVRO_SCHEMA

        # Act
        python_engine._write_dataframe_kafka(fg, dataframe_fixture_prices, {})

        # Assert
        mock_producer.assert_called_once_with({"bootstrap.servers": "broker1:9092"})
        produce_calls = mock_producer.return_value.produce.call_args_list
        assert len(produce_calls) == 4
        assert [c[1]["key"] for c in produce_calls] == ["ACME", "ACME", "INIT", "INIT"]
        assert produce_calls[0][1]["topic"] == "119_15_prices_1_onlinefs"
        assert produce_calls[0][1]["headers"] == {
            "projectId": b"119",
            "featureGroupId": b"15",
            "subjectId": b"7",
        }
        assert isinstance(produce_calls[0][1]["value"], bytes)
        assert mock_producer.return_value.flush.call_count == 1

    def test_kafka_produce_buffer_error(self, mocker):
        # Arrange
        python_engine = python.Engine()
        producer = mocker.Mock()
        producer.produce.side_effect = [BufferError("queue full"), None]
        fg = mocker.Mock()
        fg.subject = {"id": 7}

        # Act
        python_engine._kafka_produce(producer, fg, "ACME", b"row", None, {})

        # Assert
        assert producer.produce.call_count == 2
        producer.poll.assert_any_call(1)
        producer.poll.assert_called_with(0)

    def test_parse_schema_feature_group_names(self):
        # Arrange
        python_engine = python.Engine()

        # Act
        result = python_engine.parse_schema_feature_group(
            pd.DataFrame({"Close Price": [1.0]})
        )

        # Assert
        assert result[0].name == "close_price"
        assert isinstance(result[0], Feature)
