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
import logging
import math
import warnings
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Tuple,
    Union,
)

import boto3
import numpy as np
import pandas as pd
import polars as pl
import pyarrow as pa
import pytz
from botocore.response import StreamingBody
from confluent_kafka import KafkaError, Producer
from exfs import feature, util
from exfs import storage_connector as sc
from exfs.client.exceptions import FeatureStoreException
from exfs.core import storage_connector_api
from fastavro import schemaless_writer
from fastavro.schema import parse_schema
from sqlalchemy import create_engine, sql
from sqlalchemy.engine import make_url
from tqdm.auto import tqdm


if TYPE_CHECKING:
    from exfs.feature_group import ExternalFeatureGroup


_logger = logging.getLogger(__name__)


_INT_TYPES = [pa.uint8(), pa.uint16(), pa.int8(), pa.int16(), pa.int32()]
_BIG_INT_TYPES = [pa.uint32(), pa.int64()]
_FLOAT_TYPES = [pa.float16(), pa.float32()]
_DOUBLE_TYPES = [pa.float64()]
_TIMESTAMP_UNIT = ["ns", "us", "ms", "s"]
_BOOLEAN_TYPES = [pa.bool_()]
_STRING_TYPES = [pa.string(), pa.large_string()]
_DATE_TYPES = [pa.date32(), pa.date64()]
_BINARY_TYPES = [pa.binary(), pa.large_binary()]

PYARROW_EXFS_DTYPE_MAPPING = {
    **dict.fromkeys(_INT_TYPES, "int"),
    **dict.fromkeys(_BIG_INT_TYPES, "bigint"),
    **dict.fromkeys(_FLOAT_TYPES, "float"),
    **dict.fromkeys(_DOUBLE_TYPES, "double"),
    **dict.fromkeys(
        [
            *[pa.timestamp(unit) for unit in _TIMESTAMP_UNIT],
            *[
                pa.timestamp(unit, tz=tz)
                for unit in _TIMESTAMP_UNIT
                for tz in pytz.all_timezones
            ],
        ],
        "timestamp",
    ),
    **dict.fromkeys(_BOOLEAN_TYPES, "boolean"),
    **dict.fromkeys(
        [
            *_STRING_TYPES,
            # category type in pandas is stored as dictionary in pyarrow
            *[
                pa.dictionary(
                    value_type=value_type, index_type=index_type, ordered=ordered
                )
                for value_type in _STRING_TYPES
                for index_type in _INT_TYPES + _BIG_INT_TYPES
                for ordered in [True, False]
            ],
        ],
        "string",
    ),
    **dict.fromkeys(_DATE_TYPES, "date"),
    **dict.fromkeys(_BINARY_TYPES, "binary"),
}

# number of most frequent values kept in a histogram
HISTOGRAM_MAX_BINS = 20


class Engine:
    """Execution engine running in a plain Python process.

    External sources are read with pandas into an in-process polars SQL
    context, online reads go to the online store over SQLAlchemy, and online
    writes are produced to Kafka as Avro encoded rows.
    """

    def __init__(self) -> None:
        self._storage_connector_api: storage_connector_api.StorageConnectorApi = (
            storage_connector_api.StorageConnectorApi()
        )
        # temporary tables of the external feature groups registered for queries
        self._sql_context = pl.SQLContext()

    def sql(
        self,
        sql_query: str,
        feature_store: Optional[str],
        online_conn: Optional["sc.JdbcConnector"],
        dataframe_type: str,
        read_options: Optional[Dict[str, Any]],
    ) -> Union[pd.DataFrame, pl.DataFrame, np.ndarray, List[List[Any]]]:
        if not online_conn:
            return self._sql_offline(sql_query, dataframe_type)
        else:
            return self._jdbc(sql_query, online_conn, dataframe_type, read_options)

    def _validate_dataframe_type(self, dataframe_type: str):
        if not isinstance(dataframe_type, str) or dataframe_type.lower() not in [
            "pandas",
            "polars",
            "numpy",
            "python",
            "default",
        ]:
            raise FeatureStoreException(
                f'dataframe_type : {dataframe_type} not supported. Possible values are "default", "pandas", "polars", "numpy" or "python"'
            )

    def _sql_offline(
        self, sql_query: str, dataframe_type: str
    ) -> Union[pd.DataFrame, pl.DataFrame, np.ndarray, List[List[Any]]]:
        self._validate_dataframe_type(dataframe_type)
        _logger.debug("Running offline query: %s", sql_query)
        result_df = self._sql_context.execute(sql_query, eager=True)
        if dataframe_type.lower() != "polars":
            result_df = result_df.to_pandas()
        return self._return_dataframe_type(result_df, dataframe_type)

    def _jdbc(
        self,
        sql_query: str,
        connector: "sc.JdbcConnector",
        dataframe_type: str,
        read_options: Optional[Dict[str, Any]],
    ) -> Union[pd.DataFrame, pl.DataFrame, np.ndarray, List[List[Any]]]:
        self._validate_dataframe_type(dataframe_type)
        read_options = read_options or {}

        mysql_engine = util.create_mysql_engine(
            connector,
            read_options.get("external", True),
            read_options.get("sqlalchemy_options"),
        )
        try:
            with mysql_engine.connect() as mysql_conn:
                result_df = pd.read_sql(sql.text(sql_query), mysql_conn)
        finally:
            mysql_engine.dispose()
        return self._return_dataframe_type(result_df, dataframe_type)

    def read(
        self,
        storage_connector: "sc.StorageConnector",
        data_format: Optional[str],
        read_options: Optional[Dict[str, Any]],
        location: Optional[str],
        dataframe_type: str,
    ) -> Union[pd.DataFrame, pl.DataFrame, np.ndarray, List[List[Any]]]:
        self._validate_dataframe_type(dataframe_type)
        read_options = read_options or {}

        if storage_connector.type == storage_connector.JDBC:
            return self._return_dataframe_type(
                self._read_jdbc(read_options), dataframe_type
            )

        if not data_format:
            raise FeatureStoreException("data_format is not specified")

        if storage_connector.type == storage_connector.S3:
            df_list = self._read_s3(
                storage_connector, location, data_format, dataframe_type
            )
        else:
            raise NotImplementedError(
                "{} Storage Connectors are not supported yet for reading external data.".format(
                    storage_connector.type
                )
            )
        if not df_list:
            raise FeatureStoreException(
                "No files found to read at location `{}`.".format(location)
            )
        if dataframe_type.lower() == "polars":
            non_empty_df_list = [df for df in df_list if not df.is_empty()]
            if non_empty_df_list:
                return self._return_dataframe_type(
                    pl.concat(non_empty_df_list), dataframe_type=dataframe_type
                )
            else:
                return df_list[0]
        else:
            return self._return_dataframe_type(
                pd.concat(df_list, ignore_index=True), dataframe_type=dataframe_type
            )

    def _read_jdbc(self, options: Dict[str, Any]) -> pd.DataFrame:
        if not options.get("query"):
            raise FeatureStoreException(
                "A query is required to read from a JDBC storage connector."
            )
        url = make_url(
            options["url"]
            .replace("jdbc:", "", 1)
            .replace("mysql://", "mysql+pymysql://", 1)
        )
        if options.get("user"):
            url = url.set(username=options["user"])
        if options.get("password"):
            url = url.set(password=options["password"])

        jdbc_engine = create_engine(url)
        try:
            with jdbc_engine.connect() as conn:
                return pd.read_sql(sql.text(options["query"]), conn)
        finally:
            jdbc_engine.dispose()

    def _read_pandas(self, data_format: str, obj: Any) -> pd.DataFrame:
        if data_format.lower() == "csv":
            return pd.read_csv(obj)
        elif data_format.lower() == "tsv":
            return pd.read_csv(obj, sep="\t")
        elif data_format.lower() == "parquet" and isinstance(obj, StreamingBody):
            return pd.read_parquet(BytesIO(obj.read()))
        elif data_format.lower() == "parquet":
            return pd.read_parquet(obj)
        else:
            raise TypeError(
                "{} format is not supported to read as pandas dataframe.".format(
                    data_format
                )
            )

    def _read_polars(self, data_format: str, obj: Any) -> pl.DataFrame:
        if data_format.lower() == "csv":
            return pl.read_csv(obj)
        elif data_format.lower() == "tsv":
            return pl.read_csv(obj, separator="\t")
        elif data_format.lower() == "parquet" and isinstance(obj, StreamingBody):
            return pl.read_parquet(BytesIO(obj.read()), use_pyarrow=True)
        elif data_format.lower() == "parquet":
            return pl.read_parquet(obj, use_pyarrow=True)
        else:
            raise TypeError(
                "{} format is not supported to read as polars dataframe.".format(
                    data_format
                )
            )

    def _is_metadata_file(self, path):
        return Path(path).stem.startswith("_")

    def _read_s3(
        self,
        storage_connector: "sc.S3Connector",
        location: str,
        data_format: str,
        dataframe_type: str = "default",
    ) -> List[Union[pd.DataFrame, pl.DataFrame]]:
        # get key prefix
        path_parts = location.replace("s3a://", "s3://").replace("s3://", "").split("/")
        _ = path_parts.pop(0)  # pop first element -> bucket

        prefix = "/".join(path_parts)

        s3 = boto3.client("s3", **storage_connector.connector_options())

        df_list = []
        object_list = {"IsTruncated": True}
        while object_list.get("IsTruncated", False):
            if "NextContinuationToken" in object_list:
                object_list = s3.list_objects_v2(
                    Bucket=storage_connector.bucket,
                    Prefix=prefix,
                    MaxKeys=1000,
                    ContinuationToken=object_list["NextContinuationToken"],
                )
            else:
                object_list = s3.list_objects_v2(
                    Bucket=storage_connector.bucket,
                    Prefix=prefix,
                    MaxKeys=1000,
                )

            for obj in object_list.get("Contents", []):
                if not self._is_metadata_file(obj["Key"]) and obj["Size"] > 0:
                    obj = s3.get_object(
                        Bucket=storage_connector.bucket,
                        Key=obj["Key"],
                    )
                    if dataframe_type.lower() == "polars":
                        df_list.append(self._read_polars(data_format, obj["Body"]))
                    else:
                        df_list.append(self._read_pandas(data_format, obj["Body"]))
        return df_list

    def show(
        self,
        sql_query: str,
        feature_store: Optional[str],
        n: int,
        online_conn: Optional["sc.JdbcConnector"],
        read_options: Optional[Dict[str, Any]] = None,
    ) -> pd.DataFrame:
        return self.sql(
            sql_query, feature_store, online_conn, "default", read_options or {}
        ).head(n)

    def register_external_temporary_table(
        self,
        external_fg: "ExternalFeatureGroup",
        alias: str,
        read_options: Optional[Dict[str, Any]] = None,
    ) -> pd.DataFrame:
        """Read the source of an external feature group and register it as a
        table named `alias` for offline queries."""
        external_dataset = external_fg.data_source.read(read_options=read_options)
        external_dataset = external_dataset.rename(
            columns={
                col: util.autofix_feature_name(col) for col in external_dataset.columns
            }
        )

        self._sql_context.register(alias, pl.from_pandas(external_dataset))
        _logger.debug(
            "Registered external feature group `%s` as table `%s` with %d rows",
            external_fg.name,
            alias,
            len(external_dataset),
        )
        return external_dataset

    def profile(
        self,
        df: Union[pd.DataFrame, pl.DataFrame],
        relevant_columns: Optional[List[str]],
        correlations: bool,
        histograms: bool,
        exact_uniqueness: bool = True,
    ) -> str:
        if isinstance(df, pl.DataFrame):
            df = df.to_pandas()
        arrow_schema = pa.Schema.from_pandas(df, preserve_index=False)

        if relevant_columns is None or len(relevant_columns) == 0:
            relevant_columns = list(df.columns)
        else:
            relevant_columns = [col for col in df.columns if col in relevant_columns]

        data_types = {
            col: self._get_profile_data_type(arrow_schema.field(col).type)
            for col in relevant_columns
        }
        numeric_columns = [
            col
            for col in relevant_columns
            if data_types[col] in ["Integral", "Fractional"]
        ]

        correlation_matrix = None
        if correlations and len(numeric_columns) > 1:
            correlation_matrix = df[numeric_columns].corr()

        final_stats = []
        for col in relevant_columns:
            stat = self._profile_column(
                df[col], data_types[col], histograms, exact_uniqueness
            )
            stat["column"] = col.split(".")[-1]
            if correlation_matrix is not None and col in numeric_columns:
                stat["correlations"] = [
                    {
                        "column": other,
                        "correlation": self._to_json_number(
                            correlation_matrix.loc[col, other]
                        ),
                    }
                    for other in numeric_columns
                    if other != col
                ]
            final_stats.append(stat)

        return json.dumps({"columns": final_stats})

    def _get_profile_data_type(self, arrow_type: pa.DataType) -> str:
        if (
            pa.types.is_null(arrow_type)
            or pa.types.is_list(arrow_type)
            or pa.types.is_large_list(arrow_type)
            or pa.types.is_struct(arrow_type)
        ):
            return "String"
        offline_type = PYARROW_EXFS_DTYPE_MAPPING.get(arrow_type)
        if offline_type in ["float", "double"]:
            return "Fractional"
        elif offline_type in ["int", "bigint"]:
            return "Integral"
        elif offline_type == "boolean":
            return "Boolean"
        elif offline_type is None:
            _logger.warning(
                "Data type could not be inferred for type '%s'. Defaulting to 'String'",
                arrow_type,
            )
        return "String"

    def _profile_column(
        self,
        series: pd.Series,
        data_type: str,
        histograms: bool,
        exact_uniqueness: bool,
    ) -> Dict[str, Any]:
        count = len(series)
        non_null = series.dropna()
        if data_type == "String":
            # timestamps, dates and nested values are profiled as strings
            non_null = non_null.map(str)
        num_non_null = len(non_null)
        stat = {
            "dataType": data_type,
            "isDataTypeInferred": "false",
            "count": count,
            "numRecordsNonNull": num_non_null,
            "numRecordsNull": count - num_non_null,
            "completeness": num_non_null / count if count else 0.0,
        }
        if num_non_null == 0:
            return stat

        value_counts = non_null.value_counts()
        stat["approximateNumDistinctValues"] = len(value_counts)

        if data_type in ["Integral", "Fractional"]:
            stat["minimum"] = self._to_json_number(non_null.min())
            stat["maximum"] = self._to_json_number(non_null.max())
            stat["sum"] = self._to_json_number(non_null.sum())
            stat["mean"] = self._to_json_number(non_null.mean())
            if num_non_null > 1:
                stat["stdDev"] = self._to_json_number(non_null.std())
            stat["approxPercentiles"] = [
                self._to_json_number(v)
                for v in non_null.quantile([i / 100 for i in range(1, 101)])
            ]

        if histograms:
            stat["histogram"] = [
                {"value": str(value), "count": int(value_count)}
                for value, value_count in value_counts.head(HISTOGRAM_MAX_BINS).items()
            ]

        if exact_uniqueness:
            probabilities = value_counts / num_non_null
            stat["exactNumDistinctValues"] = len(value_counts)
            stat["distinctness"] = len(value_counts) / num_non_null
            stat["uniqueness"] = int((value_counts == 1).sum()) / num_non_null
            stat["entropy"] = float(-(probabilities * np.log(probabilities)).sum())

        return stat

    @staticmethod
    def _to_json_number(value: Any) -> Optional[Union[int, float]]:
        if value is None or pd.isna(value):
            return None
        if isinstance(value, (bool, np.bool_)):
            return int(value)
        if isinstance(value, (int, np.integer)):
            return int(value)
        value = float(value)
        return None if math.isinf(value) else value

    def convert_to_default_dataframe(
        self, dataframe: Union[pd.DataFrame, pl.DataFrame]
    ) -> pd.DataFrame:
        if isinstance(dataframe, pl.DataFrame):
            dataframe = dataframe.to_pandas()
        if isinstance(dataframe, pd.DataFrame):
            upper_case_features = [
                col for col in dataframe.columns if any(c.isupper() for c in col)
            ]
            space_features = [col for col in dataframe.columns if " " in col]

            # make shallow copy so the original df does not get changed
            dataframe_copy = dataframe.copy(deep=False)

            if len(upper_case_features) > 0:
                warnings.warn(
                    "The ingested dataframe contains upper case letters in feature names: `{}`. "
                    "Feature names are sanitized to lower case in the feature store.".format(
                        upper_case_features
                    ),
                    util.FeatureGroupWarning,
                    stacklevel=1,
                )
            if len(space_features) > 0:
                warnings.warn(
                    "The ingested dataframe contains feature names with spaces: `{}`. "
                    "Feature names are sanitized to use underscore '_' in the feature store.".format(
                        space_features
                    ),
                    util.FeatureGroupWarning,
                    stacklevel=1,
                )
            dataframe_copy.columns = [
                util.autofix_feature_name(x) for x in dataframe_copy.columns
            ]

            # convert timestamps with timezone to UTC
            for col in dataframe_copy.columns:
                if isinstance(dataframe_copy[col].dtype, pd.DatetimeTZDtype):
                    dataframe_copy[col] = dataframe_copy[col].dt.tz_convert(None)
            return dataframe_copy

        raise TypeError(
            "The provided dataframe type is not recognized. Supported types are: pandas dataframe, polars dataframe. "
            + "The provided dataframe has type: {}".format(type(dataframe))
        )

    def parse_schema_feature_group(
        self, dataframe: Union[pd.DataFrame, pl.DataFrame]
    ) -> List[feature.Feature]:
        if isinstance(dataframe, pd.DataFrame):
            arrow_schema = pa.Schema.from_pandas(dataframe, preserve_index=False)
        elif isinstance(dataframe, pl.DataFrame):
            arrow_schema = dataframe.to_arrow().schema
        else:
            raise TypeError(
                "Schema can only be inferred from pandas or polars dataframes, got {}".format(
                    type(dataframe)
                )
            )
        features = []
        for feat_name in arrow_schema.names:
            name = util.autofix_feature_name(feat_name)
            try:
                converted_type = self._convert_pandas_dtype_to_offline_type(
                    arrow_schema.field(feat_name).type
                )
            except ValueError as e:
                raise FeatureStoreException(f"Feature '{name}': {str(e)}") from e
            features.append(feature.Feature(name, converted_type))
        return features

    def save_dataframe(
        self,
        feature_group: "ExternalFeatureGroup",
        dataframe: Union[pd.DataFrame, pl.DataFrame],
        operation: str,
        online_enabled: bool,
        storage: str,
        offline_write_options: Dict[str, Any],
        online_write_options: Dict[str, Any],
    ) -> None:
        if storage != "online" or not online_enabled:
            raise FeatureStoreException(
                "External feature groups only accept writes to the online storage. "
                "The external source is managed outside of the feature store."
            )
        self._write_dataframe_kafka(feature_group, dataframe, online_write_options)

    def _return_dataframe_type(
        self, dataframe: Union[pd.DataFrame, pl.DataFrame], dataframe_type: str
    ) -> Union[pd.DataFrame, pl.DataFrame, np.ndarray, List[List[Any]]]:
        """
        Returns a dataframe of particular type.

        # Arguments
            dataframe `Union[pd.DataFrame, pl.DataFrame]`: Input dataframe
            dataframe_type `str`: Type of dataframe to be returned
        # Returns
            `Union[pd.DataFrame, pl.DataFrame, np.array, list]`: DataFrame of required type.
        """
        if dataframe_type.lower() in ["default", "pandas"]:
            if isinstance(dataframe, pl.DataFrame):
                return dataframe.to_pandas()
            return dataframe
        if dataframe_type.lower() == "polars":
            if not isinstance(dataframe, (pl.DataFrame, pl.Series)):
                return pl.from_pandas(dataframe)
            else:
                return dataframe
        if isinstance(dataframe, pl.DataFrame):
            dataframe = dataframe.to_pandas()
        if dataframe_type.lower() == "numpy":
            return dataframe.values
        if dataframe_type.lower() == "python":
            return dataframe.values.tolist()

        raise TypeError(
            "Dataframe type `{}` not supported on this platform.".format(dataframe_type)
        )

    def _init_kafka_resources(
        self,
        feature_group: "ExternalFeatureGroup",
        write_options: Dict[str, Any],
    ) -> Tuple[Producer, Dict[str, Callable], Callable]:
        # setup kafka producer
        producer = Producer(
            self._get_kafka_config(feature_group.feature_store_id, write_options)
        )

        # setup complex feature writers
        feature_writers = {
            feature: self._get_encoder_func(
                feature_group._get_feature_avro_schema(feature)
            )
            for feature in feature_group.get_complex_features()
        }

        # setup row writer function
        writer = self._get_encoder_func(feature_group._get_encoded_avro_schema())
        return producer, feature_writers, writer

    def _write_dataframe_kafka(
        self,
        feature_group: "ExternalFeatureGroup",
        dataframe: Union[pd.DataFrame, pl.DataFrame],
        write_options: Dict[str, Any],
    ) -> None:
        producer, feature_writers, writer = self._init_kafka_resources(
            feature_group, write_options
        )

        # initialize progress bar
        progress_bar = tqdm(
            total=dataframe.shape[0],
            bar_format="{desc}: {percentage:.2f}% |{bar}| Rows {n_fmt}/{total_fmt} | "
            "Elapsed Time: {elapsed} | Remaining Time: {remaining}",
            desc="Uploading Dataframe",
            mininterval=1,
        )

        def acked(err: Exception, msg: Any) -> None:
            if err is not None:
                if write_options.get("debug_kafka", False):
                    _logger.error("Failed to deliver message: %s: %s", msg, err)
                if err.code() in [
                    KafkaError.TOPIC_AUTHORIZATION_FAILED,
                    KafkaError._MSG_TIMED_OUT,
                ]:
                    progress_bar.colour = "RED"
                    raise err  # Stop producing and show error
            progress_bar.update()

        if isinstance(dataframe, pd.DataFrame):
            row_iterator = dataframe.itertuples(index=False)
        else:
            row_iterator = dataframe.iter_rows(named=True)

        # loop over rows
        for row in row_iterator:
            if isinstance(dataframe, pd.DataFrame):
                # itertuples returns a NamedTuple, convert to dict to keep the datatypes
                row = row._asdict()

                # avro only serializes plain python data types
                for k in row.keys():
                    if isinstance(row[k], np.ndarray):
                        row[k] = row[k].tolist()
                    if isinstance(row[k], pd.Timestamp):
                        row[k] = row[k].to_pydatetime()
                    if isinstance(row[k], datetime) and row[k].tzinfo is None:
                        row[k] = row[k].replace(tzinfo=timezone.utc)
                    if row[k] is pd.NA:
                        row[k] = None

            # encode complex features
            row = self._encode_complex_features(feature_writers, row)

            # encode feature row
            with BytesIO() as outf:
                writer(row, outf)
                encoded_row = outf.getvalue()

            # assemble key
            key = "".join([str(row[pk]) for pk in sorted(feature_group.primary_key)])

            self._kafka_produce(
                producer, feature_group, key, encoded_row, acked, write_options
            )

        # make sure producer blocks and everything is delivered
        producer.flush()
        progress_bar.close()

    def _kafka_produce(
        self,
        producer: Producer,
        feature_group: "ExternalFeatureGroup",
        key: str,
        encoded_row: bytes,
        acked: Callable,
        write_options: Dict[str, Any],
    ) -> None:
        while True:
            # if BufferError is thrown, we can be sure, message hasn't been send so we retry
            try:
                header = {
                    "projectId": str(feature_group.feature_store.project_id).encode(
                        "utf8"
                    ),
                    "featureGroupId": str(feature_group.id).encode("utf8"),
                    "subjectId": str(feature_group.subject["id"]).encode("utf8"),
                }

                producer.produce(
                    topic=feature_group.online_topic_name,
                    key=key,
                    value=encoded_row,
                    callback=acked,
                    headers=header,
                )

                # Trigger internal callbacks to empty op queue
                producer.poll(0)
                break
            except BufferError as e:
                if write_options.get("debug_kafka", False):
                    _logger.debug("Caught: %s", e)
                # backoff for 1 second
                producer.poll(1)

    def _encode_complex_features(
        self, feature_writers: Dict[str, Callable], row: Dict[str, Any]
    ) -> Dict[str, Any]:
        for feature_name, writer in feature_writers.items():
            with BytesIO() as outf:
                writer(row[feature_name], outf)
                row[feature_name] = outf.getvalue()
        return row

    def _get_encoder_func(self, writer_schema: str) -> Callable:
        schema = json.loads(writer_schema)
        parsed_schema = parse_schema(schema)
        return lambda record, outf: schemaless_writer(outf, parsed_schema, record)

    def _get_kafka_config(
        self, feature_store_id: int, write_options: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        if write_options is None:
            write_options = {}
        external = not write_options.get("internal_kafka", False)

        storage_connector = self._storage_connector_api.get_kafka_connector(
            feature_store_id, external
        )

        config = storage_connector.confluent_options()
        config.update(write_options.get("kafka_producer_config", {}))
        return config

    @staticmethod
    def _convert_pandas_dtype_to_offline_type(arrow_type: pa.DataType) -> str:
        # pyarrow types of the dataframe are mapped to the offline (hive) types,
        # complex types recursively, the backend derives the avro schema from them
        if (
            pa.types.is_list(arrow_type)
            or pa.types.is_large_list(arrow_type)
            or pa.types.is_struct(arrow_type)
        ):
            return Engine._convert_pandas_object_type_to_offline_type(arrow_type)

        return Engine._convert_simple_pandas_dtype_to_offline_type(arrow_type)

    @staticmethod
    def _convert_simple_pandas_dtype_to_offline_type(arrow_type: pa.DataType) -> str:
        try:
            return PYARROW_EXFS_DTYPE_MAPPING[arrow_type]
        except KeyError as err:
            raise ValueError(f"dtype '{arrow_type}' not supported") from err

    @staticmethod
    def _convert_pandas_object_type_to_offline_type(arrow_type: pa.DataType) -> str:
        if pa.types.is_list(arrow_type) or pa.types.is_large_list(arrow_type):
            # figure out sub type
            sub_arrow_type = arrow_type.value_type
            subtype = Engine._convert_pandas_dtype_to_offline_type(sub_arrow_type)
            return "array<{}>".format(subtype)
        if pa.types.is_struct(arrow_type):
            struct_schema = {}
            for index in range(arrow_type.num_fields):
                struct_schema[arrow_type.field(index).name] = (
                    Engine._convert_pandas_dtype_to_offline_type(
                        arrow_type.field(index).type
                    )
                )
            return (
                "struct<"
                + ",".join([f"{key}:{value}" for key, value in struct_schema.items()])
                + ">"
            )

        raise ValueError(f"dtype 'O' (arrow_type '{str(arrow_type)}') not supported")
