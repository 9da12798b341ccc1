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
import os
import re
import warnings
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

import humps
import numpy as np
import pandas as pd
import polars as pl
from exfs import engine, util
from exfs.core import storage_connector_api


_logger = logging.getLogger(__name__)


class StorageConnector(ABC):
    """Credentials and location of a data source managed outside of the feature store."""

    S3 = "S3"
    JDBC = "JDBC"
    KAFKA = "KAFKA"

    def __init__(
        self,
        id: Optional[int],
        name: str,
        description: Optional[str],
        featurestore_id: int,
        **kwargs,
    ) -> None:
        self._id = id
        self._name = name
        self._description = description
        self._featurestore_id = featurestore_id

        self._storage_connector_api = storage_connector_api.StorageConnectorApi()

    @classmethod
    def from_response_json(
        cls, json_dict: Dict[str, Any]
    ) -> Union["JdbcConnector", "S3Connector", "KafkaConnector"]:
        json_decamelized = humps.decamelize(json_dict)
        _ = json_decamelized.pop("type", None)
        for subcls in cls.__subclasses__():
            if subcls.type == json_decamelized["storage_connector_type"]:
                _ = json_decamelized.pop("storage_connector_type")
                return subcls(**json_decamelized)
        raise ValueError(
            "Storage connector type `{}` is not supported.".format(
                json_decamelized["storage_connector_type"]
            )
        )

    def update_from_response_json(
        self, json_dict: Dict[str, Any]
    ) -> "StorageConnector":
        json_decamelized = humps.decamelize(json_dict)
        _ = json_decamelized.pop("type", None)
        if self.type == json_decamelized["storage_connector_type"]:
            _ = json_decamelized.pop("storage_connector_type")
            self.__init__(**json_decamelized)
        else:
            raise ValueError("Failed to update storage connector information.")
        return self

    def to_dict(self) -> Dict[str, Optional[Union[int, str]]]:
        return {
            "id": self._id,
            "name": self._name,
            "featurestoreId": self._featurestore_id,
            "storageConnectorType": self.type,
        }

    @property
    def id(self) -> Optional[int]:
        """Id of the storage connector uniquely identifying it in the Feature store."""
        return self._id

    @property
    def name(self) -> str:
        """Name of the storage connector."""
        return self._name

    @property
    def description(self) -> Optional[str]:
        """User provided description of the storage connector."""
        return self._description

    @abstractmethod
    def connector_options(self) -> Dict[str, Any]:
        """Return prepared options to be passed to the client library of the source."""
        pass

    def read(
        self,
        query: Optional[str] = None,
        data_format: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
        path: Optional[str] = None,
        dataframe_type: str = "default",
    ) -> Union[pd.DataFrame, pl.DataFrame, np.ndarray, List[List[Any]]]:
        """Reads a query or a path into a dataframe using the storage connector.

        Note, paths are only supported for object stores like S3, while
        queries are meant for JDBC databases.

        # Arguments
            query: SQL query to be run against the source. Defaults to `None`.
            data_format: When reading from object stores such as S3, the file format
                to be read, e.g. `csv`, `parquet`.
            options: Any additional key/value options to be passed to the connector.
            path: Path to be read from within the bucket of the storage connector.
            dataframe_type: str, optional. The type of the returned dataframe.
                Possible values are `"default"`, `"pandas"`, `"polars"`, `"numpy"` or `"python"`.
                Defaults to "default", which maps to a Pandas dataframe.

        # Returns
            `DataFrame`.
        """
        return engine.get_instance().read(
            self, data_format, options or {}, path, dataframe_type
        )

    def refetch(self) -> None:
        """Refetch storage connector, e.g. to renew temporary credentials."""
        self._storage_connector_api.refetch(self)

    def _get_path(self, sub_path: Optional[str]) -> Optional[str]:
        return None


class S3Connector(StorageConnector):
    type = StorageConnector.S3

    def __init__(
        self,
        id: Optional[int],
        name: str,
        featurestore_id: Optional[int],
        description: Optional[str] = None,
        # members specific to type of connector
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        server_encryption_algorithm: Optional[str] = None,
        server_encryption_key: Optional[str] = None,
        bucket: Optional[str] = None,
        region: Optional[str] = None,
        session_token: Optional[str] = None,
        iam_role: Optional[str] = None,
        arguments: Optional[List[Dict[str, Any]]] = None,
        **kwargs,
    ) -> None:
        super().__init__(id, name, description, featurestore_id)

        self._access_key = access_key
        self._secret_key = secret_key
        self._server_encryption_algorithm = server_encryption_algorithm
        self._server_encryption_key = server_encryption_key
        self._bucket = bucket
        self._region = region
        self._session_token = session_token
        self._iam_role = iam_role
        self._arguments = (
            {opt["name"]: opt["value"] for opt in arguments} if arguments else {}
        )

    @property
    def access_key(self) -> Optional[str]:
        """Access key."""
        return self._access_key

    @property
    def secret_key(self) -> Optional[str]:
        """Secret key."""
        return self._secret_key

    @property
    def server_encryption_algorithm(self) -> Optional[str]:
        """Encryption algorithm if server-side S3 bucket encryption is enabled."""
        return self._server_encryption_algorithm

    @property
    def server_encryption_key(self) -> Optional[str]:
        return self._server_encryption_key

    @property
    def bucket(self) -> Optional[str]:
        """Return the bucket for S3 connectors."""
        return self._bucket

    @property
    def region(self) -> Optional[str]:
        return self._region

    @property
    def session_token(self) -> Optional[str]:
        """Session token."""
        return self._session_token

    @property
    def iam_role(self) -> Optional[str]:
        return self._iam_role

    @property
    def path(self) -> str:
        """Root path of the bucket."""
        return "s3://" + self._bucket

    @property
    def arguments(self) -> Dict[str, Any]:
        return self._arguments

    def connector_options(self) -> Dict[str, Any]:
        """Return the keyword arguments of a boto3 S3 client for this connector."""
        options = {
            "aws_access_key_id": self.access_key,
            "aws_secret_access_key": self.secret_key,
        }
        if self.session_token is not None:
            options["aws_session_token"] = self.session_token
        if self.region is not None:
            options["region_name"] = self.region
        if self.arguments.get("fs.s3a.endpoint"):
            options["endpoint_url"] = self.arguments.get("fs.s3a.endpoint")
        return options

    def read(
        self,
        query: Optional[str] = None,
        data_format: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
        path: str = "",
        dataframe_type: str = "default",
    ) -> Union[pd.DataFrame, pl.DataFrame, np.ndarray, List[List[Any]]]:
        """Reads the files below a path of the bucket into a dataframe.

        # Arguments
            query: Not relevant for S3 connectors.
            data_format: The file format of the files to be read, e.g. `csv`, `parquet`.
            options: Any additional key/value options to be passed to the S3 connector.
            path: Path within the bucket to be read.
            dataframe_type: str, optional. The type of the returned dataframe.

        # Returns
            `DataFrame`.
        """
        options = {**self.arguments, **options} if options else dict(self.arguments)
        path = path or ""
        if not path.startswith(("s3://", "s3a://")):
            path = self._get_path(path)
            _logger.info(
                "Prepending default bucket specified on connector, final path: %s",
                path,
            )

        return engine.get_instance().read(
            self, data_format, options, path, dataframe_type
        )

    def _get_path(self, sub_path: Optional[str]) -> str:
        return os.path.join(self.path, sub_path or "")


class JdbcConnector(StorageConnector):
    type = StorageConnector.JDBC

    def __init__(
        self,
        id: Optional[int],
        name: str,
        featurestore_id: int,
        description: Optional[str] = None,
        # members specific to type of connector
        connection_string: Optional[str] = None,
        arguments: Optional[List[Dict[str, Any]]] = None,
        **kwargs,
    ) -> None:
        super().__init__(id, name, description, featurestore_id)

        self._connection_string = connection_string
        self._arguments = arguments

    @property
    def connection_string(self) -> Optional[str]:
        """JDBC connection string."""
        return self._connection_string

    @property
    def arguments(self) -> Optional[List[Dict[str, Any]]]:
        """Additional JDBC arguments such as `user` and `password`."""
        return self._arguments

    def connector_options(self) -> Dict[str, Any]:
        """Return the JDBC arguments as a dictionary, including the `url`."""
        options = (
            {arg.get("name"): arg.get("value") for arg in self._arguments}
            if self._arguments
            else {}
        )

        options["url"] = self._connection_string

        return options

    def read(
        self,
        query: Optional[str] = None,
        data_format: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
        path: Optional[str] = None,
        dataframe_type: str = "default",
    ) -> Union[pd.DataFrame, pl.DataFrame, np.ndarray, List[List[Any]]]:
        """Reads a query into a dataframe using the storage connector.

        # Arguments
            query: A SQL query to be read.
            data_format: Not relevant for JDBC based connectors.
            options: Any additional key/value options to be passed to the JDBC connector.
            path: Not relevant for JDBC based connectors.
            dataframe_type: str, optional. The type of the returned dataframe.

        # Returns
            `DataFrame`.
        """
        options = (
            {**self.connector_options(), **options}
            if options is not None
            else self.connector_options()
        )
        if query:
            options["query"] = query

        return engine.get_instance().read(
            self, self.JDBC.lower(), options, None, dataframe_type
        )


class KafkaConnector(StorageConnector):
    type = StorageConnector.KAFKA

    # confluent_kafka producer properties that share the Java client name
    _CONFLUENT_KEYS = [
        "bootstrap.servers",
        "security.protocol",
        "compression.type",
        "sasl.mechanism",
        "sasl.mechanisms",
        "sasl.username",
        "sasl.password",
        "ssl.ca.location",
        "ssl.certificate.location",
        "ssl.key.location",
        "ssl.key.password",
        "request.timeout.ms",
        "transactional.id",
        "transaction.timeout.ms",
        "enable.idempotence",
        "message.max.bytes",
        "linger.ms",
        "retries",
        "retry.backoff.ms",
        "acks",
        "socket.connection.setup.timeout.ms",
        "connections.max.idle.ms",
        "reconnect.backoff.ms",
        "reconnect.backoff.max.ms",
        "delivery.timeout.ms",
    ]

    def __init__(
        self,
        id: Optional[int],
        name: str,
        featurestore_id: int,
        description: Optional[str] = None,
        # members specific to type of connector
        bootstrap_servers: Optional[str] = None,
        security_protocol: Optional[str] = None,
        ssl_endpoint_identification_algorithm: Optional[str] = None,
        options: Optional[List[Dict[str, Any]]] = None,
        external_kafka: Optional[bool] = None,
        **kwargs,
    ) -> None:
        super().__init__(id, name, description, featurestore_id)

        self._bootstrap_servers = bootstrap_servers
        self._security_protocol = security_protocol
        self._ssl_endpoint_identification_algorithm = (
            ssl_endpoint_identification_algorithm
        )
        self._options = (
            {option["name"]: option["value"] for option in options}
            if options is not None
            else {}
        )
        self._external_kafka = external_kafka

    @property
    def bootstrap_servers(self) -> Optional[str]:
        """Bootstrap servers string."""
        return self._bootstrap_servers

    @property
    def security_protocol(self) -> Optional[str]:
        return self._security_protocol

    @property
    def ssl_endpoint_identification_algorithm(self) -> Optional[str]:
        return self._ssl_endpoint_identification_algorithm

    @property
    def options(self) -> Dict[str, Any]:
        """Additional kafka client properties."""
        return self._options

    def kafka_options(self) -> Dict[str, Any]:
        """Return the connector properties using the Java kafka client names.
        https://kafka.apache.org/documentation/
        """
        config = {}
        config.update(self.options)
        config.update(
            {
                "bootstrap.servers": self.bootstrap_servers,
                "security.protocol": self.security_protocol,
                "ssl.endpoint.identification.algorithm": self._ssl_endpoint_identification_algorithm,
            }
        )

        if self._external_kafka:
            warnings.warn(
                "Getting connection details to externally managed Kafka cluster. "
                "Make sure that the topic being used exists.",
                util.StorageWarning,
                stacklevel=1,
            )

        return config

    def connector_options(self) -> Dict[str, Any]:
        return self.confluent_options()

    def confluent_options(self) -> Dict[str, Any]:
        """Return prepared options to be passed to confluent_kafka.
        Only producer values with Importance >= medium are translated.
        https://docs.confluent.io/platform/current/clients/librdkafka/html/md_CONFIGURATION.html
        """
        config = {}
        for key, value in self.kafka_options().items():
            if value is None:
                continue
            if key == "sasl.jaas.config":
                groups = re.search(
                    "(.+?) .*username=[\"'](.+?)[\"'] .*password=[\"'](.+?)[\"']",
                    value,
                )
                if "sasl.mechanisms" not in config:
                    config["sasl.mechanisms"] = {
                        "org.apache.kafka.common.security.plain.PlainLoginModule": "PLAIN",
                        "org.apache.kafka.common.security.scram.ScramLoginModule": "SCRAM-SHA-256",
                        "org.apache.kafka.common.security.oauthbearer.OAuthBearerLoginModule": "OAUTHBEARER",
                    }.get(groups.group(1))
                config["sasl.username"] = groups.group(2)
                config["sasl.password"] = groups.group(3)
            elif key == "ssl.endpoint.identification.algorithm":
                config[key] = "none" if value == "" else value
            elif key == "queued.max.requests":
                config["queue.buffering.max.messages"] = value
            elif key == "queued.max.request.bytes":
                config["queue.buffering.max.kbytes"] = value
            elif key in self._CONFLUENT_KEYS:
                config[key] = value
            else:
                _logger.debug("Ignoring kafka property `%s` for confluent_kafka", key)

        return config
