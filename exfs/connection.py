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

from exfs import client, engine, util
from exfs.core import feature_store_api
from exfs.decorators import connected, not_connected
from exfs.helpers import logger


_logger = logging.getLogger(__name__)

AWS_DEFAULT_REGION = "default"
PORT_DEFAULT = 443
SECRETS_STORE_DEFAULT = "parameterstore"
HOSTNAME_VERIFICATION_DEFAULT = True
ENGINE_DEFAULT = "python"

HOST_ENV = "EXFS_HOST"
PORT_ENV = "EXFS_PORT"
PROJECT_ENV = "EXFS_PROJECT"
API_KEY_ENV = "EXFS_API_KEY"


class Connection:
    """A feature store connection object.

    The connection is project specific, so you can access the project's own feature
    store but also any feature store which has been shared with the project you connect
    to.

    !!! example "Connection factory"
        ```python
        import exfs
        conn = exfs.connection(
            host="my_instance",
            project="my_project",
            api_key_value="apikey",
        )
        fs = conn.get_feature_store()
        ```

    Arguments that are not passed explicitly are read from the environment
    variables `EXFS_HOST`, `EXFS_PORT`, `EXFS_PROJECT` and `EXFS_API_KEY`.

    # Arguments
        host: The hostname of the metadata service, defaults to `None`.
        port: The port on which the metadata service can be reached,
            defaults to `443`.
        project: The name of the project to connect to.
        engine: Which engine to use, only `"python"` is available.
        region_name: The name of the AWS region in which the required secrets are
            stored, defaults to `"default"`.
        secrets_store: The secrets storage to be used, either `"secretsmanager"`,
            `"parameterstore"` or `"local"`, defaults to `"parameterstore"`.
        hostname_verification: Whether or not to verify the server's certificate,
            defaults to `True`.
        trust_store_path: Path on the file system containing the trust store,
            defaults to `None`.
        api_key_file: Path to a file containing the API Key, if provided,
            `secrets_store` will be ignored, defaults to `None`.
        api_key_value: API Key as string, if provided, `secrets_store` will be ignored,
            however, this should be used with care, defaults to `None`.

    # Returns
        `Connection`. Feature Store connection handle to perform operations on a
            project.
    """

    def __init__(
        self,
        host: str = None,
        port: int = None,
        project: str = None,
        engine: str = ENGINE_DEFAULT,
        region_name: str = AWS_DEFAULT_REGION,
        secrets_store: str = SECRETS_STORE_DEFAULT,
        hostname_verification: bool = HOSTNAME_VERIFICATION_DEFAULT,
        trust_store_path: str = None,
        api_key_file: str = None,
        api_key_value: str = None,
    ):
        self._host = host or os.environ.get(HOST_ENV)
        self._port = port or int(os.environ.get(PORT_ENV, PORT_DEFAULT))
        self._project = project or os.environ.get(PROJECT_ENV)
        self._engine = engine
        self._region_name = region_name
        self._secrets_store = secrets_store
        self._hostname_verification = hostname_verification
        self._trust_store_path = trust_store_path
        self._api_key_file = api_key_file
        self._api_key_value = api_key_value or os.environ.get(API_KEY_ENV)
        if api_key_file is not None and api_key_value is None:
            self._secrets_store = client.external.Client.LOCAL_STORE
        self._connected = False

        self.connect()

    @connected
    def get_feature_store(self, name: str = None):
        """Get a reference to a feature store to perform operations on.

        Defaulting to the project name of default feature store. To get a
        shared feature store, the project name of the feature store is required.

        # Arguments
            name: The name of the feature store, defaults to `None`.

        # Returns
            `FeatureStore`. A feature store handle object to perform operations on.
        """
        if not name:
            name = client.get_instance()._project_name
        return self._feature_store_api.get(util.append_feature_store_suffix(name))

    @not_connected
    def connect(self):
        """Instantiate the connection.

        Creating a `Connection` object implicitly calls this method for you to
        instantiate the connection. It is possible to close the connection
        gracefully with the `close()` method and call `connect()` again to reopen it.
        """
        self._connected = True
        try:
            if self._engine is None or self._engine.lower() != "python":
                raise ConnectionError(
                    "Engine you are trying to initialize is unknown. "
                    "Supported engine is `'python'`."
                )
            self._engine = "python"

            logger.set_rich_for_exfs_root_logger()

            client.init(
                "external",
                self._host,
                self._port,
                self._project,
                self._region_name,
                self._secrets_store,
                self._hostname_verification,
                self._trust_store_path,
                self._api_key_file,
                self._api_key_value,
            )

            engine.init(self._engine)

            self._feature_store_api = feature_store_api.FeatureStoreApi()
        except (TypeError, ConnectionError):
            self._connected = False
            raise
        _logger.info("Connected. Call `.close()` to terminate connection gracefully.")

    def close(self):
        """Close a connection gracefully.

        Usage is recommended but optional.
        """
        client.stop()
        self._feature_store_api = None
        engine.stop()
        self._connected = False
        _logger.info("Connection closed.")

    @classmethod
    def connection(
        cls,
        host: str = None,
        port: int = None,
        project: str = None,
        engine: str = ENGINE_DEFAULT,
        region_name: str = AWS_DEFAULT_REGION,
        secrets_store: str = SECRETS_STORE_DEFAULT,
        hostname_verification: bool = HOSTNAME_VERIFICATION_DEFAULT,
        trust_store_path: str = None,
        api_key_file: str = None,
        api_key_value: str = None,
    ):
        """Connection factory method, accessible through `exfs.connection()`."""
        return cls(
            host,
            port,
            project,
            engine,
            region_name,
            secrets_store,
            hostname_verification,
            trust_store_path,
            api_key_file,
            api_key_value,
        )

    @property
    def host(self):
        return self._host

    @property
    def port(self):
        return self._port

    @property
    def project(self):
        return self._project

    @property
    def engine(self):
        return self._engine

    @property
    def region_name(self):
        return self._region_name

    @property
    def secrets_store(self):
        return self._secrets_store

    @property
    def hostname_verification(self):
        return self._hostname_verification

    @property
    def trust_store_path(self):
        return self._trust_store_path

    @property
    def api_key_file(self):
        return self._api_key_file

    def __enter__(self):
        if not self._connected:
            self.connect()
        return self

    def __exit__(self, type, value, traceback):
        self.close()
