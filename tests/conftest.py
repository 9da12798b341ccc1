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

import os

import pytest
from exfs import client, engine


pytest_plugins = [
    "tests.fixtures.backend_fixtures",
    "tests.fixtures.dataframe_fixtures",
]

# keep test output plain, the rich handler is only installed on connect
os.environ.setdefault("EXFS_USE_RICH_LOGGER", "false")


@pytest.fixture(autouse=True)
def reset_singletons():
    yield
    engine.stop()
    client._client = None
