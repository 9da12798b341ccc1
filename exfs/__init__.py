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

import os
import warnings


# Setting polars skip cpu flag to suppress CPU false positive warning messages printed while importing exfs
os.environ["POLARS_SKIP_CPU_CHECK"] = "1"

from exfs import (  # noqa: E402,  Module level import not at top of file because os.environ must be set before importing exfs
    util,
    version,
)
from exfs.connection import (  # noqa: E402,  Module level import not at top of file because os.environ must be set before importing exfs
    Connection,
)


__version__ = version.__version__

connection = Connection.connection


def fs_formatwarning(message, category, filename, lineno, line=None):
    return "{}: {}\n".format(category.__name__, message)


warnings.formatwarning = fs_formatwarning
warnings.simplefilter("always", util.FeatureGroupWarning)
warnings.filterwarnings(
    action="ignore", category=DeprecationWarning, module=r".*ipykernel"
)


__all__ = ["connection"]
