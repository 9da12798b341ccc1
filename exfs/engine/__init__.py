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

from typing import Optional

from exfs.client import exceptions


_engine = None
_engine_type = None


def init(engine_type: str) -> None:
    global _engine_type
    global _engine
    if not _engine:
        if engine_type == "python":
            from exfs.engine import python

            _engine_type = "python"
            _engine = python.Engine()
        else:
            raise exceptions.FeatureStoreException(
                "Engine `{}` is not supported. Supported engines are `'python'`.".format(
                    engine_type
                )
            )


def get_instance():
    global _engine
    if _engine:
        return _engine
    raise exceptions.FeatureStoreException(
        "Couldn't find execution engine. Try reconnecting to the feature store."
    )


def get_type() -> Optional[str]:
    global _engine_type
    if _engine_type:
        return _engine_type
    raise exceptions.FeatureStoreException(
        "Couldn't find execution engine. Try reconnecting to the feature store."
    )


def stop() -> None:
    global _engine
    global _engine_type
    _engine = None
    _engine_type = None
