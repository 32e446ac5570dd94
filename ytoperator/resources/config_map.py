# Copyright 2025 ApeCloud, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from typing import Any, Dict

from ytoperator.resources.base import BaseManagedResource


class ConfigMap(BaseManagedResource):
    KIND = "ConfigMap"
    API_VERSION = "v1"

    def _skeleton(self) -> Dict[str, Any]:
        obj = super()._skeleton()
        obj["data"] = {}
        return obj

    def observed_data(self) -> Dict[str, str]:
        if not self.exists():
            return {}
        return self.old_object.get("data") or {}
