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

import base64
from typing import Optional

from ytoperator.resources.base import BaseManagedResource


class Secret(BaseManagedResource):
    """A secret the operator reads but never writes"""

    KIND = "Secret"
    API_VERSION = "v1"

    def get_value(self, key: str) -> Optional[str]:
        if not self.exists():
            return None
        data = self.old_object.get("data") or {}
        if key not in data:
            return None
        return base64.b64decode(data[key]).decode()

    def sync(self):
        raise NotImplementedError("Secrets are managed outside of the operator")
