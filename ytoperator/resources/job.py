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


class Job(BaseManagedResource):
    KIND = "Job"
    API_VERSION = "batch/v1"

    def _skeleton(self) -> Dict[str, Any]:
        obj = super()._skeleton()
        obj["spec"] = {"template": {}}
        return obj

    def completed(self) -> bool:
        if not self.exists():
            return False
        status = self.old_object.get("status") or {}
        return (status.get("succeeded") or 0) > 0

    def remove(self):
        """Delete the job together with its pods"""
        if not self.exists():
            return
        self.api_proxy.delete_object(self.KIND, self.name, propagation_policy="Foreground")
        self.old_object = None
