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

import copy
import logging
from typing import Any, Dict, Optional

from ytoperator.apiproxy import APIProxy
from ytoperator.labeller import Labeller

logger = logging.getLogger(__name__)


class BaseManagedResource:
    """
    A single Kubernetes object owned by a component.

    ``old_object`` is what was observed by the last ``fetch``; ``new_object`` is the
    desired object built during the current pass. Fetching drops the built object,
    so nothing built in one pass leaks into the next.
    """

    KIND: str = None
    API_VERSION: str = None

    def __init__(self, name: str, labeller: Labeller, api_proxy: APIProxy):
        self.name = name
        self.labeller = labeller
        self.api_proxy = api_proxy
        self.old_object: Optional[Dict[str, Any]] = None
        self.new_object: Optional[Dict[str, Any]] = None

    def fetch(self):
        self.old_object = self.api_proxy.fetch_object(self.KIND, self.name)
        self.new_object = None

    def exists(self) -> bool:
        return self.old_object is not None

    def _skeleton(self) -> Dict[str, Any]:
        return {
            "apiVersion": self.API_VERSION,
            "kind": self.KIND,
            "metadata": self.labeller.get_object_meta(self.name),
        }

    def build(self) -> Dict[str, Any]:
        """Return the desired object of the current pass, creating an empty one on first call"""
        if self.new_object is None:
            self.new_object = self._skeleton()
        return self.new_object

    def sync(self):
        """Create the object if it is absent, replace it otherwise"""
        body = copy.deepcopy(self.build())
        if self.exists():
            resource_version = self.old_object.get("metadata", {}).get("resourceVersion")
            if resource_version:
                body["metadata"]["resourceVersion"] = resource_version
            self.old_object = self.api_proxy.update_object(self.KIND, body)
        else:
            self.old_object = self.api_proxy.create_object(self.KIND, body)
