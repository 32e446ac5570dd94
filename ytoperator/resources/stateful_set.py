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

from typing import Any, Dict, List

from ytoperator.resources.base import BaseManagedResource


class StatefulSet(BaseManagedResource):
    KIND = "StatefulSet"
    API_VERSION = "apps/v1"

    def _skeleton(self) -> Dict[str, Any]:
        obj = super()._skeleton()
        obj["spec"] = {
            "replicas": 0,
            "selector": {"matchLabels": self.labeller.get_selector_labels()},
            "template": {"metadata": {"labels": self.labeller.get_meta_labels()}, "spec": {}},
        }
        return obj

    def _observed_spec(self) -> Dict[str, Any]:
        return (self.old_object or {}).get("spec") or {}

    def _observed_status(self) -> Dict[str, Any]:
        return (self.old_object or {}).get("status") or {}

    def observed_replicas(self) -> int:
        return self._observed_spec().get("replicas") or 0

    def observed_images(self) -> List[str]:
        containers = self._observed_spec().get("template", {}).get("spec", {}).get("containers") or []
        return [container.get("image") for container in containers]

    def observed_annotation(self, key: str) -> str:
        annotations = self._observed_spec().get("template", {}).get("metadata", {}).get("annotations") or {}
        return annotations.get(key)

    def need_sync(self, replicas: int) -> bool:
        return not self.exists() or self.observed_replicas() != replicas

    def are_pods_ready(self) -> bool:
        """All declared replicas exist, run the current revision and report ready"""
        if not self.exists():
            return False
        status = self._observed_status()
        generation = (self.old_object.get("metadata") or {}).get("generation") or 0
        if (status.get("observedGeneration") or 0) < generation:
            return False
        replicas = self.observed_replicas()
        if replicas == 0:
            return False
        return (status.get("readyReplicas") or 0) >= replicas and (status.get("updatedReplicas") or 0) >= replicas

    def are_pods_removed(self) -> bool:
        if not self.exists():
            return True
        return self.observed_replicas() == 0 and (self._observed_status().get("replicas") or 0) == 0
