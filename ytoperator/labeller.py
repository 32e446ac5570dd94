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

from dataclasses import dataclass
from typing import Dict

from ytoperator import consts


def format_component_name(base: str, instance_name: str = None) -> str:
    """Append a group name to a component name unless the group is the default one"""
    if instance_name and instance_name != "default":
        return f"{base}-{instance_name}"
    return base


@dataclass
class Labeller:
    """Names and labels of the Kubernetes objects owned by one component"""

    cluster_name: str
    namespace: str
    component_label: str
    component_name: str
    monitoring_port: int = 0

    def get_full_component_label(self) -> str:
        return f"{self.component_label}-{self.cluster_name}"

    def get_selector_labels(self) -> Dict[str, str]:
        return {
            consts.LABEL_INSTANCE: self.cluster_name,
            consts.LABEL_COMPONENT: self.component_label,
        }

    def get_meta_labels(self) -> Dict[str, str]:
        labels = self.get_selector_labels()
        labels[consts.LABEL_APP_NAME] = self.get_full_component_label()
        labels[consts.LABEL_MANAGED_BY] = consts.MANAGED_BY
        return labels

    def get_object_meta(self, name: str) -> Dict:
        return {
            "name": name,
            "namespace": self.namespace,
            "labels": self.get_meta_labels(),
        }

    def get_init_job_name(self, name: str) -> str:
        return f"{self.component_label}-init-job-{name.lower()}"

    def get_init_job_config_map_name(self, name: str) -> str:
        return f"{name.lower()}-{self.component_label}-init-job-config"

    def get_server_config_map_name(self) -> str:
        return f"{self.component_label}-config"
