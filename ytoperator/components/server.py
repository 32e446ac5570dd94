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

import logging
import os
from typing import Any, Dict, List

from ytoperator import consts, resources
from ytoperator.apiproxy import APIProxy
from ytoperator.components.config_helper import ConfigHelper
from ytoperator.labeller import Labeller
from ytoperator.resources import StatefulSet
from ytoperator.schema import ClusterSnapshot, InstanceSpec, LocalObjectReference
from ytoperator.ytconfig.generator import GeneratorFunc

logger = logging.getLogger(__name__)


def create_config_volume_mount() -> Dict[str, Any]:
    return {"name": consts.CONFIG_VOLUME_NAME, "mountPath": consts.CONFIG_MOUNT_POINT, "readOnly": True}


def create_config_volume(config_map_name: str, default_mode: int = None) -> Dict[str, Any]:
    volume = {"name": consts.CONFIG_VOLUME_NAME, "configMap": {"name": config_map_name}}
    if default_mode is not None:
        volume["configMap"]["defaultMode"] = default_mode
    return volume


class Server:
    """
    A server workload (stateful set) coupled with its generated config.

    Observation methods never touch the API; ``sync`` and ``remove_pods`` are the
    only mutations.
    """

    def __init__(
        self,
        labeller: Labeller,
        api_proxy: APIProxy,
        instance_spec: InstanceSpec,
        image: str,
        binary_path: str,
        config_file_name: str,
        stateful_set_name: str,
        service_name: str,
        generator: GeneratorFunc,
        image_pull_secrets: List[LocalObjectReference] = None,
    ):
        self.labeller = labeller
        self.instance_spec = instance_spec
        self.image = instance_spec.image or image
        self.binary_path = binary_path
        self.config_file_name = config_file_name
        self.service_name = service_name
        self.image_pull_secrets = image_pull_secrets or []
        self.stateful_set = StatefulSet(stateful_set_name, labeller, api_proxy)
        self.config_helper = ConfigHelper(
            labeller,
            api_proxy,
            labeller.get_server_config_map_name(),
            config_file_name,
            generator,
        )

    def fetch(self):
        resources.fetch([self.stateful_set, self.config_helper])

    def exists(self) -> bool:
        return self.stateful_set.exists()

    def _pods_image_corresponds_to_spec(self) -> bool:
        return self.stateful_set.observed_images() == [self.image]

    def is_in_sync(self) -> bool:
        """Observed workload and config equal the desired ones"""
        if self.config_helper.need_init() or self.config_helper.need_reload():
            return False
        if self.stateful_set.need_sync(self.instance_spec.instance_count):
            return False
        if not self._pods_image_corresponds_to_spec():
            return False
        return self.stateful_set.observed_annotation(consts.CONFIG_HASH_ANNOTATION) == self.config_helper.get_config_hash()

    def need_update(self) -> bool:
        """A change that can only be rolled out by the cluster-wide update"""
        if not self.exists():
            return False
        if not self._pods_image_corresponds_to_spec():
            return True
        return self.config_helper.need_reload()

    def need_sync(self, cluster: ClusterSnapshot) -> bool:
        """A change that is safe to apply right away"""
        if self.config_helper.need_init() or not self.exists():
            return True
        if self.stateful_set.need_sync(self.instance_spec.instance_count):
            return True
        return cluster.is_updating() and self.need_update()

    def build_stateful_set(self) -> Dict[str, Any]:
        ss = self.stateful_set.build()
        spec = ss["spec"]
        spec["replicas"] = self.instance_spec.instance_count
        spec["serviceName"] = self.service_name
        spec["podManagementPolicy"] = "Parallel"

        template = spec["template"]
        template["metadata"]["annotations"] = {consts.CONFIG_HASH_ANNOTATION: self.config_helper.get_config_hash()}
        template["metadata"]["labels"].update(self.instance_spec.labels)
        template["spec"] = {
            "imagePullSecrets": [{"name": secret.name} for secret in self.image_pull_secrets],
            "containers": [
                {
                    "name": "ytserver",
                    "image": self.image,
                    "command": [
                        self.binary_path,
                        "--config",
                        os.path.join(consts.CONFIG_MOUNT_POINT, self.config_file_name),
                    ],
                    "volumeMounts": [create_config_volume_mount()],
                }
            ],
            "volumes": [create_config_volume(self.config_helper.get_config_map_name())],
        }
        return ss

    def sync(self):
        self.build_stateful_set()
        resources.sync([self.config_helper, self.stateful_set])
        logger.info(f"Synced {self.labeller.component_name} server")

    def are_pods_ready(self) -> bool:
        return self.stateful_set.are_pods_ready()

    def are_pods_removed(self) -> bool:
        return self.stateful_set.are_pods_removed()

    def remove_pods(self):
        """Scale the workload to zero, keeping its definition"""
        if not self.exists():
            return
        ss = self.build_stateful_set()
        ss["spec"]["replicas"] = 0
        self.stateful_set.sync()
        logger.info(f"Removing pods of {self.labeller.component_name}")
