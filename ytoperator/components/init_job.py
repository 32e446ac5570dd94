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
from ytoperator.components.base import SyncStatus
from ytoperator.components.config_helper import ConfigHelper
from ytoperator.components.server import create_config_volume, create_config_volume_mount
from ytoperator.conditions import Condition, ConditionManager
from ytoperator.labeller import Labeller
from ytoperator.resources import Job
from ytoperator.schema import LocalObjectReference
from ytoperator.ytconfig.generator import GeneratorFunc

logger = logging.getLogger(__name__)

INIT_JOB_PROLOGUE = """
set -e
set -x
"""


def init_job_with_native_driver_prologue() -> str:
    commands = [
        INIT_JOB_PROLOGUE,
        f"export YT_DRIVER_CONFIG_PATH={os.path.join(consts.CONFIG_MOUNT_POINT, consts.CLIENT_CONFIG_FILE_NAME)}",
    ]
    return "\n".join(commands)


class InitJob:
    """
    One-shot bootstrap job of a component.

    The job runs a script once per cluster lifetime. Completion is remembered in a
    condition, so the job itself may disappear without the script running again;
    only ``prepare_restart`` makes it run once more.
    """

    def __init__(
        self,
        labeller: Labeller,
        api_proxy: APIProxy,
        conditions: ConditionManager,
        image_pull_secrets: List[LocalObjectReference],
        name: str,
        config_file_name: str,
        image: str,
        generator: GeneratorFunc,
    ):
        self.labeller = labeller
        self.conditions = conditions
        self.image_pull_secrets = image_pull_secrets or []
        self.image = image
        self.init_completed_condition = f"{name}{labeller.component_name}InitJobCompleted"
        self.init_job = Job(labeller.get_init_job_name(name), labeller, api_proxy)
        self.config_helper = ConfigHelper(
            labeller,
            api_proxy,
            labeller.get_init_job_config_map_name(name),
            config_file_name,
            generator,
        )

    def set_init_script(self, script: str):
        cm = self.config_helper.build()
        cm["data"][consts.INIT_CLUSTER_SCRIPT_FILE_NAME] = script

    def build(self) -> Dict[str, Any]:
        job = self.init_job.build()
        job["spec"]["template"] = {
            "metadata": {"labels": self.labeller.get_meta_labels()},
            "spec": {
                "imagePullSecrets": [{"name": secret.name} for secret in self.image_pull_secrets],
                "containers": [
                    {
                        "image": self.image,
                        "name": "ytsaurus-init",
                        "command": [
                            "bash",
                            "-c",
                            os.path.join(consts.CONFIG_MOUNT_POINT, consts.INIT_CLUSTER_SCRIPT_FILE_NAME),
                        ],
                        "volumeMounts": [create_config_volume_mount()],
                    }
                ],
                "volumes": [create_config_volume(self.config_helper.get_config_map_name(), default_mode=0o500)],
                "restartPolicy": "OnFailure",
            },
        }
        return job

    def fetch(self):
        resources.fetch([self.init_job, self.config_helper])

    def sync(self, dry: bool) -> SyncStatus:
        if self.conditions.is_status_condition_true(self.init_completed_condition):
            return SyncStatus.READY

        if not resources.exists(self.init_job):
            if dry:
                return SyncStatus.PENDING
            self.build()
            resources.sync([self.config_helper, self.init_job])
            logger.info(f"Init job {self.init_job.name} created for {self.labeller.component_name}")
            return SyncStatus.PENDING

        if not self.init_job.completed():
            logger.info(f"Init job is not completed for {self.labeller.component_name}")
            return SyncStatus.BLOCKED

        if not dry:
            self.conditions.set_status_condition(
                Condition.true(
                    self.init_completed_condition,
                    reason="InitJobCompleted",
                    message="Init job successfully completed",
                )
            )
        return SyncStatus.PENDING

    def prepare_restart(self, dry: bool):
        if dry:
            return
        self._remove_if_exists()
        self.conditions.set_status_condition(
            Condition.false(
                self.init_completed_condition,
                reason="InitJobNeedRestart",
                message="Init job needs restart",
            )
        )

    def is_restart_prepared(self) -> bool:
        return not resources.exists(self.init_job) and self.conditions.is_status_condition_false(
            self.init_completed_condition
        )

    def is_restart_completed(self) -> bool:
        return self.conditions.is_status_condition_true(self.init_completed_condition)

    def _remove_if_exists(self):
        if not resources.exists(self.init_job):
            return
        self.init_job.remove()
        logger.info(f"Init job {self.init_job.name} removed for restart")
