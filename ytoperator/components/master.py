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
from typing import Optional

from ytoperator import consts, resources
from ytoperator.apiproxy import APIProxy
from ytoperator.components.base import ServerComponentBase, SyncStatus
from ytoperator.components.helpers import create_user_command
from ytoperator.components.init_job import InitJob, init_job_with_native_driver_prologue
from ytoperator.components.server import Server
from ytoperator.conditions import ConditionManager
from ytoperator.labeller import Labeller
from ytoperator.resources import Secret
from ytoperator.schema import ClusterSnapshot, ClusterState, YtsaurusSpec
from ytoperator.ytconfig import yson
from ytoperator.ytconfig.generator import Generator

logger = logging.getLogger(__name__)


class Master(ServerComponentBase):
    def __init__(
        self,
        cfgen: Generator,
        api_proxy: APIProxy,
        conditions: ConditionManager,
        spec: YtsaurusSpec,
        cluster_name: str,
    ):
        labeller = Labeller(
            cluster_name=cluster_name,
            namespace=api_proxy.namespace,
            component_label=consts.YT_COMPONENT_LABEL_MASTER,
            component_name="Master",
            monitoring_port=consts.MASTER_MONITORING_PORT,
        )
        server = Server(
            labeller,
            api_proxy,
            spec.primary_masters,
            spec.core_image,
            "/usr/bin/ytserver-master",
            "ytserver-master.yson",
            cfgen.get_masters_stateful_set_name(),
            cfgen.get_masters_service_name(),
            cfgen.get_master_config,
            spec.image_pull_secrets,
        )
        super().__init__(labeller, server)

        self.cfgen = cfgen
        self.spec = spec
        self.init_job = InitJob(
            labeller,
            api_proxy,
            conditions,
            spec.image_pull_secrets,
            "default",
            consts.CLIENT_CONFIG_FILE_NAME,
            spec.core_image,
            cfgen.get_native_client_config,
        )
        self.admin_credentials: Optional[Secret] = None
        if spec.admin_credentials is not None:
            self.admin_credentials = Secret(spec.admin_credentials.name, labeller, api_proxy)

    def fetch(self):
        fetchables = [self.server, self.init_job]
        if self.admin_credentials is not None:
            fetchables.insert(0, self.admin_credentials)
        resources.fetch(fetchables)

    def _init_admin_user(self) -> str:
        admin_login, admin_password = consts.DEFAULT_ADMIN_LOGIN, consts.DEFAULT_ADMIN_PASSWORD
        admin_token = consts.DEFAULT_ADMIN_PASSWORD

        if self.admin_credentials is not None and self.admin_credentials.exists():
            admin_login = self.admin_credentials.get_value(consts.ADMIN_LOGIN_SECRET) or admin_login
            admin_password = self.admin_credentials.get_value(consts.ADMIN_PASSWORD_SECRET) or admin_password
            admin_token = self.admin_credentials.get_value(consts.ADMIN_TOKEN_SECRET) or admin_token

        commands = create_user_command(admin_login, admin_password, admin_token, is_superuser=True)
        return "\n".join(commands)

    def _init_media(self) -> str:
        commands = []
        for medium in self.cfgen.get_extra_media():
            attr = yson.dumps(medium.model_dump())
            commands.append(
                f"/usr/bin/yt get //sys/media/{medium.name}/@name || /usr/bin/yt create medium --attr '{attr}'"
            )
        return "\n".join(commands)

    def create_init_script(self) -> str:
        cluster_connection = self.cfgen.get_cluster_connection().decode()

        script = [
            init_job_with_native_driver_prologue(),
            "/usr/bin/yt remove //sys/@provision_lock -f",
            "/usr/bin/yt create scheduler_pool_tree --attributes '{name=default; config={nodes_filter=\"\"}}' --ignore-existing",
            "/usr/bin/yt set //sys/pool_trees/@default_tree default",
            "/usr/bin/yt create scheduler_pool --attributes '{name=research; pool_tree=default}' --ignore-existing",
            "/usr/bin/yt create map_node //home --ignore-existing",
            f"/usr/bin/yt set //sys/@cluster_connection '{cluster_connection}'",
            "/usr/bin/yt set //sys/controller_agents/config/operation_options/spec_template "
            "'{enable_partitioned_data_balancing=%false}' -r -f",
            self._init_admin_user(),
            self._init_media(),
        ]
        return "\n".join(script)

    def _do_sync(self, cluster: ClusterSnapshot, dry: bool) -> SyncStatus:
        if cluster.cluster_state == ClusterState.RUNNING and self.server.need_update():
            return SyncStatus.NEED_FULL_UPDATE

        if cluster.is_waiting_for_pods_removal() and not cluster.local_updating_components:
            self.remove_pods(dry)
            return SyncStatus.UPDATING

        if self.server.need_sync(cluster):
            if not dry:
                self.server.sync()
            return SyncStatus.PENDING

        if not self.server.are_pods_ready():
            return SyncStatus.BLOCKED

        if not dry:
            self.init_job.set_init_script(self.create_init_script())

        return self.init_job.sync(dry)

    def prepare_init_job_restart(self, dry: bool):
        self.init_job.prepare_restart(dry)

    def is_init_job_restart_prepared(self) -> bool:
        return self.init_job.is_restart_prepared()

    def is_init_job_restart_completed(self) -> bool:
        return self.init_job.is_restart_completed()
