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
from typing import Callable, Optional

from ytoperator import consts, resources
from ytoperator.apiproxy import APIProxy
from ytoperator.components.base import Component, ComponentBase, SyncStatus
from ytoperator.labeller import Labeller
from ytoperator.resources import Secret
from ytoperator.schema import ClusterSnapshot, YtsaurusSpec
from ytoperator.ytclient import AdminClient, HttpAdminClient
from ytoperator.ytconfig.generator import Generator

logger = logging.getLogger(__name__)

AdminClientFactory = Callable[[str, str], AdminClient]


class YtsaurusClient(ComponentBase):
    """
    Owner of the administrative connection to the cluster.

    Other components use the connection only after this component reports Ready,
    which in turn requires the master to be Ready.
    """

    def __init__(
        self,
        cfgen: Generator,
        api_proxy: APIProxy,
        spec: YtsaurusSpec,
        cluster_name: str,
        master: Component,
        client_factory: Optional[AdminClientFactory] = None,
    ):
        labeller = Labeller(
            cluster_name=cluster_name,
            namespace=api_proxy.namespace,
            component_label=consts.YT_COMPONENT_LABEL_CLIENT,
            component_name="YtsaurusClient",
        )
        super().__init__(labeller)
        self.cfgen = cfgen
        self.master = master
        self.client_factory = client_factory or HttpAdminClient
        self._admin_client: Optional[AdminClient] = None
        self.admin_credentials: Optional[Secret] = None
        if spec.admin_credentials is not None:
            self.admin_credentials = Secret(spec.admin_credentials.name, labeller, api_proxy)

    def fetch(self):
        if self.admin_credentials is not None:
            resources.fetch([self.admin_credentials])

    def _get_token(self) -> str:
        token = None
        if self.admin_credentials is not None:
            token = self.admin_credentials.get_value(consts.ADMIN_TOKEN_SECRET)
        return token or consts.DEFAULT_ADMIN_PASSWORD

    def _do_sync(self, cluster: ClusterSnapshot, dry: bool) -> SyncStatus:
        master_status = self.master.status(cluster)
        if master_status != SyncStatus.READY:
            logger.info(f"{self.name} waits for master, master status is {master_status.value}")
            return SyncStatus.BLOCKED
        return SyncStatus.READY

    def get_admin_client(self) -> AdminClient:
        """Connection handle, to be used only after ``status`` reported Ready"""
        if self._admin_client is None:
            self._admin_client = self.client_factory(self.cfgen.get_http_proxy_address(), self._get_token())
        return self._admin_client

    def close(self):
        if self._admin_client is not None:
            self._admin_client.close()
            self._admin_client = None
