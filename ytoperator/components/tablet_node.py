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

from ytoperator import consts
from ytoperator.apiproxy import APIProxy
from ytoperator.components.base import ServerComponentBase, SyncStatus
from ytoperator.components.server import Server
from ytoperator.components.ytsaurus_client import YtsaurusClient
from ytoperator.conditions import Condition, ConditionManager
from ytoperator.labeller import Labeller, format_component_name
from ytoperator.schema import ClusterSnapshot, TabletNodesSpec, YtsaurusSpec
from ytoperator.ytclient import create_tablet_cells
from ytoperator.ytconfig.generator import Generator

logger = logging.getLogger(__name__)

INIT_BUNDLES_CONDITION = "bundlesTabletNodeInitCompleted"
SYS_BUNDLE_PATH = "//sys/tablet_cell_bundles/sys"
INITIAL_BUNDLES = ["default", "sys"]


class TabletNode(ServerComponentBase):
    def __init__(
        self,
        cfgen: Generator,
        api_proxy: APIProxy,
        conditions: ConditionManager,
        cluster_spec: YtsaurusSpec,
        spec: TabletNodesSpec,
        cluster_name: str,
        ytsaurus_client: YtsaurusClient,
        do_initialization: bool,
    ):
        labeller = Labeller(
            cluster_name=cluster_name,
            namespace=api_proxy.namespace,
            component_label=format_component_name(consts.YT_COMPONENT_LABEL_TABLET_NODE, spec.name),
            component_name=format_component_name("TabletNode", spec.name),
            monitoring_port=consts.NODE_MONITORING_PORT,
        )
        server = Server(
            labeller,
            api_proxy,
            spec,
            cluster_spec.core_image,
            "/usr/bin/ytserver-node",
            "ytserver-tablet-node.yson",
            cfgen.get_tablet_nodes_stateful_set_name(spec.name),
            format_component_name("tablet-nodes", spec.name),
            lambda: cfgen.get_tablet_node_config(spec),
            cluster_spec.image_pull_secrets,
        )
        super().__init__(labeller, server)

        self.conditions = conditions
        self.spec = spec
        self.ytsaurus_client = ytsaurus_client
        self.do_initialization = do_initialization
        self.init_bundles_condition = INIT_BUNDLES_CONDITION

    def _do_sync(self, cluster: ClusterSnapshot, dry: bool) -> SyncStatus:
        if cluster.is_waiting_for_pods_removal():
            self.remove_pods(dry)
            return SyncStatus.UPDATING

        if not self.server.is_in_sync():
            if not dry:
                self.server.sync()
            return SyncStatus.PENDING

        if not self.server.are_pods_ready():
            return SyncStatus.BLOCKED

        if not self.do_initialization or self.conditions.is_status_condition_true(self.init_bundles_condition):
            return SyncStatus.READY

        if self.ytsaurus_client.status(cluster) != SyncStatus.READY:
            return SyncStatus.BLOCKED

        if not dry:
            self._init_bundles()

        return SyncStatus.PENDING

    def _init_bundles(self):
        client = self.ytsaurus_client.get_admin_client()

        # A failed existence probe is retried on the next pass
        if not client.node_exists(SYS_BUNDLE_PATH):
            try:
                client.create_object(
                    "tablet_cell_bundle",
                    {
                        "name": "sys",
                        "options": {
                            "changelog_account": "sys",
                            "snapshot_account": "sys",
                        },
                    },
                )
            except Exception as e:
                logger.error(f"Creating tablet_cell_bundle failed: {e}")
                raise

        for bundle in INITIAL_BUNDLES:
            create_tablet_cells(client, bundle, 1)

        self.conditions.set_status_condition(
            Condition.true(
                self.init_bundles_condition,
                reason="InitBundlesCompleted",
                message="Init bundles successfully completed",
            )
        )
