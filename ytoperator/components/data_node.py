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

from ytoperator import consts
from ytoperator.apiproxy import APIProxy
from ytoperator.components.base import ServerComponentBase, SyncStatus
from ytoperator.components.server import Server
from ytoperator.labeller import Labeller, format_component_name
from ytoperator.schema import ClusterSnapshot, DataNodesSpec, YtsaurusSpec
from ytoperator.ytconfig.generator import Generator


class DataNode(ServerComponentBase):
    def __init__(
        self,
        cfgen: Generator,
        api_proxy: APIProxy,
        cluster_spec: YtsaurusSpec,
        spec: DataNodesSpec,
        cluster_name: str,
    ):
        labeller = Labeller(
            cluster_name=cluster_name,
            namespace=api_proxy.namespace,
            component_label=format_component_name(consts.YT_COMPONENT_LABEL_DATA_NODE, spec.name),
            component_name=format_component_name("DataNode", spec.name),
            monitoring_port=consts.NODE_MONITORING_PORT,
        )
        server = Server(
            labeller,
            api_proxy,
            spec,
            cluster_spec.core_image,
            "/usr/bin/ytserver-node",
            "ytserver-data-node.yson",
            cfgen.get_data_nodes_stateful_set_name(spec.name),
            format_component_name("data-nodes", spec.name),
            lambda: cfgen.get_data_node_config(spec),
            cluster_spec.image_pull_secrets,
        )
        super().__init__(labeller, server)

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

        return SyncStatus.READY
