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
from typing import Callable, Dict, List

from ytoperator.labeller import format_component_name
from ytoperator.schema import DataNodesSpec, Medium, TabletNodesSpec, YtsaurusSpec
from ytoperator.ytconfig import yson

logger = logging.getLogger(__name__)

GeneratorFunc = Callable[[], bytes]

MASTER_RPC_PORT = 9010
NODE_RPC_PORT = 9012
HTTP_PROXY_PORT = 80


class Generator:
    """Renders the configuration files of every component from the cluster spec"""

    def __init__(self, spec: YtsaurusSpec, cluster_name: str, namespace: str, cluster_domain: str = "cluster.local"):
        self.spec = spec
        self.cluster_name = cluster_name
        self.namespace = namespace
        self.cluster_domain = cluster_domain

    # Naming

    def get_masters_stateful_set_name(self) -> str:
        return "ms"

    def get_masters_service_name(self) -> str:
        return "masters"

    def get_data_nodes_stateful_set_name(self, name: str = None) -> str:
        return format_component_name("dnd", name)

    def get_tablet_nodes_stateful_set_name(self, name: str = None) -> str:
        return format_component_name("tnd", name)

    def get_http_proxy_address(self) -> str:
        if self.spec.http_proxy_address:
            return self.spec.http_proxy_address
        return f"http-proxies.{self.namespace}.svc.{self.cluster_domain}:{HTTP_PROXY_PORT}"

    def get_master_addresses(self) -> List[str]:
        service = self.get_masters_service_name()
        stateful_set = self.get_masters_stateful_set_name()
        return [
            f"{stateful_set}-{i}.{service}.{self.namespace}.svc.{self.cluster_domain}:{MASTER_RPC_PORT}"
            for i in range(self.spec.primary_masters.instance_count)
        ]

    def get_master_cell_id(self) -> str:
        return f"65726e65-ad6b7562-{self.spec.primary_masters.cell_tag:04x}0259-79747361"

    # Config fragments

    def _primary_master(self) -> Dict:
        return {
            "addresses": self.get_master_addresses(),
            "cell_id": self.get_master_cell_id(),
        }

    def _cluster_connection(self) -> Dict:
        return {
            "cluster_name": self.cluster_name,
            "primary_master": self._primary_master(),
        }

    def _node_config(self, flavors: List[str], tags: List[str]) -> Dict:
        return {
            "cluster_connection": self._cluster_connection(),
            "flavors": flavors,
            "tags": tags,
            "rpc_port": NODE_RPC_PORT,
        }

    # Rendered configs

    def get_master_config(self) -> bytes:
        config = {
            "primary_master": self._primary_master(),
            "cluster_connection": self._cluster_connection(),
            "rpc_port": MASTER_RPC_PORT,
        }
        return yson.dumps(config, indent=4).encode()

    def get_native_client_config(self) -> bytes:
        config = {
            "address_resolver": {"enable_ipv4": True, "enable_ipv6": False},
            "driver": {"primary_master": self._primary_master()},
        }
        return yson.dumps(config, indent=4).encode()

    def get_cluster_connection(self) -> bytes:
        return yson.dumps(self._cluster_connection()).encode()

    def get_data_node_config(self, spec: DataNodesSpec) -> bytes:
        config = self._node_config(["data"], [spec.name or "default"])
        return yson.dumps(config, indent=4).encode()

    def get_tablet_node_config(self, spec: TabletNodesSpec) -> bytes:
        config = self._node_config(["tablet"], [spec.name or "default"])
        return yson.dumps(config, indent=4).encode()

    def get_extra_media(self) -> List[Medium]:
        return list(self.spec.extra_media)
