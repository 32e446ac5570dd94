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

"""
Reconcilable cluster components.

Each component reports a SyncStatus from pure observation (``status``) and applies
the next corrective action (``sync``) through the same decision tree. The
orchestrator drives them in dependency order:

- Master: server workload, then the cluster bootstrap init job
- DataNode: server workload only
- YtsaurusClient: administrative connection, Ready once the master is Ready
- TabletNode: server workload, then tablet cell bundles through YtsaurusClient
"""

from .base import Component, ComponentBase, ServerComponentBase, SyncStatus
from .data_node import DataNode
from .init_job import InitJob
from .master import Master
from .server import Server
from .tablet_node import TabletNode
from .ytsaurus_client import YtsaurusClient

__all__ = [
    "Component",
    "ComponentBase",
    "DataNode",
    "InitJob",
    "Master",
    "Server",
    "ServerComponentBase",
    "SyncStatus",
    "TabletNode",
    "YtsaurusClient",
]
