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
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ClusterState(str, Enum):
    CREATED = "Created"
    INITIALIZING = "Initializing"
    RUNNING = "Running"
    UPDATING = "Updating"


class UpdateState(str, Enum):
    NONE = "None"
    WAITING_FOR_PODS_REMOVAL = "WaitingForPodsRemoval"
    WAITING_FOR_PODS_CREATION = "WaitingForPodsCreation"
    WAITING_FOR_INIT_JOB_RESTART_PREPARE = "WaitingForInitJobRestartPrepare"
    WAITING_FOR_INIT_JOB_COMPLETION = "WaitingForInitJobCompletion"


class SpecModel(BaseModel):
    """Base for models parsed from the custom resource spec"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class LocalObjectReference(SpecModel):
    name: str


class InstanceSpec(SpecModel):
    instance_count: int = 1
    image: Optional[str] = None
    cell_tag: int = 1
    labels: Dict[str, str] = Field(default_factory=dict)


class TabletNodesSpec(InstanceSpec):
    name: Optional[str] = None


class DataNodesSpec(InstanceSpec):
    name: Optional[str] = None


class Medium(SpecModel):
    name: str


class YtsaurusSpec(SpecModel):
    core_image: str
    image_pull_secrets: List[LocalObjectReference] = Field(default_factory=list)
    admin_credentials: Optional[LocalObjectReference] = None
    enable_full_update: bool = True
    http_proxy_address: Optional[str] = None
    primary_masters: InstanceSpec = Field(default_factory=InstanceSpec)
    data_nodes: List[DataNodesSpec] = Field(default_factory=list)
    tablet_nodes: List[TabletNodesSpec] = Field(default_factory=list)
    extra_media: List[Medium] = Field(default_factory=list)


@dataclass(frozen=True)
class ClusterSnapshot:
    """
    Read-only view of cluster-level state handed to every reconciliation call.

    ``local_updating_components`` is None during a full update; otherwise it names
    the components that are still updating on their own.
    """

    name: str
    namespace: str
    cluster_state: ClusterState
    update_state: UpdateState = UpdateState.NONE
    local_updating_components: Optional[FrozenSet[str]] = None

    def is_updating(self) -> bool:
        return self.cluster_state == ClusterState.UPDATING

    def is_waiting_for_pods_removal(self) -> bool:
        return self.is_updating() and self.update_state == UpdateState.WAITING_FOR_PODS_REMOVAL
