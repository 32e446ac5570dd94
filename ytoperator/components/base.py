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
from abc import ABC, abstractmethod
from enum import Enum

from ytoperator.exceptions import ProbeInvariantError
from ytoperator.labeller import Labeller
from ytoperator.schema import ClusterSnapshot

logger = logging.getLogger(__name__)


class SyncStatus(str, Enum):
    # Component matches the desired state
    READY = "Ready"
    # An action was taken (or would be) and another pass should make progress
    PENDING = "Pending"
    # Waiting on pods or on another component, nothing to do yet
    BLOCKED = "Blocked"
    # Component takes part in a rollout
    UPDATING = "Updating"
    # Running configuration drifted and a cluster-wide rollout must start
    NEED_FULL_UPDATE = "NeedFullUpdate"


class Component(ABC):
    """Reconcilable unit of a cluster"""

    def __init__(self, labeller: Labeller):
        self.labeller = labeller

    @property
    def name(self) -> str:
        return self.labeller.component_name

    @abstractmethod
    def fetch(self):
        """Observe every object owned by the component"""
        pass

    @abstractmethod
    def status(self, cluster: ClusterSnapshot) -> SyncStatus:
        """Report the status without changing anything"""
        pass

    @abstractmethod
    def sync(self, cluster: ClusterSnapshot):
        """Apply the next corrective action"""
        pass


class ComponentBase(Component):
    """
    Component whose probe and action share one decision tree.

    Subclasses implement ``_do_sync(cluster, dry)`` and gate every mutation on
    ``dry``; ``status`` runs it with ``dry=True`` and ``sync`` with ``dry=False``.
    """

    @abstractmethod
    def _do_sync(self, cluster: ClusterSnapshot, dry: bool) -> SyncStatus:
        pass

    def status(self, cluster: ClusterSnapshot) -> SyncStatus:
        try:
            return self._do_sync(cluster, dry=True)
        except ProbeInvariantError:
            raise
        except Exception as e:
            logger.critical(f"Status probe of {self.name} raised {e!r}")
            raise ProbeInvariantError(self.name, e) from e

    def sync(self, cluster: ClusterSnapshot):
        self._do_sync(cluster, dry=False)


class ServerComponentBase(ComponentBase):
    """Component backed by a server workload"""

    def __init__(self, labeller: Labeller, server):
        super().__init__(labeller)
        self.server = server

    def fetch(self):
        self.server.fetch()

    def remove_pods(self, dry: bool):
        if dry:
            return
        self.server.remove_pods()

    def are_pods_removed(self) -> bool:
        return self.server.are_pods_removed()
