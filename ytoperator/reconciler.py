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
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ytoperator import consts
from ytoperator.apiproxy import APIProxy
from ytoperator.components import (
    Component,
    DataNode,
    Master,
    ServerComponentBase,
    SyncStatus,
    TabletNode,
    YtsaurusClient,
)
from ytoperator.components.ytsaurus_client import AdminClientFactory
from ytoperator.conditions import Condition, ConditionManager, DatabaseConditionManager
from ytoperator.config import get_sync_session, settings
from ytoperator.db.models import ClusterRecord, utc_now
from ytoperator.db.ops import ClusterOps
from ytoperator.exceptions import ProbeInvariantError
from ytoperator.schema import ClusterSnapshot, ClusterState, UpdateState
from ytoperator.ytconfig.generator import Generator

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    cluster: str
    status: Optional[SyncStatus]
    requeue: bool
    message: str = ""


class ComponentManager:
    """Components of one cluster, built fresh for every reconciliation pass"""

    def __init__(
        self,
        record: ClusterRecord,
        api_proxy: APIProxy,
        conditions: ConditionManager,
        client_factory: Optional[AdminClientFactory] = None,
    ):
        spec = record.get_spec()
        cfgen = Generator(spec, record.name, record.namespace)

        self.spec = spec
        self.master = Master(cfgen, api_proxy, conditions, spec, record.name)
        self.data_nodes = [DataNode(cfgen, api_proxy, spec, dn_spec, record.name) for dn_spec in spec.data_nodes]
        self.ytsaurus_client = YtsaurusClient(cfgen, api_proxy, spec, record.name, self.master, client_factory)
        self.tablet_nodes = [
            TabletNode(
                cfgen,
                api_proxy,
                conditions,
                spec,
                tnd_spec,
                record.name,
                self.ytsaurus_client,
                do_initialization=(idx == 0),
            )
            for idx, tnd_spec in enumerate(spec.tablet_nodes)
        ]

        # Dependency order
        self.components: List[Component] = [
            self.master,
            *self.data_nodes,
            self.ytsaurus_client,
            *self.tablet_nodes,
        ]
        self.server_components: List[ServerComponentBase] = [
            self.master,
            *self.data_nodes,
            *self.tablet_nodes,
        ]

    def fetch(self):
        for component in self.components:
            component.fetch()

    def close(self):
        self.ytsaurus_client.close()


class ClusterReconciler:
    """
    Drives every registered cluster towards its declared spec.

    A pass over one cluster probes components in dependency order and applies at
    most one corrective action: the first component that is not Ready gets synced
    and the pass ends. Retrying is left to the scheduler that calls
    ``reconcile_all`` periodically.
    """

    def __init__(
        self,
        api_proxy_factory: Callable[[str], APIProxy] = APIProxy,
        client_factory: Optional[AdminClientFactory] = None,
    ):
        self.api_proxy_factory = api_proxy_factory
        self.client_factory = client_factory

    def reconcile_all(self, cluster_names: List[str] = None, namespace: str = None) -> List[ReconcileResult]:
        """
        Run one pass over every active cluster

        Args:
            cluster_names: Optional list of cluster names to reconcile. If None, reconcile all.
            namespace: Optional namespace filter
        """
        results = []
        for session in get_sync_session():
            records = ClusterOps(session).query_active_clusters(namespace=namespace, names=cluster_names)
            if not records:
                logger.debug("No clusters need reconciliation")
                return results

            for record in records:
                results.append(self.reconcile_cluster(session, record))

            logger.info(f"Reconciled {len(results)} clusters")
        return results

    def reconcile_one(self, name: str, namespace: str = None) -> Optional[ReconcileResult]:
        """Run one pass over a single cluster, returning None if it is not registered"""
        results = self.reconcile_all(cluster_names=[name], namespace=namespace or settings.namespace)
        if not results:
            logger.warning(f"Cluster {name} is not registered")
            return None
        return results[0]

    def reconcile_cluster(self, session: Session, record: ClusterRecord) -> ReconcileResult:
        """Run one pass over a cluster, recording the outcome on its record"""
        conditions = DatabaseConditionManager(session, record.id)
        cluster = f"{record.namespace}/{record.name}"

        manager = None
        try:
            manager = ComponentManager(record, self.api_proxy_factory(record.namespace), conditions, self.client_factory)
            result = self.run_pass(record, manager, conditions)
        except ProbeInvariantError as e:
            logger.critical(f"Reconciliation of {cluster} stopped: {e}", exc_info=True)
            conditions.set_status_condition(
                Condition.false(consts.CONDITION_RECONCILED, reason="ProbeInvariantViolated", message=str(e))
            )
            result = ReconcileResult(cluster=cluster, status=None, requeue=True, message=str(e))
        except Exception as e:
            logger.error(f"Failed to reconcile cluster {cluster}: {e}", exc_info=True)
            conditions.set_status_condition(
                Condition.false(consts.CONDITION_RECONCILED, reason="SyncFailed", message=str(e))
            )
            result = ReconcileResult(cluster=cluster, status=None, requeue=True, message=str(e))
        finally:
            if manager is not None:
                manager.close()

        record.gmt_last_reconciled = utc_now()
        session.add(record)
        session.commit()
        return result

    def run_pass(self, record: ClusterRecord, manager: ComponentManager, conditions: ConditionManager) -> ReconcileResult:
        cluster = f"{record.namespace}/{record.name}"
        manager.fetch()

        if record.cluster_state == ClusterState.CREATED:
            logger.info(f"Cluster {cluster} starts initializing")
            record.set_cluster_state(ClusterState.INITIALIZING)

        if record.cluster_state == ClusterState.UPDATING:
            return self._run_update_pass(record, manager, conditions)

        status, component = self._drive(record.snapshot(), manager.components)

        if status == SyncStatus.READY:
            if record.cluster_state != ClusterState.RUNNING:
                logger.info(f"Cluster {cluster} is running")
                record.set_cluster_state(ClusterState.RUNNING)
            self._set_reconciled(conditions, True, "ClusterRunning", "All components are ready")
            return ReconcileResult(cluster=cluster, status=status, requeue=False)

        if status == SyncStatus.NEED_FULL_UPDATE:
            if not manager.spec.enable_full_update:
                message = f"{component.name} needs a full update, but full update is disabled"
                logger.warning(f"Cluster {cluster}: {message}")
                self._set_reconciled(conditions, False, "FullUpdateDisabled", message)
                return ReconcileResult(cluster=cluster, status=status, requeue=False, message=message)

            logger.info(f"Cluster {cluster} starts full update requested by {component.name}")
            record.set_cluster_state(ClusterState.UPDATING)
            record.set_update_state(UpdateState.WAITING_FOR_PODS_REMOVAL)
            record.local_updating_components = None
            self._set_reconciled(conditions, False, "FullUpdate", f"Full update requested by {component.name}")
            return ReconcileResult(cluster=cluster, status=status, requeue=True)

        message = f"{component.name} is {status.value}"
        self._set_reconciled(conditions, False, f"Component{status.value}", message)
        return ReconcileResult(cluster=cluster, status=status, requeue=True, message=message)

    def _drive(self, snapshot: ClusterSnapshot, components: List[Component]) -> Tuple[SyncStatus, Optional[Component]]:
        """Sync the first component that is not Ready, in dependency order"""
        for component in components:
            status = component.status(snapshot)
            if status == SyncStatus.READY:
                continue

            logger.info(f"Component {component.name} of {snapshot.namespace}/{snapshot.name} is {status.value}")
            if status != SyncStatus.NEED_FULL_UPDATE:
                component.sync(snapshot)
            return status, component

        return SyncStatus.READY, None

    def _run_update_pass(
        self, record: ClusterRecord, manager: ComponentManager, conditions: ConditionManager
    ) -> ReconcileResult:
        cluster = f"{record.namespace}/{record.name}"
        snapshot = record.snapshot()
        update_state = snapshot.update_state

        if update_state == UpdateState.WAITING_FOR_PODS_REMOVAL:
            if all(component.are_pods_removed() for component in manager.server_components):
                record.set_update_state(UpdateState.WAITING_FOR_PODS_CREATION)
            else:
                for component in manager.server_components:
                    if component.status(snapshot) == SyncStatus.UPDATING:
                        component.sync(snapshot)

        elif update_state == UpdateState.WAITING_FOR_PODS_CREATION:
            status, _ = self._drive(snapshot, manager.components)
            if status == SyncStatus.READY:
                record.set_update_state(UpdateState.WAITING_FOR_INIT_JOB_RESTART_PREPARE)

        elif update_state == UpdateState.WAITING_FOR_INIT_JOB_RESTART_PREPARE:
            if manager.master.is_init_job_restart_prepared():
                record.set_update_state(UpdateState.WAITING_FOR_INIT_JOB_COMPLETION)
            else:
                manager.master.prepare_init_job_restart(dry=False)

        elif update_state == UpdateState.WAITING_FOR_INIT_JOB_COMPLETION:
            status, _ = self._drive(snapshot, manager.components)
            if status == SyncStatus.READY and manager.master.is_init_job_restart_completed():
                logger.info(f"Cluster {cluster} finished full update")
                record.set_cluster_state(ClusterState.RUNNING)
                record.set_update_state(UpdateState.NONE)
                record.local_updating_components = None
                self._set_reconciled(conditions, True, "ClusterRunning", "Full update completed")
                return ReconcileResult(cluster=cluster, status=SyncStatus.READY, requeue=False)

        else:
            logger.warning(f"Cluster {cluster} is updating with unexpected update state {update_state.value}")

        message = f"Full update in progress: {UpdateState(record.update_state).value}"
        self._set_reconciled(conditions, False, "Updating", message)
        return ReconcileResult(cluster=cluster, status=SyncStatus.UPDATING, requeue=True, message=message)

    def _set_reconciled(self, conditions: ConditionManager, ok: bool, reason: str, message: str):
        if ok:
            condition = Condition.true(consts.CONDITION_RECONCILED, reason=reason, message=message)
        else:
            condition = Condition.false(consts.CONDITION_RECONCILED, reason=reason, message=message)
        conditions.set_status_condition(condition)


# Global instance
cluster_reconciler = ClusterReconciler()
