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
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlmodel import select

from ytoperator.db.models import ClusterCondition, ClusterRecord, ClusterRecordStatus, utc_now
from ytoperator.schema import ClusterState, UpdateState

logger = logging.getLogger(__name__)


class ClusterOps:
    """Database operations on cluster records within one session"""

    def __init__(self, session: Session):
        self.session = session

    def query_cluster(self, namespace: str, name: str) -> Optional[ClusterRecord]:
        stmt = select(ClusterRecord).where(
            ClusterRecord.namespace == namespace,
            ClusterRecord.name == name,
            ClusterRecord.status != ClusterRecordStatus.DELETED,
        )
        return self.session.execute(stmt).scalars().one_or_none()

    def query_active_clusters(self, namespace: str = None, names: List[str] = None) -> List[ClusterRecord]:
        stmt = select(ClusterRecord).where(ClusterRecord.status == ClusterRecordStatus.ACTIVE)
        if namespace:
            stmt = stmt.where(ClusterRecord.namespace == namespace)
        if names:
            stmt = stmt.where(ClusterRecord.name.in_(names))
        stmt = stmt.order_by(ClusterRecord.namespace, ClusterRecord.name)
        return list(self.session.execute(stmt).scalars().all())

    def upsert_cluster(self, namespace: str, name: str, spec: dict) -> ClusterRecord:
        """Create a record or overwrite the declared spec, keeping the cluster-level state"""
        record = self._query_any_cluster(namespace, name)
        if record is None:
            record = ClusterRecord(namespace=namespace, name=name, spec=spec)
            logger.info(f"Registered cluster {namespace}/{name}")
        elif record.status == ClusterRecordStatus.DELETED:
            self._revive_cluster(record, spec)
        elif record.spec != spec:
            record.spec = spec
            record.gmt_updated = utc_now()
            logger.info(f"Spec of cluster {namespace}/{name} changed")
        self.session.add(record)
        self.session.flush()
        return record

    def _query_any_cluster(self, namespace: str, name: str) -> Optional[ClusterRecord]:
        stmt = select(ClusterRecord).where(ClusterRecord.namespace == namespace, ClusterRecord.name == name)
        return self.session.execute(stmt).scalars().one_or_none()

    def _revive_cluster(self, record: ClusterRecord, spec: dict):
        """Reuse the record of a deleted cluster for a new one with the same name"""
        for condition in self.query_conditions(record.id):
            self.session.delete(condition)
        record.spec = spec
        record.status = ClusterRecordStatus.ACTIVE
        record.cluster_state = ClusterState.CREATED
        record.update_state = UpdateState.NONE
        record.local_updating_components = None
        record.gmt_deleted = None
        record.gmt_updated = utc_now()
        logger.info(f"Registered cluster {record.namespace}/{record.name} again after deletion")

    def mark_cluster_deleted(self, record: ClusterRecord):
        record.status = ClusterRecordStatus.DELETED
        record.gmt_deleted = utc_now()
        self.session.add(record)
        logger.info(f"Cluster {record.namespace}/{record.name} marked as deleted")

    def query_conditions(self, cluster_id: str) -> List[ClusterCondition]:
        stmt = select(ClusterCondition).where(ClusterCondition.cluster_id == cluster_id).order_by(ClusterCondition.type)
        return list(self.session.execute(stmt).scalars().all())
