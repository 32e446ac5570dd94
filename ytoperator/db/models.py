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

import random
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import FrozenSet, List, Optional

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel, UniqueConstraint

from ytoperator.schema import ClusterSnapshot, ClusterState, UpdateState, YtsaurusSpec


def random_id():
    """Generate a random ID string"""
    return "".join(random.sample(uuid.uuid4().hex, 16))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ConditionStatus(str, Enum):
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class ClusterRecordStatus(str, Enum):
    ACTIVE = "ACTIVE"
    DELETED = "DELETED"


class ClusterRecord(SQLModel, table=True):
    """Persistent record of one managed cluster: declared spec plus cluster-level state"""

    __tablename__ = "cluster_record"
    __table_args__ = (UniqueConstraint("namespace", "name", name="uq_cluster_namespace_name"),)

    id: str = Field(default_factory=lambda: "ytc" + random_id(), primary_key=True, max_length=24)
    name: str = Field(max_length=253)
    namespace: str = Field(max_length=63)
    spec: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    status: ClusterRecordStatus = ClusterRecordStatus.ACTIVE
    cluster_state: ClusterState = ClusterState.CREATED
    update_state: UpdateState = UpdateState.NONE
    # None means every component takes part in the update
    local_updating_components: Optional[List[str]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    gmt_created: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    gmt_updated: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    gmt_last_reconciled: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    gmt_deleted: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    def get_spec(self) -> YtsaurusSpec:
        return YtsaurusSpec.model_validate(self.spec)

    def snapshot(self) -> ClusterSnapshot:
        """Freeze the cluster-level state for one reconciliation pass"""
        updating: Optional[FrozenSet[str]] = None
        if self.local_updating_components is not None:
            updating = frozenset(self.local_updating_components)
        return ClusterSnapshot(
            name=self.name,
            namespace=self.namespace,
            cluster_state=ClusterState(self.cluster_state),
            update_state=UpdateState(self.update_state),
            local_updating_components=updating,
        )

    def set_cluster_state(self, state: ClusterState):
        self.cluster_state = state
        self.gmt_updated = utc_now()

    def set_update_state(self, state: UpdateState):
        self.update_state = state
        self.gmt_updated = utc_now()


class ClusterCondition(SQLModel, table=True):
    """Durable named fact attached to a cluster record"""

    __tablename__ = "cluster_condition"
    __table_args__ = (UniqueConstraint("cluster_id", "type", name="uq_cluster_condition_type"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    cluster_id: str = Field(foreign_key="cluster_record.id", max_length=24, index=True)
    type: str = Field(max_length=316)
    status: ConditionStatus = ConditionStatus.UNKNOWN
    reason: str = Field(default="", max_length=1024)
    message: str = Field(default="")
    gmt_last_transition: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    gmt_updated: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
