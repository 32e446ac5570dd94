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
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy.orm import Session
from sqlmodel import select

from ytoperator.db.models import ClusterCondition, ConditionStatus, utc_now

logger = logging.getLogger(__name__)


@dataclass
class Condition:
    type: str
    status: ConditionStatus
    reason: str = ""
    message: str = ""

    @classmethod
    def true(cls, type: str, reason: str, message: str = "") -> "Condition":
        return cls(type=type, status=ConditionStatus.TRUE, reason=reason, message=message)

    @classmethod
    def false(cls, type: str, reason: str, message: str = "") -> "Condition":
        return cls(type=type, status=ConditionStatus.FALSE, reason=reason, message=message)


class ConditionManager(ABC):
    """Durable mapping from a condition key to a tri-state fact of one cluster"""

    @abstractmethod
    def get_status_condition(self, type: str) -> Optional[Condition]:
        """
        Get the condition stored under a key

        Args:
            type: Condition key

        Returns:
            Condition or None if it was never set
        """
        pass

    @abstractmethod
    def set_status_condition(self, condition: Condition) -> None:
        """
        Create or overwrite a condition

        Args:
            condition: Condition to store
        """
        pass

    def is_status_condition_true(self, type: str) -> bool:
        condition = self.get_status_condition(type)
        return condition is not None and condition.status == ConditionStatus.TRUE

    def is_status_condition_false(self, type: str) -> bool:
        condition = self.get_status_condition(type)
        return condition is not None and condition.status == ConditionStatus.FALSE


class InMemoryConditionManager(ConditionManager):
    """Local implementation for testing or single-process deployments"""

    def __init__(self, conditions: Optional[List[Condition]] = None):
        self._conditions: Dict[str, Condition] = {}
        for condition in conditions or []:
            self._conditions[condition.type] = condition

    def get_status_condition(self, type: str) -> Optional[Condition]:
        return self._conditions.get(type)

    def set_status_condition(self, condition: Condition) -> None:
        self._conditions[condition.type] = Condition(
            type=condition.type,
            status=ConditionStatus(condition.status),
            reason=condition.reason,
            message=condition.message,
        )
        logger.debug(f"Condition {condition.type} set to {condition.status.value} ({condition.reason})")


class DatabaseConditionManager(ConditionManager):
    """Conditions stored in the cluster_condition table, read through on every call"""

    def __init__(self, session: Session, cluster_id: str):
        self.session = session
        self.cluster_id = cluster_id

    def _get_row(self, type: str) -> Optional[ClusterCondition]:
        stmt = select(ClusterCondition).where(
            ClusterCondition.cluster_id == self.cluster_id,
            ClusterCondition.type == type,
        )
        return self.session.execute(stmt).scalars().one_or_none()

    def get_status_condition(self, type: str) -> Optional[Condition]:
        row = self._get_row(type)
        if row is None:
            return None
        return Condition(type=row.type, status=ConditionStatus(row.status), reason=row.reason, message=row.message)

    def set_status_condition(self, condition: Condition) -> None:
        now = utc_now()
        row = self._get_row(condition.type)
        if row is None:
            row = ClusterCondition(cluster_id=self.cluster_id, type=condition.type, gmt_last_transition=now)
        elif row.status != condition.status:
            row.gmt_last_transition = now

        row.status = condition.status
        row.reason = condition.reason
        row.message = condition.message
        row.gmt_updated = now
        self.session.add(row)
        # Conditions are completion memory, so they are committed immediately
        self.session.commit()
        logger.info(
            f"Condition {condition.type} of cluster {self.cluster_id} set to {condition.status.value} "
            f"({condition.reason})"
        )
