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
from typing import Any, Dict, List

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ytoperator.apiproxy import APIProxy
from ytoperator.db.models import ClusterRecord
from ytoperator.db.ops import ClusterOps
from ytoperator.schema import YtsaurusSpec

logger = logging.getLogger(__name__)


class ClusterManager:
    """Keeps cluster records in line with the custom resources declaring them"""

    def sync_from_custom_resources(self, session: Session, api_proxy: APIProxy) -> List[ClusterRecord]:
        """
        Register or refresh a record for every custom resource in the namespace

        Records whose resource disappeared are marked as deleted. Resources with an
        invalid spec are skipped and their records left untouched.

        Args:
            session: Database session, committed on return
            api_proxy: Proxy bound to the namespace to scan

        Returns:
            Records of the resources found
        """
        ops = ClusterOps(session)
        namespace = api_proxy.namespace
        items = api_proxy.list_custom_objects()

        seen = set()
        records = []
        for item in items:
            name = (item.get("metadata") or {}).get("name")
            if not name:
                continue
            seen.add(name)

            spec = self._validated_spec(namespace, name, item.get("spec") or {})
            if spec is None:
                continue
            records.append(ops.upsert_cluster(namespace, name, spec))

        for record in ops.query_active_clusters(namespace=namespace):
            if record.name not in seen:
                ops.mark_cluster_deleted(record)

        session.commit()
        logger.info(f"Synced {len(records)} clusters from custom resources in namespace {namespace}")
        return records

    def _validated_spec(self, namespace: str, name: str, spec: Dict[str, Any]) -> Dict[str, Any]:
        try:
            YtsaurusSpec.model_validate(spec)
        except ValidationError as e:
            logger.error(f"Invalid spec of cluster {namespace}/{name}: {e}")
            return None
        return spec


# Global instance
cluster_manager = ClusterManager()
