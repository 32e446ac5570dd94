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

from celery import current_app

logger = logging.getLogger(__name__)


def _summarize(results) -> dict:
    return {result.cluster: result.status.value if result.status else None for result in results}


@current_app.task
def reconcile_clusters_task():
    """Periodic task to drive every registered cluster towards its spec"""
    try:
        logger.info("Starting cluster reconciliation")

        # Import here to avoid circular dependencies
        from ytoperator.apiproxy import APIProxy
        from ytoperator.cluster_manager import cluster_manager
        from ytoperator.config import get_sync_session, settings
        from ytoperator.reconciler import cluster_reconciler

        for session in get_sync_session():
            cluster_manager.sync_from_custom_resources(session, APIProxy(settings.namespace))

        results = cluster_reconciler.reconcile_all(namespace=settings.namespace)

        logger.info("Cluster reconciliation completed")
        return _summarize(results)

    except Exception as e:
        logger.error(f"Cluster reconciliation failed: {e}", exc_info=True)
        raise


@current_app.task
def reconcile_cluster_task(name: str):
    """
    Run one reconciliation pass over a single cluster

    Args:
        name: Cluster name in the configured namespace
    """
    try:
        from ytoperator.reconciler import cluster_reconciler

        result = cluster_reconciler.reconcile_one(name)
        if result is None:
            return None
        return _summarize([result])

    except Exception as e:
        logger.error(f"Reconciliation of cluster {name} failed: {e}", exc_info=True)
        raise
