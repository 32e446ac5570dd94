#!/usr/bin/env python3
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
CLI tool for managing YT clusters reconciled by the operator

Usage:
    python -m ytoperator.cli.cluster_manager --help
    python -m ytoperator.cli.cluster_manager status --namespace yt
    python -m ytoperator.cli.cluster_manager reconcile --cluster demo --discover
    python -m ytoperator.cli.cluster_manager conditions --cluster demo
    python -m ytoperator.cli.cluster_manager init-db
"""

import argparse
import logging
import sys
from typing import List, Optional

# Setup logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def show_cluster_status(namespace: Optional[str], cluster: Optional[str]):
    """Print cluster-level state of registered clusters"""
    from ytoperator.config import get_sync_session
    from ytoperator.db.ops import ClusterOps

    for session in get_sync_session():
        names = [cluster] if cluster else None
        records = ClusterOps(session).query_active_clusters(namespace=namespace, names=names)

        if not records:
            print("No clusters registered")
            return

        print(f"Found {len(records)} clusters:")
        for record in records:
            print(f"- Cluster {record.namespace}/{record.name}")
            print(f"  State: {record.cluster_state.value}, Update state: {record.update_state.value}")
            print(f"  Last reconciled: {record.gmt_last_reconciled or 'never'}")
            print()


def run_reconciliation(namespace: str, clusters: Optional[List[str]], discover: bool):
    """Run one reconciliation pass manually"""
    from ytoperator.reconciler import cluster_reconciler

    if discover:
        from ytoperator.apiproxy import APIProxy
        from ytoperator.cluster_manager import cluster_manager
        from ytoperator.config import get_sync_session

        for session in get_sync_session():
            cluster_manager.sync_from_custom_resources(session, APIProxy(namespace))

    logger.info("Starting manual reconciliation...")
    results = cluster_reconciler.reconcile_all(cluster_names=clusters, namespace=namespace)
    for result in results:
        status = result.status.value if result.status else "Error"
        line = f"{result.cluster}: {status}"
        if result.requeue:
            line += " (requeue)"
        if result.message:
            line += f" - {result.message}"
        print(line)
    logger.info("Reconciliation completed")


def show_conditions(namespace: str, cluster: str) -> bool:
    """Print the condition ledger of one cluster"""
    from ytoperator.config import get_sync_session
    from ytoperator.db.ops import ClusterOps

    for session in get_sync_session():
        ops = ClusterOps(session)
        record = ops.query_cluster(namespace, cluster)
        if record is None:
            print(f"Cluster {namespace}/{cluster} is not registered")
            return False

        for condition in ops.query_conditions(record.id):
            print(f"{condition.type}: {condition.status.value} ({condition.reason})")
            if condition.message:
                print(f"  {condition.message}")
            print(f"  Last transition: {condition.gmt_last_transition}")
    return True


def main():
    from ytoperator.config import settings

    parser = argparse.ArgumentParser(description="YT Cluster Operator CLI")
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Status command
    status_parser = subparsers.add_parser('status', help='Show state of registered clusters')
    status_parser.add_argument('--namespace', default=None, help='Namespace filter')
    status_parser.add_argument('--cluster', default=None, help='Cluster name')

    # Reconcile command
    reconcile_parser = subparsers.add_parser('reconcile', help='Run reconciliation manually')
    reconcile_parser.add_argument('--namespace', default=settings.namespace, help='Namespace')
    reconcile_parser.add_argument('--cluster', nargs='*', help='Cluster names (default: all)')
    reconcile_parser.add_argument('--discover', action='store_true',
                                  help='Refresh cluster records from custom resources first')

    # Conditions command
    conditions_parser = subparsers.add_parser('conditions', help='Show conditions of a cluster')
    conditions_parser.add_argument('--cluster', required=True, help='Cluster name')
    conditions_parser.add_argument('--namespace', default=settings.namespace, help='Namespace')

    # Init-db command
    subparsers.add_parser('init-db', help='Create database tables')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        if args.command == 'status':
            show_cluster_status(args.namespace, args.cluster)
        elif args.command == 'reconcile':
            run_reconciliation(args.namespace, args.cluster, args.discover)
        elif args.command == 'conditions':
            if not show_conditions(args.namespace, args.cluster):
                return 1
        elif args.command == 'init-db':
            from ytoperator.config import init_db

            init_db()
        else:
            print(f"Unknown command: {args.command}")
            return 1
    except Exception as e:
        logger.error(f"Command failed: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
