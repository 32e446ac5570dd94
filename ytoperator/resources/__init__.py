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
Kubernetes objects owned by cluster components.

Every wrapper follows the same lifecycle within one reconciliation pass:
``fetch`` observes the live object, ``build`` prepares the desired object and
``sync`` creates or replaces it. The module-level helpers apply these steps to
several objects in order.
"""

from .base import BaseManagedResource
from .config_map import ConfigMap
from .job import Job
from .secret import Secret
from .stateful_set import StatefulSet


def fetch(objs):
    """Fetch every object, stopping at the first error"""
    for obj in objs:
        obj.fetch()


def sync(objs):
    """Sync every object in order, stopping at the first error"""
    for obj in objs:
        obj.sync()


def exists(obj) -> bool:
    return obj.exists()


__all__ = [
    "BaseManagedResource",
    "ConfigMap",
    "Job",
    "Secret",
    "StatefulSet",
    "exists",
    "fetch",
    "sync",
]
