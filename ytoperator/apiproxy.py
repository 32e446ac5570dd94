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
from typing import Any, Dict, List, Optional

from kubernetes import client, config
from kubernetes.client import ApiException

from ytoperator.config import settings
from ytoperator.exceptions import ResourceStoreError

logger = logging.getLogger(__name__)

_k8s_loaded = False


def _ensure_k8s():
    """Load kubeconfig exactly once."""
    global _k8s_loaded
    if _k8s_loaded:
        return
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()
    _k8s_loaded = True


class APIProxy:
    """
    Thin CRUD layer over the Kubernetes API for the objects owned by one cluster.

    Objects go in and come out as plain dicts in API (camelCase) form so that the
    resource wrappers never depend on generated client models.
    """

    # kind -> (api attribute, method suffix)
    KINDS = {
        "ConfigMap": ("core", "namespaced_config_map"),
        "Secret": ("core", "namespaced_secret"),
        "StatefulSet": ("apps", "namespaced_stateful_set"),
        "Job": ("batch", "namespaced_job"),
    }

    def __init__(self, namespace: str, api_client: Optional[client.ApiClient] = None):
        self.namespace = namespace
        if api_client is None:
            _ensure_k8s()
            api_client = client.ApiClient()
        self._api_client = api_client
        self._apis = {
            "core": client.CoreV1Api(api_client),
            "apps": client.AppsV1Api(api_client),
            "batch": client.BatchV1Api(api_client),
        }
        self._custom_objects_api = client.CustomObjectsApi(api_client)

    def _method(self, verb: str, kind: str):
        if kind not in self.KINDS:
            raise ValueError(f"Unsupported kind: {kind}")
        api_name, suffix = self.KINDS[kind]
        return getattr(self._apis[api_name], f"{verb}_{suffix}")

    def _to_dict(self, obj) -> Dict[str, Any]:
        return self._api_client.sanitize_for_serialization(obj)

    def fetch_object(self, kind: str, name: str) -> Optional[Dict[str, Any]]:
        """Read an object, returning None if it does not exist"""
        try:
            obj = self._method("read", kind)(
                name=name, namespace=self.namespace, _request_timeout=settings.kube_request_timeout
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise ResourceStoreError("fetch", kind, name, e.reason, e.status) from e
        return self._to_dict(obj)

    def create_object(self, kind: str, body: Dict[str, Any]) -> Dict[str, Any]:
        name = body["metadata"]["name"]
        try:
            obj = self._method("create", kind)(
                namespace=self.namespace, body=body, _request_timeout=settings.kube_request_timeout
            )
        except ApiException as e:
            raise ResourceStoreError("create", kind, name, e.reason, e.status) from e
        logger.info(f"Created {kind} {self.namespace}/{name}")
        return self._to_dict(obj)

    def update_object(self, kind: str, body: Dict[str, Any]) -> Dict[str, Any]:
        name = body["metadata"]["name"]
        try:
            obj = self._method("replace", kind)(
                name=name, namespace=self.namespace, body=body, _request_timeout=settings.kube_request_timeout
            )
        except ApiException as e:
            raise ResourceStoreError("update", kind, name, e.reason, e.status) from e
        logger.info(f"Updated {kind} {self.namespace}/{name}")
        return self._to_dict(obj)

    def delete_object(self, kind: str, name: str, propagation_policy: str = "Foreground") -> None:
        """Delete an object; a missing object counts as deleted"""
        try:
            self._method("delete", kind)(
                name=name,
                namespace=self.namespace,
                body=client.V1DeleteOptions(propagation_policy=propagation_policy),
                _request_timeout=settings.kube_request_timeout,
            )
        except ApiException as e:
            if e.status == 404:
                logger.info(f"{kind} {self.namespace}/{name} already gone")
                return
            raise ResourceStoreError("delete", kind, name, e.reason, e.status) from e
        logger.info(f"Deleted {kind} {self.namespace}/{name} (propagation {propagation_policy})")

    def list_custom_objects(self) -> List[Dict[str, Any]]:
        """List cluster custom resources in the namespace"""
        try:
            result = self._custom_objects_api.list_namespaced_custom_object(
                settings.crd_group,
                settings.crd_version,
                self.namespace,
                settings.crd_plural,
                _request_timeout=settings.kube_request_timeout,
            )
        except ApiException as e:
            raise ResourceStoreError("list", settings.crd_plural, self.namespace, e.reason, e.status) from e
        return result.get("items", [])
