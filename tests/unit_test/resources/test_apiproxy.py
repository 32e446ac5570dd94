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
Unit tests for the Kubernetes API proxy and the resource wrappers built on it.

The generated Kubernetes API classes are replaced by mocks.
"""

import base64
from unittest.mock import MagicMock

import pytest
from kubernetes.client import ApiException

from ytoperator import consts, resources
from ytoperator.apiproxy import APIProxy
from ytoperator.config import settings
from ytoperator.exceptions import ResourceStoreError
from ytoperator.labeller import Labeller
from ytoperator.resources import ConfigMap, Job, Secret, StatefulSet


@pytest.fixture
def proxy():
    api_client = MagicMock()
    api_client.sanitize_for_serialization.side_effect = lambda obj: {"serialized": obj}
    proxy = APIProxy("yt", api_client=api_client)
    proxy._apis = {"core": MagicMock(), "apps": MagicMock(), "batch": MagicMock()}
    proxy._custom_objects_api = MagicMock()
    return proxy


@pytest.fixture
def labeller():
    return Labeller(
        cluster_name="demo",
        namespace="yt",
        component_label=consts.YT_COMPONENT_LABEL_MASTER,
        component_name="Master",
    )


class TestAPIProxy:
    """Test suite for CRUD calls against the Kubernetes API."""

    def test_fetch(self, proxy):
        proxy._apis["apps"].read_namespaced_stateful_set.return_value = "ss"

        assert proxy.fetch_object("StatefulSet", "ms") == {"serialized": "ss"}
        proxy._apis["apps"].read_namespaced_stateful_set.assert_called_once_with(
            name="ms", namespace="yt", _request_timeout=settings.kube_request_timeout
        )

    def test_fetch_missing(self, proxy):
        proxy._apis["core"].read_namespaced_config_map.side_effect = ApiException(status=404, reason="Not Found")

        assert proxy.fetch_object("ConfigMap", "cfg") is None

    def test_fetch_error(self, proxy):
        proxy._apis["batch"].read_namespaced_job.side_effect = ApiException(status=403, reason="Forbidden")

        with pytest.raises(ResourceStoreError) as exc_info:
            proxy.fetch_object("Job", "init")

        assert exc_info.value.status == 403
        assert exc_info.value.action == "fetch"

    def test_create_and_update(self, proxy):
        body = {"metadata": {"name": "cfg"}, "data": {}}

        proxy.create_object("ConfigMap", body)
        proxy.update_object("ConfigMap", body)

        proxy._apis["core"].create_namespaced_config_map.assert_called_once_with(
            namespace="yt", body=body, _request_timeout=settings.kube_request_timeout
        )
        proxy._apis["core"].replace_namespaced_config_map.assert_called_once_with(
            name="cfg", namespace="yt", body=body, _request_timeout=settings.kube_request_timeout
        )

    def test_create_conflict(self, proxy):
        proxy._apis["apps"].create_namespaced_stateful_set.side_effect = ApiException(status=409, reason="Conflict")

        with pytest.raises(ResourceStoreError):
            proxy.create_object("StatefulSet", {"metadata": {"name": "ms"}})

    def test_delete_foreground(self, proxy):
        proxy.delete_object("Job", "init")

        kwargs = proxy._apis["batch"].delete_namespaced_job.call_args.kwargs
        assert kwargs["name"] == "init"
        assert kwargs["body"].propagation_policy == "Foreground"

    def test_delete_missing(self, proxy):
        proxy._apis["batch"].delete_namespaced_job.side_effect = ApiException(status=404, reason="Not Found")

        proxy.delete_object("Job", "init")

    def test_unsupported_kind(self, proxy):
        with pytest.raises(ValueError):
            proxy.fetch_object("Deployment", "x")

    def test_list_custom_objects(self, proxy):
        proxy._custom_objects_api.list_namespaced_custom_object.return_value = {"items": [{"metadata": {}}]}

        assert proxy.list_custom_objects() == [{"metadata": {}}]
        args = proxy._custom_objects_api.list_namespaced_custom_object.call_args.args
        assert args == (settings.crd_group, settings.crd_version, "yt", settings.crd_plural)


class TestManagedResources:
    """Test suite for the fetch/build/sync lifecycle of owned objects."""

    def test_create_when_missing(self, labeller):
        api = MagicMock()
        api.fetch_object.return_value = None
        api.create_object.return_value = {"metadata": {"name": "cfg"}}
        config_map = ConfigMap("cfg", labeller, api)

        resources.fetch([config_map])
        config_map.build()["data"]["a"] = "b"
        resources.sync([config_map])

        kind, body = api.create_object.call_args.args
        assert kind == "ConfigMap"
        assert body["data"] == {"a": "b"}
        assert body["metadata"]["labels"][consts.LABEL_MANAGED_BY] == consts.MANAGED_BY
        assert config_map.exists()

    def test_replace_keeps_resource_version(self, labeller):
        api = MagicMock()
        api.fetch_object.return_value = {"metadata": {"name": "ms", "resourceVersion": "42"}}
        stateful_set = StatefulSet("ms", labeller, api)

        stateful_set.fetch()
        stateful_set.sync()

        kind, body = api.update_object.call_args.args
        assert kind == "StatefulSet"
        assert body["metadata"]["resourceVersion"] == "42"
        assert stateful_set.new_object.get("metadata", {}).get("resourceVersion") is None

    def test_fetch_resets_build(self, labeller):
        api = MagicMock()
        api.fetch_object.return_value = None
        config_map = ConfigMap("cfg", labeller, api)

        config_map.fetch()
        config_map.build()["data"]["a"] = "b"
        config_map.fetch()

        assert config_map.build()["data"] == {}

    def test_job_completion_and_removal(self, labeller):
        api = MagicMock()
        api.fetch_object.return_value = {"metadata": {"name": "init"}, "status": {"succeeded": 1}}
        job = Job("init", labeller, api)

        job.fetch()
        assert job.completed()
        job.remove()

        api.delete_object.assert_called_once_with("Job", "init", propagation_policy="Foreground")
        assert not job.exists()

    def test_secret_values(self, labeller):
        api = MagicMock()
        api.fetch_object.return_value = {"data": {"YT_TOKEN": base64.b64encode(b"tok").decode()}}
        secret = Secret("creds", labeller, api)

        secret.fetch()

        assert secret.get_value("YT_TOKEN") == "tok"
        assert secret.get_value("YT_LOGIN") is None
        with pytest.raises(NotImplementedError):
            secret.sync()
