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
Unit tests for the HTTP admin client.

Requests are served by an httpx.MockTransport, so no cluster is needed.
"""

import json
from unittest.mock import MagicMock

import httpx
import pytest

from ytoperator.exceptions import AdminClientError
from ytoperator.ytclient import HttpAdminClient, create_tablet_cells


class RecordingHandler:
    def __init__(self, responses):
        self.responses = responses
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        command = request.url.path.rsplit("/", 1)[-1]
        response = self.responses[command]
        if isinstance(response, Exception):
            raise response
        return response


def make_client(responses):
    handler = RecordingHandler(responses)
    client = HttpAdminClient("proxy.yt:80", "secret-token", transport=httpx.MockTransport(handler))
    return client, handler


class TestHttpAdminClient:
    """Test suite for requests sent to the HTTP proxy."""

    def test_node_exists(self):
        client, handler = make_client({"exists": httpx.Response(200, json={"value": True})})

        assert client.node_exists("//sys/tablet_cell_bundles/sys")

        request = handler.requests[0]
        assert request.method == "GET"
        assert request.url.host == "proxy.yt"
        assert request.url.path == "/api/v4/exists"
        assert request.url.params["path"] == "//sys/tablet_cell_bundles/sys"
        assert request.headers["Authorization"] == "OAuth secret-token"

    def test_get_node(self):
        client, _ = make_client({"get": httpx.Response(200, json={"value": 3})})

        assert client.get_node("//sys/tablet_cell_bundles/default/@tablet_cell_count") == 3

    def test_create_object(self):
        client, handler = make_client({"create_object": httpx.Response(200, json={"object_id": "1-2-3-4"})})

        object_id = client.create_object("tablet_cell", {"tablet_cell_bundle": "sys"})

        assert object_id == "1-2-3-4"
        request = handler.requests[0]
        assert request.method == "POST"
        assert json.loads(request.headers["X-YT-Parameters"]) == {
            "type": "tablet_cell",
            "attributes": {"tablet_cell_bundle": "sys"},
        }

    def test_error_status(self):
        client, _ = make_client({"exists": httpx.Response(500, text="master unavailable")})

        with pytest.raises(AdminClientError) as exc_info:
            client.node_exists("//sys")

        assert exc_info.value.command == "exists"
        assert "master unavailable" in exc_info.value.reason

    def test_transport_error(self):
        client, _ = make_client({"exists": httpx.ConnectError("connection refused")})

        with pytest.raises(AdminClientError):
            client.node_exists("//sys")

    def test_scheme_is_kept(self):
        client, handler = make_client({"exists": httpx.Response(200, json={"value": False})})
        client = HttpAdminClient("https://proxy.yt", "t", transport=httpx.MockTransport(handler))

        client.node_exists("//home")

        assert str(handler.requests[0].url).startswith("https://proxy.yt/api/v4/exists")


class TestCreateTabletCells:
    """Test suite for topping up tablet cells of a bundle."""

    def test_creates_missing_cells(self):
        client = MagicMock()
        client.get_node.return_value = 1

        create_tablet_cells(client, "default", 3)

        client.get_node.assert_called_once_with("//sys/tablet_cell_bundles/default/@tablet_cell_count")
        assert client.create_object.call_count == 2
        client.create_object.assert_called_with("tablet_cell", {"tablet_cell_bundle": "default"})

    def test_enough_cells(self):
        client = MagicMock()
        client.get_node.return_value = 2

        create_tablet_cells(client, "sys", 1)

        client.create_object.assert_not_called()
