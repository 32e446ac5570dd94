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

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from ytoperator.config import settings
from ytoperator.exceptions import AdminClientError

logger = logging.getLogger(__name__)


class AdminClient(ABC):
    """Administrative connection to a running cluster"""

    @abstractmethod
    def node_exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def get_node(self, path: str) -> Any:
        pass

    @abstractmethod
    def create_object(self, object_type: str, attributes: Optional[Dict[str, Any]] = None) -> str:
        """
        Create a master object

        Args:
            object_type: Object type, e.g. tablet_cell_bundle or tablet_cell
            attributes: Attributes of the new object

        Returns:
            Id of the created object
        """
        pass

    def close(self):
        """Release the connection"""
        pass


class HttpAdminClient(AdminClient):
    """AdminClient over the HTTP proxy API (v4)"""

    def __init__(self, proxy_address: str, token: str, timeout: float = None, transport: httpx.BaseTransport = None):
        base_url = proxy_address if proxy_address.startswith("http") else f"http://{proxy_address}"
        self._client = httpx.Client(
            base_url=base_url,
            headers={
                "Authorization": f"OAuth {token}",
                "X-YT-Header-Format": "json",
                "X-YT-Output-Format": "json",
            },
            timeout=timeout or settings.admin_client_timeout,
            transport=transport,
        )

    def _call(self, method: str, command: str, params: Dict[str, Any]) -> Any:
        try:
            if method == "GET":
                resp = self._client.get(f"/api/v4/{command}", params=params)
            else:
                resp = self._client.post(f"/api/v4/{command}", headers={"X-YT-Parameters": json.dumps(params)})
        except httpx.HTTPError as e:
            raise AdminClientError(command, str(e)) from e

        if resp.status_code != httpx.codes.OK:
            raise AdminClientError(command, f"HTTP {resp.status_code}: {resp.text}")
        return resp.json()

    def node_exists(self, path: str) -> bool:
        return bool(self._call("GET", "exists", {"path": path})["value"])

    def get_node(self, path: str) -> Any:
        return self._call("GET", "get", {"path": path})["value"]

    def create_object(self, object_type: str, attributes: Optional[Dict[str, Any]] = None) -> str:
        result = self._call("POST", "create_object", {"type": object_type, "attributes": attributes or {}})
        object_id = result.get("object_id")
        logger.info(f"Created {object_type} object {object_id}")
        return object_id

    def close(self):
        self._client.close()


def create_tablet_cells(client: AdminClient, bundle: str, tablet_cell_count: int):
    """Ensure the bundle has at least ``tablet_cell_count`` tablet cells"""
    existing = int(client.get_node(f"//sys/tablet_cell_bundles/{bundle}/@tablet_cell_count"))
    for _ in range(existing, tablet_cell_count):
        client.create_object("tablet_cell", {"tablet_cell_bundle": bundle})
    if existing < tablet_cell_count:
        logger.info(f"Created {tablet_cell_count - existing} tablet cells in bundle {bundle}")
