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


class OperatorError(Exception):
    """Base class for all operator errors"""


class ResourceStoreError(OperatorError):
    """A Kubernetes API call failed"""

    def __init__(self, action: str, kind: str, name: str, reason: str, status: int = None):
        self.action = action
        self.kind = kind
        self.name = name
        self.reason = reason
        self.status = status
        super().__init__(f"Failed to {action} {kind} {name}: {reason}")


class AdminClientError(OperatorError):
    """A call to the cluster HTTP proxy failed"""

    def __init__(self, command: str, reason: str):
        self.command = command
        self.reason = reason
        super().__init__(f"Admin client command {command} failed: {reason}")


class ConfigGenerationError(OperatorError):
    """Component configuration could not be rendered"""


class ProbeInvariantError(OperatorError):
    """
    Raised when a status probe fails.

    A probe runs the decision logic with side effects disabled and must not fail
    under normal operation, so an error here is a defect in the decision logic
    rather than an infrastructure problem. The orchestrator stops the pass for the
    cluster instead of acting on a status that may be wrong.
    """

    def __init__(self, component: str, cause: Exception):
        self.component = component
        self.cause = cause
        super().__init__(f"Status probe of {component} failed: {cause}")
