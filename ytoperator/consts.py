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

# Config volume mounted into every server and init job pod
CONFIG_MOUNT_POINT = "/config"
CONFIG_VOLUME_NAME = "config"
INIT_CLUSTER_SCRIPT_FILE_NAME = "init-cluster.sh"
CLIENT_CONFIG_FILE_NAME = "client.yson"

# Keys of the admin credentials secret
ADMIN_LOGIN_SECRET = "YT_LOGIN"
ADMIN_PASSWORD_SECRET = "YT_PASSWORD"
ADMIN_TOKEN_SECRET = "YT_TOKEN"

DEFAULT_ADMIN_LOGIN = "admin"
DEFAULT_ADMIN_PASSWORD = "password"

# Component labels
YT_COMPONENT_LABEL_MASTER = "yt-master"
YT_COMPONENT_LABEL_DATA_NODE = "yt-data-node"
YT_COMPONENT_LABEL_TABLET_NODE = "yt-tablet-node"
YT_COMPONENT_LABEL_CLIENT = "yt-client"

# Monitoring ports
MASTER_MONITORING_PORT = 10010
NODE_MONITORING_PORT = 10029

# Label and annotation keys
LABEL_APP_NAME = "app.kubernetes.io/name"
LABEL_COMPONENT = "app.kubernetes.io/component"
LABEL_INSTANCE = "app.kubernetes.io/instance"
LABEL_MANAGED_BY = "app.kubernetes.io/managed-by"
MANAGED_BY = "ytoperator"
CONFIG_HASH_ANNOTATION = "ytsaurus.tech/config-hash"

# Condition keys owned by the orchestrator
CONDITION_RECONCILED = "Reconciled"
