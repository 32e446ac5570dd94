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

import shlex
from typing import List

from ytoperator.ytconfig import yson


def create_user_command(user_name: str, password: str, token: str, is_superuser: bool) -> List[str]:
    """Shell commands creating a user; every command may run more than once"""
    user = shlex.quote(user_name)
    attributes = shlex.quote(yson.dumps({"name": user_name}))
    result = [f"/usr/bin/yt create user --attributes {attributes} --ignore-existing"]
    if password:
        params = f"{{user={yson.dumps_literal(user_name)};new_password={yson.dumps_literal(password)}}}"
        result.append(f"/usr/bin/yt execute set_user_password {shlex.quote(params)}")
    if token:
        result.append(f"/usr/bin/yt set {shlex.quote('//sys/tokens/' + token)} {user}")
    if is_superuser:
        result.append(f"/usr/bin/yt add-member {user} superusers || true")
    return result
