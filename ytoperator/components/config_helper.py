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

import hashlib
from typing import Any, Dict

from ytoperator.apiproxy import APIProxy
from ytoperator.labeller import Labeller
from ytoperator.resources import ConfigMap
from ytoperator.ytconfig.generator import GeneratorFunc


class ConfigHelper:
    """Config map holding a generated config file plus optional extra files"""

    def __init__(
        self,
        labeller: Labeller,
        api_proxy: APIProxy,
        config_map_name: str,
        file_name: str,
        generator: GeneratorFunc,
    ):
        self.config_map = ConfigMap(config_map_name, labeller, api_proxy)
        self.file_name = file_name
        self.generator = generator

    def get_config_map_name(self) -> str:
        return self.config_map.name

    def fetch(self):
        self.config_map.fetch()

    def exists(self) -> bool:
        return self.config_map.exists()

    def build(self) -> Dict[str, Any]:
        """Desired config map of the current pass; the generator runs once per pass"""
        if self.config_map.new_object is None:
            cm = self.config_map.build()
            cm["data"][self.file_name] = self.generator().decode()
        return self.config_map.new_object

    def get_file_content(self) -> str:
        return self.build()["data"][self.file_name]

    def get_config_hash(self) -> str:
        return hashlib.sha256(self.get_file_content().encode()).hexdigest()

    def need_init(self) -> bool:
        return not self.exists()

    def need_reload(self) -> bool:
        if not self.exists():
            return False
        return self.config_map.observed_data().get(self.file_name) != self.get_file_content()

    def sync(self):
        self.build()
        self.config_map.sync()
