# Copyright 2026 The birdsms Authors
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
from configparser import ConfigParser

from birdsms.config._base import BaseConfig
from birdsms.config.exceptions import ConfigError


class GeneralConfig(BaseConfig):
    def parse_config(self, cfg: ConfigParser) -> None:
        """
        Parse the 'general' section of the config

        :param cfg: the configuration to be parsed
        """
        self.log_path = cfg.get("general", "log.path")

        self.log_level = cfg.get("general", "log.level").upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigError("Invalid log level '%s'" % (self.log_level,))
