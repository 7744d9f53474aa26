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

from configparser import ConfigParser
from urllib.parse import urlparse

from birdsms.config._base import BaseConfig
from birdsms.config.exceptions import ConfigError


class APIConfig(BaseConfig):
    def parse_config(self, cfg: ConfigParser) -> None:
        """
        Parse the 'api' section of the config

        :param cfg: the configuration to be parsed
        """
        self.endpoint = cfg.get("api", "endpoint").rstrip("/")
        parsed = urlparse(self.endpoint)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(
                "api.endpoint must be an http or https URL, got '%s'" % (self.endpoint,)
            )

        # The key is only needed once requests are actually sent, so an empty
        # value is allowed here.
        self.access_key = cfg.get("api", "access_key")

        self.timeout = cfg.getfloat("api", "timeout")
        self.connect_timeout = cfg.getfloat("api", "connect_timeout")
        self.max_response_size = cfg.getint("api", "max_response_size")

        if self.timeout <= 0 or self.connect_timeout <= 0:
            raise ConfigError("api.timeout and api.connect_timeout must be positive")
        if self.max_response_size <= 0:
            raise ConfigError("api.max_response_size must be positive")
