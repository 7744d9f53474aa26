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
import os
from configparser import ConfigParser
from typing import Dict

from birdsms.config.api import APIConfig
from birdsms.config.general import GeneralConfig

logger = logging.getLogger(__name__)

CONFIG_DEFAULTS = {
    "general": {
        # Log to stderr unless a file is given. Log files are rotated at midnight.
        "log.path": "",
        "log.level": "INFO",
    },
    "api": {
        "endpoint": "https://rest.messagebird.com",
        "access_key": os.environ.get("BIRDSMS_ACCESS_KEY", ""),
        # Seconds allowed for a whole request, and for setting up the connection.
        "timeout": "30",
        "connect_timeout": "15",
        # Arbitrarily limited to 512 KiB.
        "max_response_size": str(512 * 1024),
    },
}


class BirdSMSConfig:
    """The client configuration, one attribute per config file section.
    Handling of each individual section is delegated to other classes
    stored in a `config_sections` list.

    To use this class, create a new object and then call one of
    `parse_config_file` or `parse_config_dict`.
    """

    def __init__(self) -> None:
        self.general = GeneralConfig()
        self.api = APIConfig()

        self.config_sections = [
            self.general,
            self.api,
        ]

    def parse_from_config_parser(self, cfg: ConfigParser) -> None:
        """
        Have each section in self.config_sections read its options from cfg.

        :param cfg: the configuration to be parsed
        """
        for section in self.config_sections:
            section.parse_config(cfg)

    def parse_config_file(self, config_file: str) -> None:
        """
        Parse the config file at the given path. Options it doesn't set keep
        their defaults, as does everything if the file can't be read.

        :param config_file: the file to be parsed
        """
        cfg = _parser_with_defaults()
        if not cfg.read(config_file):
            logger.warning(
                "Config file %s could not be read, using defaults", config_file
            )

        self.parse_from_config_parser(cfg)

    def parse_config_dict(self, config_dict: Dict[str, Dict[str, str]]) -> None:
        """
        Parse the config from a dictionary of sections, as used in tests.

        :param config_dict: the configuration dictionary to be parsed
        """
        cfg = _parser_with_defaults()
        cfg.read_dict(config_dict)

        self.parse_from_config_parser(cfg)


def _parser_with_defaults() -> ConfigParser:
    cfg = ConfigParser()
    cfg.read_dict(CONFIG_DEFAULTS)
    return cfg
