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

import json
import os
from typing import Dict, List, Optional, Tuple

import attr
from twisted.internet._resolver import SimpleResolverComplexifier
from twisted.internet.defer import fail, succeed
from twisted.internet.error import DNSLookupError
from twisted.internet.interfaces import IReactorPluggableNameResolver, IResolverSimple
from twisted.test.proto_helpers import MemoryReactorClock
from zope.interface import implementer

from birdsms.client import RestClient
from birdsms.config import BirdSMSConfig
from birdsms.errors import TransportError
from birdsms.types import JsonDict

TESTDATA_PATH = os.path.join(os.path.dirname(__file__), "testdata")


def load_testdata(name: str) -> bytes:
    """Read a response body from the testdata directory."""
    with open(os.path.join(TESTDATA_PATH, name), "rb") as fp:
        return fp.read()


def load_testdata_json(name: str) -> JsonDict:
    return json.loads(load_testdata(name))


def make_config(
    test_config: Optional[Dict[str, Dict[str, str]]] = None
) -> BirdSMSConfig:
    """Create a new config

    Args:
        test_config: Configuration variables for overriding the default
            config
    """
    if test_config is None:
        test_config = {}

    # Don't pick up a key from the environment of whoever runs the tests.
    test_config.setdefault("api", {}).setdefault("access_key", "test_accesskey")

    config = BirdSMSConfig()
    config.parse_config_dict(test_config)
    return config


@attr.s(auto_attribs=True)
class FakeRequest:
    method: str
    path: str
    body: Optional[JsonDict]


class FakeTransport:
    """A Transport replaying canned responses and recording the requests it got."""

    def __init__(self) -> None:
        self.requests: List[FakeRequest] = []
        self.responses: List[Tuple[int, bytes]] = []
        self.error: Optional[TransportError] = None

    def will_return(self, code: int, body: bytes) -> None:
        self.responses.append((code, body))

    def will_return_testdata(self, name: str, code: int = 200) -> None:
        self.will_return(code, load_testdata(name))

    def will_return_access_key_error(self) -> None:
        self.will_return_testdata("accessKeyError.json", 401)

    async def send(
        self, method: str, path: str, body: Optional[JsonDict] = None
    ) -> Tuple[int, bytes]:
        # Round-trip the body through JSON, as a real transport would.
        if body is not None:
            body = json.loads(json.dumps(body))
        self.requests.append(FakeRequest(method, path, body))

        if self.error is not None:
            raise self.error
        return self.responses.pop(0)


def make_client() -> Tuple[RestClient, FakeTransport]:
    transport = FakeTransport()
    return RestClient(transport), transport


@implementer(IReactorPluggableNameResolver)
class ResolvingMemoryReactorClock(MemoryReactorClock):
    """
    A MemoryReactorClock that supports name resolution.
    """

    def __init__(self):
        super().__init__()
        lookups = self.lookups = {}  # type: Dict[str, str]

        @implementer(IResolverSimple)
        class FakeResolver:
            def getHostByName(self, name, timeout=None):
                if name not in lookups:
                    return fail(DNSLookupError("OH NO: unknown %s" % (name,)))
                return succeed(lookups[name])

        self.nameResolver = SimpleResolverComplexifier(FakeResolver())

    def installNameResolver(self, resolver):
        old = self.nameResolver
        self.nameResolver = resolver
        return old
