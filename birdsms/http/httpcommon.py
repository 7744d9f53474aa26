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
from io import BytesIO
from typing import Optional, cast

from twisted.internet import defer, protocol
from twisted.internet.interfaces import ITCPTransport
from twisted.internet.protocol import connectionDone
from twisted.python.failure import Failure
from twisted.web.client import ResponseDone
from twisted.web.http import PotentialDataLoss
from twisted.web.iweb import UNKNOWN_LENGTH, IResponse

logger = logging.getLogger(__name__)


class BodyExceededMaxSize(Exception):
    """A response body was larger than the configured maximum.

    :param max_size: The maximum body size, in bytes.
    """

    def __init__(self, max_size: int) -> None:
        super().__init__("Response body exceeded %d bytes" % (max_size,))
        self.max_size = max_size


class _BoundedBodyProtocol(protocol.Protocol):
    """Collects a response body, failing once it grows past max_size.

    If the response declared a Content-Length over the limit, fails as soon
    as the body starts being delivered.
    """

    transport: ITCPTransport

    def __init__(
        self,
        deferred: "defer.Deferred[bytes]",
        max_size: int,
        declared_length: Optional[int],
    ) -> None:
        self.deferred = deferred
        self.max_size = max_size
        self.declared_length = declared_length
        self.buffer = BytesIO()
        self.received = 0

    def connectionMade(self) -> None:
        if self.declared_length is not None and self.declared_length > self.max_size:
            self._fail("Content-Length is %d" % (self.declared_length,))

    def dataReceived(self, data: bytes) -> None:
        if self.deferred.called:
            return

        self.received += len(data)
        if self.received > self.max_size:
            self._fail("received %d bytes" % (self.received,))
            return

        self.buffer.write(data)

    def connectionLost(self, reason: Failure = connectionDone) -> None:
        if self.deferred.called:
            return

        # Without a Content-Length there's no telling whether the body is
        # complete, so PotentialDataLoss counts as done.
        if reason.check(ResponseDone, PotentialDataLoss):
            self.deferred.callback(self.buffer.getvalue())
        else:
            self.deferred.errback(reason)

    def _fail(self, detail: str) -> None:
        logger.warning(
            "Aborting response larger than %d bytes: %s", self.max_size, detail
        )
        self.deferred.errback(BodyExceededMaxSize(self.max_size))
        # Nothing more from this connection will be used. Response bodies are
        # delivered through a proxy that only offers loseConnection.
        if self.transport is not None:
            self.transport.loseConnection()


def read_body_with_max_size(
    response: IResponse, max_size: int
) -> "defer.Deferred[bytes]":
    """
    Read a HTTP response body, giving up once it exceeds max_size.

    The body must be read in full, or the connection it came on leaks.

    :param response: The HTTP response to read from.
    :param max_size: The maximum body size to allow, in bytes.

    :return: A Deferred resolving to the body, or failing with
        BodyExceededMaxSize.
    """
    d: "defer.Deferred[bytes]" = defer.Deferred()

    declared_length = None
    # response.length is either the UNKNOWN_LENGTH sentinel or an int.
    if response.length != UNKNOWN_LENGTH:
        declared_length = cast(int, response.length)

    response.deliverBody(_BoundedBodyProtocol(d, max_size, declared_length))
    return d
