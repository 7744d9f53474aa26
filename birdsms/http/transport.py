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
import logging
from io import BytesIO
from typing import Any, Callable, Optional, Tuple

from twisted.internet import defer, error
from twisted.internet.interfaces import IDelayedCall
from twisted.internet.task import Cooperator
from twisted.web.client import Agent, FileBodyProducer
from twisted.web.http_headers import Headers
from twisted.web.iweb import IBodyProducer
from typing_extensions import Protocol

from birdsms import __version__
from birdsms.config import BirdSMSConfig
from birdsms.config.exceptions import ConfigError
from birdsms.errors import TransportError, ValidationError
from birdsms.http.httpcommon import BodyExceededMaxSize, read_body_with_max_size
from birdsms.types import JsonDict

logger = logging.getLogger(__name__)

# The delay used by the body producer's scheduler, so that body chunks are
# written on a later reactor iteration.
_EPSILON = 0.00000001


def _make_scheduler(reactor: Any) -> Callable[[Callable[[], object]], IDelayedCall]:
    """makes a Cooperator scheduler function which uses the given reactor.

    (twisted.internet.task.Cooperator requires a scheduler function that uses
    the global reactor)
    """

    def _scheduler(x: Callable[[], object]) -> IDelayedCall:
        return reactor.callLater(_EPSILON, x)

    return _scheduler


class Transport(Protocol):
    """The one call the REST client needs from an HTTP stack."""

    async def send(
        self, method: str, path: str, body: Optional[JsonDict] = None
    ) -> Tuple[int, bytes]:
        """Send a request to the API and return its status code and raw body.

        :param method: The HTTP method, e.g. "POST".
        :param path: The path relative to the API endpoint, including any
            query string, e.g. "/messages?status=scheduled".
        :param body: A JSON object to send as the request body, if any.

        :raise TransportError: if no response could be obtained.
        :raise ValidationError: if the body can't be serialised as JSON.
        """
        ...


class TwistedTransport:
    """A Transport sending requests through a twisted.web.client.Agent.

    :param reactor: The reactor to make requests with.
    :param config: The client configuration. The API endpoint, access key,
        timeouts and maximum response size come from its 'api' section.
    """

    def __init__(self, reactor: Any, config: BirdSMSConfig) -> None:
        if not config.api.access_key:
            raise ConfigError("api.access_key must be set to send requests")

        self.reactor = reactor
        self.endpoint = config.api.endpoint
        self.timeout = config.api.timeout
        self.max_response_size = config.api.max_response_size
        self._access_key = config.api.access_key

        # The default endpoint factory uses the BrowserLikePolicyForHTTPS
        # context factory which will do regular cert validation 'like a browser'
        self.agent = Agent(reactor, connectTimeout=config.api.connect_timeout)
        self._cooperator = Cooperator(scheduler=_make_scheduler(reactor))

    async def send(
        self, method: str, path: str, body: Optional[JsonDict] = None
    ) -> Tuple[int, bytes]:
        uri = self.endpoint + path

        headers = Headers(
            {
                b"Authorization": [b"AccessKey " + self._access_key.encode("utf8")],
                b"Accept": [b"application/json"],
                b"User-Agent": [b"birdsms/" + __version__.encode("ascii")],
            }
        )

        body_producer: Optional[IBodyProducer] = None
        if body is not None:
            try:
                json_bytes = json.dumps(body, allow_nan=False).encode("utf8")
            except ValueError as e:
                raise ValidationError("Body is not valid JSON: %s" % (e,)) from e
            headers.addRawHeader(b"Content-Type", b"application/json")
            body_producer = FileBodyProducer(
                BytesIO(json_bytes), cooperator=self._cooperator
            )
            logger.debug("HTTP %s %s -> %s", method, json_bytes, uri)
        else:
            logger.debug("HTTP %s %s", method, uri)

        d = defer.ensureDeferred(self._request(method, uri, headers, body_producer))
        d.addTimeout(self.timeout, self.reactor)

        try:
            return await d
        except (defer.TimeoutError, error.TimeoutError) as e:
            logger.warning(
                "HTTP %s %s timed out after %s seconds", method, uri, self.timeout
            )
            raise TransportError(
                "Request to %s timed out after %s seconds" % (uri, self.timeout)
            ) from e

    async def _request(
        self,
        method: str,
        uri: str,
        headers: Headers,
        body_producer: Optional[IBodyProducer],
    ) -> Tuple[int, bytes]:
        try:
            response = await self.agent.request(
                method.encode("ascii"),
                uri.encode("utf8"),
                headers,
                bodyProducer=body_producer,
            )
        except defer.CancelledError:
            raise
        except Exception as e:
            logger.warning("HTTP %s %s failed: %r", method, uri, e)
            raise TransportError("Request to %s failed: %s" % (uri, e)) from e

        # Ensure the body object is read otherwise we'll leak HTTP connections
        # as per
        # https://twistedmatrix.com/documents/current/web/howto/client.html
        try:
            response_body = await read_body_with_max_size(
                response, self.max_response_size
            )
        except BodyExceededMaxSize as e:
            raise TransportError(
                "Response from %s exceeded %d bytes" % (uri, self.max_response_size),
                response.code,
            ) from e
        except defer.CancelledError:
            raise
        except Exception as e:
            logger.warning("Reading response to %s %s failed: %r", method, uri, e)
            raise TransportError(
                "Reading response from %s failed: %s" % (uri, e), response.code
            ) from e

        logger.debug("HTTP %s %s responded with %d", method, uri, response.code)

        return response.code, response_body
