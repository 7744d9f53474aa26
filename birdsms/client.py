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
from typing import Any, Optional

from birdsms.config import BirdSMSConfig
from birdsms.errors import TransportError, parse_error
from birdsms.http.transport import Transport, TwistedTransport
from birdsms.types import JsonDict
from birdsms.util import json_decoder

logger = logging.getLogger(__name__)


class RestClient:
    """Sends requests to the API through a transport and maps the responses.

    Successful responses are decoded to JSON objects; failed ones are turned
    into a ProviderError when the API explained the failure, or a
    TransportError otherwise.

    :param transport: The transport used to reach the API.
    """

    def __init__(self, transport: Transport) -> None:
        self.transport = transport

    @classmethod
    def from_config(cls, reactor: Any, config: BirdSMSConfig) -> "RestClient":
        """Build a client sending requests with a TwistedTransport.

        :param reactor: The reactor to make requests with.
        :param config: The client configuration.
        """
        return cls(TwistedTransport(reactor, config))

    async def request(
        self, method: str, path: str, body: Optional[JsonDict] = None
    ) -> Optional[JsonDict]:
        """Send a request and return its decoded JSON body.

        :param method: The HTTP method.
        :param path: The path relative to the API endpoint, including any
            query string.
        :param body: A JSON object to send as the request body, if any.

        :raise ProviderError: if the API rejected the request.
        :raise TransportError: if no response was received or it couldn't be
            decoded.

        :return: The JSON object returned by the API, or None if the response
            had no body.
        """
        logger.debug("%s %s", method, path)

        status, raw_body = await self.transport.send(method, path, body)

        json_body = None
        decode_error = None
        if raw_body.strip():
            try:
                json_body = json_decoder.decode(raw_body.decode("UTF-8"))
            except ValueError as e:
                # UnicodeDecodeError and JSONDecodeError are both ValueErrors.
                decode_error = e

        if status < 200 or status >= 300:
            if decode_error is not None:
                logger.warning(
                    "API responded to %s %s with status %d and a non-JSON body",
                    method,
                    path,
                    status,
                )
                raise TransportError(
                    "API responded with status %d and a non-JSON body" % (status,),
                    status,
                )

            provider_error = parse_error(json_body, status)
            logger.warning("%s %s was rejected: %s", method, path, provider_error)
            raise provider_error

        if decode_error is not None:
            raise TransportError(
                "Could not decode response with status %d: %s" % (status, decode_error),
                status,
            )

        if json_body is None:
            return None

        if not isinstance(json_body, dict):
            raise TransportError(
                "API responded with status %d and a JSON body that is not an object"
                % (status,),
                status,
            )

        return json_body
