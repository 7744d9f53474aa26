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

from typing import Any, List, Optional

import attr


class BirdSMSError(Exception):
    """Base class for every error raised by this library."""


class ValidationError(BirdSMSError):
    """The caller's input was rejected before anything was sent."""


class DecodeError(BirdSMSError):
    """A response body didn't have the shape we expected."""


class TransportError(BirdSMSError):
    """
    The request didn't complete, or its response couldn't be understood.

    :param msg: A description of the failure.
    :param http_status: The HTTP status of the response, if one was received.
    """

    def __init__(self, msg: str, http_status: Optional[int] = None) -> None:
        super().__init__(msg)
        self.http_status = http_status


@attr.s(frozen=True, slots=True, auto_attribs=True)
class ErrorEntry:
    """A single entry of the "errors" array of an API error response."""

    code: int
    parameter: Optional[str]
    description: str


class ProviderError(BirdSMSError):
    """
    The API rejected the request. Carries every error entry it returned.

    :param http_status: The HTTP status of the response.
    :param errors: The error entries from the response body.
    """

    def __init__(self, http_status: int, errors: List[ErrorEntry]) -> None:
        super().__init__(
            "API responded with status %d: %s"
            % (
                http_status,
                "; ".join(
                    "%s (code %d, parameter %s)" % (e.description, e.code, e.parameter)
                    for e in errors
                ),
            )
        )
        self.http_status = http_status
        self.errors = errors


def parse_error(raw: Any, http_status: int) -> ProviderError:
    """
    Build a ProviderError from the body of a non-2xx response.

    The body must look like
    {"errors": [{"code": 2, "parameter": "access_key", "description": "..."}]}
    with at least one entry.

    :param raw: The decoded JSON body of the response.
    :param http_status: The HTTP status of the response.

    :raise TransportError: if the body doesn't have the expected shape.

    :return: The error to raise to the caller.
    """
    if not isinstance(raw, dict) or not isinstance(raw.get("errors"), list):
        raise TransportError(
            "API responded with status %d and no error details" % (http_status,),
            http_status,
        )

    entries = []
    for item in raw["errors"]:
        if not isinstance(item, dict):
            raise TransportError(
                "API responded with status %d and a malformed error entry"
                % (http_status,),
                http_status,
            )

        code = item.get("code")
        parameter = item.get("parameter")
        description = item.get("description", "")

        if (
            not isinstance(code, int)
            or isinstance(code, bool)
            or not (parameter is None or isinstance(parameter, str))
            or not isinstance(description, str)
        ):
            raise TransportError(
                "API responded with status %d and a malformed error entry"
                % (http_status,),
                http_status,
            )

        entries.append(
            ErrorEntry(code=code, parameter=parameter, description=description)
        )

    if not entries:
        raise TransportError(
            "API responded with status %d and an empty error list" % (http_status,),
            http_status,
        )

    return ProviderError(http_status, entries)
