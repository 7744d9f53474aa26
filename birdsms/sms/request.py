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

import math
from datetime import datetime, timedelta
from typing import Dict, List, Mapping, Optional, Sequence, Union

import attr

from birdsms.errors import ValidationError
from birdsms.sms.types import MessageRequestBody
from birdsms.util.timeutils import format_rfc3339

MESSAGE_TYPES = ("sms", "binary", "premium", "flash")
DATA_CODINGS = ("plain", "unicode")
DIRECTIONS = ("mt", "mo")

# Only these message types take extra details (a UDH header for binary
# messages; keyword, shortcode and tariff for premium ones).
TYPES_WITH_DETAILS = ("binary", "premium")

TypeDetailsInput = Mapping[str, Union[str, int, float, bool]]


@attr.s(frozen=True, slots=True, auto_attribs=True)
class MessageParams:
    """Optional parameters of a new message.

    Empty strings, a gateway of 0 and a validity of None leave the choice to
    the API.
    """

    type: str = ""
    reference: str = ""
    validity: Optional[int] = None
    gateway: int = 0
    type_details: Optional[TypeDetailsInput] = None
    data_coding: str = ""
    scheduled_datetime: Optional[datetime] = None
    shorten_urls: bool = False
    report_url: Optional[str] = None


@attr.s(frozen=True, slots=True, auto_attribs=True)
class ListParams:
    """Filters for listing messages. Unset filters are left out of the query."""

    status: Optional[str] = None
    originator: Optional[str] = None
    recipient: Optional[str] = None
    direction: Optional[str] = None
    limit: int = 0
    offset: int = 0


@attr.s(frozen=True, slots=True, auto_attribs=True)
class OutboundRequest:
    """The body of a request creating a message, ready to be serialised."""

    originator: str
    recipients: List[str]
    body: str
    type: Optional[str] = None
    reference: Optional[str] = None
    validity: Optional[int] = None
    gateway: Optional[int] = None
    type_details: Optional[Dict[str, Union[str, int, float, bool]]] = None
    data_coding: Optional[str] = None
    mclass: Optional[int] = None
    # Already rendered as RFC 3339.
    scheduled_datetime: Optional[str] = None
    shorten_urls: Optional[bool] = None
    report_url: Optional[str] = None

    def to_json(self) -> MessageRequestBody:
        """Render the request body, leaving out every field that is unset."""
        body: MessageRequestBody = {
            "originator": self.originator,
            "body": self.body,
            "recipients": list(self.recipients),
        }

        if self.type is not None:
            body["type"] = self.type
        if self.reference is not None:
            body["reference"] = self.reference
        if self.validity is not None:
            body["validity"] = self.validity
        if self.gateway is not None:
            body["gateway"] = self.gateway
        if self.type_details is not None:
            body["typeDetails"] = dict(self.type_details)
        if self.data_coding is not None:
            body["datacoding"] = self.data_coding
        if self.mclass is not None:
            body["mclass"] = self.mclass
        if self.scheduled_datetime is not None:
            body["scheduledDatetime"] = self.scheduled_datetime
        if self.shorten_urls is not None:
            body["shortenUrls"] = self.shorten_urls
        if self.report_url is not None:
            body["reportUrl"] = self.report_url

        return body


def build_request(
    originator: str,
    recipients: Sequence[str],
    body: str,
    params: Optional[MessageParams] = None,
) -> OutboundRequest:
    """
    Build the request creating a message.

    Recipients are passed through as given: phone numbers are validated by
    the API, not here.

    :param originator: The sender shown to the recipients.
    :param recipients: The phone numbers to send the message to.
    :param body: The text of the message.
    :param params: Optional parameters of the message.

    :raise ValidationError: if the arguments are structurally invalid.

    :return: The request to send.
    """
    if not originator:
        raise ValidationError("An originator is required")

    if isinstance(recipients, str) or not recipients:
        raise ValidationError("At least one recipient is required")

    for recipient in recipients:
        if not isinstance(recipient, str):
            raise ValidationError("Recipients must be strings, got %r" % (recipient,))

    if params is None:
        return OutboundRequest(
            originator=originator, recipients=list(recipients), body=body
        )

    _validate_params(params)

    scheduled = None
    if params.scheduled_datetime is not None:
        scheduled = format_rfc3339(params.scheduled_datetime)

    type_details = None
    if params.type_details is not None:
        type_details = dict(params.type_details)

    return OutboundRequest(
        originator=originator,
        recipients=list(recipients),
        body=body,
        type=params.type,
        reference=params.reference,
        validity=params.validity,
        gateway=params.gateway,
        type_details=type_details,
        data_coding=params.data_coding,
        # Flash messages are shown straight away and not stored: that's GSM
        # message class 0.
        mclass=0 if params.type == "flash" else 1,
        scheduled_datetime=scheduled,
        shorten_urls=params.shorten_urls,
        report_url=params.report_url,
    )


def _validate_params(params: MessageParams) -> None:
    """
    Check the parameters of a new message.

    :raise ValidationError: if a parameter has an unknown value, or doesn't
        apply to the message type.
    """
    if params.type and params.type not in MESSAGE_TYPES:
        raise ValidationError(
            "Unknown message type '%s', expected one of %s"
            % (params.type, ", ".join(MESSAGE_TYPES))
        )

    if params.data_coding and params.data_coding not in DATA_CODINGS:
        raise ValidationError(
            "Unknown data coding '%s', expected one of %s"
            % (params.data_coding, ", ".join(DATA_CODINGS))
        )

    if params.validity is not None and (
        isinstance(params.validity, bool) or params.validity < 0
    ):
        raise ValidationError("Validity must be a non-negative number of seconds")

    if params.type_details is not None:
        if params.type not in TYPES_WITH_DETAILS:
            raise ValidationError(
                "Type details only apply to %s messages, not '%s'"
                % (" and ".join(TYPES_WITH_DETAILS), params.type or "sms")
            )
        for key, value in params.type_details.items():
            if not isinstance(key, str) or not isinstance(
                value, (str, int, float, bool)
            ):
                raise ValidationError("Invalid type detail %r: %r" % (key, value))
            # JSON has no NaN or Infinity.
            if isinstance(value, float) and not math.isfinite(value):
                raise ValidationError("Type detail %r must be finite" % (key,))

    if params.scheduled_datetime is not None:
        offset = params.scheduled_datetime.utcoffset()
        if offset is None:
            raise ValidationError("The scheduled datetime must be timezone-aware")
        if offset % timedelta(minutes=1):
            raise ValidationError(
                "The scheduled datetime's UTC offset must be whole minutes"
            )


def list_query(params: Optional[ListParams] = None) -> Dict[str, str]:
    """
    Build the query string parameters for listing messages.

    :param params: The filters to apply, if any.

    :raise ValidationError: if a filter has an invalid value.

    :return: The query string parameters.
    """
    if params is None:
        return {}

    if params.direction is not None and params.direction not in DIRECTIONS:
        raise ValidationError(
            "Unknown direction '%s', expected one of %s"
            % (params.direction, ", ".join(DIRECTIONS))
        )

    if params.limit < 0 or params.offset < 0:
        raise ValidationError("Limit and offset can't be negative")

    query = {}
    if params.status is not None:
        query["status"] = params.status
    if params.originator is not None:
        query["originator"] = params.originator
    if params.recipient is not None:
        query["recipient"] = params.recipient
    if params.direction is not None:
        query["direction"] = params.direction
    if params.limit > 0:
        query["limit"] = str(params.limit)
    if params.offset > 0:
        query["offset"] = str(params.offset)

    return query
