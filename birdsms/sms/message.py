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

from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import attr

from birdsms.errors import DecodeError
from birdsms.sms.types import TypeDetails, TypeDetailValue
from birdsms.types import JsonDict
from birdsms.util.timeutils import parse_rfc3339


def _read_only(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    """Copy a mapping into one that can't be changed afterwards."""
    return MappingProxyType(dict(mapping))


@attr.s(frozen=True, slots=True, auto_attribs=True)
class Recipient:
    # The phone number, as a number.
    recipient: int
    status: str
    # None until the message has actually been sent to this recipient.
    status_datetime: Optional[datetime]


@attr.s(frozen=True, slots=True, auto_attribs=True)
class RecipientList:
    """The recipients of a message, with delivery counters.

    The counters are reported by the API and may not match the number of
    items.
    """

    total_count: int
    total_sent_count: int
    total_delivered_count: int
    total_delivery_failed_count: int
    items: Tuple[Recipient, ...]


@attr.s(frozen=True, slots=True, auto_attribs=True)
class Message:
    """A message, as the API reported it when it was fetched."""

    id: str
    href: str
    direction: str
    type: str
    originator: str
    body: str
    reference: Optional[str]
    validity: Optional[int]
    gateway: int
    type_details: TypeDetails = attr.ib(converter=_read_only)
    data_coding: str
    mclass: int
    # Only set while the message waits to be sent.
    scheduled_datetime: Optional[datetime]
    created_datetime: Optional[datetime]
    recipients: RecipientList


@attr.s(frozen=True, slots=True, auto_attribs=True)
class MessageList:
    offset: int
    limit: int
    count: int
    total_count: int
    # Pagination links ("first", "previous", "next", "last").
    links: Mapping[str, Optional[str]] = attr.ib(converter=_read_only)
    items: Tuple[Message, ...]


def parse_message(raw: Any) -> Message:
    """
    Parse a message object returned by the API.

    :param raw: The decoded JSON object.

    :raise DecodeError: if the object doesn't have the shape of a message.

    :return: The parsed message.
    """
    if not isinstance(raw, dict):
        raise DecodeError("Expected a message object, got %r" % (type(raw).__name__,))

    return Message(
        id=_get_str(raw, "id"),
        href=_get_str(raw, "href"),
        direction=_get_str(raw, "direction"),
        type=_get_str(raw, "type"),
        originator=_get_str(raw, "originator"),
        body=_get_str(raw, "body"),
        reference=_get_optional_str(raw, "reference"),
        validity=_get_optional_int(raw, "validity"),
        gateway=_get_int(raw, "gateway", default=0),
        type_details=_parse_type_details(raw.get("typeDetails")),
        data_coding=_get_optional_str(raw, "datacoding") or "",
        mclass=_get_int(raw, "mclass", default=1),
        scheduled_datetime=_get_timestamp(raw, "scheduledDatetime"),
        created_datetime=_get_timestamp(raw, "createdDatetime"),
        recipients=_parse_recipient_list(raw.get("recipients")),
    )


def parse_message_list(raw: Any) -> MessageList:
    """
    Parse a page of messages returned by the API. Messages keep the order
    they have in the response.

    :param raw: The decoded JSON object.

    :raise DecodeError: if the object doesn't have the shape of a message
        list, or any of its items isn't a message.

    :return: The parsed list.
    """
    if not isinstance(raw, dict):
        raise DecodeError(
            "Expected a message list object, got %r" % (type(raw).__name__,)
        )

    items = raw.get("items")
    if not isinstance(items, list):
        raise DecodeError("Message list has no 'items' array")

    links = raw.get("links") or {}
    if not isinstance(links, dict) or not all(
        v is None or isinstance(v, str) for v in links.values()
    ):
        raise DecodeError("Message list has malformed 'links'")

    return MessageList(
        offset=_get_int(raw, "offset"),
        limit=_get_int(raw, "limit"),
        count=_get_int(raw, "count"),
        total_count=_get_int(raw, "totalCount"),
        links=links,
        items=tuple(parse_message(item) for item in items),
    )


def _parse_recipient_list(raw: Any) -> RecipientList:
    if not isinstance(raw, dict):
        raise DecodeError("Message has no 'recipients' object")

    items = raw.get("items")
    if not isinstance(items, list):
        raise DecodeError("Recipient list has no 'items' array")

    return RecipientList(
        total_count=_get_int(raw, "totalCount"),
        total_sent_count=_get_int(raw, "totalSentCount"),
        total_delivered_count=_get_int(raw, "totalDeliveredCount", default=0),
        total_delivery_failed_count=_get_int(
            raw, "totalDeliveryFailedCount", default=0
        ),
        items=tuple(_parse_recipient(item) for item in items),
    )


def _parse_recipient(raw: Any) -> Recipient:
    if not isinstance(raw, dict):
        raise DecodeError("Expected a recipient object, got %r" % (type(raw).__name__,))

    return Recipient(
        recipient=_get_int(raw, "recipient"),
        status=_get_str(raw, "status"),
        status_datetime=_get_timestamp(raw, "statusDatetime"),
    )


def _parse_type_details(raw: Any) -> TypeDetails:
    """Missing details mean the message type has none, so that's an empty dict."""
    if raw is None:
        return {}

    if not isinstance(raw, dict):
        raise DecodeError("'typeDetails' must be an object")

    details: Dict[str, TypeDetailValue] = {}
    for key, value in raw.items():
        if isinstance(value, (str, bool)):
            details[key] = value
        elif isinstance(value, (int, float)):
            details[key] = float(value)
        else:
            raise DecodeError("Unsupported value for type detail %r: %r" % (key, value))

    return details


def _get_str(raw: JsonDict, key: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise DecodeError("Expected a string for %r, got %r" % (key, value))
    return value


def _get_optional_str(raw: JsonDict, key: str) -> Optional[str]:
    value = raw.get(key)
    if value is not None and not isinstance(value, str):
        raise DecodeError("Expected a string or null for %r, got %r" % (key, value))
    return value


def _get_int(raw: JsonDict, key: str, default: Optional[int] = None) -> int:
    value = raw.get(key)
    if value is None and default is not None:
        return default
    if not isinstance(value, int) or isinstance(value, bool):
        raise DecodeError("Expected an integer for %r, got %r" % (key, value))
    return value


def _get_optional_int(raw: JsonDict, key: str) -> Optional[int]:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        raise DecodeError("Expected an integer or null for %r, got %r" % (key, value))
    return value


def _get_timestamp(raw: JsonDict, key: str) -> Optional[datetime]:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeError("Expected a timestamp or null for %r, got %r" % (key, value))

    parsed = parse_rfc3339(value)
    if parsed is None:
        raise DecodeError("Invalid timestamp for %r: %r" % (key, value))
    return parsed
