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
from typing import Optional, Sequence
from urllib.parse import quote, urlencode

from birdsms.client import RestClient
from birdsms.errors import DecodeError, ValidationError
from birdsms.sms.message import Message, MessageList, parse_message, parse_message_list
from birdsms.sms.request import ListParams, MessageParams, build_request, list_query
from birdsms.types import JsonDict

logger = logging.getLogger(__name__)

MESSAGES_PATH = "/messages"


async def create(
    client: RestClient,
    originator: str,
    recipients: Sequence[str],
    body: str,
    params: Optional[MessageParams] = None,
) -> Message:
    """
    Send a new message, or schedule it if params has a scheduled datetime.

    :param client: The client to send the request with.
    :param originator: The sender shown to the recipients.
    :param recipients: The phone numbers to send the message to.
    :param body: The text of the message.
    :param params: Optional parameters of the message.

    :return: The message as created by the API.
    """
    request = build_request(originator, recipients, body, params)

    result = await client.request("POST", MESSAGES_PATH, request.to_json())
    message = parse_message(_require_body(result))

    logger.info(
        "Created message %s for %d recipient(s)%s",
        message.id,
        message.recipients.total_count,
        " (scheduled)" if message.scheduled_datetime is not None else "",
    )
    return message


async def read(client: RestClient, message_id: str) -> Message:
    """
    Fetch a single message.

    :param client: The client to send the request with.
    :param message_id: The ID of the message.
    """
    result = await client.request("GET", _message_path(message_id))
    return parse_message(_require_body(result))


async def list_messages(
    client: RestClient, params: Optional[ListParams] = None
) -> MessageList:
    """
    Fetch a page of messages, optionally filtered.

    :param client: The client to send the request with.
    :param params: The filters and pagination to apply.
    """
    path = MESSAGES_PATH
    query = list_query(params)
    if query:
        path += "?" + urlencode(query)

    result = await client.request("GET", path)
    return parse_message_list(_require_body(result))


async def delete(client: RestClient, message_id: str) -> None:
    """
    Delete a message. Deleting a scheduled message cancels it.

    :param client: The client to send the request with.
    :param message_id: The ID of the message.
    """
    await client.request("DELETE", _message_path(message_id))
    logger.info("Deleted message %s", message_id)


def _message_path(message_id: str) -> str:
    if not message_id:
        raise ValidationError("A message ID is required")
    return "%s/%s" % (MESSAGES_PATH, quote(message_id, safe=""))


def _require_body(result: Optional[JsonDict]) -> JsonDict:
    if result is None:
        raise DecodeError("Expected a JSON object in the response, got no body")
    return result
