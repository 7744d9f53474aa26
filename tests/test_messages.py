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

from datetime import datetime, timezone
from urllib.parse import parse_qs, urlparse

from twisted.internet import defer
from twisted.trial import unittest

from birdsms.errors import DecodeError, ProviderError, ValidationError
from birdsms.sms import messages
from birdsms.sms.request import ListParams, MessageParams
from tests.test_message import MessageAssertionsMixin
from tests.utils import make_client


class CreateTestCase(MessageAssertionsMixin, unittest.TestCase):
    def setUp(self) -> None:
        self.client, self.transport = make_client()

    def _create(self, params=None):
        return defer.ensureDeferred(
            messages.create(
                self.client, "TestName", ["31612345678"], "Hello World", params
            )
        )

    def test_create(self) -> None:
        self.transport.will_return_testdata("messageObject.json")

        message = self.successResultOf(self._create())

        self.assertMessageObject(message)
        request = self.transport.requests[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(request.path, "/messages")
        self.assertEqual(
            request.body,
            {
                "originator": "TestName",
                "body": "Hello World",
                "recipients": ["31612345678"],
            },
        )

    def test_create_error(self) -> None:
        self.transport.will_return_access_key_error()

        failure = self.failureResultOf(self._create(), ProviderError)

        self.assertEqual(len(failure.value.errors), 1)
        self.assertEqual(failure.value.errors[0].code, 2)
        self.assertEqual(failure.value.errors[0].parameter, "access_key")

    def test_create_with_params(self) -> None:
        self.transport.will_return_testdata("messageWithParamsObject.json")
        params = MessageParams(
            type="sms",
            reference="TestReference",
            validity=13,
            gateway=10,
            data_coding="unicode",
        )

        message = self.successResultOf(self._create(params))

        self.assertEqual(message.type, "sms")
        self.assertEqual(message.reference, "TestReference")
        self.assertEqual(message.validity, 13)
        self.assertEqual(message.gateway, 10)
        self.assertEqual(message.data_coding, "unicode")

        body = self.transport.requests[0].body
        self.assertEqual(body["reference"], "TestReference")
        self.assertEqual(body["validity"], 13)
        self.assertEqual(body["gateway"], 10)
        self.assertEqual(body["datacoding"], "unicode")
        self.assertNotIn("typeDetails", body)

    def test_create_with_binary_type(self) -> None:
        self.transport.will_return_testdata("binaryMessageObject.json")
        params = MessageParams(type="binary", type_details={"udh": "050003340201"})

        message = self.successResultOf(self._create(params))

        self.assertEqual(message.type, "binary")
        self.assertEqual(len(message.type_details), 1)
        self.assertEqual(message.type_details["udh"], "050003340201")
        self.assertEqual(
            self.transport.requests[0].body["typeDetails"], {"udh": "050003340201"}
        )

    def test_create_with_premium_type(self) -> None:
        self.transport.will_return_testdata("premiumMessageObject.json")
        params = MessageParams(
            type="premium",
            type_details={"keyword": "RESTAPI", "shortcode": 1008, "tariff": 150},
        )

        message = self.successResultOf(self._create(params))

        self.assertEqual(message.type, "premium")
        self.assertEqual(len(message.type_details), 3)
        self.assertEqual(message.type_details["tariff"], 150.0)
        self.assertEqual(message.type_details["shortcode"], 1008.0)
        self.assertEqual(message.type_details["keyword"], "RESTAPI")

    def test_create_with_flash_type(self) -> None:
        self.transport.will_return_testdata("flashMessageObject.json")

        message = self.successResultOf(self._create(MessageParams(type="flash")))

        self.assertEqual(message.type, "flash")
        self.assertEqual(message.mclass, 0)

    def test_create_with_scheduled_datetime(self) -> None:
        self.transport.will_return_testdata("messageObjectWithCreatedDatetime.json")
        scheduled = datetime(2015, 1, 5, 10, 3, 59, tzinfo=timezone.utc)

        message = self.successResultOf(
            self._create(MessageParams(scheduled_datetime=scheduled))
        )

        self.assertEqual(
            self.transport.requests[0].body["scheduledDatetime"],
            "2015-01-05T10:03:59Z",
        )
        self.assertEqual(message.scheduled_datetime, scheduled)
        self.assertEqual(message.recipients.total_count, 1)
        self.assertEqual(message.recipients.total_sent_count, 0)
        self.assertEqual(message.recipients.items[0].recipient, 31612345678)
        self.assertEqual(message.recipients.items[0].status, "scheduled")
        self.assertIsNone(message.recipients.items[0].status_datetime)

    def test_invalid_input_is_not_sent(self) -> None:
        d = defer.ensureDeferred(
            messages.create(self.client, "TestName", [], "Hello World")
        )

        self.failureResultOf(d, ValidationError)
        self.assertEqual(self.transport.requests, [])

    def test_empty_response(self) -> None:
        self.transport.will_return(201, b"")

        self.failureResultOf(self._create(), DecodeError)

    def test_malformed_response(self) -> None:
        self.transport.will_return(200, b'{"id": "6fe65f90454aa61536e6a88b88972670"}')

        self.failureResultOf(self._create(), DecodeError)


class ListTestCase(MessageAssertionsMixin, unittest.TestCase):
    def setUp(self) -> None:
        self.client, self.transport = make_client()

    def test_list(self) -> None:
        self.transport.will_return_testdata("messageListObject.json")

        message_list = self.successResultOf(
            defer.ensureDeferred(messages.list_messages(self.client))
        )

        self.assertEqual(self.transport.requests[0].method, "GET")
        self.assertEqual(self.transport.requests[0].path, "/messages")
        self.assertEqual(message_list.offset, 0)
        self.assertEqual(message_list.limit, 20)
        self.assertEqual(message_list.count, 2)
        self.assertEqual(message_list.total_count, 2)
        for message in message_list.items:
            self.assertMessageObject(message)

    def test_list_scheduled(self) -> None:
        self.transport.will_return_testdata("messageListScheduledObject.json")

        message_list = self.successResultOf(
            defer.ensureDeferred(
                messages.list_messages(self.client, ListParams(status="scheduled"))
            )
        )

        self.assertIn("status=scheduled", self.transport.requests[0].path)
        self.assertEqual(message_list.count, 1)
        self.assertEqual(message_list.total_count, 1)
        self.assertEqual(len(message_list.items), 1)
        self.assertEqual(message_list.items[0].recipients.items[0].status, "scheduled")

    def test_list_paginated(self) -> None:
        self.transport.will_return_testdata("messageListObject.json")

        self.successResultOf(
            defer.ensureDeferred(
                messages.list_messages(
                    self.client, ListParams(originator="Test Name", limit=5, offset=10)
                )
            )
        )

        url = urlparse(self.transport.requests[0].path)
        self.assertEqual(url.path, "/messages")
        self.assertEqual(
            parse_qs(url.query),
            {"originator": ["Test Name"], "limit": ["5"], "offset": ["10"]},
        )


class ReadDeleteTestCase(MessageAssertionsMixin, unittest.TestCase):
    def setUp(self) -> None:
        self.client, self.transport = make_client()

    def test_read(self) -> None:
        self.transport.will_return_testdata("messageObject.json")

        message = self.successResultOf(
            defer.ensureDeferred(
                messages.read(self.client, "6fe65f90454aa61536e6a88b88972670")
            )
        )

        self.assertMessageObject(message)
        self.assertEqual(self.transport.requests[0].method, "GET")
        self.assertEqual(
            self.transport.requests[0].path,
            "/messages/6fe65f90454aa61536e6a88b88972670",
        )

    def test_read_not_found(self) -> None:
        self.transport.will_return(
            404,
            b'{"errors": [{"code": 20, "description": "message not found",'
            b' "parameter": null}]}',
        )

        failure = self.failureResultOf(
            defer.ensureDeferred(messages.read(self.client, "unknown")),
            ProviderError,
        )

        self.assertEqual(failure.value.errors[0].code, 20)
        self.assertIsNone(failure.value.errors[0].parameter)

    def test_delete(self) -> None:
        self.transport.will_return(204, b"")

        result = self.successResultOf(
            defer.ensureDeferred(messages.delete(self.client, "a/b c"))
        )

        self.assertIsNone(result)
        self.assertEqual(self.transport.requests[0].method, "DELETE")
        # The ID is a single path segment.
        self.assertEqual(self.transport.requests[0].path, "/messages/a%2Fb%20c")

    def test_empty_id(self) -> None:
        for operation in (messages.read, messages.delete):
            self.failureResultOf(
                defer.ensureDeferred(operation(self.client, "")), ValidationError
            )
        self.assertEqual(self.transport.requests, [])
