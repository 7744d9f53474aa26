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

# Wire shapes of the messages API, see
# https://developers.messagebird.com/api/sms-messaging/
from typing import Dict, List, Mapping, Union

from typing_extensions import TypedDict

# Values of typeDetails. JSON has a single number type, so every number is
# handed back as a float.
TypeDetailValue = Union[str, float, bool]
TypeDetails = Mapping[str, TypeDetailValue]


class _MessageRequestRequired(TypedDict):
    originator: str
    body: str
    recipients: List[str]


class MessageRequestBody(_MessageRequestRequired, total=False):
    # Only present when the caller gave any parameters.
    type: str
    reference: str
    validity: int
    gateway: int
    typeDetails: Dict[str, Union[str, int, float, bool]]
    datacoding: str
    mclass: int
    scheduledDatetime: str
    shortenUrls: bool
    reportUrl: str

