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

import re
from datetime import datetime, timedelta
from typing import Optional

# RFC 3339 date-time, e.g. 2015-01-05T10:02:59+00:00 or 2015-01-05T10:02:59.123Z
RFC3339_REGEX = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?"
    r"(?:([Zz])|([+-])(\d{2}):(\d{2}))$"
)


def format_rfc3339(dt: datetime) -> str:
    """
    Render a timezone-aware datetime at seconds precision, using "Z" for UTC.

    :param dt: The datetime to render.

    :raise ValueError: if the datetime is naive, or its UTC offset isn't a
        whole number of minutes.

    :return: The RFC 3339 string, e.g. "2015-01-05T10:03:59Z".
    """
    offset = dt.utcoffset()
    if offset is None:
        raise ValueError("Cannot format a naive datetime as RFC 3339")
    if offset % timedelta(minutes=1):
        raise ValueError("RFC 3339 offsets are whole minutes, got %s" % (offset,))

    text = dt.replace(microsecond=0).isoformat()
    if offset == timedelta(0):
        text = text[: -len("+00:00")] + "Z"
    return text


def parse_rfc3339(value: str) -> Optional[datetime]:
    """
    Parse an RFC 3339 date-time string into a timezone-aware datetime.

    :param value: The string to parse.

    :return: The datetime, or None if the string isn't a valid RFC 3339
        date-time.
    """
    match = RFC3339_REGEX.match(value)
    if match is None:
        return None

    fraction = match.group(7) or ""
    # Python datetimes only carry microsecond precision.
    microsecond = int(fraction[:6].ljust(6, "0")) if fraction else 0

    if match.group(8):
        suffix = "+00:00"
    else:
        suffix = "%s%s:%s" % (match.group(9), match.group(10), match.group(11))

    date_part = "%s-%s-%sT%s:%s:%s" % match.group(1, 2, 3, 4, 5, 6)

    try:
        parsed = datetime.fromisoformat(date_part + suffix)
    except ValueError:
        # e.g. month 13 or an out-of-range UTC offset
        return None

    return parsed.replace(microsecond=microsecond)
