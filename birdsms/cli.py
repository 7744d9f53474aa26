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

import argparse
import logging
import logging.handlers
import os
import sys
from typing import Any, List, Optional

from twisted.internet import defer, task
from twisted.python import log

from birdsms.client import RestClient
from birdsms.config import BirdSMSConfig
from birdsms.config.exceptions import ConfigError
from birdsms.errors import BirdSMSError, ValidationError
from birdsms.sms import messages
from birdsms.sms.message import Message
from birdsms.sms.request import ListParams, MessageParams
from birdsms.util.timeutils import format_rfc3339, parse_rfc3339

logger = logging.getLogger(__name__)


def get_config_file_path() -> str:
    return os.environ.get("BIRDSMS_CONF", "birdsms.conf")


def setup_logging(config: BirdSMSConfig) -> None:
    """
    Setup logging using the options specified in the config

    :param config: the configuration to use
    """
    log_path = config.general.log_path
    log_level = config.general.log_level

    log_format = "%(asctime)s - %(name)s - %(lineno)d - %(levelname)s" " - %(message)s"
    formatter = logging.Formatter(log_format)

    handler: logging.Handler
    if log_path != "":
        handler = logging.handlers.TimedRotatingFileHandler(
            log_path, when="midnight", backupCount=365
        )
    else:
        handler = logging.StreamHandler()

    handler.setFormatter(formatter)
    rootLogger = logging.getLogger("")
    rootLogger.setLevel(log_level)
    rootLogger.addHandler(handler)

    observer = log.PythonLoggingObserver()
    observer.start()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send and list SMS messages")
    parser.add_argument(
        "-c",
        "--config",
        default=get_config_file_path(),
        help="path to the configuration file (default: $BIRDSMS_CONF or birdsms.conf)",
    )
    commands = parser.add_subparsers(dest="command")
    commands.required = True

    send = commands.add_parser("send", help="send or schedule a message")
    send.add_argument("--originator", required=True)
    send.add_argument("--body", required=True)
    send.add_argument("--type", default="")
    send.add_argument("--reference", default="")
    send.add_argument("--validity", type=int)
    send.add_argument("--gateway", type=int, default=0)
    send.add_argument("--datacoding", default="")
    send.add_argument(
        "--scheduled", help="send at this RFC 3339 time instead of right away"
    )
    send.add_argument("--shorten-urls", action="store_true")
    send.add_argument("recipients", nargs="+")

    list_cmd = commands.add_parser("list", help="list messages")
    list_cmd.add_argument("--status")
    list_cmd.add_argument("--limit", type=int, default=0)
    list_cmd.add_argument("--offset", type=int, default=0)

    read = commands.add_parser("read", help="show a message")
    read.add_argument("message_id")

    delete = commands.add_parser("delete", help="delete a message")
    delete.add_argument("message_id")

    return parser


def format_message(message: Message) -> str:
    """Render a message as a single line of text."""
    when = message.scheduled_datetime or message.created_datetime
    return "%s\t%s\t%s\t%s\t%d/%d sent" % (
        message.id,
        message.type,
        message.originator,
        format_rfc3339(when) if when is not None else "-",
        message.recipients.total_sent_count,
        message.recipients.total_count,
    )


async def run_command(client: RestClient, args: argparse.Namespace) -> None:
    if args.command == "send":
        scheduled = None
        if args.scheduled is not None:
            scheduled = parse_rfc3339(args.scheduled)
            if scheduled is None:
                raise ValidationError(
                    "Invalid --scheduled time: %s" % (args.scheduled,)
                )

        params = MessageParams(
            type=args.type,
            reference=args.reference,
            validity=args.validity,
            gateway=args.gateway,
            data_coding=args.datacoding,
            scheduled_datetime=scheduled,
            shorten_urls=args.shorten_urls,
        )
        message = await messages.create(
            client, args.originator, args.recipients, args.body, params
        )
        print(message.id)
    elif args.command == "list":
        message_list = await messages.list_messages(
            client,
            ListParams(status=args.status, limit=args.limit, offset=args.offset),
        )
        for message in message_list.items:
            print(format_message(message))
    elif args.command == "read":
        print(format_message(await messages.read(client, args.message_id)))
    elif args.command == "delete":
        await messages.delete(client, args.message_id)


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    config = BirdSMSConfig()
    try:
        config.parse_config_file(args.config)
    except ConfigError as e:
        print("Invalid configuration: %s" % (e,), file=sys.stderr)
        sys.exit(1)
    setup_logging(config)

    async def _run(reactor: Any) -> None:
        try:
            client = RestClient.from_config(reactor, config)
            await run_command(client, args)
        except (BirdSMSError, ConfigError) as e:
            logger.error("%s failed: %s", args.command, e)
            sys.exit(1)

    task.react(lambda reactor: defer.ensureDeferred(_run(reactor)))


if __name__ == "__main__":
    main()
