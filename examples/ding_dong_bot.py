#!/usr/bin/env python3
"""
Ding-dong bot.

Replies "dong" to every "ding" it receives in a private chat and logs out
when it receives "bye".

Usage:
    WECHATY_TOKEN=... python examples/ding_dong_bot.py
    python examples/ding_dong_bot.py --mock
"""

import argparse
import asyncio
import os
import sys

import qrcode

# Add the parent directory to the path to import the package from a checkout
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pywechaty import (
    LoginPayload,
    LogoutPayload,
    MessagePayload,
    Puppet,
    PuppetMock,
    PuppetOptions,
    PuppetService,
    Wechaty,
    WechatyBaseError,
)
from pywechaty.constants import QRCODE_VIEWER_URL
from pywechaty.schemas import ContactPayload, MessagePayload as RawMessagePayload, MessageType, ScanStatus
from pywechaty.utils import get_logger, now_timestamp, setup_logging

logger = get_logger("ding_dong_bot")


def on_scan(payload, ctx):
    if payload.qrcode is None:
        print(f"Scan status: {payload.status.name}")
        return
    print(f"Scan QR code to log in: {payload.status.name}")
    print(QRCODE_VIEWER_URL.format(qrcode=payload.qrcode))
    qr = qrcode.QRCode()
    qr.add_data(payload.qrcode)
    qr.print_ascii(invert=True)


async def on_login(payload: LoginPayload, ctx):
    print(f"User {payload.contact} has logged in")
    contacts = await ctx.contact_find_all()
    print(f"Contact list: {', '.join(str(contact) for contact in contacts)}")


def on_logout(payload: LogoutPayload, ctx):
    print(f"User {payload.contact} has logged out")


async def on_message(payload: MessagePayload, ctx):
    message = payload.message
    logger.info(f"Message: {message}")

    if message.is_self() or message.is_in_room():
        return
    if message.message_type() != MessageType.TEXT:
        return

    text = message.text()
    if text == "bye":
        await ctx.logout()
    elif text == "ding":
        await message.reply_text("dong")


async def simulate(mock: PuppetMock, bot: Wechaty):
    """Drive the mock puppet through a short conversation."""
    await asyncio.sleep(0.1)
    me = ContactPayload(id="bot", name="Ding Dong Bot", friend=True)
    friend = ContactPayload(id="friend", name="Friend", friend=True)
    mock.add_contact(friend)

    mock.mock_scan("mock-qrcode", ScanStatus.WAITING)
    mock.mock_login(me)
    for index, text in enumerate(("ding", "bye")):
        mock.mock_message(RawMessagePayload(
            id=f"message-{index}",
            type=MessageType.TEXT,
            text=text,
            timestamp=now_timestamp(),
            from_id=friend.id,
            to_id=me.id,
        ))

    await bot.wait_idle()
    bot.stop()


async def main():
    parser = argparse.ArgumentParser(description="Wechaty ding-dong bot")
    parser.add_argument("--token", help="Puppet service token (default: $WECHATY_TOKEN)")
    parser.add_argument("--endpoint", help="Puppet service endpoint (default: $WECHATY_ENDPOINT)")
    parser.add_argument("--mock", action="store_true", help="Use the in-memory mock puppet")
    parser.add_argument("--log-level", help="error, warn, info, debug or trace (default: $WECHATY_LOG)")
    args = parser.parse_args()

    setup_logging(level=args.log_level)

    mock = None
    if args.mock:
        mock = PuppetMock()
        puppet = Puppet(mock)
    else:
        options = PuppetOptions.from_env()
        if args.token:
            options.token = args.token
        if args.endpoint:
            options.endpoint = args.endpoint
        try:
            puppet = await PuppetService.create(options)
        except WechatyBaseError as e:
            logger.error(f"Failed to start the puppet service: {e}")
            return 1

    bot = Wechaty(puppet)
    bot.on_scan(on_scan).on_login(on_login).on_logout(on_logout).on_message(on_message)

    if mock is not None:
        asyncio.ensure_future(simulate(mock, bot))

    await bot.start()
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nExiting...")
