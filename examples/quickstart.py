"""Send a direct message and a group message between local identities."""
import logging
import time

from dkd import InstantMessage, TextContent
from dkd.api import Messenger
from dkd.crypto.default_crypto_provider import DefaultCryptoProvider
from dkd.crypto.keystore import KeyStore
from dkd.interop.wire import encode_message


def main():
    logging.basicConfig(level=logging.DEBUG)

    crypto = DefaultCryptoProvider(KeyStore())
    for identifier in ("moki@alpha", "hulk@beta", "lucy@gamma"):
        crypto.keystore.generate(identifier, crypto)
    messenger = Messenger(crypto)

    # Direct message
    instant = InstantMessage.create("moki@alpha", "hulk@beta", int(time.time()), TextContent("Hey guy!"))
    raw = messenger.pack_bytes(instant)
    print("wire:", raw.decode("utf-8"))
    received = messenger.unpack_bytes(raw)
    print("hulk@beta got:", received.content.get("text"))

    # Group message, one signed copy per member
    members = ["hulk@beta", "lucy@gamma"]
    group_msg = InstantMessage.create(
        "moki@alpha", "team@group", int(time.time()), TextContent("Hello team", group="team@group")
    )
    for member, reliable in zip(members, messenger.pack(group_msg, members=members)):
        out = messenger.unpack_bytes(encode_message(reliable), member)
        print(f"{member} got:", out.content.get("text"))


if __name__ == "__main__":
    main()
