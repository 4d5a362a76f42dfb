"""The secure messenger operations: key generation, key exchange through the directory and messaging.

Typical usage example:

    app = Messenger(KeyStore(pathlib.Path(".")), DirectoryClient("http://localhost:5000"))
    app.key_gen(1024)
    app.send_key("me@example.com")
    app.get_key("you@example.com")
    app.send_msg("you@example.com", "Hi there!")
    print(app.get_msg("me@example.com"))
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging

from rsamessenger import store
from rsamessenger.client import DirectoryClient
from rsamessenger.errors import IdentityNotAuthorized
from rsamessenger.rsa import bytes_to_integer
from rsamessenger.rsa import RSAPrivKey
from rsamessenger.store import KeyStore

logger = logging.getLogger(__name__)


class Messenger:
    """Binds the local key files to the remote directory.

    Attributes:
        keys: Local key files.
        client: Directory client.
        encoding: Text encoding of message payloads.
        workers: Search tasks per prime during key generation.
    """

    def __init__(self,
                 keys: KeyStore,
                 client: DirectoryClient,
                 encoding: str = "utf-8",
                 workers: int | None = None) -> None:
        self.keys = keys
        self.client = client
        self.encoding = encoding
        self.workers = workers

    def key_gen(self, keysize: int) -> RSAPrivKey:
        """Generates a key pair and stores it as `private.key` and `public.key`.

        Neither key is tied to an identity until `send_key` registers one.
        """
        pk = RSAPrivKey.generate(keysize, self.workers)
        self.keys.save_private(pk)
        self.keys.save_public(pk.pub)
        logger.info("Stored %d-bit key pair in %s", keysize, self.keys.root)
        return pk

    def send_key(self, email: str) -> None:
        """Publishes the local public key under `email` and authorizes the private key for it.

        The private key is only updated once the directory has accepted the public key.
        """
        pub = self.keys.load_public()
        priv = self.keys.load_private()
        pub.identity = email
        self.keys.save_public(pub)
        self.client.put_key(email, store.public_document(pub))
        if priv.authorize(email):
            self.keys.save_private(priv)
        logger.info("Registered public key for %s", email)

    def get_key(self, email: str) -> None:
        """Fetches the public key of `email` and stores it as `<email>.key`."""
        store.check_email(email)
        document = self.client.get_key(email)
        self.keys.save_contact(email, document)
        logger.info("Stored public key of %s", email)

    def send_msg(self, email: str, plaintext: str) -> None:
        """Encrypts `plaintext` for `email` with their stored public key and sends it.

        Raises:
            ValueError: If the encoded message is too large for the recipient's key.
        """
        pub = self.keys.load_contact(email)
        payload = plaintext.encode(self.encoding)
        if bytes_to_integer(payload) >= pub.mod:
            raise ValueError(f"Message is too long for the {pub.mod.bit_length()}-bit key of {email}.")
        ciphertext = pub.encrypt(payload)
        self.client.put_message(email, store.message_document(email, ciphertext))
        logger.info("Sent %d-byte message to %s", len(payload), email)

    def get_msg(self, email: str) -> str:
        """Fetches the message for `email` and decrypts it.

        Raises:
            IdentityNotAuthorized: If the local private key was never registered for `email`.
        """
        priv = self.keys.load_private()
        if not priv.can_decode(email):
            raise IdentityNotAuthorized(f"Message for {email} cannot be decoded with the local key.")
        document = self.client.get_message(email)
        clear = priv.decrypt(store.ciphertext_from_document(document))
        return clear.decode(self.encoding)
