"""JSON key and message documents, and the key files kept in the working directory.

Documents:

    public key   {"email": "alice@example.com", "key": "<base64>"}
    private key  {"email": ["alice@example.com"], "key": "<base64>"}
    message      {"email": "alice@example.com", "content": "<base64 ciphertext>"}
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import base64
import binascii
import json
import logging
import pathlib

from rsamessenger.errors import KeyNotFound
from rsamessenger.errors import MalformedKeyEncoding
from rsamessenger.rsa import RSAPrivKey
from rsamessenger.rsa import RSAPubKey

logger = logging.getLogger(__name__)

PUBLIC_FILE = "public.key"
PRIVATE_FILE = "private.key"
KEY_FILE_FORMAT = "{}.key"


def public_document(key: RSAPubKey) -> dict:
    return {"email": key.identity, "key": key.export()}


def public_from_document(document: dict) -> RSAPubKey:
    try:
        return RSAPubKey.import_key(document["key"], document.get("email") or "")
    except (KeyError, TypeError, AttributeError) as exc:
        raise MalformedKeyEncoding("Public key document is missing its key.") from exc


def private_document(key: RSAPrivKey) -> dict:
    return {"email": list(key.identities), "key": key.export()}


def private_from_document(document: dict) -> RSAPrivKey:
    try:
        return RSAPrivKey.import_key(document["key"], document.get("email") or ())
    except (KeyError, TypeError, AttributeError) as exc:
        raise MalformedKeyEncoding("Private key document is missing its key.") from exc


def message_document(email: str, ciphertext: bytes) -> dict:
    return {"email": email, "content": base64.b64encode(ciphertext).decode("ascii")}


def ciphertext_from_document(document: dict) -> bytes:
    """Extracts the raw ciphertext from a message document.

    Raises:
        MalformedKeyEncoding: If the content is missing or not valid base64.
    """
    try:
        return base64.b64decode(document["content"], validate=True)
    except (KeyError, TypeError, binascii.Error, ValueError) as exc:
        raise MalformedKeyEncoding("Message document has no valid base64 content.") from exc


def check_email(email: str) -> str:
    """Ensures `email` can name a key file inside the key directory.

    Raises:
        ValueError: If `email` is empty, a relative path component or contains a path separator or NUL.
    """
    if not email or email in (".", "..") or any(ch in email for ch in ("/", "\\", "\0")):
        raise ValueError(f"{email!r} is not usable as a key file name.")
    return email


class KeyStore:
    """Key files in a single directory.

    Attributes:
        root: Directory holding `public.key`, `private.key` and the `<email>.key` files of other users.
    """

    def __init__(self, root: pathlib.Path = pathlib.Path(".")) -> None:
        self.root = pathlib.Path(root)

    @property
    def public_path(self) -> pathlib.Path:
        return self.root / PUBLIC_FILE

    @property
    def private_path(self) -> pathlib.Path:
        return self.root / PRIVATE_FILE

    def contact_path(self, email: str) -> pathlib.Path:
        return self.root / KEY_FILE_FORMAT.format(check_email(email))

    def _read(self, path: pathlib.Path) -> dict:
        if not path.is_file():
            raise KeyNotFound(f"Key file {path} does not exist.")
        with open(path, "r", encoding="utf-8") as f:
            try:
                document = json.load(f)
            except json.JSONDecodeError as exc:
                raise MalformedKeyEncoding(f"Key file {path} is not valid JSON.") from exc
        if not isinstance(document, dict):
            raise MalformedKeyEncoding(f"Key file {path} does not hold a key document.")
        return document

    def _write(self, path: pathlib.Path, document: dict) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=4)
        logger.debug("Wrote %s", path)

    def save_public(self, key: RSAPubKey) -> None:
        self._write(self.public_path, public_document(key))

    def load_public(self) -> RSAPubKey:
        return public_from_document(self._read(self.public_path))

    def save_private(self, key: RSAPrivKey) -> None:
        self._write(self.private_path, private_document(key))

    def load_private(self) -> RSAPrivKey:
        return private_from_document(self._read(self.private_path))

    def save_contact(self, email: str, document: dict) -> None:
        """Stores a public key document fetched for `email`, after checking it decodes."""
        public_from_document(document)
        self._write(self.contact_path(email), document)

    def load_contact(self, email: str) -> RSAPubKey:
        return public_from_document(self._read(self.contact_path(email)))
