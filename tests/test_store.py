# pylint: disable=missing-module-docstring,redefined-outer-name
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import json

import pytest

from rsamessenger import store
from rsamessenger.errors import KeyNotFound
from rsamessenger.errors import MalformedKeyEncoding
from rsamessenger.rsa import RSAPrivKey
from rsamessenger.rsa import RSAPubKey


@pytest.fixture
def keystore(tmp_path) -> store.KeyStore:
    return store.KeyStore(tmp_path / "keys")


@pytest.fixture
def pub(known_pair) -> RSAPubKey:
    return RSAPubKey(known_pair.n, known_pair.e)


@pytest.fixture
def priv(known_pair) -> RSAPrivKey:
    return RSAPrivKey(known_pair.n, known_pair.d, known_pair.e)


def test_public_round_trip(keystore, pub):
    pub.identity = "me@example.com"
    keystore.save_public(pub)
    loaded = keystore.load_public()
    assert loaded == pub
    assert loaded.identity == "me@example.com"


def test_public_file_layout(keystore, pub):
    keystore.save_public(pub)
    with open(keystore.root / "public.key", encoding="utf-8") as f:
        document = json.load(f)
    assert document == {"email": "", "key": pub.export()}


def test_private_round_trip(keystore, priv):
    priv.authorize("me@example.com")
    priv.authorize("alias@example.com")
    keystore.save_private(priv)
    loaded = keystore.load_private()
    assert loaded == priv
    assert loaded.identities == ["me@example.com", "alias@example.com"]
    assert loaded.pub is None


def test_private_file_layout(keystore, priv):
    keystore.save_private(priv)
    with open(keystore.private_path, encoding="utf-8") as f:
        document = json.load(f)
    assert document == {"email": [], "key": priv.export()}


@pytest.mark.parametrize("loader", ["load_public", "load_private"])
def test_missing_files(keystore, loader):
    with pytest.raises(KeyNotFound):
        getattr(keystore, loader)()
    with pytest.raises(FileNotFoundError):
        getattr(keystore, loader)()


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", '{"email": ""}', '{"email": "", "key": "AAAAAg=="}',
                                     '{"email": "", "key": 17}'])
def test_malformed_files(keystore, content):
    keystore.root.mkdir()
    keystore.public_path.write_text(content, encoding="utf-8")
    with pytest.raises(MalformedKeyEncoding):
        keystore.load_public()


def test_contacts(keystore, pub):
    pub.identity = "you@example.com"
    keystore.save_contact("you@example.com", store.public_document(pub))
    assert keystore.contact_path("you@example.com").name == "you@example.com.key"
    loaded = keystore.load_contact("you@example.com")
    assert loaded == pub
    assert loaded.identity == "you@example.com"


def test_contact_validated_before_write(keystore):
    with pytest.raises(MalformedKeyEncoding):
        keystore.save_contact("you@example.com", {"email": "you@example.com"})
    assert not keystore.contact_path("you@example.com").exists()


@pytest.mark.parametrize("email", ["../../evil", "a/b@example.com", "..\\evil", "..", ".", "", "nul\0@example.com"])
def test_contact_rejects_path_escapes(tmp_path, keystore, pub, email):
    with pytest.raises(ValueError):
        keystore.save_contact(email, store.public_document(pub))
    with pytest.raises(ValueError):
        keystore.load_contact(email)
    assert not list(tmp_path.rglob("*.key"))
    assert not (tmp_path.parent / "evil.key").exists()


def test_missing_contact(keystore):
    with pytest.raises(KeyNotFound):
        keystore.load_contact("nobody@example.com")


def test_message_document():
    document = store.message_document("you@example.com", b"\x01\x02\x03")
    assert document == {"email": "you@example.com", "content": "AQID"}
    assert store.ciphertext_from_document(document) == b"\x01\x02\x03"


@pytest.mark.parametrize("document", [{}, {"content": "not base64!"}, {"content": None}])
def test_message_document_malformed(document):
    with pytest.raises(MalformedKeyEncoding):
        store.ciphertext_from_document(document)
