# pylint: disable=missing-module-docstring,redefined-outer-name
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import secrets

from cryptography.hazmat.primitives.asymmetric import rsa
import pytest

import rsamessenger
import rsamessenger.rsa as rsau
from rsamessenger.keygen import KeyPair

standard_payload = "The quick brown fox jumps over the lazy dog1234567890!@#$%^&*()-_=+[{}];:\\|<>,./?~`'\""


@pytest.fixture(scope="module")
def generated() -> rsau.RSAPrivKey:
    return rsau.RSAPrivKey.generate(512)


@pytest.fixture
def keys(known_pair) -> tuple[rsau.RSAPubKey, rsau.RSAPrivKey]:
    return rsau.RSAPubKey(known_pair.n, known_pair.e), rsau.RSAPrivKey(known_pair.n, known_pair.d, known_pair.e)


@pytest.fixture(scope="module")
def crypto_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=1024)


def test_generated_hi(generated):
    ciphertext = generated.pub.encrypt(b"hi")
    assert ciphertext != b"hi"
    assert generated.decrypt(ciphertext) == b"hi"


def test_generated_shape(generated):
    assert generated.pub.expo == 65537
    assert generated.pub.mod == generated.mod
    assert generated.mod.bit_length() in (511, 512)
    assert generated.identities == []


def test_generate_uses_keygen(mocker, known_pair):
    mocker.patch("rsamessenger.keygen.generate_key_pair", return_value=known_pair)
    pk = rsau.RSAPrivKey.generate(512, workers=2)
    rsamessenger.keygen.generate_key_pair.assert_called_once_with(512, 2)
    assert pk.mod == known_pair.n
    assert pk.expo == known_pair.d
    assert pk.pub == rsau.RSAPubKey(known_pair.n, known_pair.e)


@pytest.mark.parametrize("length", [1, 2, 16, 40, 63])
def test_round_trip(keys, length):
    pub, priv = keys
    payload = standard_payload.encode("utf-8")[:length]
    assert len(payload) <= rsau.max_message_size(pub)
    assert priv.decrypt(pub.encrypt(payload)) == payload
    assert rsamessenger.decrypt(rsamessenger.encrypt(payload, pub), priv) == payload


def test_round_trip_random(keys):
    pub, priv = keys
    for _ in range(50):
        payload = b"\x01" + secrets.token_bytes(rsau.max_message_size(pub) - 1)
        assert priv.decrypt(pub.encrypt(payload)) == payload


def test_leading_zero_bytes_dropped(keys):
    pub, priv = keys
    assert priv.decrypt(pub.encrypt(b"\x00\x00hi")) == b"hi"


def test_empty_payload(keys):
    pub, priv = keys
    assert pub.encrypt(b"") == b""
    assert priv.decrypt(b"") == b""


def test_wraparound(keys):
    pub, priv = keys
    payload = rsau.integer_to_bytes(pub.mod + 5)
    assert priv.decrypt(pub.encrypt(payload)) == b"\x05"


def test_ciphertext_is_textbook(keys):
    pub, _ = keys
    m = rsau.bytes_to_integer(b"hi")
    assert pub.encrypt(b"hi") == rsau.integer_to_bytes(pow(m, pub.expo, pub.mod))
    assert pub.encrypt(b"hi") == pub.encrypt(b"hi")


def test_against_cryptography(crypto_key):
    privs = crypto_key.private_numbers()
    pubs = crypto_key.public_key().public_numbers()
    pub = rsau.RSAPubKey(pubs.n, pubs.e)
    priv = rsau.RSAPrivKey(pubs.n, privs.d)
    payload = standard_payload.encode("utf-8")
    assert priv.decrypt(pub.encrypt(payload)) == payload
    assert rsau.bytes_to_integer(pub.encrypt(payload)) == pow(rsau.bytes_to_integer(payload), pubs.e, pubs.n)


def test_identities_append_only():
    priv = rsau.RSAPrivKey(13, 5, identities=["a@x", "b@x", "a@x"])
    assert priv.identities == ["a@x", "b@x"]
    assert priv.authorize("c@x")
    assert not priv.authorize("b@x")
    assert priv.identities == ["a@x", "b@x", "c@x"]
    assert priv.can_decode("c@x")
    assert not priv.can_decode("d@x")


def test_public_export_import(keys):
    pub, _ = keys
    text = pub.export()
    imported = rsau.RSAPubKey.import_key(text, "me@example.com")
    assert imported == pub
    assert imported.identity == "me@example.com"
    assert rsamessenger.decode_public_key(text) == (pub.expo, pub.mod)


def test_private_export_import(keys):
    _, priv = keys
    imported = rsau.RSAPrivKey.import_key(priv.export(), ["me@example.com"])
    assert imported == priv
    assert imported.pub is None
    assert imported.identities == ["me@example.com"]


def test_import_malformed():
    with pytest.raises(rsamessenger.MalformedKeyEncoding):
        rsau.RSAPubKey.import_key("AAAAAg==")


def test_key_equality(keys):
    pub, priv = keys
    assert pub != priv
    assert pub == rsau.RSAPubKey(pub.mod, pub.expo, "someone")
    assert len({pub, rsau.RSAPubKey(pub.mod, pub.expo)}) == 1


@pytest.mark.parametrize("value,expected", [(0, b""), (5, b"\x05"), (258, b"\x01\x02"), (2**64, b"\x01" + b"\x00" * 8)])
def test_integer_to_bytes(value, expected):
    assert rsau.integer_to_bytes(value) == expected
    assert rsau.bytes_to_integer(expected) == value


def test_max_message_size():
    assert rsau.max_message_size(rsau.RSAPubKey(2**512 - 1)) == 63
    assert rsau.max_message_size(rsau.RSAPubKey(2**511 - 1)) == 63
    assert rsau.max_message_size(rsau.RSAPubKey(256)) == 1
    assert rsau.max_message_size(rsau.RSAPubKey(13)) == 0


def test_known_pair_fixture(known_pair):
    assert isinstance(known_pair, KeyPair)
    assert known_pair.e * known_pair.d % known_pair.r == 1
