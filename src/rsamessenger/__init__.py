"""RSA Messenger: textbook RSA key generation and messaging through a public key directory.

Generates RSA key pairs from concurrently searched probable primes, stores them in a compact length-prefixed binary
layout carried as base64 text, and exchanges textbook RSA encrypted messages through a remote directory.

Typical usage example:

    pair = generate_key_pair(1024)
    pk = RSAPrivKey.generate(1024)
    c = pk.pub.encrypt(b"Hi there!")
    r = pk.decrypt(c)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from rsamessenger.codec import decode_private_key
from rsamessenger.codec import decode_public_key
from rsamessenger.codec import encode_private_key
from rsamessenger.codec import encode_public_key
from rsamessenger.errors import InvalidKeySize
from rsamessenger.errors import MalformedKeyEncoding
from rsamessenger.keygen import generate_key_pair
from rsamessenger.keygen import KeyPair
from rsamessenger.keygen import mod_inverse
from rsamessenger.primes import find_probable_prime
from rsamessenger.primes import is_probably_prime
from rsamessenger.rsa import decrypt
from rsamessenger.rsa import encrypt
from rsamessenger.rsa import RSAPrivKey
from rsamessenger.rsa import RSAPubKey

__version__ = "0.1.0"
__all__ = [
    "InvalidKeySize",
    "KeyPair",
    "MalformedKeyEncoding",
    "RSAPrivKey",
    "RSAPubKey",
    "decode_private_key",
    "decode_public_key",
    "decrypt",
    "encode_private_key",
    "encode_public_key",
    "encrypt",
    "find_probable_prime",
    "generate_key_pair",
    "is_probably_prime",
    "mod_inverse",
]
