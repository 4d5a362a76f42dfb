"""Binary key layout and its base64 text form.

A key is an exponent and a modulus, each stored as a 4-byte length followed by the big-endian magnitude:

    [len(E)][E][len(N)][N]

Public and private keys share the layout and its big-endian length prefixes.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import base64
import binascii

from rsamessenger.errors import MalformedKeyEncoding

LENGTH_SIZE: int = 4


def _magnitude(value: int) -> bytes:
    if value < 0:
        raise ValueError("Key components must be non-negative.")
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), byteorder="big", signed=False)


def pack_key(exponent: int, modulus: int) -> bytes:
    """Lays out an exponent and a modulus as length-prefixed fields.

    Args:
        exponent: The public or private exponent.
        modulus: The key modulus.

    Returns:
        The binary key.
    """
    parcel = b""
    for field in (_magnitude(exponent), _magnitude(modulus)):
        parcel += len(field).to_bytes(LENGTH_SIZE, byteorder="big") + field
    return parcel


def unpack_key(data: bytes) -> tuple[int, int]:
    """Reads the two length-prefixed fields of a binary key.

    Args:
        data: The binary key.

    Returns:
        The (exponent, modulus) pair.

    Raises:
        MalformedKeyEncoding: If a field is truncated or bytes trail the modulus.
    """
    fields = []
    pos = 0
    for name in ("exponent", "modulus"):
        if len(data) - pos < LENGTH_SIZE:
            raise MalformedKeyEncoding(f"Key is missing the {name} length field.")
        size = int.from_bytes(data[pos:pos + LENGTH_SIZE], byteorder="big")
        pos += LENGTH_SIZE
        if size > len(data) - pos:
            raise MalformedKeyEncoding(f"Declared {name} length {size} exceeds the {len(data) - pos} remaining bytes.")
        fields.append(int.from_bytes(data[pos:pos + size], byteorder="big", signed=False))
        pos += size
    if pos != len(data):
        raise MalformedKeyEncoding(f"Key has {len(data) - pos} trailing bytes.")
    return fields[0], fields[1]


def _b64_dec(text: str | bytes) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedKeyEncoding("Key is not valid base64.") from exc


def encode_public_key(e: int, n: int) -> str:
    """Encodes a public key {e, n} as base64 text."""
    return base64.b64encode(pack_key(e, n)).decode("ascii")


def decode_public_key(text: str | bytes) -> tuple[int, int]:
    """Decodes base64 text into the public key pair (e, n)."""
    return unpack_key(_b64_dec(text))


def encode_private_key(d: int, n: int) -> str:
    """Encodes a private key {d, n} as base64 text."""
    return base64.b64encode(pack_key(d, n)).decode("ascii")


def decode_private_key(text: str | bytes) -> tuple[int, int]:
    """Decodes base64 text into the private key pair (d, n)."""
    return unpack_key(_b64_dec(text))
