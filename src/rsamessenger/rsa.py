"""Provides the textbook RSA transform and the key objects carrying it.

Messages are transformed as a single block: the payload bytes are read as one big-endian unsigned integer and raised
to the key exponent. There is no padding, so the payload integer must stay below the modulus; larger payloads wrap
around and cannot be recovered. Leading zero bytes of a payload are not preserved either.

Typical usage example:

    pk = RSAPrivKey.generate(1024)
    c = pk.pub.encrypt(b"Hi there!")
    r = pk.decrypt(c)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from collections.abc import Iterable

from rsamessenger import codec
from rsamessenger import keygen


class RSAKey:
    """The overall RSA key class implementation.

    Attributes:
        mod: The modulus of the keypair.
        expo: The exponent of the key, whether private or public.
    """

    def __init__(self, mod: int, expo: int) -> None:
        self.mod = mod
        self.expo = expo

    def c_rsa(self, message: int) -> int:
        """Performs core RSA operation. (Encrypt/Decrypt)

        No range check is made; representatives of `mod` or more are reduced and do not survive a round trip.

        Args:
            message: The int-marshalled message.

        Returns:
            message**expo mod mod.
        """
        return pow(message, self.expo, self.mod)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (self.mod, self.expo) == (other.mod, other.expo)

    def __hash__(self) -> int:
        return hash((type(self), self.mod, self.expo))


class RSAPubKey(RSAKey):
    """RSA Public Key, optionally tied to the identity it is registered under.

    Attributes:
        identity: The email address the key is published for, empty until it is sent to the directory.
    """

    def __init__(self, mod: int, expo: int = keygen.PUBLIC_EXPONENT, identity: str = "") -> None:
        super().__init__(mod, expo)
        self.identity = identity

    def encrypt(self, message: bytes) -> bytes:
        """Use the public key to encrypt the message.

        Args:
            message: The payload. Its integer value must be below the modulus.

        Returns:
            The ciphertext in its minimal byte representation.
        """
        return integer_to_bytes(self.c_rsa(bytes_to_integer(message)))

    def export(self) -> str:
        """Export the key in its base64 binary layout."""
        return codec.encode_public_key(self.expo, self.mod)

    @classmethod
    def import_key(cls, text: str | bytes, identity: str = "") -> "RSAPubKey":
        """Import the key from its base64 binary layout.

        Args:
            text: The base64 encoded key.
            identity: The identity the key belongs to.

        Returns:
            An RSAPubKey object with the imported public key.
        """
        e, n = codec.decode_public_key(text)
        return cls(n, e, identity)


class RSAPrivKey(RSAKey):
    """RSA Private Key class implementation.

    Only the private exponent and the modulus are kept. Freshly generated keys also expose their public key, keys
    loaded from storage do not.

    Attributes:
        mod: The modulus of the keypair.
        expo: The private exponent of the key.
        pub: The matching public key, if known.
        identities: Identities whose messages this key may decode, in registration order.
    """

    def __init__(self,
                 mod: int,
                 priv_exp: int,
                 pub_exp: int | None = None,
                 identities: Iterable[str] = ()) -> None:
        super().__init__(mod, priv_exp)
        self.pub: RSAPubKey | None = RSAPubKey(mod, pub_exp) if pub_exp is not None else None
        self.identities: list[str] = []
        for identity in identities:
            self.authorize(identity)

    def authorize(self, identity: str) -> bool:
        """Registers `identity` as decodable by this key.

        Returns:
            True if the identity was new, False if it was already registered.
        """
        if identity in self.identities:
            return False
        self.identities.append(identity)
        return True

    def can_decode(self, identity: str) -> bool:
        return identity in self.identities

    def decrypt(self, message: bytes) -> bytes:
        """Decrypts the message using the private key.

        Args:
            message: The ciphertext bytes.

        Returns:
            The payload in its minimal byte representation.
        """
        return integer_to_bytes(self.c_rsa(bytes_to_integer(message)))

    def export(self) -> str:
        """Export the key in its base64 binary layout."""
        return codec.encode_private_key(self.expo, self.mod)

    @classmethod
    def import_key(cls, text: str | bytes, identities: Iterable[str] = ()) -> "RSAPrivKey":
        """Import the key from its base64 binary layout.

        Args:
            text: The base64 encoded key.
            identities: The identities the key is registered for.

        Returns:
            An RSAPrivKey object without a public key.
        """
        d, n = codec.decode_private_key(text)
        return cls(n, d, identities=identities)

    @classmethod
    def generate(cls, size: int, workers: int | None = None) -> "RSAPrivKey":
        """Generates an RSA Private Key, and it's respective Public Key.

        Args:
            size: The size of the RSA Key in bits.
            workers: Search tasks per prime.

        Returns:
            A new generated RSA Private Key, with `pub` set.
        """
        pair = keygen.generate_key_pair(size, workers)
        return cls(pair.n, pair.d, pair.e)


def encrypt(plaintext: bytes, public_key: RSAPubKey) -> bytes:
    return public_key.encrypt(plaintext)


def decrypt(ciphertext: bytes, private_key: RSAPrivKey) -> bytes:
    return private_key.decrypt(ciphertext)


def max_message_size(key: RSAKey) -> int:
    """Largest payload length in bytes whose integer value is always below the key modulus."""
    return (key.mod.bit_length() - 1) // 8


def bytes_to_integer(msg: bytes) -> int:
    """Converts a byte string to a big-endian unsigned integer.

    Args:
        msg: The bytes (AKA Octet String) to convert.

    Returns:
        The representative integer.
    """
    return int.from_bytes(msg, byteorder="big", signed=False)


def integer_to_bytes(msg: int) -> bytes:
    """Converts an integer to its minimal big-endian byte string, zero becoming an empty string."""
    return msg.to_bytes((msg.bit_length() + 7) // 8, byteorder="big", signed=False)
