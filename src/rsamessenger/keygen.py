"""Core Key Generation Utility, turning two concurrently searched probable primes into an RSA key pair.

The primes are deliberately of different sizes: the key size is split around its middle by a random multiple of 8
bits of up to a tenth of the key size.

Typical usage example:

    pair = generate_key_pair(1024)
    e, n = pair.public
    d, n = pair.private
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from concurrent.futures import ThreadPoolExecutor
import logging
import math
import secrets
from typing import NamedTuple

from rsamessenger.errors import InvalidKeySize
from rsamessenger.primes import find_probable_prime

logger = logging.getLogger(__name__)

PUBLIC_EXPONENT: int = 65537


class KeyPair(NamedTuple):
    """All the numbers produced while generating a key.

    Only `public` and `private` are meant to leave the generator; the primes and the totient are never persisted.
    """
    p: int
    q: int
    n: int
    e: int
    d: int
    r: int

    @property
    def public(self) -> tuple[int, int]:
        return self.e, self.n

    @property
    def private(self) -> tuple[int, int]:
        return self.d, self.n


def eea(a: int, b: int) -> tuple[int, int, int]:
    """Implements the Extended Euclidean Algorithm.

    Such that a*s0 + b*t0 = r0 = gcd(a, b).

    Args:
        a: The first natural number.
        b: The second natural number.

    Returns:
        Greatest common divisor of two integers.
        As well as the Bezout coefficients.
    """
    r0, r1 = a, b
    s0, s1, t0, t1 = 1, 0, 0, 1
    while r1 != 0:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        s0, s1 = s1, s0 - q * s1
        t0, t1 = t1, t0 - q * t1
    return r0, s0, t0


def mod_inverse(a: int, n: int) -> int:
    """Computes the inverse of `a` modulo `n`.

    Args:
        a: The value to invert.
        n: The modulus. Must be positive.

    Returns:
        The unique `x` in `[0, n)` with `a * x % n == 1`.

    Raises:
        ValueError: If `a` has no inverse modulo `n`.
    """
    if n <= 0:
        raise ValueError("Modulus must be positive.")
    g, s, _ = eea(a % n, n)
    if g != 1:
        raise ValueError(f"{a} is not invertible modulo {n}.")
    return s % n


def split_key_size(key_bits: int) -> tuple[int, int]:
    """Splits a key size into two differing prime sizes.

    Args:
        key_bits: The size of the modulus in bits.

    Returns:
        The sizes (p_bits, q_bits), each a multiple of 8, summing to `key_bits`.

    Raises:
        InvalidKeySize: If `key_bits` is not positive, not a multiple of 8 or its half is not a multiple of 8.
    """
    if key_bits <= 0 or key_bits % 8 != 0:
        raise InvalidKeySize(f"Key size must be positive and divisible by 8, got {key_bits}.")
    half = key_bits // 2
    if half % 8 != 0:
        raise InvalidKeySize(f"Number of bits for p and q must be divisible by 8, got {half}.")
    offset = secrets.randbelow(key_bits // 10 // 8 + 1) * 8
    return half - offset, half + offset


def generate_key_pair(key_bits: int, workers: int | None = None) -> KeyPair:
    """Generates an RSA key pair.

    Searches p and q concurrently, then derives the modulus, the totient and the private exponent for the fixed
    public exponent. Prime pairs which are equal or leave 65537 without an inverse are discarded and searched again.

    Args:
        key_bits: The size of the modulus in bits.
        workers: Search tasks per prime. Passed to `find_probable_prime()`.

    Returns:
        The generated `KeyPair`.

    Raises:
        InvalidKeySize: If `key_bits` cannot be split into two prime sizes divisible by 8.
    """
    p_bits, q_bits = split_key_size(key_bits)
    e = PUBLIC_EXPONENT
    while True:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="keygen") as pool:
            p_search = pool.submit(find_probable_prime, p_bits, workers)
            q_search = pool.submit(find_probable_prime, q_bits, workers)
            p, q = p_search.result(), q_search.result()
        r = (p - 1) * (q - 1)
        if p != q and math.gcd(e, r) == 1:
            break
        logger.debug("Discarding prime pair unsuitable for e=%d, searching again", e)
    n = p * q
    d = mod_inverse(e, r)
    logger.info("Generated %d-bit key pair (p: %d bits, q: %d bits)", n.bit_length(), p_bits, q_bits)
    return KeyPair(p, q, n, e, d, r)
