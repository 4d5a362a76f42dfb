"""Configures pytest further."""
import pytest
import sympy

from rsamessenger.keygen import KeyPair
from rsamessenger.keygen import PUBLIC_EXPONENT


def pytest_addoption(parser):
    parser.addoption("--skip-slow", action="store_true", default=False, help="skip slower tests")
    parser.addoption("--run-extreme", action="store_true", default=False, help="run extreme value extremely slow tests")


def pytest_collection_modifyitems(config, items):
    skipdict = {}
    if config.getoption("--skip-slow"):
        skipdict["slow"] = pytest.mark.skip(reason="Slow test: needs no --skip-slow option")
    if not config.getoption("--run-extreme"):
        skipdict["extreme"] = pytest.mark.skip(reason="Extreme test: needs --run-extreme option")
    if not skipdict:
        return
    for item in items:
        for k, v in skipdict.items():
            if k in item.keywords:
                item.add_marker(v)


def _usable_prime(start: int) -> int:
    p = sympy.nextprime(start)
    while (p - 1) % PUBLIC_EXPONENT == 0:
        p = sympy.nextprime(p)
    return p


@pytest.fixture(scope="session")
def known_pair() -> KeyPair:
    """A deterministic 512-bit key pair built from sympy primes, so tests need not search for primes."""
    p = _usable_prime(2**247 + 2**200)
    q = _usable_prime(2**263 + 2**100)
    r = (p - 1) * (q - 1)
    d = pow(PUBLIC_EXPONENT, -1, r)
    return KeyPair(p, q, p * q, PUBLIC_EXPONENT, d, r)
