"""Probable prime testing and concurrent prime search.

Candidates are generated from the operating system CSPRNG and screened by trial division against a cached table of
small primes before a concurrent Miller-Rabin test. Both the witness trials of a single test and the candidate search
fan out over a thread pool that lives only for the duration of that call; all coordination state is scoped per call.

Typical usage example:

    is_probably_prime(2**127 - 1)
    p = find_probable_prime(512)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from concurrent.futures import ThreadPoolExecutor
import logging
import os
import secrets
import threading

from rsamessenger.errors import InvalidKeySize

logger = logging.getLogger(__name__)

DEFAULT_WITNESSES: int = 10
DEFAULT_WORKERS: int = min(8, os.cpu_count() or 1)

_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0


def _sieve(n: int = 10000) -> list[int]:
    """Implements the Sieve of Eratosthenes.

    Uses the textbook Sieve of Eratosthenes to generate a set of primes up to `n`.
    Includes memory space optimization and sieving until root.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.

    Returns:
        A list of primes up to `n`.
    """
    if n < 2:
        return []
    i_size = (n - 1) // 2
    candidate: list[bool] = [True] * i_size
    for i in range(int(n**0.5) // 2):
        if candidate[i]:
            r = 2 * i + 3
            for j in range((r * r - 3) // 2, i_size, r):
                candidate[j] = False
    return [2] + [(no * 2 + 3) for no, ele in enumerate(candidate) if ele]


def get_pre_primes(n: int = 10000, change: bool = False) -> list[int]:
    """Get the small primes, automatically generating if necessary.

    Regeneration occurs if the requested range is greater than the cached one, forced by `change` or the cache is
    empty.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.
        change: Whether to force a recomputation of primes. Defaults to False.

    Returns:
        List of primes in ascending order. All primes at least to `n` or more unless `change` is True.

    Raises:
        ValueError: If `n` is negative.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if n > _SMALL_PRIMES_CAP or change or not _SMALL_PRIMES:
        _SMALL_PRIMES = _sieve(n)
        _SMALL_PRIMES_CAP = n
    return _SMALL_PRIMES


def _trial_division(no: int, n: int = 10000) -> bool:
    """Check the provided `no` against the known small primes.

    Args:
         no: The number to check.
         n: The number up to which to generate primes. Passed to `get_pre_primes()`.

    Returns:
        False if `no` cannot be prime, True otherwise.
    """
    if no < 2:
        return False
    for prime in get_pre_primes(n):
        if prime**2 > no:
            return True
        if no % prime == 0:
            return False
    return True


def _witness_trial(value: int, d: int, s: int, composite: threading.Event) -> None:
    """Run a single Miller-Rabin round, setting `composite` if the witness proves compositeness."""
    if composite.is_set():
        return
    a = secrets.randbelow(value - 4) + 2
    x = pow(a, d, value)
    if x == 1 or x == value - 1:
        return
    for _ in range(1, s):
        if composite.is_set():
            return
        x = pow(x, 2, value)
        if x == value - 1:
            return
        if x == 1:
            break
    composite.set()


def _decompose(value: int) -> tuple[int, int]:
    """Split `value - 1` into `d * 2**s` with `d` odd."""
    tw = value - 1
    s = (tw & -tw).bit_length() - 1
    return tw >> s, s


def is_probably_prime(value: int, witnesses: int = DEFAULT_WITNESSES) -> bool:
    """Perform a concurrent Miller-Rabin primality test.

    Every witness runs as its own task on a pool of at most `DEFAULT_WORKERS` threads. The verdict is a per-call
    event which can only ever move to "composite", so trials that are still running when it is set simply stop at
    their next squaring step.

    Args:
        value: The integer to test.
        witnesses: Number of independent witness trials. Non-positive values fall back to the default of 10.

    Returns:
        True if `value` is probably prime, False if it is certainly composite. A composite passes with probability
        at most 4**-witnesses.
    """
    if value <= 1:
        return False
    if value <= 4:
        return value != 4
    if witnesses <= 0:
        witnesses = DEFAULT_WITNESSES
    d, s = _decompose(value)
    composite = threading.Event()
    with ThreadPoolExecutor(max_workers=min(witnesses, DEFAULT_WORKERS), thread_name_prefix="miller-rabin") as pool:
        trials = [pool.submit(_witness_trial, value, d, s, composite) for _ in range(witnesses)]
    for trial in trials:
        trial.result()
    return not composite.is_set()


def check_prime(candidate: int, witnesses: int = DEFAULT_WITNESSES, n: int = 10000) -> bool:
    """Performs a composite primality test, using a limited amount of trial divisions, before Miller-Rabin.

    Survivors of trial division get one inline witness round first; only candidates passing it reach the concurrent
    test.

    Args:
        candidate: The candidate prime to test.
        witnesses: Number of Miller-Rabin witnesses.
        n: The number up to which to trial divide. Passed to `_trial_division()`.

    Returns:
        True if `candidate` is probably prime, False otherwise.
    """
    if not _trial_division(candidate, n):
        return False
    if candidate > 4:
        # One inline round rejects almost every composite before a pool is started.
        composite = threading.Event()
        _witness_trial(candidate, *_decompose(candidate), composite)
        if composite.is_set():
            return False
    return is_probably_prime(candidate, witnesses)


class FirstResult:
    """Write-once result slot for a single prime search.

    The first successful `offer` (or `fail`) wins, every later one is refused. Workers poll `is_set` between
    candidates, which makes the slot the search's cancellation token as well.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._value: int | None = None
        self._error: BaseException | None = None

    def offer(self, value: int) -> bool:
        with self._lock:
            if self._done.is_set():
                return False
            self._value = value
            self._done.set()
            return True

    def fail(self, error: BaseException) -> bool:
        with self._lock:
            if self._done.is_set():
                return False
            self._error = error
            self._done.set()
            return True

    def is_set(self) -> bool:
        return self._done.is_set()

    def get(self, timeout: float | None = None) -> int:
        """Block until the slot is filled and return the value, re-raising a recorded failure."""
        if not self._done.wait(timeout):
            raise TimeoutError("No result was offered in time.")
        if self._error is not None:
            raise self._error
        return self._value


def _random_candidate(bits: int) -> int:
    """Draw an odd candidate occupying exactly `bits // 8` bytes."""
    candidate = int.from_bytes(secrets.token_bytes(bits // 8), byteorder="big", signed=False)
    return candidate | (1 << (bits - 1)) | 1


def _search_worker(bits: int, slot: FirstResult) -> None:
    tried = 0
    try:
        while not slot.is_set():
            candidate = _random_candidate(bits)
            tried += 1
            if check_prime(candidate) and slot.offer(candidate):
                logger.debug("Found %d-bit probable prime after %d candidates in %s", bits, tried,
                             threading.current_thread().name)
                return
    except Exception as exc:
        slot.fail(exc)
        raise


def find_probable_prime(bits: int, workers: int | None = None) -> int:
    """Search for a random probable prime of exactly `bits` bits.

    Starts `workers` search tasks which keep drawing fresh candidates until one of them finds a probable prime.
    The winner is stored in a per-call `FirstResult`, the other tasks notice it between candidates and stop.

    Args:
        bits: Size of the prime in bits. Must be a positive multiple of 8.
        workers: Number of concurrent search tasks. Defaults to `DEFAULT_WORKERS`.

    Returns:
        A probable prime with bit length exactly `bits`.

    Raises:
        InvalidKeySize: If `bits` is not a positive multiple of 8.
    """
    if bits <= 0 or bits % 8 != 0:
        raise InvalidKeySize(f"Prime size must be positive and divisible by 8, got {bits}.")
    if workers is None or workers <= 0:
        workers = DEFAULT_WORKERS
    slot = FirstResult()
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"prime-search-{bits}") as pool:
        for _ in range(workers):
            pool.submit(_search_worker, bits, slot)
    return slot.get()
