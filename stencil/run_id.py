"""
Run identifiers.

Every run gets a ULID: 48 bits of millisecond timestamp followed by 80 bits
of randomness, encoded as 26 Crockford base32 characters. Ids from the same
generator are strictly increasing, even within one millisecond.
"""

import os
import threading
import time
from datetime import datetime
from typing import Callable

from ulid import ULID

_RANDOM_BYTES = 10
_MAX_RANDOM = (1 << (8 * _RANDOM_BYTES)) - 1


class RunIdGenerator:
    """Monotonic ULID source with an injectable clock and entropy.

    Args:
        clock: Returns the current time in seconds since the epoch
        entropy: Returns ``n`` random bytes
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        entropy: Callable[[int], bytes] = os.urandom,
    ):
        self._clock = clock
        self._entropy = entropy
        self._lock = threading.Lock()
        self._last_ms = -1
        self._last_random = 0

    def new_id(self) -> str:
        with self._lock:
            ms = int(self._clock() * 1000)
            if ms <= self._last_ms:
                # same millisecond or clock went backwards: stay monotonic
                ms = self._last_ms
                randomness = self._last_random + 1
                if randomness > _MAX_RANDOM:
                    ms += 1
                    randomness = self._fresh_randomness()
            else:
                randomness = self._fresh_randomness()
            self._last_ms = ms
            self._last_random = randomness

        data = ms.to_bytes(6, "big") + randomness.to_bytes(_RANDOM_BYTES, "big")
        return str(ULID.from_bytes(data))

    def _fresh_randomness(self) -> int:
        return int.from_bytes(self._entropy(_RANDOM_BYTES), "big")


_default_generator = RunIdGenerator()


def new_run_id() -> str:
    """Generate a run id from the process-wide default generator."""
    return _default_generator.new_id()


def run_id_timestamp(run_id: str) -> datetime:
    """Return the creation time encoded in a run id.

    Raises:
        ValueError: If ``run_id`` is not a valid ULID
    """
    return ULID.from_str(run_id).datetime


def is_valid_run_id(run_id: str) -> bool:
    try:
        ULID.from_str(run_id)
    except (ValueError, TypeError):
        return False
    return True
