# primegen/candidates.py
# Random fixed-width candidates for the prime search.
from __future__ import annotations
import random, threading
from typing import Optional

_local = threading.local()

def thread_rng() -> random.Random:
    """One PRNG per thread, seeded from the OS on first use."""
    rng = getattr(_local, "rng", None)
    if rng is None:
        rng = _local.rng = random.Random()
    return rng

def generate(byte_length: int, rng: Optional[random.Random] = None) -> int:
    """Return a non-negative integer that fits in exactly `byte_length` bytes.

    The top bit of the most significant byte is always cleared. Even values are
    not filtered here.
    """
    if byte_length <= 0:
        raise ValueError("byte_length must be positive")
    rng = rng or thread_rng()
    buf = bytearray(rng.randbytes(byte_length))
    buf[0] &= 0x7F  # keep the sign bit clear
    return int.from_bytes(buf, "big")
