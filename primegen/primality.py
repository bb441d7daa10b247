# primegen/primality.py
# Miller–Rabin probable-prime test with random witnesses.
from __future__ import annotations
import random
from typing import Optional

import gmpy2

from .candidates import thread_rng
from .config import MR_ROUNDS

def random_below(n: int, rng: Optional[random.Random] = None) -> int:
    """Uniform witness in [2, n-2) by rejection sampling; needs n > 4."""
    if n <= 4:
        raise ValueError("no witness range below n <= 4")
    rng = rng or thread_rng()
    bits = n.bit_length()
    nbytes = bits // 8 + 1  # room for a sign bit, as in a signed big-endian encoding
    mask = (1 << bits) - 1
    while True:
        r = int.from_bytes(rng.randbytes(nbytes), "big") & mask
        if 2 <= r < n - 2:
            return r

def is_probable_prime(n: int, rounds: int = MR_ROUNDS, rng: Optional[random.Random] = None) -> bool:
    if rounds <= 0:
        raise ValueError("rounds must be positive")
    if n == 2 or n == 3:
        return True
    if n < 2 or n % 2 == 0:
        return False

    # write n-1 = d * 2^s
    d, s = n - 1, 0
    while d % 2 == 0:
        d //= 2; s += 1

    rng = rng or thread_rng()
    N, D, n1 = gmpy2.mpz(n), gmpy2.mpz(d), n - 1
    for _ in range(rounds):
        a = random_below(n, rng)
        x = gmpy2.powmod(a, D, N)
        if x == 1 or x == n1:
            continue
        for _ in range(s - 1):
            x = gmpy2.powmod(x, 2, N)
            if x == n1 or x == 1:
                break  # 1 stays 1 from here on
        if x != n1:
            return False
    return True
