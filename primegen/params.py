# primegen/params.py
# Validation of user-supplied bits/count, shared by the CLI, API and jobs.
from __future__ import annotations
from typing import Union

MIN_BITS = 32

def parse_int(text: Union[str, int]) -> int:
    if isinstance(text, bool):
        raise ValueError(f"Unable to parse '{text}'")
    if isinstance(text, int):
        return text
    s = str(text).strip()
    try:
        return int(s, 10)
    except ValueError:
        raise ValueError(f"Unable to parse '{text}'") from None

def byte_length_for_bits(bits: Union[str, int]) -> int:
    """Bits -> bytes; bits must be a multiple of 8 and at least 32."""
    b = parse_int(bits)
    if b < MIN_BITS or b % 8:
        raise ValueError(f"bits must be a multiple of 8 and at least {MIN_BITS}, got {b}")
    return b // 8

def parse_count(count: Union[str, int, None], default: int = 1) -> int:
    if count is None or count == "":
        return default
    c = parse_int(count)
    if c < 1:
        raise ValueError(f"count must be a positive integer, got {c}")
    return c
