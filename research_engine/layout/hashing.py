"""Deterministic string hashing used for layout jitter and tie-breaking."""
from __future__ import annotations

_INT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000
_BUCKETS = 1000


def _utf16_code_units(value: str) -> list[int]:
    encoded = value.encode("utf-16-le", errors="surrogatepass")
    return [int.from_bytes(encoded[i : i + 2], "little") for i in range(0, len(encoded), 2)]


def string_hash32(value: str) -> int:
    """Return the 32-bit signed ``h * 31 + code_unit`` hash of ``value``.

    The accumulator wraps to a two's-complement 32-bit integer after every
    step and iterates over UTF-16 code units, so the result matches the
    browser front end bit for bit.
    """

    accumulator = 0
    for unit in _utf16_code_units(value):
        accumulator = (accumulator * 31 + unit) & _INT32_MASK
    if accumulator & _INT32_SIGN:
        accumulator -= 1 << 32
    return accumulator


def hash_to_unit(value: str) -> float:
    """Map ``value`` to a reproducible number in ``[0, 1)``.

    Args:
        value: Identifier to hash.

    Returns:
        float: ``abs(hash) % 1000 / 1000``.
    """

    return (abs(string_hash32(value)) % _BUCKETS) / _BUCKETS


__all__ = ["hash_to_unit", "string_hash32"]
