"""Order independent hashing of string-to-string mappings.

Each (key, value) pair is hashed with FNV-1a 64 and the pair hashes are
multiplied in the prime field modulo Q (the MSet-Mu-Hash construction), so
the result depends only on the set of pairs, not on their order.
"""

from __future__ import annotations

from collections.abc import Mapping

Q = 18446744069414584321  # 2**64 - 2**32 + 1

_MASK64 = (1 << 64) - 1
_FNV64_OFFSET = 0xCBF29CE484222325
_FNV64_PRIME = 0x100000001B3


def _fnv1a64(data: bytes) -> int:
    digest = _FNV64_OFFSET
    for byte in data:
        digest ^= byte
        digest = (digest * _FNV64_PRIME) & _MASK64
    return digest


def field_mul64(x: int, y: int) -> int:
    """Return x * y mod Q for 64-bit unsigned operands."""
    return ((x & _MASK64) * (y & _MASK64)) % Q


def hash_map(attributes: Mapping[str, str]) -> int:
    """Return a set hash of the mapping's items; 0 for an empty mapping."""
    if not attributes:
        return 0
    total = 1
    for key, value in attributes.items():
        # each pair is hashed as value, the byte "0", then key (case sensitive)
        pair = value.encode("utf-8") + b"0" + key.encode("utf-8")
        total = field_mul64(total, _fnv1a64(pair))
    return total