"""Key providers mapping sample numbers to integer or string keys."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from crudbench.engine import KeyType

_MASK64 = (1 << 64) - 1
_MASK32 = (1 << 32) - 1

_P1 = 11400714785074694791
_P2 = 14029467366897019727
_P3 = 1609587929392839161
_P4 = 9650029242287828579
_P5 = 2870177450012600261

_STRING_REPEATS = {
    KeyType.STRING26: 1,
    KeyType.STRING90: 5,
    KeyType.STRING250: 15,
    KeyType.STRING506: 31,
}


def _rotl(value: int, bits: int) -> int:
    return ((value << bits) | (value >> (64 - bits))) & _MASK64


def _round(acc: int, lane: int) -> int:
    acc = (acc + lane * _P2) & _MASK64
    acc = _rotl(acc, 31)
    return (acc * _P1) & _MASK64


def _merge(acc: int, value: int) -> int:
    acc ^= _round(0, value)
    return (acc * _P1 + _P4) & _MASK64


def xxh64(data: bytes, seed: int = 0) -> int:
    """Return the 64-bit xxHash of ``data`` with the given seed."""
    data = bytes(data)
    seed &= _MASK64
    length = len(data)
    stripe_end = length - length % 32
    if length >= 32:
        accs = [
            (seed + _P1 + _P2) & _MASK64,
            (seed + _P2) & _MASK64,
            seed,
            (seed - _P1) & _MASK64,
        ]
        for lanes in struct.iter_unpack("<4Q", data[:stripe_end]):
            accs = [_round(acc, lane) for acc, lane in zip(accs, lanes)]
        acc = (
            _rotl(accs[0], 1) + _rotl(accs[1], 7) + _rotl(accs[2], 12) + _rotl(accs[3], 18)
        ) & _MASK64
        for value in accs:
            acc = _merge(acc, value)
    else:
        acc = (seed + _P5) & _MASK64
    acc = (acc + length) & _MASK64

    tail = data[stripe_end:]
    words_end = len(tail) - len(tail) % 8
    for (lane,) in struct.iter_unpack("<Q", tail[:words_end]):
        acc ^= _round(0, lane)
        acc = (_rotl(acc, 27) * _P1 + _P4) & _MASK64
    rest = tail[words_end:]
    if len(rest) >= 4:
        (word,) = struct.unpack_from("<I", rest)
        acc ^= (word * _P1) & _MASK64
        acc = (_rotl(acc, 23) * _P2 + _P3) & _MASK64
        rest = rest[4:]
    for byte in rest:
        acc ^= (byte * _P5) & _MASK64
        acc = (_rotl(acc, 11) * _P1) & _MASK64

    acc ^= acc >> 33
    acc = (acc * _P2) & _MASK64
    acc ^= acc >> 29
    acc = (acc * _P3) & _MASK64
    acc ^= acc >> 32
    return acc


def hash_string(n: int, repeat: int) -> str:
    """Concatenate ``repeat`` seeded hex hashes of the big-endian bytes of ``n``."""
    payload = (n & _MASK32).to_bytes(4, "big")
    return "".join(format(xxh64(payload, seed), "x") for seed in range(repeat))


@dataclass(frozen=True)
class OrderedInteger:
    """Sequential integer keys, starting at one."""

    def key(self, n: int) -> int:
        # Keys start at one because some datastores reject a zero primary id.
        return n + 1


def _feistel_round_function(value: int, key: int) -> int:
    mixed = (value ^ key) & _MASK32
    rotated = ((mixed << 5) | (mixed >> 27)) & _MASK32
    return (rotated + key) & _MASK32


_FEISTEL_KEYS = (0xA5A5A5A5, 0x5A5A5A5A, 0x3C3C3C3C)


@dataclass(frozen=True)
class UnorderedInteger:
    """Pseudo-random but unique integer keys from a small Feistel network."""

    def key(self, n: int) -> int:
        n &= _MASK32
        left, right = n >> 16, n & 0xFFFF
        for round_key in _FEISTEL_KEYS:
            left, right = right, left ^ (_feistel_round_function(right, round_key) & 0xFFFF)
        return (left << 16) | right


@dataclass(frozen=True)
class OrderedString:
    """String keys that sort in sample order: a padded number followed by hashes."""

    repeat: int

    def key(self, n: int) -> str:
        return f"{n:010d}{hash_string(n, self.repeat)}"


@dataclass(frozen=True)
class UnorderedString:
    """String keys in pseudo-random order: hashes followed by a padded number."""

    repeat: int

    def key(self, n: int) -> str:
        return f"{hash_string(n, self.repeat)}{n:010d}"


def make_key_provider(
    key_type: KeyType, random: bool
) -> OrderedInteger | UnorderedInteger | OrderedString | UnorderedString:
    """Build the key provider for a key type and ordering."""
    if key_type is KeyType.INTEGER:
        return UnorderedInteger() if random else OrderedInteger()
    repeat = _STRING_REPEATS.get(key_type)
    if repeat is None:
        raise ValueError(f"key type {key_type} is not supported")
    return UnorderedString(repeat) if random else OrderedString(repeat)