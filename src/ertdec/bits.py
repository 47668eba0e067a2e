from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np
from numpy.typing import NDArray

_CODE_RE = re.compile(r"^\{(\d+)\}\s*([0-9A-Fa-f]*)$")


@dataclass(frozen=True, eq=False)
class BitRow:
    """One demodulated, byte-aligned candidate frame.

    bits: np.uint8 array of 0/1, MSB-first within each byte. The declared
    bit length is bits.size and is trusted exactly.
    """

    bits: NDArray[np.uint8]

    def __post_init__(self) -> None:
        arr = np.asarray(self.bits, dtype=np.uint8)
        if arr.ndim != 1:
            raise ValueError("bits must be 1-D array")
        if arr.size and int(arr.max()) > 1:
            raise ValueError("bits must contain only 0/1 values")
        arr = arr.copy()
        arr.setflags(write=False)
        object.__setattr__(self, "bits", arr)

    @property
    def bit_length(self) -> int:
        return int(self.bits.size)

    def to_bytes(self) -> bytes:
        """Pack MSB-first; a trailing partial byte is zero-padded."""
        return np.packbits(self.bits, bitorder="big").tobytes()

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray], bit_length: int | None = None) -> "BitRow":
        bits = np.unpackbits(np.frombuffer(bytes(data), dtype=np.uint8), bitorder="big")
        if bit_length is not None:
            if bit_length < 0 or bit_length > bits.size:
                raise ValueError(f"bit_length {bit_length} outside 0..{bits.size}")
            bits = bits[:bit_length]
        return cls(bits)

    @classmethod
    def from_hex(cls, text: str) -> "BitRow":
        return cls.from_bytes(bytes.fromhex(text.strip()))

    @classmethod
    def from_code(cls, text: str) -> "BitRow":
        """Parse '{N}hexdigits' (explicit bit count) or plain hex digits."""
        text = text.strip()
        m = _CODE_RE.match(text)
        if m is None:
            return cls.from_hex(text)
        nbits = int(m.group(1))
        digits = m.group(2)
        if len(digits) % 2:
            digits += "0"
        return cls.from_bytes(bytes.fromhex(digits), bit_length=nbits)


class BitReader:
    """MSB-first bit cursor over a byte buffer."""

    def __init__(self, data: Union[bytes, bytearray, memoryview], bit_offset: int = 0) -> None:
        self._data = bytes(data)
        self._nbits = len(self._data) * 8
        if bit_offset < 0 or bit_offset > self._nbits:
            raise ValueError(f"bit_offset {bit_offset} outside 0..{self._nbits}")
        self._pos = bit_offset

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return self._nbits - self._pos

    def read(self, nbits: int) -> int:
        if nbits < 0:
            raise ValueError("nbits must be non-negative")
        if nbits > self.remaining:
            raise ValueError(f"read of {nbits} bits at {self._pos} overruns {self._nbits}-bit buffer")
        value = 0
        pos = self._pos
        for _ in range(nbits):
            byte = self._data[pos >> 3]
            value = (value << 1) | ((byte >> (7 - (pos & 7))) & 1)
            pos += 1
        self._pos = pos
        return value

    def read_many(self, count: int, nbits: int) -> Tuple[int, ...]:
        return tuple(self.read(nbits) for _ in range(count))


def int_to_bits(value: int, nbits: int) -> NDArray[np.uint8]:
    """MSB-first bits of value, as np.uint8 array of length nbits."""
    return np.array([(value >> i) & 1 for i in range(nbits - 1, -1, -1)], dtype=np.uint8)


def pack_bits_msb_first(bits: NDArray[np.uint8]) -> bytes:
    return np.packbits(np.asarray(bits, dtype=np.uint8), bitorder="big").tobytes()
