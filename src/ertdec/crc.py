from __future__ import annotations

from typing import Union

import numpy as np

from .constants import CRC16_POLY, CRC16_INIT, CRC16_XOROUT, CRC16_GOOD_RESIDUE

CRC16_MASK = 0xFFFF

ByteLike = Union[bytes, bytearray, memoryview, np.ndarray]


def crc16(data: ByteLike, poly: int = CRC16_POLY, init: int = CRC16_INIT) -> int:
    """
    CRC-16 over a byte range, MSB-first, no input/output reflection.

    No output XOR is applied here; callers invert with CRC16_XOROUT where the
    frame format stores an inverted checksum.
    """
    reg = init & CRC16_MASK
    for byte in bytes(data):
        reg ^= (byte & 0xFF) << 8
        for _ in range(8):
            if reg & 0x8000:
                reg = ((reg << 1) ^ poly) & CRC16_MASK
            else:
                reg = (reg << 1) & CRC16_MASK
    return reg


def crc16_residue(data_with_crc: ByteLike, poly: int = CRC16_POLY, init: int = CRC16_INIT) -> int:
    """Register left after feeding data followed by its stored (inverted) CRC."""
    return crc16(data_with_crc, poly, init)


def crc16_check(
    data: ByteLike,
    stored: int,
    poly: int = CRC16_POLY,
    init: int = CRC16_INIT,
    xorout: int = CRC16_XOROUT,
) -> bool:
    """Return True if crc16(data) ^ xorout equals the stored 16-bit value."""
    return (crc16(data, poly, init) ^ xorout) == (stored & CRC16_MASK)


def residue_ok(data_with_crc: ByteLike) -> bool:
    return crc16_residue(data_with_crc) == CRC16_GOOD_RESIDUE
