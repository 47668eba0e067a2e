from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from .bits import int_to_bits, pack_bits_msb_first
from .constants import (
    CRC16_XOROUT,
    IDM_FRAME_BYTES,
    IDM_INTERVAL_BITS,
    IDM_INTERVAL_COUNT,
    IDM_PREAMBLE,
    SCMPLUS_FRAME_BYTES,
    SCMPLUS_PREAMBLE,
    SCMPLUS_PROTOCOL_ID,
)
from .crc import crc16


def _put(buf: bytearray, offset: int, width: int, value: int, name: str) -> None:
    if value < 0 or value >= 1 << (8 * width):
        raise ValueError(f"{name}={value} does not fit in {width} byte(s)")
    buf[offset:offset + width] = int(value).to_bytes(width, "big")


def _inverted_crc(data: bytes) -> int:
    return crc16(data) ^ CRC16_XOROUT


def pack_intervals(values: Sequence[int], region_bytes: int = 48) -> bytes:
    """Pack 14-bit interval values MSB-first into a zero-padded region."""
    if len(values) != IDM_INTERVAL_COUNT:
        raise ValueError(f"expected {IDM_INTERVAL_COUNT} intervals, got {len(values)}")
    limit = 1 << IDM_INTERVAL_BITS
    parts = []
    for v in values:
        if v < 0 or v >= limit:
            raise ValueError(f"interval {v} does not fit in {IDM_INTERVAL_BITS} bits")
        parts.append(int_to_bits(int(v), IDM_INTERVAL_BITS))
    bits = np.concatenate(parts)
    pad = np.zeros(region_bytes * 8 - bits.size, dtype=np.uint8)
    return pack_bits_msb_first(np.concatenate([bits, pad]))


def pack_scmplus_frame(
    endpoint_id: int,
    consumption: int,
    tamper: int = 0,
    scm_type: int = 0,
    protocol: int = SCMPLUS_PROTOCOL_ID,
    crc: Optional[int] = None,
) -> bytes:
    """Build a 16-byte SCM+ frame; the checksum is computed unless given."""
    b = bytearray(SCMPLUS_FRAME_BYTES)
    b[0:2] = SCMPLUS_PREAMBLE
    _put(b, 2, 1, protocol, "protocol")
    _put(b, 3, 1, scm_type, "scm_type")
    _put(b, 4, 4, endpoint_id, "endpoint_id")
    _put(b, 8, 4, consumption, "consumption")
    _put(b, 12, 2, tamper, "tamper")
    _put(b, 14, 2, _inverted_crc(bytes(b[2:14])) if crc is None else crc, "crc")
    return bytes(b)


def pack_idm_frame(
    endpoint_id: int,
    consumption: int = 0,
    generation: int = 0,
    net: int = 0,
    version: int = 0,
    idm_type: int = 0,
    consumption_interval: int = 0,
    programming_state: int = 0,
    intervals: Optional[Sequence[int]] = None,
    transmit_time_offset: int = 0,
    type_high_nibble: int = 0,
) -> bytes:
    """Build a 92-byte IDM frame with valid serial-number and packet CRCs.

    type_high_nibble fills the reserved upper half of the endpoint-type byte.
    Undocumented regions are left zero.
    """
    if not 0 <= idm_type <= 0x0F:
        raise ValueError(f"idm_type={idm_type} does not fit in a nibble")
    if not 0 <= type_high_nibble <= 0x0F:
        raise ValueError(f"type_high_nibble={type_high_nibble} does not fit in a nibble")
    b = bytearray(IDM_FRAME_BYTES)
    b[0:7] = IDM_PREAMBLE
    _put(b, 7, 1, version, "version")
    b[8] = (type_high_nibble << 4) | idm_type
    _put(b, 9, 4, endpoint_id, "endpoint_id")
    _put(b, 13, 1, consumption_interval, "consumption_interval")
    _put(b, 14, 1, programming_state, "programming_state")
    _put(b, 25, 3, consumption, "consumption")
    _put(b, 28, 3, generation, "generation")
    _put(b, 34, 4, net, "net")
    b[38:86] = pack_intervals(intervals if intervals is not None else [0] * IDM_INTERVAL_COUNT)
    _put(b, 86, 2, transmit_time_offset, "transmit_time_offset")
    _put(b, 88, 2, _inverted_crc(bytes(b[9:13])), "sn_crc")
    _put(b, 90, 2, _inverted_crc(bytes(b[4:90])), "packet_crc")
    return bytes(b)
