from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .bits import BitReader, BitRow
from .constants import (
    CRC16_INIT,
    CRC16_POLY,
    CRC16_XOROUT,
    IDM_FRAME_BYTES,
    IDM_INTERVAL_BITS,
    IDM_INTERVAL_COUNT,
    IDM_MODEL,
    IDM_MODULATION,
    IDM_PREAMBLE,
    SCMPLUS_FRAME_BYTES,
    SCMPLUS_MODEL,
    SCMPLUS_MODULATION,
    SCMPLUS_PREAMBLE,
    ModulationParams,
)
from .types import DecodeStatus

UINT = "uint"
PACKED = "packed"


@dataclass(frozen=True)
class FieldSpec:
    """Fixed-offset field. uint: big-endian, width 1..4 bytes, optional mask.
    packed: `count` MSB-first values of `bits` each inside a width-byte region.
    """

    name: str
    offset: int
    width: int
    kind: str = UINT
    mask: Optional[int] = None
    count: int = 0
    bits: int = 0

    @property
    def end(self) -> int:
        return self.offset + self.width


@dataclass(frozen=True)
class CrcSpec:
    """Checksum over frame[start:end], stored big-endian at field_offset."""

    name: str
    start: int
    end: int
    field_offset: int
    poly: int = CRC16_POLY
    init: int = CRC16_INIT
    xorout: int = CRC16_XOROUT


@dataclass(frozen=True)
class FrameSpec:
    model: str
    preamble: bytes
    frame_bytes: int
    fields: Tuple[FieldSpec, ...]
    crcs: Tuple[CrcSpec, ...]
    record_keys: Tuple[str, ...]
    modulation: ModulationParams

    def __post_init__(self) -> None:
        if len(self.preamble) > self.frame_bytes:
            raise ValueError(f"{self.model}: preamble longer than frame")
        names = set()
        for f in self.fields:
            if f.name in names:
                raise ValueError(f"{self.model}: duplicate field {f.name}")
            names.add(f.name)
            if f.offset < 0 or f.end > self.frame_bytes:
                raise ValueError(f"{self.model}: field {f.name} [{f.offset}, {f.end}) outside frame")
            if f.kind == UINT:
                if not 1 <= f.width <= 4:
                    raise ValueError(f"{self.model}: field {f.name} width {f.width} not in 1..4")
            elif f.kind == PACKED:
                if f.count * f.bits > f.width * 8:
                    raise ValueError(f"{self.model}: field {f.name} packs more bits than its region")
            else:
                raise ValueError(f"{self.model}: field {f.name} has unknown kind {f.kind!r}")
        for c in self.crcs:
            if not 0 <= c.start < c.end <= self.frame_bytes or c.field_offset + 2 > self.frame_bytes:
                raise ValueError(f"{self.model}: checksum {c.name} outside frame")

    @property
    def frame_bits(self) -> int:
        return self.frame_bytes * 8

    def field(self, name: str) -> FieldSpec:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)


SCMPLUS_FRAME = FrameSpec(
    model=SCMPLUS_MODEL,
    preamble=SCMPLUS_PREAMBLE,
    frame_bytes=SCMPLUS_FRAME_BYTES,
    fields=(
        FieldSpec("protocol", 2, 1),
        FieldSpec("scm_type", 3, 1),
        FieldSpec("id", 4, 4),
        FieldSpec("consumption_data", 8, 4),
        FieldSpec("tamper", 12, 2),
        FieldSpec("crc", 14, 2),
    ),
    crcs=(CrcSpec("crc", 2, 14, 14),),
    record_keys=(
        "model",
        "protocol",
        "scm_type",
        "id",
        "consumption_data",
        "tamper",
        "crc",
        "calc_crc",
        "codes",
        "mic",
    ),
    modulation=SCMPLUS_MODULATION,
)

IDM_FRAME = FrameSpec(
    model=IDM_MODEL,
    preamble=IDM_PREAMBLE,
    frame_bytes=IDM_FRAME_BYTES,
    fields=(
        FieldSpec("version", 7, 1),
        # high nibble reserved
        FieldSpec("idm_type", 8, 1, mask=0x0F),
        FieldSpec("id", 9, 4),
        FieldSpec("consumption_interval", 13, 1),
        FieldSpec("programming_state", 14, 1),
        FieldSpec("consumption", 25, 3),
        FieldSpec("generation", 28, 3),
        FieldSpec("net", 34, 4),
        FieldSpec("intervals", 38, 48, kind=PACKED, count=IDM_INTERVAL_COUNT, bits=IDM_INTERVAL_BITS),
        FieldSpec("transmit_time_offset", 86, 2),
        FieldSpec("sn_crc", 88, 2),
        FieldSpec("packet_crc", 90, 2),
    ),
    crcs=(
        CrcSpec("packet_crc", 4, 90, 90),
        CrcSpec("sn_crc", 9, 13, 88),
    ),
    record_keys=(
        "model",
        "id",
        "version",
        "idm_type",
        "consumption_interval",
        "programming_state",
        "generation",
        "consumption",
        "net",
        "sn_crc",
        "packet_crc",
        "codes",
        "mic",
    ),
    modulation=IDM_MODULATION,
)

FRAME_SPECS: Tuple[FrameSpec, ...] = (IDM_FRAME, SCMPLUS_FRAME)


def match_frame(row: BitRow, spec: FrameSpec) -> Optional[DecodeStatus]:
    """Return None if row has the spec's exact length and preamble, else the miss status."""
    if row.bit_length != spec.frame_bits:
        return DecodeStatus.LENGTH_MISMATCH
    head = row.to_bytes()[: len(spec.preamble)]
    if head != spec.preamble:
        return DecodeStatus.PREAMBLE_MISMATCH
    return None


def read_uint(frame: bytes, offset: int, width: int) -> int:
    return int.from_bytes(frame[offset:offset + width], "big")


def unpack_packed(frame: bytes, f: FieldSpec) -> Tuple[int, ...]:
    reader = BitReader(frame[f.offset:f.end])
    return reader.read_many(f.count, f.bits)


def extract_fields(frame: bytes, spec: FrameSpec) -> Dict[str, Any]:
    """Unpack every field of spec from a frame already known to be frame_bytes long."""
    out: Dict[str, Any] = {}
    for f in spec.fields:
        if f.kind == PACKED:
            out[f.name] = unpack_packed(frame, f)
            continue
        value = read_uint(frame, f.offset, f.width)
        if f.mask is not None:
            value &= f.mask
        out[f.name] = value
    return out
