from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict, Iterable, Optional, Tuple

from .bits import BitRow
from .config import DecoderConfig
from .crc import crc16
from .frames import IDM_FRAME, SCMPLUS_FRAME, FrameSpec, extract_fields, match_frame, read_uint
from .record import build_record
from .types import STATUS_RANK, CrcResult, DecodeOutcome, DecodeStatus

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = DecoderConfig()


class FrameDecoder:
    """Length/preamble match, checksum validation, field extraction, record build.

    Subclasses only bind a FrameSpec; every stage is driven by its data.
    """

    spec: FrameSpec

    def __init__(self, spec: Optional[FrameSpec] = None) -> None:
        if spec is not None:
            self.spec = spec
        elif getattr(self, "spec", None) is None:
            raise ValueError(f"{type(self).__name__} needs a FrameSpec")

    @property
    def model(self) -> str:
        return self.spec.model

    def match(self, row: BitRow) -> Optional[DecodeStatus]:
        return match_frame(row, self.spec)

    def validate(self, frame: bytes) -> Tuple[CrcResult, ...]:
        results = []
        for c in self.spec.crcs:
            calculated = crc16(frame[c.start:c.end], c.poly, c.init) ^ c.xorout
            received = read_uint(frame, c.field_offset, 2)
            results.append(CrcResult(c.name, received, calculated))
        return tuple(results)

    def extract(self, frame: bytes) -> Dict[str, Any]:
        return extract_fields(frame, self.spec)

    def decode(self, row: BitRow, config: Optional[DecoderConfig] = None) -> DecodeOutcome:
        cfg = config or _DEFAULT_CONFIG
        miss = self.match(row)
        if miss is not None:
            return DecodeOutcome(miss, self.model)

        frame = row.to_bytes()
        crc_results = self.validate(frame)
        bad = [r for r in crc_results if not r.ok]
        if bad and cfg.verify_crc:
            level = logging.INFO if cfg.verbose >= 2 else logging.DEBUG
            for r in bad:
                logger.log(level, "%s %s check failed (0x%04X != 0x%04X)", self.model, r.name, r.calculated, r.received)
            return DecodeOutcome(DecodeStatus.INTEGRITY_FAILURE, self.model, crc_results=crc_results)

        fields = self.extract(frame)
        record = build_record(self.spec, fields, frame, crc_results, verify_crc=cfg.verify_crc)
        return DecodeOutcome(
            DecodeStatus.SUCCESS,
            self.model,
            record=record,
            fields=MappingProxyType(fields),
            crc_results=crc_results,
        )


class ScmPlusDecoder(FrameDecoder):
    spec = SCMPLUS_FRAME


class IdmDecoder(FrameDecoder):
    """IDM: both the packet CRC and the endpoint-ID (serial number) CRC must hold."""

    spec = IDM_FRAME


DECODERS: Tuple[FrameDecoder, ...] = (IdmDecoder(), ScmPlusDecoder())


def get_decoder(name: str) -> FrameDecoder:
    for d in DECODERS:
        if d.model.lower() == name.lower():
            return d
    raise KeyError(f"Unknown decoder: {name}")


def decode_row(
    row: BitRow,
    decoders: Optional[Iterable[FrameDecoder]] = None,
    config: Optional[DecoderConfig] = None,
) -> Optional[DecodeOutcome]:
    """Try each decoder in turn.

    Returns the first success, otherwise the outcome that got furthest through
    the pipeline (None if no decoder was tried).
    """
    cfg = config or _DEFAULT_CONFIG
    if decoders is None:
        decoders = [get_decoder(name) for name in cfg.formats]
    best: Optional[DecodeOutcome] = None
    for d in decoders:
        out = d.decode(row, cfg)
        if out.ok:
            return out
        if best is None or STATUS_RANK[out.status] > STATUS_RANK[best.status]:
            best = out
    return best
