"""ERT utility-meter frame decoder (SCM+, IDM).

Public API:
- decode_row(row) -> DecodeOutcome | None
- decode_codes(lines) / decode_file(path) -> list[DecodeResult]
"""
from .bits import BitRow, BitReader
from .crc import crc16
from .config import DecoderConfig, load_config
from .decoder import DECODERS, FrameDecoder, IdmDecoder, ScmPlusDecoder, decode_row, get_decoder
from .frames import FRAME_SPECS, IDM_FRAME, SCMPLUS_FRAME, FrameSpec
from .types import CrcResult, DecodeOutcome, DecodeStatus
from .api import DecodeResult, decode_codes, decode_file

__all__ = [
    "BitRow",
    "BitReader",
    "crc16",
    "DecoderConfig",
    "load_config",
    "DECODERS",
    "FrameDecoder",
    "IdmDecoder",
    "ScmPlusDecoder",
    "decode_row",
    "get_decoder",
    "FRAME_SPECS",
    "IDM_FRAME",
    "SCMPLUS_FRAME",
    "FrameSpec",
    "CrcResult",
    "DecodeOutcome",
    "DecodeStatus",
    "DecodeResult",
    "decode_codes",
    "decode_file",
]
