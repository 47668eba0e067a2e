from __future__ import annotations

"""
ERT protocol constants: sync preambles, frame sizes, checksum parameters and the
line-coding parameters handed to the demodulation front-end.

Layouts follow the public ERT field tables (SCM+, IDM) as documented by the
rtlamr project.
"""

from dataclasses import dataclass
from typing import Optional


# Checksum (poly 0x1021, init 0xFFFF, output inverted; catalogued as CRC-16/GENIBUS)
CRC16_POLY = 0x1021
CRC16_INIT = 0xFFFF
CRC16_XOROUT = 0xFFFF
# Register value left after running a valid [data | inverted CRC] block through the engine
CRC16_GOOD_RESIDUE = 0x1D0F

# SCM+ (Standard Consumption Message Plus)
SCMPLUS_MODEL = "SCMplus"
SCMPLUS_FRAME_BYTES = 16
# 0x1E protocol ID is read as a field, not matched
SCMPLUS_PREAMBLE = bytes((0x16, 0xA3))
SCMPLUS_PROTOCOL_ID = 0x1E

# IDM (Interval Data Message)
IDM_MODEL = "IDM"
IDM_FRAME_BYTES = 92
# preamble 0x5555, sync 0x16A3, protocol 0x1C, length 0x5C, Hamming code of length
IDM_PREAMBLE = bytes((0x55, 0x55, 0x16, 0xA3, 0x1C, 0x5C, 0xC6))
IDM_INTERVAL_COUNT = 27
IDM_INTERVAL_BITS = 14

INTEGRITY_TAG = "CRC"


@dataclass(frozen=True)
class ModulationParams:
    """Pulse parameters the radio front-end needs to produce a bit row.

    Widths and limits are in microseconds.
    """

    modulation: str = "OOK_PULSE_MANCHESTER_ZEROBIT"
    short_width: int = 30
    long_width: int = 30
    gap_limit: int = 0
    reset_limit: int = 64
    tolerance: Optional[int] = None


SCMPLUS_MODULATION = ModulationParams()
IDM_MODULATION = ModulationParams(tolerance=10)
