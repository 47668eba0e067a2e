from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Tuple


class DecodeStatus(Enum):
    SUCCESS = "success"
    LENGTH_MISMATCH = "length_mismatch"
    PREAMBLE_MISMATCH = "preamble_mismatch"
    INTEGRITY_FAILURE = "integrity_failure"


# How far a row got through the pipeline; used to pick the most telling miss
STATUS_RANK = {
    DecodeStatus.LENGTH_MISMATCH: 0,
    DecodeStatus.PREAMBLE_MISMATCH: 1,
    DecodeStatus.INTEGRITY_FAILURE: 2,
    DecodeStatus.SUCCESS: 3,
}


@dataclass(frozen=True)
class CrcResult:
    name: str
    received: int
    calculated: int

    @property
    def ok(self) -> bool:
        return self.received == self.calculated


@dataclass(frozen=True)
class DecodeOutcome:
    """Result of one decode call.

    record is set only for SUCCESS. fields holds every extracted value
    (including ones outside the serialized record) once the frame matched.
    """

    status: DecodeStatus
    model: str
    record: Optional[Mapping[str, Any]] = None
    fields: Optional[Mapping[str, Any]] = None
    crc_results: Tuple[CrcResult, ...] = ()

    @property
    def ok(self) -> bool:
        return self.status is DecodeStatus.SUCCESS
