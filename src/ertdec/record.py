from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Union

import numpy as np

from .constants import INTEGRITY_TAG
from .frames import FrameSpec
from .types import CrcResult


def hex_dump(frame: Union[bytes, bytearray, np.ndarray]) -> str:
    """Lower-case hex, two digits per byte, no separators."""
    return bytes(frame).hex()


def build_record(
    spec: FrameSpec,
    fields: Mapping[str, Any],
    frame: bytes,
    crc_results: Iterable[CrcResult],
    verify_crc: bool = True,
) -> Mapping[str, Any]:
    """Assemble the ordered, read-only output record for one frame.

    Keys follow spec.record_keys. Computed checksums are available as
    calc_<name>; the integrity tag is present only when checksums were enforced.
    """
    pool: Dict[str, Any] = {"model": spec.model}
    pool.update(fields)
    for r in crc_results:
        pool[f"calc_{r.name}"] = r.calculated
    pool["codes"] = hex_dump(frame)
    if verify_crc:
        pool["mic"] = INTEGRITY_TAG

    record: Dict[str, Any] = {}
    for key in spec.record_keys:
        if key in pool:
            record[key] = pool[key]
    return MappingProxyType(record)
