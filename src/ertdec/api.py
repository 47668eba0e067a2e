from __future__ import annotations

import io
import os
from dataclasses import dataclass
from typing import IO, Iterable, List, Optional, Union

from .bits import BitRow
from .config import DecoderConfig
from .decoder import decode_row
from .types import DecodeOutcome


@dataclass(frozen=True)
class DecodeResult:
    line_no: int
    code: str
    outcome: DecodeOutcome


def decode_codes(lines: Iterable[str], config: Optional[DecoderConfig] = None) -> List[DecodeResult]:
    """
    Decode bit-row codes, one per line ('{N}hex' or plain hex).

    Blank lines and '#' comments are skipped. Malformed hex raises ValueError
    naming the offending line.
    """
    results: List[DecodeResult] = []
    for line_no, raw in enumerate(lines, start=1):
        code = raw.split("#", 1)[0].strip()
        if not code:
            continue
        try:
            row = BitRow.from_code(code)
        except ValueError as exc:
            raise ValueError(f"line {line_no}: {exc}") from exc
        out = decode_row(row, config=config)
        if out is not None:
            results.append(DecodeResult(line_no, code, out))
    return results


def decode_file(
    path_or_file: Union[str, "os.PathLike[str]", IO[str]],
    config: Optional[DecoderConfig] = None,
) -> List[DecodeResult]:
    """Decode a text file of bit-row codes from a path or text file-like object."""
    if isinstance(path_or_file, (str, os.PathLike)):
        with io.open(path_or_file, "r", encoding="utf-8") as f:
            return decode_codes(f, config)
    return decode_codes(path_or_file, config)
