from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Tuple

from .constants import IDM_MODEL, SCMPLUS_MODEL

KNOWN_FORMATS = (IDM_MODEL, SCMPLUS_MODEL)


@dataclass(frozen=True)
class DecoderConfig:
    # Enabled decoders, tried in this order
    formats: Tuple[str, ...] = KNOWN_FORMATS
    # When False, checksums are computed and echoed but not enforced; no "mic" tag
    verify_crc: bool = True
    # >= 2 raises integrity-failure logging from DEBUG to INFO
    verbose: int = 0

    def __post_init__(self) -> None:
        fmts = tuple(self.formats)
        known = {k.lower(): k for k in KNOWN_FORMATS}
        normalized = []
        for name in fmts:
            key = str(name).lower()
            if key not in known:
                raise ValueError(f"Unknown format: {name}")
            normalized.append(known[key])
        object.__setattr__(self, "formats", tuple(normalized))
        if not isinstance(self.verify_crc, bool):
            raise ValueError(f"verify_crc must be true or false, got {self.verify_crc!r}")
        verbose = int(self.verbose)
        if verbose < 0:
            raise ValueError("verbose must be >= 0")
        object.__setattr__(self, "verbose", verbose)


def config_from_dict(data: dict) -> DecoderConfig:
    allowed = {f.name for f in fields(DecoderConfig)}
    unknown = set(data) - allowed
    if unknown:
        raise ValueError(f"Unknown config keys: {sorted(unknown)}")
    kwargs = dict(data)
    if isinstance(kwargs.get("formats"), str):
        kwargs["formats"] = [kwargs["formats"]]
    if "formats" in kwargs:
        kwargs["formats"] = tuple(kwargs["formats"])
    if "verbose" in kwargs:
        kwargs["verbose"] = int(kwargs["verbose"])
    return DecoderConfig(**kwargs)


def load_config(path: str | Path) -> DecoderConfig:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(str(p))
    with p.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError("config must be a JSON object")
    return config_from_dict(data)
