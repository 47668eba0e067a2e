from __future__ import annotations

from pathlib import Path
import json


def get_default_scenarios() -> dict:
    return {
        "ber_sweep": {
            "formats": ["SCMplus", "IDM"],
            "ber": [1e-4, 1e-3, 3e-3, 1e-2, 3e-2],
            "trials": 200,
            "seed": 123,
        },
        "single_bit_flips": {
            "formats": ["SCMplus", "IDM"],
            "frames": 20,
            "seed": 321,
        },
    }


def load_scenarios(path: str | Path) -> dict:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(str(p))
    with p.open("r", encoding="utf-8") as f:
        data = json.load(f)
    return data
