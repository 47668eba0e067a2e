from __future__ import annotations

import numpy as np

from ertdec.constants import IDM_INTERVAL_BITS, IDM_INTERVAL_COUNT, IDM_MODEL, SCMPLUS_MODEL
from ertdec.framepack import pack_idm_frame, pack_scmplus_frame


def make_random_frame(model: str, rng: np.random.Generator) -> bytes:
    """Valid frame of the given model with random field contents."""
    if model == SCMPLUS_MODEL:
        return pack_scmplus_frame(
            endpoint_id=int(rng.integers(0, 1 << 32)),
            consumption=int(rng.integers(0, 1 << 32)),
            tamper=int(rng.integers(0, 1 << 16)),
            scm_type=int(rng.integers(0, 256)),
        )
    if model == IDM_MODEL:
        return pack_idm_frame(
            endpoint_id=int(rng.integers(0, 1 << 32)),
            consumption=int(rng.integers(0, 1 << 24)),
            generation=int(rng.integers(0, 1 << 24)),
            net=int(rng.integers(0, 1 << 32)),
            version=int(rng.integers(0, 256)),
            idm_type=int(rng.integers(0, 16)),
            consumption_interval=int(rng.integers(0, 256)),
            programming_state=int(rng.integers(0, 256)),
            intervals=[int(v) for v in rng.integers(0, 1 << IDM_INTERVAL_BITS, size=IDM_INTERVAL_COUNT)],
            transmit_time_offset=int(rng.integers(0, 1 << 16)),
        )
    raise ValueError(f"Unknown model: {model}")
