# Expose key helpers for external import convenience
from .channel import apply_bit_errors, flip_bit
from .synth_utils import make_random_frame

__all__ = [
    "apply_bit_errors",
    "flip_bit",
    "make_random_frame",
]
