from __future__ import annotations

import numpy as np


def flip_bit(frame: bytes, index: int) -> bytes:
	"""Return a copy of frame with bit `index` (MSB-first across bytes) inverted."""
	if not 0 <= index < len(frame) * 8:
		raise ValueError(f"bit index {index} outside {len(frame) * 8}-bit frame")
	b = bytearray(frame)
	b[index >> 3] ^= 0x80 >> (index & 7)
	return bytes(b)


def apply_bit_errors(frame: bytes, ber: float, rng: np.random.Generator, start_bit: int = 0) -> bytes:
	"""Flip each bit from start_bit onward independently with probability ber.

	start_bit lets the preamble pass untouched so only checksum gating is exercised.
	"""
	bits = np.unpackbits(np.frombuffer(frame, dtype=np.uint8), bitorder="big")
	mask = (rng.random(bits.size) < ber).astype(np.uint8)
	mask[:start_bit] = 0
	return np.packbits(bits ^ mask, bitorder="big").tobytes()
