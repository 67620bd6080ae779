"""Map each expert's local distribution into absolute pitch space.

The experts speak different vocabularies (intervals from the register
position, pitch classes relative to the chord root), so before they can be
multiplied both are laid out on the same ``ABSOLUTE_SIZE`` slots::

	[rest, sustain, LOW_BOUND, LOW_BOUND + 1, ..., HIGH_BOUND - 1]

Nothing is renormalised here; the combiner does that once the two vectors
have been multiplied.
"""

import numpy as np

import solonet.constants
import solonet.encoding


class PitchRangeError (RuntimeError):
	pass


_PITCHES = np.arange(solonet.constants.LOW_BOUND, solonet.constants.HIGH_BOUND)


def softmax (logits: np.ndarray) -> np.ndarray:

	"""Numerically stable softmax."""

	shifted = np.asarray(logits, dtype=np.float64) - np.max(logits)
	exp = np.exp(shifted)
	return exp / exp.sum()


def pitch_to_index (pitch: int) -> int:

	"""Absolute slot for a MIDI pitch; raises ``PitchRangeError`` outside the window."""

	if not solonet.constants.LOW_BOUND <= pitch < solonet.constants.HIGH_BOUND:
		raise PitchRangeError(
			f"pitch {pitch} outside [{solonet.constants.LOW_BOUND}, {solonet.constants.HIGH_BOUND})"
		)

	return solonet.constants.FIRST_NOTE_INDEX + pitch - solonet.constants.LOW_BOUND


def index_to_pitch (index: int) -> int:

	"""MIDI pitch for an absolute note slot; raises ``PitchRangeError`` for control or unknown slots."""

	if not solonet.constants.FIRST_NOTE_INDEX <= index < solonet.constants.ABSOLUTE_SIZE:
		raise PitchRangeError(f"slot {index} is not a pitch slot")

	return solonet.constants.LOW_BOUND + index - solonet.constants.FIRST_NOTE_INDEX


def project_intervals (probs: np.ndarray, register: int) -> np.ndarray:

	"""Place interval probabilities on the absolute pitches they reach from *register*.

	Slot ``2 + k`` of *probs* is the interval ``k - 12``.  Intervals landing
	outside the pitch window are dropped, not folded back in.

	Raises:
		PitchRangeError: If *register* itself lies outside the window.
	"""

	if probs.shape != (solonet.encoding.INTERVAL_OUTPUT_SIZE,):
		raise ValueError(f"interval distribution must have {solonet.encoding.INTERVAL_OUTPUT_SIZE} entries")

	pitch_to_index(register)

	absolute = np.zeros(solonet.constants.ABSOLUTE_SIZE)
	absolute[solonet.constants.REST_INDEX] = probs[solonet.constants.REST_INDEX]
	absolute[solonet.constants.SUSTAIN_INDEX] = probs[solonet.constants.SUSTAIN_INDEX]

	limit = solonet.constants.MAX_INTERVAL

	for offset in range(-limit, limit + 1):
		pitch = register + offset
		if solonet.constants.LOW_BOUND <= pitch < solonet.constants.HIGH_BOUND:
			absolute[pitch_to_index(pitch)] += probs[solonet.constants.FIRST_NOTE_INDEX + limit + offset]

	return absolute


def project_pitch_classes (probs: np.ndarray, chord_root_pc: int) -> np.ndarray:

	"""Tile chord-relative pitch-class probabilities over every octave of the window.

	Pitch ``p`` receives the probability of the pitch class
	``(p - chord_root) mod 12``, the inverse of
	:func:`solonet.encoding.pitch_class_feature`.
	"""

	if probs.shape != (solonet.encoding.CHORD_RELATIVE_OUTPUT_SIZE,):
		raise ValueError(f"pitch-class distribution must have {solonet.encoding.CHORD_RELATIVE_OUTPUT_SIZE} entries")

	pitch_classes = probs[solonet.constants.FIRST_NOTE_INDEX:]

	absolute = np.empty(solonet.constants.ABSOLUTE_SIZE)
	absolute[solonet.constants.REST_INDEX] = probs[solonet.constants.REST_INDEX]
	absolute[solonet.constants.SUSTAIN_INDEX] = probs[solonet.constants.SUSTAIN_INDEX]
	absolute[solonet.constants.FIRST_NOTE_INDEX:] = pitch_classes[(_PITCHES - chord_root_pc) % 12]

	return absolute
