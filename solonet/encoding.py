"""Input encodings for the two experts.

Both experts see the same rhythmic and register context and a rotated
chord-quality vector; they differ in how the previous event is described:

- The **interval** expert (50 inputs) gets the chord rotated to the current
  register position and the last melodic interval as a 27-way one-hot
  (rest, sustain, -12..+12 semitones).
- The **chord-relative** expert (37 inputs) gets the chord in root position
  and the register position as a pitch class relative to the chord root,
  as a 14-way one-hot (rest, sustain, 12 pitch classes).

Layouts::

	interval:        beat(9) + register(2) + chord(12) + interval(27)    = 50
	chord-relative:  beat(9) + register(2) + chord(12) + pitch class(14) = 37

Every function here is pure.  Times are in ticks of a 48-per-whole-note
grid, the unit ``BEAT_PERIODS`` is expressed in; see :func:`tick_for_step`.
"""

import typing

import numpy as np

import solonet.chords
import solonet.constants
import solonet.events


BEAT_SIZE = len(solonet.constants.BEAT_PERIODS)
REGISTER_SIZE = 2
CHORD_SIZE = 12
INTERVAL_CODE_SIZE = solonet.constants.FIRST_NOTE_INDEX + solonet.constants.INTERVAL_COUNT
PITCH_CLASS_CODE_SIZE = solonet.constants.FIRST_NOTE_INDEX + 12

INTERVAL_INPUT_SIZE = BEAT_SIZE + REGISTER_SIZE + CHORD_SIZE + INTERVAL_CODE_SIZE
INTERVAL_OUTPUT_SIZE = INTERVAL_CODE_SIZE
CHORD_RELATIVE_INPUT_SIZE = BEAT_SIZE + REGISTER_SIZE + CHORD_SIZE + PITCH_CLASS_CODE_SIZE
CHORD_RELATIVE_OUTPUT_SIZE = PITCH_CLASS_CODE_SIZE


def tick_for_step (timestep: int, steps_per_beat: int) -> int:

	"""Convert a generator timestep to a 48th-note tick.

	The beat periods count 48ths of a whole note, so a timestep is scaled
	to that grid rather than used raw.  At two steps per beat the raw step
	would make the period-48 bit fire every six bars instead of every bar.
	Resolutions that do not divide the 12 ticks of a beat (such as 8) have
	no exact tick and are rejected.

	Raises:
		ValueError: If a step is not a whole number of ticks.
	"""

	if steps_per_beat <= 0 or solonet.constants.TICKS_PER_BEAT % steps_per_beat:
		raise ValueError(
			f"steps_per_beat must divide {solonet.constants.TICKS_PER_BEAT}, got {steps_per_beat}"
		)

	return timestep * (solonet.constants.TICKS_PER_BEAT // steps_per_beat)


def beat_feature (tick: int) -> np.ndarray:

	"""
	One bit per subdivision period: set when *tick* falls on that subdivision.
	"""

	return np.array([1.0 if tick % period == 0 else 0.0 for period in solonet.constants.BEAT_PERIODS])


def register_feature (position: int) -> np.ndarray:

	"""Two triangular indicators of where *position* sits in the pitch window.

	The first peaks at ``LOW_BOUND`` and the second at ``HIGH_BOUND``; each
	falls linearly to zero one window-width away.
	"""

	width = float(solonet.constants.PITCH_RANGE)
	centres = (solonet.constants.LOW_BOUND, solonet.constants.HIGH_BOUND)

	return np.array([max(0.0, 1.0 - abs(position - centre) / width) for centre in centres])


def chord_rotation (reference: int, chord_root_pc: int) -> int:

	"""
	Rotation that moves the chord so bit 0 describes the reference pitch class.
	"""

	return (reference - chord_root_pc) % 12


def chord_feature (quality_vector: typing.Sequence[int], chord_root_pc: int, reference: int) -> np.ndarray:

	"""Rotate a root-relative quality vector to be relative to *reference*.

	Bit ``j`` of the result is set when the pitch class ``reference + j``
	belongs to the chord.  With ``reference`` equal to the chord root the
	vector is returned unrotated.
	"""

	rotation = chord_rotation(reference, chord_root_pc)

	return np.roll(np.asarray(quality_vector, dtype=np.float64), -rotation)


def interval_feature (cursor: solonet.events.GenerationCursor) -> np.ndarray:

	"""27-way one-hot of the previous event seen as a melodic interval.

	Index 0 is a rest, 1 a sustain, and ``2 + 12 + delta`` the interval
	``register - previous``.  Intervals wider than an octave keep their
	direction and are reduced modulo 12.
	"""

	code = np.zeros(INTERVAL_CODE_SIZE)

	if cursor.is_rest:
		code[solonet.constants.REST_INDEX] = 1.0

	elif cursor.is_continue:
		code[solonet.constants.SUSTAIN_INDEX] = 1.0

	else:
		delta = cursor.register - cursor.previous
		limit = solonet.constants.MAX_INTERVAL

		if abs(delta) > limit:
			delta = int(np.sign(delta)) * (abs(delta) % 12)

		index = solonet.constants.FIRST_NOTE_INDEX + limit + delta
		code[min(max(index, solonet.constants.FIRST_NOTE_INDEX), INTERVAL_CODE_SIZE - 1)] = 1.0

	return code


def pitch_class_feature (cursor: solonet.events.GenerationCursor, chord_root_pc: int) -> np.ndarray:

	"""
	14-way one-hot: rest, sustain, or the register's pitch class relative to the chord root.
	"""

	code = np.zeros(PITCH_CLASS_CODE_SIZE)

	if cursor.is_rest:
		code[solonet.constants.REST_INDEX] = 1.0

	elif cursor.is_continue:
		code[solonet.constants.SUSTAIN_INDEX] = 1.0

	else:
		code[solonet.constants.FIRST_NOTE_INDEX + (cursor.register - chord_root_pc) % 12] = 1.0

	return code


def encode_interval_input (
	tick: int,
	chord: solonet.chords.ChordContext,
	cursor: solonet.events.GenerationCursor
) -> np.ndarray:

	"""
	Full 50-value input for the interval expert.
	"""

	return np.concatenate([
		beat_feature(tick),
		register_feature(cursor.register),
		chord_feature(chord.quality_vector, chord.root_pc, cursor.register),
		interval_feature(cursor),
	])


def encode_chord_relative_input (
	tick: int,
	chord: solonet.chords.ChordContext,
	cursor: solonet.events.GenerationCursor
) -> np.ndarray:

	"""
	Full 37-value input for the chord-relative expert.
	"""

	return np.concatenate([
		beat_feature(tick),
		register_feature(cursor.register),
		chord_feature(chord.quality_vector, chord.root_pc, chord.root_pc),
		pitch_class_feature(cursor, chord.root_pc),
	])
