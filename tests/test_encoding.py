import numpy as np
import pytest

import solonet.chords
import solonet.encoding
import solonet.events
import solonet.projection


def _note_cursor (register: int, previous: int) -> solonet.events.GenerationCursor:

	"""A cursor just after a note onset."""

	return solonet.events.GenerationCursor(register=register, previous=previous, is_rest=False, is_continue=False)


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

def test_tick_for_step () -> None:

	"""Steps convert to 48th-note ticks."""

	assert solonet.encoding.tick_for_step(3, 2) == 18
	assert solonet.encoding.tick_for_step(1, 4) == 3
	assert solonet.encoding.tick_for_step(2, 3) == 8


@pytest.mark.parametrize("steps_per_beat", [0, -2, 5, 8])
def test_tick_for_step_rejects_bad_resolution (steps_per_beat: int) -> None:

	"""Only resolutions dividing 12 map onto whole ticks."""

	with pytest.raises(ValueError):
		solonet.encoding.tick_for_step(1, steps_per_beat)


def test_beat_feature_downbeat () -> None:

	"""Tick 0 falls on every subdivision."""

	assert list(solonet.encoding.beat_feature(0)) == [1.0] * 9


def test_beat_feature_offbeat () -> None:

	"""Tick 6 (an eighth note) hits periods 6, 3 and 2 only."""

	assert list(solonet.encoding.beat_feature(6)) == [0, 0, 0, 1, 1, 0, 0, 0, 1]


# ---------------------------------------------------------------------------
# Register and chord
# ---------------------------------------------------------------------------

def test_register_feature () -> None:

	"""The two triangles peak at the window edges and meet in the middle."""

	assert list(solonet.encoding.register_feature(48)) == pytest.approx([1.0, 0.0])
	assert list(solonet.encoding.register_feature(84)) == pytest.approx([0.0, 1.0])
	assert list(solonet.encoding.register_feature(66)) == pytest.approx([0.5, 0.5])


def test_chord_feature_unrotated_at_root () -> None:

	"""With the root as reference the quality vector is unchanged."""

	vector = solonet.chords.QUALITY_VECTORS["m7"]

	assert list(solonet.encoding.chord_feature(vector, 3, 3)) == list(vector)


def test_chord_feature_rotates_to_reference () -> None:

	"""Bit j describes the pitch class reference + j."""

	vector = solonet.chords.QUALITY_VECTORS["7"]	# C E G Bb over C
	feature = solonet.encoding.chord_feature(vector, 0, 67)	# seen from G

	assert feature[0] == 1.0	# G
	assert feature[3] == 1.0	# Bb
	assert feature[5] == 1.0	# C
	assert feature[9] == 1.0	# E
	assert feature.sum() == 4.0


def test_chord_rotation_ignores_octave () -> None:

	"""Only the reference pitch class matters."""

	assert solonet.encoding.chord_rotation(55, 0) == solonet.encoding.chord_rotation(79, 0) == 7


# ---------------------------------------------------------------------------
# Melodic features
# ---------------------------------------------------------------------------

def test_interval_feature_rest_and_sustain () -> None:

	"""Rest and sustain use slots 0 and 1."""

	rest = solonet.events.GenerationCursor.start(60)
	sustain = solonet.events.GenerationCursor(register=60, previous=60, is_rest=False, is_continue=True)

	assert int(np.argmax(solonet.encoding.interval_feature(rest))) == 0
	assert int(np.argmax(solonet.encoding.interval_feature(sustain))) == 1


@pytest.mark.parametrize("register, previous, index", [
	(64, 60, 18),
	(60, 60, 14),
	(48, 60, 2),
	(72, 60, 26),
	(79, 60, 21),
	(60, 79, 7),
])
def test_interval_feature_note (register: int, previous: int, index: int) -> None:

	"""Intervals map to 14 + delta; wider leaps keep direction and reduce mod 12."""

	code = solonet.encoding.interval_feature(_note_cursor(register, previous))

	assert code.sum() == 1.0
	assert int(np.argmax(code)) == index


def test_pitch_class_feature () -> None:

	"""The register's pitch class is taken relative to the chord root."""

	assert int(np.argmax(solonet.encoding.pitch_class_feature(_note_cursor(67, 60), 7))) == 2
	assert int(np.argmax(solonet.encoding.pitch_class_feature(_note_cursor(60, 60), 7))) == 7


def test_input_widths () -> None:

	"""The two experts read 50 and 37 values."""

	chord = solonet.chords.ChordContext.create(0, "m7")
	cursor = solonet.events.GenerationCursor.start(60)

	assert solonet.encoding.encode_interval_input(0, chord, cursor).shape == (50,)
	assert solonet.encoding.encode_chord_relative_input(0, chord, cursor).shape == (37,)


# ---------------------------------------------------------------------------
# Encoding and projection agree
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("root", range(12))
def test_pitch_class_round_trip (root: int) -> None:

	"""Projecting the encoded pitch class lands back on the register."""

	for register in (50, 61, 70, 83):
		code = solonet.encoding.pitch_class_feature(_note_cursor(register, register), root)
		absolute = solonet.projection.project_pitch_classes(code, root)
		assert absolute[solonet.projection.pitch_to_index(register)] == 1.0


def test_interval_round_trip () -> None:

	"""Projecting the encoded interval from the previous pitch lands on the register."""

	for register, previous in ((64, 60), (55, 67), (60, 60)):
		code = solonet.encoding.interval_feature(_note_cursor(register, previous))
		absolute = solonet.projection.project_intervals(code, previous)
		assert absolute[solonet.projection.pitch_to_index(register)] == 1.0
