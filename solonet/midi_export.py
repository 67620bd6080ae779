"""Render a solo's event stream as notes and Standard MIDI Files.

Sustain events extend the note before them, so an onset followed by three
sustains becomes one note four steps long.  Sustains after a rest (or at
the very start) have nothing to extend and are ignored.
"""

import dataclasses
import logging
import typing

import mido

import solonet.events


logger = logging.getLogger(__name__)


TICKS_PER_BEAT = 480


@dataclasses.dataclass(frozen=True)
class SoloNote:

	"""
	A sounding note, timed in generator steps.
	"""

	pitch: int
	start_step: int
	duration_steps: int
	chord_root: int


def events_to_notes (events: typing.Iterable[solonet.events.Event]) -> typing.List[SoloNote]:

	"""Merge onsets and their sustains into notes with durations.

	Example:
		```python
		# note(60) sustain sustain rest note(62)
		events_to_notes(events)
		# → [SoloNote(60, 0, 3, ...), SoloNote(62, 4, 1, ...)]
		```
	"""

	notes: typing.List[SoloNote] = []
	current: typing.Optional[solonet.events.Event] = None
	length = 0

	def flush () -> None:
		if current is not None:
			notes.append(SoloNote(
				pitch = typing.cast(int, current.pitch),
				start_step = current.timestep,
				duration_steps = length,
				chord_root = typing.cast(int, current.chord_root)
			))

	for event in events:

		if event.kind is solonet.events.EventKind.SUSTAIN:
			if current is not None:
				length += 1
			continue

		flush()

		if event.kind is solonet.events.EventKind.NOTE:
			current, length = event, 1
		else:
			current, length = None, 0

	flush()

	return notes


def to_midi_file (
	events: typing.Iterable[solonet.events.Event],
	steps_per_beat: int,
	bpm: float = 120,
	velocity: int = 100,
	channel: int = 0,
	program: typing.Optional[int] = None
) -> mido.MidiFile:

	"""Build a single-track MIDI file from an event stream.

	Parameters:
		events: The solo's events in order.
		steps_per_beat: Resolution the solo was generated at.
		bpm: Tempo written to the file.
		velocity: Velocity for every note.
		channel: MIDI channel (0-15).
		program: Optional General MIDI program change at the start.
	"""

	if steps_per_beat <= 0:
		raise ValueError("steps_per_beat must be positive")

	ticks_per_step = TICKS_PER_BEAT / steps_per_beat

	mid = mido.MidiFile(type=1)
	mid.ticks_per_beat = TICKS_PER_BEAT
	track = mido.MidiTrack()
	mid.tracks.append(track)

	messages: typing.List[typing.Tuple[int, int, typing.Union[mido.Message, mido.MetaMessage]]] = [
		(0, 0, mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(bpm))),
	]

	if program is not None:
		messages.append((0, 1, mido.Message('program_change', channel=channel, program=program)))

	# Note-offs sort ahead of note-ons at the same tick so repeated pitches retrigger.
	for note in events_to_notes(events):
		start = int(round(note.start_step * ticks_per_step))
		end = int(round((note.start_step + note.duration_steps) * ticks_per_step))
		messages.append((start, 3, mido.Message('note_on', channel=channel, note=note.pitch, velocity=velocity)))
		messages.append((end, 2, mido.Message('note_off', channel=channel, note=note.pitch, velocity=0)))

	messages.sort(key=lambda item: (item[0], item[1]))

	last_tick = 0

	for tick, _, message in messages:
		message.time = tick - last_tick
		track.append(message)
		last_tick = tick

	return mid


def write_midi (
	events: typing.Iterable[solonet.events.Event],
	path: str,
	steps_per_beat: int,
	bpm: float = 120,
	velocity: int = 100,
	channel: int = 0,
	program: typing.Optional[int] = None
) -> None:

	"""
	Write an event stream to a Standard MIDI File at *path*.
	"""

	mid = to_midi_file(events, steps_per_beat, bpm=bpm, velocity=velocity, channel=channel, program=program)
	mid.save(path)

	logger.info(f"Saved {path}")
