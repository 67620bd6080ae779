"""The generated event stream and the cursor that follows it.

A solo is one :class:`Event` per timestep: a rest, a sustain of the
previous note, or a new note onset.  :class:`GenerationCursor` is the small
piece of melodic memory the encoders read; it is updated from each event
as it is produced.
"""

import dataclasses
import enum
import typing

import solonet.constants


class EventKind (enum.Enum):

	"""
	What happens at a timestep.
	"""

	REST = "rest"
	SUSTAIN = "sustain"
	NOTE = "note"


@dataclasses.dataclass(frozen=True)
class Event:

	"""
	One timestep of a generated solo.

	``measure`` is the index of the chord in the progression the step
	belongs to, not a 4/4 bar number: an eight-beat chord is one measure.
	``beat`` is the position within that chord, in beats.  ``pitch`` and
	``chord_root`` are only set for note onsets; ``chord_root`` is the pitch
	class of the chord sounding when the note was chosen.
	"""

	kind: EventKind
	timestep: int
	measure: int
	beat: float
	pitch: typing.Optional[int] = None
	chord_root: typing.Optional[int] = None

	def __post_init__ (self) -> None:
		if self.kind is EventKind.NOTE:
			if self.pitch is None or self.chord_root is None:
				raise ValueError("note events need a pitch and a chord root")
		elif self.pitch is not None:
			raise ValueError(f"{self.kind.value} events carry no pitch")


	@property
	def is_note (self) -> bool:
		return self.kind is EventKind.NOTE


@dataclasses.dataclass
class GenerationCursor:

	"""Melodic memory carried from one timestep to the next.

	``register`` is the working pitch anchor the interval expert measures
	from.  It follows note onsets but is left alone by rests and sustains,
	so it is not always the last sounding pitch.  ``previous`` is the anchor
	before the last onset, which makes ``register - previous`` the most
	recent melodic interval.
	"""

	register: int
	previous: int
	is_rest: bool = True
	is_continue: bool = False


	@staticmethod
	def start (register: int) -> "GenerationCursor":

		"""
		Cursor at the start of a solo: anchored at *register*, nothing played yet.
		"""

		if not solonet.constants.LOW_BOUND <= register < solonet.constants.HIGH_BOUND:
			raise ValueError(f"register {register} outside the pitch window")

		return GenerationCursor(register=register, previous=register, is_rest=True, is_continue=False)


	def apply (self, event: Event) -> None:

		"""
		Update the cursor with the event just produced.
		"""

		if event.kind is EventKind.NOTE:
			self.previous = self.register
			self.register = typing.cast(int, event.pitch)
			self.is_rest = False
			self.is_continue = False

		elif event.kind is EventKind.REST:
			self.is_rest = True
			self.is_continue = False

		else:
			self.is_continue = True
