"""Solo generation over a chord progression.

:class:`SoloGenerator` drives the two experts across a progression, one
timestep at a time::

	cursor ─► encode ─► Expert.step (both) ─► project ─► combine ─► sample ─► Event
	   ▲                                                                      │
	   └──────────────────────────────────────────────────────────────────────┘

Each step depends on the previous step's sampled event and recurrent state,
so the loop is strictly sequential.  :meth:`SoloGenerator.iter_steps` is a
Python generator: a caller can interleave steps with other work or stop
early, and every yielded step has been fully applied.

A generator owns its experts' recurrent state and must not run two solos at
once.  For concurrent solos build one generator per solo; the weight sets
are read-only and can be shared.

Example:
	```python
	import solonet.chords
	import solonet.generator

	generator = solonet.generator.SoloGenerator.from_file("clifford_poe.json")
	progression = solonet.chords.build_progression(["Dm7", "G7", "Cmaj7", "Cmaj7"])

	solo = generator.generate(progression, temperature=0.9, steps_per_beat=2, seed=7)

	for event in solo.notes():
		print(event.timestep, event.pitch)
	```
"""

import dataclasses
import logging
import random
import typing

import numpy as np

import solonet.chords
import solonet.combiner
import solonet.constants
import solonet.encoding
import solonet.events
import solonet.expert
import solonet.projection
import solonet.weights


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class GenerationStep:

	"""
	The event produced at one timestep and the distribution it was sampled from.
	"""

	event: solonet.events.Event
	distribution: np.ndarray
	degenerate: bool = False


@dataclasses.dataclass
class Solo:

	"""
	A finished solo: the event stream plus generation diagnostics.
	"""

	events: typing.List[solonet.events.Event]
	steps_per_beat: int
	degenerate_steps: int = 0


	def notes (self) -> typing.List[solonet.events.Event]:

		"""
		Only the note-onset events.
		"""

		return [event for event in self.events if event.is_note]


	def __len__ (self) -> int:
		return len(self.events)


def steps_for_chord (chord: solonet.chords.ChordContext, steps_per_beat: int) -> int:

	"""Number of timesteps a chord lasts.

	Raises:
		ValueError: If the chord does not last a whole number of steps.
	"""

	steps = chord.duration_beats * steps_per_beat

	if steps != int(steps):
		raise ValueError(
			f"{chord.name()} lasts {chord.duration_beats} beats, not a whole number of steps at {steps_per_beat} per beat"
		)

	return int(steps)


class SoloGenerator:

	"""Product-of-experts solo generator.

	Combines an interval expert (melodic smoothness) with a chord-relative
	expert (harmonic fit).  Both experts are reset to their trained initial
	state at the start of every solo and never in between.
	"""

	def __init__ (
		self,
		interval_weights: solonet.weights.ExpertWeights,
		chord_relative_weights: solonet.weights.ExpertWeights
	) -> None:

		"""
		Build both experts; raises ``WeightBundleError`` if a weight set does not fit its encoding.
		"""

		self.interval_expert = solonet.expert.Expert(interval_weights, solonet.expert.INTERVAL_ENCODING)
		self.chord_expert = solonet.expert.Expert(chord_relative_weights, solonet.expert.CHORD_RELATIVE_ENCODING)


	@staticmethod
	def from_bundle (bundle: solonet.weights.WeightBundle) -> "SoloGenerator":
		return SoloGenerator(bundle.interval, bundle.chord_relative)


	@staticmethod
	def from_file (path: str) -> "SoloGenerator":

		"""
		Load a JSON weight bundle and build a generator from it.
		"""

		return SoloGenerator.from_bundle(solonet.weights.load_bundle(path))


	def iter_steps (
		self,
		progression: typing.Sequence[solonet.chords.ChordContext],
		temperature: float = solonet.constants.DEFAULT_TEMPERATURE,
		steps_per_beat: int = solonet.constants.DEFAULT_STEPS_PER_BEAT,
		rng: typing.Optional[random.Random] = None,
		seed: typing.Optional[int] = None
	) -> typing.Iterator[GenerationStep]:

		"""Yield one :class:`GenerationStep` per timestep of the progression.

		Arguments are validated before the first step is produced.

		Parameters:
			progression: One chord context per bar, in order.
			temperature: Note sampling temperature (> 0). Below 1 favours the
				most likely notes, above 1 flattens the choice.
			steps_per_beat: Time resolution; must divide 12 (2 = eighths, 4 = sixteenths, 3 = triplets).
			rng: Random source. Takes precedence over ``seed``.
			seed: Seed for a fresh ``random.Random`` when ``rng`` is not given.

		Raises:
			ValueError: On an empty progression, a non-positive temperature,
				or a resolution that does not fit the chords' durations.
		"""

		if not progression:
			raise ValueError("progression must contain at least one chord")

		if temperature <= 0:
			raise ValueError(f"temperature must be positive, got {temperature}")

		solonet.encoding.tick_for_step(0, steps_per_beat)
		plan = [(chord, steps_for_chord(chord, steps_per_beat)) for chord in progression]

		if rng is None:
			rng = random.Random(seed)

		return self._run(plan, temperature, steps_per_beat, rng)


	def _run (
		self,
		plan: typing.List[typing.Tuple[solonet.chords.ChordContext, int]],
		temperature: float,
		steps_per_beat: int,
		rng: random.Random
	) -> typing.Iterator[GenerationStep]:

		self.interval_expert.reset()
		self.chord_expert.reset()

		low = solonet.constants.LOW_BOUND
		cursor = solonet.events.GenerationCursor.start(rng.randrange(low, low + solonet.constants.PITCH_RANGE // 2))

		timestep = 0

		for measure, (chord, steps) in enumerate(plan):

			for step in range(steps):

				tick = solonet.encoding.tick_for_step(timestep, steps_per_beat)

				p0 = self.interval_expert.predict(tick, chord, cursor)
				p1 = self.chord_expert.predict(tick, chord, cursor)

				combination = solonet.combiner.combine(p0, p1, temperature)
				index = solonet.combiner.sample_index(combination.distribution, rng)
				event = self._decode(index, timestep, measure, step / steps_per_beat, chord)

				cursor.apply(event)

				yield GenerationStep(event=event, distribution=combination.distribution, degenerate=combination.degenerate)

				timestep += 1


	@staticmethod
	def _decode (index: int, timestep: int, measure: int, beat: float, chord: solonet.chords.ChordContext) -> solonet.events.Event:

		"""Turn a sampled slot into an event."""

		if index == solonet.constants.REST_INDEX:
			return solonet.events.Event(kind=solonet.events.EventKind.REST, timestep=timestep, measure=measure, beat=beat)

		if index == solonet.constants.SUSTAIN_INDEX:
			return solonet.events.Event(kind=solonet.events.EventKind.SUSTAIN, timestep=timestep, measure=measure, beat=beat)

		return solonet.events.Event(
			kind = solonet.events.EventKind.NOTE,
			timestep = timestep,
			measure = measure,
			beat = beat,
			pitch = solonet.projection.index_to_pitch(index),
			chord_root = chord.root_pc
		)


	def generate (
		self,
		progression: typing.Sequence[solonet.chords.ChordContext],
		temperature: float = solonet.constants.DEFAULT_TEMPERATURE,
		steps_per_beat: int = solonet.constants.DEFAULT_STEPS_PER_BEAT,
		rng: typing.Optional[random.Random] = None,
		seed: typing.Optional[int] = None
	) -> Solo:

		"""Generate a complete solo; see :meth:`iter_steps` for the parameters.

		Example:
			```python
			solo = generator.generate(progression, temperature=1.0, seed=42)
			len(solo)  # one event per timestep
			```
		"""

		steps = self.iter_steps(progression, temperature=temperature, steps_per_beat=steps_per_beat, rng=rng, seed=seed)

		logger.info(f"Generating solo over {len(progression)} bars at {steps_per_beat} steps per beat")

		solo = Solo(events=[], steps_per_beat=steps_per_beat)

		for step in steps:
			solo.events.append(step.event)
			if step.degenerate:
				solo.degenerate_steps += 1

		if solo.degenerate_steps:
			logger.warning(f"{solo.degenerate_steps} steps fell back to a uniform note choice")

		logger.info(f"Generated {len(solo.events)} events ({len(solo.notes())} notes)")

		return solo
