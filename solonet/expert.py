"""A recurrent expert: two stacked LSTM layers and a dense output layer.

There is one :class:`Expert` class for both experts.  What differs between
them (input width, output vocabulary, how inputs are encoded and how the
output is projected to absolute pitches) is described by an
:class:`ExpertEncoding`; the two used by the solo generator are
``INTERVAL_ENCODING`` and ``CHORD_RELATIVE_ENCODING``.
"""

import dataclasses
import typing

import numpy as np

import solonet.chords
import solonet.encoding
import solonet.events
import solonet.lstm
import solonet.projection
import solonet.weights


EncodeFn = typing.Callable[[int, solonet.chords.ChordContext, solonet.events.GenerationCursor], np.ndarray]
ProjectFn = typing.Callable[[np.ndarray, solonet.chords.ChordContext, solonet.events.GenerationCursor], np.ndarray]


@dataclasses.dataclass(frozen=True)
class ExpertEncoding:

	"""
	How an expert reads its input and how its output maps to absolute pitches.
	"""

	name: str
	input_size: int
	output_size: int
	encode: EncodeFn
	project: ProjectFn


INTERVAL_ENCODING = ExpertEncoding(
	name = "interval",
	input_size = solonet.encoding.INTERVAL_INPUT_SIZE,
	output_size = solonet.encoding.INTERVAL_OUTPUT_SIZE,
	encode = solonet.encoding.encode_interval_input,
	project = lambda probs, chord, cursor: solonet.projection.project_intervals(probs, cursor.register),
)

CHORD_RELATIVE_ENCODING = ExpertEncoding(
	name = "chord_relative",
	input_size = solonet.encoding.CHORD_RELATIVE_INPUT_SIZE,
	output_size = solonet.encoding.CHORD_RELATIVE_OUTPUT_SIZE,
	encode = solonet.encoding.encode_chord_relative_input,
	project = lambda probs, chord, cursor: solonet.projection.project_pitch_classes(probs, chord.root_pc),
)


@dataclasses.dataclass(frozen=True)
class ExpertState:

	"""
	Recurrent state of both layers; replaced as a whole on every step.
	"""

	layer1: solonet.lstm.State
	layer2: solonet.lstm.State


class Expert:

	"""A stateful two-layer LSTM expert.

	Every call to :meth:`step` advances the recurrence by one timestep;
	there is no way to evaluate the network without doing so.  The state
	starts from the trained initial vectors and goes back to them only on
	:meth:`reset`.
	"""

	def __init__ (self, weights: solonet.weights.ExpertWeights, encoding: ExpertEncoding) -> None:

		"""
		Bind a weight set to an encoding; sizes must agree.
		"""

		if weights.input_size != encoding.input_size or weights.output_size != encoding.output_size:
			raise solonet.weights.WeightBundleError(
				f"{weights.name}: weights are {weights.input_size}->{weights.output_size}, "
				f"{encoding.name} encoding needs {encoding.input_size}->{encoding.output_size}"
			)

		self.weights = weights
		self.encoding = encoding
		self.layer1 = solonet.lstm.LSTMCell(weights.lstm1)
		self.layer2 = solonet.lstm.LSTMCell(weights.lstm2)
		self.state = self.initial_state()


	def initial_state (self) -> ExpertState:
		return ExpertState(layer1=self.layer1.initial_state(), layer2=self.layer2.initial_state())


	def reset (self) -> None:

		"""
		Restore the trained initial state, ready for a new solo.
		"""

		self.state = self.initial_state()


	def step (self, encoded: np.ndarray) -> np.ndarray:

		"""
		Feed one encoded input, advance the state and return the output logits.
		"""

		h1, c1 = self.layer1.step(encoded, *self.state.layer1)
		h2, c2 = self.layer2.step(h1, *self.state.layer2)
		self.state = ExpertState(layer1=(h1, c1), layer2=(h2, c2))

		return h2 @ self.weights.dense.w + self.weights.dense.b


	def predict (
		self,
		tick: int,
		chord: solonet.chords.ChordContext,
		cursor: solonet.events.GenerationCursor
	) -> np.ndarray:

		"""
		Encode, step, and return this expert's distribution in absolute pitch space.
		"""

		logits = self.step(self.encoding.encode(tick, chord, cursor))

		return self.encoding.project(solonet.projection.softmax(logits), chord, cursor)
