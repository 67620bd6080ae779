"""Expert weight sets and the JSON bundle reader.

A bundle holds one weight set per expert.  Each set is two LSTM layers and
a dense projection, stored the way the Impro-Visor connectome was exported:
every matrix is ``(out, in)`` and each LSTM layer keeps its trained initial
state as one vector ``[h0..., c0...]``.  On the way in the matrices are
transposed to ``(in, out)`` so that inference reads ``z @ W + b``.

Every shape is checked against the sizes the encoders produce before any
generation starts; a malformed bundle raises :class:`WeightBundleError`.

Bundle layout::

	{
		"config": {"hiddenSize": 300, "lowBound": 48, "highBound": 84},
		"experts": [
			{
				"name": "IntervalRelative",
				"inputSize": 50,
				"outputSize": 27,
				"weights": {
					"lstm1": {"input_w": {"data": [...], "shape": [300, 350]}, ...},
					"lstm2": {...},
					"dense": {"w": {...}, "b": {...}}
				}
			},
			...
		]
	}
"""

import collections.abc
import dataclasses
import json
import logging
import os
import typing

import numpy as np

import solonet.constants
import solonet.encoding


logger = logging.getLogger(__name__)


GATES = ("input", "forget", "activate", "out")


class WeightBundleError(ValueError):
	pass


def _frozen (array: np.ndarray) -> np.ndarray:

	"""Return a float64 copy of *array* that cannot be written to."""

	result = np.array(array, dtype=np.float64)
	result.setflags(write=False)
	return result


def _array_field (mapping: typing.Mapping[str, typing.Any], key: str, where: str) -> np.ndarray:

	"""Read one ``{"data": [...], "shape": [...]}`` entry as an ndarray."""

	if not isinstance(mapping, collections.abc.Mapping):
		raise WeightBundleError(f"{where}: expected an object, got {type(mapping).__name__}")

	if key not in mapping:
		raise WeightBundleError(f"{where}: missing field {key!r}")

	entry = mapping[key]

	if isinstance(entry, np.ndarray):
		return entry

	if not isinstance(entry, collections.abc.Mapping) or "data" not in entry or "shape" not in entry:
		raise WeightBundleError(f"{where}.{key}: expected an object with 'data' and 'shape'")

	try:
		data = np.asarray(entry["data"], dtype=np.float64)
		shape = tuple(int(n) for n in entry["shape"])
	except (TypeError, ValueError) as exc:
		raise WeightBundleError(f"{where}.{key}: unreadable data or shape: {exc}") from exc

	if data.size != int(np.prod(shape)):
		raise WeightBundleError(
			f"{where}.{key}: {data.size} values do not fill declared shape {list(shape)}"
		)

	return data.reshape(shape)


def _check_shape (array: np.ndarray, expected: typing.Tuple[int, ...], where: str) -> None:

	if array.shape != expected:
		raise WeightBundleError(f"{where}: expected shape {list(expected)}, got {list(array.shape)}")


@dataclasses.dataclass(frozen=True)
class LSTMWeights:

	"""
	Gate weights, gate biases and initial state of one LSTM layer.

	Gate matrices are ``(input_size + hidden_size, hidden_size)``.
	"""

	input_w: np.ndarray
	input_b: np.ndarray
	forget_w: np.ndarray
	forget_b: np.ndarray
	activate_w: np.ndarray
	activate_b: np.ndarray
	out_w: np.ndarray
	out_b: np.ndarray
	initial_h: np.ndarray
	initial_c: np.ndarray


	@property
	def hidden_size (self) -> int:
		return int(self.initial_h.shape[0])


	@property
	def input_size (self) -> int:
		return int(self.input_w.shape[0]) - self.hidden_size


	@staticmethod
	def from_dict (mapping: typing.Mapping[str, typing.Any], input_size: int, hidden_size: int, where: str = "lstm") -> "LSTMWeights":

		"""
		Build and validate a layer from its exported ``(out, in)`` representation.
		"""

		concat_size = input_size + hidden_size
		fields: typing.Dict[str, np.ndarray] = {}

		for gate in GATES:
			w = _array_field(mapping, f"{gate}_w", where)
			b = _array_field(mapping, f"{gate}_b", where).reshape(-1)
			_check_shape(w, (hidden_size, concat_size), f"{where}.{gate}_w")
			_check_shape(b, (hidden_size,), f"{where}.{gate}_b")
			fields[f"{gate}_w"] = _frozen(w.T)
			fields[f"{gate}_b"] = _frozen(b)

		initial = _array_field(mapping, "initialstate", where).reshape(-1)
		_check_shape(initial, (2 * hidden_size,), f"{where}.initialstate")

		return LSTMWeights(
			initial_h = _frozen(initial[:hidden_size]),
			initial_c = _frozen(initial[hidden_size:]),
			**fields
		)


@dataclasses.dataclass(frozen=True)
class DenseWeights:

	"""
	Final projection from the top hidden state to output logits; ``w`` is ``(hidden, output)``.
	"""

	w: np.ndarray
	b: np.ndarray


	@staticmethod
	def from_dict (mapping: typing.Mapping[str, typing.Any], hidden_size: int, output_size: int, where: str = "dense") -> "DenseWeights":

		"""
		Build and validate the dense layer from its exported ``(out, in)`` representation.
		"""

		w = _array_field(mapping, "w", where)
		b = _array_field(mapping, "b", where).reshape(-1)
		_check_shape(w, (output_size, hidden_size), f"{where}.w")
		_check_shape(b, (output_size,), f"{where}.b")

		return DenseWeights(w=_frozen(w.T), b=_frozen(b))


@dataclasses.dataclass(frozen=True)
class ExpertWeights:

	"""
	Everything one expert needs: two stacked LSTM layers and the dense output layer.

	Instances are read-only and can be shared between generators.
	"""

	name: str
	lstm1: LSTMWeights
	lstm2: LSTMWeights
	dense: DenseWeights


	@property
	def input_size (self) -> int:
		return self.lstm1.input_size


	@property
	def hidden_size (self) -> int:
		return self.lstm1.hidden_size


	@property
	def output_size (self) -> int:
		return int(self.dense.b.shape[0])


	@staticmethod
	def from_dict (
		mapping: typing.Mapping[str, typing.Any],
		input_size: int,
		output_size: int,
		hidden_size: typing.Optional[int] = None,
		name: str = "expert"
	) -> "ExpertWeights":

		"""Validate an exported weight set and convert it for inference.

		Parameters:
			mapping: The ``weights`` object of one expert (``lstm1``, ``lstm2``, ``dense``).
			input_size: Width the expert's encoder produces.
			output_size: Width of the expert's local vocabulary.
			hidden_size: LSTM width; inferred from ``lstm1.initialstate`` when omitted.
			name: Used in error messages.

		Raises:
			WeightBundleError: On a missing field or any shape mismatch.
		"""

		if not isinstance(mapping, collections.abc.Mapping):
			raise WeightBundleError(f"{name}: weights must be an object")

		for section in ("lstm1", "lstm2", "dense"):
			if section not in mapping:
				raise WeightBundleError(f"{name}: missing section {section!r}")
			if not isinstance(mapping[section], collections.abc.Mapping):
				raise WeightBundleError(f"{name}.{section}: expected an object")

		if hidden_size is None:
			initial = _array_field(mapping["lstm1"], "initialstate", f"{name}.lstm1")
			if initial.size % 2:
				raise WeightBundleError(f"{name}.lstm1.initialstate: odd length {initial.size}")
			hidden_size = initial.size // 2

		return ExpertWeights(
			name = name,
			lstm1 = LSTMWeights.from_dict(mapping["lstm1"], input_size, hidden_size, where=f"{name}.lstm1"),
			lstm2 = LSTMWeights.from_dict(mapping["lstm2"], hidden_size, hidden_size, where=f"{name}.lstm2"),
			dense = DenseWeights.from_dict(mapping["dense"], hidden_size, output_size, where=f"{name}.dense")
		)


@dataclasses.dataclass(frozen=True)
class WeightBundle:

	"""
	The two experts of a product-of-experts model.
	"""

	interval: ExpertWeights
	chord_relative: ExpertWeights


def _int_field (mapping: typing.Mapping[str, typing.Any], key: str, where: str) -> int:

	"""Read an integer field, raising ``WeightBundleError`` when it is not one."""

	try:
		return int(mapping[key])
	except (TypeError, ValueError) as exc:
		raise WeightBundleError(f"{where}.{key}: expected an integer, got {mapping[key]!r}") from exc


def _check_config (config: typing.Mapping[str, typing.Any]) -> None:

	"""Reject bundles trained for a different pitch window."""

	expected = {
		"lowBound": solonet.constants.LOW_BOUND,
		"highBound": solonet.constants.HIGH_BOUND,
	}

	for key, value in expected.items():
		if key in config and _int_field(config, key, "config") != value:
			raise WeightBundleError(f"config.{key} is {config[key]}, this generator requires {value}")


def bundle_from_dict (data: typing.Mapping[str, typing.Any], interval_size: typing.Tuple[int, int], chord_relative_size: typing.Tuple[int, int]) -> WeightBundle:

	"""Validate a decoded bundle.

	Parameters:
		data: Decoded JSON bundle.
		interval_size: ``(input_size, output_size)`` the interval expert must have.
		chord_relative_size: ``(input_size, output_size)`` the chord-relative expert must have.
	"""

	if not isinstance(data, collections.abc.Mapping):
		raise WeightBundleError(f"bundle must be an object, got {type(data).__name__}")

	experts = data.get("experts")

	if not isinstance(experts, list) or len(experts) != 2:
		raise WeightBundleError("bundle must contain exactly two experts")

	config = data.get("config", {})

	if not isinstance(config, collections.abc.Mapping):
		raise WeightBundleError("config must be an object")

	_check_config(config)
	hidden_size = _int_field(config, "hiddenSize", "config") if "hiddenSize" in config else None

	parsed: typing.List[ExpertWeights] = []

	for index, (entry, (input_size, output_size)) in enumerate(zip(experts, (interval_size, chord_relative_size))):

		if not isinstance(entry, collections.abc.Mapping):
			raise WeightBundleError(f"experts[{index}]: expected an object")

		name = entry.get("name", f"expert{index}")

		for key, expected in (("inputSize", input_size), ("outputSize", output_size)):
			if key not in entry:
				raise WeightBundleError(f"{name}: missing field {key!r}")
			if _int_field(entry, key, name) != expected:
				raise WeightBundleError(f"{name}: declared {key} {entry[key]}, expected {expected}")

		if "weights" not in entry:
			raise WeightBundleError(f"{name}: missing field 'weights'")

		parsed.append(ExpertWeights.from_dict(
			entry["weights"],
			input_size = input_size,
			output_size = output_size,
			hidden_size = hidden_size,
			name = name
		))

	return WeightBundle(interval=parsed[0], chord_relative=parsed[1])


def load_bundle (path: str) -> WeightBundle:

	"""Read and validate a JSON weight bundle from disk.

	The first expert is the interval-relative one, the second the
	chord-relative one, as exported.

	Raises:
		WeightBundleError: If the file is missing, not JSON, or malformed.
	"""

	if not os.path.exists(path):
		raise WeightBundleError(f"Weight bundle not found: {path}")

	try:
		with open(path, "r") as f:
			data = json.load(f)
	except json.JSONDecodeError as exc:
		raise WeightBundleError(f"Weight bundle {path} is not valid JSON: {exc}") from exc

	bundle = bundle_from_dict(
		data,
		interval_size = (solonet.encoding.INTERVAL_INPUT_SIZE, solonet.encoding.INTERVAL_OUTPUT_SIZE),
		chord_relative_size = (solonet.encoding.CHORD_RELATIVE_INPUT_SIZE, solonet.encoding.CHORD_RELATIVE_OUTPUT_SIZE)
	)

	logger.info(f"Loaded weight bundle {data.get('name', path)!r} (hidden size {bundle.interval.hidden_size})")

	return bundle
