import typing

import numpy as np
import pytest

import solonet.encoding
import solonet.weights


HIDDEN_SIZE = 8


def _entry (array: np.ndarray) -> typing.Dict[str, typing.Any]:

	"""Encode an array the way the JSON bundle stores it."""

	return {"data": array.reshape(-1).tolist(), "shape": list(array.shape)}


def make_expert_dict (
	input_size: int,
	output_size: int,
	hidden_size: int = HIDDEN_SIZE,
	seed: int = 0,
	scale: float = 0.3
) -> typing.Dict[str, typing.Any]:

	"""Random weights in the exported ``(out, in)`` layout."""

	rng = np.random.default_rng(seed)

	def layer (layer_input: int) -> typing.Dict[str, typing.Any]:

		fields: typing.Dict[str, typing.Any] = {}

		for gate in solonet.weights.GATES:
			fields[f"{gate}_w"] = _entry(rng.normal(0.0, scale, (hidden_size, layer_input + hidden_size)))
			fields[f"{gate}_b"] = _entry(rng.normal(0.0, scale, (hidden_size,)))

		fields["initialstate"] = _entry(rng.normal(0.0, scale, (2 * hidden_size,)))

		return fields

	return {
		"lstm1": layer(input_size),
		"lstm2": layer(hidden_size),
		"dense": {
			"w": _entry(rng.normal(0.0, scale, (output_size, hidden_size))),
			"b": _entry(rng.normal(0.0, scale, (output_size,))),
		},
	}


def make_bundle_dict (hidden_size: int = HIDDEN_SIZE, seed: int = 0) -> typing.Dict[str, typing.Any]:

	"""A complete two-expert bundle as it would be decoded from JSON."""

	return {
		"name": "test-bundle",
		"config": {"hiddenSize": hidden_size, "lowBound": 48, "highBound": 84},
		"experts": [
			{
				"name": "IntervalRelative",
				"inputSize": solonet.encoding.INTERVAL_INPUT_SIZE,
				"outputSize": solonet.encoding.INTERVAL_OUTPUT_SIZE,
				"weights": make_expert_dict(
					solonet.encoding.INTERVAL_INPUT_SIZE, solonet.encoding.INTERVAL_OUTPUT_SIZE, hidden_size, seed
				),
			},
			{
				"name": "ChordRelative",
				"inputSize": solonet.encoding.CHORD_RELATIVE_INPUT_SIZE,
				"outputSize": solonet.encoding.CHORD_RELATIVE_OUTPUT_SIZE,
				"weights": make_expert_dict(
					solonet.encoding.CHORD_RELATIVE_INPUT_SIZE, solonet.encoding.CHORD_RELATIVE_OUTPUT_SIZE, hidden_size, seed + 1
				),
			},
		],
	}


@pytest.fixture
def bundle_dict () -> typing.Dict[str, typing.Any]:

	"""Decoded bundle with small random weights."""

	return make_bundle_dict()


@pytest.fixture
def interval_weights () -> solonet.weights.ExpertWeights:

	"""Validated interval-expert weights."""

	return solonet.weights.ExpertWeights.from_dict(
		make_expert_dict(solonet.encoding.INTERVAL_INPUT_SIZE, solonet.encoding.INTERVAL_OUTPUT_SIZE, seed=0),
		input_size = solonet.encoding.INTERVAL_INPUT_SIZE,
		output_size = solonet.encoding.INTERVAL_OUTPUT_SIZE,
		name = "interval"
	)


@pytest.fixture
def chord_relative_weights () -> solonet.weights.ExpertWeights:

	"""Validated chord-relative-expert weights."""

	return solonet.weights.ExpertWeights.from_dict(
		make_expert_dict(solonet.encoding.CHORD_RELATIVE_INPUT_SIZE, solonet.encoding.CHORD_RELATIVE_OUTPUT_SIZE, seed=1),
		input_size = solonet.encoding.CHORD_RELATIVE_INPUT_SIZE,
		output_size = solonet.encoding.CHORD_RELATIVE_OUTPUT_SIZE,
		name = "chord_relative"
	)
