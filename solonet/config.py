"""YAML configuration for command-line solo generation.

Example ``solo.yaml``::

	weights: models/clifford_poe.json
	progression:
	  - Dm7
	  - G7
	  - chord: Cmaj7
	    beats: 8
	temperature: 0.9
	steps_per_beat: 2
	seed: 7
	bpm: 140
	output: solo.mid
"""

import dataclasses
import logging
import os
import typing

import yaml

import solonet.constants


logger = logging.getLogger(__name__)


DEFAULT_PROGRESSION = ["Dm7", "G7", "Cmaj7", "Cmaj7"]


@dataclasses.dataclass
class GenerationConfig:

	"""
	Everything the command line needs to generate and save one solo.
	"""

	weights: typing.Optional[str] = None
	progression: typing.List[typing.Any] = dataclasses.field(default_factory=lambda: list(DEFAULT_PROGRESSION))
	temperature: float = solonet.constants.DEFAULT_TEMPERATURE
	steps_per_beat: int = solonet.constants.DEFAULT_STEPS_PER_BEAT
	seed: typing.Optional[int] = None
	bpm: float = 120
	output: str = "solo.mid"


	@staticmethod
	def from_dict (data: typing.Mapping[str, typing.Any]) -> "GenerationConfig":

		"""Build a config from a decoded YAML mapping.

		Unknown keys are logged and ignored; missing keys keep their defaults.

		Raises:
			ValueError: If ``progression`` is not a list.
		"""

		known = {field.name for field in dataclasses.fields(GenerationConfig)}

		for key in data:
			if key not in known:
				logger.warning(f"Ignoring unknown config key {key!r}")

		values = {key: value for key, value in data.items() if key in known}

		if "progression" in values and not isinstance(values["progression"], list):
			raise ValueError("progression must be a list of chords")

		config = GenerationConfig(**values)
		config.temperature = float(config.temperature)
		config.steps_per_beat = int(config.steps_per_beat)
		config.bpm = float(config.bpm)

		return config


def load_config (config_path: str = 'solo.yaml') -> GenerationConfig:

	"""
	Load configuration from a YAML file, falling back to defaults when it does not exist.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return GenerationConfig()

	with open(config_path, 'r') as f:
		data = yaml.safe_load(f)

	if data is None:
		return GenerationConfig()

	if not isinstance(data, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping")

	return GenerationConfig.from_dict(data)
