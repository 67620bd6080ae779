import json
import logging
import pathlib

import mido
import pytest

import conftest
import solonet.__main__
import solonet.config
import solonet.constants


# ---------------------------------------------------------------------------
# load_config
# ---------------------------------------------------------------------------

def test_missing_file_uses_defaults (tmp_path: pathlib.Path, caplog: pytest.LogCaptureFixture) -> None:

	"""A missing config file is a warning, not an error."""

	with caplog.at_level(logging.WARNING, logger="solonet.config"):
		config = solonet.config.load_config(str(tmp_path / "missing.yaml"))

	assert config == solonet.config.GenerationConfig()
	assert config.temperature == solonet.constants.DEFAULT_TEMPERATURE
	assert "not found" in caplog.text


def test_yaml_values_are_read (tmp_path: pathlib.Path) -> None:

	"""Every field can be set from YAML, including mapping-style chords."""

	path = tmp_path / "solo.yaml"
	path.write_text(
		"weights: model.json\n"
		"progression:\n"
		"  - Dm7\n"
		"  - chord: G7\n"
		"    beats: 2\n"
		"temperature: 0.75\n"
		"steps_per_beat: 4\n"
		"seed: 9\n"
		"bpm: 160\n"
		"output: out.mid\n"
	)

	config = solonet.config.load_config(str(path))

	assert config.weights == "model.json"
	assert config.progression == ["Dm7", {"chord": "G7", "beats": 2}]
	assert config.temperature == 0.75
	assert config.steps_per_beat == 4
	assert config.seed == 9
	assert config.bpm == 160.0
	assert config.output == "out.mid"


def test_empty_file_uses_defaults (tmp_path: pathlib.Path) -> None:

	"""An empty YAML document means all defaults."""

	path = tmp_path / "solo.yaml"
	path.write_text("")

	assert solonet.config.load_config(str(path)) == solonet.config.GenerationConfig()


def test_unknown_keys_are_ignored (caplog: pytest.LogCaptureFixture) -> None:

	"""Unknown keys are logged and dropped."""

	with caplog.at_level(logging.WARNING, logger="solonet.config"):
		config = solonet.config.GenerationConfig.from_dict({"tempo": 100, "seed": 1})

	assert config.seed == 1
	assert "tempo" in caplog.text


def test_progression_must_be_a_list () -> None:

	"""A single string is not a progression."""

	with pytest.raises(ValueError):
		solonet.config.GenerationConfig.from_dict({"progression": "Dm7 G7"})


def test_top_level_must_be_a_mapping (tmp_path: pathlib.Path) -> None:

	"""A YAML list at the top level is rejected."""

	path = tmp_path / "solo.yaml"
	path.write_text("- Dm7\n- G7\n")

	with pytest.raises(ValueError):
		solonet.config.load_config(str(path))


def test_default_progressions_are_independent () -> None:

	"""Each config gets its own progression list."""

	a = solonet.config.GenerationConfig()
	a.progression.append("C7")

	assert solonet.config.GenerationConfig().progression == solonet.config.DEFAULT_PROGRESSION


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------

def test_flags_override_config (tmp_path: pathlib.Path) -> None:

	"""Command-line values win over the config file; unset flags do not."""

	path = tmp_path / "solo.yaml"
	path.write_text("temperature: 0.5\nseed: 3\nbpm: 100\n")

	args = solonet.__main__.parse_args([
		"--config", str(path),
		"--temperature", "1.5",
		"--chords", "Cm7", "F7",
	])
	config = solonet.__main__.build_config(args)

	assert config.temperature == 1.5
	assert config.progression == ["Cm7", "F7"]
	assert config.seed == 3
	assert config.bpm == 100.0


def test_main_writes_midi (tmp_path: pathlib.Path) -> None:

	"""An end-to-end run writes a readable MIDI file."""

	bundle = tmp_path / "bundle.json"
	bundle.write_text(json.dumps(conftest.make_bundle_dict()))
	output = tmp_path / "solo.mid"

	solonet.__main__.main([
		"--config", str(tmp_path / "missing.yaml"),
		"--weights", str(bundle),
		"--chords", "Cm7", "F7",
		"--seed", "4",
		"--output", str(output),
	])

	mid = mido.MidiFile(str(output))

	assert mid.ticks_per_beat == 480
	assert mid.tracks[0][0].type == 'set_tempo'


def test_main_without_weights_exits (tmp_path: pathlib.Path) -> None:

	"""No weight bundle is a clean exit with a non-zero status."""

	with pytest.raises(SystemExit) as info:
		solonet.__main__.main(["--config", str(tmp_path / "missing.yaml")])

	assert info.value.code == 1


def test_main_with_broken_weights_exits (tmp_path: pathlib.Path) -> None:

	"""A malformed bundle is reported and exits."""

	bundle = tmp_path / "bundle.json"
	bundle.write_text(json.dumps({"experts": []}))

	with pytest.raises(SystemExit):
		solonet.__main__.main(["--config", str(tmp_path / "missing.yaml"), "--weights", str(bundle)])
