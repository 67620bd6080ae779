import argparse
import logging
import sys
import typing

import solonet.chords
import solonet.config
import solonet.generator
import solonet.midi_export
import solonet.weights


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def parse_args (argv: typing.Optional[typing.List[str]] = None) -> argparse.Namespace:

	"""
	Command-line options; anything given here overrides the config file.
	"""

	parser = argparse.ArgumentParser(description="Generate a jazz solo over a chord progression")
	parser.add_argument("--config", default="solo.yaml", help="YAML config file (default: solo.yaml)")
	parser.add_argument("--weights", help="JSON weight bundle")
	parser.add_argument("--chords", nargs="+", help="Chord symbols, one bar each (e.g. Dm7 G7 Cmaj7)")
	parser.add_argument("--temperature", type=float, help="Sampling temperature (> 0)")
	parser.add_argument("--steps-per-beat", type=int, help="Time resolution: 1, 2, 3, 4, 6 or 12")
	parser.add_argument("--seed", type=int, help="Random seed for a repeatable solo")
	parser.add_argument("--bpm", type=float, help="Tempo written to the MIDI file")
	parser.add_argument("--output", help="MIDI file to write")

	return parser.parse_args(argv)


def build_config (args: argparse.Namespace) -> solonet.config.GenerationConfig:

	"""
	Merge the config file with command-line overrides.
	"""

	config = solonet.config.load_config(args.config)

	overrides = {
		"weights": args.weights,
		"progression": args.chords,
		"temperature": args.temperature,
		"steps_per_beat": args.steps_per_beat,
		"seed": args.seed,
		"bpm": args.bpm,
		"output": args.output,
	}

	for key, value in overrides.items():
		if value is not None:
			setattr(config, key, value)

	return config


def main (argv: typing.Optional[typing.List[str]] = None) -> None:

	"""
	Main entry point: generate one solo and write it as a MIDI file.
	"""

	args = parse_args(argv)
	config = build_config(args)

	if config.weights is None:
		logger.error("No weight bundle given (set 'weights' in the config or pass --weights)")
		sys.exit(1)

	try:
		generator = solonet.generator.SoloGenerator.from_file(config.weights)
	except solonet.weights.WeightBundleError as exc:
		logger.error(f"Could not load weights: {exc}")
		sys.exit(1)

	progression = solonet.chords.build_progression(config.progression)

	logger.info("Progression: " + " | ".join(chord.name() for chord in progression))

	solo = generator.generate(
		progression,
		temperature = config.temperature,
		steps_per_beat = config.steps_per_beat,
		seed = config.seed
	)

	solonet.midi_export.write_midi(solo.events, config.output, steps_per_beat=solo.steps_per_beat, bpm=config.bpm)


if __name__ == "__main__":
	main()
