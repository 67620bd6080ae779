"""Chord qualities, chord symbols and the per-bar chord context.

The generator only needs to know, for every bar, which pitch classes sound
against the melody.  A chord is therefore reduced to a root pitch class and
a 12-bit *quality vector*: bit ``k`` is set when the pitch ``root + k``
belongs to the chord.

Module-level constants:
- `NOTE_NAME_TO_PC`: Maps note names (e.g., `"C"`, `"F#"`, `"Bb"`) to pitch classes (0-11)
- `PC_TO_NOTE_NAME`: Maps pitch classes to note names
- `QUALITY_VECTORS`: Maps quality names (`"maj7"`, `"m7"`, `"7alt"`, ...) to quality vectors
- `QUALITY_ALIASES`: Alternative spellings accepted in chord symbols
- `DEFAULT_QUALITY`: Quality used when a name is not recognised
- `DEGREES`: Maps scale degrees (`"IIm7"`, `"V7/V"`, ...) to a quality and an offset from the key

Unknown qualities never stop a solo: they fall back to `DEFAULT_QUALITY`
and log a warning.  Unknown root names raise `ValueError`, as a misspelt
root cannot be guessed.
"""

import collections.abc
import dataclasses
import logging
import re
import typing

import solonet.constants


logger = logging.getLogger(__name__)


NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"C#": 1,
	"Db": 1,
	"D": 2,
	"D#": 3,
	"Eb": 3,
	"E": 4,
	"F": 5,
	"F#": 6,
	"Gb": 6,
	"G": 7,
	"G#": 8,
	"Ab": 8,
	"A": 9,
	"A#": 10,
	"Bb": 10,
	"B": 11,
}

PC_TO_NOTE_NAME: typing.List[str] = [
	"C",
	"Db",
	"D",
	"Eb",
	"E",
	"F",
	"Gb",
	"G",
	"Ab",
	"A",
	"Bb",
	"B",
]


QUALITY_VECTORS: typing.Dict[str, typing.Tuple[int, ...]] = {
	"maj7":    (1, 0, 0, 0, 1, 0, 0, 1, 0, 0, 0, 1),
	"maj9":    (1, 0, 1, 0, 1, 0, 0, 1, 0, 0, 0, 1),
	"6":       (1, 0, 0, 0, 1, 0, 0, 1, 0, 1, 0, 0),
	"maj7#11": (1, 0, 0, 0, 1, 0, 1, 1, 0, 0, 0, 1),
	"m7":      (1, 0, 0, 1, 0, 0, 0, 1, 0, 0, 1, 0),
	"m9":      (1, 0, 1, 1, 0, 0, 0, 1, 0, 0, 1, 0),
	"m6":      (1, 0, 0, 1, 0, 0, 0, 1, 0, 1, 0, 0),
	"7":       (1, 0, 0, 0, 1, 0, 0, 1, 0, 0, 1, 0),
	"9":       (1, 0, 1, 0, 1, 0, 0, 1, 0, 0, 1, 0),
	"13":      (1, 0, 0, 0, 1, 0, 0, 1, 0, 1, 1, 0),
	"7b13":    (1, 0, 0, 0, 1, 0, 0, 1, 1, 0, 1, 0),
	"7#11":    (1, 0, 0, 0, 1, 0, 1, 1, 0, 0, 1, 0),
	"7sus4":   (1, 0, 0, 0, 0, 1, 0, 1, 0, 0, 1, 0),
	"7alt":    (1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 1, 1),
	"7b9":     (1, 1, 0, 0, 1, 0, 0, 1, 0, 0, 1, 0),
	"7#9":     (1, 0, 0, 1, 1, 0, 0, 1, 0, 0, 1, 0),
	"7#9#5":   (1, 0, 0, 1, 1, 0, 0, 0, 1, 0, 1, 0),
	"m7b5":    (1, 0, 0, 1, 0, 0, 1, 0, 0, 0, 1, 0),
	"dim7":    (1, 0, 0, 1, 0, 0, 1, 0, 0, 1, 0, 0),
	"sus4":    (1, 0, 0, 0, 0, 1, 0, 1, 0, 0, 0, 0),
	"sus2":    (1, 0, 1, 0, 0, 0, 0, 1, 0, 0, 0, 0),
	"maj":     (1, 0, 0, 0, 1, 0, 0, 1, 0, 0, 0, 0),
	"m":       (1, 0, 0, 1, 0, 0, 0, 1, 0, 0, 0, 0),
	"dim":     (1, 0, 0, 1, 0, 0, 1, 0, 0, 0, 0, 0),
	"aug":     (1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 0, 0),
}

QUALITY_ALIASES: typing.Dict[str, str] = {
	"": "maj",
	"M": "maj",
	"major": "maj",
	"M7": "maj7",
	"Maj7": "maj7",
	"major_7th": "maj7",
	"min": "m",
	"-": "m",
	"minor": "m",
	"min7": "m7",
	"-7": "m7",
	"minor_7th": "m7",
	"dom7": "7",
	"dominant_7th": "7",
	"ø": "m7b5",
	"ø7": "m7b5",
	"half_diminished_7th": "m7b5",
	"o7": "dim7",
	"o": "dim",
	"diminished": "dim",
	"+": "aug",
	"augmented": "aug",
	"alt": "7alt",
}

DEFAULT_QUALITY = "maj7"


# Scale degree -> (quality, semitones above the key)
DEGREES: typing.Dict[str, typing.Tuple[str, int]] = {
	# diatonic
	"Imaj7":     ("maj7", 0),
	"Imaj9":     ("maj9", 0),
	"I6":        ("6", 0),
	"IIm7":      ("m7", 2),
	"IIm9":      ("m9", 2),
	"IIIm7":     ("m7", 4),
	"IVmaj7":    ("maj7", 5),
	"IVmaj9":    ("maj9", 5),
	"V7":        ("7", 7),
	"V9":        ("9", 7),
	"V13":       ("13", 7),
	"V7alt":     ("7alt", 7),
	"VIm7":      ("m7", 9),
	"VIIm7b5":   ("m7b5", 11),
	# tritone substitutes
	"bII7":      ("7", 1),
	"bVII7":     ("7", 10),
	"#IVm7b5":   ("m7b5", 6),
	# secondary dominants
	"V7/ii":     ("7", 9),
	"V7/V":      ("7", 2),
	"V7/IV":     ("7", 0),
	"V7/vi":     ("7", 4),
	# related ii chords
	"iiø/ii":    ("m7b5", 4),
	"iiø/V":     ("m7b5", 9),
	# passing diminished
	"#Idim7":    ("dim7", 1),
	"#IVdim7":   ("dim7", 6),
	"bIIIdim7":  ("dim7", 3),
	# borrowed
	"bVImaj7":   ("maj7", 8),
	"bIIImaj7":  ("maj7", 3),
	"IVm7":      ("m7", 5),
	"bIImaj7":   ("maj7", 1),
	# altered and suspended dominants
	"V7b13":     ("7b13", 7),
	"V7#11":     ("7#11", 7),
	"V7sus4":    ("7sus4", 7),
	"IIsus4":    ("sus4", 2),
	"Isus2":     ("sus2", 0),
	"V7#9#5":    ("7#9#5", 7),
	"IVmaj7#11": ("maj7#11", 5),
	# Coltrane dominants
	"bIII7":     ("7", 3),
	"bVI7":      ("7", 8),
	"VI7":       ("7", 9),
}

DEFAULT_DEGREE: typing.Tuple[str, int] = ("m7", 0)


_SYMBOL_PATTERN = re.compile(r"^([A-G](?:#|b)?)(.*)$")


def key_name_to_pc (key_name: str) -> int:

	"""Validate a note name and return its pitch class (0–11).

	Raises:
		ValueError: If the name is not recognised.
	"""

	if key_name not in NOTE_NAME_TO_PC:
		raise ValueError(
			f"Unknown key name: {key_name!r}. Expected e.g. 'C', 'F#', 'Bb'."
		)

	return NOTE_NAME_TO_PC[key_name]


def resolve_quality (quality: str) -> str:

	"""Return the canonical quality name, or ``DEFAULT_QUALITY`` when unknown."""

	if quality in QUALITY_VECTORS:
		return quality

	if quality in QUALITY_ALIASES:
		return QUALITY_ALIASES[quality]

	logger.warning(f"Unknown chord quality {quality!r}, using {DEFAULT_QUALITY!r}")

	return DEFAULT_QUALITY


def quality_vector (quality: str) -> typing.Tuple[int, ...]:

	"""Return the 12-bit quality vector for a quality name (with default fallback)."""

	return QUALITY_VECTORS[resolve_quality(quality)]


def parse_chord_symbol (symbol: str) -> typing.Tuple[int, str]:

	"""Split a chord symbol into ``(root_pc, quality)``.

	The quality part is resolved through :func:`resolve_quality`, so an
	unrecognised suffix degrades to ``DEFAULT_QUALITY`` instead of failing.

	Example:
		```python
		parse_chord_symbol("Cm7")     # → (0, "m7")
		parse_chord_symbol("Bb7alt")  # → (10, "7alt")
		parse_chord_symbol("F#ø")     # → (6, "m7b5")
		```

	Raises:
		ValueError: If the symbol does not start with a note name.
	"""

	match = _SYMBOL_PATTERN.match(symbol.strip())

	if match is None:
		raise ValueError(f"Cannot parse chord symbol: {symbol!r}")

	root_name, suffix = match.groups()

	return key_name_to_pc(root_name), resolve_quality(suffix)


def resolve_degree (degree: str, key: str) -> typing.Tuple[int, str]:

	"""Turn a scale degree in a key into ``(root_pc, quality)``.

	An unknown degree falls back to ``DEFAULT_DEGREE`` (a minor seventh on
	the key note) and logs a warning.

	Example:
		```python
		resolve_degree("IIm7", "Bb")   # → (0, "m7")
		resolve_degree("V7/V", "C")    # → (2, "7")
		```

	Raises:
		ValueError: If the key name is not recognised.
	"""

	key_pc = key_name_to_pc(key)

	if degree in DEGREES:
		quality, offset = DEGREES[degree]
	else:
		logger.warning(f"Unknown degree {degree!r}, using {DEFAULT_DEGREE[0]!r} on the key note")
		quality, offset = DEFAULT_DEGREE

	return (key_pc + offset) % 12, quality


@dataclasses.dataclass(frozen=True)
class ChordContext:

	"""
	One bar of harmony as seen by the solo generator.
	"""

	root_pc: int
	quality: str
	quality_vector: typing.Tuple[int, ...]
	start_beat: float = 0.0
	duration_beats: float = solonet.constants.BEATS_PER_BAR

	def __post_init__ (self) -> None:
		if not 0 <= self.root_pc < 12:
			raise ValueError(f"root_pc must be in 0..11, got {self.root_pc}")
		if len(self.quality_vector) != 12:
			raise ValueError("quality_vector must have 12 entries")
		if self.duration_beats <= 0:
			raise ValueError("duration_beats must be positive")


	@staticmethod
	def create (root_pc: int, quality: str, duration_beats: float = solonet.constants.BEATS_PER_BAR, start_beat: float = 0.0) -> "ChordContext":

		"""
		Build a context from a root pitch class and a quality name.
		"""

		canonical = resolve_quality(quality)

		return ChordContext(
			root_pc = root_pc % 12,
			quality = canonical,
			quality_vector = QUALITY_VECTORS[canonical],
			start_beat = start_beat,
			duration_beats = duration_beats
		)


	def name (self) -> str:

		"""
		Return a human-friendly chord name.
		"""

		suffix = "" if self.quality == "maj" else self.quality

		return f"{PC_TO_NOTE_NAME[self.root_pc]}{suffix}"


ChordSpec = typing.Union[str, typing.Tuple[str, float], typing.Mapping[str, typing.Any], ChordContext]


def build_progression (
	chords: typing.Iterable[ChordSpec],
	default_beats: float = solonet.constants.BEATS_PER_BAR
) -> typing.List[ChordContext]:

	"""Turn a list of chord specifications into consecutive chord contexts.

	Each entry may be a chord symbol (``"Cm7"``, lasting ``default_beats``),
	a ``(symbol, beats)`` pair, a mapping with ``chord`` or ``degree`` and
	``key`` plus optional ``beats`` (the YAML config form) or a ready
	``ChordContext``.  Start beats are assigned cumulatively; a ready
	context keeps its quality vector and duration.

	Example:
		```python
		build_progression(["Dm7", "G7", ("Cmaj7", 8)])
		build_progression([{"degree": "IIm7", "key": "Bb"}, {"degree": "V7", "key": "Bb"}])
		```
	"""

	progression: typing.List[ChordContext] = []
	start = 0.0

	for spec in chords:

		if isinstance(spec, ChordContext):
			progression.append(dataclasses.replace(spec, start_beat=start))
			start += spec.duration_beats
			continue

		if isinstance(spec, str):
			beats = default_beats
			root_pc, quality = parse_chord_symbol(spec)

		elif isinstance(spec, tuple):
			symbol, beats = spec
			root_pc, quality = parse_chord_symbol(symbol)

		elif isinstance(spec, collections.abc.Mapping):
			beats = spec.get("beats", default_beats)
			if "chord" in spec:
				root_pc, quality = parse_chord_symbol(spec["chord"])
			elif "degree" in spec and "key" in spec:
				root_pc, quality = resolve_degree(spec["degree"], spec["key"])
			else:
				raise ValueError(f"Chord entry needs 'chord', or 'degree' and 'key': {spec!r}")

		else:
			raise ValueError(f"Unsupported chord specification: {spec!r}")

		progression.append(ChordContext.create(root_pc, quality, duration_beats=float(beats), start_beat=start))
		start += float(beats)

	return progression
