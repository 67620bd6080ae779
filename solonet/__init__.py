"""
solonet - jazz solo generation with a product of LSTM experts.

Two small recurrent networks listen to the same progression from different
angles.  The interval expert thinks in melodic steps and leaps from the
current register; the chord-relative expert thinks in pitch classes
against the chord root.  At every timestep each one proposes a
distribution over "rest, sustain, or one of 36 pitches", the two are
multiplied, and the next event is sampled from the product.  A note comes
out likely only when both experts agree on it.

Typical use:

	```python
	import solonet

	generator = solonet.SoloGenerator.from_file("clifford_poe.json")
	progression = solonet.build_progression(["Cm7", "F7", "Bbmaj7", "Bbmaj7"])
	solo = generator.generate(progression, temperature=0.9, seed=1)

	solonet.write_midi(solo.events, "solo.mid", steps_per_beat=solo.steps_per_beat)
	```

Modules:

- ``solonet.chords`` - chord symbols, quality vectors, progressions.
- ``solonet.weights`` - weight sets and the JSON bundle reader.
- ``solonet.lstm`` / ``solonet.expert`` - recurrent inference.
- ``solonet.encoding`` / ``solonet.projection`` - expert inputs and outputs.
- ``solonet.combiner`` - product of experts and sampling.
- ``solonet.generator`` - the generation loop.
- ``solonet.midi_export`` - notes and Standard MIDI Files.
"""

import solonet.chords
import solonet.events
import solonet.generator
import solonet.midi_export
import solonet.weights


ChordContext = solonet.chords.ChordContext
build_progression = solonet.chords.build_progression
Event = solonet.events.Event
EventKind = solonet.events.EventKind
Solo = solonet.generator.Solo
SoloGenerator = solonet.generator.SoloGenerator
write_midi = solonet.midi_export.write_midi
WeightBundleError = solonet.weights.WeightBundleError
load_bundle = solonet.weights.load_bundle
