"""Fixed dimensions and tuning constants for the solo generator.

The pitch window, hidden width and beat periods match the Impro-Visor
Clifford Brown connectome the expert weights were trained as.  Changing
them breaks compatibility with those weights.

- ``LOW_BOUND`` / ``HIGH_BOUND`` - half-open MIDI pitch window ``[48, 84)``
- ``PITCH_RANGE`` - number of absolute pitch slots (36)
- ``ABSOLUTE_SIZE`` - width of the shared probability space (rest + sustain + pitches)
- ``BEAT_PERIODS`` - subdivision periods in 48ths of a whole note
"""

LOW_BOUND = 48		# C3
HIGH_BOUND = 84		# C6, exclusive
PITCH_RANGE = HIGH_BOUND - LOW_BOUND

HIDDEN_SIZE = 300

# Whole, half, quarter, eighth, sixteenth, then the triplet subdivisions.
BEAT_PERIODS = (48, 24, 12, 6, 3, 16, 8, 4, 2)

# A quarter note (one beat) is 12 ticks of a 48-per-whole-note grid.
TICKS_PER_BEAT = 12

# Slot layout shared by both experts' local outputs and the absolute space.
REST_INDEX = 0
SUSTAIN_INDEX = 1
FIRST_NOTE_INDEX = 2
ABSOLUTE_SIZE = PITCH_RANGE + FIRST_NOTE_INDEX

MAX_INTERVAL = 12
INTERVAL_COUNT = 2 * MAX_INTERVAL + 1

# Re-biasing applied after the product so that rest and sustain, which both
# experts over-predict once multiplied, cannot crowd out note onsets.
REST_SCALE = 0.5
SUSTAIN_SCALE = 0.15
SUSTAIN_ARTICULATION_WEIGHT = 0.3
MAX_ARTICULATION_MASS = 0.4

DEFAULT_TEMPERATURE = 1.0
DEFAULT_STEPS_PER_BEAT = 2
BEATS_PER_BAR = 4
