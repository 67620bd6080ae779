"""Product-of-experts combination and sampling.

The two projected distributions are multiplied slot by slot, so a note
needs support from *both* experts to come out likely.  Rest and sustain are
then damped: multiplied independently-trained experts agree on "do
nothing" far too readily, so notes are guaranteed at least
``1 - MAX_ARTICULATION_MASS`` of the final mass.
"""

import dataclasses
import logging
import random

import numpy as np

import solonet.constants


logger = logging.getLogger(__name__)


_NOTES = slice(solonet.constants.FIRST_NOTE_INDEX, None)


@dataclasses.dataclass(frozen=True)
class Combination:

	"""
	Final distribution over the absolute slots and whether it needed the uniform fallback.
	"""

	distribution: np.ndarray
	degenerate: bool = False


def _normalise_notes (notes: np.ndarray) -> np.ndarray:

	"""Scale to sum 1; an all-zero (or non-finite) vector becomes uniform."""

	total = notes.sum()

	if not np.isfinite(total) or total <= 0.0:
		return np.full(notes.shape, 1.0 / notes.size)

	return notes / total


def apply_temperature (notes: np.ndarray, temperature: float) -> np.ndarray:

	"""Sharpen or flatten a note distribution: ``p ** (1 / T)``, renormalised.

	Computed in log space so very small temperatures converge on the most
	likely note instead of underflowing to zero.
	"""

	if temperature <= 0:
		raise ValueError(f"temperature must be positive, got {temperature}")

	with np.errstate(divide="ignore"):
		scaled = np.log(notes) / temperature

	peak = np.max(scaled)

	if not np.isfinite(peak):
		return _normalise_notes(np.zeros_like(notes))

	return _normalise_notes(np.exp(scaled - peak))


def combine (p0: np.ndarray, p1: np.ndarray, temperature: float = solonet.constants.DEFAULT_TEMPERATURE) -> Combination:

	"""Multiply two absolute-space distributions and re-bias the result.

	Steps:
		1. Rest and sustain are multiplied across experts.
		2. Note slots are multiplied and normalised among themselves.
		3. Temperature is applied to the notes only.
		4. Notes are weighted by ``1 - min(rest + 0.3 * sustain, 0.4)``.
		5. Rest is halved and sustain scaled by 0.15.
		6. Everything is normalised to sum 1.

	If the final sum is zero or not finite the step falls back to a uniform
	choice among notes and the result is flagged ``degenerate``.
	"""

	if p0.shape != (solonet.constants.ABSOLUTE_SIZE,) or p1.shape != (solonet.constants.ABSOLUTE_SIZE,):
		raise ValueError(f"expert distributions must have {solonet.constants.ABSOLUTE_SIZE} entries")

	rest = p0[solonet.constants.REST_INDEX] * p1[solonet.constants.REST_INDEX]
	sustain = p0[solonet.constants.SUSTAIN_INDEX] * p1[solonet.constants.SUSTAIN_INDEX]

	notes = _normalise_notes(p0[_NOTES] * p1[_NOTES])
	notes = apply_temperature(notes, temperature)

	articulation = rest + solonet.constants.SUSTAIN_ARTICULATION_WEIGHT * sustain
	note_weight = 1.0 - min(articulation, solonet.constants.MAX_ARTICULATION_MASS)

	final = np.empty(solonet.constants.ABSOLUTE_SIZE)
	final[solonet.constants.REST_INDEX] = solonet.constants.REST_SCALE * rest
	final[solonet.constants.SUSTAIN_INDEX] = solonet.constants.SUSTAIN_SCALE * sustain
	final[_NOTES] = notes * note_weight

	total = final.sum()

	if not np.isfinite(total) or total <= 0.0:
		logger.warning(f"Combined distribution sums to {total}; sampling uniformly among notes")
		fallback = np.zeros(solonet.constants.ABSOLUTE_SIZE)
		fallback[_NOTES] = 1.0 / solonet.constants.PITCH_RANGE
		return Combination(distribution=fallback, degenerate=True)

	return Combination(distribution=final / total)


def sample_index (distribution: np.ndarray, rng: random.Random) -> int:

	"""
	Inverse-CDF sample: the first slot whose cumulative mass exceeds a uniform draw.
	"""

	cumulative = np.cumsum(distribution)
	roll = rng.random()
	index = int(np.searchsorted(cumulative, roll, side="right"))

	# Rounding can leave the last cumulative value a hair under the draw.
	if index >= len(distribution):
		index = int(np.flatnonzero(distribution)[-1])

	return index
