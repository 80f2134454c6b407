"""Euclidean rhythms built by bucket filling.

A Euclidean rhythm places ``pulses`` onsets among ``steps`` positions as evenly
as possible: no two inter-onset gaps differ by more than one step.

:class:`EuclideanRhythm` builds the pattern the way a bucket is filled - each
pulse is followed by ``q = pauses // pulses`` pauses, and ``pauses % pulses``
of the groups receive one extra pause, spread out by a second modular pass.
When pulses outnumber pauses the two roles are swapped for the arithmetic and
the result is inverted.

The finished pattern is phase-aligned to the classic Bjorklund listing (the
one found in Toussaint's paper) whenever that listing is one of its rotations,
so ``EuclideanRhythm(3, 8)`` reads ``x . . x . . x .`` (the tresillo).
"""

import logging
import typing

import fractalscore.sequence_utils


logger = logging.getLogger(__name__)


def bucket_fill (pulses: int, steps: int) -> typing.List[bool]:

	"""Distribute ``pulses`` among ``steps`` with the bucket rule.

	Degenerate input degrades instead of raising: no steps gives an empty list,
	no pulses gives all pauses, and pulses at or above ``steps`` give all pulses.

	Example:
		```python
		bucket_fill(3, 8)  # x . . x . x . .
		bucket_fill(5, 8)  # . x x . x . x x
		```
	"""

	if steps <= 0:
		return []

	pulses = max(0, min(pulses, steps))

	if pulses == 0:
		return [False] * steps

	if pulses == steps:
		return [True] * steps

	pauses = steps - pulses
	inverted = pulses > pauses

	if inverted:
		pulses, pauses = pauses, pulses

	per_pulse = pauses // pulses
	remainder = pauses % pulses
	no_skip = pulses // remainder if remainder else 0
	skip_times = (pulses - remainder) // no_skip if no_skip else 0

	rhythm: typing.List[bool] = []
	count = 0
	skipper = 0

	for _ in range(steps):

		if count == 0:
			rhythm.append(not inverted)
			count = per_pulse

			# Second-level distribution: one extra pause for this group, then skip a few groups.
			if remainder > 0 and skipper == 0:
				count += 1
				remainder -= 1
				skipper = no_skip if skip_times > 0 else 0
				skip_times -= 1

			else:
				skipper -= 1

		else:
			rhythm.append(inverted)
			count -= 1

	return rhythm


class EuclideanRhythm:

	"""
	A rotatable Euclidean pulse pattern.
	"""

	def __init__ (self, pulses: int, steps: int, expected: typing.Optional[str] = None) -> None:

		"""Build E(pulses, steps) and optionally rotate it to a reference pattern.

		Parameters:
			pulses: Number of onsets. Clamped into ``[0, steps]``.
			steps: Total number of positions. Zero or less gives an empty pattern.
			expected: Optional ``x . . x`` string to auto-rotate to
				(see :meth:`match_to_reference`).
		"""

		self.steps = max(0, steps)
		self.pulses = max(0, min(pulses, self.steps))
		self.rhythm: typing.List[bool] = bucket_fill(self.pulses, self.steps)

		reference = fractalscore.sequence_utils.generate_euclidean_sequence(self.steps, self.pulses)
		self._rotate_to(fractalscore.sequence_utils.rhythm_to_string(reference))

		if expected is not None:
			self.match_to_reference(expected)


	def __len__ (self) -> int:

		return len(self.rhythm)


	def __iter__ (self) -> typing.Iterator[bool]:

		return iter(self.rhythm)


	def __str__ (self) -> str:

		return fractalscore.sequence_utils.rhythm_to_string(self.rhythm)


	def __repr__ (self) -> str:

		return f"EuclideanRhythm(pulses={self.pulses}, steps={self.steps}, rhythm={str(self)!r})"


	def rotate_by_bits (self, count: int) -> None:

		"""
		Rotate the whole pattern right by ``count`` positions (negative rotates left).
		"""

		if not self.rhythm:
			return

		shift = count % len(self.rhythm)

		if shift:
			self.rhythm = self.rhythm[-shift:] + self.rhythm[:-shift]


	def rotate_by_pulse_groups (self, count: int) -> None:

		"""
		Rotate right by whole pulse groups.

		A pulse group is a pulse plus the pauses trailing it. Each rotation moves
		the final group of the pattern to the front, so a rotated pattern always
		starts on a pulse.
		"""

		if self.pulses == 0:
			return

		for _ in range(count):
			last_pulse = len(self.rhythm) - 1 - self.rhythm[::-1].index(True)
			self.rotate_by_bits(len(self.rhythm) - last_pulse)


	def match_to_reference (self, expected: str) -> bool:

		"""Rotate by pulse groups until the pattern reads as ``expected``.

		Parameters:
			expected: Pattern such as ``"x . . x . x . . x . x . ."``. Spacing is
				optional.

		Returns:
			``True`` when a matching rotation was found. On failure the pattern
			keeps the last rotation tried and a warning is logged.
		"""

		target = fractalscore.sequence_utils.normalize_rhythm_string(expected)

		if self._rotate_to(target):
			return True

		logger.warning(f"Rhythm '{target}' cannot be generated from E({self.pulses},{self.steps})")

		return False


	def _rotate_to (self, target: str) -> bool:

		"""Try every pulse-group rotation against an already normalised target."""

		if str(self) == target:
			return True

		for _ in range(self.pulses):

			self.rotate_by_pulse_groups(1)

			if str(self) == target:
				return True

		return False


	def onsets (self) -> typing.List[int]:

		"""Return the step indices of every pulse."""

		return fractalscore.sequence_utils.sequence_to_indices(self.rhythm)


	def gaps (self) -> typing.List[int]:

		"""Return the cyclic inter-onset gaps."""

		return fractalscore.sequence_utils.inter_onset_gaps(self.rhythm)


	def durations (self) -> typing.List[int]:

		"""Return the length in steps of each pulse group, in pattern order.

		Pauses before the first pulse belong cyclically to the final group, so
		the durations always sum to ``steps`` (or are empty with no pulses).
		"""

		if self.pulses == 0:
			return []

		lead = self.rhythm.index(True)
		rotated = self.rhythm[lead:] + self.rhythm[:lead]

		return [d for d in fractalscore.sequence_utils.generate_legato_durations(rotated) if d]
