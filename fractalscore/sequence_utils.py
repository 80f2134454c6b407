import typing


PULSE_SYMBOL = "x"
PAUSE_SYMBOL = "."


def generate_euclidean_sequence (steps: int, pulses: int) -> typing.List[int]:

	"""
	Generate the classic Bjorklund listing of E(pulses, steps), starting on a pulse.

	Out-of-range pulse counts are clamped to ``[0, steps]`` rather than rejected.
	"""

	if steps <= 0:
		return []

	pulses = max(0, min(pulses, steps))

	if pulses == 0:
		return [0] * steps

	if pulses == steps:
		return [1] * steps

	sequence: typing.List[int] = []
	counts: typing.List[int] = []
	remainders = [pulses]
	divisor = steps - pulses
	level = 0

	while True:
		counts.append(divisor // remainders[level])
		remainders.append(divisor % remainders[level])
		divisor = remainders[level]
		level += 1
		if remainders[level] <= 1:
			break

	counts.append(divisor)

	def build (level: int) -> None:
		if level == -1:
			sequence.append(0)
		elif level == -2:
			sequence.append(1)
		else:
			for _ in range(counts[level]):
				build(level - 1)
			if remainders[level] != 0:
				build(level - 2)

	build(level)
	i = sequence.index(1)
	return sequence[i:] + sequence[:i]


def rhythm_to_string (rhythm: typing.Sequence[typing.Union[bool, int]]) -> str:

	"""Render a rhythm as space-separated ``x`` (pulse) and ``.`` (pause) tokens."""

	return " ".join(PULSE_SYMBOL if step else PAUSE_SYMBOL for step in rhythm)


def parse_rhythm_string (text: str) -> typing.List[bool]:

	"""
	Parse an ``x . . x`` style rhythm string into booleans.

	Whitespace between steps is optional, so ``"x..x"`` parses the same way.
	"""

	rhythm: typing.List[bool] = []

	for char in text:

		if char.isspace():
			continue

		if char in (PULSE_SYMBOL, PULSE_SYMBOL.upper()):
			rhythm.append(True)

		elif char == PAUSE_SYMBOL:
			rhythm.append(False)

		else:
			raise ValueError(f"Unexpected rhythm symbol {char!r} in {text!r}")

	return rhythm


def normalize_rhythm_string (text: str) -> str:

	"""Return the canonical spaced form of a rhythm string."""

	return rhythm_to_string(parse_rhythm_string(text))


def sequence_to_indices (sequence: typing.Sequence[typing.Union[bool, int]]) -> typing.List[int]:

	"""Extract step indices where hits occur in a binary sequence."""

	return [i for i, v in enumerate(sequence) if v]


def generate_legato_durations (hits: typing.Sequence[typing.Union[bool, int]]) -> typing.List[int]:

	"""
	Convert a hit list into per-step legato durations.

	Each hit lasts until the next hit (or the end of the list); non-hit steps
	get zero.
	"""

	if not hits:
		return []

	note_on_indices = [idx for idx, hit in enumerate(hits) if hit]
	note_on_indices.append(len(hits))

	durations = [0] * len(hits)

	for idx, next_idx in zip(note_on_indices[:-1], note_on_indices[1:]):
		durations[idx] = max(1, next_idx - idx)

	return durations


def inter_onset_gaps (rhythm: typing.Sequence[typing.Union[bool, int]]) -> typing.List[int]:

	"""
	Return the cyclic distances between consecutive pulses.

	The last gap wraps around to the first pulse, so a pattern with a single
	pulse has one gap equal to its length.
	"""

	onsets = sequence_to_indices(rhythm)

	if not onsets:
		return []

	length = len(rhythm)
	wrapped = onsets[1:] + [onsets[0] + length]

	return [b - a for a, b in zip(onsets, wrapped)]
