"""Diatonic chord progressions from a fixed functional-harmony Markov chain.

Six major-key chords take part, ordered ``I, V, IV, vi, iii, ii``. Each row
of :data:`CHORD_TRANSITIONS` gives the percentage chance of moving to every
other chord; the numbers are fixed, not learned.

A sampled progression starts on I and ends as soon as it comes home to I.
Progressions that wander for ten chords are closed with a forced I.
"""

import logging
import random
import typing

import fractalscore.chords
import fractalscore.intervals
import fractalscore.markov_chain


logger = logging.getLogger(__name__)


CHORD_DEGREES: typing.List[str] = ["I", "V", "IV", "vi", "iii", "ii"]

TONIC = 0

# Zero-based major-scale degree each chord is built on.
CHORD_SCALE_DEGREES: typing.List[int] = [0, 4, 3, 5, 2, 1]

# Row = current chord, column = next chord, in CHORD_DEGREES order. Each row sums to 100.
CHORD_TRANSITIONS: typing.List[typing.List[int]] = [
	#  I   V  IV  vi iii  ii
	[  0, 25, 30, 25, 10, 10],	# I
	[ 60,  0,  5, 25,  5,  5],	# V
	[ 25, 40,  0,  5,  5, 25],	# IV
	[ 10, 15, 35,  0, 10, 30],	# vi
	[  5, 10, 25, 50,  0, 10],	# iii
	[ 10, 65, 10,  5, 10,  0],	# ii
]

MAX_PROGRESSION_LENGTH = 10


class ChordProgressionSampler:

	"""
	Samples functional-harmony progressions and hands them out one chord at a time.
	"""

	def __init__ (self, rng: typing.Optional[random.Random] = None, max_length: int = MAX_PROGRESSION_LENGTH) -> None:

		"""
		Initialize the sampler.

		Parameters:
			rng: Random source. A fresh ``random.Random`` is used when omitted.
			max_length: Length at which a progression is closed with a forced I.
		"""

		if max_length < 2:
			raise ValueError("Progressions need room for at least two chords")

		self.rng = rng or random.Random()
		self.max_length = max_length
		self.chain = fractalscore.markov_chain.MarkovChain.from_matrix(CHORD_TRANSITIONS, rng=self.rng)
		self.progression: typing.List[int] = []
		self.position = 0
		self.current = TONIC


	def sample (self) -> typing.List[int]:

		"""Sample one progression of chord indices into :data:`CHORD_DEGREES`.

		The result starts and ends on I (index 0) and holds between 2 and
		``max_length + 1`` chords.

		Example:
			```python
			sampler = ChordProgressionSampler(rng=random.Random(3))
			[CHORD_DEGREES[i] for i in sampler.sample()]  # e.g. ['I', 'IV', 'V', 'I']
			```
		"""

		self.chain.reset()
		progression = [TONIC]

		while True:

			chord = self.chain.step()
			progression.append(chord)

			if chord == TONIC and any(c != TONIC for c in progression):
				break

			if len(progression) >= self.max_length:
				progression.append(TONIC)
				break

		logger.debug(f"Sampled progression: {' '.join(CHORD_DEGREES[i] for i in progression)}")

		return progression


	def next_chord (self) -> int:

		"""
		Return the next chord of the running progression, sampling a new one when it runs out.

		Consecutive progressions share their boundary tonic, so it is not repeated.
		"""

		if self.position >= len(self.progression):
			continuing = bool(self.progression)
			self.progression = self.sample()
			self.position = 1 if continuing else 0

		self.current = self.progression[self.position]
		self.position += 1

		return self.current


	def reset (self) -> None:

		"""
		Forget the running progression.
		"""

		self.progression = []
		self.position = 0
		self.current = TONIC
		self.chain.reset()


def chord_for (index: int, key_pc: int) -> fractalscore.chords.Chord:

	"""Return the triad for chord ``index`` in the major key on ``key_pc``.

	Example:
		```python
		chord_for(1, 0).name()   # 'G'  (V in C)
		chord_for(3, 0).name()   # 'Am' (vi in C)
		```
	"""

	if index < 0 or index >= len(CHORD_DEGREES):
		raise ValueError(f"Unknown chord index {index}")

	scale_degree = CHORD_SCALE_DEGREES[index]
	root_pc = (key_pc + fractalscore.intervals.MAJOR_SCALE[scale_degree]) % 12
	quality = fractalscore.intervals.IONIAN_QUALITIES[scale_degree]

	return fractalscore.chords.Chord(root_pc=root_pc, quality=quality)


def triad (index: int, key_pc: int, reference: int, low: int, high: int) -> typing.List[int]:

	"""
	Return root, third and fifth of chord ``index`` near ``reference``, each octave-clamped into range.
	"""

	chord = chord_for(index, key_pc)

	return [fractalscore.intervals.clamp_octave(tone, low, high) for tone in chord.tones(reference)]
