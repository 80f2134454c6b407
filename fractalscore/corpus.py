"""Markov transition tables learned from a corpus of reference melodies.

:class:`CorpusModel` counts how often each pitch class follows another
(order 1) and how often it follows a pair of pitch classes (order 2) across
the melodies filed under the active key, then normalises every row into
probabilities. Rows for pitch classes that never led anywhere stay all-zero;
sampling such a row yields ``None``, meaning the corpus has no preference.

Melodies can be given as pitch classes, MIDI note numbers, note names, or a
music string in the same token format the composer writes::

    corpus = {
        "C": ["C5q D5q E5q C5q", [60, 62, 64, 65, 67]],
        "G": [["G", "A", "B", "G"]],
    }
    model = CorpusModel(corpus, key="C", order=2)
    model.sample_next(current=2, previous=0, rng=random.Random(1))
"""

import logging
import random
import re
import typing

import fractalscore.chords
import fractalscore.markov_chain


logger = logging.getLogger(__name__)


PITCH_CLASSES = 12

Melody = typing.Union[str, typing.Sequence[typing.Union[int, str]]]

_NOTE_NAME = re.compile(r"^([A-G])([#b]*)")
_NUMERIC_NOTE = re.compile(r"^\[(\d+)\]")

_NATURALS: typing.Dict[str, int] = {
	name: pc for name, pc in fractalscore.chords.NOTE_NAME_TO_PC.items() if len(name) == 1
}


def pitch_class (token: typing.Union[int, str]) -> int:

	"""Resolve a note to its pitch class (0-11).

	Integers are MIDI numbers or pitch classes and are taken mod 12. Strings
	are a note letter followed by any number of ``#`` / ``b`` accidentals;
	an octave number or duration suffix after that is ignored.

	Example:
		```python
		pitch_class("Db")    # → 1
		pitch_class("B#")    # → 0
		pitch_class("F#5q")  # → 6
		pitch_class(67)      # → 7
		```
	"""

	if isinstance(token, bool):
		raise ValueError(f"Not a note: {token!r}")

	if isinstance(token, int):
		return token % PITCH_CLASSES

	match = _NOTE_NAME.match(token.strip())

	if not match:
		raise ValueError(f"Not a note name: {token!r}")

	letter, accidentals = match.groups()
	offset = accidentals.count("#") - accidentals.count("b")

	return (_NATURALS[letter] + offset) % PITCH_CLASSES


def parse_melody (text: str) -> typing.List[int]:

	"""
	Extract the pitch classes of a whitespace-delimited music string.

	Note names (``C#5q``) and numeric notes (``[61]q``) are read; rests,
	voice, layer, instrument, tempo and control tokens are skipped. For a
	harmony token such as ``C5q+E5q`` only the first note counts.
	"""

	pitches: typing.List[int] = []

	for token in text.split():

		numeric = _NUMERIC_NOTE.match(token)

		if numeric:
			pitches.append(int(numeric.group(1)) % PITCH_CLASSES)
			continue

		if _NOTE_NAME.match(token):
			pitches.append(pitch_class(token))

	return pitches


def melody_pitch_classes (melody: Melody) -> typing.List[int]:

	"""Normalise any supported melody form to a list of pitch classes."""

	if isinstance(melody, str):
		return parse_melody(melody)

	return [pitch_class(note) for note in melody]


def _key_pc (key: typing.Union[int, str]) -> int:

	if isinstance(key, int):
		return key % PITCH_CLASSES

	return fractalscore.chords.key_name_to_pc(key)


def _normalize (row: typing.List[float]) -> typing.List[float]:

	total = sum(row)

	if total <= 0:
		return [0.0] * len(row)

	return [count / total for count in row]


class CorpusModel:

	"""
	Order-1 and order-2 pitch-class transition tables for one key of a corpus.
	"""

	def __init__ (
		self,
		corpus: typing.Mapping[typing.Union[int, str], typing.Sequence[Melody]],
		key: typing.Union[int, str] = "C",
		order: int = 1
	) -> None:

		"""
		Store the corpus and analyse the melodies filed under ``key``.

		Parameters:
			corpus: Mapping of key (name such as ``"Eb"`` or pitch class) to melodies.
			key: Active key; only its melodies are analysed.
			order: ``1`` to sample from single-note history, ``2`` to prefer the
				two-note table when it has data.
		"""

		if order not in (1, 2):
			raise ValueError(f"Markov order must be 1 or 2, got {order}")

		self.order = order
		self.melodies: typing.Dict[int, typing.List[typing.List[int]]] = {}

		for corpus_key, melodies in corpus.items():
			bucket = self.melodies.setdefault(_key_pc(corpus_key), [])
			bucket.extend(melody_pitch_classes(melody) for melody in melodies)

		self.key_pc = _key_pc(key)
		self.table: typing.List[typing.List[float]] = []
		self.table2: typing.List[typing.List[typing.List[float]]] = []
		self.observations = 0

		self.analyze()


	@property
	def is_empty (self) -> bool:

		return self.observations == 0


	def analyze (self) -> None:

		"""
		Rebuild both transition tables from the melodies of the active key.
		"""

		counts = [[0.0] * PITCH_CLASSES for _ in range(PITCH_CLASSES)]
		counts2 = [[[0.0] * PITCH_CLASSES for _ in range(PITCH_CLASSES)] for _ in range(PITCH_CLASSES)]
		observations = 0

		melodies = self.melodies.get(self.key_pc, [])

		if not melodies:
			logger.warning(f"Corpus has no melodies in {fractalscore.chords.PC_TO_NOTE_NAME[self.key_pc]}")

		for melody in melodies:

			# History never carries across melodies.
			previous: typing.Optional[int] = None
			before_previous: typing.Optional[int] = None

			for current in melody:

				if previous is not None:
					counts[previous][current] += 1
					observations += 1

					if before_previous is not None:
						counts2[before_previous][previous][current] += 1

				before_previous, previous = previous, current

		self.table = [_normalize(row) for row in counts]
		self.table2 = [[_normalize(row) for row in plane] for plane in counts2]
		self.observations = observations

		logger.debug(f"Analyzed {len(melodies)} melodies ({observations} transitions) in key pc {self.key_pc}")


	def set_key (self, key: typing.Union[int, str]) -> bool:

		"""
		Switch the active key, re-analysing only if it actually changed.

		Returns:
			Whether a re-analysis took place.
		"""

		key_pc = _key_pc(key)

		if key_pc == self.key_pc:
			return False

		logger.info(f"Corpus key changed to {fractalscore.chords.PC_TO_NOTE_NAME[key_pc]}; re-analyzing")

		self.key_pc = key_pc
		self.analyze()

		return True


	def probabilities (self, current: int, previous: typing.Optional[int] = None) -> typing.List[float]:

		"""
		Return the transition row used after ``current`` (and ``previous``).

		The order-2 row wins when the model is order 2, the earlier pitch class
		is known, and that row has observations. Otherwise the order-1 row is
		used.
		"""

		if self.order == 2 and previous is not None and previous >= 0:
			row = self.table2[previous % PITCH_CLASSES][current % PITCH_CLASSES]
			if any(row):
				return row

		return self.table[current % PITCH_CLASSES]


	def sample_next (self, current: int, previous: typing.Optional[int], rng: random.Random) -> typing.Optional[int]:

		"""Draw the next pitch class.

		Parameters:
			current: Current pitch class, or ``-1`` when no note has sounded yet.
			previous: Pitch class before ``current`` (``None`` or ``-1`` if unknown).
			rng: Random source.

		Returns:
			A pitch class, or ``None`` when there is no note to continue from or
			the corpus row is all-zero.
		"""

		if current is None or current < 0:
			return None

		return fractalscore.markov_chain.choose_from_row(self.probabilities(current, previous), rng)
