"""The symbolic score produced by a composition pass.

A score is an ordered list of whitespace-delimited tokens::

    T120 V0 I80 [48]ii [50]i Ri | X1=20 L1 [55]q+[59]q+[62]q

``T`` sets the tempo, ``V`` / ``L`` select a voice / layer, ``I`` an
instrument, ``[pitch]codes`` is a note, ``Rcodes`` a rest, ``|`` a measure
boundary and ``X1=value`` a controller change. Harmony notes are joined with
``+``. Duration codes are described in :mod:`fractalscore.constants.durations`.

Besides the tokens the score carries the musical context the composer reads
and updates while it walks a production: key, tempo, the current and previous
pitch class, the scale degree, the active voice / layer counts and the beat.
"""

import re
import typing

import fractalscore.chords
import fractalscore.constants.durations


# Key signatures in circle-of-fifths order; key index 1 is C, 2 is G and so on.
KEY_SIGNATURES: typing.List[str] = ["C", "G", "D", "A", "E", "B", "F#", "Db", "Ab", "Eb", "Bb", "F"]

TONIC_OCTAVE_BASE = 48
MAX_VOICES = 16
MAX_LAYERS = 16
BEATS_PER_MEASURE = 4
DEFAULT_INSTRUMENT = 80
DEFAULT_TEMPO = 120

MEASURE_MARKER = "|"

NOTE_TOKEN = re.compile(r"^\[(\d+)\]([oxtsiqhw]+)$")
REST_TOKEN = re.compile(r"^R([oxtsiqhw]+)$")


def key_index (key: typing.Union[int, str]) -> int:

	"""Return the 1-based key signature index for an index or a key name.

	Example:
		```python
		key_index(2)      # → 2  (G)
		key_index("Eb")   # → 10
		key_index("D#")   # → 10 (enharmonic of Eb)
		```
	"""

	if isinstance(key, int):

		if key < 1 or key > len(KEY_SIGNATURES):
			raise ValueError(f"Key index must be between 1 and {len(KEY_SIGNATURES)}, got {key}")

		return key

	key_pc = fractalscore.chords.key_name_to_pc(key)

	for index, name in enumerate(KEY_SIGNATURES, start=1):
		if fractalscore.chords.NOTE_NAME_TO_PC[name] == key_pc:
			return index

	raise ValueError(f"Unknown key: {key!r}")


def tonic_pitch (key: typing.Union[int, str]) -> int:

	"""
	Return the starting MIDI pitch for a key (the tonic in the octave from C3).
	"""

	name = KEY_SIGNATURES[key_index(key) - 1]

	return TONIC_OCTAVE_BASE + fractalscore.chords.NOTE_NAME_TO_PC[name]


def note_token (pitch: int, units: int) -> str:

	return f"[{pitch}]{fractalscore.constants.durations.duration_code(units)}"


def harmony_token (pitches: typing.Sequence[int], units: int) -> str:

	"""Join simultaneous notes of equal length into one ``+`` token."""

	return "+".join(note_token(pitch, units) for pitch in pitches)


class Score:

	"""
	Musical context and token buffer for one composition.
	"""

	def __init__ (self, key: typing.Union[int, str] = 1, tempo: int = DEFAULT_TEMPO, instrument: int = DEFAULT_INSTRUMENT) -> None:

		"""
		Initialize an empty score.

		Parameters:
			key: Key signature index (1-12, circle of fifths from C) or key name.
			tempo: Beats per minute.
			instrument: Instrument number written after every voice marker.
		"""

		self.key = key_index(key)
		self.set_tempo(tempo)
		self.instrument = instrument

		self.tokens: typing.List[str] = []
		self.note = -1
		self.prev_note = -1
		self.degree = 1.0
		self.voices = 1
		self.layers = 1
		self.beat = 1
		self.position = 0
		self.events = 0


	@property
	def key_name (self) -> str:

		return KEY_SIGNATURES[self.key - 1]


	@property
	def key_pc (self) -> int:

		return fractalscore.chords.NOTE_NAME_TO_PC[self.key_name]


	@property
	def tonic (self) -> int:

		return tonic_pitch(self.key)


	def set_key (self, key: typing.Union[int, str]) -> bool:

		"""
		Change the key signature. Returns whether the key actually changed.
		"""

		new_key = key_index(key)

		if new_key == self.key:
			return False

		self.key = new_key

		return True


	def set_tempo (self, tempo: int) -> None:

		if tempo <= 0:
			raise ValueError(f"Tempo must be positive, got {tempo}")

		self.tempo = tempo


	def set_voices (self, voices: int) -> None:

		"""Set the active voice count; values outside 1-16 are ignored."""

		if 0 < voices <= MAX_VOICES:
			self.voices = voices


	def set_layers (self, layers: int) -> None:

		"""Set the active layer count; values outside 1-16 are ignored."""

		if 0 < layers <= MAX_LAYERS:
			self.layers = layers


	def set_note (self, note: int) -> None:

		"""
		Record a new current pitch class; the old one becomes the previous note.
		"""

		self.prev_note = self.note
		self.note = note % 12 if note >= 0 else -1


	def next_beat (self) -> None:

		"""Advance the beat counter, wrapping after the last beat of the measure."""

		if self.beat < BEATS_PER_MEASURE:
			self.beat += 1
		else:
			self.beat = 1


	def reset (self) -> None:

		"""
		Clear tokens and context in preparation for new music.
		"""

		self.tokens = []
		self.voices = 1
		self.layers = 1
		self.degree = 1.0
		self.beat = 1
		self.note = -1
		self.prev_note = -1
		self.position = 0
		self.events = 0


	def begin (self) -> None:

		"""
		Reset and write the tempo, first voice and instrument markers.
		"""

		self.reset()
		self.tokens.extend([f"T{self.tempo}", "V0", f"I{self.instrument}"])


	def append (self, token: str) -> None:

		self.tokens.append(token)


	def add_note (self, pitch: int, units: int, extend: bool = False) -> None:

		"""
		Append a note, or lengthen the previous note when ``extend`` is set and it has the same pitch.
		"""

		code = fractalscore.constants.durations.duration_code(units)
		last = NOTE_TOKEN.match(self.tokens[-1]) if self.tokens else None

		if extend and last and int(last.group(1)) == pitch:
			self.tokens[-1] += code

		else:
			self.tokens.append(f"[{pitch}]{code}")

		self.events += 1


	def add_rest (self, units: int, merge: bool = True) -> None:

		"""
		Append a rest, merging into a directly preceding rest when ``merge`` is set.

		A merged rest is re-encoded from its total length, so four quarter rests read ``Rw``.
		"""

		last = REST_TOKEN.match(self.tokens[-1]) if merge and self.tokens else None

		if last:
			units += fractalscore.constants.durations.code_units(last.group(1))
			self.tokens[-1] = fractalscore.constants.durations.rest_code(units)

		else:
			self.tokens.append(fractalscore.constants.durations.rest_code(units))


	def add_harmony (self, pitches: typing.Sequence[int], units: int) -> None:

		"""
		Append simultaneous notes that start and end together.
		"""

		if not pitches:
			self.add_rest(units)
			return

		self.tokens.append(harmony_token(pitches, units))
		self.events += 1


	def note_count (self) -> int:

		"""Number of sounding events written (notes, extensions and chords)."""

		return self.events


	def to_string (self) -> str:

		return " ".join(self.tokens)


	def __str__ (self) -> str:

		return self.to_string()
