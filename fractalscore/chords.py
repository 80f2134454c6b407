"""Chord definitions and pitch class utilities.

This module provides chord quality definitions, pitch class mappings, and the `Chord` class
used for the harmonic support the composer adds to a score.

Module-level constants:
- `NOTE_NAME_TO_PC`: Maps note names (e.g., `"C"`, `"F#"`, `"Bb"`) to pitch classes (0-11)
- `PC_TO_NOTE_NAME`: Maps pitch classes to note names
- `CHORD_INTERVALS`: Maps chord quality names to interval lists (semitones from root)
- `CHORD_SUFFIX`: Maps chord quality names to human-readable suffixes (e.g., `"m"`, `"dim"`)

Module-level helpers:
- `key_name_to_pc(key_name)`: Validate a key name and return its pitch class (0–11).
"""

import dataclasses
import typing

import fractalscore.intervals


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
	"C#",
	"D",
	"D#",
	"E",
	"F",
	"F#",
	"G",
	"G#",
	"A",
	"A#",
	"B",
]


def key_name_to_pc (key_name: str) -> int:

	"""Validate a key name and return its pitch class (0–11).

	Parameters:
		key_name: Note name (e.g. ``"C"``, ``"F#"``, ``"Bb"``).

	Raises:
		ValueError: If the key name is not recognised.

	Example:
		```python
		key_name_to_pc("C")   # → 0
		key_name_to_pc("Bb")  # → 10
		```
	"""

	if key_name not in NOTE_NAME_TO_PC:
		raise ValueError(
			f"Unknown key name: {key_name!r}. Expected e.g. 'C', 'F#', 'Bb'."
		)

	return NOTE_NAME_TO_PC[key_name]


CHORD_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"major": [0, 4, 7],
	"minor": [0, 3, 7],
	"diminished": [0, 3, 6],
}

CHORD_SUFFIX: typing.Dict[str, str] = {
	"major": "",
	"minor": "m",
	"diminished": "dim",
}


@dataclasses.dataclass(frozen=True)
class Chord:

	"""
	Represents a chord as a root pitch class and quality.
	"""

	root_pc: int
	quality: str


	def intervals (self) -> typing.List[int]:

		"""
		Return the chord intervals for this chord quality.
		"""

		if self.quality not in CHORD_INTERVALS:
			raise ValueError(f"Unknown chord quality: {self.quality}")

		return CHORD_INTERVALS[self.quality]


	def tones (self, root: int) -> typing.List[int]:

		"""Return MIDI note numbers for the chord built on the root nearest ``root``.

		Example:
			```python
			chord = Chord(root_pc=0, quality="major")  # C major
			chord.tones(root=60)               # [60, 64, 67]
			chord.tones(root=70)               # [72, 76, 79]
			```
		"""

		effective_root = fractalscore.intervals.nearest_pitch(root, self.root_pc)

		return [effective_root + interval for interval in self.intervals()]


	def name (self) -> str:

		"""
		Return a human-friendly chord name.
		"""

		root_name = PC_TO_NOTE_NAME[self.root_pc % 12]
		suffix = CHORD_SUFFIX.get(self.quality, "")

		return f"{root_name}{suffix}"
