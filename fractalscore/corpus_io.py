"""Read reference melodies for :class:`~fractalscore.corpus.CorpusModel`.

A corpus is a mapping of key name to melodies. It can be written inline (for
example in the ``corpus:`` section of ``config.yaml``)::

    corpus:
      C:
        - "C5q D5q E5q G5h"
        - "[60]q [64]q [67]q"
      G: "G4q A4q B4q G4q"

or read from a directory with one sub-directory per key, holding standard
MIDI files (``.mid`` / ``.midi``) or music strings (``.txt``)::

    corpus/
      C/bach_invention.mid
      G/folk.txt

Both forms can be combined with ``path:`` inside the inline mapping.
"""

import logging
import os
import typing

import mido

import fractalscore.chords


logger = logging.getLogger(__name__)


MIDI_EXTENSIONS = (".mid", ".midi")
TEXT_EXTENSIONS = (".txt",)

Corpus = typing.Dict[str, typing.List[typing.Union[str, typing.List[int]]]]


def melody_from_midi (path: str) -> typing.List[int]:

	"""
	Return the MIDI note numbers of every note onset in a MIDI file, in time order.

	All tracks are merged first, so a multi-track file yields one interleaved line.
	"""

	midi_file = mido.MidiFile(path)
	notes: typing.List[int] = []

	for message in mido.merge_tracks(midi_file.tracks):
		if message.type == "note_on" and message.velocity > 0:
			notes.append(message.note)

	logger.debug(f"Read {len(notes)} notes from {path}")

	return notes


def _melodies (value: typing.Any) -> typing.List[typing.Union[str, typing.List[int]]]:

	"""Accept a single music string or a list of melodies."""

	if value is None:
		return []

	if isinstance(value, str):
		return [value]

	return [melody if isinstance(melody, str) else list(melody) for melody in value]


def load_corpus_directory (directory: str) -> Corpus:

	"""
	Read every melody file below ``directory``, filed by the key named by its sub-directory.

	Sub-directories that are not key names are skipped with a warning.
	"""

	if not os.path.isdir(directory):
		raise FileNotFoundError(f"Corpus directory not found: {directory}")

	corpus: Corpus = {}

	for key_name in sorted(os.listdir(directory)):

		key_dir = os.path.join(directory, key_name)

		if not os.path.isdir(key_dir):
			continue

		if key_name not in fractalscore.chords.NOTE_NAME_TO_PC:
			logger.warning(f"Skipping corpus folder {key_dir}: {key_name!r} is not a key name")
			continue

		melodies = corpus.setdefault(key_name, [])

		for filename in sorted(os.listdir(key_dir)):

			file_path = os.path.join(key_dir, filename)
			extension = os.path.splitext(filename)[1].lower()

			if extension in MIDI_EXTENSIONS:
				melodies.append(melody_from_midi(file_path))

			elif extension in TEXT_EXTENSIONS:
				with open(file_path, "r") as f:
					melodies.append(f.read())

	logger.info(f"Loaded corpus from {directory}: " + ", ".join(f"{key} ({len(items)})" for key, items in corpus.items()))

	return corpus


def load_corpus (source: typing.Union[str, typing.Mapping[str, typing.Any], None]) -> Corpus:

	"""Build a corpus mapping from a directory path or an inline mapping.

	Parameters:
		source: A directory path, an inline ``key -> melodies`` mapping (which may
			also name a directory under ``path``), or ``None`` for an empty corpus.

	Example:
		```python
		load_corpus({"C": "C5q E5q G5q"})        # {'C': ['C5q E5q G5q']}
		load_corpus("corpus/")                   # melodies read from corpus/<key>/*
		```
	"""

	if source is None:
		return {}

	if isinstance(source, (str, os.PathLike)):
		return load_corpus_directory(os.fspath(source))

	corpus: Corpus = {}
	inline = dict(source)
	directory = inline.pop("path", None)

	if directory:
		corpus.update(load_corpus_directory(directory))

	for key_name, value in inline.items():
		key_name = str(key_name)
		fractalscore.chords.key_name_to_pc(key_name)
		corpus.setdefault(key_name, []).extend(_melodies(value))

	return corpus
