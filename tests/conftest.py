import os
import typing

import mido
import pytest


@pytest.fixture
def scale_corpus () -> typing.Dict[str, typing.List[str]]:

	"""A corpus whose C major melody walks the scale, so every row has one successor."""

	return {
		"C": ["C4q D4q E4q F4q G4q A4q B4q C5q"],
		"G": ["G4q A4q B4q G4q"],
	}


@pytest.fixture
def write_midi (tmp_path: typing.Any) -> typing.Callable[..., str]:

	"""Return a helper that writes a one-track MIDI file of quarter notes and returns its path."""

	def _write (notes: typing.List[int], relative_path: str = "melody.mid") -> str:

		path = os.path.join(str(tmp_path), relative_path)
		os.makedirs(os.path.dirname(path), exist_ok=True)

		mid = mido.MidiFile(type=1)
		track = mido.MidiTrack()
		mid.tracks.append(track)

		for note in notes:
			track.append(mido.Message('note_on', note=note, velocity=90, time=0))
			track.append(mido.Message('note_off', note=note, velocity=0, time=480))

		mid.save(path)

		return path

	return _write
