import os
import pathlib
import typing

import mido
import pytest

import fractalscore.composer
import fractalscore.midi_export


def _notes (events: typing.List[fractalscore.midi_export.TokenEvent]) -> typing.List[typing.Tuple[int, int, int]]:

	return [(event.value, event.start, event.layer) for event in events if event.kind == "note"]


def test_parse_tokens_basic () -> None:

	events = fractalscore.midi_export.parse_tokens("T120 V0 I80 [60]i Ri [62]q")

	assert [(e.kind, e.start, e.value) for e in events] == [
		("tempo", 0, 120),
		("program", 0, 80),
		("note", 0, 60),
		("note", 32, 62),
	]
	assert events[2].duration == 16


def test_layers_keep_their_own_clock () -> None:

	"""A new layer starts at the beginning; returning to a layer resumes its clock."""

	events = fractalscore.midi_export.parse_tokens("V0 [60]q L1 [64]i L0 [62]q")

	assert _notes(events) == [(60, 0, 0), (64, 0, 1), (62, 32, 0)]


def test_voice_returns_to_its_last_layer () -> None:

	events = fractalscore.midi_export.parse_tokens("V0 L2 [60]q V1 [50]q V0 [61]q")

	assert [(e.value, e.voice, e.layer, e.start) for e in events] == [
		(60, 0, 2, 0),
		(50, 1, 0, 0),
		(61, 0, 2, 32),
	]


def test_harmony_and_markers () -> None:

	"""Harmony notes start together; measure markers take no time."""

	events = fractalscore.midi_export.parse_tokens("[60]q+[64]q+[67]q | [62]i X1=30")

	assert _notes(events) == [(60, 0, 0), (64, 0, 0), (67, 0, 0), (62, 32, 0)]
	assert (events[-1].kind, events[-1].control, events[-1].value, events[-1].start) == ("control", 1, 30, 48)


def test_unknown_tokens_are_rejected () -> None:

	with pytest.raises(ValueError):
		fractalscore.midi_export.parse_tokens("T120 Z9")

	with pytest.raises(ValueError):
		fractalscore.midi_export.parse_tokens("[60]q+E5q")


def test_score_to_midi_tracks () -> None:

	"""One tempo track plus one track per voice / layer in use."""

	score = fractalscore.composer.compose("g[-g+g]g")
	mid = fractalscore.midi_export.score_to_midi(score)

	assert mid.type == 1
	assert mid.ticks_per_beat == 480
	assert len(mid.tracks) == 3

	tempo_events = [m for m in mid.tracks[0] if m.type == 'set_tempo']

	assert tempo_events[0].tempo == mido.bpm2tempo(120)

	main_layer = [m for m in mid.tracks[1] if not m.is_meta]

	assert [(m.type, m.time) for m in main_layer] == [
		("program_change", 0),
		("note_on", 0),
		("note_off", 240),
		("note_on", 0),
		("note_off", 240),
	]
	assert [m.note for m in mid.tracks[2] if m.type == 'note_on'] == [50]


def test_save_midi (tmp_path: pathlib.Path) -> None:

	filename = str(tmp_path / "fractal.mid")
	score = fractalscore.composer.compose("g-g+gg")

	assert fractalscore.midi_export.save_midi(score, filename) == filename
	assert os.path.exists(filename)

	mid = mido.MidiFile(filename)
	notes = [m.note for track in mid.tracks for m in track if m.type == 'note_on']

	assert notes == [48, 50]
