"""Render a symbolic score to a standard MIDI file.

The token stream is read the way a music-string player reads it: every
voice / layer pair keeps its own time cursor, starting at the beginning of the
piece, and notes, rests and harmony tokens advance only the cursor of the pair
they are written in. ``V<n>`` selects voice ``n`` (MIDI channel ``n``) and
returns to the layer last used in that voice; ``L<n>`` selects a layer within
the current voice.

The resulting type-1 file has a tempo track followed by one track per
voice / layer pair that carries events, at 480 ticks per quarter note.

Example:
	```python
	score = fractalscore.composer.compose("g+g-g")
	fractalscore.midi_export.save_midi(score, "fractal.mid")
	```
"""

import dataclasses
import logging
import re
import typing

import mido

import fractalscore.constants.durations
import fractalscore.constants.pulses
import fractalscore.score


logger = logging.getLogger(__name__)


DEFAULT_VELOCITY = 100
MIDI_CHANNELS = 16

_CONTROL_TOKEN = re.compile(r"^X(\d+)=(\d+)$")
_NUMBERED_TOKEN = re.compile(r"^([TVLI])(\d+)$")

TrackKey = typing.Tuple[int, int]


@dataclasses.dataclass
class TokenEvent:

	"""
	One timed event read from a score, positioned in 128th-note units.

	``kind`` is one of ``"note"``, ``"program"``, ``"control"`` or ``"tempo"``.
	For notes ``value`` is the pitch; for controls it is the controller value
	and ``control`` names the controller.
	"""

	start: int
	voice: int
	layer: int
	kind: str
	value: int
	duration: int = 0
	control: int = 0


def _token_list (score: typing.Union[fractalscore.score.Score, str, typing.Sequence[str]]) -> typing.List[str]:

	if isinstance(score, fractalscore.score.Score):
		return list(score.tokens)

	if isinstance(score, str):
		return score.split()

	return list(score)


def parse_tokens (score: typing.Union[fractalscore.score.Score, str, typing.Sequence[str]]) -> typing.List[TokenEvent]:

	"""Read a score (or its token string) into timed events.

	Raises:
		ValueError: On a token that is not part of the score format.

	Example:
		```python
		events = parse_tokens("T120 V0 I80 [60]i Ri [62]q")
		[(e.kind, e.start, e.value) for e in events]
		# [('tempo', 0, 120), ('program', 0, 80), ('note', 0, 60), ('note', 32, 62)]
		```
	"""

	events: typing.List[TokenEvent] = []
	cursors: typing.Dict[TrackKey, int] = {}
	voice_layers: typing.Dict[int, int] = {}
	voice = 0
	layer = 0

	for token in _token_list(score):

		now = cursors.get((voice, layer), 0)

		if token == fractalscore.score.MEASURE_MARKER:
			continue

		rest = fractalscore.score.REST_TOKEN.match(token)

		if rest:
			cursors[(voice, layer)] = now + fractalscore.constants.durations.code_units(rest.group(1))
			continue

		if token.startswith("["):

			length = 0

			for part in token.split("+"):

				note = fractalscore.score.NOTE_TOKEN.match(part)

				if not note:
					raise ValueError(f"Malformed note token: {token!r}")

				duration = fractalscore.constants.durations.code_units(note.group(2))
				events.append(TokenEvent(start=now, voice=voice, layer=layer, kind="note", value=int(note.group(1)), duration=duration))
				length = max(length, duration)

			cursors[(voice, layer)] = now + length
			continue

		control = _CONTROL_TOKEN.match(token)

		if control:
			events.append(TokenEvent(start=now, voice=voice, layer=layer, kind="control", value=int(control.group(2)), control=int(control.group(1))))
			continue

		numbered = _NUMBERED_TOKEN.match(token)

		if not numbered:
			raise ValueError(f"Unknown score token: {token!r}")

		prefix, number = numbered.group(1), int(numbered.group(2))

		if prefix == "T":
			events.append(TokenEvent(start=now, voice=voice, layer=layer, kind="tempo", value=number))

		elif prefix == "I":
			events.append(TokenEvent(start=now, voice=voice, layer=layer, kind="program", value=number))

		elif prefix == "V":
			voice_layers[voice] = layer
			voice = number
			layer = voice_layers.get(voice, 0)

		else:
			layer = number

	return events


def _messages (event: TokenEvent) -> typing.List[typing.Tuple[int, int, typing.Union[mido.Message, mido.MetaMessage]]]:

	"""Return ``(unit_time, order, message)`` entries for one event; note-offs sort before note-ons."""

	channel = event.voice % MIDI_CHANNELS

	if event.kind == "note":
		return [
			(event.start, 1, mido.Message('note_on', channel=channel, note=event.value, velocity=DEFAULT_VELOCITY)),
			(event.start + event.duration, 0, mido.Message('note_off', channel=channel, note=event.value, velocity=0)),
		]

	if event.kind == "program":
		return [(event.start, 0, mido.Message('program_change', channel=channel, program=event.value % 128))]

	if event.kind == "control":
		return [(event.start, 0, mido.Message('control_change', channel=channel, control=event.control, value=min(event.value, 127)))]

	return [(event.start, 0, mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(event.value)))]


def _track (entries: typing.List[typing.Tuple[int, int, typing.Union[mido.Message, mido.MetaMessage]]], name: str) -> mido.MidiTrack:

	"""Build a track from absolute-time entries, converting to delta ticks."""

	track = mido.MidiTrack()
	track.append(mido.MetaMessage('track_name', name=name, time=0))

	entries.sort(key=lambda entry: (entry[0], entry[1]))

	last_units = 0

	for units, _, message in entries:
		message.time = (units - last_units) * fractalscore.constants.pulses.TICKS_PER_UNIT
		track.append(message)
		last_units = units

	return track


def score_to_midi (score: typing.Union[fractalscore.score.Score, str, typing.Sequence[str]]) -> mido.MidiFile:

	"""
	Build a type-1 ``mido.MidiFile``: a tempo track, then one track per voice / layer in use.
	"""

	mid = mido.MidiFile(type=1)
	mid.ticks_per_beat = fractalscore.constants.pulses.TICKS_PER_BEAT

	tempo_entries: typing.List[typing.Tuple[int, int, typing.Union[mido.Message, mido.MetaMessage]]] = []
	track_entries: typing.Dict[TrackKey, typing.List[typing.Tuple[int, int, typing.Union[mido.Message, mido.MetaMessage]]]] = {}

	for event in parse_tokens(score):

		if event.kind == "tempo":
			tempo_entries.extend(_messages(event))
		else:
			track_entries.setdefault((event.voice, event.layer), []).extend(_messages(event))

	mid.tracks.append(_track(tempo_entries, "tempo"))

	for voice, layer in sorted(track_entries):
		mid.tracks.append(_track(track_entries[(voice, layer)], f"V{voice} L{layer}"))

	return mid


def save_midi (score: typing.Union[fractalscore.score.Score, str, typing.Sequence[str]], filename: str) -> str:

	"""Write the score to ``filename`` as a standard MIDI file and return the filename."""

	mid = score_to_midi(score)

	logger.info(f"Saving MIDI file ({len(mid.tracks) - 1} tracks) to {filename}...")

	mid.save(filename)

	logger.info(f"Saved {filename}")

	return filename
