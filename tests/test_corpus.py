import logging
import random
import typing

import pytest

import fractalscore.corpus


def test_pitch_class_names_and_numbers () -> None:

	assert fractalscore.corpus.pitch_class("Db") == 1
	assert fractalscore.corpus.pitch_class("B#") == 0
	assert fractalscore.corpus.pitch_class("Cb") == 11
	assert fractalscore.corpus.pitch_class("F#5q") == 6
	assert fractalscore.corpus.pitch_class(67) == 7


def test_pitch_class_rejects_non_notes () -> None:

	with pytest.raises(ValueError):
		fractalscore.corpus.pitch_class("H")

	with pytest.raises(ValueError):
		fractalscore.corpus.pitch_class(True)


def test_parse_melody_skips_non_note_tokens () -> None:

	"""Rests, markers and controls are ignored; harmony counts its first note."""

	text = "T120 V0 I80 [61]q Rq C5q+E5q X1=3 | L1 Db4i"

	assert fractalscore.corpus.parse_melody(text) == [1, 0, 1]


def test_rows_sum_to_one_or_zero () -> None:

	model = fractalscore.corpus.CorpusModel({"C": ["C D E C G E D C", "E F G A G"]}, key="C")

	for row in model.table:
		assert sum(row) == pytest.approx(1.0) or sum(row) == 0.0


def test_transition_probabilities () -> None:

	model = fractalscore.corpus.CorpusModel({"C": [[0, 2, 4, 0, 7]]}, key="C")

	assert model.table[0][2] == pytest.approx(0.5)
	assert model.table[0][7] == pytest.approx(0.5)
	assert model.table2[0][2][4] == pytest.approx(1.0)
	assert model.observations == 4


def test_history_does_not_cross_melodies () -> None:

	model = fractalscore.corpus.CorpusModel({"C": ["C D", "E F"]}, key="C")

	assert model.table[2][4] == 0.0
	assert model.observations == 2


def test_only_active_key_is_analysed (scale_corpus: typing.Dict[str, typing.List[str]]) -> None:

	model = fractalscore.corpus.CorpusModel(scale_corpus, key="G")

	assert model.observations == 3
	assert model.table[11][7] == pytest.approx(1.0)


def test_sample_next_follows_single_successor (scale_corpus: typing.Dict[str, typing.List[str]]) -> None:

	model = fractalscore.corpus.CorpusModel(scale_corpus, key="C")
	rng = random.Random(5)

	assert model.sample_next(0, None, rng) == 2
	assert model.sample_next(11, 9, rng) == 0


def test_sample_next_without_preference () -> None:

	"""No current note, or an unobserved row, gives None."""

	model = fractalscore.corpus.CorpusModel({"C": ["C D E"]}, key="C")
	rng = random.Random(5)

	assert model.sample_next(-1, None, rng) is None
	assert model.sample_next(6, 4, rng) is None


def test_second_order_prefers_two_note_history () -> None:

	model = fractalscore.corpus.CorpusModel({"C": ["C D E", "G D C"]}, key="C", order=2)
	rng = random.Random(11)

	for _ in range(20):
		assert model.sample_next(2, 0, rng) == 4
		assert model.sample_next(2, 7, rng) == 0


def test_second_order_falls_back_to_first_order () -> None:

	model = fractalscore.corpus.CorpusModel({"C": ["C D E", "G D C"]}, key="C", order=2)

	assert model.probabilities(2, 5) == model.table[2]
	assert model.probabilities(2, -1) == model.table[2]


def test_set_key_only_reanalyses_on_change (scale_corpus: typing.Dict[str, typing.List[str]]) -> None:

	model = fractalscore.corpus.CorpusModel(scale_corpus, key="C")

	assert model.set_key("C") is False
	assert model.set_key(7) is True
	assert model.observations == 3


def test_missing_key_warns (caplog: pytest.LogCaptureFixture, scale_corpus: typing.Dict[str, typing.List[str]]) -> None:

	with caplog.at_level(logging.WARNING, logger="fractalscore.corpus"):
		model = fractalscore.corpus.CorpusModel(scale_corpus, key="Eb")

	assert model.is_empty
	assert "no melodies" in caplog.text


def test_invalid_order () -> None:

	with pytest.raises(ValueError):
		fractalscore.corpus.CorpusModel({}, order=3)
