import logging
import os
import pathlib
import typing

import pytest

import fractalscore.corpus
import fractalscore.corpus_io


def test_melody_from_midi (write_midi: typing.Callable[..., str]) -> None:

	path = write_midi([60, 62, 64])

	assert fractalscore.corpus_io.melody_from_midi(path) == [60, 62, 64]


def test_inline_corpus () -> None:

	"""A single string is one melody; lists are kept as given."""

	corpus = fractalscore.corpus_io.load_corpus({"C": "C5q E5q", "G": ["G A B", [67, 69]]})

	assert corpus == {"C": ["C5q E5q"], "G": ["G A B", [67, 69]]}


def test_inline_corpus_rejects_unknown_keys () -> None:

	with pytest.raises(ValueError):
		fractalscore.corpus_io.load_corpus({"H": "C D E"})


def test_empty_source () -> None:

	assert fractalscore.corpus_io.load_corpus(None) == {}


def test_corpus_directory (tmp_path: pathlib.Path, write_midi: typing.Callable[..., str], caplog: pytest.LogCaptureFixture) -> None:

	"""Key folders are read; other folders are skipped with a warning."""

	write_midi([60, 62], os.path.join("corpus", "C", "a.mid"))
	os.makedirs(tmp_path / "corpus" / "G")
	(tmp_path / "corpus" / "G" / "b.txt").write_text("G4q A4q")
	os.makedirs(tmp_path / "corpus" / "notes")

	with caplog.at_level(logging.WARNING, logger="fractalscore.corpus_io"):
		corpus = fractalscore.corpus_io.load_corpus(str(tmp_path / "corpus"))

	assert corpus == {"C": [[60, 62]], "G": ["G4q A4q"]}
	assert "not a key name" in caplog.text

	model = fractalscore.corpus.CorpusModel(corpus, key="C")

	assert model.table[0][2] == pytest.approx(1.0)


def test_path_and_inline_combined (tmp_path: pathlib.Path, write_midi: typing.Callable[..., str]) -> None:

	write_midi([64, 65], os.path.join("corpus", "C", "a.mid"))

	corpus = fractalscore.corpus_io.load_corpus({"path": str(tmp_path / "corpus"), "C": "G5q C5q"})

	assert corpus == {"C": [[64, 65], "G5q C5q"]}


def test_missing_directory (tmp_path: pathlib.Path) -> None:

	with pytest.raises(FileNotFoundError):
		fractalscore.corpus_io.load_corpus(str(tmp_path / "nowhere"))
