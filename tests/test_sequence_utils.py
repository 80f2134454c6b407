import pytest

import fractalscore.sequence_utils


def test_euclidean_tresillo () -> None:

	"""E(3,8) is the tresillo, starting on a pulse."""

	assert fractalscore.sequence_utils.generate_euclidean_sequence(8, 3) == [1, 0, 0, 1, 0, 0, 1, 0]


def test_euclidean_two_in_five () -> None:

	assert fractalscore.sequence_utils.generate_euclidean_sequence(5, 2) == [1, 0, 1, 0, 0]


def test_euclidean_clamps_pulses () -> None:

	"""Pulse counts outside [0, steps] degrade instead of raising."""

	assert fractalscore.sequence_utils.generate_euclidean_sequence(4, 9) == [1, 1, 1, 1]
	assert fractalscore.sequence_utils.generate_euclidean_sequence(4, -1) == [0, 0, 0, 0]
	assert fractalscore.sequence_utils.generate_euclidean_sequence(0, 3) == []


def test_sequence_to_indices_basic () -> None:

	"""Extract indices from a binary sequence with hits at known positions."""

	sequence = [1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 0, 0]

	assert fractalscore.sequence_utils.sequence_to_indices(sequence) == [0, 4, 8, 12]


def test_sequence_to_indices_empty () -> None:

	"""An all-zero sequence should return an empty list."""

	assert fractalscore.sequence_utils.sequence_to_indices([0, 0, 0, 0]) == []


# --- rhythm strings ---


def test_rhythm_to_string () -> None:

	assert fractalscore.sequence_utils.rhythm_to_string([True, False, 1, 0]) == "x . x ."


def test_parse_rhythm_string_spacing_optional () -> None:

	"""Spaced and unspaced forms parse identically."""

	assert fractalscore.sequence_utils.parse_rhythm_string("x..x") == [True, False, False, True]
	assert fractalscore.sequence_utils.parse_rhythm_string("x . . x") == [True, False, False, True]


def test_parse_rhythm_string_rejects_unknown_symbols () -> None:

	with pytest.raises(ValueError):
		fractalscore.sequence_utils.parse_rhythm_string("x-x")


def test_normalize_rhythm_string () -> None:

	assert fractalscore.sequence_utils.normalize_rhythm_string("X.x.") == "x . x ."


# --- durations and gaps ---


def test_legato_durations () -> None:

	"""Each hit lasts until the next hit or the end of the list."""

	assert fractalscore.sequence_utils.generate_legato_durations([1, 0, 0, 1, 0]) == [3, 0, 0, 2, 0]


def test_legato_durations_empty () -> None:

	assert fractalscore.sequence_utils.generate_legato_durations([]) == []


def test_inter_onset_gaps_wrap () -> None:

	"""The final gap wraps around to the first pulse."""

	assert fractalscore.sequence_utils.inter_onset_gaps([1, 0, 0, 1, 0, 0, 1, 0]) == [3, 3, 2]
	assert fractalscore.sequence_utils.inter_onset_gaps([0, 1, 0, 0]) == [4]
	assert fractalscore.sequence_utils.inter_onset_gaps([0, 0]) == []
