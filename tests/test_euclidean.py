import logging

import pytest

import fractalscore.euclidean
import fractalscore.sequence_utils


def test_tresillo () -> None:

	"""E(3,8) reads as the tresillo."""

	assert str(fractalscore.euclidean.EuclideanRhythm(3, 8)) == "x . . x . . x ."


def test_two_in_five () -> None:

	assert str(fractalscore.euclidean.EuclideanRhythm(2, 5)) == "x . x . ."


def test_more_pulses_than_pauses () -> None:

	"""Inverted bucket arithmetic still yields the classic listing."""

	assert str(fractalscore.euclidean.EuclideanRhythm(5, 8)) == "x . x x . x x ."


def test_bucket_fill_raw_patterns () -> None:

	"""The unrotated bucket output starts on a pulse, or on a pause when inverted."""

	assert fractalscore.sequence_utils.rhythm_to_string(fractalscore.euclidean.bucket_fill(3, 8)) == "x . . x . x . ."
	assert fractalscore.sequence_utils.rhythm_to_string(fractalscore.euclidean.bucket_fill(5, 8)) == ". x x . x . x x"


@pytest.mark.parametrize("steps", [1, 2, 5, 7, 8, 12, 13, 16, 19, 24])
def test_pulse_count_and_even_gaps (steps: int) -> None:

	"""Every E(k,n) has exactly k pulses in n steps and gaps that differ by at most one."""

	for pulses in range(steps + 1):

		rhythm = fractalscore.euclidean.EuclideanRhythm(pulses, steps)
		gaps = rhythm.gaps()

		assert len(rhythm) == steps
		assert sum(rhythm) == pulses

		if gaps:
			assert max(gaps) - min(gaps) <= 1


def test_degenerate_parameters () -> None:

	"""No pulses gives all pauses, too many pulses all pulses, no steps an empty pattern."""

	assert str(fractalscore.euclidean.EuclideanRhythm(0, 4)) == ". . . ."
	assert str(fractalscore.euclidean.EuclideanRhythm(6, 4)) == "x x x x"
	assert str(fractalscore.euclidean.EuclideanRhythm(-2, 4)) == ". . . ."
	assert len(fractalscore.euclidean.EuclideanRhythm(3, 0)) == 0


def test_rotate_by_bits () -> None:

	rhythm = fractalscore.euclidean.EuclideanRhythm(3, 8)
	rhythm.rotate_by_bits(1)

	assert str(rhythm) == ". x . . x . . x"

	rhythm.rotate_by_bits(-1)

	assert str(rhythm) == "x . . x . . x ."


def test_full_rotation_is_identity () -> None:

	"""Rotating by the step count returns the original pattern."""

	rhythm = fractalscore.euclidean.EuclideanRhythm(5, 13)
	original = str(rhythm)

	rhythm.rotate_by_bits(13)

	assert str(rhythm) == original


def test_rotate_by_pulse_groups_moves_last_group_first () -> None:

	rhythm = fractalscore.euclidean.EuclideanRhythm(3, 8)

	rhythm.rotate_by_pulse_groups(1)
	assert str(rhythm) == "x . x . . x . ."

	rhythm.rotate_by_pulse_groups(1)
	assert str(rhythm) == "x . . x . x . ."

	rhythm.rotate_by_pulse_groups(1)
	assert str(rhythm) == "x . . x . . x ."


def test_match_to_reference () -> None:

	rhythm = fractalscore.euclidean.EuclideanRhythm(3, 8)

	assert rhythm.match_to_reference("x..x.x..") is True
	assert str(rhythm) == "x . . x . x . ."


def test_expected_pattern_in_constructor () -> None:

	rhythm = fractalscore.euclidean.EuclideanRhythm(3, 8, expected="x . x . . x . .")

	assert str(rhythm) == "x . x . . x . ."


def test_match_to_reference_failure_is_reported (caplog: pytest.LogCaptureFixture) -> None:

	"""An unreachable reference logs a warning and returns False without raising."""

	rhythm = fractalscore.euclidean.EuclideanRhythm(3, 8)

	with caplog.at_level(logging.WARNING, logger="fractalscore.euclidean"):
		assert rhythm.match_to_reference("x x x . . . . .") is False

	assert "cannot be generated" in caplog.text
	assert sum(rhythm) == 3


def test_onsets_and_durations () -> None:

	rhythm = fractalscore.euclidean.EuclideanRhythm(3, 8)

	assert rhythm.onsets() == [0, 3, 6]
	assert rhythm.durations() == [3, 3, 2]


def test_durations_sum_to_steps_after_rotation () -> None:

	"""Leading pauses belong to the final group."""

	rhythm = fractalscore.euclidean.EuclideanRhythm(3, 8)
	rhythm.rotate_by_bits(1)

	assert rhythm.durations() == [3, 3, 2]
	assert sum(rhythm.durations()) == 8
	assert fractalscore.euclidean.EuclideanRhythm(0, 8).durations() == []
