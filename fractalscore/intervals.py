import math
import typing


MAJOR_SCALE: typing.List[int] = [0, 2, 4, 5, 7, 9, 11]

IONIAN_QUALITIES: typing.List[str] = [
	"major", "minor", "minor", "major", "major", "minor", "diminished"
]

# Degrees (1-based) whose next step in the given direction is a half step.
HALF_STEP_DEGREES_UP = (3, 7)
HALF_STEP_DEGREES_DOWN = (1, 4)


def scale_pitch_classes (key_pc: int) -> typing.List[int]:

	"""
	Return the pitch classes (0–11) of the major scale on ``key_pc``.

	Example:
		```python
		scale_pitch_classes(0)  # → [0, 2, 4, 5, 7, 9, 11]
		scale_pitch_classes(7)  # → [7, 9, 11, 0, 2, 4, 6]
		```
	"""

	return [(key_pc + i) % 12 for i in MAJOR_SCALE]


def degree_for_pitch (pitch: int, key_pc: int) -> float:

	"""
	Return the major-scale degree (1–7) of a pitch.

	Chromatic pitches sit half way between their neighbours, so C# in C major
	is degree 1.5 and F# is 4.5.
	"""

	offset = (pitch - key_pc) % 12

	if offset in MAJOR_SCALE:
		return float(MAJOR_SCALE.index(offset) + 1)

	below = max(i for i in MAJOR_SCALE if i < offset)

	return MAJOR_SCALE.index(below) + 1.5


def step_degree (pitch: int, degree: float, up: bool) -> typing.Tuple[int, float]:

	"""Move one diatonic step from ``pitch`` at scale ``degree``.

	Whole steps everywhere except between degrees 3-4 and 7-1, which are half
	steps. Degree 8 wraps to 1 and degree 0 wraps to 7. A fractional
	(chromatic) degree moves a half step onto the neighbouring scale degree.

	Returns:
		The new ``(pitch, degree)`` pair.

	Example:
		```python
		step_degree(60, 1, up=True)    # → (62, 2.0)
		step_degree(64, 3, up=True)    # → (65, 4.0)
		step_degree(60, 1, up=False)   # → (59, 7.0)
		```
	"""

	if degree != int(degree):

		if up:
			return pitch + 1, _wrap_degree(math.ceil(degree))

		return pitch - 1, _wrap_degree(math.floor(degree))

	degree = int(degree)

	if up:
		interval = 1 if degree in HALF_STEP_DEGREES_UP else 2
		return pitch + interval, _wrap_degree(degree + 1)

	interval = 1 if degree in HALF_STEP_DEGREES_DOWN else 2
	return pitch - interval, _wrap_degree(degree - 1)


def _wrap_degree (degree: int) -> float:

	if degree > 7:
		return 1.0

	if degree < 1:
		return 7.0

	return float(degree)


def wrap_into_range (pitch: int, low: int, high: int) -> int:

	"""
	Fold a pitch that left ``[low, high]`` to the opposite end of the range.

	A pitch above ``high`` drops by whole octaves to the lowest octave at or
	above ``low``; a pitch below ``low`` rises to the highest octave at or
	below ``high``. Pitches already in range are returned unchanged.
	"""

	if high - low < 11:
		raise ValueError(f"Range [{low}, {high}] must span at least an octave")

	if pitch > high:
		return pitch - 12 * ((pitch - low) // 12)

	if pitch < low:
		return pitch + 12 * ((high - pitch) // 12)

	return pitch


def clamp_octave (pitch: int, low: int, high: int) -> int:

	"""
	Move a pitch by the fewest octaves needed to land in ``[low, high]``.
	"""

	if high - low < 11:
		raise ValueError(f"Range [{low}, {high}] must span at least an octave")

	while pitch > high:
		pitch -= 12

	while pitch < low:
		pitch += 12

	return pitch


def nearest_pitch (reference: int, pitch_class: int, low: typing.Optional[int] = None, high: typing.Optional[int] = None) -> int:

	"""Return the pitch of ``pitch_class`` closest to ``reference``.

	The search goes whichever way needs fewer half steps. A tritone tie goes
	up unless that would pass ``high``. With bounds given, the result is then
	octave-clamped into ``[low, high]``.

	Example:
		```python
		nearest_pitch(60, 11)   # → 59  (B just below C)
		nearest_pitch(60, 2)    # → 62
		nearest_pitch(60, 6)    # → 66  (tie resolves upward)
		```
	"""

	up = (pitch_class - reference) % 12
	down = (reference - pitch_class) % 12

	if up < down:
		result = reference + up

	elif down < up:
		result = reference - down

	elif high is not None and reference + up > high:
		result = reference - down

	else:
		result = reference + up

	if low is not None and high is not None:
		result = clamp_octave(result, low, high)

	return result
