"""Duration codes for symbolic score tokens.

Durations are written with eight single-letter codes that form a geometric
ladder from a 128th note up to a whole note. Every value here is measured in
**units**, where one unit is a 128th note::

    o = 1    (128th)
    x = 2    (64th)
    t = 4    (32nd)
    s = 8    (16th)
    i = 16   (8th)
    q = 32   (quarter)
    h = 64   (half)
    w = 128  (whole)

Longer or irregular lengths are written by concatenating codes, so a dotted
eighth (24 units) is ``"is"`` and two tied eighths are ``"ii"``::

    import fractalscore.constants.durations as dur

    dur.duration_code(24)     # "is"
    dur.code_units("ii")      # 32

A rest uses the same codes behind an ``R`` prefix: ``"Ri"``, ``"Rqs"``.
"""

import typing


DURATION_CODES: typing.List[str] = ["o", "x", "t", "s", "i", "q", "h", "w"]

CODE_UNITS: typing.Dict[str, int] = {code: 2 ** index for index, code in enumerate(DURATION_CODES)}

SIXTEENTH = CODE_UNITS["s"]
EIGHTH = CODE_UNITS["i"]
QUARTER = CODE_UNITS["q"]
HALF = CODE_UNITS["h"]
WHOLE = CODE_UNITS["w"]

REST_PREFIX = "R"


def duration_code (units: int) -> str:

	"""Return the code string for a length in 128th-note units.

	Whole notes are repeated as needed, the remainder is decomposed from the
	largest code down.

	Example:
		```python
		duration_code(16)    # "i"
		duration_code(24)    # "is"
		duration_code(160)   # "wq"
		```
	"""

	if units <= 0:
		raise ValueError(f"Duration must be positive, got {units}")

	codes: typing.List[str] = []

	whole_count, remainder = divmod(units, WHOLE)
	codes.extend(["w"] * whole_count)

	for code in reversed(DURATION_CODES[:-1]):
		if remainder >= CODE_UNITS[code]:
			codes.append(code)
			remainder -= CODE_UNITS[code]

	return "".join(codes)


def code_units (codes: str) -> int:

	"""Return the total length of a code string in 128th-note units."""

	total = 0

	for code in codes:
		if code not in CODE_UNITS:
			raise ValueError(f"Unknown duration code: {code!r}")
		total += CODE_UNITS[code]

	return total


def rest_code (units: int) -> str:

	"""Return a rest token for a length in 128th-note units."""

	return REST_PREFIX + duration_code(units)
