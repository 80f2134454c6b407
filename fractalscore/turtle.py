"""Turtle cursor for interpreting L-system productions as music.

The turtle tracks seven axes - x, y, z position, yaw (heading), angle step,
hue and line thickness. Vertical position ``y`` doubles as the sounding MIDI
pitch and yaw decides whether drawing advances time (horizontal) or pitch
(vertical).

All seven axes live in one immutable :class:`TurtleState`. The turtle keeps a
stack of these snapshots, so :meth:`Turtle.save_state` and
:meth:`Turtle.restore_state` always move every axis together.
"""

import dataclasses
import enum
import typing


HUE_MIN = 380
HUE_MAX = 750


class Direction (enum.Enum):

	"""Headings the composer understands. ``NONE`` covers every other yaw."""

	NONE = None
	FORWARD = 0
	UP = 90
	BACKWARD = 180
	DOWN = 270

	@property
	def horizontal (self) -> bool:

		return self in (Direction.FORWARD, Direction.BACKWARD)

	@property
	def vertical (self) -> bool:

		return self in (Direction.UP, Direction.DOWN)


class TurtleScopeError (RuntimeError):
	pass


def normalize_yaw (yaw: int) -> int:

	"""Fold any yaw into ``[0, 360)``."""

	return yaw % 360


def reflect_hue (hue: int, low: int = HUE_MIN, high: int = HUE_MAX) -> int:

	"""Mirror a hue back into ``[low, high]``.

	Values past a boundary bounce off it rather than wrapping, so 760 becomes
	740 and 370 becomes 390. Large overshoots keep bouncing until they land.
	"""

	if low > high:
		raise ValueError(f"low ({low}) must be <= high ({high})")

	if low == high:
		return low

	while hue < low or hue > high:
		if hue > high:
			hue = 2 * high - hue
		else:
			hue = 2 * low - hue

	return hue


@dataclasses.dataclass(frozen=True)
class TurtleState:

	"""
	One snapshot of every turtle axis.
	"""

	x: int = 0
	y: int = 0
	z: int = 0
	yaw: int = 0
	angle: int = 90
	hue: int = HUE_MAX
	thickness: int = 50

	@property
	def direction (self) -> Direction:

		"""Return the heading for this yaw, or ``Direction.NONE`` for off-axis yaws."""

		try:
			return Direction(normalize_yaw(self.yaw))
		except ValueError:
			return Direction.NONE


class Turtle:

	"""
	A scoped turtle cursor backed by a stack of :class:`TurtleState` snapshots.
	"""

	def __init__ (self, angle: int = 90, hue_step: int = 10, initial: typing.Optional[TurtleState] = None) -> None:

		"""
		Initialize the turtle with one root scope.

		Parameters:
			angle: Degrees turned by each ``+`` / ``-`` symbol.
			hue_step: Amount each ``#`` / ``@`` symbol changes the hue.
			initial: Optional starting snapshot; ``angle`` overrides its angle.
		"""

		self.hue_step = hue_step
		self._initial = dataclasses.replace(initial or TurtleState(), angle=angle)
		self._stack: typing.List[TurtleState] = [self._initial]


	def reset (self, angle: typing.Optional[int] = None) -> None:

		"""
		Drop every scope and return to the initial snapshot.
		"""

		if angle is not None:
			self._initial = dataclasses.replace(self._initial, angle=angle)

		self._stack = [self._initial]


	@property
	def state (self) -> TurtleState:

		return self._stack[-1]


	@property
	def depth (self) -> int:

		"""Number of snapshots on the scope stack (1 when no scope is open)."""

		return len(self._stack)


	@property
	def x (self) -> int:
		return self.state.x

	@property
	def y (self) -> int:
		return self.state.y

	@property
	def z (self) -> int:
		return self.state.z

	@property
	def yaw (self) -> int:
		return self.state.yaw

	@property
	def angle (self) -> int:
		return self.state.angle

	@property
	def hue (self) -> int:
		return self.state.hue

	@property
	def thickness (self) -> int:
		return self.state.thickness

	@property
	def direction (self) -> Direction:
		return self.state.direction


	def _replace (self, **changes: int) -> None:

		"""Replace the top snapshot with a copy carrying ``changes``."""

		self._stack[-1] = dataclasses.replace(self._stack[-1], **changes)


	def set_x (self, x: int) -> None:
		self._replace(x=x)

	def set_y (self, y: int) -> None:
		self._replace(y=y)

	def set_z (self, z: int) -> None:
		self._replace(z=z)

	def set_yaw (self, yaw: int) -> None:

		"""Set the heading, normalised into ``[0, 360)``."""

		self._replace(yaw=normalize_yaw(yaw))

	def set_angle (self, angle: int) -> None:
		self._replace(angle=angle)

	def set_hue (self, hue: int) -> None:

		"""Set the hue, reflected into the visible range ``[380, 750]``."""

		self._replace(hue=reflect_hue(hue))

	def set_thickness (self, thickness: int) -> None:
		self._replace(thickness=thickness)


	def turn (self, sign: int) -> None:

		"""
		Turn by ``sign`` times the current angle step.
		"""

		self.set_yaw(self.yaw + sign * self.angle)


	def shift_hue (self, sign: int) -> None:

		"""
		Move the hue by ``sign`` times the hue step.
		"""

		self.set_hue(self.hue + sign * self.hue_step)


	def advance (self, amount: int) -> None:

		"""
		Move along x by ``amount`` in the current horizontal heading.
		"""

		if self.direction == Direction.BACKWARD:
			amount = -amount

		self.set_x(self.x + amount)


	def save_state (self) -> None:

		"""
		Open a scope by duplicating the current snapshot.
		"""

		self._stack.append(self._stack[-1])


	def restore_state (self) -> TurtleState:

		"""
		Close the innermost scope and return the snapshot it held.

		Raises:
			TurtleScopeError: When no scope is open. Unbalanced scopes are a
				programming error; productions are validated before composing.
		"""

		if len(self._stack) <= 1:
			raise TurtleScopeError("restore_state() called without a matching save_state()")

		return self._stack.pop()
