import random
import typing


StateType = typing.TypeVar("StateType")


def choose_weighted (options: typing.Sequence[typing.Tuple[StateType, float]], rng: random.Random) -> StateType:

	"""
	Choose one item from a list of weighted options.

	Weights are relative and zero weights are never chosen. Negative weights
	are rejected.
	"""

	if not options:
		raise ValueError("Options cannot be empty")

	total_weight = 0.0

	for _, weight in options:
		if weight < 0:
			raise ValueError("Weights cannot be negative")
		total_weight += weight

	if total_weight <= 0:
		raise ValueError("At least one weight must be positive")

	roll = rng.uniform(0, total_weight)
	accum = 0.0

	for option, weight in options:
		if weight <= 0:
			continue
		accum += weight
		if roll <= accum:
			return option

	# Float rounding can leave the roll a hair above the final boundary.
	return [option for option, weight in options if weight > 0][-1]


def choose_from_row (row: typing.Sequence[float], rng: random.Random) -> typing.Optional[int]:

	"""
	Draw a column index from one row of a transition table.

	Returns ``None`` for a row with no positive entries, which callers treat as
	"no preference".
	"""

	if not any(weight > 0 for weight in row):
		return None

	return choose_weighted(list(enumerate(row)), rng)


class MarkovChain (typing.Generic[StateType]):

	"""
	A simple weighted Markov chain over arbitrary states.
	"""

	def __init__ (
		self,
		transitions: typing.Dict[StateType, typing.List[typing.Tuple[StateType, float]]],
		initial_state: typing.Optional[StateType] = None,
		rng: typing.Optional[random.Random] = None
	) -> None:

		"""
		Initialize the chain with transitions and an optional initial state.
		"""

		if not transitions:
			raise ValueError("Transitions cannot be empty")

		self.transitions = transitions
		self.rng = rng or random.Random()

		if initial_state is None:
			initial_state = next(iter(transitions))

		if initial_state not in transitions:
			raise ValueError("Initial state must exist in transitions")

		self.initial_state = initial_state
		self.state = initial_state


	@classmethod
	def from_matrix (cls, matrix: typing.Sequence[typing.Sequence[float]], rng: typing.Optional[random.Random] = None) -> "MarkovChain[int]":

		"""
		Build a chain over row indices from a square transition matrix.
		"""

		transitions: typing.Dict[int, typing.List[typing.Tuple[int, float]]] = {}

		for source, row in enumerate(matrix):

			if len(row) != len(matrix):
				raise ValueError(f"Row {source} has {len(row)} entries, expected {len(matrix)}")

			transitions[source] = [(target, weight) for target, weight in enumerate(row) if weight > 0]

		return MarkovChain(transitions=transitions, initial_state=0, rng=rng)


	def step (self) -> StateType:

		"""
		Advance to the next state and return it.
		"""

		options = self.transitions.get(self.state, [])

		if not options:
			return self.state

		self.state = choose_weighted(options, self.rng)

		return self.state


	def reset (self) -> None:

		"""
		Return to the initial state.
		"""

		self.state = self.initial_state


	def get_state (self) -> StateType:

		"""
		Return the current state.
		"""

		return self.state
