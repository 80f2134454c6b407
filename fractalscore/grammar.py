"""Context-free L-system grammars.

A grammar has an ordered alphabet of one-character symbols, an axiom, and one
replacement rule per alphabet symbol. :func:`expand` rewrites every character
of the current string at once, generation after generation; characters with no
rule (turtle commands such as ``g`` or ``+``) pass through unchanged.

Example:
	```python
	expand("A", {"A": "AB", "B": "A"}, 4)   # "ABAABABA"

	grammar = Grammar(alphabet=["A", "B"], axiom="A", rules=["g+g-gB", "+g-gB"])
	production = grammar.expand(5)
	```
"""

import dataclasses
import logging
import typing


logger = logging.getLogger(__name__)


class GrammarError (ValueError):
	pass


def expand (axiom: str, rules: typing.Mapping[str, str], generations: int) -> str:

	"""Rewrite ``axiom`` through ``rules`` for ``generations`` rounds.

	Each round reads the string as it stood at the start of the round, so a
	replacement never feeds back into the same round.

	Parameters:
		axiom: Starting string.
		rules: Mapping from one-character symbol to its replacement.
		generations: Number of rewriting rounds (``0`` returns the axiom).

	Returns:
		The production string.
	"""

	if generations < 0:
		raise ValueError(f"Generations cannot be negative, got {generations}")

	production = axiom

	for _ in range(generations):
		production = "".join(rules.get(symbol, symbol) for symbol in production)

	return production


def validate_brackets (production: str) -> None:

	"""
	Check that every ``[`` has a matching ``]``.

	Raises:
		GrammarError: On the first unmatched bracket.
	"""

	depth = 0

	for index, symbol in enumerate(production):

		if symbol == "[":
			depth += 1

		elif symbol == "]":
			depth -= 1
			if depth < 0:
				raise GrammarError(f"Unexpected closing bracket at position {index}")

	if depth > 0:
		raise GrammarError(f"Missing {depth} closing bracket(s)")


@dataclasses.dataclass
class Grammar:

	"""
	An L-system: ordered alphabet, axiom, and rules parallel to the alphabet.
	"""

	alphabet: typing.List[str]
	axiom: str
	rules: typing.List[str]


	@classmethod
	def from_mapping (cls, axiom: str, rules: typing.Mapping[str, str]) -> "Grammar":

		"""Build a grammar from a ``symbol -> replacement`` mapping."""

		return cls(alphabet=list(rules.keys()), axiom=axiom, rules=list(rules.values()))


	@classmethod
	def preset (cls, index: int) -> "Grammar":

		"""Return a copy of one of :data:`DEFAULT_GRAMMARS`."""

		if index < 0 or index >= len(DEFAULT_GRAMMARS):
			raise ValueError(f"Unknown preset {index}. Available: 0-{len(DEFAULT_GRAMMARS) - 1}")

		preset = DEFAULT_GRAMMARS[index]

		return cls(alphabet=list(preset.alphabet), axiom=preset.axiom, rules=list(preset.rules))


	def validate (self) -> None:

		"""
		Reject grammars the engine cannot expand consistently.

		Raises:
			GrammarError: When the alphabet and rule counts differ, a symbol is not
				exactly one character, or a symbol appears twice.
		"""

		if len(self.alphabet) != len(self.rules):
			raise GrammarError(
				f"Alphabet has {len(self.alphabet)} symbol(s) but there are {len(self.rules)} rule(s). "
				"Make sure each symbol in the alphabet has a corresponding rule."
			)

		for symbol in self.alphabet:
			if len(symbol) != 1:
				raise GrammarError(f"Alphabet symbols must be a single character, got {symbol!r}")

		if len(set(self.alphabet)) != len(self.alphabet):
			raise GrammarError(f"Alphabet contains duplicate symbols: {self.alphabet}")


	def rule_map (self) -> typing.Dict[str, str]:

		"""Return the rules keyed by symbol."""

		return dict(zip(self.alphabet, self.rules))


	def expand (self, generations: int) -> str:

		"""
		Validate the grammar and expand it from the axiom.
		"""

		self.validate()

		production = expand(self.axiom, self.rule_map(), generations)

		logger.debug(f"Expanded {self.axiom!r} over {generations} generation(s) to {len(production)} symbols")

		return production


	def describe (self) -> str:

		"""Return a readable listing of the alphabet, axiom and rules."""

		lines = [
			f"Alphabet: {' '.join(self.alphabet)}",
			f"Axiom: {self.axiom}",
			"Rules:",
		]

		for symbol, rule in zip(self.alphabet, self.rules):
			lines.append(f"\t{symbol}: {rule}")

		return "\n".join(lines)


DEFAULT_GRAMMARS: typing.List[Grammar] = [
	Grammar(alphabet=["A", "B"], axiom="A", rules=["g+g-gB", "+g-gB"]),
	Grammar(alphabet=["A", "B"], axiom="A", rules=["-Bg+AgA+gB-", "+Ag-BgB-gA+"]),
	Grammar(alphabet=["A", "B"], axiom="A", rules=["A+g-gB-g+g+g-", "-g+gA-g+"]),
	Grammar(alphabet=["A"], axiom="A", rules=["g+gg-g+gg-g+ggg-g-ggg+g-gg+g-gg+g"]),
	Grammar(
		alphabet=["A", "B", "C", "D"],
		axiom="ACA",
		rules=["g-gBg+AgA+gBg-g", "+Ag-BgB-gA+", "+Cg+g-g-CgC-g-g+gC+", "-g+gA-g+"],
	),
]
