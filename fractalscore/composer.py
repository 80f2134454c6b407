"""Interpret an L-system production as a symbolic score.

:class:`ScoreComposer` walks a production one character at a time, steering a
:class:`~fractalscore.turtle.Turtle` and writing tokens into a
:class:`~fractalscore.score.Score`. Turtle height is the sounding pitch, and
heading decides what a stroke means: facing forward or backward a stroke
advances time (a note or a rest), facing up or down it walks the pitch one
diatonic step.

Control symbols:

- ``-`` / ``+`` turn left / right by the turtle's angle step.
- ``g`` draws: a note when horizontal, a pitch step when vertical.
- ``f`` moves: a rest when horizontal, a pitch step when vertical.
- ``r`` rests while horizontal.
- ``[`` / ``]`` open / close a branch on a new layer (then a new voice).
- ``#`` / ``@`` raise / lower the hue, written as an ``X1`` controller value.

Every other character (grammar variables, whitespace) is ignored. Extra
symbols can be bound with :meth:`ScoreComposer.register_handler`.

In Markov mode note lengths come from a fresh Euclidean rhythm every measure,
pitches are drawn from a :class:`~fractalscore.corpus.CorpusModel`, and every
few measures a triad from the :class:`~fractalscore.progression.ChordProgressionSampler`
replaces a melody note.

Example:
	```python
	grammar = fractalscore.grammar.Grammar.preset(0)
	composer = ScoreComposer(ComposerConfig(key="G", tempo=100))
	score = composer.compose_grammar(grammar, generations=4)
	print(score)
	```
"""

import dataclasses
import enum
import logging
import random
import typing

import fractalscore.constants
import fractalscore.constants.durations
import fractalscore.corpus
import fractalscore.euclidean
import fractalscore.grammar
import fractalscore.intervals
import fractalscore.progression
import fractalscore.score
import fractalscore.turtle


logger = logging.getLogger(__name__)


class Symbol (enum.Enum):

	"""The control alphabet understood by the composer."""

	TURN_LEFT = "-"
	TURN_RIGHT = "+"
	DRAW = "g"
	MOVE = "f"
	REST = "r"
	PUSH = "["
	POP = "]"
	HUE_UP = "#"
	HUE_DOWN = "@"


HUE_SYMBOLS = (Symbol.HUE_UP.value, Symbol.HUE_DOWN.value)

HUE_CONTROLLER = 1

Handler = typing.Callable[["ScoreComposer", int, str], None]


@dataclasses.dataclass
class ComposerConfig:

	"""
	Settings for one composer.

	Attributes:
		angle: Degrees per turn symbol.
		key: Key signature index (1-12, circle of fifths from C) or key name.
		tempo: Beats per minute written into the score.
		instrument: Instrument number written after each voice marker.
		markov: Use Euclidean durations, corpus pitches and chord support.
		order: Markov order (1 or 2) when a raw corpus mapping is supplied.
		low: Lowest playable MIDI pitch.
		high: Highest playable MIDI pitch.
		note_units: Length of a deterministic stroke in 128th-note units.
		steps_per_measure: Euclidean grid size for one 4/4 measure.
		min_pulses: Fewest onsets in a Markov-mode measure.
		max_pulses: Most onsets in a Markov-mode measure.
		chord_every: Measures between harmony chords (0 disables them).
		harmony_voices: Number of triad tones written for a chord (1-3). The tones
			share the current voice as one ``+`` harmony token of equal length.
		hue_step: Hue change per ``#`` / ``@``.
		seed: Seed for the composer's random source.
	"""

	angle: int = 90
	key: typing.Union[int, str] = 1
	tempo: int = fractalscore.score.DEFAULT_TEMPO
	instrument: int = fractalscore.score.DEFAULT_INSTRUMENT
	markov: bool = False
	order: int = 1
	low: int = 24
	high: int = 108
	note_units: int = fractalscore.constants.durations.EIGHTH
	steps_per_measure: int = fractalscore.constants.STEPS_PER_MEASURE
	min_pulses: int = 3
	max_pulses: int = 9
	chord_every: int = 4
	harmony_voices: int = 3
	hue_step: int = 10
	seed: typing.Optional[int] = None


	@classmethod
	def from_dict (cls, data: typing.Optional[typing.Mapping[str, typing.Any]]) -> "ComposerConfig":

		"""Build a validated config from a mapping such as a YAML section."""

		data = dict(data or {})
		known = {field.name for field in dataclasses.fields(cls)}
		unknown = sorted(set(data) - known)

		if unknown:
			raise ValueError(f"Unknown composer setting(s): {', '.join(unknown)}. Available: {sorted(known)}")

		config = cls(**data)
		config.validate()

		return config


	def validate (self) -> None:

		"""
		Raise ValueError for settings the composer cannot work with.
		"""

		fractalscore.score.key_index(self.key)

		if self.tempo <= 0:
			raise ValueError(f"Tempo must be positive, got {self.tempo}")

		if not 0 <= self.low < self.high <= 127:
			raise ValueError(f"Pitch range must satisfy 0 <= low < high <= 127, got [{self.low}, {self.high}]")

		if self.high - self.low < 11:
			raise ValueError(f"Pitch range [{self.low}, {self.high}] must span at least an octave")

		if self.order not in (1, 2):
			raise ValueError(f"Markov order must be 1 or 2, got {self.order}")

		if self.note_units <= 0:
			raise ValueError("Note length must be positive")

		if self.steps_per_measure <= 0 or fractalscore.constants.durations.WHOLE % self.steps_per_measure:
			raise ValueError(f"Steps per measure must divide {fractalscore.constants.durations.WHOLE}, got {self.steps_per_measure}")

		if not 0 <= self.min_pulses <= self.max_pulses <= self.steps_per_measure:
			raise ValueError(
				f"Pulse bounds must satisfy 0 <= min_pulses <= max_pulses <= steps_per_measure, "
				f"got {self.min_pulses}, {self.max_pulses}, {self.steps_per_measure}"
			)

		if self.chord_every < 0:
			raise ValueError("chord_every cannot be negative")

		if not 1 <= self.harmony_voices <= 3:
			raise ValueError(f"harmony_voices must be between 1 and 3, got {self.harmony_voices}")


class ScoreComposer:

	"""
	Turns production strings into scores. One instance composes one score at a time.
	"""

	def __init__ (
		self,
		config: typing.Optional[ComposerConfig] = None,
		corpus: typing.Union[fractalscore.corpus.CorpusModel, typing.Mapping[typing.Any, typing.Any], None] = None,
		rng: typing.Optional[random.Random] = None
	) -> None:

		"""
		Initialize the composer and the components it owns.

		Parameters:
			config: Composer settings (defaults to ``ComposerConfig()``).
			corpus: A ready ``CorpusModel`` or a raw ``key -> melodies`` mapping,
				only consulted in Markov mode.
			rng: Random source. Defaults to ``random.Random(config.seed)``, reseeded
				at the start of every pass when a seed is configured.
		"""

		self.config = config or ComposerConfig()
		self.config.validate()

		self.rng = rng or random.Random(self.config.seed)
		self._reseed = rng is None and self.config.seed is not None
		self.turtle = fractalscore.turtle.Turtle(angle=self.config.angle, hue_step=self.config.hue_step)
		self.score = fractalscore.score.Score(key=self.config.key, tempo=self.config.tempo, instrument=self.config.instrument)

		if corpus is None or isinstance(corpus, fractalscore.corpus.CorpusModel):
			self.corpus = corpus
		else:
			self.corpus = fractalscore.corpus.CorpusModel(corpus, key=self.score.key_pc, order=self.config.order)

		self.progression: typing.Optional[fractalscore.progression.ChordProgressionSampler] = None

		if self.config.markov and self.config.chord_every > 0:
			self.progression = fractalscore.progression.ChordProgressionSampler(rng=self.rng)

		if self.config.markov and self.corpus is None:
			logger.warning("Markov mode without a corpus: pitches will only follow the turtle")

		self.handlers: typing.Dict[str, Handler] = {symbol.value: handler for symbol, handler in _DEFAULT_HANDLERS.items()}

		self._scopes: typing.List[typing.Optional[str]] = []
		self._durations: typing.List[int] = []
		self._measure = 0
		self._chord_due = False


	def register_handler (self, symbol: str, handler: Handler) -> None:

		"""Bind a one-character symbol to ``handler(composer, index, production)``.

		Example:
			```python
			def louder (composer, index, production):
				composer.turtle.set_thickness(composer.turtle.thickness + 10)

			composer.register_handler("!", louder)
			```
		"""

		if len(symbol) != 1:
			raise ValueError(f"Symbols must be a single character, got {symbol!r}")

		self.handlers[symbol] = handler


	def set_key (self, key: typing.Union[int, str]) -> None:

		"""
		Change the key; the corpus is re-analysed only if the key really changed.
		"""

		if self.score.set_key(key):
			logger.info(f"Key changed to {self.score.key_name}")
			if self.corpus is not None:
				self.corpus.set_key(self.score.key_pc)


	def compose_grammar (self, grammar: fractalscore.grammar.Grammar, generations: int) -> fractalscore.score.Score:

		"""
		Expand a grammar and compose the resulting production.

		Raises:
			GrammarError: When the grammar is inconsistent; nothing is composed.
		"""

		production = grammar.expand(generations)

		logger.info(f"Production after {generations} generation(s): {len(production)} symbols")

		return self.compose(production)


	def compose (self, production: str) -> fractalscore.score.Score:

		"""Compose a score from a production string.

		Raises:
			GrammarError: When brackets in the production are unbalanced.
		"""

		fractalscore.grammar.validate_brackets(production)

		self._begin()

		for index, symbol in enumerate(production):

			handler = self.handlers.get(symbol)

			if handler is not None:
				handler(self, index, production)

		logger.info(f"Composed {self.score.note_count()} note event(s) in {len(self.score.tokens)} tokens")

		return self.score


	def _begin (self) -> None:

		"""Reset everything owned by the composer for a new pass."""

		if self._reseed:
			self.rng.seed(self.config.seed)

		self.turtle.reset(angle=self.config.angle)
		self.score.begin()

		tonic = fractalscore.intervals.clamp_octave(self.score.tonic, self.config.low, self.config.high)
		self.turtle.set_y(tonic)

		self._scopes = []
		self._durations = []
		self._measure = 0
		self._chord_due = False

		if self.progression is not None:
			self.progression.reset()

		if self.corpus is not None:
			self.corpus.set_key(self.score.key_pc)


	# --- turning ---

	def _turn_left (self, index: int, production: str) -> None:
		self.turtle.turn(1)

	def _turn_right (self, index: int, production: str) -> None:
		self.turtle.turn(-1)


	# --- strokes ---

	def _draw (self, index: int, production: str) -> None:
		self._stroke(sounding=True)

	def _move (self, index: int, production: str) -> None:
		self._stroke(sounding=False)


	def _rest (self, index: int, production: str) -> None:

		if not self.turtle.direction.horizontal:
			return

		units = self._next_units()
		self.score.add_rest(units)
		self._advance(units)


	def _stroke (self, sounding: bool) -> None:

		"""Apply a draw or move stroke in the turtle's current heading."""

		direction = self.turtle.direction

		if direction.horizontal:

			units = self._next_units()

			if sounding:
				self._sound(units)
			else:
				self.score.add_rest(units)

			self._advance(units)

		elif direction.vertical:
			self._step_pitch(up=direction == fractalscore.turtle.Direction.UP)


	def _step_pitch (self, up: bool) -> None:

		"""Walk one diatonic step, folding back into the playable range."""

		pitch, degree = fractalscore.intervals.step_degree(self.turtle.y, self.score.degree, up)
		pitch = fractalscore.intervals.wrap_into_range(pitch, self.config.low, self.config.high)

		self.turtle.set_y(pitch)
		self.score.degree = degree


	def _sound (self, units: int) -> None:

		"""Write one sounding event of ``units`` length."""

		if not self.config.markov:
			pitch = self.turtle.y
			self.score.add_note(pitch, units, extend=True)
			self.score.set_note(pitch)
			return

		if self._chord_due:
			self._chord_due = False
			self._sound_chord(units)
			return

		pitch = self._choose_pitch()
		self.score.add_note(pitch, units)
		self.score.set_note(pitch)


	def _choose_pitch (self) -> int:

		"""Pick the next melody pitch from the corpus, holding the current pitch when it has no preference."""

		if self.corpus is None:
			return self.turtle.y

		pitch_class = self.corpus.sample_next(self.score.note, self.score.prev_note, self.rng)

		if pitch_class is None:
			return self.turtle.y

		pitch = fractalscore.intervals.nearest_pitch(self.turtle.y, pitch_class, self.config.low, self.config.high)

		self.turtle.set_y(pitch)
		self.score.degree = fractalscore.intervals.degree_for_pitch(pitch, self.score.key_pc)

		return pitch


	def _sound_chord (self, units: int) -> None:

		"""Write a triad from the running progression in place of a melody note."""

		assert self.progression is not None

		chord_index = self.progression.next_chord()
		tones = fractalscore.progression.triad(
			chord_index,
			self.score.key_pc,
			self.turtle.y,
			self.config.low,
			self.config.high
		)

		logger.debug(f"Measure {self._measure}: {fractalscore.progression.CHORD_DEGREES[chord_index]} chord {tones}")

		self.score.add_harmony(tones[:self.config.harmony_voices], units)


	# --- timing ---

	def _next_units (self) -> int:

		"""Return the length of the next horizontal event."""

		if not self.config.markov:
			return self.config.note_units

		if not self._durations:
			self._start_measure()

		step_units = fractalscore.constants.durations.WHOLE // self.config.steps_per_measure

		return self._durations.pop(0) * step_units


	def _start_measure (self) -> None:

		"""Draw a new Euclidean rhythm for the next measure."""

		if self._measure > 0:
			self.score.append(fractalscore.score.MEASURE_MARKER)

		steps = self.config.steps_per_measure
		pulses = self.rng.randint(self.config.min_pulses, self.config.max_pulses)
		rhythm = fractalscore.euclidean.EuclideanRhythm(pulses, steps)

		if rhythm.pulses:
			rhythm.rotate_by_pulse_groups(self.rng.randrange(rhythm.pulses))

		self._durations = rhythm.durations() or [steps]

		# A chord measure that holds only rests gets no chord.
		self._chord_due = self.progression is not None and self._measure % self.config.chord_every == 0

		logger.debug(f"Measure {self._measure}: E({pulses},{steps}) {rhythm}")

		self._measure += 1


	def _advance (self, units: int) -> None:

		"""Move the turtle and the score clock forward by ``units``."""

		self.turtle.advance(units)

		before = self.score.position
		self.score.position += units

		quarter = fractalscore.constants.durations.QUARTER

		for _ in range(self.score.position // quarter - before // quarter):
			self.score.next_beat()


	# --- branches ---

	def _push (self, index: int, production: str) -> None:

		"""Open a branch on a new layer, or a new voice once all layers are in use."""

		if self.score.layers < fractalscore.score.MAX_LAYERS:
			self.turtle.save_state()
			self.score.append(f"L{self.score.layers}")
			self.score.set_layers(self.score.layers + 1)
			self._scopes.append("layer")

		elif self.score.voices < fractalscore.score.MAX_VOICES:
			self.turtle.save_state()
			self.score.append(f"V{self.score.voices}")
			self.score.append(f"I{self.score.instrument}")
			self.score.append("L0")
			self.score.set_voices(self.score.voices + 1)
			self.score.set_layers(1)
			self._scopes.append("voice")

		else:
			# Past the ceiling the branch is flattened into the current layer.
			self._scopes.append(None)


	def _pop (self, index: int, production: str) -> None:

		"""Close the innermost branch and return to the layer or voice it came from."""

		kind = self._scopes.pop() if self._scopes else None

		if kind == "layer":
			self._restore()
			self.score.set_layers(self.score.layers - 1)
			self.score.append(f"L{self.score.layers - 1}")

		elif kind == "voice":
			self._restore()
			self.score.set_voices(self.score.voices - 1)
			self.score.set_layers(fractalscore.score.MAX_LAYERS)
			self.score.append(f"V{self.score.voices - 1}")
			self.score.append(f"L{self.score.layers - 1}")


	def _restore (self) -> None:

		"""Return the turtle to its saved scope and re-derive the scale degree from its pitch."""

		self.turtle.restore_state()
		self.score.degree = fractalscore.intervals.degree_for_pitch(self.turtle.y, self.score.key_pc)


	# --- hue ---

	def _hue_up (self, index: int, production: str) -> None:
		self._shift_hue(1, index, production)

	def _hue_down (self, index: int, production: str) -> None:
		self._shift_hue(-1, index, production)


	def _shift_hue (self, sign: int, index: int, production: str) -> None:

		"""Change the hue and write a controller token unless another hue change follows."""

		self.turtle.shift_hue(sign)

		following = index + 1

		while following < len(production) and production[following].isspace():
			following += 1

		if following < len(production) and production[following] in HUE_SYMBOLS:
			return

		value = (fractalscore.turtle.HUE_MAX - self.turtle.hue) // 3
		self.score.append(f"X{HUE_CONTROLLER}={value}")


_DEFAULT_HANDLERS: typing.Dict[Symbol, Handler] = {
	Symbol.TURN_LEFT: ScoreComposer._turn_left,
	Symbol.TURN_RIGHT: ScoreComposer._turn_right,
	Symbol.DRAW: ScoreComposer._draw,
	Symbol.MOVE: ScoreComposer._move,
	Symbol.REST: ScoreComposer._rest,
	Symbol.PUSH: ScoreComposer._push,
	Symbol.POP: ScoreComposer._pop,
	Symbol.HUE_UP: ScoreComposer._hue_up,
	Symbol.HUE_DOWN: ScoreComposer._hue_down,
}


def compose (
	production: str,
	config: typing.Optional[ComposerConfig] = None,
	corpus: typing.Union[fractalscore.corpus.CorpusModel, typing.Mapping[typing.Any, typing.Any], None] = None
) -> fractalscore.score.Score:

	"""
	Compose a production with a one-off composer.
	"""

	return ScoreComposer(config=config, corpus=corpus).compose(production)
