import logging
import os
import sys
import typing

import yaml

import fractalscore.composer
import fractalscore.corpus_io
import fractalscore.grammar
import fractalscore.midi_export


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


DEFAULT_GENERATIONS = 4


def load_config (config_path: str = 'config.yaml') -> dict:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		return yaml.safe_load(f) or {}


def build_grammar (section: typing.Optional[dict]) -> typing.Tuple[fractalscore.grammar.Grammar, int]:

	"""
	Build the grammar and generation count described by the ``grammar`` config section.

	The section either names a built-in grammar (``preset: 2``) or spells one
	out with ``axiom`` and ``rules``. Rules are a list parallel to ``alphabet``
	or a ``symbol: replacement`` mapping.
	"""

	section = section or {}
	generations = int(section.get('generations', DEFAULT_GENERATIONS))

	if 'axiom' not in section:
		return fractalscore.grammar.Grammar.preset(int(section.get('preset', 0))), generations

	rules = section.get('rules') or {}

	if isinstance(rules, dict):
		return fractalscore.grammar.Grammar.from_mapping(str(section['axiom']), {str(k): str(v) for k, v in rules.items()}), generations

	alphabet = [str(symbol) for symbol in section.get('alphabet', [])]

	return fractalscore.grammar.Grammar(alphabet=alphabet, axiom=str(section['axiom']), rules=[str(rule) for rule in rules]), generations


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Main entry point: compose a score from a YAML config and print it.
	"""

	args = sys.argv[1:] if argv is None else argv
	config = load_config(args[0] if args else 'config.yaml')

	output = config.get('output') or {}

	try:
		grammar, generations = build_grammar(config.get('grammar'))
		composer_config = fractalscore.composer.ComposerConfig.from_dict(config.get('composer'))
		corpus = fractalscore.corpus_io.load_corpus(config.get('corpus')) or None

		logger.info(f"Grammar:\n{grammar.describe()}")

		composer = fractalscore.composer.ScoreComposer(composer_config, corpus=corpus)
		score = composer.compose_grammar(grammar, generations)

	except (ValueError, FileNotFoundError) as e:
		logger.error(f"Cannot compose: {e}")
		return 1

	print(score)

	if output.get('score'):
		with open(output['score'], 'w') as f:
			f.write(score.to_string() + "\n")
		logger.info(f"Saved {output['score']}")

	if output.get('midi'):
		fractalscore.midi_export.save_midi(score, output['midi'])

	return 0


if __name__ == "__main__":
	sys.exit(main())
