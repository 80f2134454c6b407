import logging

import fractalscore
import fractalscore.grammar

logging.basicConfig(level=logging.INFO)

# A branching grammar: every bracket opens a new layer, so the fractal's
# side shoots play against the trunk.
grammar = fractalscore.Grammar.from_mapping("X", {
	"X": "g[+gX]g[-gX]gX",
})

print(grammar.describe())

composer = fractalscore.ScoreComposer(fractalscore.ComposerConfig(key="D", tempo=84))
score = composer.compose_grammar(grammar, generations=3)

print(score)

fractalscore.save_midi(score, "branches.mid")

# Compare the built-in grammars in Markov mode with a tiny corpus.
corpus = {"C": ["C5q D5q E5q G5q E5q D5q C5h", "E5q F5q G5q A5q G5h"]}

for index in range(len(fractalscore.grammar.DEFAULT_GRAMMARS)):

	markov = fractalscore.ScoreComposer(fractalscore.ComposerConfig(markov=True, seed=index), corpus=corpus)
	score = markov.compose_grammar(fractalscore.Grammar.preset(index), generations=3)

	logging.info(f"Preset {index}: {score.note_count()} note events")
