"""
fractalscore - L-system grammars interpreted as music.

A rewriting grammar expands a short axiom into a long string of symbols. A
turtle walks that string: turns change its heading, strokes either advance
time (a note or a rest) or walk the pitch up and down the scale, brackets
branch into new layers and voices. The result is a symbolic score written as
whitespace-delimited tokens, which can be exported to a standard MIDI file.

Two layers of controlled chance sit on top of the deterministic walk:

- **Euclidean rhythm.** Each measure gets a fresh maximally-even rhythm
  with a random number of onsets and a random rotation.
- **Corpus Markov chain.** Pitches are drawn from first- or second-order
  transition tables learned from reference melodies in the active key, and
  every few measures a triad from a functional-harmony progression
  (I, V, IV, vi, iii, ii) supports the line.

Minimal example:

    ```python
    import fractalscore

    grammar = fractalscore.Grammar.preset(0)
    score = fractalscore.ScoreComposer().compose_grammar(grammar, generations=4)
    print(score)
    ```

Run ``python -m fractalscore config.yaml`` to compose from a YAML file.

Package-level exports: ``ComposerConfig``, ``CorpusModel``,
``EuclideanRhythm``, ``Grammar``, ``ScoreComposer``, ``save_midi``.
"""

import fractalscore.composer
import fractalscore.corpus
import fractalscore.euclidean
import fractalscore.grammar
import fractalscore.midi_export


ComposerConfig = fractalscore.composer.ComposerConfig
CorpusModel = fractalscore.corpus.CorpusModel
EuclideanRhythm = fractalscore.euclidean.EuclideanRhythm
Grammar = fractalscore.grammar.Grammar
ScoreComposer = fractalscore.composer.ScoreComposer
save_midi = fractalscore.midi_export.save_midi
