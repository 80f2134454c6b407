"""Constants for fractalscore.

- ``fractalscore.constants.durations`` - The duration-code ladder used in score tokens
- ``fractalscore.constants.pulses`` - Tick resolution used when exporting scores to MIDI
"""

# One 4/4 measure on a sixteenth-note grid.
STEPS_PER_MEASURE = 16
