"""Tick constants for MIDI export.

Exported files use the common resolution of 480 ticks per quarter note. One
128th-note duration unit is therefore 15 ticks.
"""

TICKS_PER_BEAT = 480
TICKS_PER_UNIT = 15
