"""MIDI export timing constants.

Exported files use **96 pulses per quarter note** (PPQ = 96) unless another
resolution is requested.  A step is a sixteenth note, so at the default
resolution each step is 24 ticks long.
"""

DEFAULT_RESOLUTION = 96			# Ticks per quarter note
DEFAULT_NOTE_DURATION = 96		# Ticks (one quarter note at the default resolution)

MICROSECONDS_PER_MINUTE = 60_000_000

# Tempo written when the first pattern has no BPM
DEFAULT_BPM = 120

# Largest tempo a set_tempo meta event can hold (24 bits of microseconds)
MAX_MIDI_TEMPO = 0xFFFFFF
