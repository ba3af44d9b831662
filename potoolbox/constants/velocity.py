"""MIDI velocity constants.

Velocity is the MIDI attack strength.  PO-12 patterns carry no per-step
accents, so every exported hit uses one velocity.
"""

DEFAULT_VELOCITY = 100

# Note-on range accepted for exported hits (0 would be read as a note-off)
MIN_VELOCITY = 1
MAX_VELOCITY = 127
