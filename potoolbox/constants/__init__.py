"""Constants for potoolbox.

This package contains four sets of constants:

- ``potoolbox.constants.steps`` - The PO-12 step grid (16 steps, strong beats, pattern slots)
- ``potoolbox.constants.pulses`` - MIDI export timing (PPQ resolution, note duration, tempo)
- ``potoolbox.constants.velocity`` - MIDI velocity constants
- ``potoolbox.constants.gm_drums`` - General MIDI drum notes and the PO-12 voice map
"""
