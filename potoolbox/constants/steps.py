"""PO-12 step grid constants.

A PO-12 pattern is one bar of 4/4 split into 16 steps, so each step is a
sixteenth note and every fourth step starts a beat.  Steps are numbered
1-16 the way they are printed on the device.
"""

import typing


STEPS_PER_PATTERN = 16
STEPS_PER_BEAT = 4

MIN_STEP = 1
MAX_STEP = 16

# The PO-12 stores 16 patterns
MIN_PATTERN_NUMBER = 1
MAX_PATTERN_NUMBER = 16

# Quarter-note downbeats
STRONG_BEATS: typing.FrozenSet[int] = frozenset({1, 5, 9, 13})
WEAK_BEATS: typing.FrozenSet[int] = frozenset(range(MIN_STEP, MAX_STEP + 1)) - STRONG_BEATS

# Fastest tempo the device can play
PO12_MAX_BPM = 206

# Range outside which a BPM is unusual for any drum pattern
TYPICAL_MIN_BPM = 60
TYPICAL_MAX_BPM = 300
