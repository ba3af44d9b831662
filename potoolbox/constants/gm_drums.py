"""General MIDI drum notes for PO-12 voices.

Exported patterns play on the General MIDI percussion channel (channel 10,
0-indexed channel 9).  Each PO-12 voice is mapped to the closest GM Level 1
percussion sound so that a DAW or GM drum module plays something
recognisable::

	import potoolbox.constants.gm_drums
	import potoolbox.voices

	note = potoolbox.constants.gm_drums.voice_note(potoolbox.voices.DrumVoice.KICK)   # 36

The PO-12 synth voices (noise, blip, tone) have no GM equivalent and are
mapped to short percussive sounds instead.
"""

import typing

import potoolbox.voices


DRUM_CHANNEL = 9


# ─── Individual note constants ───────────────────────────────────────
#
# The subset of the GM Level 1 percussion key map used by the PO-12 voices.

STICKS = 31
METRONOME_CLICK = 33
KICK_1 = 36
SIDE_STICK = 37
SNARE_1 = 38
HAND_CLAP = 39
HI_HAT_CLOSED = 42
LOW_TOM = 45
HI_HAT_OPEN = 46
LOW_MID_TOM = 47
CRASH_1 = 49
HIGH_TOM = 50
TAMBOURINE = 54
COWBELL = 56
HIGH_WOODBLOCK = 76
MUTE_TRIANGLE = 80

# Used for any voice missing from the map
DEFAULT_DRUM_NOTE = SNARE_1


# ─── PO-12 voice map ─────────────────────────────────────────────────

PO12_VOICE_NOTE_MAP: typing.Dict[potoolbox.voices.DrumVoice, int] = {
	potoolbox.voices.DrumVoice.KICK: KICK_1,
	potoolbox.voices.DrumVoice.SNARE: SNARE_1,
	potoolbox.voices.DrumVoice.CLOSED_HH: HI_HAT_CLOSED,
	potoolbox.voices.DrumVoice.OPEN_HH: HI_HAT_OPEN,
	potoolbox.voices.DrumVoice.TOM_LOW: LOW_TOM,
	potoolbox.voices.DrumVoice.TOM_MID: LOW_MID_TOM,
	potoolbox.voices.DrumVoice.TOM_HIGH: HIGH_TOM,
	potoolbox.voices.DrumVoice.RIM_SHOT: SIDE_STICK,
	potoolbox.voices.DrumVoice.HAND_CLAP: HAND_CLAP,
	potoolbox.voices.DrumVoice.COWBELL: COWBELL,
	potoolbox.voices.DrumVoice.CYMBAL: CRASH_1,
	potoolbox.voices.DrumVoice.CLICK: METRONOME_CLICK,
	potoolbox.voices.DrumVoice.NOISE: TAMBOURINE,		# closest to noise
	potoolbox.voices.DrumVoice.BLIP: HIGH_WOODBLOCK,
	potoolbox.voices.DrumVoice.TONE: MUTE_TRIANGLE,
	potoolbox.voices.DrumVoice.STICKS: STICKS,
}


# ─── GM names for display ────────────────────────────────────────────

GM_DRUM_NAMES: typing.Dict[int, str] = {
	STICKS: "Sticks",
	METRONOME_CLICK: "Metronome Click",
	KICK_1: "Bass Drum 1",
	SIDE_STICK: "Side Stick",
	SNARE_1: "Acoustic Snare",
	HAND_CLAP: "Hand Clap",
	HI_HAT_CLOSED: "Closed Hi-Hat",
	LOW_TOM: "Low Tom",
	HI_HAT_OPEN: "Open Hi-Hat",
	LOW_MID_TOM: "Low-Mid Tom",
	CRASH_1: "Crash Cymbal 1",
	HIGH_TOM: "High Tom",
	TAMBOURINE: "Tambourine",
	COWBELL: "Cowbell",
	HIGH_WOODBLOCK: "Hi Wood Block",
	MUTE_TRIANGLE: "Mute Triangle",
}


def voice_note (voice: potoolbox.voices.DrumVoice) -> int:

	"""
	Return the GM drum note for a voice, falling back to the snare.
	"""

	return PO12_VOICE_NOTE_MAP.get(voice, DEFAULT_DRUM_NOTE)


def gm_drum_name (note: int) -> typing.Optional[str]:

	"""
	Return the GM percussion name for a note used by the voice map, or ``None``.
	"""

	return GM_DRUM_NAMES.get(note)
