"""PO-12 drum voices.

The PO-12 (Rhythm) has 16 sounds, one per button.  Each voice carries the
button number used on the device, a display name, and the short name used
in text notation and file formats.  Other Pocket Operator models have their
own voice sets and are not covered here.
"""

import enum
import typing


class DrumVoice (enum.Enum):

	"""
	One of the 16 fixed PO-12 sounds.
	"""

	KICK = (1, "Bass Drum", "kick")
	SNARE = (2, "Snare", "snare")
	CLOSED_HH = (3, "Closed Hi-Hat", "closed-hh")
	OPEN_HH = (4, "Open Hi-Hat", "open-hh")
	TOM_LOW = (5, "Low Tom", "tom-low")
	TOM_MID = (6, "Mid Tom", "tom-mid")
	TOM_HIGH = (7, "High Tom", "tom-high")
	RIM_SHOT = (8, "Rim Shot", "rim")
	HAND_CLAP = (9, "Hand Clap", "clap")
	COWBELL = (10, "Cowbell", "cowbell")
	CYMBAL = (11, "Cymbal", "cymbal")
	CLICK = (12, "Click", "click")
	NOISE = (13, "Noise", "noise")
	BLIP = (14, "Blip", "blip")
	TONE = (15, "Tone", "tone")
	STICKS = (16, "Sticks", "sticks")

	def __init__ (self, po_number: int, display_name: str, short_name: str) -> None:
		self.po_number = po_number
		self.display_name = display_name
		self.short_name = short_name

	@classmethod
	def from_short_name (cls, name: str) -> typing.Optional["DrumVoice"]:

		"""
		Look up a voice by its short name (case-insensitive).
		"""

		wanted = name.strip().lower()

		for voice in cls:
			if voice.short_name == wanted:
				return voice

		return None

	@classmethod
	def from_po_number (cls, number: int) -> typing.Optional["DrumVoice"]:

		"""
		Look up a voice by its PO-12 button number.
		"""

		for voice in cls:
			if voice.po_number == number:
				return voice

		return None


def sorted_voices (voices: typing.Iterable[DrumVoice]) -> typing.List[DrumVoice]:

	"""
	Return voices ordered by PO-12 button number.
	"""

	return sorted(voices, key=lambda voice: voice.po_number)
