"""Built-in pattern templates.

Templates are starting points for common grooves.  Each belongs to a
category (``foundation``, ``genre``) and a difficulty, and can be turned into
a :class:`~potoolbox.pattern.Pattern` with :meth:`PatternTemplate.to_pattern`::

	template = potoolbox.templates.get_template("basic-rock")
	pattern = template.to_pattern(name="My Rock Beat", number=3)
"""

import dataclasses
import types
import typing

import potoolbox.pattern
import potoolbox.voices


DrumVoice = potoolbox.voices.DrumVoice
Difficulty = potoolbox.pattern.Difficulty


@dataclasses.dataclass(frozen=True)
class PatternTemplate:

	"""
	A named, pre-programmed set of voices.
	"""

	id: str
	name: str
	description: str
	category: str
	difficulty: potoolbox.pattern.Difficulty
	voices: typing.Mapping[potoolbox.voices.DrumVoice, typing.Tuple[int, ...]]
	suggested_bpm: typing.Optional[int] = None

	def __post_init__ (self) -> None:

		# Read-only, steps as tuples
		voices = {voice: tuple(steps) for voice, steps in self.voices.items()}
		object.__setattr__(self, "voices", types.MappingProxyType(voices))

	def __hash__ (self) -> int:
		return hash((self.id, frozenset(self.voices.items())))

	def to_pattern (
		self,
		name: typing.Optional[str] = None,
		number: int = 1,
		description: typing.Optional[str] = None,
		bpm: typing.Optional[int] = None,
		author: typing.Optional[str] = None
	) -> potoolbox.pattern.Pattern:

		"""
		Create a pattern from this template.

		Unset name, description and BPM fall back to the template's own.  The
		source attribution records the template used.
		"""

		metadata = potoolbox.pattern.PatternMetadata(
			name = name if name else self.name,
			description = description if description else self.description,
			bpm = bpm if bpm is not None else self.suggested_bpm,
			difficulty = self.difficulty,
			source_attribution = f"Template: {self.name}",
			author = author
		)

		return potoolbox.pattern.Pattern(voices=dict(self.voices), metadata=metadata, number=number)


FOUR_ON_FLOOR = PatternTemplate(
	id = "four-on-the-floor",
	name = "Four on the Floor",
	description = "Basic house/disco pattern with kick on every beat",
	category = "foundation",
	difficulty = Difficulty.BEGINNER,
	voices = {
		DrumVoice.KICK: (1, 5, 9, 13),
		DrumVoice.CLOSED_HH: (1, 3, 5, 7, 9, 11, 13, 15),
	},
	suggested_bpm = 120
)

BASIC_ROCK = PatternTemplate(
	id = "basic-rock",
	name = "Basic Rock",
	description = "Classic rock beat with kick, snare, and hi-hats",
	category = "genre",
	difficulty = Difficulty.BEGINNER,
	voices = {
		DrumVoice.KICK: (1, 9),
		DrumVoice.SNARE: (5, 13),
		DrumVoice.CLOSED_HH: (1, 3, 5, 7, 9, 11, 13, 15),
	},
	suggested_bpm = 120
)

BASIC_BREAKBEAT = PatternTemplate(
	id = "basic-breakbeat",
	name = "Basic Breakbeat",
	description = "Syncopated breakbeat pattern",
	category = "genre",
	difficulty = Difficulty.INTERMEDIATE,
	voices = {
		DrumVoice.KICK: (1, 7, 11),
		DrumVoice.SNARE: (5, 13),
		DrumVoice.CLOSED_HH: (1, 3, 5, 7, 9, 11, 13, 15),
	},
	suggested_bpm = 140
)

BASIC_HIPHOP = PatternTemplate(
	id = "basic-hiphop",
	name = "Basic Hip-Hop",
	description = "Classic hip-hop groove",
	category = "genre",
	difficulty = Difficulty.BEGINNER,
	voices = {
		DrumVoice.KICK: (1, 11),
		DrumVoice.SNARE: (5, 13),
	},
	suggested_bpm = 90
)

BASIC_TECHNO = PatternTemplate(
	id = "basic-techno",
	name = "Basic Techno",
	description = "Four-on-the-floor techno with hi-hats and claps",
	category = "genre",
	difficulty = Difficulty.BEGINNER,
	voices = {
		DrumVoice.KICK: (1, 5, 9, 13),
		DrumVoice.CLOSED_HH: (3, 7, 11, 15),
		DrumVoice.HAND_CLAP: (5, 13),
	},
	suggested_bpm = 128
)

_BUILT_IN: typing.Tuple[PatternTemplate, ...] = (
	FOUR_ON_FLOOR,
	BASIC_ROCK,
	BASIC_BREAKBEAT,
	BASIC_HIPHOP,
	BASIC_TECHNO,
)


def all_templates () -> typing.List[PatternTemplate]:
	return list(_BUILT_IN)


def by_category (category: str) -> typing.List[PatternTemplate]:
	return [template for template in _BUILT_IN if template.category == category]


def by_difficulty (difficulty: potoolbox.pattern.Difficulty) -> typing.List[PatternTemplate]:
	return [template for template in _BUILT_IN if template.difficulty == difficulty]


def categories () -> typing.List[str]:

	"""
	Template categories in first-seen order.
	"""

	return list(dict.fromkeys(template.category for template in _BUILT_IN))


def get_template (template_id: str) -> typing.Optional[PatternTemplate]:

	for template in _BUILT_IN:
		if template.id == template_id:
			return template

	return None
