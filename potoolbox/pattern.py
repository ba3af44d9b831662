import dataclasses
import datetime
import enum
import types
import typing

import potoolbox.constants.steps
import potoolbox.voices


VoiceSteps = typing.Mapping[potoolbox.voices.DrumVoice, typing.Sequence[int]]


class Difficulty (enum.Enum):

	"""
	How hard a pattern is to play or program.
	"""

	BEGINNER = "beginner"
	INTERMEDIATE = "intermediate"
	ADVANCED = "advanced"

	@property
	def display_name (self) -> str:
		return self.value

	@classmethod
	def from_string (cls, value: str) -> typing.Optional["Difficulty"]:

		"""
		Look up a difficulty by name (case-insensitive), or return ``None``.
		"""

		wanted = value.strip().lower()

		for difficulty in cls:
			if difficulty.value == wanted:
				return difficulty

		return None


@dataclasses.dataclass(frozen=True)
class PatternMetadata:

	"""
	Descriptive information attached to a pattern.

	The BPM is not range checked here; ``PatternValidator`` warns about
	tempos the PO-12 cannot play.
	"""

	name: str
	description: typing.Optional[str] = None
	bpm: typing.Optional[int] = None
	genre: typing.Tuple[str, ...] = ()
	difficulty: typing.Optional[Difficulty] = None
	source_attribution: typing.Optional[str] = None
	author: typing.Optional[str] = None
	date_created: datetime.date = dataclasses.field(default_factory=datetime.date.today)

	def __post_init__ (self) -> None:
		object.__setattr__(self, "genre", tuple(self.genre))


@dataclasses.dataclass(frozen=True)
class Pattern:

	"""
	One 16-step PO-12 pattern.

	``voices`` maps each programmed voice to the steps (1-16) it plays.
	Voice order is kept as given.  The mapping is read-only and steps are
	stored as tuples, so a pattern can be shared freely between callers.

	Step and pattern-number ranges are checked on construction.  Duplicate
	steps and blank names are reported by
	:class:`potoolbox.validation.PatternValidator` instead, so that a file
	with those problems can still be loaded and diagnosed.

	Example:
		```python
		pattern = Pattern(
			voices = {DrumVoice.KICK: [1, 5, 9, 13], DrumVoice.SNARE: [5, 13]},
			metadata = PatternMetadata(name="Four on the Floor", bpm=120),
		)
		```
	"""

	voices: VoiceSteps
	metadata: PatternMetadata
	number: int = 1

	def __post_init__ (self) -> None:

		if not potoolbox.constants.steps.MIN_PATTERN_NUMBER <= self.number <= potoolbox.constants.steps.MAX_PATTERN_NUMBER:
			raise ValueError(f"Pattern number must be between 1 and 16, got {self.number}")

		voices: typing.Dict[potoolbox.voices.DrumVoice, typing.Tuple[int, ...]] = {}

		for voice, steps in self.voices.items():

			steps = tuple(steps)

			for step in steps:
				if not potoolbox.constants.steps.MIN_STEP <= step <= potoolbox.constants.steps.MAX_STEP:
					raise ValueError(f"All steps must be between 1 and 16, got {step} for {voice.display_name}")

			voices[voice] = steps

		object.__setattr__(self, "voices", types.MappingProxyType(voices))

	def __hash__ (self) -> int:

		"""
		Hash the voices as a set of items, so equal patterns hash equally
		whatever order their voices were given in.
		"""

		return hash((frozenset(self.voices.items()), self.metadata, self.number))

	def active_steps (self, voice: potoolbox.voices.DrumVoice) -> typing.Tuple[int, ...]:

		"""
		Return the steps played by a voice, or an empty tuple if it is not programmed.
		"""

		return tuple(self.voices.get(voice, ()))

	def has_voice (self, voice: potoolbox.voices.DrumVoice) -> bool:
		return voice in self.voices

	@property
	def total_notes (self) -> int:
		return sum(len(steps) for steps in self.voices.values())

	@property
	def voice_count (self) -> int:
		return len(self.voices)

	def with_voices (self, voices: VoiceSteps) -> "Pattern":

		"""
		Return a copy of this pattern with a different voice mapping.
		"""

		return dataclasses.replace(self, voices=voices)
