"""Descriptive metrics for single patterns and pattern libraries.

Single-pattern metrics:

- **Density** - filled slots over available slots, counting only the voices
  the pattern uses (``notes / (voices * 16)``).
- **Syncopation** - share of hits that land off the quarter-note downbeats
  (steps 1, 5, 9, 13).  A step hit by several voices counts once per voice.
- **Complexity** - ``0.3 * voices/16 + 0.4 * density + 0.3 * syncopation``,
  clamped to 0-1.

Library metrics average the per-pattern values, rank voices by how many
patterns use them and summarise the tempo range.

Every metric has a defined value for empty patterns and empty libraries;
nothing here raises.
"""

import collections
import dataclasses
import typing

import potoolbox.constants.steps
import potoolbox.pattern
import potoolbox.voices


MOST_USED_VOICE_COUNT = 5

# Syncopation above this is treated as a breakbeat feel
BREAKBEAT_SYNCOPATION_THRESHOLD = 0.3


@dataclasses.dataclass(frozen=True)
class PatternStatistics:

	"""
	Metrics for one pattern.
	"""

	total_notes: int
	voice_count: int
	active_steps: int
	density: float
	step_coverage: float
	complexity: float
	voice_usage: typing.Dict[potoolbox.voices.DrumVoice, int]


@dataclasses.dataclass(frozen=True)
class BpmRange:

	"""
	Tempo summary over the patterns that declare a BPM.
	"""

	min: float = 0.0
	max: float = 0.0
	average: float = 0.0


@dataclasses.dataclass(frozen=True)
class LibraryStatistics:

	"""
	Aggregate metrics for a collection of patterns.
	"""

	total_patterns: int = 0
	average_density: float = 0.0
	average_complexity: float = 0.0
	most_used_voices: typing.Tuple[potoolbox.voices.DrumVoice, ...] = ()
	bpm_range: BpmRange = BpmRange()


class StatisticsAnalyzer:

	"""
	Stateless calculator for pattern and library metrics.
	"""

	def analyze (self, pattern: potoolbox.pattern.Pattern) -> PatternStatistics:

		"""
		Collect every single-pattern metric.
		"""

		active_steps = len({step for steps in pattern.voices.values() for step in steps})

		return PatternStatistics(
			total_notes = pattern.total_notes,
			voice_count = pattern.voice_count,
			active_steps = active_steps,
			density = self.density(pattern),
			step_coverage = active_steps / potoolbox.constants.steps.STEPS_PER_PATTERN,
			complexity = self.complexity(pattern),
			voice_usage = {voice: len(steps) for voice, steps in pattern.voices.items()}
		)

	def density (self, pattern: potoolbox.pattern.Pattern) -> float:

		"""
		Notes per available slot across the voices in use (0.0 when no voices).
		"""

		if pattern.voice_count == 0:
			return 0.0

		return pattern.total_notes / (pattern.voice_count * potoolbox.constants.steps.STEPS_PER_PATTERN)

	def complexity (self, pattern: potoolbox.pattern.Pattern) -> float:

		"""
		Rhythm complexity score between 0.0 and 1.0.

		Weighs the number of voices (saturating at all 16), density and
		syncopation.  An empty pattern scores 0.0.
		"""

		if not pattern.voices:
			return 0.0

		voice_complexity = pattern.voice_count / len(potoolbox.voices.DrumVoice)
		density_complexity = self.density(pattern)
		syncopation_complexity = self.syncopation(pattern)

		score = voice_complexity * 0.3 + density_complexity * 0.4 + syncopation_complexity * 0.3

		return min(max(score, 0.0), 1.0)

	def syncopation (self, pattern: potoolbox.pattern.Pattern) -> float:

		"""
		Share of hits (counted per voice) that fall on weak steps.
		"""

		all_steps = [step for steps in pattern.voices.values() for step in steps]

		if not all_steps:
			return 0.0

		weak_hits = sum(1 for step in all_steps if step in potoolbox.constants.steps.WEAK_BEATS)

		return weak_hits / len(all_steps)

	def is_four_on_the_floor (self, pattern: potoolbox.pattern.Pattern) -> bool:

		"""
		True when the kick plays on every quarter note (steps 1, 5, 9, 13).
		"""

		if not pattern.has_voice(potoolbox.voices.DrumVoice.KICK):
			return False

		kick_steps = set(pattern.active_steps(potoolbox.voices.DrumVoice.KICK))

		return potoolbox.constants.steps.STRONG_BEATS <= kick_steps

	def has_breakbeat_characteristics (self, pattern: potoolbox.pattern.Pattern) -> bool:

		"""
		Rough breakbeat check: kick and snare both play and syncopation exceeds 0.3.

		This is a heuristic, not a classifier - plenty of straight rock beats
		with busy hi-hats pass it.
		"""

		kick_steps = pattern.active_steps(potoolbox.voices.DrumVoice.KICK)
		snare_steps = pattern.active_steps(potoolbox.voices.DrumVoice.SNARE)

		if not kick_steps or not snare_steps:
			return False

		return self.syncopation(pattern) > BREAKBEAT_SYNCOPATION_THRESHOLD

	def analyze_library (self, library: typing.Sequence[potoolbox.pattern.Pattern]) -> LibraryStatistics:

		"""
		Aggregate metrics over a library.

		Averages are taken over per-pattern values.  Voice usage counts the
		patterns a voice appears in, not its notes; the top five are kept
		(ties in order of first appearance).  The BPM range only considers
		patterns with a BPM set.  An empty library gives all-zero statistics.
		"""

		if not library:
			return LibraryStatistics()

		densities = [self.density(pattern) for pattern in library]
		complexities = [self.complexity(pattern) for pattern in library]

		voice_frequency: typing.Counter[potoolbox.voices.DrumVoice] = collections.Counter()

		for pattern in library:
			voice_frequency.update(pattern.voices.keys())

		# Counter preserves first-insertion order, so the stable sort keeps it for ties
		ranked = sorted(voice_frequency.items(), key=lambda item: item[1], reverse=True)
		most_used = tuple(voice for voice, _ in ranked[:MOST_USED_VOICE_COUNT])

		return LibraryStatistics(
			total_patterns = len(library),
			average_density = sum(densities) / len(densities),
			average_complexity = sum(complexities) / len(complexities),
			most_used_voices = most_used,
			bpm_range = bpm_range(library)
		)

	def density_percentile (self, pattern: potoolbox.pattern.Pattern, library: typing.Sequence[potoolbox.pattern.Pattern]) -> float:

		"""
		Percentage of library patterns with strictly lower density (0-100).

		Patterns with equal density are not counted, so a pattern identical to
		every library entry sits at 0.  An empty library gives the neutral 50.0.
		"""

		if not library:
			return 50.0

		target = self.density(pattern)
		lower = sum(1 for other in library if self.density(other) < target)

		return lower / len(library) * 100.0


def bpm_range (library: typing.Iterable[potoolbox.pattern.Pattern]) -> BpmRange:

	"""
	Min, max and mean BPM of the patterns that declare one.
	"""

	bpms = [float(pattern.metadata.bpm) for pattern in library if pattern.metadata.bpm is not None]

	if not bpms:
		return BpmRange()

	return BpmRange(min=min(bpms), max=max(bpms), average=sum(bpms) / len(bpms))
