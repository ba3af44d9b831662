"""Similarity scoring between drum patterns.

Two patterns are compared along three axes, each scored from 0.0 to 1.0:

- **Voice similarity** - Jaccard index of the voices each pattern uses,
  ignoring where they play.
- **Step similarity** - for every voice both patterns use, the share of hits
  they have in common (overlap divided by the larger hit count), averaged
  over those voices.
- **Rhythm similarity** - Jaccard index of the steps that have any hit at
  all, ignoring which voice plays them.

The overall score is a weighted sum of the three (0.4 / 0.4 / 0.2 by
default).  Weights are used as given: if they do not sum to 1.0 the score is
not normalised and can leave the 0-1 range.  Check
:meth:`SimilarityWeights.is_valid` first when that matters.

Example:
	```python
	analyzer = SimilarityAnalyzer()

	for result in analyzer.find_similar(target, library, threshold=0.6):
		print(result.pattern.metadata.name, result.similarity)
	```
"""

import dataclasses
import typing

import potoolbox.pattern
import potoolbox.voices


@dataclasses.dataclass(frozen=True)
class SimilarityWeights:

	"""
	Weights for the voice, step and rhythm components of the overall score.
	"""

	voice: float = 0.4
	step: float = 0.4
	rhythm: float = 0.2

	def is_valid (self) -> bool:

		"""
		True when the weights sum to 1.0 (within 0.001).
		"""

		return abs(self.voice + self.step + self.rhythm - 1.0) < 0.001


@dataclasses.dataclass(frozen=True)
class SimilarityResult:

	"""
	A library pattern and its similarity to the search target.
	"""

	pattern: potoolbox.pattern.Pattern
	similarity: float


@dataclasses.dataclass(frozen=True)
class SimilarityBreakdown:

	"""
	Every component score for one pair of patterns.
	"""

	voice: float
	step: float
	rhythm: float
	density: float
	overall: float
	common_voices: typing.Tuple[potoolbox.voices.DrumVoice, ...]


class SimilarityAnalyzer:

	"""
	Stateless calculator for pattern similarity scores.
	"""

	def similarity (self, a: potoolbox.pattern.Pattern, b: potoolbox.pattern.Pattern, weights: typing.Optional[SimilarityWeights] = None) -> float:

		"""
		Weighted combination of voice, step and rhythm similarity.
		"""

		if weights is None:
			weights = SimilarityWeights()

		return (
			self.voice_similarity(a, b) * weights.voice
			+ self.step_similarity(a, b) * weights.step
			+ self.rhythm_similarity(a, b) * weights.rhythm
		)

	def voice_similarity (self, a: potoolbox.pattern.Pattern, b: potoolbox.pattern.Pattern) -> float:

		"""
		Jaccard index of the two patterns' voice sets.

		Two empty patterns are identical (1.0); an empty pattern shares
		nothing with a non-empty one (0.0).
		"""

		return self.jaccard_similarity(set(a.voices), set(b.voices))

	def step_similarity (self, a: potoolbox.pattern.Pattern, b: potoolbox.pattern.Pattern) -> float:

		"""
		Mean per-voice step overlap across the voices both patterns use.

		Each common voice scores ``|A ∩ B| / max(|A|, |B|)``, so a voice
		whose hits are a subset of the other's still scores in proportion to
		how many hits it shares.  Every common voice counts equally.
		"""

		if not a.voices and not b.voices:
			return 1.0

		if not a.voices or not b.voices:
			return 0.0

		common_voices = [voice for voice in a.voices if voice in b.voices]

		if not common_voices:
			return 0.0

		scores: typing.List[float] = []

		for voice in common_voices:

			steps_a = set(a.voices[voice])
			steps_b = set(b.voices[voice])
			largest = max(len(steps_a), len(steps_b))

			if largest == 0:
				scores.append(1.0)
			else:
				scores.append(len(steps_a & steps_b) / largest)

		return sum(scores) / len(scores)

	def rhythm_similarity (self, a: potoolbox.pattern.Pattern, b: potoolbox.pattern.Pattern) -> float:

		"""
		Jaccard index of the steps that have any hit, whichever voice plays them.
		"""

		if not a.voices and not b.voices:
			return 1.0

		if not a.voices or not b.voices:
			return 0.0

		return self.jaccard_similarity(rhythm_signature(a), rhythm_signature(b))

	def density_similarity (self, a: potoolbox.pattern.Pattern, b: potoolbox.pattern.Pattern) -> float:

		"""
		Ratio of the smaller to the larger total note count.

		Not part of the weighted score.
		"""

		count_a = a.total_notes
		count_b = b.total_notes

		if count_a == 0 and count_b == 0:
			return 1.0

		return min(count_a, count_b) / max(count_a, count_b)

	@staticmethod
	def jaccard_similarity (first: typing.AbstractSet[typing.Any], second: typing.AbstractSet[typing.Any]) -> float:

		"""
		``|first ∩ second| / |first ∪ second|``, 1.0 for two empty sets.
		"""

		if not first and not second:
			return 1.0

		if not first or not second:
			return 0.0

		return len(first & second) / len(first | second)

	def find_similar (
		self,
		target: potoolbox.pattern.Pattern,
		library: typing.Iterable[potoolbox.pattern.Pattern],
		threshold: float = 0.5,
		weights: typing.Optional[SimilarityWeights] = None
	) -> typing.List[SimilarityResult]:

		"""
		Score every library pattern against a target and rank the matches.

		Parameters:
			target: The pattern to search for.
			library: Candidate patterns.  The target itself is not excluded.
			threshold: Minimum score to keep (inclusive).
			weights: Component weights (defaults to 0.4 / 0.4 / 0.2).

		Returns:
			Results with ``similarity >= threshold``, highest first.  Equal
			scores keep their library order.
		"""

		results = [
			SimilarityResult(pattern=pattern, similarity=self.similarity(target, pattern, weights))
			for pattern in library
		]

		matches = [result for result in results if result.similarity >= threshold]
		matches.sort(key=lambda result: result.similarity, reverse=True)

		return matches

	def breakdown (self, a: potoolbox.pattern.Pattern, b: potoolbox.pattern.Pattern, weights: typing.Optional[SimilarityWeights] = None) -> SimilarityBreakdown:

		"""
		Compute every component score for a pair, for reporting.
		"""

		return SimilarityBreakdown(
			voice = self.voice_similarity(a, b),
			step = self.step_similarity(a, b),
			rhythm = self.rhythm_similarity(a, b),
			density = self.density_similarity(a, b),
			overall = self.similarity(a, b, weights),
			common_voices = tuple(voice for voice in a.voices if voice in b.voices)
		)


def rhythm_signature (pattern: potoolbox.pattern.Pattern) -> typing.FrozenSet[int]:

	"""
	The set of steps that have at least one hit in any voice.
	"""

	return frozenset(step for steps in pattern.voices.values() for step in steps)
