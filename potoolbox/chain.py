"""Pattern chains.

The PO-12 plays several patterns back to back when they are chained,
which is how multi-bar phrases are built.  The 2-bar Amen break, for
example, is patterns 1 and 2 chained as ``1,2``.  A sequence can repeat
patterns (``1,1,1,2``), so the number of bars is the sequence length rather
than the number of distinct patterns.
"""

import dataclasses
import typing

import potoolbox.pattern


@dataclasses.dataclass(frozen=True)
class PatternChain:

	"""
	Patterns and the order they play in.

	Parameters:
		name: Chain name.
		patterns: The distinct patterns used by the chain.
		sequence: Pattern numbers in play order.
		metadata: Metadata for the chain as a whole.
	"""

	name: str
	patterns: typing.Tuple[potoolbox.pattern.Pattern, ...]
	sequence: typing.Tuple[int, ...]
	metadata: potoolbox.pattern.PatternMetadata

	def __post_init__ (self) -> None:

		object.__setattr__(self, "patterns", tuple(self.patterns))
		object.__setattr__(self, "sequence", tuple(self.sequence))

		if not self.name.strip():
			raise ValueError("Chain name is required")

		if not self.patterns:
			raise ValueError("Chain must contain at least one pattern")

		if not self.sequence:
			raise ValueError("Chain sequence cannot be empty")

		numbers = {pattern.number for pattern in self.patterns}

		for number in self.sequence:
			if number not in numbers:
				raise ValueError(f"Sequence references pattern {number} but it's not in the chain")

	@classmethod
	def from_patterns (cls, patterns: typing.Sequence[potoolbox.pattern.Pattern], name: typing.Optional[str] = None, metadata: typing.Optional[potoolbox.pattern.PatternMetadata] = None) -> "PatternChain":

		"""
		Chain patterns in the order given.

		Name and metadata default to those of the first pattern.
		"""

		if not patterns:
			raise ValueError("Chain must contain at least one pattern")

		first = patterns[0]

		return cls(
			name = name if name is not None else first.metadata.name,
			patterns = tuple(patterns),
			sequence = tuple(pattern.number for pattern in patterns),
			metadata = metadata if metadata is not None else first.metadata
		)

	@property
	def total_bars (self) -> int:
		return len(self.sequence)

	@property
	def sequence_string (self) -> str:

		"""
		The sequence as typed on the device, e.g. ``"1,1,2"``.
		"""

		return ",".join(str(number) for number in self.sequence)

	def get_pattern (self, number: int) -> typing.Optional[potoolbox.pattern.Pattern]:

		"""
		The first pattern with this number, or ``None``.
		"""

		for pattern in self.patterns:
			if pattern.number == number:
				return pattern

		return None

	def patterns_in_sequence (self) -> typing.List[potoolbox.pattern.Pattern]:

		"""
		Patterns in play order, repeats included.
		"""

		return [pattern for pattern in (self.get_pattern(number) for number in self.sequence) if pattern is not None]
