"""Plain-text rendering for the command line.

Patterns are drawn as one row per voice using the same cells as the
markdown files::

	Bass Drum      [●] [ ] [ ] [ ] [●] [ ] [ ] [ ] [●] [ ] [ ] [ ] [●] [ ] [ ] [ ]
	Snare          [ ] [ ] [ ] [ ] [●] [ ] [ ] [ ] [ ] [ ] [ ] [ ] [●] [ ] [ ] [ ]

The compact grid used in listings shows at most five voices and then a
``... and N more voice(s)`` line.
"""

import typing

import potoolbox.markdown
import potoolbox.pattern
import potoolbox.pattern_similarity
import potoolbox.pattern_statistics
import potoolbox.voices


_LABEL_WIDTH = 14
COMPACT_MAX_VOICES = 5


def format_percent (value: float) -> str:

	"""
	``0.256`` -> ``"25.6%"``.
	"""

	return f"{value * 100:.1f}%"


def voice_row (voice: potoolbox.voices.DrumVoice, steps: typing.Iterable[int]) -> str:
	label = voice.display_name[:_LABEL_WIDTH].ljust(_LABEL_WIDTH)
	return f"{label} {potoolbox.markdown.grid_cells(steps)}"


def header_row () -> str:

	"""
	Step numbers aligned with :func:`voice_row` cells.
	"""

	numbers = " ".join(f"{step:^3d}" for step in range(1, 17))

	return f"{'':{_LABEL_WIDTH}} {numbers}".rstrip()


def pattern_grid (pattern: potoolbox.pattern.Pattern, max_voices: typing.Optional[int] = None) -> typing.List[str]:

	"""
	Grid lines for a pattern, voices ordered by button number.

	With ``max_voices`` set, extra voices are summarised on a final line.
	"""

	voices = potoolbox.voices.sorted_voices(pattern.voices)
	shown = voices if max_voices is None else voices[:max_voices]

	lines = [header_row()]
	lines.extend(voice_row(voice, pattern.active_steps(voice)) for voice in shown)

	hidden = len(voices) - len(shown)

	if hidden > 0:
		lines.append(f"... and {hidden} more voice(s)")

	return lines


def compact_grid (pattern: potoolbox.pattern.Pattern) -> typing.List[str]:
	return pattern_grid(pattern, max_voices=COMPACT_MAX_VOICES)


def pattern_summary (pattern: potoolbox.pattern.Pattern) -> str:

	"""
	One line: name, number, BPM, genres and difficulty where known.
	"""

	metadata = pattern.metadata
	parts = [f"{metadata.name} (Pattern {pattern.number})"]

	if metadata.bpm is not None:
		parts.append(f"{metadata.bpm} BPM")

	if metadata.genre:
		parts.append(", ".join(metadata.genre))

	if metadata.difficulty is not None:
		parts.append(metadata.difficulty.display_name)

	return " - ".join(parts)


def pattern_details (pattern: potoolbox.pattern.Pattern) -> typing.List[str]:

	"""
	Full description of a pattern: summary, metadata, grid and instructions.
	"""

	metadata = pattern.metadata
	lines = [pattern_summary(pattern)]

	if metadata.description is not None:
		lines.append(metadata.description)

	if metadata.source_attribution is not None:
		lines.append(f"Source: {metadata.source_attribution}")

	if metadata.author is not None:
		lines.append(f"Author: {metadata.author}")

	lines.append("")
	lines.extend(pattern_grid(pattern))
	lines.append("")
	lines.append("Programming instructions:")
	lines.extend(potoolbox.markdown.programming_instructions(pattern))

	return lines


def format_table (headers: typing.Sequence[str], rows: typing.Iterable[typing.Sequence[str]]) -> typing.List[str]:

	"""
	Left-aligned columns separated by two spaces, with a dashed rule under the header.
	"""

	rows = [list(row) for row in rows]
	widths = [len(header) for header in headers]

	for row in rows:
		for i, cell in enumerate(row):
			widths[i] = max(widths[i], len(cell))

	def _line (cells: typing.Sequence[str]) -> str:
		return "  ".join(cell.ljust(width) for cell, width in zip(cells, widths)).rstrip()

	lines = [_line(headers), _line(["-" * width for width in widths])]
	lines.extend(_line(row) for row in rows)

	return lines


def statistics_lines (stats: potoolbox.pattern_statistics.PatternStatistics) -> typing.List[str]:

	lines = [
		f"Total notes:    {stats.total_notes}",
		f"Voices:         {stats.voice_count}",
		f"Active steps:   {stats.active_steps}/16",
		f"Density:        {format_percent(stats.density)}",
		f"Step coverage:  {format_percent(stats.step_coverage)}",
		f"Complexity:     {format_percent(stats.complexity)}",
	]

	if stats.voice_usage:
		lines.append("Voice usage:")
		lines.extend(
			f"  {voice.display_name}: {stats.voice_usage[voice]}"
			for voice in potoolbox.voices.sorted_voices(stats.voice_usage)
		)

	return lines


def library_statistics_lines (stats: potoolbox.pattern_statistics.LibraryStatistics) -> typing.List[str]:

	bpm = stats.bpm_range
	voices = ", ".join(voice.display_name for voice in stats.most_used_voices) or "none"

	return [
		f"Patterns:            {stats.total_patterns}",
		f"Average density:     {format_percent(stats.average_density)}",
		f"Average complexity:  {format_percent(stats.average_complexity)}",
		f"Most used voices:    {voices}",
		f"BPM range:           {bpm.min:.0f}-{bpm.max:.0f} (average {bpm.average:.1f})",
	]


def breakdown_lines (breakdown: potoolbox.pattern_similarity.SimilarityBreakdown) -> typing.List[str]:

	common = ", ".join(voice.display_name for voice in breakdown.common_voices) or "none"

	return [
		f"Voice similarity:   {format_percent(breakdown.voice)}",
		f"Step similarity:    {format_percent(breakdown.step)}",
		f"Rhythm similarity:  {format_percent(breakdown.rhythm)}",
		f"Density similarity: {format_percent(breakdown.density)}",
		f"Overall:            {format_percent(breakdown.overall)}",
		f"Common voices:      {common}",
	]
