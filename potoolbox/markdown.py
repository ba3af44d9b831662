"""Markdown pattern files.

A pattern file is human-readable documentation that can also be parsed
back.  It has YAML-like front matter, one section per voice with a step
grid, and programming instructions for the device::

	---
	name: "Four on the Floor"
	bpm: 120
	genre: ["house", "techno"]
	difficulty: beginner
	date: 2025-01-01
	pattern_numbers: [1]
	chain_sequence: null
	---

	# Four on the Floor

	## Pattern 1

	### Bass Drum (Sound 1)
	```
	Step:   1   2   3   4   5   6   7   8   9  10  11  12  13  14  15  16
	      [●] [ ] [ ] [ ] [●] [ ] [ ] [ ] [●] [ ] [ ] [ ] [●] [ ] [ ] [ ]
	```

The reader is deliberately line-based and forgiving: unknown front matter
keys are ignored, voice headers are found by their ``Sound N`` suffix and
the grid is the first line with ``[●]`` or ``[ ]`` cells below the header.
"""

import datetime
import logging
import os
import pathlib
import re
import typing

import potoolbox.constants.steps
import potoolbox.pattern
import potoolbox.voices


logger = logging.getLogger(__name__)


ACTIVE_CELL = "[●]"
EMPTY_CELL = "[ ]"

# Voice grids must start within this many lines of their header
_GRID_SEARCH_LINES = 10

_SOUND_NUMBER_RE = re.compile(r"Sound (\d+)")
_CELL_RE = re.compile(r"\[(●| )\]")
_PATTERN_NUMBER_RE = re.compile(r"pattern_numbers:\s*\[(\d+)\]")
_SLUG_RE = re.compile(r"[^a-z0-9]+")


class MarkdownParseError(Exception):
	pass


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

def read_pattern (path: typing.Union[str, os.PathLike]) -> potoolbox.pattern.Pattern:

	"""
	Read a pattern from a markdown file.
	"""

	text = pathlib.Path(path).read_text(encoding="utf-8")

	return parse_markdown(text)


def parse_markdown (text: str) -> potoolbox.pattern.Pattern:

	"""
	Parse the text of a markdown pattern file.

	Raises:
		MarkdownParseError: The front matter or its ``name`` is missing, or a
			value cannot be read.
		ValueError: The parsed pattern breaks a ``Pattern`` invariant.
	"""

	lines = text.splitlines()

	return potoolbox.pattern.Pattern(
		voices = _parse_voices(lines),
		metadata = _parse_front_matter(lines),
		number = _parse_pattern_number(lines)
	)


def _parse_front_matter (lines: typing.List[str]) -> potoolbox.pattern.PatternMetadata:

	"""
	Read ``key: value`` pairs between the first two ``---`` lines.
	"""

	delimiters = [i for i, line in enumerate(lines) if line.strip() == "---"]

	if len(delimiters) < 2:
		raise MarkdownParseError("Invalid markdown: missing front matter")

	values: typing.Dict[str, str] = {}

	for line in lines[delimiters[0] + 1:delimiters[1]]:
		key, separator, value = line.partition(":")
		if separator:
			values[key.strip()] = value.strip()

	name = _unquote(values.get("name"))

	if name is None:
		raise MarkdownParseError("Missing name in front matter")

	difficulty = values.get("difficulty")
	date = values.get("date")

	try:
		date_created = datetime.date.fromisoformat(date) if date else datetime.date.today()
	except ValueError as e:
		raise MarkdownParseError(f"Invalid date in front matter: {date}") from e

	return potoolbox.pattern.PatternMetadata(
		name = name,
		description = _unquote(values.get("description")),
		bpm = _parse_int(values.get("bpm")),
		genre = _parse_genre_list(values.get("genre")),
		difficulty = potoolbox.pattern.Difficulty.from_string(difficulty) if difficulty else None,
		source_attribution = _unquote(values.get("source")),
		author = _unquote(values.get("author")),
		date_created = date_created
	)


def _parse_voices (lines: typing.List[str]) -> typing.Dict[potoolbox.voices.DrumVoice, typing.List[int]]:

	"""
	Find ``### ... (Sound N)`` headers and read the grid under each.
	"""

	voices: typing.Dict[potoolbox.voices.DrumVoice, typing.List[int]] = {}

	for i, line in enumerate(lines):

		if not line.startswith("###"):
			continue

		match = _SOUND_NUMBER_RE.search(line)
		if match is None:
			continue

		voice = potoolbox.voices.DrumVoice.from_po_number(int(match.group(1)))
		if voice is None:
			logger.debug(f"Ignoring unknown sound number in header: {line.strip()}")
			continue

		steps = _parse_step_grid(lines, i)
		if steps:
			voices[voice] = steps

	return voices


def _parse_step_grid (lines: typing.List[str], start: int) -> typing.List[int]:

	"""
	Return the active steps of the first grid line after ``start``.
	"""

	for line in lines[start:start + _GRID_SEARCH_LINES]:
		if ACTIVE_CELL in line or EMPTY_CELL in line:
			return [
				step
				for step, match in enumerate(_CELL_RE.finditer(line), start=1)
				if match.group(0) == ACTIVE_CELL
			]

	return []


def _parse_pattern_number (lines: typing.List[str]) -> int:

	for line in lines:
		match = _PATTERN_NUMBER_RE.search(line)
		if match is not None:
			return int(match.group(1))

	return 1


def _unquote (value: typing.Optional[str]) -> typing.Optional[str]:

	"""
	Strip surrounding double quotes and unescape inner ones.
	"""

	if value is None:
		return None

	value = value.strip()

	if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
		return value[1:-1].replace('\\"', '"')

	return value


def _parse_int (value: typing.Optional[str]) -> typing.Optional[int]:

	if value is None:
		return None

	try:
		return int(value)
	except ValueError:
		return None


def _parse_genre_list (value: typing.Optional[str]) -> typing.Tuple[str, ...]:

	"""
	Parse ``["a", "b"]``.  Anything that is not a bracketed list gives no genres.
	"""

	if value is None:
		return ()

	value = value.strip()

	if not (value.startswith("[") and value.endswith("]")):
		return ()

	items = (_unquote(item) or "" for item in value[1:-1].split(","))

	return tuple(item for item in items if item.strip())


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

def write_pattern (pattern: potoolbox.pattern.Pattern, directory: typing.Union[str, os.PathLike]) -> pathlib.Path:

	"""
	Write a pattern into ``directory`` as ``<slug>.md`` and return the path.
	"""

	path = pathlib.Path(directory) / file_name(pattern.metadata.name)
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(format_markdown(pattern), encoding="utf-8")

	logger.info(f"Wrote pattern '{pattern.metadata.name}' to {path}")

	return path


def file_name (name: str) -> str:

	"""
	Lower-case, hyphenated file name for a pattern name.
	"""

	return _SLUG_RE.sub("-", name.lower()).strip("-") + ".md"


def format_markdown (pattern: potoolbox.pattern.Pattern) -> str:

	"""
	Render a pattern in the markdown file format.
	"""

	metadata = pattern.metadata
	lines: typing.List[str] = []

	lines.extend(_front_matter_lines(metadata, pattern.number))
	lines.append("")

	lines.append(f"# {metadata.name}")
	lines.append("")

	if metadata.description is not None:
		lines.append(metadata.description)
		lines.append("")

	lines.append("")
	lines.append(f"## Pattern {pattern.number}")
	lines.append("")

	for voice in potoolbox.voices.sorted_voices(pattern.voices):
		lines.append(f"### {voice.display_name} (Sound {voice.po_number})")
		lines.append("```")
		lines.append(step_header())
		lines.append("      " + grid_cells(pattern.active_steps(voice)))
		lines.append("```")
		lines.append("")

	lines.append("")
	lines.append("## PO-12 Programming Instructions")
	lines.append("")
	lines.extend(programming_instructions(pattern))

	notes = _notes(metadata)

	if notes:
		lines.append("")
		lines.append("## Notes")
		lines.extend(f"- {note}" for note in notes)

	return "\n".join(lines) + "\n"


def _front_matter_lines (metadata: potoolbox.pattern.PatternMetadata, number: int) -> typing.List[str]:

	lines = ["---", f'name: "{_escape(metadata.name)}"']

	if metadata.description is not None:
		lines.append(f'description: "{_escape(metadata.description)}"')

	if metadata.bpm is not None:
		lines.append(f"bpm: {metadata.bpm}")

	if metadata.genre:
		lines.append("genre: [" + ", ".join(f'"{genre}"' for genre in metadata.genre) + "]")

	if metadata.difficulty is not None:
		lines.append(f"difficulty: {metadata.difficulty.display_name}")

	if metadata.source_attribution is not None:
		lines.append(f'source: "{_escape(metadata.source_attribution)}"')

	if metadata.author is not None:
		lines.append(f'author: "{_escape(metadata.author)}"')

	lines.append(f"date: {metadata.date_created.isoformat()}")
	lines.append(f"pattern_numbers: [{number}]")
	lines.append("chain_sequence: null")
	lines.append("---")

	return lines


def _escape (value: str) -> str:
	return value.replace('"', '\\"')


def step_header () -> str:

	"""
	The ``Step:`` line printed above each grid.
	"""

	numbers = "".join(f"{step:2d}  " for step in range(potoolbox.constants.steps.MIN_STEP, potoolbox.constants.steps.MAX_STEP + 1))

	return ("Step:  " + numbers).rstrip()


def grid_cells (active_steps: typing.Iterable[int]) -> str:

	"""
	Sixteen ``[●]`` / ``[ ]`` cells separated by spaces.
	"""

	active = set(active_steps)

	return " ".join(
		ACTIVE_CELL if step in active else EMPTY_CELL
		for step in range(potoolbox.constants.steps.MIN_STEP, potoolbox.constants.steps.MAX_STEP + 1)
	)


def programming_instructions (pattern: potoolbox.pattern.Pattern) -> typing.List[str]:

	"""
	Numbered steps for entering the pattern on the device.
	"""

	lines = [f"1. Select Pattern {pattern.number} on your PO-12"]
	number = 2

	for voice in potoolbox.voices.sorted_voices(pattern.voices):

		steps = pattern.active_steps(voice)
		if not steps:
			continue

		lines.append(f"{number}. For {voice.display_name} (button {voice.po_number}):")
		lines.append(f"   - Press and hold button {voice.po_number}")
		lines.append(f"   - Tap steps: {', '.join(str(step) for step in steps)}")
		number += 1

	return lines


def _notes (metadata: potoolbox.pattern.PatternMetadata) -> typing.List[str]:

	notes: typing.List[str] = []

	if metadata.bpm is not None:
		notes.append(f"Set tempo to {metadata.bpm} BPM for authentic feel")

	if metadata.source_attribution is not None:
		notes.append(f"Original: {metadata.source_attribution}")

	return notes
