"""Loading and filtering a directory of markdown pattern files."""

import logging
import os
import pathlib
import typing

import potoolbox.markdown
import potoolbox.pattern
import potoolbox.voices


logger = logging.getLogger(__name__)

PathLike = typing.Union[str, os.PathLike]

README_NAME = "README.md"


def load_library (directory: PathLike, exclude: typing.Optional[PathLike] = None) -> typing.List[potoolbox.pattern.Pattern]:

	"""
	Load every pattern file in ``directory``, ordered by file name.

	``README.md`` and the optional ``exclude`` path are skipped.  Files that
	cannot be parsed are logged and left out.  A missing directory gives an
	empty library.
	"""

	directory = pathlib.Path(directory)

	if not directory.is_dir():
		logger.warning(f"Pattern directory {directory} not found")
		return []

	excluded = pathlib.Path(exclude).resolve() if exclude is not None else None
	patterns: typing.List[potoolbox.pattern.Pattern] = []

	for path in sorted(directory.glob("*.md")):

		if path.name == README_NAME:
			continue

		if excluded is not None and path.resolve() == excluded:
			continue

		try:
			patterns.append(potoolbox.markdown.read_pattern(path))
		except (potoolbox.markdown.MarkdownParseError, ValueError, OSError) as e:
			logger.warning(f"Skipping {path.name}: {e}")

	logger.debug(f"Loaded {len(patterns)} patterns from {directory}")

	return patterns


def filter_patterns (
	patterns: typing.Iterable[potoolbox.pattern.Pattern],
	genre: typing.Optional[str] = None,
	difficulty: typing.Optional[potoolbox.pattern.Difficulty] = None,
	min_bpm: typing.Optional[int] = None,
	max_bpm: typing.Optional[int] = None,
) -> typing.List[potoolbox.pattern.Pattern]:

	"""
	Keep patterns matching every given filter.

	Genre matches case-insensitively as a substring of any of the pattern's
	genres.  A BPM filter drops patterns that have no BPM.
	"""

	result: typing.List[potoolbox.pattern.Pattern] = []

	for pattern in patterns:

		metadata = pattern.metadata

		if genre is not None and not any(genre.lower() in g.lower() for g in metadata.genre):
			continue

		if difficulty is not None and metadata.difficulty != difficulty:
			continue

		if min_bpm is not None and (metadata.bpm is None or metadata.bpm < min_bpm):
			continue

		if max_bpm is not None and (metadata.bpm is None or metadata.bpm > max_bpm):
			continue

		result.append(pattern)

	return result


def load_voice (path: PathLike, voice: potoolbox.voices.DrumVoice) -> typing.Optional[typing.Tuple[int, ...]]:

	"""
	The steps of one voice in a pattern file, or ``None``.
	"""

	try:
		pattern = potoolbox.markdown.read_pattern(path)
	except (potoolbox.markdown.MarkdownParseError, ValueError, OSError) as e:
		logger.warning(f"Could not read {path}: {e}")
		return None

	if not pattern.has_voice(voice):
		return None

	return pattern.active_steps(voice)
