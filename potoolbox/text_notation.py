"""Quick text notation for entering patterns.

One voice per line, short voice name then the steps it plays::

	kick: 1, 5, 9, 13
	snare: 5 13
	# comments and blank lines are skipped
	closed-hh: 1,3,5,7 9 11 13 15

Steps may be separated by commas, spaces or both.  They are deduplicated
and sorted.  Lines that cannot be read are skipped rather than rejected, so
a half-typed line never loses the rest of the input.
"""

import logging
import os
import pathlib
import re
import typing

import potoolbox.constants.steps
import potoolbox.voices


logger = logging.getLogger(__name__)

_STEP_SEPARATOR_RE = re.compile(r"[,\s]+")


def parse_line (line: str) -> typing.Optional[typing.Tuple[potoolbox.voices.DrumVoice, typing.List[int]]]:

	"""
	Parse one ``voice: steps`` line.

	Returns:
		``(voice, steps)``, or ``None`` for blank lines, comments, unknown
		voices and step lists that are not all integers in 1-16.
	"""

	line = line.strip()

	if not line or line.startswith("#"):
		return None

	name, separator, steps_text = line.partition(":")

	if not separator:
		return None

	voice = potoolbox.voices.DrumVoice.from_short_name(name)

	if voice is None:
		return None

	steps = _parse_steps(steps_text)

	if steps is None:
		return None

	return voice, steps


def parse_text (text: str) -> typing.Dict[potoolbox.voices.DrumVoice, typing.List[int]]:

	"""
	Parse several lines.  A voice given twice keeps its last steps.
	"""

	voices: typing.Dict[potoolbox.voices.DrumVoice, typing.List[int]] = {}

	for line in text.splitlines():

		parsed = parse_line(line)

		if parsed is None:
			if line.strip() and not line.strip().startswith("#"):
				logger.debug(f"Skipping unreadable notation line: {line.strip()}")
			continue

		voice, steps = parsed
		voices[voice] = steps

	return voices


def parse_file (path: typing.Union[str, os.PathLike]) -> typing.Dict[potoolbox.voices.DrumVoice, typing.List[int]]:

	"""
	Parse a text notation file.
	"""

	return parse_text(pathlib.Path(path).read_text(encoding="utf-8"))


def _parse_steps (text: str) -> typing.Optional[typing.List[int]]:

	steps: typing.Set[int] = set()

	for part in _STEP_SEPARATOR_RE.split(text.strip()):

		if not part:
			continue

		try:
			step = int(part)
		except ValueError:
			return None

		if not potoolbox.constants.steps.MIN_STEP <= step <= potoolbox.constants.steps.MAX_STEP:
			return None

		steps.add(step)

	return sorted(steps)


def format_voices (voices: typing.Mapping[potoolbox.voices.DrumVoice, typing.Sequence[int]]) -> str:

	"""
	Format a voice mapping as notation lines, ordered by button number.
	"""

	return "\n".join(
		f"{voice.short_name}: {', '.join(str(step) for step in voices[voice])}"
		for voice in potoolbox.voices.sorted_voices(voices)
	)
