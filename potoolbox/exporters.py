"""CSV and JSON export, and JSON import.

CSV comes in three layouts:

- **list** - one row per hit (``Voice Short Name,Voice Display Name,Step``),
  optionally prefixed with the pattern number and followed by name and BPM.
- **grid** - one row per voice, one column per step, ``X`` for a hit.
- **multiple** - the list layout for several patterns, with a pattern
  number column.

JSON holds the full pattern, metadata included, and can be read back with
:func:`import_json`::

	{
	  "patternNumber": 1,
	  "metadata": {"name": "Basic Rock", "bpm": 120, "dateCreated": "2025-01-01"},
	  "voices": [
	    {"shortName": "kick", "displayName": "Bass Drum", "poNumber": 1, "steps": [1, 9]}
	  ]
	}
"""

import csv
import datetime
import io
import json
import logging
import os
import pathlib
import typing

import potoolbox.constants.steps
import potoolbox.pattern
import potoolbox.voices


logger = logging.getLogger(__name__)

PathLike = typing.Union[str, os.PathLike]


class JsonImportError(Exception):
	pass


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

def csv_rows (pattern: potoolbox.pattern.Pattern, include_metadata: bool = False) -> typing.List[typing.List[str]]:

	"""
	Rows (header first) for the list layout.
	"""

	if include_metadata:
		rows = [["Pattern", "Voice Short Name", "Voice Display Name", "Step", "Name", "BPM"]]
	else:
		rows = [["Voice Short Name", "Voice Display Name", "Step"]]

	bpm = str(pattern.metadata.bpm) if pattern.metadata.bpm is not None else ""

	for voice, steps in pattern.voices.items():
		for step in steps:
			if include_metadata:
				rows.append([str(pattern.number), voice.short_name, voice.display_name, str(step), pattern.metadata.name, bpm])
			else:
				rows.append([voice.short_name, voice.display_name, str(step)])

	return rows


def csv_grid_rows (pattern: potoolbox.pattern.Pattern) -> typing.List[typing.List[str]]:

	"""
	Rows (header first) for the grid layout.
	"""

	step_range = range(potoolbox.constants.steps.MIN_STEP, potoolbox.constants.steps.MAX_STEP + 1)
	rows = [["Voice"] + [f"Step {step}" for step in step_range]]

	for voice, steps in pattern.voices.items():
		active = set(steps)
		rows.append([voice.display_name] + ["X" if step in active else "" for step in step_range])

	return rows


def csv_multiple_rows (patterns: typing.Iterable[potoolbox.pattern.Pattern]) -> typing.List[typing.List[str]]:

	"""
	Rows (header first) for several patterns in the list layout.
	"""

	rows = [["Pattern", "Voice Short Name", "Voice Display Name", "Step"]]

	for pattern in patterns:
		for voice, steps in pattern.voices.items():
			for step in steps:
				rows.append([str(pattern.number), voice.short_name, voice.display_name, str(step)])

	return rows


def format_csv (rows: typing.Iterable[typing.Sequence[str]]) -> str:

	"""
	Join rows into CSV text, quoting only where needed, without a trailing newline.
	"""

	buffer = io.StringIO()
	writer = csv.writer(buffer, lineterminator="\n")
	writer.writerows(rows)

	return buffer.getvalue().rstrip("\n")


def export_csv (pattern: potoolbox.pattern.Pattern, path: PathLike, include_metadata: bool = False) -> pathlib.Path:
	return _write_text(path, format_csv(csv_rows(pattern, include_metadata)))


def export_csv_grid (pattern: potoolbox.pattern.Pattern, path: PathLike) -> pathlib.Path:
	return _write_text(path, format_csv(csv_grid_rows(pattern)))


def export_csv_multiple (patterns: typing.Iterable[potoolbox.pattern.Pattern], path: PathLike) -> pathlib.Path:
	return _write_text(path, format_csv(csv_multiple_rows(patterns)))


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def pattern_to_dict (pattern: potoolbox.pattern.Pattern) -> typing.Dict[str, typing.Any]:

	"""
	JSON-ready representation of a pattern.  Unset optional fields are omitted.
	"""

	metadata = pattern.metadata
	meta: typing.Dict[str, typing.Any] = {"name": metadata.name}

	if metadata.description is not None:
		meta["description"] = metadata.description
	if metadata.bpm is not None:
		meta["bpm"] = metadata.bpm
	if metadata.genre:
		meta["genre"] = list(metadata.genre)
	if metadata.difficulty is not None:
		meta["difficulty"] = metadata.difficulty.display_name
	if metadata.source_attribution is not None:
		meta["source"] = metadata.source_attribution
	if metadata.author is not None:
		meta["author"] = metadata.author

	meta["dateCreated"] = metadata.date_created.isoformat()

	return {
		"patternNumber": pattern.number,
		"metadata": meta,
		"voices": [
			{
				"shortName": voice.short_name,
				"displayName": voice.display_name,
				"poNumber": voice.po_number,
				"steps": list(steps),
			}
			for voice, steps in pattern.voices.items()
		],
	}


def format_json (data: typing.Any, pretty: bool = True) -> str:
	return json.dumps(data, indent=2 if pretty else None, ensure_ascii=False)


def export_json (pattern: potoolbox.pattern.Pattern, path: PathLike, pretty: bool = True) -> pathlib.Path:
	return _write_text(path, format_json(pattern_to_dict(pattern), pretty))


def export_json_multiple (patterns: typing.Iterable[potoolbox.pattern.Pattern], path: PathLike, pretty: bool = True) -> pathlib.Path:
	return _write_text(path, format_json([pattern_to_dict(pattern) for pattern in patterns], pretty))


def pattern_from_dict (data: typing.Mapping[str, typing.Any]) -> potoolbox.pattern.Pattern:

	"""
	Rebuild a pattern from :func:`pattern_to_dict` output.

	Voices with unknown short names are skipped.

	Raises:
		JsonImportError: Required fields are missing or have the wrong type.
	"""

	try:
		meta = data["metadata"]
		difficulty = meta.get("difficulty")

		metadata = potoolbox.pattern.PatternMetadata(
			name = meta["name"],
			description = meta.get("description") or None,
			bpm = int(meta["bpm"]) if "bpm" in meta else None,
			genre = tuple(meta.get("genre", ())),
			difficulty = potoolbox.pattern.Difficulty.from_string(difficulty) if difficulty else None,
			source_attribution = meta.get("source") or None,
			author = meta.get("author") or None,
			date_created = datetime.date.fromisoformat(meta["dateCreated"])
		)

		voices: typing.Dict[potoolbox.voices.DrumVoice, typing.List[int]] = {}

		for entry in data["voices"]:
			voice = potoolbox.voices.DrumVoice.from_short_name(entry["shortName"])
			if voice is None:
				logger.warning(f"Skipping unknown voice in JSON: {entry['shortName']}")
				continue
			voices[voice] = [int(step) for step in entry["steps"]]

		number = int(data["patternNumber"])

	except (KeyError, TypeError, ValueError, AttributeError) as e:
		raise JsonImportError(f"Invalid pattern JSON: {e}") from e

	return potoolbox.pattern.Pattern(voices=voices, metadata=metadata, number=number)


def import_json (path: PathLike) -> typing.List[potoolbox.pattern.Pattern]:

	"""
	Read one pattern or a list of patterns from a JSON file.
	"""

	try:
		data = json.loads(pathlib.Path(path).read_text(encoding="utf-8"))
	except json.JSONDecodeError as e:
		raise JsonImportError(f"Invalid JSON in {path}: {e}") from e

	if isinstance(data, list):
		return [pattern_from_dict(item) for item in data]

	return [pattern_from_dict(data)]


def _write_text (path: PathLike, text: str) -> pathlib.Path:

	path = pathlib.Path(path)
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(text, encoding="utf-8")

	logger.info(f"Wrote {path}")

	return path
