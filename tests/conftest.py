import datetime
import pathlib
import typing

import pytest

import potoolbox.markdown
import potoolbox.pattern
import potoolbox.voices


DrumVoice = potoolbox.voices.DrumVoice

PatternFactory = typing.Callable[..., potoolbox.pattern.Pattern]


def make_pattern (
	voices: typing.Optional[typing.Mapping[DrumVoice, typing.Sequence[int]]] = None,
	name: str = "Test Pattern",
	number: int = 1,
	**metadata: typing.Any
) -> potoolbox.pattern.Pattern:

	"""Build a pattern with a fixed creation date so output is reproducible."""

	metadata.setdefault("date_created", datetime.date(2025, 1, 1))

	return potoolbox.pattern.Pattern(
		voices = dict(voices or {}),
		metadata = potoolbox.pattern.PatternMetadata(name=name, **metadata),
		number = number
	)


@pytest.fixture
def pattern_factory () -> PatternFactory:

	"""Expose make_pattern to tests as a fixture."""

	return make_pattern


@pytest.fixture
def basic_rock () -> potoolbox.pattern.Pattern:

	"""Kick on 1 and 9, snare on the backbeat, eighth-note hi-hats."""

	return make_pattern(
		{
			DrumVoice.KICK: [1, 9],
			DrumVoice.SNARE: [5, 13],
			DrumVoice.CLOSED_HH: [1, 3, 5, 7, 9, 11, 13, 15],
		},
		name = "Basic Rock",
		bpm = 120,
		genre = ("rock",),
		difficulty = potoolbox.pattern.Difficulty.BEGINNER
	)


@pytest.fixture
def four_on_floor () -> potoolbox.pattern.Pattern:

	"""House kick on every beat with a backbeat snare."""

	return make_pattern(
		{
			DrumVoice.KICK: [1, 5, 9, 13],
			DrumVoice.SNARE: [5, 13],
		},
		name = "Four on the Floor",
		bpm = 124,
		genre = ("house", "techno"),
		difficulty = potoolbox.pattern.Difficulty.BEGINNER
	)


@pytest.fixture
def pattern_dir (tmp_path: pathlib.Path, basic_rock: potoolbox.pattern.Pattern, four_on_floor: potoolbox.pattern.Pattern) -> pathlib.Path:

	"""A small pattern library on disk, with a README and a broken file."""

	directory = tmp_path / "patterns"

	potoolbox.markdown.write_pattern(basic_rock, directory)
	potoolbox.markdown.write_pattern(four_on_floor, directory)
	potoolbox.markdown.write_pattern(
		make_pattern({DrumVoice.KICK: [1, 4, 7, 11], DrumVoice.SNARE: [5, 13]}, name="Broken Beat", bpm=90, genre=("hip-hop",)),
		directory
	)

	(directory / "README.md").write_text("# Patterns\n", encoding="utf-8")
	(directory / "broken.md").write_text("no front matter here\n", encoding="utf-8")

	return directory
