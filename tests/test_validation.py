import pytest

import potoolbox.validation
import potoolbox.voices


DrumVoice = potoolbox.voices.DrumVoice


@pytest.fixture
def validator () -> potoolbox.validation.PatternValidator:
	return potoolbox.validation.PatternValidator()


def test_valid_pattern_has_no_findings (validator, basic_rock) -> None:

	"""A normal rock beat is clean."""

	result = validator.validate(basic_rock)

	assert result.is_valid
	assert not result.has_errors
	assert not result.has_warnings


def test_empty_pattern_is_invalid (validator, pattern_factory) -> None:

	"""A pattern needs at least one voice."""

	result = validator.validate(pattern_factory())

	assert not result.is_valid
	assert "Pattern has no drum voices programmed" in result.errors


def test_duplicate_steps_are_errors (validator, pattern_factory) -> None:

	"""Each step may be listed once per voice."""

	result = validator.validate(pattern_factory({DrumVoice.KICK: [1, 1, 5], DrumVoice.SNARE: [5]}))

	assert result.errors == ("Voice 'Bass Drum' has duplicate steps",)


def test_blank_name_is_an_error (validator, pattern_factory) -> None:

	"""Whitespace-only names are rejected."""

	result = validator.validate(pattern_factory({DrumVoice.KICK: [1], DrumVoice.SNARE: [5]}, name="   "))

	assert "Pattern name cannot be blank" in result.errors


def test_warnings (validator, pattern_factory) -> None:

	"""Single voice, no kick or snare, empty voice and tempo warnings."""

	result = validator.validate(pattern_factory({DrumVoice.COWBELL: []}, bpm=250))

	assert result.is_valid
	assert result.warnings == (
		"Voice 'Cowbell' has no active steps",
		"BPM 250 exceeds PO-12 maximum of 206",
		"Pattern only uses 1 voice - consider adding more for fuller sound",
		"Pattern has no kick or snare - might lack rhythmic foundation",
	)


def test_tempo_outside_typical_range (validator, pattern_factory) -> None:

	"""Very slow and very fast tempos are flagged."""

	slow = validator.validate(pattern_factory({DrumVoice.KICK: [1], DrumVoice.SNARE: [5]}, bpm=40))
	fast = validator.validate(pattern_factory({DrumVoice.KICK: [1], DrumVoice.SNARE: [5]}, bpm=320))

	assert slow.warnings == ("BPM 40 is outside typical range (60-300)",)
	assert "BPM 320 is outside typical range (60-300)" in fast.warnings
	assert "BPM 320 exceeds PO-12 maximum of 206" in fast.warnings


def test_validate_or_raise (validator, pattern_factory, basic_rock) -> None:

	"""Invalid patterns raise with the error list."""

	validator.validate_or_raise(basic_rock)

	with pytest.raises(ValueError, match="no drum voices"):
		validator.validate_or_raise(pattern_factory())
