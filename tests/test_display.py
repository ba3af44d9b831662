import potoolbox.display
import potoolbox.pattern_similarity
import potoolbox.pattern_statistics
import potoolbox.voices


DrumVoice = potoolbox.voices.DrumVoice


def test_format_percent () -> None:

	"""One decimal place."""

	assert potoolbox.display.format_percent(0.256) == "25.6%"
	assert potoolbox.display.format_percent(1.0) == "100.0%"


def test_voice_row () -> None:

	"""A padded label followed by the sixteen cells."""

	row = potoolbox.display.voice_row(DrumVoice.KICK, [1, 5])

	assert row.startswith("Bass Drum ")
	assert row.count("[●]") == 2
	assert row.count("[ ]") == 14


def test_header_aligns_with_cells () -> None:

	"""Step numbers sit over their cells."""

	header = potoolbox.display.header_row()
	row = potoolbox.display.voice_row(DrumVoice.KICK, [16])

	assert header.index("16") == row.index("[●]")


def test_pattern_grid_orders_by_button (basic_rock) -> None:

	"""Header first, then one row per voice by button number."""

	lines = potoolbox.display.pattern_grid(basic_rock)

	assert len(lines) == 4
	assert lines[1].startswith("Bass Drum")
	assert lines[2].startswith("Snare")
	assert lines[3].startswith("Closed Hi-Hat")


def test_compact_grid_limits_voices (pattern_factory) -> None:

	"""Only five voices are drawn, the rest are counted."""

	pattern = pattern_factory({voice: [1] for voice in list(DrumVoice)[:7]})

	lines = potoolbox.display.compact_grid(pattern)

	assert len(lines) == 1 + 5 + 1
	assert lines[-1] == "... and 2 more voice(s)"


def test_compact_grid_without_overflow (four_on_floor) -> None:

	"""No summary line when every voice fits."""

	assert not potoolbox.display.compact_grid(four_on_floor)[-1].startswith("...")


def test_pattern_summary (four_on_floor, pattern_factory) -> None:

	"""Known metadata is joined into one line."""

	assert potoolbox.display.pattern_summary(four_on_floor) == "Four on the Floor (Pattern 1) - 124 BPM - house, techno - beginner"
	assert potoolbox.display.pattern_summary(pattern_factory(name="Bare", number=2)) == "Bare (Pattern 2)"


def test_pattern_details_include_instructions (basic_rock) -> None:

	"""Details end with the programming instructions."""

	lines = potoolbox.display.pattern_details(basic_rock)

	assert lines[0] == potoolbox.display.pattern_summary(basic_rock)
	assert "Programming instructions:" in lines
	assert lines[-1] == "   - Tap steps: 1, 3, 5, 7, 9, 11, 13, 15"


def test_format_table () -> None:

	"""Columns are as wide as their widest cell."""

	lines = potoolbox.display.format_table(["Name", "BPM"], [["Basic Rock", "120"], ["Amen", "136"]])

	assert lines == [
		"Name        BPM",
		"----------  ---",
		"Basic Rock  120",
		"Amen        136",
	]


def test_statistics_lines (basic_rock) -> None:

	"""Pattern statistics render as labelled lines."""

	stats = potoolbox.pattern_statistics.StatisticsAnalyzer().analyze(basic_rock)
	lines = potoolbox.display.statistics_lines(stats)

	assert "Density:        25.0%" in lines
	assert "  Closed Hi-Hat: 8" in lines


def test_library_statistics_lines_for_empty_library () -> None:

	"""The all-zero statistics still render."""

	lines = potoolbox.display.library_statistics_lines(potoolbox.pattern_statistics.LibraryStatistics())

	assert lines[0] == "Patterns:            0"
	assert "Most used voices:    none" in lines


def test_breakdown_lines (basic_rock, four_on_floor) -> None:

	"""Each component is shown as a percentage."""

	breakdown = potoolbox.pattern_similarity.SimilarityAnalyzer().breakdown(basic_rock, four_on_floor)
	lines = potoolbox.display.breakdown_lines(breakdown)

	assert "Step similarity:    75.0%" in lines
	assert lines[-1] == "Common voices:      Bass Drum, Snare"
