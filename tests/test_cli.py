import json
import pathlib

import mido
import pytest

import potoolbox.__main__
import potoolbox.markdown
import potoolbox.voices


DrumVoice = potoolbox.voices.DrumVoice


@pytest.fixture(autouse=True)
def _isolated_cwd (tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> None:

	"""Run every command from an empty directory so no stray config is read."""

	work = tmp_path / "work"
	work.mkdir()
	monkeypatch.chdir(work)


def run (*argv: str) -> int:
	return potoolbox.__main__.main(list(argv))


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def test_load_config_missing_file (tmp_path: pathlib.Path) -> None:

	"""A missing file gives an empty configuration."""

	assert potoolbox.__main__.load_config(str(tmp_path / "absent.yaml")) == {}


def test_load_config_reads_yaml (tmp_path: pathlib.Path) -> None:

	"""Configuration is plain YAML; an empty file is an empty mapping."""

	path = tmp_path / "config.yaml"
	path.write_text("midi:\n  resolution: 480\n", encoding="utf-8")
	empty = tmp_path / "empty.yaml"
	empty.write_text("", encoding="utf-8")

	assert potoolbox.__main__.load_config(str(path)) == {"midi": {"resolution": 480}}
	assert potoolbox.__main__.load_config(str(empty)) == {}


def test_library_directory_from_config (pattern_dir: pathlib.Path, capsys: pytest.CaptureFixture) -> None:

	"""library.directory is used when --directory is not given."""

	pathlib.Path("po-toolbox.yaml").write_text(f"library:\n  directory: {pattern_dir}\n", encoding="utf-8")

	assert run("list") == 0
	assert "Pattern Library (3 patterns)" in capsys.readouterr().out


def test_midi_settings_from_config (tmp_path: pathlib.Path, pattern_dir: pathlib.Path) -> None:

	"""midi.resolution in an explicit config file sets the PPQ."""

	config = tmp_path / "custom.yaml"
	config.write_text("midi:\n  resolution: 480\n", encoding="utf-8")
	output = tmp_path / "rock.mid"

	assert run("--config", str(config), "midi", str(pattern_dir / "basic-rock.md"), "-o", str(output)) == 0
	assert mido.MidiFile(str(output)).ticks_per_beat == 480


def test_load_config_rejects_malformed_yaml (tmp_path: pathlib.Path) -> None:

	"""Broken YAML and non-mapping documents raise ConfigError."""

	broken = tmp_path / "broken.yaml"
	broken.write_text("midi: [unclosed\n", encoding="utf-8")
	listing = tmp_path / "list.yaml"
	listing.write_text("- a\n", encoding="utf-8")

	with pytest.raises(potoolbox.__main__.ConfigError, match="Invalid config file"):
		potoolbox.__main__.load_config(str(broken))

	with pytest.raises(potoolbox.__main__.ConfigError, match="must contain a mapping"):
		potoolbox.__main__.load_config(str(listing))


@pytest.mark.parametrize("content", ["midi: [unclosed\n", "- a\n", "midi: [1, 2]\n"])
def test_bad_config_exits_with_error (tmp_path: pathlib.Path, pattern_dir: pathlib.Path, caplog: pytest.LogCaptureFixture, content: str) -> None:

	"""An unusable config file is reported and gives exit status 1."""

	config = tmp_path / "bad.yaml"
	config.write_text(content, encoding="utf-8")
	output = tmp_path / "rock.mid"

	assert run("--config", str(config), "midi", str(pattern_dir / "basic-rock.md"), "-o", str(output)) == 1
	assert "config" in caplog.text.lower()
	assert not output.exists()


# ---------------------------------------------------------------------------
# Browsing
# ---------------------------------------------------------------------------

def test_list (pattern_dir: pathlib.Path, capsys: pytest.CaptureFixture) -> None:

	"""Every readable pattern is listed."""

	assert run("list", "-d", str(pattern_dir), "--grid") == 0

	out = capsys.readouterr().out

	assert "Basic Rock" in out
	assert "Broken Beat" in out
	assert "Four on the Floor" in out
	assert "[●]" in out


def test_list_filters (pattern_dir: pathlib.Path, capsys: pytest.CaptureFixture) -> None:

	"""Filters narrow the listing."""

	assert run("list", "-d", str(pattern_dir), "--genre", "house", "--min-bpm", "100") == 0

	out = capsys.readouterr().out

	assert "Four on the Floor" in out
	assert "Basic Rock" not in out


def test_list_errors (tmp_path: pathlib.Path, pattern_dir: pathlib.Path) -> None:

	"""A missing directory or unknown difficulty fails."""

	assert run("list", "-d", str(tmp_path / "nowhere")) == 1
	assert run("list", "-d", str(pattern_dir), "--difficulty", "expert") == 1


def test_view (pattern_dir: pathlib.Path, capsys: pytest.CaptureFixture) -> None:

	"""view prints the grid and instructions."""

	assert run("view", str(pattern_dir / "four-on-the-floor.md")) == 0

	out = capsys.readouterr().out

	assert "Four on the Floor (Pattern 1)" in out
	assert "Programming instructions:" in out


def test_view_missing_file (tmp_path: pathlib.Path) -> None:

	"""Unreadable files exit with status 1."""

	assert run("view", str(tmp_path / "missing.md")) == 1


def test_validate (pattern_dir: pathlib.Path, capsys: pytest.CaptureFixture) -> None:

	"""Valid files pass; unreadable ones fail the run."""

	assert run("validate", str(pattern_dir / "basic-rock.md")) == 0
	assert run("validate", str(pattern_dir / "basic-rock.md"), str(pattern_dir / "broken.md")) == 1
	assert "1 of 2 pattern(s) valid" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

def test_similar (pattern_dir: pathlib.Path, capsys: pytest.CaptureFixture) -> None:

	"""The target is excluded and the best match explained."""

	assert run("similar", str(pattern_dir / "basic-rock.md"), "-d", str(pattern_dir), "-t", "0.3") == 0

	out = capsys.readouterr().out

	assert "Comparing against 2 patterns" in out
	assert "Top match: Four on the Floor" in out
	assert "Common voices:      Bass Drum, Snare" in out


def test_similar_no_results (pattern_dir: pathlib.Path, capsys: pytest.CaptureFixture) -> None:

	"""A high threshold finds nothing but is not an error."""

	assert run("similar", str(pattern_dir / "basic-rock.md"), "-d", str(pattern_dir), "-t", "0.99") == 0
	assert "No similar patterns found" in capsys.readouterr().out


def test_similar_rejects_bad_threshold (pattern_dir: pathlib.Path) -> None:

	"""Thresholds outside 0-1 are refused."""

	assert run("similar", str(pattern_dir / "basic-rock.md"), "-d", str(pattern_dir), "-t", "1.5") == 1


def test_similar_warns_about_weights (pattern_dir: pathlib.Path, caplog: pytest.LogCaptureFixture) -> None:

	"""Weights that do not sum to 1.0 are used with a warning."""

	assert run("similar", str(pattern_dir / "basic-rock.md"), "-d", str(pattern_dir), "--voice-weight", "0.9") == 0
	assert "don't sum to 1.0" in caplog.text


def test_stats (pattern_dir: pathlib.Path, capsys: pytest.CaptureFixture) -> None:

	"""Library summary without files, pattern metrics with them."""

	assert run("stats", "-d", str(pattern_dir)) == 0
	assert "Patterns:            3" in capsys.readouterr().out

	assert run("stats", "-d", str(pattern_dir), str(pattern_dir / "four-on-the-floor.md")) == 0

	out = capsys.readouterr().out

	assert "Four on the floor: yes" in out
	assert "Density percentile in library:" in out


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def test_midi (tmp_path: pathlib.Path, pattern_dir: pathlib.Path) -> None:

	"""Several files are chained into one MIDI file."""

	output = tmp_path / "midi" / "set.mid"

	assert run("midi", str(pattern_dir / "basic-rock.md"), str(pattern_dir / "four-on-the-floor.md"), "-o", str(output), "--velocity", "90") == 0

	mid = mido.MidiFile(str(output))
	note_ons = [message for message in mid.tracks[0] if message.type == 'note_on']

	assert len(note_ons) == 12 + 6
	assert {message.velocity for message in note_ons} == {90}


def test_midi_default_output_name (pattern_dir: pathlib.Path) -> None:

	"""Without -o the file is named after the pattern."""

	assert run("midi", str(pattern_dir / "basic-rock.md")) == 0
	assert pathlib.Path("Basic_Rock.mid").exists()


def test_midi_lists_gm_note_mapping (tmp_path: pathlib.Path, pattern_dir: pathlib.Path, capsys: pytest.CaptureFixture) -> None:

	"""The summary names the General MIDI sound used for each voice."""

	assert run("midi", str(pattern_dir / "basic-rock.md"), "-o", str(tmp_path / "rock.mid")) == 0

	out = capsys.readouterr().out

	assert "Bass Drum -> 36 (Bass Drum 1)" in out
	assert "Snare -> 38 (Acoustic Snare)" in out
	assert out.index("Bass Drum -> 36") < out.index("Snare -> 38")


def test_midi_rejects_bad_velocity (tmp_path: pathlib.Path, pattern_dir: pathlib.Path) -> None:

	"""Velocity must be 1-127."""

	output = tmp_path / "bad.mid"

	assert run("midi", str(pattern_dir / "basic-rock.md"), "-o", str(output), "--velocity", "0") == 1
	assert not output.exists()


def test_export_json_and_import (tmp_path: pathlib.Path, pattern_dir: pathlib.Path) -> None:

	"""A JSON export imports back into markdown files."""

	output = tmp_path / "all.json"

	assert run("export", str(pattern_dir / "basic-rock.md"), str(pattern_dir / "four-on-the-floor.md"), "-f", "json", "-o", str(output)) == 0
	assert len(json.loads(output.read_text(encoding="utf-8"))) == 2

	imported = tmp_path / "imported"

	assert run("import", str(output), "-o", str(imported)) == 0
	assert sorted(path.name for path in imported.iterdir()) == ["basic-rock.md", "four-on-the-floor.md"]


def test_export_csv (tmp_path: pathlib.Path, pattern_dir: pathlib.Path) -> None:

	"""CSV list and grid layouts."""

	listing = tmp_path / "rock.csv"
	grid = tmp_path / "grid.csv"

	assert run("export", str(pattern_dir / "basic-rock.md"), "-o", str(listing), "--metadata") == 0
	assert listing.read_text(encoding="utf-8").startswith("Pattern,Voice Short Name")

	assert run("export", str(pattern_dir / "basic-rock.md"), "-f", "csv-grid", "-o", str(grid)) == 0
	assert grid.read_text(encoding="utf-8").startswith("Voice,Step 1")

	assert run("export", str(pattern_dir / "basic-rock.md"), str(pattern_dir / "four-on-the-floor.md"), "-f", "csv-grid", "-o", str(grid)) == 1


# ---------------------------------------------------------------------------
# Chains, templates and editing
# ---------------------------------------------------------------------------

def test_chain (tmp_path: pathlib.Path, pattern_factory, capsys: pytest.CaptureFixture) -> None:

	"""A custom sequence is shown and exported bar by bar."""

	first = potoolbox.markdown.write_pattern(pattern_factory({DrumVoice.KICK: [1]}, name="Part A", number=1, bpm=100), tmp_path)
	second = potoolbox.markdown.write_pattern(pattern_factory({DrumVoice.SNARE: [5]}, name="Part B", number=2), tmp_path)
	output = tmp_path / "chain.mid"

	assert run("chain", str(first), str(second), "--name", "Phrase", "--sequence", "1,1,2", "--midi", str(output)) == 0

	out = capsys.readouterr().out

	assert "=== Phrase ===" in out
	assert "Total bars: 3" in out
	assert "Enter sequence: 1,1,2" in out

	mid = mido.MidiFile(str(output))
	ticks = []
	tick = 0
	for message in mid.tracks[0]:
		tick += message.time
		if message.type == 'note_on':
			ticks.append(tick)

	assert ticks == [0, 384, 768 + 96]


def test_chain_rejects_unknown_pattern_number (tmp_path: pathlib.Path, pattern_factory) -> None:

	"""A sequence entry without a pattern fails."""

	first = potoolbox.markdown.write_pattern(pattern_factory({DrumVoice.KICK: [1]}, name="Part A"), tmp_path)

	assert run("chain", str(first), "--sequence", "1,2") == 1


def test_template_list (capsys: pytest.CaptureFixture) -> None:

	"""Templates are listed, optionally by category."""

	assert run("template", "--list") == 0
	assert "basic-breakbeat" in capsys.readouterr().out

	assert run("template", "--list", "--category", "foundation") == 0

	out = capsys.readouterr().out

	assert "four-on-the-floor" in out
	assert "basic-rock" not in out


def test_template_create (tmp_path: pathlib.Path) -> None:

	"""A template becomes a pattern file."""

	assert run("template", "basic-hiphop", "--name", "Boom Bap", "-p", "3", "-o", str(tmp_path)) == 0

	pattern = potoolbox.markdown.read_pattern(tmp_path / "boom-bap.md")

	assert pattern.number == 3
	assert pattern.metadata.bpm == 90
	assert pattern.active_steps(DrumVoice.KICK) == (1, 11)


def test_template_unknown () -> None:

	"""Unknown template ids fail."""

	assert run("template", "polka") == 1


def test_edit (tmp_path: pathlib.Path, pattern_dir: pathlib.Path, capsys: pytest.CaptureFixture) -> None:

	"""Voices are set, copied and removed, then saved."""

	output = tmp_path / "edited"

	assert run(
		"edit", str(pattern_dir / "basic-rock.md"),
		"--set", "cowbell: 2 4",
		"--set", "kick: 1, 5, 9, 13",
		"--copy-from", f"{pattern_dir / 'broken-beat.md'}:snare",
		"--remove", "closed-hh",
		"-o", str(output)
	) == 0

	out = capsys.readouterr().out

	assert "Added Cowbell: 2, 4" in out
	assert "Removed Closed Hi-Hat" in out

	pattern = potoolbox.markdown.read_pattern(output / "basic-rock.md")

	assert dict(pattern.voices) == {
		DrumVoice.KICK: (1, 5, 9, 13),
		DrumVoice.SNARE: (5, 13),
		DrumVoice.COWBELL: (2, 4),
	}


def test_edit_undo_and_dry_run (tmp_path: pathlib.Path, pattern_dir: pathlib.Path, capsys: pytest.CaptureFixture) -> None:

	"""--undo reverts the last edits; --dry-run writes nothing."""

	output = tmp_path / "edited"

	assert run("edit", str(pattern_dir / "basic-rock.md"), "--set", "cowbell: 2", "--set", "clap: 5", "--undo", "1", "--dry-run", "-o", str(output)) == 0

	out = capsys.readouterr().out

	assert "Undo: Added Hand Clap: 5" in out
	assert "Cowbell" in out
	assert "Hand Clap" not in out.split("Undo:")[1].split("\n", 1)[1]
	assert not output.exists()


def test_edit_notation_file (tmp_path: pathlib.Path, pattern_dir: pathlib.Path) -> None:

	"""A notation file applies several voices; an empty voice removes it."""

	notation = tmp_path / "changes.txt"
	notation.write_text("snare:\nrim: 8 16\n", encoding="utf-8")
	output = tmp_path / "edited"

	assert run("edit", str(pattern_dir / "basic-rock.md"), "--notation", str(notation), "-o", str(output)) == 0

	pattern = potoolbox.markdown.read_pattern(output / "basic-rock.md")

	assert not pattern.has_voice(DrumVoice.SNARE)
	assert pattern.active_steps(DrumVoice.RIM_SHOT) == (8, 16)


def test_edit_refuses_to_remove_everything (pattern_dir: pathlib.Path) -> None:

	"""A pattern left without voices is not saved."""

	assert run("edit", str(pattern_dir / "four-on-the-floor.md"), "--remove", "kick", "--remove", "snare") == 1


def test_edit_rejects_bad_input (pattern_dir: pathlib.Path) -> None:

	"""Unreadable --set lines and unknown voices fail."""

	assert run("edit", str(pattern_dir / "basic-rock.md"), "--set", "bongo: 1", "--dry-run") == 1
	assert run("edit", str(pattern_dir / "basic-rock.md"), "--remove", "bongo", "--dry-run") == 1
