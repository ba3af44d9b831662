"""Command line interface: ``po-toolbox`` or ``python -m potoolbox``.

Settings come from ``po-toolbox.yaml`` in the working directory (or the
file given with ``--config``); command line options override them::

	library:
	  directory: patterns
	midi:
	  resolution: 96
	  velocity: 100
	  note_duration: 96
	  include_metadata: true
	similarity:
	  threshold: 0.5
	  limit: 10
	  voice_weight: 0.4
	  step_weight: 0.4
	  rhythm_weight: 0.2
"""

import argparse
import logging
import os
import pathlib
import typing

import yaml

import potoolbox.chain
import potoolbox.constants.gm_drums
import potoolbox.constants.pulses
import potoolbox.constants.velocity
import potoolbox.display
import potoolbox.edit_history
import potoolbox.exporters
import potoolbox.library
import potoolbox.markdown
import potoolbox.midi_export
import potoolbox.pattern
import potoolbox.pattern_similarity
import potoolbox.pattern_statistics
import potoolbox.templates
import potoolbox.text_notation
import potoolbox.validation
import potoolbox.voices


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "po-toolbox.yaml"
DEFAULT_LIBRARY_DIRECTORY = "patterns"


class ConfigError (Exception):

	"""
	Raised when the configuration file cannot be read as a YAML mapping.
	"""

	pass


# Errors reported as a message and exit status 1 rather than a traceback
_USER_ERRORS = (
	ConfigError,
	potoolbox.markdown.MarkdownParseError,
	potoolbox.exporters.JsonImportError,
	ValueError,
	OSError,
)


def load_config (config_path: str = DEFAULT_CONFIG_PATH) -> dict:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	try:
		with open(config_path, 'r', encoding="utf-8") as f:
			config = yaml.safe_load(f)
	except yaml.YAMLError as e:
		raise ConfigError(f"Invalid config file {config_path}: {e}") from e

	if config is None:
		return {}

	if not isinstance(config, dict):
		raise ConfigError(f"Config file {config_path} must contain a mapping of settings")

	return config


def _setting (config: dict, section: str, key: str, default: typing.Any) -> typing.Any:

	values = config.get(section) or {}

	if not isinstance(values, dict):
		raise ConfigError(f"Config section '{section}' must be a mapping")

	return values.get(key, default)


def _choose (value: typing.Any, config: dict, section: str, key: str, default: typing.Any) -> typing.Any:

	"""
	A command line value if given, else the configured one, else the default.
	"""

	if value is not None:
		return value

	return _setting(config, section, key, default)


def _library_directory (args: argparse.Namespace) -> str:
	return _choose(args.directory, args.config_data, "library", "directory", DEFAULT_LIBRARY_DIRECTORY)


def _print_lines (lines: typing.Iterable[str]) -> None:
	for line in lines:
		print(line)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_list (args: argparse.Namespace) -> int:

	directory = _library_directory(args)

	if not os.path.isdir(directory):
		logger.error(f"Directory not found: {directory}")
		return 1

	difficulty = None

	if args.difficulty is not None:
		difficulty = potoolbox.pattern.Difficulty.from_string(args.difficulty)
		if difficulty is None:
			logger.error(f"Unknown difficulty: {args.difficulty}")
			return 1

	patterns = potoolbox.library.filter_patterns(
		potoolbox.library.load_library(directory),
		genre = args.genre,
		difficulty = difficulty,
		min_bpm = args.min_bpm,
		max_bpm = args.max_bpm
	)

	if not patterns:
		print("No patterns found matching criteria.")
		return 0

	print(f"Pattern Library ({len(patterns)} patterns)")
	print()

	rows = [
		[
			pattern.metadata.name,
			str(pattern.number),
			str(pattern.metadata.bpm) if pattern.metadata.bpm is not None else "-",
			pattern.metadata.difficulty.display_name if pattern.metadata.difficulty is not None else "-",
			", ".join(pattern.metadata.genre) or "-",
			str(pattern.voice_count),
		]
		for pattern in patterns
	]

	_print_lines(potoolbox.display.format_table(["Name", "Pattern #", "BPM", "Difficulty", "Genres", "Voices"], rows))

	if args.grid:
		for pattern in patterns:
			print()
			print(pattern.metadata.name)
			_print_lines(potoolbox.display.compact_grid(pattern))

	return 0


def cmd_view (args: argparse.Namespace) -> int:

	pattern = potoolbox.markdown.read_pattern(args.file)

	_print_lines(potoolbox.display.pattern_details(pattern))

	return 0


def cmd_validate (args: argparse.Namespace) -> int:

	validator = potoolbox.validation.PatternValidator()
	failures = 0

	for path in args.files:

		try:
			pattern = potoolbox.markdown.read_pattern(path)
		except _USER_ERRORS as e:
			print(f"{path}: cannot be read: {e}")
			failures += 1
			continue

		result = validator.validate(pattern)

		status = "valid" if result.is_valid else "INVALID"
		print(f"{path}: {status}")

		for error in result.errors:
			print(f"  error: {error}")

		for warning in result.warnings:
			print(f"  warning: {warning}")

		if not result.is_valid:
			failures += 1

	print()
	print(f"{len(args.files) - failures} of {len(args.files)} pattern(s) valid")

	return 1 if failures else 0


def cmd_similar (args: argparse.Namespace) -> int:

	config = args.config_data

	threshold = _choose(args.threshold, config, "similarity", "threshold", 0.5)
	limit = _choose(args.limit, config, "similarity", "limit", 10)

	if not 0.0 <= threshold <= 1.0:
		logger.error("Threshold must be between 0.0 and 1.0")
		return 1

	weights = potoolbox.pattern_similarity.SimilarityWeights(
		voice = _choose(args.voice_weight, config, "similarity", "voice_weight", 0.4),
		step = _choose(args.step_weight, config, "similarity", "step_weight", 0.4),
		rhythm = _choose(args.rhythm_weight, config, "similarity", "rhythm_weight", 0.2)
	)

	if not weights.is_valid():
		logger.warning("Similarity weights don't sum to 1.0; scores may fall outside 0-1")

	target = potoolbox.markdown.read_pattern(args.file)
	directory = _library_directory(args)

	if not os.path.isdir(directory):
		logger.error(f"Directory not found: {directory}")
		return 1

	library = potoolbox.library.load_library(directory, exclude=args.file)

	print(f"Target pattern: {target.metadata.name}")
	print(f"  Voices: {target.voice_count}, Notes: {target.total_notes}")
	print(f"Comparing against {len(library)} patterns")
	print()

	analyzer = potoolbox.pattern_similarity.SimilarityAnalyzer()
	results = analyzer.find_similar(target, library, threshold, weights)[:limit]

	if not results:
		print(f"No similar patterns found above {potoolbox.display.format_percent(threshold)} threshold")
		return 0

	rows = [
		[
			str(rank),
			potoolbox.display.format_percent(result.similarity),
			result.pattern.metadata.name,
			str(result.pattern.voice_count),
			str(result.pattern.total_notes),
			str(result.pattern.metadata.bpm) if result.pattern.metadata.bpm is not None else "?",
			result.pattern.metadata.difficulty.display_name if result.pattern.metadata.difficulty is not None else "-",
		]
		for rank, result in enumerate(results, start=1)
	]

	_print_lines(potoolbox.display.format_table(["Rank", "Similarity", "Pattern", "Voices", "Notes", "BPM", "Difficulty"], rows))

	print()
	print(f"Top match: {results[0].pattern.metadata.name}")
	_print_lines(potoolbox.display.breakdown_lines(analyzer.breakdown(target, results[0].pattern, weights)))

	return 0


def cmd_stats (args: argparse.Namespace) -> int:

	analyzer = potoolbox.pattern_statistics.StatisticsAnalyzer()
	directory = _library_directory(args)
	library = potoolbox.library.load_library(directory)

	if not args.files:
		print(f"Library: {directory}")
		_print_lines(potoolbox.display.library_statistics_lines(analyzer.analyze_library(library)))
		return 0

	for path in args.files:

		pattern = potoolbox.markdown.read_pattern(path)

		print(pattern.metadata.name)
		_print_lines(potoolbox.display.statistics_lines(analyzer.analyze(pattern)))
		print(f"Syncopation:    {potoolbox.display.format_percent(analyzer.syncopation(pattern))}")
		print(f"Four on the floor: {'yes' if analyzer.is_four_on_the_floor(pattern) else 'no'}")
		print(f"Breakbeat feel:    {'yes' if analyzer.has_breakbeat_characteristics(pattern) else 'no'}")

		if library:
			print(f"Density percentile in library: {analyzer.density_percentile(pattern, library):.0f}")

		print()

	return 0


def _midi_options (args: argparse.Namespace) -> potoolbox.midi_export.MidiExportOptions:

	config = args.config_data

	include_metadata = _setting(config, "midi", "include_metadata", True)
	if args.no_metadata:
		include_metadata = False

	return potoolbox.midi_export.MidiExportOptions(
		resolution = _choose(args.resolution, config, "midi", "resolution", potoolbox.constants.pulses.DEFAULT_RESOLUTION),
		velocity = _choose(args.velocity, config, "midi", "velocity", potoolbox.constants.velocity.DEFAULT_VELOCITY),
		note_duration = _choose(args.duration, config, "midi", "note_duration", potoolbox.constants.pulses.DEFAULT_NOTE_DURATION),
		include_metadata = include_metadata
	)


def _default_midi_path (pattern: potoolbox.pattern.Pattern) -> str:
	return pattern.metadata.name.replace(" ", "_") + ".mid"


def cmd_midi (args: argparse.Namespace) -> int:

	options = _midi_options(args)

	if not potoolbox.midi_export.is_valid_velocity(options.velocity):
		logger.error("Velocity must be between 1 and 127")
		return 1

	patterns = [potoolbox.markdown.read_pattern(path) for path in args.files]
	output = args.output or _default_midi_path(patterns[0])

	potoolbox.midi_export.MidiExporter(options).export_patterns(patterns, output)

	print(f"Exported {len(patterns)} pattern(s) to {output}")

	for index, pattern in enumerate(patterns, start=1):
		bpm = pattern.metadata.bpm if pattern.metadata.bpm is not None else potoolbox.constants.pulses.DEFAULT_BPM
		print(f"  {index}. {pattern.metadata.name} - Pattern #{pattern.number} | {bpm} BPM | {pattern.voice_count} voices | {pattern.total_notes} notes")

	print(f"Resolution {options.resolution} PPQ, velocity {options.velocity}, note duration {options.note_duration} ticks, channel 10 (GM drums)")
	print("Note mapping:")

	used = {voice for pattern in patterns for voice in pattern.voices}

	for voice in potoolbox.voices.sorted_voices(used):
		note = potoolbox.constants.gm_drums.voice_note(voice)
		print(f"  {voice.display_name} -> {note} ({potoolbox.constants.gm_drums.gm_drum_name(note)})")

	return 0


def cmd_export (args: argparse.Namespace) -> int:

	patterns = [potoolbox.markdown.read_pattern(path) for path in args.files]

	if args.format == "json":
		if len(patterns) == 1:
			path = potoolbox.exporters.export_json(patterns[0], args.output)
		else:
			path = potoolbox.exporters.export_json_multiple(patterns, args.output)

	elif args.format == "csv-grid":
		if len(patterns) != 1:
			logger.error("The grid layout takes exactly one pattern")
			return 1
		path = potoolbox.exporters.export_csv_grid(patterns[0], args.output)

	elif len(patterns) == 1:
		path = potoolbox.exporters.export_csv(patterns[0], args.output, include_metadata=args.metadata)

	else:
		path = potoolbox.exporters.export_csv_multiple(patterns, args.output)

	print(f"Exported {len(patterns)} pattern(s) to {path}")

	return 0


def cmd_import (args: argparse.Namespace) -> int:

	patterns = potoolbox.exporters.import_json(args.file)
	directory = args.output or _library_directory(args)

	for pattern in patterns:
		path = potoolbox.markdown.write_pattern(pattern, directory)
		print(f"Imported {pattern.metadata.name} to {path}")

	return 0


def cmd_chain (args: argparse.Namespace) -> int:

	patterns = [potoolbox.markdown.read_pattern(path) for path in args.files]

	if args.sequence:
		sequence = [int(part) for part in args.sequence.split(",") if part.strip()]
		chain = potoolbox.chain.PatternChain(
			name = args.name or patterns[0].metadata.name,
			patterns = patterns,
			sequence = sequence,
			metadata = patterns[0].metadata
		)
	else:
		chain = potoolbox.chain.PatternChain.from_patterns(patterns, name=args.name)

	print(f"=== {chain.name} ===")
	print(f"Total bars: {chain.total_bars}")
	print(f"Patterns: {', '.join(str(number) for number in sorted(pattern.number for pattern in chain.patterns))}")
	print(f"Sequence: {chain.sequence_string}")

	if chain.metadata.bpm is not None:
		print(f"BPM: {chain.metadata.bpm}")

	print()

	ordered = sorted(chain.patterns, key=lambda pattern: pattern.number)

	for step, pattern in enumerate(ordered, start=1):
		print(f"{step}. Program Pattern {pattern.number}:")
		for voice in potoolbox.voices.sorted_voices(pattern.voices):
			steps = pattern.active_steps(voice)
			if steps:
				print(f"   {voice.display_name} (button {voice.po_number}): {', '.join(str(s) for s in steps)}")

	print(f"{len(ordered) + 1}. Chain the patterns:")
	print("   - Press the pattern button")
	print(f"   - Enter sequence: {chain.sequence_string}")
	print("   - Press write to save")

	if args.midi:
		options = _midi_options(args)
		potoolbox.midi_export.MidiExporter(options).export_patterns(chain.patterns_in_sequence(), args.midi)
		print()
		print(f"Exported {chain.total_bars} bar(s) to {args.midi}")

	return 0


def cmd_template (args: argparse.Namespace) -> int:

	if args.list or args.id is None:

		templates = potoolbox.templates.by_category(args.category) if args.category else potoolbox.templates.all_templates()

		if not templates:
			print("No templates found.")
			return 0

		rows = [
			[template.id, template.name, template.category, template.difficulty.display_name, str(template.suggested_bpm or "-")]
			for template in templates
		]

		_print_lines(potoolbox.display.format_table(["ID", "Name", "Category", "Difficulty", "BPM"], rows))

		return 0

	template = potoolbox.templates.get_template(args.id)

	if template is None:
		logger.error(f"Unknown template: {args.id}")
		return 1

	pattern = template.to_pattern(name=args.name, number=args.pattern_number, bpm=args.bpm, author=args.author)
	path = potoolbox.markdown.write_pattern(pattern, args.output or _library_directory(args))

	print(f"Created {pattern.metadata.name} from template {template.name}")
	_print_lines(potoolbox.display.pattern_grid(pattern))
	print(f"Saved to {path}")

	return 0


def _edit_commands (args: argparse.Namespace, voices: potoolbox.edit_history.Voices) -> typing.Iterator[potoolbox.edit_history.EditCommand]:

	"""
	Turn the edit options into commands, in the order notation, copies, sets, removals.
	"""

	current = dict(voices)

	def _set (voice: potoolbox.voices.DrumVoice, steps: typing.Sequence[int]) -> typing.Optional[potoolbox.edit_history.EditCommand]:
		if steps:
			return potoolbox.edit_history.set_voice_command(current, voice, steps)
		if voice in current:
			return potoolbox.edit_history.RemoveVoice(voice=voice, previous_steps=current[voice])
		return None

	requested: typing.List[typing.Tuple[potoolbox.voices.DrumVoice, typing.Sequence[int]]] = []

	if args.notation:
		requested.extend(potoolbox.text_notation.parse_file(args.notation).items())

	for value in args.copy_from or []:
		path, _, name = value.rpartition(":")
		voice = potoolbox.voices.DrumVoice.from_short_name(name)
		if not path or voice is None:
			raise ValueError(f"Expected FILE:VOICE, got: {value}")
		steps = potoolbox.library.load_voice(path, voice)
		if steps is None:
			raise ValueError(f"{voice.display_name} not found in {path}")
		requested.append((voice, steps))

	for line in args.set or []:
		parsed = potoolbox.text_notation.parse_line(line)
		if parsed is None:
			raise ValueError(f"Cannot read voice steps: {line}")
		requested.append(parsed)

	for voice, steps in requested:
		command = _set(voice, steps)
		if command is None:
			continue
		current = command.apply(current)
		yield command

	for name in args.remove or []:
		voice = potoolbox.voices.DrumVoice.from_short_name(name)
		if voice is None:
			raise ValueError(f"Unknown voice: {name}")
		if voice in current:
			command = potoolbox.edit_history.RemoveVoice(voice=voice, previous_steps=current[voice])
			current = command.apply(current)
			yield command


def cmd_edit (args: argparse.Namespace) -> int:

	pattern = potoolbox.markdown.read_pattern(args.file)
	history = potoolbox.edit_history.EditHistory()
	voices: potoolbox.edit_history.Voices = dict(pattern.voices)

	for command in _edit_commands(args, voices):
		voices = history.execute(command, voices)
		print(command.describe())

	for _ in range(args.undo):
		if not history.can_undo:
			break
		print(f"Undo: {history.undo_description}")
		voices = history.undo(voices)

	if not voices:
		logger.error("No voices left in pattern. Changes not saved.")
		return 1

	updated = pattern.with_voices(voices)

	print()
	_print_lines(potoolbox.display.pattern_grid(updated))

	if args.dry_run:
		return 0

	directory = args.output or pathlib.Path(args.file).parent
	path = potoolbox.markdown.write_pattern(updated, directory)
	print(f"Saved to {path}")

	return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def build_parser () -> argparse.ArgumentParser:

	parser = argparse.ArgumentParser(prog="po-toolbox", description="Pattern tools for the Pocket Operator PO-12.")
	parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="YAML configuration file")
	parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")

	sub = parser.add_subparsers(dest="cmd", required=True)

	p_list = sub.add_parser("list", help="List patterns with optional filtering")
	p_list.add_argument("-d", "--directory", help="Directory containing pattern files")
	p_list.add_argument("-g", "--genre", help="Filter by genre (case-insensitive partial match)")
	p_list.add_argument("--difficulty", help="Filter by difficulty (beginner/intermediate/advanced)")
	p_list.add_argument("--min-bpm", type=int, help="Minimum BPM")
	p_list.add_argument("--max-bpm", type=int, help="Maximum BPM")
	p_list.add_argument("--grid", action="store_true", help="Show a compact grid for each pattern")
	p_list.set_defaults(func=cmd_list)

	p_view = sub.add_parser("view", help="Show a pattern with programming instructions")
	p_view.add_argument("file", help="Pattern markdown file")
	p_view.set_defaults(func=cmd_view)

	p_validate = sub.add_parser("validate", help="Check pattern files for errors and likely mistakes")
	p_validate.add_argument("files", nargs="+", help="Pattern markdown files")
	p_validate.set_defaults(func=cmd_validate)

	p_similar = sub.add_parser("similar", help="Find similar patterns in the library")
	p_similar.add_argument("file", help="Target pattern file")
	p_similar.add_argument("-d", "--directory", help="Directory containing pattern files")
	p_similar.add_argument("-t", "--threshold", type=float, help="Minimum similarity (0.0-1.0)")
	p_similar.add_argument("-n", "--limit", type=int, help="Maximum number of results")
	p_similar.add_argument("--voice-weight", type=float, help="Weight for voice similarity")
	p_similar.add_argument("--step-weight", type=float, help="Weight for step similarity")
	p_similar.add_argument("--rhythm-weight", type=float, help="Weight for rhythm similarity")
	p_similar.set_defaults(func=cmd_similar)

	p_stats = sub.add_parser("stats", help="Pattern or library statistics")
	p_stats.add_argument("files", nargs="*", help="Pattern files (library summary when omitted)")
	p_stats.add_argument("-d", "--directory", help="Directory containing pattern files")
	p_stats.set_defaults(func=cmd_stats)

	p_midi = sub.add_parser("midi", help="Export patterns to a MIDI file")
	p_midi.add_argument("files", nargs="+", help="Pattern files, chained in order")
	p_midi.add_argument("-o", "--output", help="Output MIDI file (default: <pattern_name>.mid)")
	_add_midi_options(p_midi)
	p_midi.set_defaults(func=cmd_midi)

	p_export = sub.add_parser("export", help="Export patterns to CSV or JSON")
	p_export.add_argument("files", nargs="+", help="Pattern files")
	p_export.add_argument("-o", "--output", required=True, help="Output file")
	p_export.add_argument("-f", "--format", choices=("csv", "csv-grid", "json"), default="csv", help="Output format")
	p_export.add_argument("--metadata", action="store_true", help="Include pattern number, name and BPM columns (single-pattern CSV)")
	p_export.set_defaults(func=cmd_export)

	p_import = sub.add_parser("import", help="Import patterns from JSON into markdown files")
	p_import.add_argument("file", help="JSON file")
	p_import.add_argument("-o", "--output", help="Output directory (default: library directory)")
	p_import.add_argument("-d", "--directory", help="Directory containing pattern files")
	p_import.set_defaults(func=cmd_import)

	p_chain = sub.add_parser("chain", help="Show chain programming instructions")
	p_chain.add_argument("files", nargs="+", help="Pattern files to chain, in order")
	p_chain.add_argument("-n", "--name", help="Name for the chain")
	p_chain.add_argument("-s", "--sequence", help="Play order as pattern numbers, e.g. 1,1,2")
	p_chain.add_argument("--midi", help="Also export the chain to this MIDI file")
	_add_midi_options(p_chain)
	p_chain.set_defaults(func=cmd_chain)

	p_template = sub.add_parser("template", help="Browse templates and create patterns from them")
	p_template.add_argument("id", nargs="?", help="Template id")
	p_template.add_argument("-l", "--list", action="store_true", help="List templates")
	p_template.add_argument("-c", "--category", help="Filter the list by category")
	p_template.add_argument("--name", help="Pattern name (default: template name)")
	p_template.add_argument("-p", "--pattern-number", type=int, default=1, help="PO-12 pattern number (1-16)")
	p_template.add_argument("--bpm", type=int, help="Pattern BPM (default: template suggestion)")
	p_template.add_argument("--author", help="Pattern author")
	p_template.add_argument("-o", "--output", help="Output directory (default: library directory)")
	p_template.add_argument("-d", "--directory", help="Directory containing pattern files")
	p_template.set_defaults(func=cmd_template)

	p_edit = sub.add_parser("edit", help="Change the voices of a pattern file")
	p_edit.add_argument("file", help="Pattern markdown file")
	p_edit.add_argument("--set", action="append", metavar="VOICE:STEPS", help="Set a voice, e.g. 'kick: 1, 5, 9, 13' (no steps removes it)")
	p_edit.add_argument("--remove", action="append", metavar="VOICE", help="Remove a voice")
	p_edit.add_argument("--notation", help="Apply a text notation file")
	p_edit.add_argument("--copy-from", action="append", metavar="FILE:VOICE", help="Copy a voice from another pattern file")
	p_edit.add_argument("--undo", type=int, default=0, help="Undo this many of the edits just made")
	p_edit.add_argument("-o", "--output", help="Output directory (default: the file's directory)")
	p_edit.add_argument("--dry-run", action="store_true", help="Show the result without saving")
	p_edit.set_defaults(func=cmd_edit)

	return parser


def _add_midi_options (parser: argparse.ArgumentParser) -> None:
	parser.add_argument("--resolution", type=int, help="Ticks per quarter note")
	parser.add_argument("--velocity", type=int, help="Note velocity (1-127)")
	parser.add_argument("--duration", type=int, help="Note duration in ticks")
	parser.add_argument("--no-metadata", action="store_true", help="Leave out the track name")


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Main entry point for the po-toolbox command line.
	"""

	args = build_parser().parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

	config_path = args.config

	try:
		if config_path == DEFAULT_CONFIG_PATH and not os.path.exists(config_path):
			args.config_data = {}
		else:
			args.config_data = load_config(config_path)

		return int(args.func(args))
	except _USER_ERRORS as e:
		logger.error(str(e))
		return 1


if __name__ == "__main__":
	raise SystemExit(main())
