"""MIDI export of PO-12 patterns.

Export happens in two stages:

1. :func:`build_timeline` lays the patterns out on an absolute tick grid.
   Each step is a sixteenth note (``resolution // 4`` ticks), each pattern
   occupies exactly one bar, and every hit becomes a note-on / note-off pair
   on the GM drum channel.
2. :func:`timeline_to_midi_file` turns the timeline into a type-1
   ``mido.MidiFile`` with delta times, ready to save.

:class:`MidiExporter` wraps both stages and writes the file.

Chained patterns always play at the first pattern's tempo (120 BPM when it
has none); later patterns' BPM is ignored.  Velocity is written as given -
check it with :func:`is_valid_velocity` before exporting.
"""

import dataclasses
import logging
import os
import tempfile
import typing

import mido

import potoolbox.constants.gm_drums
import potoolbox.constants.pulses
import potoolbox.constants.steps
import potoolbox.constants.velocity
import potoolbox.pattern


logger = logging.getLogger(__name__)

TEXT_CHARSET = "utf-8"


@dataclasses.dataclass(frozen=True)
class MidiExportOptions:

	"""
	Settings for MIDI export.

	Parameters:
		resolution: Ticks per quarter note (PPQ).  Values that are not a
			multiple of 4 lose the remainder when divided into steps.
		velocity: Note-on velocity for every hit.  Not checked here.
		note_duration: Note length in ticks.
		include_metadata: Write the first pattern's name as the track name.
	"""

	resolution: int = potoolbox.constants.pulses.DEFAULT_RESOLUTION
	velocity: int = potoolbox.constants.velocity.DEFAULT_VELOCITY
	note_duration: int = potoolbox.constants.pulses.DEFAULT_NOTE_DURATION
	include_metadata: bool = True

	def __post_init__ (self) -> None:
		if self.resolution <= 0:
			raise ValueError("Resolution must be positive")
		if self.note_duration < 0:
			raise ValueError("Note duration cannot be negative")


@dataclasses.dataclass(order=True, frozen=True)
class NoteEvent:

	"""
	A note-on or note-off at an absolute tick.
	"""

	tick: int
	message_type: str = dataclasses.field(compare=False)	# 'note_on' or 'note_off'
	channel: int = dataclasses.field(compare=False)
	note: int = dataclasses.field(compare=False)
	velocity: int = dataclasses.field(compare=False)


@dataclasses.dataclass(frozen=True)
class MidiTimeline:

	"""
	Everything needed to encode a single-track drum sequence.

	``end_tick`` is the end of the last bar.  Note-offs of long notes may
	fall after it.
	"""

	resolution: int
	tempo: int
	track_name: typing.Optional[str]
	events: typing.Tuple[NoteEvent, ...]
	end_tick: int


def ticks_per_step (resolution: int) -> int:

	"""
	Ticks in one step (a sixteenth note) at the given PPQ resolution.
	"""

	return resolution // potoolbox.constants.steps.STEPS_PER_BEAT


def midi_tempo (bpm: int) -> int:

	"""
	Convert BPM to a MIDI tempo in microseconds per quarter note.

	Uses integer division, so 140 BPM gives 428571.  BPM 1-3 give tempos
	too large for a MIDI file and raise ``ValueError`` like BPM <= 0.
	"""

	if bpm <= 0:
		raise ValueError("BPM must be positive")

	tempo = potoolbox.constants.pulses.MICROSECONDS_PER_MINUTE // bpm

	if tempo > potoolbox.constants.pulses.MAX_MIDI_TEMPO:
		raise ValueError(f"BPM {bpm} is too slow for a MIDI tempo")

	return tempo


def is_valid_velocity (velocity: int) -> bool:

	"""
	True for a usable note-on velocity (1-127).
	"""

	return potoolbox.constants.velocity.MIN_VELOCITY <= velocity <= potoolbox.constants.velocity.MAX_VELOCITY


def pattern_events (pattern: potoolbox.pattern.Pattern, start_tick: int, options: MidiExportOptions) -> typing.List[NoteEvent]:

	"""
	Note events for one pattern whose first step starts at ``start_tick``.

	Events are grouped by voice in the pattern's voice order, each hit giving
	a note-on followed by its note-off.
	"""

	step_ticks = ticks_per_step(options.resolution)
	events: typing.List[NoteEvent] = []

	for voice, steps in pattern.voices.items():

		note = potoolbox.constants.gm_drums.voice_note(voice)

		for step in steps:

			on_tick = start_tick + (step - 1) * step_ticks

			events.append(NoteEvent(
				tick = on_tick,
				message_type = 'note_on',
				channel = potoolbox.constants.gm_drums.DRUM_CHANNEL,
				note = note,
				velocity = options.velocity
			))

			events.append(NoteEvent(
				tick = on_tick + options.note_duration,
				message_type = 'note_off',
				channel = potoolbox.constants.gm_drums.DRUM_CHANNEL,
				note = note,
				velocity = 0
			))

	return events


def build_timeline (patterns: typing.Sequence[potoolbox.pattern.Pattern], options: typing.Optional[MidiExportOptions] = None) -> MidiTimeline:

	"""
	Lay patterns out one bar after another on a single track.

	Tempo and track name come from the first pattern.  Every pattern takes
	exactly 16 steps, however many notes it has.
	"""

	if options is None:
		options = MidiExportOptions()

	if not patterns:
		raise ValueError("At least one pattern is required for MIDI export")

	first = patterns[0]
	bpm = first.metadata.bpm if first.metadata.bpm is not None else potoolbox.constants.pulses.DEFAULT_BPM

	bar_ticks = potoolbox.constants.steps.STEPS_PER_PATTERN * ticks_per_step(options.resolution)

	events: typing.List[NoteEvent] = []
	current_tick = 0

	for pattern in patterns:
		events.extend(pattern_events(pattern, current_tick, options))
		current_tick += bar_ticks

	return MidiTimeline(
		resolution = options.resolution,
		tempo = midi_tempo(bpm),
		track_name = first.metadata.name if options.include_metadata else None,
		events = tuple(events),
		end_tick = current_tick
	)


def timeline_to_midi_file (timeline: MidiTimeline) -> mido.MidiFile:

	"""
	Encode a timeline as a type-1 MIDI file with one track.

	Text meta events (the track name) are encoded as UTF-8, so read the
	file back with ``mido.MidiFile(path, charset="utf-8")``.
	"""

	mid = mido.MidiFile(type=1, charset=TEXT_CHARSET)
	mid.ticks_per_beat = timeline.resolution

	track = mido.MidiTrack()
	mid.tracks.append(track)

	# Meta events at tick 0 come first
	track.append(mido.MetaMessage('set_tempo', tempo=timeline.tempo, time=0))

	if timeline.track_name is not None:
		track.append(mido.MetaMessage('track_name', name=timeline.track_name, time=0))

	# sorted() is stable, so same-tick events keep their emission order
	last_tick = 0

	for event in sorted(timeline.events):

		track.append(mido.Message(
			event.message_type,
			channel = event.channel,
			note = event.note,
			velocity = event.velocity,
			time = event.tick - last_tick
		))

		last_tick = event.tick

	end_tick = max(timeline.end_tick, last_tick)
	track.append(mido.MetaMessage('end_of_track', time=end_tick - last_tick))

	return mid


class MidiExporter:

	"""
	Writes PO-12 patterns to standard MIDI files for DAW import.
	"""

	def __init__ (self, options: typing.Optional[MidiExportOptions] = None) -> None:

		"""
		Store default export options, used when a call does not pass its own.
		"""

		self.options = options if options is not None else MidiExportOptions()

	def export (self, pattern: potoolbox.pattern.Pattern, path: typing.Union[str, os.PathLike], options: typing.Optional[MidiExportOptions] = None) -> mido.MidiFile:

		"""
		Export a single pattern.
		"""

		return self.export_patterns([pattern], path, options)

	def export_patterns (self, patterns: typing.Sequence[potoolbox.pattern.Pattern], path: typing.Union[str, os.PathLike], options: typing.Optional[MidiExportOptions] = None) -> mido.MidiFile:

		"""
		Export patterns chained one bar after another.

		Parent directories are created as needed.  The file is written next to
		its destination and moved into place, so a failed export leaves any
		existing file untouched.  Returns the saved file.
		"""

		options = options if options is not None else self.options

		timeline = build_timeline(patterns, options)
		mid = timeline_to_midi_file(timeline)

		target = os.fspath(path)
		directory = os.path.dirname(target)
		if directory:
			os.makedirs(directory, exist_ok=True)

		logger.info(f"Saving MIDI export ({len(patterns)} pattern(s), {len(timeline.events)} events) to {target}")

		fd, temp_path = tempfile.mkstemp(suffix=".mid", dir=directory or None)

		try:
			with os.fdopen(fd, "wb") as f:
				mid.save(file=f)
			os.replace(temp_path, target)

		except Exception:
			os.remove(temp_path)
			raise

		return mid
