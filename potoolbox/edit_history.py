"""Undoable pattern edits.

Edits are small command objects that turn one voice mapping into another.
They never modify the mapping they are given: :meth:`EditCommand.apply` and
:meth:`EditCommand.revert` return a new dict, so every state in the history
stays intact and can be handed out safely.

Example:
	```python
	history = EditHistory()
	voices = {}

	voices = history.execute(AddVoice(DrumVoice.KICK, (1, 5, 9, 13)), voices)
	voices = history.execute(ModifyVoice(DrumVoice.KICK, (1, 5, 9, 13), (1, 9)), voices)
	voices = history.undo(voices)      # kick back on 1, 5, 9, 13
	```
"""

import dataclasses
import typing

import potoolbox.voices


Voices = typing.Dict[potoolbox.voices.DrumVoice, typing.Tuple[int, ...]]
VoicesLike = typing.Mapping[potoolbox.voices.DrumVoice, typing.Sequence[int]]

DEFAULT_MAX_HISTORY = 50


class EditCommand (typing.Protocol):

	"""
	A reversible change to a voice mapping.
	"""

	def apply (self, voices: VoicesLike) -> Voices:
		...

	def revert (self, voices: VoicesLike) -> Voices:
		...

	def describe (self) -> str:
		...


def _copy (voices: VoicesLike) -> Voices:
	return {voice: tuple(steps) for voice, steps in voices.items()}


def _format_steps (steps: typing.Sequence[int]) -> str:
	return ", ".join(str(step) for step in steps)


@dataclasses.dataclass(frozen=True)
class AddVoice:

	"""
	Add a voice with its steps.
	"""

	voice: potoolbox.voices.DrumVoice
	steps: typing.Tuple[int, ...]

	def apply (self, voices: VoicesLike) -> Voices:
		result = _copy(voices)
		result[self.voice] = tuple(self.steps)
		return result

	def revert (self, voices: VoicesLike) -> Voices:
		result = _copy(voices)
		result.pop(self.voice, None)
		return result

	def describe (self) -> str:
		return f"Added {self.voice.display_name}: {_format_steps(self.steps)}"


@dataclasses.dataclass(frozen=True)
class RemoveVoice:

	"""
	Remove a voice, remembering its steps for undo.
	"""

	voice: potoolbox.voices.DrumVoice
	previous_steps: typing.Tuple[int, ...]

	def apply (self, voices: VoicesLike) -> Voices:
		result = _copy(voices)
		result.pop(self.voice, None)
		return result

	def revert (self, voices: VoicesLike) -> Voices:
		result = _copy(voices)
		result[self.voice] = tuple(self.previous_steps)
		return result

	def describe (self) -> str:
		return f"Removed {self.voice.display_name}"


@dataclasses.dataclass(frozen=True)
class ModifyVoice:

	"""
	Replace the steps of an existing voice.
	"""

	voice: potoolbox.voices.DrumVoice
	old_steps: typing.Tuple[int, ...]
	new_steps: typing.Tuple[int, ...]

	def apply (self, voices: VoicesLike) -> Voices:
		result = _copy(voices)
		result[self.voice] = tuple(self.new_steps)
		return result

	def revert (self, voices: VoicesLike) -> Voices:
		result = _copy(voices)
		result[self.voice] = tuple(self.old_steps)
		return result

	def describe (self) -> str:
		return f"Modified {self.voice.display_name}: {_format_steps(self.new_steps)}"


def set_voice_command (voices: VoicesLike, voice: potoolbox.voices.DrumVoice, steps: typing.Sequence[int]) -> EditCommand:

	"""
	The command that gives ``voice`` these steps: add if new, modify otherwise.
	"""

	if voice in voices:
		return ModifyVoice(voice=voice, old_steps=tuple(voices[voice]), new_steps=tuple(steps))

	return AddVoice(voice=voice, steps=tuple(steps))


class EditHistory:

	"""
	Undo and redo stacks of edit commands.

	The oldest entries are dropped once ``max_size`` commands are stored.
	Executing a new command clears the redo stack.
	"""

	def __init__ (self, max_size: int = DEFAULT_MAX_HISTORY) -> None:

		if max_size <= 0:
			raise ValueError("History size must be positive")

		self.max_size = max_size
		self._undo_stack: typing.List[EditCommand] = []
		self._redo_stack: typing.List[EditCommand] = []

	def execute (self, command: EditCommand, voices: VoicesLike) -> Voices:

		"""
		Apply a command, record it, and return the new voices.
		"""

		result = command.apply(voices)

		self._undo_stack.append(command)

		if len(self._undo_stack) > self.max_size:
			self._undo_stack.pop(0)

		self._redo_stack.clear()

		return result

	def undo (self, voices: VoicesLike) -> Voices:

		"""
		Revert the last command.  With nothing to undo the voices are returned unchanged.
		"""

		if not self._undo_stack:
			return _copy(voices)

		command = self._undo_stack.pop()
		self._redo_stack.append(command)

		return command.revert(voices)

	def redo (self, voices: VoicesLike) -> Voices:

		"""
		Re-apply the last undone command.
		"""

		if not self._redo_stack:
			return _copy(voices)

		command = self._redo_stack.pop()
		self._undo_stack.append(command)

		return command.apply(voices)

	@property
	def can_undo (self) -> bool:
		return bool(self._undo_stack)

	@property
	def can_redo (self) -> bool:
		return bool(self._redo_stack)

	@property
	def undo_description (self) -> typing.Optional[str]:
		return self._undo_stack[-1].describe() if self._undo_stack else None

	@property
	def redo_description (self) -> typing.Optional[str]:
		return self._redo_stack[-1].describe() if self._redo_stack else None

	def clear (self) -> None:
		self._undo_stack.clear()
		self._redo_stack.clear()
