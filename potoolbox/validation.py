import dataclasses
import typing

import potoolbox.constants.steps
import potoolbox.pattern
import potoolbox.voices


@dataclasses.dataclass(frozen=True)
class ValidationResult:

	"""
	Errors make a pattern unusable; warnings point out likely mistakes.
	"""

	errors: typing.Tuple[str, ...] = ()
	warnings: typing.Tuple[str, ...] = ()

	@property
	def is_valid (self) -> bool:
		return not self.errors

	@property
	def has_errors (self) -> bool:
		return bool(self.errors)

	@property
	def has_warnings (self) -> bool:
		return bool(self.warnings)


class PatternValidator:

	"""
	Checks patterns for correctness and common PO-12 programming mistakes.
	"""

	def validate (self, pattern: potoolbox.pattern.Pattern) -> ValidationResult:

		"""
		Collect every error and warning for a pattern.
		"""

		errors: typing.List[str] = []
		warnings: typing.List[str] = []

		steps_module = potoolbox.constants.steps

		if not steps_module.MIN_PATTERN_NUMBER <= pattern.number <= steps_module.MAX_PATTERN_NUMBER:
			errors.append(f"Pattern number must be between 1 and 16, got: {pattern.number}")

		if not pattern.voices:
			errors.append("Pattern has no drum voices programmed")

		for voice, steps in pattern.voices.items():

			if not steps:
				warnings.append(f"Voice '{voice.display_name}' has no active steps")

			for step in steps:
				if not steps_module.MIN_STEP <= step <= steps_module.MAX_STEP:
					errors.append(f"Voice '{voice.display_name}' has invalid step: {step} (must be 1-16)")

			if len(steps) != len(set(steps)):
				errors.append(f"Voice '{voice.display_name}' has duplicate steps")

		if not pattern.metadata.name.strip():
			errors.append("Pattern name cannot be blank")

		bpm = pattern.metadata.bpm

		if bpm is not None:
			if not steps_module.TYPICAL_MIN_BPM <= bpm <= steps_module.TYPICAL_MAX_BPM:
				warnings.append(f"BPM {bpm} is outside typical range (60-300)")
			if bpm > steps_module.PO12_MAX_BPM:
				warnings.append(f"BPM {bpm} exceeds PO-12 maximum of {steps_module.PO12_MAX_BPM}")

		if len(pattern.voices) == 1:
			warnings.append("Pattern only uses 1 voice - consider adding more for fuller sound")

		if not pattern.has_voice(potoolbox.voices.DrumVoice.KICK) and not pattern.has_voice(potoolbox.voices.DrumVoice.SNARE):
			warnings.append("Pattern has no kick or snare - might lack rhythmic foundation")

		return ValidationResult(errors=tuple(errors), warnings=tuple(warnings))

	def validate_or_raise (self, pattern: potoolbox.pattern.Pattern) -> None:

		"""
		Raise ``ValueError`` listing the errors if the pattern is invalid.
		"""

		result = self.validate(pattern)

		if not result.is_valid:
			raise ValueError("Pattern validation failed:\n" + "\n".join(result.errors))
