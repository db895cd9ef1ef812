"""
Exception classes for recap generation.

This module defines custom exceptions used throughout the video library and
recap generation pipeline to provide clear error handling and debugging information.
"""

from typing import List, Optional, Dict, Any


class RecapGenerationError(Exception):
    """Base exception for video library and recap generation errors."""

    def __init__(self, message: str, period: Optional[str] = None):
        self.message = message
        self.period = period
        super().__init__(message)

    @property
    def period_identifier(self) -> str:
        """Get period identifier string."""
        return self.period or "Unknown Period"


class ParseError(RecapGenerationError):
    """Raised when a filename does not follow the clip or recap naming convention."""

    def __init__(self, filename: str, reason: str = "does not match any naming pattern"):
        self.filename = filename
        self.reason = reason
        super().__init__(f"Cannot parse '{filename}': {reason}")


class StorageUnavailableError(RecapGenerationError):
    """Raised when the video storage directory cannot be read."""

    def __init__(self, directory: str, original_error: Optional[Exception] = None):
        self.directory = directory
        self.original_error = original_error
        message = f"Video storage unavailable: {directory}"
        if original_error:
            message += f" ({original_error})"
        super().__init__(message)


class OutputAlreadyExistsError(RecapGenerationError):
    """Raised when a recap output already occupies its canonical path."""

    def __init__(self, output_path: str, period: Optional[str] = None):
        self.output_path = output_path
        super().__init__(f"A recap file already exists at {output_path}", period)


class NoVideosForPeriodError(RecapGenerationError):
    """Raised when no clips were provided or found for a period."""

    def __init__(self, message: str = "No videos were found for the specified period",
                 period: Optional[str] = None):
        super().__init__(message, period)


class TooFewClipsError(NoVideosForPeriodError):
    """Raised when a period has clips, but fewer than the generation threshold."""

    def __init__(self, found: int, required: int, period: Optional[str] = None):
        self.found = found
        self.required = required
        super().__init__(f"Too few clips for recap: found {found}, need at least {required}", period)


class ComposeError(RecapGenerationError):
    """Base class for failures while composing or exporting a recap."""


class NoValidClipsComposedError(ComposeError):
    """Raised when every input clip was unreadable and nothing could be composed."""

    def __init__(self, skipped_clips: List[str], period: Optional[str] = None):
        self.skipped_clips = skipped_clips
        super().__init__(
            f"No valid video tracks found in the provided clips ({len(skipped_clips)} skipped)",
            period
        )


class VideoProcessingError(ComposeError):
    """Raised when video processing operations fail."""

    def __init__(self,
                 message: str,
                 operation: str = None,
                 ffmpeg_command: str = None,
                 return_code: int = None,
                 stderr_output: str = None,
                 period: Optional[str] = None):
        self.operation = operation
        self.ffmpeg_command = ffmpeg_command
        self.return_code = return_code
        self.stderr_output = stderr_output

        if operation:
            message = f"Video processing failed during {operation}: {message}"

        super().__init__(message, period)

    @property
    def is_ffmpeg_error(self) -> bool:
        """Check if this is an FFmpeg-related error."""
        return self.ffmpeg_command is not None

    @property
    def debug_info(self) -> Dict[str, Any]:
        """Get debug information for troubleshooting."""
        return {
            "operation": self.operation,
            "ffmpeg_command": self.ffmpeg_command,
            "return_code": self.return_code,
            "stderr_output": self.stderr_output,
            "period": self.period_identifier
        }


class RecapDeletionForbiddenError(RecapGenerationError):
    """Raised when something tries to delete a recap through the clip deletion path."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"Recap files cannot be deleted: {filename}")


class ConfigurationError(RecapGenerationError):
    """Raised when recap configuration is invalid."""

    def __init__(self,
                 message: str,
                 parameter_name: str = None,
                 parameter_value: Any = None,
                 valid_range: tuple = None):
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value
        self.valid_range = valid_range

        if parameter_name:
            message = f"Invalid configuration for '{parameter_name}': {message}"
        if parameter_value is not None:
            message += f" (value: {parameter_value})"
        if valid_range:
            message += f" (valid range: {valid_range[0]}-{valid_range[1]})"

        super().__init__(message)
