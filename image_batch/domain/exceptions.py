"""
Defines custom exception types for the batch image converter.

Two families exist. Configuration exceptions stop a run before any file is
converted. Conversion exceptions concern a single file: they are caught by the
conversion service and recorded as a failure for that file only.

All custom exceptions inherit from the base `ImageBatchException`.
"""


class ImageBatchException(Exception):
    """Base class for all custom exceptions in the batch image converter."""

    pass


# --- Configuration Exceptions (fatal for the run) ---
class ConfigurationException(ImageBatchException):
    """Base class for errors that abort a run before any conversion is attempted."""

    pass


class InputPathMissingException(ConfigurationException):
    """Raised when no input directory was given."""

    pass


class InputNotFoundException(ConfigurationException):
    """Raised when the input path does not exist."""

    pass


class InputNotDirectoryException(ConfigurationException):
    """Raised when the input path exists but is not a directory."""

    pass


class NoEncoderAvailableException(ConfigurationException):
    """
    Raised when none of the supported encoder backends is installed.

    The registry probes sips, ImageMagick and FFmpeg in that order. This
    exception means all three probes came back empty.
    """

    pass


class OutputDirectoryException(ConfigurationException):
    """Raised when the output directory cannot be created."""

    pass


# --- Conversion Exceptions (scoped to one file) ---
class ConversionException(ImageBatchException):
    """Base class for errors raised while converting a single file."""

    pass


class EncoderInvocationException(ConversionException):
    """
    Raised when the encoder process could not be started at all.

    Typical causes are an executable that was removed after the backend was
    resolved, or missing execute permissions.
    """

    pass


class EncoderTimeoutException(ConversionException):
    """Raised when the encoder process exceeded its time limit and was killed."""

    pass
