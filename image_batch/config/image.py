"""
Configuration settings related to image conversion.

This module defines the recognized source extensions, the target format, and
the executables and quality parameters of every encoder backend.
"""

# ======================================================================================
# Image File Identification
# ======================================================================================

# Source extensions the converter recognizes, lowercase with the leading dot.
# Matching against this set is case-insensitive (see services.extension_filter).
SUPPORTED_EXTENSIONS = frozenset(
    {
        ".png",
        ".jpg",
        ".jpeg",
        ".webp",
        ".tif",
        ".tiff",
        ".bmp",
        ".gif",
        ".heic",
        ".heif",
        ".avif",
        ".jfif",
    }
)


# ======================================================================================
# Target Format
# ======================================================================================

TARGET_FORMAT = "webp"
TARGET_EXTENSION = f".{TARGET_FORMAT}"


# ======================================================================================
# Encoder Backends
# ======================================================================================

# Executable names, without the Windows '.exe' suffix.
SIPS_EXECUTABLE = "sips"
IMAGEMAGICK_EXECUTABLE = "magick"
# ImageMagick 6 ships `convert` instead of `magick`. Not tried on Windows,
# where `convert.exe` is the system's filesystem conversion tool.
IMAGEMAGICK_LEGACY_EXECUTABLE = "convert"
FFMPEG_EXECUTABLE = "ffmpeg"

# Arguments used to check that a backend can be spawned. Only the first line
# of the output is kept, for the debug log.
SIPS_VERSION_ARGS = ("--version",)
IMAGEMAGICK_VERSION_ARGS = ("-version",)
FFMPEG_VERSION_ARGS = ("-version",)

# Quality passed to ImageMagick (0-100).
IMAGEMAGICK_QUALITY = 90

# Quality passed to FFmpeg's libwebp encoder (0-100).
FFMPEG_QUALITY = 80

# Seconds allowed for a single version probe.
PROBE_TIMEOUT = 10.0
