"""
Configuration Package for the batch image converter.

Static settings live here, separated from the application logic so they can be
adjusted without touching the conversion code.

This package includes settings for:
- Supported source image extensions and the target WebP extension.
- Encoder backends, their executables and their quality parameters.
- Common application settings such as the logging format, worker count,
  per-file timeout and the default output directory name.
- User-overridable values loaded from `config.user.yaml`.
"""
