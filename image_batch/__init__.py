"""
Batch image converter.

Walks a directory tree, picks the best external encoder available on the host
(sips, ImageMagick or FFmpeg) and converts every supported image to WebP,
mirroring the source layout under an output directory.

Subpackages:
    config: Static settings and the optional `config.user.yaml` loader.
    domain: Data types and exceptions shared by the rest of the package.
    services: Encoder detection, directory walking, filtering, conversion and reporting.
    pipeline: The orchestration of a full conversion run.
    utils: Process execution and formatting helpers.
"""

__version__ = "0.1.0"
