"""
Services Package for the batch image converter.

Each service performs one stage of a conversion run. The pipeline calls them
in order:

- **Encoder Registry (`encoder_registry`):**
  Probes the host for sips, ImageMagick and FFmpeg, in that order, and returns
  the first one available.

- **File Walker (`file_walker`):**
  Lists every regular file under the input directory with an explicit stack,
  leaving out the output directory.

- **Extension Filter (`extension_filter`):**
  Keeps the files whose extension is a supported image format.

- **Conversion Service (`conversion_service`):**
  Maps each source file to its destination, runs the encoder and records the
  outcome, sequentially or with a bounded thread pool.

- **Report Service (`report_service`):**
  Aggregates outcomes into a `ConversionReport`, renders it for the terminal
  and optionally writes it as YAML.
"""
