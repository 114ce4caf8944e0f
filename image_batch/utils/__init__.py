"""
Utilities Package for the batch image converter.

Helper modules that are not specific to any single stage of the pipeline.

Modules:
    - process_utils.py: Runs external commands and maps spawn failures and
      timeouts to the converter's exceptions.
    - format_utils.py: Formats durations and file sizes for logs and reports,
      and matches file extensions case-insensitively.
"""
