"""
This package contains the core domain models of the batch image converter.

The domain layer holds the values passed between the services and the
pipeline. It does not touch the file system or spawn processes.

Modules:
    exceptions.py: Custom exception types. Configuration errors abort a run,
                   conversion errors are scoped to a single file.
    models.py: The encoder choice, file records, conversion tasks and their
               outcomes, and the aggregated report of a run.
"""
