"""
This package contains the conversion pipeline of the batch image converter.

A pipeline orchestrates a whole run: it validates the input, resolves the
encoder, discovers files, dispatches the conversions and aggregates the report.
"""
