"""
Main entry point for the batch image converter.

Usage:
    python main.py <input-directory> [-o OUTPUT] [--workers N] [--timeout SECONDS]
                   [--report PATH] [--log-level LEVEL]
"""

import sys

from image_batch.app import main

if __name__ == "__main__":
    sys.exit(main())
