"""JSON HTTP API and SQLite storage for exercises, workout routines and summaries."""

__version__ = "0.1.0"