"""Task execution timelines from profiler logs, with process-table and terminal helpers."""

__version__ = "0.1.0"