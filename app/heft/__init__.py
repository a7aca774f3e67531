"""heft - a disk space auditor for developers."""

__version__ = "0.4.0"
