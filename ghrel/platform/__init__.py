"""Operating system boundary (child processes)."""

from .process import ProcessError, run

__all__ = ["ProcessError", "run"]
