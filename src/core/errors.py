"""Core error taxonomy."""

from __future__ import annotations


class SpamScopeError(Exception):
    """Base class for errors raised by the scoring core."""


class StorageError(SpamScopeError):
    """The backing store could not be opened, queried, or written."""


class ScriptError(SpamScopeError):
    """A scoring script could not be read, parsed, run, or coerced to a score.

    Scorers log these and fall back to a zero score; they never reach callers
    of the orchestrator.
    """
