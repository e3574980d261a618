"""Error taxonomy for lexis.

Data errors and programming errors are kept apart so that a broken session
flow shows up in tests instead of silently corrupting buffered state.
"""


class LexisError(Exception):
    """Base class for every error raised by lexis."""


class InvalidInputError(LexisError, ValueError):
    """A caller passed a value outside the accepted domain (quality, limit, batch size)."""


class SessionStateError(LexisError, RuntimeError):
    """A session operation was called in the wrong phase (e.g. record while idle)."""


class CommitError(LexisError):
    """The repository rejected a bulk write. The pending result can be retried as-is."""
