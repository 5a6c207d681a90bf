"""
Service-level errors. Routes translate these into HTTP responses.
"""


class NotFoundError(LookupError):
    """The requested row does not exist (or is not visible to the demo org)."""


class ConflictError(Exception):
    """The operation is not allowed in the current state."""
