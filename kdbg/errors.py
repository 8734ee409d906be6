"""Exceptions raised by kdbg operations."""

from kdbg.types import PodTarget


class KdbgError(Exception):
    pass


class QueryError(KdbgError):
    """Listing pods through kubectl failed."""


class TransportError(QueryError):
    """kubectl could not be started or exited with a non-zero status."""

    def __init__(self, message: str, returncode: int | None = None):
        super().__init__(message)
        self.returncode = returncode


class DecodeError(QueryError):
    """kubectl output was not the expected JSON document."""


class ResolveError(KdbgError):
    pass


class PodNotFoundError(ResolveError):
    def __init__(self, pattern: str):
        super().__init__(f"No pods found matching '{pattern}'")
        self.pattern = pattern


class AmbiguousPodError(ResolveError):
    def __init__(self, pattern: str, candidates: list[PodTarget]):
        super().__init__(
            f"{len(candidates)} pods match '{pattern}'. Please be more specific."
        )
        self.pattern = pattern
        self.candidates = candidates


class ActionError(KdbgError):
    """The kubectl command run against a resolved pod failed."""
