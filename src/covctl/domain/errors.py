"""Error taxonomy for the coordination layer.

Persistence and selection failures propagate to the caller. Missing
collaborators and per-project query failures degrade gracefully.
"""

from __future__ import annotations


class CovctlError(Exception):
    """Base class for all covctl errors."""

    code = "COVCTL_ERROR"


class PersistenceError(CovctlError):
    """A settings write could not be made durable."""

    code = "PERSISTENCE_FAILED"

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Failed to persist setting {key!r}: {reason}")
        self.key = key
        self.reason = reason


class UnknownImplementationError(CovctlError):
    """A multiplexer was asked to select a name it does not know."""

    code = "UNKNOWN_RUNNER"

    def __init__(self, name: str | None, available: tuple[str, ...] = ()) -> None:
        if name is None:
            msg = "No implementation is active"
        else:
            msg = f"Unknown implementation: {name!r}"
        if available:
            msg += f" (available: {', '.join(available)})"
        super().__init__(msg)
        self.name = name
        self.available = available


class CollaboratorUnavailable(CovctlError):
    """A host or output-cleaner reference is absent (e.g. no solution loaded)."""

    code = "NO_SOLUTION"


class PerProjectQueryFailure(CovctlError):
    """An output query failed for a single project during a size refresh."""

    code = "PROJECT_QUERY_FAILED"

    def __init__(self, project: str, cause: BaseException) -> None:
        super().__init__(f"Output query failed for project {project!r}: {cause}")
        self.project = project
        self.cause = cause
