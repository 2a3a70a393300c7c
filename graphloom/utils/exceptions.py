"""
Custom exception hierarchy for GraphLoom.

All exceptions inherit from GraphLoomError so callers can catch
everything raised by the engine with a single clause.
"""


class GraphLoomError(Exception):
    """
    Base exception for all GraphLoom errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize GraphLoom error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ExtractionError(GraphLoomError):
    """
    Tool output could not be decoded into graph data.
    Raised internally by the extractor and absorbed at its boundary.
    """

    pass


class SnapshotIntegrityError(GraphLoomError):
    """
    A merged snapshot violates the link resolvability invariant.
    The snapshot is rejected and the previous one stays authoritative.
    """

    def __init__(
        self,
        message: str,
        dangling: list[tuple[str, str, str]] | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, context)
        self.dangling = dangling or []


class CacheError(GraphLoomError):
    """
    Snapshot cache errors.
    Raised for unknown keys or unsupported read strategies.
    """

    pass


class GraphSourceError(GraphLoomError):
    """
    Remote graph source errors.
    Raised when the transport to the graph-memory service fails.
    """

    pass


class ValidationError(GraphLoomError):
    """
    Validation errors.
    Raised when caller input is invalid.
    """

    pass


class NotFoundError(GraphLoomError):
    """
    Resource not found errors.
    Raised when a requested node or layer doesn't exist.
    """

    pass


class ConfigurationError(GraphLoomError):
    """
    Configuration errors.
    Raised when configuration is invalid or missing required values.
    """

    pass
