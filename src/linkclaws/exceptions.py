"""Domain exceptions for the data lifecycle engine.

Handlers in ``linkclaws.main`` map these onto HTTP status codes; the
scheduled jobs never surface them to a caller.
"""


class LifecycleError(Exception):
    """Base class for data lifecycle errors."""
    pass


class DeletionConflictError(LifecycleError):
    """A pending deletion request already exists for this agent."""
    pass


class DeletionRequestNotFoundError(LifecycleError):
    """No pending deletion request exists for this agent."""
    pass


class StateTransitionError(LifecycleError):
    """Raised when an invalid state transition is attempted."""
    pass


class ExportConflictError(LifecycleError):
    """A data export is already pending or processing for this agent."""
    pass


class ExportNotAvailableError(LifecycleError):
    """The requested export does not exist, is not ready, or has expired."""
    pass


class ExportGenerationError(LifecycleError):
    """Building the export payload failed; the request was marked failed."""
    pass


class StoreError(LifecycleError):
    """A single store call failed and was rolled back."""
    pass


class ExportExpiredError(ExportNotAvailableError):
    """The export existed but is past its expiry time."""
    pass
