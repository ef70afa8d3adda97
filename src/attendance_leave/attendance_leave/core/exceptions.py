class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "domain_error"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    code = "authentication_error"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "authorization_error"


class NotFoundError(DomainError):
    code = "not_found"


class WorkflowError(DomainError):
    """Expected, user-facing workflow violation. Never retried."""

    code = "workflow_error"


class AlreadyCheckedIn(WorkflowError):
    code = "already_checked_in"


class NotCheckedIn(WorkflowError):
    code = "not_checked_in"


class AlreadyCheckedOut(WorkflowError):
    code = "already_checked_out"


class InvalidRange(WorkflowError):
    code = "invalid_range"


class NotPending(WorkflowError):
    code = "not_pending"


class OnApprovedLeave(WorkflowError):
    code = "on_approved_leave"


class StorageConflictError(DomainError):
    """A concurrent write won the race on (employee, day) or on a leave row."""

    code = "storage_conflict"


class TransientStorageError(DomainError):
    """Raised when a storage conflict persists after one re-read."""

    code = "transient_storage_error"
