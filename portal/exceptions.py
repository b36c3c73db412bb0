"""
Portal exceptions.
"""


class PortalError(Exception):
    """Base exception for portal service errors."""

    def __init__(self, message, user_friendly=False, original_error=None):
        self.message = message
        self.user_friendly = user_friendly
        self.original_error = original_error
        super().__init__(self.message)


class RecordShapeError(PortalError):
    """Raised when a stored document does not match its record type."""

    def __init__(self, collection, document_id, original_error=None):
        self.collection = collection
        self.document_id = document_id
        super().__init__(
            f"Malformed document {document_id!r} in {collection}",
            original_error=original_error,
        )


class InvalidTransitionError(PortalError):
    """Raised when a grade submission is moved to a status it cannot reach."""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot move grade submission from {current} to {target}",
            user_friendly=True,
        )


class StoreUnavailableError(PortalError):
    """Raised when the document store cannot be reached."""
    pass
