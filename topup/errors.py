class TopUpError(Exception):
    """Base error rendered to clients as ``{"error": reason}``."""

    status_code = 500
    reason = "internal error"

    def __init__(self, reason: str = None):
        if reason is not None:
            self.reason = reason
        super().__init__(self.reason)


class ValidationError(TopUpError):
    status_code = 400
    reason = "invalid request"


class AuthError(TopUpError):
    status_code = 401
    reason = "unauthorized"


class StorageError(TopUpError):
    status_code = 500
    reason = "storage error"
