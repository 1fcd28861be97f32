class StoreError(Exception):
    """Base error rendered to clients as ``{"error": message}``."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    status_code = 400


class AuthError(StoreError):
    status_code = 401


class NotFoundError(StoreError):
    status_code = 404


class ConflictError(StoreError):
    status_code = 409


class RemoteUnavailable(StoreError):
    """Network or backing-store failure. Only the contact form surfaces it."""

    status_code = 500


class ConfigurationError(StoreError):
    status_code = 500
